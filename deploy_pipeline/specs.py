"""Declarative description of a deployment pipeline and the values it produces."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Optional, Sequence, Tuple

from eth_utils import keccak

from .errors import UnresolvedDependency


@dataclass(frozen=True)
class Ref:
    """Constructor or call parameter standing for the address of an earlier unit."""

    program_id: str

    def __repr__(self) -> str:
        return f"Ref({self.program_id!r})"


def role_id(name: str) -> bytes:
    """Return the ``AccessControl`` identifier for ``name``.

    OpenZeppelin derives role constants such as ``MINTER_ROLE`` as
    ``keccak256("MINTER_ROLE")``; computing it locally saves a view call.
    """

    return keccak(text=name)


@dataclass(frozen=True)
class PostDeployAction:
    """A state-changing method call issued once its step's unit is deployed."""

    target: str
    method: str
    args: Tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(self.args))


@dataclass(frozen=True)
class DeploymentSpec:
    program_id: str
    args: Tuple[Any, ...] = ()
    actions: Tuple[PostDeployAction, ...] = ()
    label: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "args", tuple(self.args))
        object.__setattr__(self, "actions", tuple(self.actions))

    @property
    def key(self) -> str:
        """Name under which the deployed unit is published to later steps."""

        return self.label or self.program_id


@dataclass(frozen=True)
class Receipt:
    tx_hash: str
    status: int
    block_number: int
    contract_address: Optional[str] = None
    gas_used: Optional[int] = None

    @property
    def succeeded(self) -> bool:
        return self.status == 1


@dataclass(frozen=True)
class DeployedUnit:
    program_id: str
    address: str
    tx_hash: str
    handle: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class ActionResult:
    program_id: str
    method: str
    tx_hash: str
    confirmed: bool
    block_number: Optional[int] = None


def _refs_in(values: Iterable[Any]) -> Iterator[Ref]:
    for value in values:
        if isinstance(value, Ref):
            yield value
        elif isinstance(value, (list, tuple)):
            yield from _refs_in(value)


def references(spec: DeploymentSpec) -> Iterator[Ref]:
    """Yield every reference a spec makes, constructor arguments first."""

    yield from _refs_in(spec.args)
    for action in spec.actions:
        yield Ref(action.target)
        yield from _refs_in(action.args)


def validate_order(specs: Sequence[DeploymentSpec]) -> None:
    """Check that every reference points at a strictly earlier step.

    Post-deploy actions run after their own unit exists, so they may also
    reference the step that declares them. No network access is performed.

    Raises:
        ValueError: If two specs publish the same key.
        UnresolvedDependency: For the first forward or missing reference.
    """

    seen: set[str] = set()
    for spec in specs:
        if spec.key in seen:
            raise ValueError(f"Duplicate deployment key '{spec.key}'")
        for ref in _refs_in(spec.args):
            if ref.program_id not in seen:
                raise UnresolvedDependency(ref.program_id, spec.key)
        seen.add(spec.key)
        for ref in references(spec):
            if ref.program_id not in seen:
                raise UnresolvedDependency(ref.program_id, spec.key)


__all__ = [
    "ActionResult",
    "DeployedUnit",
    "DeploymentSpec",
    "PostDeployAction",
    "Receipt",
    "Ref",
    "references",
    "role_id",
    "validate_order",
]
