"""Execution of a single deployment step."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Mapping, Optional, Sequence

from .errors import UnresolvedDependency
from .ledger import LedgerClient
from .specs import ActionResult, DeployedUnit, DeploymentSpec, Ref

_LOGGER = logging.getLogger(__name__)


@dataclass
class StepOutcome:
    unit: DeployedUnit
    actions: List[ActionResult] = field(default_factory=list)


def _resolve(value: Any, addresses: Mapping[str, str], step: Optional[str]) -> Any:
    if isinstance(value, Ref):
        try:
            return addresses[value.program_id]
        except KeyError:
            raise UnresolvedDependency(value.program_id, step) from None
    if isinstance(value, list):
        return [_resolve(item, addresses, step) for item in value]
    if isinstance(value, tuple):
        return tuple(_resolve(item, addresses, step) for item in value)
    return value


def resolve_args(args: Sequence[Any], addresses: Mapping[str, str], step: Optional[str] = None) -> List[Any]:
    """Replace every :class:`Ref` in ``args`` with the address it names.

    Literals pass through unchanged; references may be nested in lists for
    array parameters.
    """

    return [_resolve(value, addresses, step) for value in args]


def execute_step(
    spec: DeploymentSpec,
    client: LedgerClient,
    addresses: Mapping[str, str],
    on_deployed: Optional[Callable[[DeployedUnit], None]] = None,
) -> StepOutcome:
    """Deploy ``spec`` and run its post-deploy actions in declared order.

    ``on_deployed`` is called with the unit as soon as it exists on-chain, so
    callers keep it even when a later action fails.
    """

    constructor_args = resolve_args(spec.args, addresses, spec.key)
    _LOGGER.info("Deploying %s", spec.key)
    address, tx_hash, handle = client.deploy(spec.program_id, constructor_args)
    outcome = StepOutcome(DeployedUnit(spec.program_id, address, tx_hash, handle))
    _LOGGER.info("%s deployed to %s (tx %s)", spec.key, address, tx_hash)
    if on_deployed is not None:
        on_deployed(outcome.unit)

    # a unit's own actions may target it or pass its address along
    visible = dict(addresses)
    visible[spec.key] = address
    for action in spec.actions:
        target = _resolve(Ref(action.target), visible, spec.key)
        call_args = resolve_args(action.args, visible, spec.key)
        _LOGGER.info("Calling %s on %s (%s)", action.method, action.target, target)
        action_hash = client.invoke(target, action.method, call_args)
        receipt = client.await_confirmation(action_hash)
        outcome.actions.append(
            ActionResult(
                program_id=action.target,
                method=action.method,
                tx_hash=receipt.tx_hash,
                confirmed=receipt.succeeded,
                block_number=receipt.block_number,
            )
        )
    return outcome


__all__ = ["StepOutcome", "execute_step", "resolve_args"]
