"""Sequential orchestration of deployment steps."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .errors import DeploymentError, PipelineCancelled
from .ledger import LedgerClient
from .specs import ActionResult, DeployedUnit, DeploymentSpec, validate_order
from .step import execute_step

_LOGGER = logging.getLogger(__name__)


@dataclass
class PipelineRun:
    """Ordered specs plus everything produced while executing them.

    ``units`` preserves deployment order and is private to this run.
    """

    specs: Sequence[DeploymentSpec]
    units: Dict[str, DeployedUnit] = field(default_factory=dict)
    actions: List[ActionResult] = field(default_factory=list)
    deployer: Optional[str] = None
    error: Optional[DeploymentError] = None
    failed_step: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and len(self.units) == len(self.specs)

    @property
    def addresses(self) -> Mapping[str, str]:
        return MappingProxyType({key: unit.address for key, unit in self.units.items()})


def _signer_address(signer: Any) -> Optional[str]:
    address = getattr(signer, "address", signer)
    return str(address) if address is not None else None


def run_pipeline(specs: Sequence[DeploymentSpec], client: LedgerClient, *, validate: bool = True) -> PipelineRun:
    """Execute ``specs`` strictly in order against ``client``.

    The first :class:`DeploymentError` stops the run; it is recorded on the
    returned :class:`PipelineRun` together with the units deployed before it.
    Nothing is retried or rolled back.
    """

    run = PipelineRun(specs=list(specs))
    current: Optional[str] = None
    try:
        if validate:
            validate_order(run.specs)
        run.deployer = _signer_address(client.resolve_signer())
        _LOGGER.info("Deploying contracts with the account: %s", run.deployer)

        def record(unit: DeployedUnit) -> None:
            # published before its actions run so a failing action keeps it
            run.units[spec.key] = unit

        for spec in run.specs:
            current = spec.key
            outcome = execute_step(spec, client, run.addresses, on_deployed=record)
            run.actions.extend(outcome.actions)
    except DeploymentError as exc:
        run.error = exc
        run.failed_step = current
        _LOGGER.error("Pipeline stopped at %s: %s", current or "setup", exc)
    except KeyboardInterrupt:
        run.error = PipelineCancelled(
            f"Interrupted during {current or 'setup'}; broadcast transactions are not retracted"
        )
        run.failed_step = current
        _LOGGER.warning("Pipeline cancelled at %s", current or "setup")
    return run


__all__ = ["PipelineRun", "run_pipeline"]
