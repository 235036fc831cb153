"""Sequential, dependency-aware contract deployment."""
from __future__ import annotations

from .config import NetworkConfig, load_network_config
from .errors import (
    ArtifactNotFound,
    ConfirmationTimeout,
    DeploymentError,
    DeploymentRejected,
    NetworkUnavailable,
    NoSignerAvailable,
    PipelineCancelled,
    TransactionReverted,
    UnresolvedDependency,
)
from .ledger import ArtifactStore, LedgerClient, Web3LedgerClient
from .pipeline import PipelineRun, run_pipeline
from .pipelines import staking_pipeline, token_minter_pipeline
from .report import report, summarise
from .specs import ActionResult, DeployedUnit, DeploymentSpec, PostDeployAction, Receipt, Ref, role_id, validate_order

__all__ = [
    "ActionResult",
    "ArtifactNotFound",
    "ArtifactStore",
    "ConfirmationTimeout",
    "DeployedUnit",
    "DeploymentError",
    "DeploymentRejected",
    "DeploymentSpec",
    "LedgerClient",
    "NetworkConfig",
    "NetworkUnavailable",
    "NoSignerAvailable",
    "PipelineCancelled",
    "PipelineRun",
    "PostDeployAction",
    "Receipt",
    "Ref",
    "TransactionReverted",
    "UnresolvedDependency",
    "Web3LedgerClient",
    "load_network_config",
    "report",
    "role_id",
    "run_pipeline",
    "staking_pipeline",
    "summarise",
    "token_minter_pipeline",
    "validate_order",
]
