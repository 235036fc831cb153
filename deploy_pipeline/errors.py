"""Failure taxonomy shared by the ledger client, the steps and the orchestrator."""
from __future__ import annotations

from typing import Optional


class DeploymentError(RuntimeError):
    """Base class for every failure that aborts a pipeline run."""

    @property
    def kind(self) -> str:
        return type(self).__name__


class NoSignerAvailable(DeploymentError):
    """Raised when no usable signing account is configured."""


class UnresolvedDependency(DeploymentError):
    """Raised when a step references a unit that has not been deployed yet."""

    def __init__(self, program_id: str, step: Optional[str] = None) -> None:
        self.program_id = program_id
        self.step = step
        if step is None:
            message = f"'{program_id}' has not been deployed"
        else:
            message = f"'{step}' references '{program_id}' before it is deployed"
        super().__init__(message)


class DeploymentRejected(DeploymentError):
    """Raised when the node refuses a creation or call transaction."""


class ArtifactNotFound(DeploymentRejected):
    """Raised when no compiled artifact exists for a program id."""


class NetworkUnavailable(DeploymentError):
    """Raised when the RPC endpoint cannot be reached."""


class TransactionReverted(DeploymentError):
    """Raised when a transaction was mined but its execution failed."""

    def __init__(self, tx_hash: str, message: Optional[str] = None) -> None:
        self.tx_hash = tx_hash
        super().__init__(message or f"Transaction {tx_hash} reverted")


class ConfirmationTimeout(DeploymentError):
    """Raised when a transaction is not confirmed within the configured bound."""

    def __init__(self, tx_hash: str, timeout: float) -> None:
        self.tx_hash = tx_hash
        self.timeout = timeout
        super().__init__(f"Transaction {tx_hash} not confirmed after {timeout:g}s")


class PipelineCancelled(DeploymentError):
    """Raised when a run is interrupted while waiting on the network.

    Transactions that were already broadcast are not retracted.
    """


__all__ = [
    "ArtifactNotFound",
    "ConfirmationTimeout",
    "DeploymentError",
    "DeploymentRejected",
    "NetworkUnavailable",
    "NoSignerAvailable",
    "PipelineCancelled",
    "TransactionReverted",
    "UnresolvedDependency",
]
