"""Console reporting of a finished pipeline run."""
from __future__ import annotations

import sys
from typing import Any, Dict, TextIO

from web3 import Web3

from .pipeline import PipelineRun


def _hex(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return Web3.to_hex(value)
    return value


def summarise(run: PipelineRun) -> Dict[str, Any]:
    """Serialise ``run`` to a JSON-friendly dictionary."""

    return {
        "deployer": run.deployer,
        "succeeded": run.succeeded,
        "units": [
            {"key": key, "program": unit.program_id, "address": unit.address, "tx_hash": _hex(unit.tx_hash)}
            for key, unit in run.units.items()
        ],
        "actions": [
            {
                "program": action.program_id,
                "method": action.method,
                "tx_hash": _hex(action.tx_hash),
                "confirmed": action.confirmed,
                "block_number": action.block_number,
            }
            for action in run.actions
        ],
        "error": None
        if run.error is None
        else {"kind": run.error.kind, "message": str(run.error), "step": run.failed_step},
    }


def report(run: PipelineRun, out: TextIO | None = None, err: TextIO | None = None) -> int:
    """Print one line per deployed unit and action; return the exit status.

    Units deployed before a failure are still listed so they can be recovered
    by hand. The error, if any, goes to ``err``.
    """

    out = out or sys.stdout
    err = err or sys.stderr

    for key, unit in run.units.items():
        print(f"{key} deployed to: {unit.address}", file=out)
    for action in run.actions:
        print(f"{action.method} on {action.program_id} confirmed: {_hex(action.tx_hash)}", file=out)

    if run.error is not None:
        print(f"{run.error.kind}: {run.error}", file=err)
        return 1
    return 0


__all__ = ["report", "summarise"]
