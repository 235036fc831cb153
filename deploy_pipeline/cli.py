"""Shared command line plumbing for the deployment scripts."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Callable, List, Optional

from .config import load_network_config
from .errors import DeploymentError
from .ledger import LedgerClient, Web3LedgerClient
from .pipeline import run_pipeline
from .report import report, summarise
from .specs import DeploymentSpec

ClientFactory = Callable[..., LedgerClient]


def add_network_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--rpc-url", default=None, help="RPC endpoint (defaults to RPC_URL)")
    parser.add_argument(
        "--artifacts-dir",
        type=Path,
        default=None,
        help="Directory holding compiled artifacts (defaults to ARTIFACTS_DIR or ./artifacts)",
    )
    parser.add_argument("--confirmations", type=int, default=None, help="Blocks to wait for per transaction")
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for each confirmation before giving up",
    )
    parser.add_argument("--json", action="store_true", help="Emit the run summary as JSON")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging verbosity (DEBUG, INFO, WARNING)",
    )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(message)s",
    )


def execute(
    args: argparse.Namespace,
    build_specs: Callable[[], List[DeploymentSpec]],
    client_factory: Optional[ClientFactory] = None,
) -> int:
    """Resolve configuration, run the pipeline and translate it into an exit code."""

    configure_logging(args.log_level)
    try:
        specs = build_specs()
        config = load_network_config(
            rpc_url=args.rpc_url,
            artifacts_dir=args.artifacts_dir,
            confirmations=args.confirmations,
            confirmation_timeout=args.timeout,
        )
    except (DeploymentError, ValueError) as exc:
        kind = getattr(exc, "kind", type(exc).__name__)
        print(f"{kind}: {exc}", file=sys.stderr)
        return 1

    client = (client_factory or Web3LedgerClient.from_config)(config)
    run = run_pipeline(specs, client)

    if not args.json:
        return report(run)

    json.dump(summarise(run), sys.stdout, indent=2)
    sys.stdout.write("\n")
    if run.error is not None:
        print(f"{run.error.kind}: {run.error}", file=sys.stderr)
        return 1
    return 0


__all__ = ["add_network_arguments", "configure_logging", "execute"]
