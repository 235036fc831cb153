#!/usr/bin/env python3
"""Deploy the ERC20 token and its minter, then grant MINTER_ROLE to the minter."""
from __future__ import annotations

import argparse
from typing import Sequence

from deploy_pipeline.cli import add_network_arguments, execute
from deploy_pipeline.config import NetworkConfig
from deploy_pipeline.ledger import LedgerClient, Web3LedgerClient
from deploy_pipeline.pipelines import token_minter_pipeline


def build_client(config: NetworkConfig) -> LedgerClient:
    return Web3LedgerClient.from_config(config)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--token", default="MyToken", help="Artifact name of the token contract")
    parser.add_argument("--minter", default="TokenMinter", help="Artifact name of the minter contract")
    add_network_arguments(parser)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    return execute(
        args,
        lambda: token_minter_pipeline(token=args.token, minter=args.minter),
        client_factory=build_client,
    )


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
