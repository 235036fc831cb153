#!/usr/bin/env python3
"""Deploy the staking contract over existing staking and reward tokens."""
from __future__ import annotations

import argparse
import os
from typing import Sequence

from dotenv import load_dotenv

from deploy_pipeline.cli import add_network_arguments, execute
from deploy_pipeline.config import NetworkConfig
from deploy_pipeline.ledger import LedgerClient, Web3LedgerClient
from deploy_pipeline.pipelines import staking_pipeline


def build_client(config: NetworkConfig) -> LedgerClient:
    return Web3LedgerClient.from_config(config)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--staking-token",
        default=os.getenv("STAKING_TOKEN_ADDR"),
        help="Address of the token users stake (defaults to STAKING_TOKEN_ADDR)",
    )
    parser.add_argument(
        "--reward-token",
        default=os.getenv("REWARD_TOKEN_ADDR"),
        help="Address of the token paid as rewards (defaults to REWARD_TOKEN_ADDR)",
    )
    parser.add_argument("--program", default="Staking", help="Artifact name of the staking contract")
    add_network_arguments(parser)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    load_dotenv()
    args = _build_parser().parse_args(argv)
    return execute(
        args,
        lambda: staking_pipeline(args.staking_token, args.reward_token, program=args.program),
        client_factory=build_client,
    )


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
