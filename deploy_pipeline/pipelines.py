"""The deployment pipelines shipped with the project."""
from __future__ import annotations

from typing import Callable, Dict, List, Optional

from web3 import Web3

from .specs import DeploymentSpec, PostDeployAction, Ref, role_id

MINTER_ROLE = "MINTER_ROLE"


def token_minter_pipeline(token: str = "MyToken", minter: str = "TokenMinter") -> List[DeploymentSpec]:
    """ERC20 token, a minter bound to it, then ``MINTER_ROLE`` granted to the minter."""

    return [
        DeploymentSpec(token),
        DeploymentSpec(
            minter,
            args=(Ref(token),),
            actions=(PostDeployAction(token, "grantRole", (role_id(MINTER_ROLE), Ref(minter))),),
        ),
    ]


def _require_address(name: str, value: Optional[str]) -> str:
    if not value:
        raise ValueError(f"{name} is required (set it in the environment or pass it explicitly)")
    if not Web3.is_address(value):
        raise ValueError(f"{name} is not a valid address: {value!r}")
    return Web3.to_checksum_address(value)


def staking_pipeline(
    staking_token: Optional[str],
    reward_token: Optional[str],
    program: str = "Staking",
) -> List[DeploymentSpec]:
    """Single staking contract over two pre-existing token addresses."""

    return [
        DeploymentSpec(
            program,
            args=(
                _require_address("STAKING_TOKEN_ADDR", staking_token),
                _require_address("REWARD_TOKEN_ADDR", reward_token),
            ),
        )
    ]


PIPELINES: Dict[str, Callable[..., List[DeploymentSpec]]] = {
    "token": token_minter_pipeline,
    "staking": staking_pipeline,
}

__all__ = ["MINTER_ROLE", "PIPELINES", "staking_pipeline", "token_minter_pipeline"]
