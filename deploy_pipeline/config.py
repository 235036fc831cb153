"""Network and signer configuration resolved from the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Mapping, Optional, TypeVar

from dotenv import load_dotenv

from .errors import NetworkUnavailable, NoSignerAvailable

T = TypeVar("T")

DEFAULT_CONFIRMATIONS = 1
DEFAULT_CONFIRMATION_TIMEOUT = 120.0
DEFAULT_POLL_LATENCY = 0.5
DEFAULT_ARTIFACTS_DIR = Path("artifacts")


@dataclass(frozen=True)
class NetworkConfig:
    """Everything a ledger client needs to talk to one network."""

    rpc_url: str
    private_key: str = field(repr=False)
    chain_id: Optional[int] = None
    confirmations: int = DEFAULT_CONFIRMATIONS
    confirmation_timeout: float = DEFAULT_CONFIRMATION_TIMEOUT
    poll_latency: float = DEFAULT_POLL_LATENCY
    gas_price_gwei: Optional[float] = None
    artifacts_dir: Path = DEFAULT_ARTIFACTS_DIR

    def __post_init__(self) -> None:
        if self.confirmations < 1:
            raise ValueError("confirmations must be at least 1")
        if self.confirmation_timeout <= 0:
            raise ValueError("confirmation timeout must be positive")


def _get_env() -> Mapping[str, str]:
    """Expose ``os.environ`` after ``.env`` loading to simplify testing."""

    load_dotenv()
    return os.environ


def _parse(env: Mapping[str, str], key: str, convert: Callable[[str], T], default: T) -> T:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return convert(raw.strip())
    except ValueError as exc:
        raise ValueError(f"Invalid value for {key}: {raw!r}") from exc


def load_network_config(env: Optional[Mapping[str, str]] = None, **overrides: object) -> NetworkConfig:
    """Build a :class:`NetworkConfig` from ``env``.

    Parameters
    ----------
    env:
        Mapping used to resolve variables. When omitted ``os.environ`` (after
        ``load_dotenv``) is used.
    overrides:
        Field values that take precedence over the environment, typically
        command line flags. ``None`` values are ignored.

    Raises
    ------
    NetworkUnavailable
        If no RPC endpoint is configured.
    NoSignerAvailable
        If no private key is configured.
    """

    if env is None:
        env = _get_env()

    values = {
        "rpc_url": env.get("RPC_URL", "").strip(),
        "private_key": env.get("PRIVATE_KEY", "").strip(),
        "chain_id": _parse(env, "CHAIN_ID", int, None),
        "confirmations": _parse(env, "CONFIRMATIONS", int, DEFAULT_CONFIRMATIONS),
        "confirmation_timeout": _parse(env, "CONFIRMATION_TIMEOUT", float, DEFAULT_CONFIRMATION_TIMEOUT),
        "poll_latency": _parse(env, "POLL_LATENCY", float, DEFAULT_POLL_LATENCY),
        "gas_price_gwei": _parse(env, "GAS_PRICE_GWEI", float, None),
        "artifacts_dir": _parse(env, "ARTIFACTS_DIR", Path, DEFAULT_ARTIFACTS_DIR),
    }
    values.update({key: value for key, value in overrides.items() if value is not None})

    if not values["rpc_url"]:
        raise NetworkUnavailable("Set RPC_URL before deploying.")
    if not values["private_key"]:
        raise NoSignerAvailable("Set PRIVATE_KEY before deploying.")
    values["artifacts_dir"] = Path(values["artifacts_dir"])  # type: ignore[arg-type]
    return NetworkConfig(**values)  # type: ignore[arg-type]


__all__ = ["NetworkConfig", "load_network_config"]
