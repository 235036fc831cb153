"""Ledger client capability and its ``web3`` implementation."""
from __future__ import annotations

import json
import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Protocol, Sequence, Tuple

import requests
from eth_account import Account
from web3 import Web3
from web3.exceptions import TimeExhausted, Web3Exception

from .config import NetworkConfig
from .errors import (
    ArtifactNotFound,
    ConfirmationTimeout,
    DeploymentRejected,
    NetworkUnavailable,
    NoSignerAvailable,
    TransactionReverted,
)
from .specs import Receipt

_LOGGER = logging.getLogger(__name__)


class LedgerClient(Protocol):
    """What the pipeline needs from a blockchain node.

    ``deploy`` blocks until the creation transaction is confirmed; ``invoke``
    only submits and leaves confirmation to :meth:`await_confirmation`.
    """

    def resolve_signer(self) -> Any:
        ...

    def deploy(self, program_id: str, args: Sequence[Any]) -> Tuple[str, str, Any]:
        ...

    def invoke(self, address: str, method: str, args: Sequence[Any]) -> str:
        ...

    def await_confirmation(self, tx_hash: str) -> Receipt:
        ...


@dataclass(frozen=True)
class Artifact:
    """Compiled program: ABI plus creation bytecode."""

    name: str
    abi: List[Dict[str, Any]]
    bytecode: str


class ArtifactStore:
    """Locate compiled artifacts below ``root``.

    Both the Hardhat layout (``artifacts/contracts/Foo.sol/Foo.json``) and a
    plain ``Foo.abi.json`` + ``Foo.bin`` pair are understood.
    """

    def __init__(self, root: Path | str) -> None:
        self.root = Path(root)
        self._cache: Dict[str, Artifact] = {}

    def load(self, program_id: str) -> Artifact:
        cached = self._cache.get(program_id)
        if cached is not None:
            return cached

        artifact = self._load_hardhat(program_id) or self._load_abi_bin(program_id)
        if artifact is None:
            raise ArtifactNotFound(f"No compiled artifact for '{program_id}' under {self.root}")
        if artifact.bytecode in ("", "0x"):
            raise DeploymentRejected(f"'{program_id}' has no creation bytecode (abstract contract or interface?)")
        self._cache[program_id] = artifact
        return artifact

    def _load_hardhat(self, program_id: str) -> Optional[Artifact]:
        if not self.root.is_dir():
            return None
        matches = sorted(self.root.rglob(f"{program_id}.json"))
        if not matches:
            return None
        if len(matches) > 1:
            _LOGGER.warning("Several artifacts named %s, using %s", program_id, matches[0])
        try:
            payload = json.loads(matches[0].read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise DeploymentRejected(f"Malformed artifact {matches[0]}") from exc
        if not isinstance(payload, Mapping) or "abi" not in payload:
            raise DeploymentRejected(f"Artifact {matches[0]} has no ABI")
        return Artifact(program_id, list(payload["abi"]), str(payload.get("bytecode", "")))

    def _load_abi_bin(self, program_id: str) -> Optional[Artifact]:
        abi_path = self.root / f"{program_id}.abi.json"
        bin_path = self.root / f"{program_id}.bin"
        if not (abi_path.is_file() and bin_path.is_file()):
            return None
        try:
            abi = json.loads(abi_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise DeploymentRejected(f"Malformed ABI file {abi_path}") from exc
        bytecode = bin_path.read_text(encoding="utf-8").strip()
        if bytecode and not bytecode.startswith("0x"):
            bytecode = "0x" + bytecode
        return Artifact(program_id, list(abi), bytecode)


@contextmanager
def _rpc_errors(action: str) -> Iterator[None]:
    """Translate node and transport failures into the deployment taxonomy."""

    try:
        yield
    except (requests.exceptions.ConnectionError, requests.exceptions.Timeout) as exc:
        raise NetworkUnavailable(f"{action}: endpoint unreachable ({exc})") from exc
    except (Web3Exception, ValueError) as exc:
        raise DeploymentRejected(f"{action}: {exc}") from exc


def _receipt_from(tx_hash: str, raw: Mapping[str, Any]) -> Receipt:
    contract_address = raw.get("contractAddress")
    return Receipt(
        tx_hash=tx_hash,
        status=int(raw.get("status", 0)),
        block_number=int(raw.get("blockNumber", 0)),
        contract_address=str(contract_address) if contract_address else None,
        gas_used=raw.get("gasUsed"),
    )


class Web3LedgerClient:
    """Sign locally with an ``eth_account`` key and submit through ``web3``."""

    def __init__(
        self,
        w3: Web3,
        config: NetworkConfig,
        *,
        account: Any = None,
        artifacts: Optional[ArtifactStore] = None,
    ) -> None:
        self.w3 = w3
        self.config = config
        self.artifacts = artifacts or ArtifactStore(config.artifacts_dir)
        self._account = account
        self._chain_id = config.chain_id
        self._contracts: Dict[str, Any] = {}

    @classmethod
    def from_config(cls, config: NetworkConfig) -> "Web3LedgerClient":
        provider = Web3.HTTPProvider(config.rpc_url, request_kwargs={"timeout": 30})
        return cls(Web3(provider), config)

    def resolve_signer(self) -> Any:
        if self._account is None:
            try:
                account = Account.from_key(self.config.private_key)
            except (ValueError, TypeError) as exc:
                raise NoSignerAvailable("PRIVATE_KEY is not a valid secp256k1 key") from exc
            with _rpc_errors("connect"):
                connected = self.w3.is_connected()
            if not connected:
                raise NetworkUnavailable(f"Cannot reach {self.config.rpc_url}")
            self._account = account
        return self._account

    @property
    def chain_id(self) -> int:
        if self._chain_id is None:
            with _rpc_errors("chain id"):
                self._chain_id = int(self.w3.eth.chain_id)
        return self._chain_id

    def _tx_params(self, sender: str) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "from": sender,
            "nonce": self.w3.eth.get_transaction_count(sender, "pending"),
            "chainId": self.chain_id,
        }
        if self.config.gas_price_gwei is not None:
            params["gasPrice"] = Web3.to_wei(self.config.gas_price_gwei, "gwei")
        return params

    def _sign_and_send(self, account: Any, txn: Mapping[str, Any]) -> str:
        signed = account.sign_transaction(txn)
        return Web3.to_hex(self.w3.eth.send_raw_transaction(signed.raw_transaction))

    def deploy(self, program_id: str, args: Sequence[Any]) -> Tuple[str, str, Any]:
        artifact = self.artifacts.load(program_id)
        account = self.resolve_signer()
        factory = self.w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)

        with _rpc_errors(f"deploy {program_id}"):
            txn = factory.constructor(*args).build_transaction(self._tx_params(account.address))
            tx_hash = self._sign_and_send(account, txn)
        _LOGGER.debug("Creation transaction for %s sent: %s", program_id, tx_hash)

        receipt = self.await_confirmation(tx_hash)
        if not receipt.contract_address:
            raise DeploymentRejected(f"Receipt for {tx_hash} carries no contract address")

        handle = self.w3.eth.contract(address=receipt.contract_address, abi=artifact.abi)
        self._contracts[receipt.contract_address.lower()] = handle
        return receipt.contract_address, tx_hash, handle

    def invoke(self, address: str, method: str, args: Sequence[Any]) -> str:
        contract = self._contracts.get(address.lower())
        if contract is None:
            raise DeploymentRejected(f"No ABI known for {address}; it was not deployed by this client")
        try:
            function = getattr(contract.functions, method)
        except AttributeError as exc:
            raise DeploymentRejected(f"{address} has no method '{method}'") from exc

        account = self.resolve_signer()
        with _rpc_errors(f"{method} on {address}"):
            txn = function(*args).build_transaction(self._tx_params(account.address))
            return self._sign_and_send(account, txn)

    def await_confirmation(self, tx_hash: str) -> Receipt:
        timeout = self.config.confirmation_timeout
        deadline = time.monotonic() + timeout
        with _rpc_errors(f"receipt {tx_hash}"):
            try:
                raw = self.w3.eth.wait_for_transaction_receipt(
                    tx_hash, timeout=timeout, poll_latency=self.config.poll_latency
                )
            except TimeExhausted as exc:
                raise ConfirmationTimeout(tx_hash, timeout) from exc

        receipt = _receipt_from(tx_hash, raw)
        if not receipt.succeeded:
            raise TransactionReverted(tx_hash)

        while self.config.confirmations > 1:
            with _rpc_errors("block number"):
                depth = int(self.w3.eth.block_number) - receipt.block_number + 1
            if depth >= self.config.confirmations:
                break
            if time.monotonic() >= deadline:
                raise ConfirmationTimeout(tx_hash, timeout)
            time.sleep(self.config.poll_latency)
        return receipt


__all__ = ["Artifact", "ArtifactStore", "LedgerClient", "Web3LedgerClient"]
