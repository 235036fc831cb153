"""Shared fixtures: an in-memory ledger client that records every call."""
from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import pytest

from deploy_pipeline.specs import Receipt


class FakeLedger:
    """Deterministic stand-in for a node.

    ``addresses`` feeds the contract addresses handed out by ``deploy``; when
    exhausted or omitted, sequential addresses are generated. ``failures``
    maps a program id, method name or tx hash to the exception to raise.
    """

    def __init__(
        self,
        addresses: Optional[Iterable[str]] = None,
        failures: Optional[Dict[str, BaseException]] = None,
        signer: Any = "0x00000000000000000000000000000000000000d3",
    ) -> None:
        self._addresses = list(addresses or [])
        self.failures = dict(failures or {})
        self.signer = signer
        self.calls: List[Tuple[Any, ...]] = []
        self._nonce = 0

    def _next_hash(self, prefix: str) -> str:
        self._nonce += 1
        return f"0x{prefix}{self._nonce:04d}"

    def resolve_signer(self) -> Any:
        self.calls.append(("signer",))
        if isinstance(self.signer, BaseException):
            raise self.signer
        return SimpleNamespace(address=self.signer)

    def deploy(self, program_id: str, args: Sequence[Any]) -> Tuple[str, str, Any]:
        self.calls.append(("deploy", program_id, list(args)))
        if program_id in self.failures:
            raise self.failures[program_id]
        tx_hash = self._next_hash("d")
        if self._addresses:
            address = self._addresses.pop(0)
        else:
            address = "0x" + f"{self._nonce:040x}"
        return address, tx_hash, SimpleNamespace(address=address)

    def invoke(self, address: str, method: str, args: Sequence[Any]) -> str:
        self.calls.append(("invoke", address, method, list(args)))
        if method in self.failures:
            raise self.failures[method]
        return self._next_hash("c")

    def await_confirmation(self, tx_hash: str) -> Receipt:
        self.calls.append(("confirm", tx_hash))
        if tx_hash in self.failures:
            raise self.failures[tx_hash]
        return Receipt(tx_hash=tx_hash, status=1, block_number=100 + self._nonce)

    def calls_named(self, name: str) -> List[Tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == name]


@pytest.fixture()
def ledger_factory():
    return FakeLedger


@pytest.fixture()
def ledger() -> FakeLedger:
    return FakeLedger()
