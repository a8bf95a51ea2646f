from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

import pytest

from onyx_api.client import Onyx
from onyx_api.constants import MARKET_TOKENS, UNDERLYINGS, Contract
from onyx_api.evm.transactions import TransactionHandle
from onyx_api.networks import NetworkProfile, NetworkRegistry
from onyx_api.types import CallContext, NetworkInfo, Receipt, Signature

SIGNER = "0x00000000000000000000000000000000000000aa"
ORACLE = "0x00000000000000000000000000000000000000bb"


def _address(index: int) -> str:
    return f"0x{index:040x}"


def _test_addresses() -> dict[str, str]:
    names = [
        *MARKET_TOKENS,
        *(symbol for symbol in UNDERLYINGS if symbol != "ETH"),
        *(contract.value for contract in Contract if contract is not Contract.XCN),
    ]
    return {name: _address(index) for index, name in enumerate(names, start=1)}


TEST_ADDRESSES = _test_addresses()


class RecordingTransport:
    """In-memory transport that records every contract interaction in order."""

    def __init__(
        self,
        *,
        chain_id: int = 1,
        name: str = "mainnet",
        reads: Mapping[str, Any] | None = None,
    ) -> None:
        self.chain_id = chain_id
        self.name = name
        self.reads: dict[str, Any] = {"oracle": ORACLE, **(reads or {})}
        self.calls: list[tuple[Any, ...]] = []
        self.network_calls = 0
        self.signed: list[dict[str, Any]] = []

    async def resolve_network(self) -> NetworkInfo:
        self.network_calls += 1
        return NetworkInfo(id=self.chain_id, name=self.name)

    async def signer_address(self) -> str:
        return SIGNER

    async def read(
        self, address: str, method: str, params: Sequence[Any], context: CallContext
    ) -> Any:
        self.calls.append(("read", address, method, list(params), context))
        value = self.reads.get(method, 0)
        return value(address, list(params)) if callable(value) else value

    async def write(
        self, address: str, method: str, params: Sequence[Any], context: CallContext
    ) -> TransactionHandle:
        self.calls.append(("write", address, method, list(params), context))
        tx_hash = f"0x{len(self.calls):064x}"
        return TransactionHandle(hash=tx_hash, address=address, method=method, _waiter=self._wait)

    async def get_balance(self, address: str) -> int:
        self.calls.append(("balance", address))
        return 10**18

    async def sign_typed_data(self, data: Mapping[str, Any]) -> Signature:
        self.signed.append(dict(data))
        self.calls.append(("sign", data["primaryType"]))
        return Signature(v="0x1c", r="0x" + "ab" * 32, s="0x" + "cd" * 32)

    async def _wait(self, tx_hash: str, confirmations: int) -> Receipt:
        self.calls.append(("wait", tx_hash, confirmations))
        return Receipt(transaction_hash=tx_hash, status=1)

    def sequence(self) -> list[tuple[str, str]]:
        """Return ``(kind, method)`` pairs for reads and writes."""
        return [(call[0], call[2]) for call in self.calls if call[0] in ("read", "write")]

    def writes(self) -> list[tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == "write"]


@pytest.fixture
def profile() -> NetworkProfile:
    return NetworkProfile(
        name="mainnet",
        chain_id=1,
        addresses=TEST_ADDRESSES,
    )


@pytest.fixture
def registry(profile: NetworkProfile) -> NetworkRegistry:
    return NetworkRegistry([profile])


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def client(transport: RecordingTransport, registry: NetworkRegistry) -> Onyx:
    return Onyx(transport=transport, registry=registry)
