from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Any, cast

import pytest
from eth_account import Account
from eth_account.messages import encode_typed_data
from hexbytes import HexBytes
from web3 import AsyncWeb3

from onyx_api.abi import ERC20
from onyx_api.evm.connections import Web3Connections
from onyx_api.evm.transactions import Web3Transport
from onyx_api.exceptions import InvalidArgument, TransactionFailed
from onyx_api.governance import DELEGATION_TYPE, build_typed_data
from onyx_api.networks import NetworkProfile
from onyx_api.types import CallContext

PRIVATE_KEY = "0x" + "11" * 32
TX_HASH = "0x" + "ab" * 32
SPENDER = "0x" + "cd" * 20


def _transport(
    *, account: Any = None, eth: Any = None, provider: Any = None
) -> Web3Transport:
    async def signer_address() -> str:
        return SPENDER

    connections = SimpleNamespace(
        account=account,
        web3=SimpleNamespace(eth=eth, provider=provider),
        signer_address=signer_address,
    )
    return Web3Transport(
        cast(Web3Connections, connections), receipt_timeout=5.0, poll_interval=0.01
    )


def _eth_with_receipt(receipt: dict[str, Any]) -> SimpleNamespace:
    async def wait_for_transaction_receipt(tx_hash: Any, timeout: float, poll_latency: float):
        assert HexBytes(tx_hash).to_0x_hex() == TX_HASH
        return receipt

    return SimpleNamespace(wait_for_transaction_receipt=wait_for_transaction_receipt)


def test_wait_returns_receipt_for_success() -> None:
    eth = _eth_with_receipt({"status": 1, "blockNumber": 10, "gasUsed": 21000, "logs": []})
    transport = _transport(eth=eth)

    receipt = asyncio.run(transport._wait(TX_HASH, 1))

    assert receipt.success
    assert receipt.block_number == 10
    assert receipt.gas_used == 21000
    assert receipt.events == []
    assert receipt.raw == {"status": 1, "blockNumber": 10, "gasUsed": 21000, "logs": []}


def test_wait_raises_on_revert() -> None:
    eth = _eth_with_receipt({"status": 0, "blockNumber": 10, "gasUsed": 50000, "logs": []})
    transport = _transport(eth=eth)

    with pytest.raises(TransactionFailed, match="reverted") as excinfo:
        asyncio.run(transport._wait(TX_HASH, 1))
    assert excinfo.value.details["tx_hash"] == TX_HASH


def test_wait_wraps_timeouts() -> None:
    async def wait_for_transaction_receipt(*args: Any, **kwargs: Any):
        raise TimeoutError("not mined")

    eth = SimpleNamespace(wait_for_transaction_receipt=wait_for_transaction_receipt)
    transport = _transport(eth=eth)

    with pytest.raises(TransactionFailed) as excinfo:
        asyncio.run(transport._wait(TX_HASH, 1))
    assert isinstance(excinfo.value.__cause__, TimeoutError)


def test_get_balance_checksums_address() -> None:
    seen: list[str] = []

    async def get_balance(address: str) -> int:
        seen.append(address)
        return 5

    transport = _transport(eth=SimpleNamespace(get_balance=get_balance))

    assert asyncio.run(transport.get_balance("0x" + "ab" * 20)) == 5
    assert seen == [AsyncWeb3.to_checksum_address("0x" + "ab" * 20)]


def test_method_without_abi_is_rejected() -> None:
    transport = _transport(eth=SimpleNamespace())
    context = CallContext(
        profile=NetworkProfile(name="mainnet", chain_id=1),
        transport=transport,
    )

    with pytest.raises(InvalidArgument, match="No ABI available"):
        transport._resolve_abi("balanceOf", context)

    entry = transport._resolve_abi("function balanceOf(address) view returns (uint)", context)[0]
    assert entry["name"] == "balanceOf"


def test_sign_typed_data_with_local_account() -> None:
    account = Account.from_key(PRIVATE_KEY)
    transport = _transport(account=account)
    data = build_typed_data(
        "Onyx",
        1,
        "0x" + "12" * 20,
        "Delegation",
        DELEGATION_TYPE,
        {"delegatee": account.address, "nonce": 0, "expiry": 10_000_000_000},
    )

    signature = asyncio.run(transport.sign_typed_data(data))

    assert signature.v in ("0x1b", "0x1c")
    assert len(signature.r) == 66
    assert len(signature.s) == 66
    recovered = Account.recover_message(
        encode_typed_data(full_message=data),
        vrs=(int(signature.v, 16), int(signature.r, 16), int(signature.s, 16)),
    )
    assert recovered == account.address


def _contract_eth(function: Any) -> SimpleNamespace:
    def contract(address: str, abi: Any) -> SimpleNamespace:
        return SimpleNamespace(functions=SimpleNamespace(allowance=function, approve=function))

    return SimpleNamespace(contract=contract)


def _erc20_context(transport: Web3Transport) -> CallContext:
    return CallContext(
        profile=NetworkProfile(name="mainnet", chain_id=1),
        transport=transport,
        abi=ERC20,
    )


def test_read_wraps_rpc_errors() -> None:
    async def call(params: dict[str, Any]) -> Any:
        raise ConnectionError("connection refused")

    eth = _contract_eth(lambda *args: SimpleNamespace(call=call))
    transport = _transport(eth=eth)

    with pytest.raises(TransactionFailed, match="Read call allowance failed") as excinfo:
        asyncio.run(
            transport.read(SPENDER, "allowance", [SPENDER, SPENDER], _erc20_context(transport))
        )
    assert excinfo.value.method == "allowance"
    assert isinstance(excinfo.value.__cause__, ConnectionError)


def test_write_wraps_submission_errors() -> None:
    async def transact(params: dict[str, Any]) -> Any:
        raise ValueError("insufficient funds for gas")

    eth = _contract_eth(lambda *args: SimpleNamespace(transact=transact))
    transport = _transport(eth=eth)

    with pytest.raises(TransactionFailed, match="Failed to submit transaction for approve"):
        asyncio.run(transport.write(SPENDER, "approve", [SPENDER, 1], _erc20_context(transport)))


def test_encoding_errors_are_wrapped() -> None:
    def allowance(*args: Any) -> Any:
        raise TypeError("One or more arguments could not be encoded")

    transport = _transport(eth=_contract_eth(allowance))

    with pytest.raises(TransactionFailed, match="Unable to encode call to allowance"):
        asyncio.run(transport.read(SPENDER, "allowance", ["nope"], _erc20_context(transport)))


def test_handle_carries_abi_for_event_decoding() -> None:
    async def transact(params: dict[str, Any]) -> bytes:
        return bytes.fromhex(TX_HASH[2:])

    eth = _contract_eth(lambda *args: SimpleNamespace(transact=transact))
    transport = _transport(eth=eth)
    seen: list[Any] = []

    async def fake_wait(tx_hash: str, confirmations: int, abi: Any = ()) -> str:
        seen.append((tx_hash, confirmations, abi))
        return tx_hash

    transport._wait = fake_wait  # type: ignore[method-assign]

    async def scenario() -> str:
        handle = await transport.write(SPENDER, "approve", [SPENDER, 1], _erc20_context(transport))
        return await handle.wait(2)

    assert asyncio.run(scenario()) == TX_HASH
    assert seen == [(TX_HASH, 2, ERC20)]
    assert not hasattr(transport, "_abis")


def test_provider_signing_error_is_transaction_failed() -> None:
    rejection = {"code": 4001, "message": "User rejected the request."}

    async def make_request(method: str, params: Any) -> dict[str, Any]:
        assert method == "eth_signTypedData_v4"
        return {"jsonrpc": "2.0", "id": 1, "error": rejection}

    transport = _transport(provider=SimpleNamespace(make_request=make_request))
    data = build_typed_data(
        "Onyx",
        1,
        "0x" + "12" * 20,
        "Delegation",
        DELEGATION_TYPE,
        {"delegatee": SPENDER, "nonce": 0, "expiry": 10_000_000_000},
    )

    with pytest.raises(TransactionFailed, match="rejected") as excinfo:
        asyncio.run(transport.sign_typed_data(data))
    assert excinfo.value.method == "eth_signTypedData_v4"
    assert excinfo.value.details["error"] == rejection
