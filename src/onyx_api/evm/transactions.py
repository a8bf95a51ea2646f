"""Contract reads, transaction dispatch and receipt handling."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Protocol

from eth_typing import ChecksumAddress
from hexbytes import HexBytes
from web3 import AsyncWeb3
from web3.logs import DISCARD

from ..abi import is_signature, parse_function_signature
from ..exceptions import InvalidArgument, TransactionFailed
from ..types import ABI, CallContext, NetworkInfo, Receipt, ReceiptEvent, Signature
from ..utils import serialise_receipt
from .connections import Web3Connections

logger = logging.getLogger(__name__)


@dataclass
class TransactionHandle:
    """A submitted transaction; ``wait`` resolves once it has enough confirmations."""

    hash: str
    address: str
    method: str
    _waiter: Callable[[str, int], Awaitable[Receipt]] = field(repr=False)

    async def wait(self, confirmations: int = 1) -> Receipt:
        return await self._waiter(self.hash, confirmations)


class Transport(Protocol):
    """Narrow interface over the RPC, signing and ABI machinery."""

    async def read(
        self, address: str, method: str, params: Sequence[Any], context: CallContext
    ) -> Any: ...

    async def write(
        self, address: str, method: str, params: Sequence[Any], context: CallContext
    ) -> TransactionHandle: ...

    async def resolve_network(self) -> NetworkInfo: ...

    async def signer_address(self) -> str: ...

    async def get_balance(self, address: str) -> int: ...

    async def sign_typed_data(self, data: Mapping[str, Any]) -> Signature: ...


class Web3Transport:
    """Transport implementation backed by AsyncWeb3."""

    def __init__(
        self,
        connections: Web3Connections,
        *,
        receipt_timeout: float,
        poll_interval: float,
    ) -> None:
        self._connections = connections
        self._receipt_timeout = receipt_timeout
        self._poll_interval = poll_interval

    @property
    def web3(self) -> AsyncWeb3:
        return self._connections.web3

    async def resolve_network(self) -> NetworkInfo:
        return await self._connections.resolve_network()

    async def signer_address(self) -> str:
        return await self._connections.signer_address()

    async def get_balance(self, address: str) -> int:
        checksum = AsyncWeb3.to_checksum_address(address)
        try:
            return int(await self.web3.eth.get_balance(checksum))
        except Exception as exc:
            raise TransactionFailed(
                "Failed to read native balance",
                method="eth_getBalance",
                address=checksum,
                details={"error": str(exc)},
            ) from exc

    async def read(
        self, address: str, method: str, params: Sequence[Any], context: CallContext
    ) -> Any:
        function, checksum, name = self._bind(address, method, params, context)
        call_params: dict[str, Any] = {}
        if context.value:
            call_params["value"] = context.value

        try:
            result = await function.call(call_params)
        except Exception as exc:
            raise TransactionFailed(
                f"Read call {name} failed",
                method=name,
                address=checksum,
                details={"params": list(params), "error": str(exc)},
            ) from exc

        logger.debug("Read %s on %s -> %s", name, checksum, result)
        return result

    async def write(
        self, address: str, method: str, params: Sequence[Any], context: CallContext
    ) -> TransactionHandle:
        function, checksum, name = self._bind(address, method, params, context)
        tx_params: dict[str, Any] = {"from": await self.signer_address()}
        if context.value:
            tx_params["value"] = context.value
        if context.gas_limit:
            tx_params["gas"] = context.gas_limit

        logger.info("Dispatching %s on %s", name, checksum)
        try:
            tx_hash = await function.transact(tx_params)
        except Exception as exc:
            raise TransactionFailed(
                f"Failed to submit transaction for {name}",
                method=name,
                address=checksum,
                details={"params": list(params), "error": str(exc)},
            ) from exc

        tx_hex = HexBytes(tx_hash).to_0x_hex()
        logger.info("Transaction sent for method=%s hash=%s", name, tx_hex)
        abi = self._resolve_abi(method, context)
        return TransactionHandle(
            hash=tx_hex, address=checksum, method=name, _waiter=partial(self._wait, abi=abi)
        )

    async def sign_typed_data(self, data: Mapping[str, Any]) -> Signature:
        account = self._connections.account
        if account is not None:
            signed = account.sign_typed_data(full_message=dict(data))
            return Signature(
                v=hex(signed.v),
                r="0x" + signed.r.to_bytes(32, "big").hex(),
                s="0x" + signed.s.to_bytes(32, "big").hex(),
            )

        signer = await self.signer_address()
        try:
            response = await self.web3.provider.make_request(
                "eth_signTypedData_v4", [signer, json.dumps(data)]
            )
        except Exception as exc:
            raise TransactionFailed(
                "Provider failed to sign typed data",
                method="eth_signTypedData_v4",
                address=signer,
                details={"error": str(exc)},
            ) from exc

        if response.get("error") is not None or not response.get("result"):
            raise TransactionFailed(
                "Provider rejected the typed data signature request",
                method="eth_signTypedData_v4",
                address=signer,
                details={"error": response.get("error")},
            )

        raw = HexBytes(response["result"])
        return Signature(
            v=hex(raw[64]),
            r="0x" + raw[:32].hex(),
            s="0x" + raw[32:64].hex(),
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _resolve_abi(self, method: str, context: CallContext) -> ABI:
        if is_signature(method):
            return [parse_function_signature(method)]
        if context.abi is None:
            raise InvalidArgument(
                f"No ABI available for method {method!r}",
                field="abi",
                value=method,
            )
        return context.abi

    def _bind(
        self, address: str, method: str, params: Sequence[Any], context: CallContext
    ) -> tuple[Any, ChecksumAddress, str]:
        abi = self._resolve_abi(method, context)
        name = parse_function_signature(method)["name"] if is_signature(method) else method
        try:
            checksum = AsyncWeb3.to_checksum_address(address)
        except (TypeError, ValueError) as exc:
            raise InvalidArgument(
                f"Invalid contract address for {name}",
                field="address",
                value=address,
            ) from exc

        contract = self.web3.eth.contract(address=checksum, abi=list(abi))
        try:
            function = getattr(contract.functions, name)(*params)
        except Exception as exc:
            raise TransactionFailed(
                f"Unable to encode call to {name}",
                method=name,
                address=checksum,
                details={"params": list(params), "error": str(exc)},
            ) from exc
        return function, checksum, name

    async def _wait(self, tx_hash: str, confirmations: int, abi: ABI = ()) -> Receipt:
        web3 = self.web3
        try:
            raw = await web3.eth.wait_for_transaction_receipt(
                HexBytes(tx_hash),
                timeout=self._receipt_timeout,
                poll_latency=self._poll_interval,
            )
            block_number = raw.get("blockNumber")
            if confirmations > 1 and block_number is not None:
                while await web3.eth.block_number - block_number + 1 < confirmations:
                    await asyncio.sleep(self._poll_interval)
        except Exception as exc:
            raise TransactionFailed(
                "Failed waiting for transaction receipt",
                method="eth_getTransactionReceipt",
                details={"tx_hash": tx_hash, "error": str(exc)},
            ) from exc

        receipt = Receipt(
            transaction_hash=tx_hash,
            status=int(raw.get("status", 0)),
            block_number=block_number,
            gas_used=raw.get("gasUsed"),
            events=self._decode_events(raw, abi),
            raw=serialise_receipt(raw),
        )
        if not receipt.success:
            raise TransactionFailed(
                "Transaction reverted",
                details={"tx_hash": tx_hash, "receipt": receipt.raw},
            )

        logger.info(
            "Transaction confirmed hash=%s block=%s events=%s",
            tx_hash,
            block_number,
            receipt.event_names(),
        )
        return receipt

    def _decode_events(self, raw: Any, abi: ABI) -> list[ReceiptEvent]:
        event_names = [entry["name"] for entry in abi if entry.get("type") == "event"]
        if not event_names:
            return []

        contract = self.web3.eth.contract(abi=list(abi))
        decoded: dict[int, ReceiptEvent] = {}
        for name in event_names:
            for log in getattr(contract.events, name)().process_receipt(raw, errors=DISCARD):
                decoded.setdefault(
                    log["logIndex"],
                    ReceiptEvent(
                        name=log["event"],
                        args=dict(log["args"]),
                        log_index=log["logIndex"],
                        address=log.get("address"),
                    ),
                )
        return [decoded[index] for index in sorted(decoded)]
