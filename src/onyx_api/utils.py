"""Utility functions for the Onyx protocol client."""

from collections.abc import Mapping, Sequence
from typing import Any

from hexbytes import HexBytes
from web3 import Web3

from .abi import ABIS
from .constants import CHAIN_NAMES
from .exceptions import InvalidArgument
from .networks import DEFAULT_REGISTRY, NetworkRegistry


def get_address(
    name: str, network: str | int = "mainnet", registry: NetworkRegistry = DEFAULT_REGISTRY
) -> str:
    """Return the deployed address of a token, market or core contract."""
    profile = registry.resolve(network)
    return registry.lookup_address(profile, name)


def get_abi(name: str) -> list[dict[str, Any]]:
    """Return a bundled contract ABI by name (``oEther``, ``oErc20``, ``Comptroller``...)."""
    if name not in ABIS:
        raise InvalidArgument(f"Unknown ABI name {name!r}", field="name", value=name)
    return list(ABIS[name])


def get_network_name_with_chain_id(chain_id: int) -> str | None:
    return CHAIN_NAMES.get(chain_id)


def is_address(value: object) -> bool:
    return isinstance(value, str) and Web3.is_address(value)


def serialise_receipt(receipt: Any) -> Any:
    """Serialise web3 receipt objects into JSON-friendly structures."""
    if receipt is None:
        return None
    if isinstance(receipt, Mapping):
        return {key: serialise_receipt(value) for key, value in receipt.items()}
    if isinstance(receipt, Sequence) and not isinstance(
        receipt, str | bytes | bytearray | HexBytes
    ):
        return [serialise_receipt(item) for item in receipt]
    if isinstance(receipt, bytes | bytearray | HexBytes):
        return HexBytes(receipt).to_0x_hex()
    return receipt
