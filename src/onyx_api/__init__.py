"""Onyx API - Python client for the Onyx lending protocol.

This library resolves asset symbols to the protocol's market contracts,
converts human-scale amounts to on-chain mantissas and sequences the
allowance, approval and market calls behind each action.
"""

from .api import OnyxApi
from .base import GovernanceBase, LendingProtocolBase, PriceFeedBase
from .client import Onyx
from .constants import (
    DECIMALS,
    MARKET_TOKENS,
    UNDERLYINGS,
    VOTE_ABSTAIN,
    VOTE_AGAINST,
    VOTE_FOR,
    Asset,
    Contract,
)
from .evm import ClientConfig, ConnectionGate, TransactionHandle, Transport
from .exceptions import (
    ApiError,
    InvalidAmount,
    InvalidArgument,
    OnyxError,
    TransactionFailed,
    UnknownAsset,
    UnknownContract,
    UnsupportedAsset,
    UnsupportedNetwork,
)
from .networks import NetworkProfile, NetworkRegistry
from .types import (
    Address,
    Amount,
    AssetDescriptor,
    CallOptions,
    DecimalString,
    Integer,
    NetworkInfo,
    Receipt,
    ReceiptEvent,
    ScaledInteger,
    Signature,
)
from .units import (
    coerce_amount,
    compose_price,
    cross_rate,
    market_token_exchange_rate,
    to_human,
    to_mantissa,
)
from .utils import get_abi, get_address, get_network_name_with_chain_id, is_address

__version__ = "0.1.0"

__all__ = [
    # Client
    "Onyx",
    "OnyxApi",
    "ClientConfig",
    "ConnectionGate",
    "Transport",
    # Base classes
    "LendingProtocolBase",
    "PriceFeedBase",
    "GovernanceBase",
    # Types and enums
    "Asset",
    "Contract",
    "Address",
    "Amount",
    "AssetDescriptor",
    "CallOptions",
    "DecimalString",
    "Integer",
    "ScaledInteger",
    "NetworkInfo",
    "NetworkProfile",
    "NetworkRegistry",
    "Receipt",
    "ReceiptEvent",
    "Signature",
    "TransactionHandle",
    # Constants
    "DECIMALS",
    "MARKET_TOKENS",
    "UNDERLYINGS",
    "VOTE_AGAINST",
    "VOTE_FOR",
    "VOTE_ABSTAIN",
    # Exceptions
    "OnyxError",
    "InvalidArgument",
    "InvalidAmount",
    "UnsupportedAsset",
    "UnknownAsset",
    "UnknownContract",
    "UnsupportedNetwork",
    "TransactionFailed",
    "ApiError",
    # Utility functions
    "coerce_amount",
    "to_mantissa",
    "to_human",
    "cross_rate",
    "market_token_exchange_rate",
    "compose_price",
    "get_address",
    "get_abi",
    "get_network_name_with_chain_id",
    "is_address",
]
