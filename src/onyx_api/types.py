"""Type definitions and data models for the Onyx protocol client."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - typing helper
    from .evm.transactions import Transport
    from .networks import NetworkProfile

Address = str  # Ethereum address
ABI = Sequence[Mapping[str, Any]]


@dataclass(frozen=True)
class DecimalString:
    """Human-scale amount given as decimal text (floats are normalised through ``str``)."""

    text: str


@dataclass(frozen=True)
class Integer:
    """Human-scale whole amount."""

    value: int


@dataclass(frozen=True)
class ScaledInteger:
    """Amount already expressed as an on-chain mantissa."""

    value: int


Amount = DecimalString | Integer | ScaledInteger
RawAmount = str | int | float | Decimal | DecimalString | Integer | ScaledInteger


@dataclass(frozen=True)
class NetworkInfo:
    """Chain identity reported by the provider."""

    id: int
    name: str


@dataclass(frozen=True)
class AssetDescriptor:
    """Canonical forms and addresses derived from a user-supplied symbol."""

    is_market_token: bool
    market_symbol: str
    underlying_symbol: str
    price_symbol: str
    market_address: Address | None
    underlying_address: Address | None
    underlying_decimals: int
    abi_name: str

    @property
    def is_native(self) -> bool:
        return self.underlying_address is None


@dataclass(frozen=True)
class CallOptions:
    """Call-level overrides accepted by every action."""

    mantissa: bool = False
    gas_limit: int | None = None
    abi: ABI | None = None
    value: int | None = None


@dataclass(frozen=True)
class CallContext:
    """Per-operation bag handed to the transport; never shared across calls."""

    profile: NetworkProfile
    transport: Transport
    abi: ABI | None = None
    gas_limit: int | None = None
    value: int | None = None

    def with_abi(self, abi: ABI | None, *, value: int | None = None) -> CallContext:
        """Target another contract; the native ``value`` is not carried over."""
        return CallContext(
            profile=self.profile,
            transport=self.transport,
            abi=abi,
            gas_limit=self.gas_limit,
            value=value,
        )


@dataclass
class ReceiptEvent:
    """A decoded log entry emitted by a mined transaction."""

    name: str
    args: dict[str, Any]
    log_index: int
    address: Address | None = None


@dataclass
class Receipt:
    """Mined transaction outcome with its events in log order."""

    transaction_hash: str
    status: int
    block_number: int | None = None
    gas_used: int | None = None
    events: list[ReceiptEvent] = field(default_factory=list)
    raw: dict[str, Any] | None = None

    @property
    def success(self) -> bool:
        return self.status == 1

    def event_names(self) -> list[str]:
        return [event.name for event in self.events]


@dataclass(frozen=True)
class Signature:
    """EIP-712 signature split into its ``v``, ``r`` and ``s`` components."""

    v: str
    r: str
    s: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Signature:
        return cls(v=str(data["v"]), r=str(data["r"]), s=str(data["s"]))

    def as_dict(self) -> dict[str, str]:
        return {"v": self.v, "r": self.r, "s": self.s}
