"""Asset resolution: symbol forms, supported sets and per-network addresses."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .constants import (
    MARKET_TOKEN_PREFIX,
    MARKET_TOKENS,
    NATIVE_ASSET,
    NATIVE_MARKET,
    PRICE_FEED_ASSETS,
    PRICE_SYMBOL_REMAP,
    UNDERLYINGS,
)
from .exceptions import InvalidArgument, UnsupportedAsset, error_prefix
from .networks import NetworkProfile, NetworkRegistry
from .types import AssetDescriptor

logger = logging.getLogger(__name__)

NATIVE_MARKET_ABI = "oEther"
TOKEN_MARKET_ABI = "oErc20"


@dataclass(frozen=True)
class SymbolForms:
    """Profile-independent classification of a raw symbol."""

    is_market_token: bool
    market_symbol: str
    underlying_symbol: str


def market_abi_name(market_symbol: str) -> str:
    """Select the market contract variant for a market-token symbol."""
    return NATIVE_MARKET_ABI if market_symbol == NATIVE_MARKET else TOKEN_MARKET_ABI


class AssetResolver:
    """Resolve user-supplied symbols into AssetDescriptors for a network."""

    def __init__(
        self,
        registry: NetworkRegistry,
        *,
        market_tokens: tuple[str, ...] = MARKET_TOKENS,
        underlyings: tuple[str, ...] = UNDERLYINGS,
        price_feed_assets: tuple[str, ...] = PRICE_FEED_ASSETS,
    ) -> None:
        self._registry = registry
        self._market_tokens = frozenset(market_tokens)
        self._underlyings = frozenset(underlyings)
        self._price_feed_assets = frozenset(price_feed_assets)

    @property
    def registry(self) -> NetworkRegistry:
        return self._registry

    def classify(
        self,
        raw_symbol: object,
        operation: str,
        argument: str = "asset",
        *,
        price_feed: bool = False,
    ) -> SymbolForms:
        """Validate the symbol against the supported sets without touching a network."""

        prefix = error_prefix(operation)
        if not isinstance(raw_symbol, str) or len(raw_symbol) < 1:
            raise InvalidArgument(
                prefix + f"Argument `{argument}` must be a non-empty string.",
                field=argument,
                value=raw_symbol,
            )

        is_market_token = raw_symbol[0] == MARKET_TOKEN_PREFIX
        market_symbol = raw_symbol if is_market_token else MARKET_TOKEN_PREFIX + raw_symbol
        underlying_symbol = raw_symbol[1:] if is_market_token else raw_symbol

        listed = market_symbol in self._market_tokens and underlying_symbol in self._underlyings
        if not listed and not (price_feed and underlying_symbol in self._price_feed_assets):
            raise UnsupportedAsset(
                prefix + f"Argument `{argument}` is not supported.",
                symbol=raw_symbol,
            )

        return SymbolForms(
            is_market_token=is_market_token,
            market_symbol=market_symbol,
            underlying_symbol=underlying_symbol,
        )

    def classify_underlying(
        self, raw_symbol: object, operation: str, message: str, argument: str = "asset"
    ) -> SymbolForms:
        """Accept only a listed underlying symbol (supply, borrow and repay)."""

        prefix = error_prefix(operation)
        if (
            not isinstance(raw_symbol, str)
            or raw_symbol not in self._underlyings
            or MARKET_TOKEN_PREFIX + raw_symbol not in self._market_tokens
        ):
            raise UnsupportedAsset(prefix + message, symbol=str(raw_symbol))
        return SymbolForms(
            is_market_token=False,
            market_symbol=MARKET_TOKEN_PREFIX + raw_symbol,
            underlying_symbol=raw_symbol,
        )

    def market_symbol(self, raw_symbol: object, operation: str, argument: str) -> str:
        """Normalise a market name, prefixing bare underlyings (enter/exit market)."""

        prefix = error_prefix(operation)
        if not isinstance(raw_symbol, str) or raw_symbol == "":
            raise InvalidArgument(
                prefix + f"Argument `{argument}` must be a string of a oToken market name.",
                field=argument,
                value=raw_symbol,
            )
        symbol = raw_symbol
        if symbol[0] != MARKET_TOKEN_PREFIX:
            symbol = MARKET_TOKEN_PREFIX + symbol
        if symbol not in self._market_tokens:
            raise UnsupportedAsset(
                prefix + f"Provided market `{symbol}` is not a recognized oToken.",
                symbol=symbol,
            )
        return symbol

    def resolve(
        self,
        raw_symbol: object,
        profile: NetworkProfile,
        operation: str,
        argument: str = "asset",
        *,
        price_feed: bool = False,
    ) -> AssetDescriptor:
        forms = self.classify(raw_symbol, operation, argument, price_feed=price_feed)
        return self.describe(forms, profile)

    def describe(self, forms: SymbolForms, profile: NetworkProfile) -> AssetDescriptor:
        """Attach addresses and decimals from the network profile."""

        market_address = self._registry.lookup_address(profile, forms.market_symbol)
        underlying_symbol = forms.underlying_symbol
        if underlying_symbol == NATIVE_ASSET:
            underlying_address = None
        else:
            underlying_address = self._registry.lookup_address(profile, underlying_symbol)
        underlying_decimals = self._registry.lookup_decimals(profile, underlying_symbol)

        descriptor = AssetDescriptor(
            is_market_token=forms.is_market_token,
            market_symbol=forms.market_symbol,
            underlying_symbol=underlying_symbol,
            price_symbol=PRICE_SYMBOL_REMAP.get(underlying_symbol, underlying_symbol),
            market_address=market_address,
            underlying_address=underlying_address,
            underlying_decimals=underlying_decimals,
            abi_name=market_abi_name(forms.market_symbol),
        )
        logger.debug(
            "Resolved %s on %s to market %s", forms.market_symbol, profile.name, market_address
        )
        return descriptor
