"""Asset prices from the protocol's price oracle."""

from __future__ import annotations

import logging
from decimal import Decimal

from .abi import COMPTROLLER, PRICE_ORACLE
from .actions import ActionBase
from .constants import Asset, Contract
from .networks import NetworkProfile
from .types import AssetDescriptor, CallOptions
from .units import compose_price, cross_rate, market_token_exchange_rate

logger = logging.getLogger(__name__)


class PriceFeedActions(ActionBase):
    async def get_price(self, asset: str, in_asset: str = Asset.USDC.value) -> Decimal:
        """Return the price of one ``asset`` denominated in ``in_asset``.

        Either side may be a market token, in which case its exchange rate
        into the underlying is folded into the result.
        """

        operation = "getPrice"
        base_forms = self._resolver.classify(asset, operation, "asset", price_feed=True)
        quote_forms = self._resolver.classify(in_asset, operation, "inAsset", price_feed=True)

        profile = await self._profile()
        base = self._resolver.describe(base_forms, profile)
        quote = self._resolver.describe(quote_forms, profile)

        oracle = await self._oracle_address(profile)
        oracle_context = self._context(profile, PRICE_ORACLE, CallOptions())
        base_price = int(
            await self._transport.read(
                oracle, "getUnderlyingPrice", [base.market_address], oracle_context
            )
        )
        quote_price = int(
            await self._transport.read(
                oracle, "getUnderlyingPrice", [quote.market_address], oracle_context
            )
        )

        rate = cross_rate(
            base_price, base.underlying_decimals, quote_price, quote.underlying_decimals
        )
        base_exchange = await self._exchange_rate(profile, base) if base.is_market_token else None
        quote_exchange = (
            await self._exchange_rate(profile, quote) if quote.is_market_token else None
        )

        price = compose_price(
            rate,
            asset_is_market=base.is_market_token,
            asset_exchange_rate=base_exchange,
            quote_is_market=quote.is_market_token,
            quote_exchange_rate=quote_exchange,
        )
        logger.debug("Price of %s in %s is %s", base.price_symbol, quote.price_symbol, price)
        return price

    async def _oracle_address(self, profile: NetworkProfile) -> str:
        comptroller = self._address(profile, Contract.COMPTROLLER.value)
        context = self._context(profile, COMPTROLLER, CallOptions())
        return str(await self._transport.read(comptroller, "oracle", [], context))

    async def _exchange_rate(self, profile: NetworkProfile, descriptor: AssetDescriptor) -> Decimal:
        context = self._context(profile, descriptor.abi_name, CallOptions())
        raw = await self._transport.read(
            descriptor.market_address, "exchangeRateCurrent", [], context
        )
        return market_token_exchange_rate(int(raw), descriptor.underlying_decimals)
