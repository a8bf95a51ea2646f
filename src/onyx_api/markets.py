"""Market actions: supply, redeem, borrow, repay and collateral membership."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from .abi import COMPTROLLER, ERC20
from .actions import ActionBase
from .constants import Contract
from .evm.transactions import TransactionHandle
from .exceptions import InvalidArgument, error_prefix
from .types import AssetDescriptor, CallContext, CallOptions, RawAmount
from .units import coerce_amount, to_mantissa
from .utils import is_address

logger = logging.getLogger(__name__)


class MarketActions(ActionBase):
    """Compose allowance checks, approvals and market calls into single actions."""

    async def supply(
        self,
        asset: str,
        amount: RawAmount,
        no_approve: bool = False,
        options: CallOptions | None = None,
    ) -> TransactionHandle:
        operation = "supply"
        options = options or CallOptions()
        forms = self._resolver.classify_underlying(
            asset, operation, "Argument `asset` cannot be supplied."
        )
        tagged = coerce_amount(amount, mantissa=options.mantissa, prefix=error_prefix(operation))

        profile = await self._profile()
        descriptor = self._resolver.describe(forms, profile)
        mantissa = to_mantissa(tagged, descriptor.underlying_decimals)

        if descriptor.is_native:
            context = self._context(profile, descriptor.abi_name, options, value=mantissa)
            return await self._send(context, descriptor, "mint", [])

        context = self._context(profile, descriptor.abi_name, options)
        if no_approve is not True:
            await self._ensure_allowance(context, descriptor, mantissa)
        return await self._send(context, descriptor, "mint", [mantissa])

    async def redeem(
        self,
        asset: str,
        amount: RawAmount,
        options: CallOptions | None = None,
    ) -> TransactionHandle:
        operation = "redeem"
        options = options or CallOptions()
        forms = self._resolver.classify(asset, operation)
        tagged = coerce_amount(amount, mantissa=options.mantissa, prefix=error_prefix(operation))

        profile = await self._profile()
        descriptor = self._resolver.describe(forms, profile)
        # Market-token amounts use the market token's own precision
        decimals = self.registry.lookup_decimals(profile, asset)
        mantissa = to_mantissa(tagged, decimals)

        method = "redeem" if descriptor.is_market_token else "redeemUnderlying"
        context = self._context(profile, descriptor.abi_name, options)
        return await self._send(context, descriptor, method, [mantissa])

    async def borrow(
        self,
        asset: str,
        amount: RawAmount,
        options: CallOptions | None = None,
    ) -> TransactionHandle:
        operation = "borrow"
        options = options or CallOptions()
        forms = self._resolver.classify_underlying(
            asset, operation, "Argument `asset` cannot be borrowed."
        )
        tagged = coerce_amount(amount, mantissa=options.mantissa, prefix=error_prefix(operation))

        profile = await self._profile()
        descriptor = self._resolver.describe(forms, profile)
        mantissa = to_mantissa(tagged, descriptor.underlying_decimals)

        context = self._context(profile, descriptor.abi_name, options)
        return await self._send(context, descriptor, "borrow", [mantissa])

    async def repay_borrow(
        self,
        asset: str,
        amount: RawAmount,
        borrower: str | None = None,
        no_approve: bool = False,
        options: CallOptions | None = None,
    ) -> TransactionHandle:
        operation = "repayBorrow"
        prefix = error_prefix(operation)
        options = options or CallOptions()
        forms = self._resolver.classify_underlying(
            asset, operation, "Argument `asset` is not supported."
        )
        tagged = coerce_amount(amount, mantissa=options.mantissa, prefix=prefix)

        on_behalf = bool(borrower)
        if on_behalf and not is_address(borrower):
            raise InvalidArgument(
                prefix + "Invalid `borrower` address.", field="borrower", value=borrower
            )
        method = "repayBorrowBehalf" if on_behalf else "repayBorrow"

        profile = await self._profile()
        descriptor = self._resolver.describe(forms, profile)
        mantissa = to_mantissa(tagged, descriptor.underlying_decimals)

        params: list = [borrower] if on_behalf else []
        if descriptor.is_native:
            context = self._context(profile, descriptor.abi_name, options, value=mantissa)
            return await self._send(context, descriptor, method, params)

        context = self._context(profile, descriptor.abi_name, options)
        if no_approve is not True:
            await self._ensure_allowance(context, descriptor, mantissa)
        params.append(mantissa)
        return await self._send(context, descriptor, method, params)

    async def enter_markets(
        self,
        markets: str | Sequence[str] = (),
        options: CallOptions | None = None,
    ) -> TransactionHandle:
        operation = "enterMarkets"
        options = options or CallOptions()
        if isinstance(markets, str):
            markets = [markets]
        if not isinstance(markets, list | tuple):
            raise InvalidArgument(
                error_prefix(operation) + "Argument `markets` must be an array or string.",
                field="markets",
                value=markets,
            )
        symbols = [self._resolver.market_symbol(market, operation, "markets") for market in markets]

        profile = await self._profile()
        addresses = [self._address(profile, symbol) for symbol in symbols]
        comptroller = self._address(profile, Contract.COMPTROLLER.value)

        context = self._context(profile, COMPTROLLER, options)
        logger.debug("Entering markets %s on %s", symbols, profile.name)
        return await self._transport.write(comptroller, "enterMarkets", [addresses], context)

    async def exit_market(
        self,
        market: str,
        options: CallOptions | None = None,
    ) -> TransactionHandle:
        operation = "exitMarket"
        options = options or CallOptions()
        symbol = self._resolver.market_symbol(market, operation, "market")

        profile = await self._profile()
        market_address = self._address(profile, symbol)
        comptroller = self._address(profile, Contract.COMPTROLLER.value)

        context = self._context(profile, COMPTROLLER, options)
        return await self._transport.write(comptroller, "exitMarket", [market_address], context)

    # ------------------------------------------------------------------
    # Internal workflow
    # ------------------------------------------------------------------
    async def _send(
        self,
        context: CallContext,
        descriptor: AssetDescriptor,
        method: str,
        params: list,
    ) -> TransactionHandle:
        assert descriptor.market_address is not None
        return await self._transport.write(descriptor.market_address, method, params, context)

    async def _ensure_allowance(
        self, context: CallContext, descriptor: AssetDescriptor, amount: int
    ) -> None:
        """Approve the market for ``amount`` when the current allowance is lower."""

        underlying = descriptor.underlying_address
        spender = descriptor.market_address
        assert underlying is not None and spender is not None

        token_context = context.with_abi(ERC20)
        holder = await self._transport.signer_address()
        allowance = int(
            await self._transport.read(underlying, "allowance", [holder, spender], token_context)
        )
        if allowance >= amount:
            logger.debug(
                "Allowance %s covers %s for %s", allowance, amount, descriptor.underlying_symbol
            )
            return

        logger.info(
            "Approving %s of %s for market %s",
            amount,
            descriptor.underlying_symbol,
            descriptor.market_symbol,
        )
        approval = await self._transport.write(
            underlying, "approve", [spender, amount], token_context
        )
        await approval.wait(1)
