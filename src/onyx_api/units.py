"""Conversions between human-scale amounts and on-chain mantissas."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext

from .constants import MARKET_TOKEN_DECIMALS
from .exceptions import InvalidAmount
from .types import Amount, DecimalString, Integer, RawAmount, ScaledInteger

# Market-token exchange rates are scaled by 1e18 on top of the decimals gap
EXCHANGE_RATE_BASE_DECIMALS = 18

_PRECISION = 78


def coerce_amount(raw: RawAmount, *, mantissa: bool = False, prefix: str = "") -> Amount:
    """Tag a caller-supplied amount with the variant the converter consumes."""

    if isinstance(raw, DecimalString | Integer | ScaledInteger):
        if mantissa and not isinstance(raw, ScaledInteger):
            inner = raw.text if isinstance(raw, DecimalString) else raw.value
            return ScaledInteger(_integral(inner, prefix))
        return raw

    if isinstance(raw, bool) or not isinstance(raw, str | int | float | Decimal):
        raise InvalidAmount(
            prefix + "Argument `amount` must be a string, number, or BigNumber.",
            field="amount",
            value=raw,
        )

    if mantissa:
        return ScaledInteger(_integral(raw, prefix))
    if isinstance(raw, int):
        return Integer(raw)
    return DecimalString(str(raw).strip())


def to_mantissa(
    amount: RawAmount, decimals: int, already_scaled: bool = False, *, prefix: str = ""
) -> int:
    """Convert an amount into its integer on-chain representation."""

    tagged = coerce_amount(amount, mantissa=already_scaled, prefix=prefix)
    if isinstance(tagged, ScaledInteger):
        return tagged.value

    if isinstance(tagged, Integer):
        return tagged.value * 10**decimals

    value = _parse_decimal(tagged.text, prefix)
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        scaled = value.scaleb(decimals)
        return int(scaled.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def to_human(mantissa: int, decimals: int) -> Decimal:
    """Convert an on-chain integer back into a human-scale Decimal."""

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return Decimal(int(mantissa)).scaleb(-decimals)


def cross_rate(price_a: int, decimals_a: int, price_b: int, decimals_b: int) -> Decimal:
    """Express oracle price A in units of oracle price B.

    Oracle prices are scaled by ``10^(36 - decimals)``; price A is brought to
    the decimal base of B before the division.
    """

    price_a = int(price_a)
    price_b = int(price_b)
    if decimals_a - decimals_b > 0:
        price_a = price_a * 10 ** (decimals_a - decimals_b)
    else:
        price_a = price_a // 10 ** (decimals_b - decimals_a)

    if price_b == 0:
        raise InvalidAmount("Price of the quote asset is zero", field="price_b", value=price_b)

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return Decimal(price_a) / Decimal(price_b)


def market_token_exchange_rate(raw_exchange_rate: int, underlying_decimals: int) -> Decimal:
    """Return one market token expressed in underlying units."""

    scale = EXCHANGE_RATE_BASE_DECIMALS + underlying_decimals - MARKET_TOKEN_DECIMALS
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return Decimal(int(raw_exchange_rate)).scaleb(-scale)


def compose_price(
    rate: Decimal,
    *,
    asset_is_market: bool,
    asset_exchange_rate: Decimal | None = None,
    quote_is_market: bool,
    quote_exchange_rate: Decimal | None = None,
) -> Decimal:
    """Combine a cross rate with market-token exchange rates (four cases)."""

    with localcontext() as ctx:
        ctx.prec = _PRECISION
        if not asset_is_market and not quote_is_market:
            return rate
        if asset_is_market and not quote_is_market:
            return rate * _required(asset_exchange_rate, "asset_exchange_rate")
        if not asset_is_market and quote_is_market:
            return rate / _required(quote_exchange_rate, "quote_exchange_rate")
        market_tokens_in_underlying = rate / _required(asset_exchange_rate, "asset_exchange_rate")
        return _required(quote_exchange_rate, "quote_exchange_rate") * market_tokens_in_underlying


def _required(value: Decimal | None, name: str) -> Decimal:
    if value is None or value == 0:
        raise InvalidAmount(f"Exchange rate `{name}` is required and non-zero", field=name)
    return value


def _parse_decimal(text: str, prefix: str) -> Decimal:
    try:
        value = Decimal(text)
    except (InvalidOperation, ValueError):
        raise InvalidAmount(
            prefix + "Argument `amount` must be a string, number, or BigNumber.",
            field="amount",
            value=text,
        ) from None
    if not value.is_finite():
        raise InvalidAmount(prefix + "Argument `amount` must be finite.", field="amount", value=text)
    return value


def _integral(raw: object, prefix: str) -> int:
    if isinstance(raw, bool):
        raise InvalidAmount(
            prefix + "Argument `amount` must be a string, number, or BigNumber.",
            field="amount",
            value=raw,
        )
    if isinstance(raw, int):
        return raw
    value = _parse_decimal(str(raw).strip(), prefix)
    if value != value.to_integral_value():
        raise InvalidAmount(
            prefix + "Scaled `amount` must be a whole number.",
            field="amount",
            value=raw,
        )
    return int(value)
