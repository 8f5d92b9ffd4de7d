"""Pure pricing, fee and rate primitives used by the ledger services."""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass
from decimal import Decimal
from typing import Final

SECONDS_PER_YEAR: Final[int] = 365 * 24 * 60 * 60
FEE_DENOMINATOR: Final[int] = 1_000_000
RATE_OVERFLOW_SENTINEL: Final[Decimal] = Decimal(repr(sys.float_info.max))

_Q192: Final[int] = 2**192
_ZERO: Final[Decimal] = Decimal("0")


@dataclass(frozen=True)
class SwapFeeLeg:
    """Fee attribution for one swap.

    Attributes:
        token_index: 0 or 1 for the output leg, or None when neither amount is positive.
        output_amount: Raw output-leg amount (zero when there is no output leg).
        fee_amount: Fee taken on the output leg in raw token units.
    """

    token_index: int | None
    output_amount: int
    fee_amount: int


def ledger_sqrt_price_x96_to_token_prices(
    sqrt_price_x96: int,
    token0_decimals: int,
    token1_decimals: int,
) -> tuple[Decimal, Decimal]:
    """Convert a Q64.96 square-root price into decimal-adjusted token prices.

    Args:
        sqrt_price_x96: Pool square-root price in Q64.96 fixed point.
        token0_decimals: Decimals of token0.
        token1_decimals: Decimals of token1.

    Returns:
        tuple[Decimal, Decimal]: `(price0, price1)` where price1 is token1 per
        token0 and price0 its reciprocal (zero when price1 is zero).
    """

    price1 = Decimal(sqrt_price_x96 * sqrt_price_x96 * 10**token0_decimals) / Decimal(_Q192 * 10**token1_decimals)
    price0 = _ZERO if price1 == _ZERO else Decimal(1) / price1
    return price0, price1


def ledger_convert_token_to_usd(amount: int, decimals: int, price_usd: Decimal) -> Decimal:
    """Value a raw token amount in USD at the given unit price."""

    return Decimal(amount) / (Decimal(10) ** decimals) * price_usd


def ledger_extract_swap_fee(amount0: int, amount1: int, fee: int) -> SwapFeeLeg:
    """Attribute the swap fee to the output leg.

    The output leg is the first strictly positive amount (token0 checked
    first). The fee is `output * fee // 1_000_000`; the output is positive so
    floor division truncates toward zero.

    Args:
        amount0: Swapper-signed token0 amount.
        amount1: Swapper-signed token1 amount.
        fee: Fee in hundredths of a bip.

    Returns:
        SwapFeeLeg: Output leg, its amount and the fee.
    """

    if amount0 > 0:
        return SwapFeeLeg(token_index=0, output_amount=amount0, fee_amount=amount0 * fee // FEE_DENOMINATOR)
    if amount1 > 0:
        return SwapFeeLeg(token_index=1, output_amount=amount1, fee_amount=amount1 * fee // FEE_DENOMINATOR)
    return SwapFeeLeg(token_index=None, output_amount=0, fee_amount=0)


def ledger_time_bucket(timestamp: int, bucket_seconds: int) -> int:
    """Return the snapshot bucket index of a UNIX timestamp.

    Raises:
        ValueError: Raised when bucket_seconds is not positive.
    """

    if bucket_seconds <= 0:
        raise ValueError("bucket_seconds must be > 0")
    return timestamp // bucket_seconds


def ledger_calculate_annualized_rate(
    period_yield_usd: Decimal,
    previous_value_usd: Decimal,
    period_seconds: int,
) -> Decimal:
    """Compound one period's yield into an annualized rate.

    rate = (1 + period_yield / previous_value) ** (SECONDS_PER_YEAR / period_seconds) - 1

    Exponentiation runs in binary floating point. Non-positive inputs yield
    zero, a negative growth factor (undefined fractional power) yields zero,
    and an overflowing result yields `RATE_OVERFLOW_SENTINEL`.

    Args:
        period_yield_usd: Yield plus swap fees earned during the period.
        previous_value_usd: TVL at the start of the period.
        period_seconds: Period length in seconds.

    Returns:
        Decimal: Annualized rate, always finite.
    """

    if previous_value_usd <= _ZERO or period_seconds <= 0:
        return _ZERO

    growth_factor = float((previous_value_usd + period_yield_usd) / previous_value_usd)
    exponent = SECONDS_PER_YEAR / period_seconds
    try:
        rate = math.pow(growth_factor, exponent) - 1
    except OverflowError:
        return RATE_OVERFLOW_SENTINEL
    except ValueError:
        return _ZERO

    if not math.isfinite(rate):
        return RATE_OVERFLOW_SENTINEL
    return Decimal(repr(rate))


__all__ = [
    "FEE_DENOMINATOR",
    "RATE_OVERFLOW_SENTINEL",
    "SECONDS_PER_YEAR",
    "SwapFeeLeg",
    "ledger_calculate_annualized_rate",
    "ledger_convert_token_to_usd",
    "ledger_extract_swap_fee",
    "ledger_sqrt_price_x96_to_token_prices",
    "ledger_time_bucket",
]
