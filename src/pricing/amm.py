"""
Constant-product AMM math.

Amounts and reserves are integer base units. Outputs are computed with
integer arithmetic the same way the pool contracts do, so a local quote
matches ``getAmountOut`` exactly. Percentages are ``Decimal``.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

BPS = 10000
FEE_BPS = 30  # 0.3%, fixed by the protocol
HUNDRED = Decimal(100)
DEFAULT_IMPACT_CAP = Decimal(15)


def quote_output(
    amount_in: int, reserve_in: int, reserve_out: int, fee_bps: int = FEE_BPS
) -> int:
    """
    Output for ``amount_in`` against the given reserves.

    amount_in_with_fee = amount_in * (10000 - fee_bps)
    amount_out = amount_in_with_fee * reserve_out
                 // (reserve_in * 10000 + amount_in_with_fee)

    Returns 0 when any input is non-positive; callers treat that as
    "no liquidity", never as a valid zero-value trade.
    """
    _check_fee(fee_bps)
    if amount_in <= 0 or reserve_in <= 0 or reserve_out <= 0:
        return 0
    amount_in_with_fee = amount_in * (BPS - fee_bps)
    numerator = amount_in_with_fee * reserve_out
    denominator = reserve_in * BPS + amount_in_with_fee
    return numerator // denominator


def quote_input(
    amount_out: int, reserve_in: int, reserve_out: int, fee_bps: int = FEE_BPS
) -> int:
    """Minimum input that yields at least ``amount_out`` (0 if unreachable)."""
    _check_fee(fee_bps)
    if amount_out <= 0 or reserve_in <= 0 or reserve_out <= 0:
        return 0
    if amount_out >= reserve_out:
        return 0
    numerator = amount_out * reserve_in * BPS
    denominator = (reserve_out - amount_out) * (BPS - fee_bps)
    return numerator // denominator + 1


def price_impact(amount_in: int, reserve_in: int) -> Decimal:
    """Share of the input-side pool depth consumed by the trade, in percent."""
    if amount_in <= 0 or reserve_in < 0:
        return Decimal(0)
    return Decimal(amount_in) * HUNDRED / Decimal(reserve_in + amount_in)


def compound_impacts(
    impacts: Iterable[Decimal], cap: Decimal = DEFAULT_IMPACT_CAP
) -> Decimal:
    """Combine sequential hop impacts multiplicatively, capped at ``cap`` percent.

    A single hop is returned as is so it matches its hop's own impact exactly.
    """
    impacts = list(impacts)
    if len(impacts) == 1:
        return min(impacts[0], cap)
    remaining = Decimal(1)
    for impact in impacts:
        remaining *= Decimal(1) - impact / HUNDRED
    return min((Decimal(1) - remaining) * HUNDRED, cap)


def minimum_received(amount_out: int, slippage: Decimal) -> int:
    """``amount_out`` reduced by ``slippage`` percent, rounded down."""
    if amount_out <= 0:
        return 0
    numerator, denominator = ((HUNDRED - slippage) / HUNDRED).as_integer_ratio()
    return amount_out * numerator // denominator


def spot_price(reserve_in: int, reserve_out: int) -> Decimal:
    """Marginal price of the input token in output units (display only)."""
    if reserve_in <= 0:
        return Decimal(0)
    return Decimal(reserve_out) / Decimal(reserve_in)


def exchange_rate(
    amount_in: int, amount_out: int, decimals_in: int = 18, decimals_out: int = 18
) -> Decimal:
    """Effective output per unit of input in human units."""
    if amount_in <= 0:
        return Decimal(0)
    scale = Decimal(10) ** (decimals_in - decimals_out)
    return Decimal(amount_out) / Decimal(amount_in) * scale


def _check_fee(fee_bps: int) -> None:
    if not isinstance(fee_bps, int):
        raise TypeError("fee_bps must be int")
    if fee_bps < 0 or fee_bps >= BPS:
        raise ValueError("fee_bps must be in [0, 10000)")
