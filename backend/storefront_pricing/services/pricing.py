from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_DOWN, ROUND_HALF_EVEN, ROUND_HALF_UP, ROUND_UP
from typing import Literal


DEFAULT_PRECISION = 2
ZERO = Decimal("0")
HUNDRED = Decimal("100")

MoneyRounding = Literal["half_up", "half_even", "up", "down"]


_ROUNDING_MAP: dict[str, str] = {
    "half_up": ROUND_HALF_UP,
    "half_even": ROUND_HALF_EVEN,
    "up": ROUND_UP,
    "down": ROUND_DOWN,
}


def money_quant(precision: int = DEFAULT_PRECISION) -> Decimal:
    if precision < 0:
        precision = 0
    return Decimal(1).scaleb(-precision)


def to_decimal(value: object | None, *, fallback: Decimal = ZERO) -> Decimal:
    """Parse loosely typed numeric input; anything unusable or non-finite becomes ``fallback``."""
    if value is None or isinstance(value, bool):
        return fallback
    if isinstance(value, Decimal):
        dec = value
    elif isinstance(value, int):
        dec = Decimal(value)
    elif isinstance(value, float):
        dec = Decimal(str(value))
    elif isinstance(value, str):
        candidate = value.strip()
        if not candidate:
            return fallback
        try:
            dec = Decimal(candidate)
        except InvalidOperation:
            return fallback
    else:
        return fallback
    if not dec.is_finite():
        return fallback
    return dec


def quantize_money(
    value: Decimal | int | float | str | None,
    *,
    precision: int = DEFAULT_PRECISION,
    rounding: MoneyRounding = "half_up",
) -> Decimal:
    mode = _ROUNDING_MAP.get(str(rounding), ROUND_HALF_UP)
    return to_decimal(value).quantize(money_quant(precision), rounding=mode)


def round_whole(value: Decimal) -> Decimal:
    return to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def safe_div(numerator: Decimal, denominator: Decimal) -> Decimal:
    # Division by zero and non-finite results collapse to 0 so sums stay usable.
    num = to_decimal(numerator)
    den = to_decimal(denominator)
    if den == 0:
        return ZERO
    try:
        result = num / den
    except (InvalidOperation, ArithmeticError):
        return ZERO
    return result if result.is_finite() else ZERO


def percent_of(amount: Decimal, percent: Decimal) -> Decimal:
    return to_decimal(amount) * to_decimal(percent) / HUNDRED


def apply_discount(amount: Decimal, percent: Decimal) -> Decimal:
    base = to_decimal(amount)
    return base - percent_of(base, percent)


def clamp(value: Decimal, low: Decimal, high: Decimal) -> Decimal:
    if value < low:
        return low
    if value > high:
        return high
    return value
