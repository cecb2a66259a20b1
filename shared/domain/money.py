"""
Decimal money helpers.

Prices are stored as ``Decimal`` with two fractional digits. Rounding to
cents happens only at named boundaries: the unit price snapshot, the line
total and the order/booking total.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")
ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value) -> Decimal:
    """Coerce ints, strings, floats and ``None`` into a ``Decimal``."""
    if isinstance(value, Decimal):
        return value
    if value is None or value == "":
        return ZERO
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Not a decimal amount: {value!r}") from exc


def round_money(value) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def clamp_percentage(value) -> Decimal:
    pct = to_decimal(value)
    if pct < ZERO:
        return ZERO
    if pct > HUNDRED:
        return HUNDRED
    return pct


def effective_price(price, discount_percentage=None) -> Decimal:
    """Price after the discount percentage (clamped to [0, 100]) is applied.

    The result is not rounded; callers snapshot it with ``round_money``.
    """
    base = to_decimal(price)
    pct = clamp_percentage(discount_percentage)
    if not pct:
        return base
    return base * (1 - pct / HUNDRED)


def line_total(unit_price, quantity: int) -> Decimal:
    return round_money(to_decimal(unit_price) * int(quantity))


def sum_money(values) -> Decimal:
    return round_money(sum((to_decimal(v) for v in values), ZERO))


def hourly_total(price_per_hour, minutes: int) -> Decimal:
    """Price of ``minutes`` at an hourly rate, rounded to cents."""
    return round_money(to_decimal(price_per_hour) * Decimal(int(minutes)) / Decimal(60))
