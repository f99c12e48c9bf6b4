"""Money arithmetic helpers.

Amounts are persisted as floats but every calculation runs on Decimal,
quantized to cents, so totals add up exactly.
"""

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Convert a float, int, str or Decimal into a cent-quantized Decimal."""
    if isinstance(value, Decimal):
        amount = value
    else:
        amount = Decimal(str(value))
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(value) -> int:
    """Smallest currency unit, as payment providers expect it."""
    return int((to_money(value) * 100).to_integral_value(rounding=ROUND_HALF_UP))


def as_decimal(value) -> Decimal:
    """Exact Decimal of a client-supplied amount, without rounding."""
    return value if isinstance(value, Decimal) else Decimal(str(value))


def prices_match(claimed, authoritative) -> bool:
    """A claimed price matches only if it equals the authoritative cents exactly.

    Claims finer than a cent never match.
    """
    return as_decimal(claimed) == to_money(authoritative)
