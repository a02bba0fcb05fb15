"""Currency helpers.

All monetary values are ``Decimal`` quantized to two places with
``ROUND_HALF_UP``.  Floats are rejected so binary rounding never leaks
into a fee or a payout.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Union

CURRENCY_QUANTUM = Decimal("0.01")

MoneyInput = Union[Decimal, int, str]


def to_money(value: MoneyInput) -> Decimal:
    """Quantize *value* to currency precision."""
    if isinstance(value, float):
        raise TypeError("Monetary values must not be floats.")
    return Decimal(value).quantize(CURRENCY_QUANTUM, rounding=ROUND_HALF_UP)


def parse_money(raw: Optional[str]) -> Optional[Decimal]:
    """Parse a stored decimal string, returning ``None`` when unusable.

    Blank, malformed, non-finite and negative values are all unusable.
    """
    if raw is None:
        return None
    try:
        value = Decimal(raw.strip())
    except (InvalidOperation, ValueError):
        return None
    if not value.is_finite() or value < 0:
        return None
    return to_money(value)
