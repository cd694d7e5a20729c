"""
Money helpers.

Amounts are Decimal, quantized once to 2 places (ROUND_HALF_UP) when they
enter the system and stored as "%.2f" strings in NUMERIC(12,2) columns.
Nothing downstream rounds again, so applying and reverting a balance
effect are exact inverses.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

CENT = Decimal("0.01")
ZERO = Decimal("0.00")
MAX_AMOUNT = Decimal("9999999999.99")


def to_money(value: Any) -> Decimal:
    """
    Convert a numeric-like value (str, int, float, Decimal) to a 2-place Decimal.

    Raises:
        ValueError: if the value is not numeric or exceeds NUMERIC(12,2)
    """
    if value is None:
        raise ValueError("numeric value required")

    if not isinstance(value, Decimal):
        try:
            value = Decimal(str(value))
        except InvalidOperation as exc:
            raise ValueError(f"numeric value required, got {value!r}") from exc

    if not value.is_finite():
        raise ValueError("numeric value must be finite")

    quantized = value.quantize(CENT, rounding=ROUND_HALF_UP)
    if quantized.copy_abs() > MAX_AMOUNT:
        raise ValueError("value exceeds NUMERIC(12,2) range")
    return quantized


def money_str(value: Any) -> str:
    """Storage representation of an amount."""
    return f"{to_money(value):.2f}"


def read_money(value: Any) -> Decimal:
    """Parse an amount read back from the store; missing values count as zero."""
    if value is None or value == "":
        return ZERO
    return to_money(value)
