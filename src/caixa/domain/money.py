"""Exact decimal helpers for monetary arithmetic.

Every amount, sum and ratio operand in caixa is a ``Decimal``. Binary floats
are rejected at the boundary so cent-level drift can never enter a running
total; conversion to a display number happens only when formatting.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Iterable, Union

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")

DecimalLike = Union[Decimal, int, str]


def to_decimal(value: DecimalLike) -> Decimal:
    """Convert a value into a Decimal without passing through binary floats.

    Args:
        value: Decimal, int or numeric string

    Returns:
        Decimal value

    Raises:
        ValueError: If the value is a float, a bool, or not a finite number
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool) or isinstance(value, float):
        raise ValueError(
            f"Monetary values must be Decimal, int or str, not {type(value).__name__}"
        )
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation:
            raise ValueError(f"Could not parse decimal value '{value}'")
    else:
        raise ValueError(f"Unsupported monetary value type: {type(value).__name__}")

    if not result.is_finite():
        raise ValueError(f"Monetary value must be finite (got {value})")
    return result


def sum_amounts(amounts: Iterable[Decimal]) -> Decimal:
    """Sum decimals starting from an exact zero."""
    total = ZERO
    for amount in amounts:
        total += amount
    return total


def percentage(part: Decimal, whole: Decimal) -> Decimal:
    """Return ``part / whole * 100``, or exactly zero when ``whole`` is zero."""
    if whole == ZERO:
        return ZERO
    return part / whole * HUNDRED


def round_percentage(value: Decimal, places: int = 1) -> Decimal:
    """Round a percentage for presentation."""
    exponent = Decimal(1).scaleb(-places)
    return value.quantize(exponent, rounding=ROUND_HALF_UP)


def quantize_money(value: Decimal) -> Decimal:
    """Round a monetary value to cents for presentation."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def to_money(value: DecimalLike) -> Decimal:
    """Convert a stored monetary value, rejecting fractions of a cent.

    Raises:
        ValueError: If the value is malformed or has non-zero digits past
            the second decimal place
    """
    result = to_decimal(value)
    if result != result.quantize(CENT):
        raise ValueError(f"Monetary value must have at most two decimal places (got {value})")
    return result
