"""SARS rounding rules.

PAYE, UIF and SDL are reported in rands and cents, rounded half away from
zero. ETI is reported in whole rands with the cents dropped (truncated
toward zero), never rounded. Example: 1499.99 ETI -> 1499, not 1500.
"""

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

from .errors import InvalidInputError

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
RAND = Decimal("1")


def to_decimal(value: Number) -> Decimal:
    """Convert a number to Decimal without picking up binary float noise.

    Floats go through their shortest repr, so 0.1 becomes Decimal("0.1")
    rather than 0.1000000000000000055511151231257827.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(repr(value))
    return Decimal(value)


def to_amount(value: Number, field: str) -> Decimal:
    """Convert a caller-supplied amount for a calculation.

    Raises:
        InvalidInputError: Naming field, if value is not a number or is
            NaN or infinite
    """
    try:
        amount = to_decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise InvalidInputError(field, f"'{value}' is not a number") from None
    if not amount.is_finite():
        raise InvalidInputError(field, "must be a finite number")
    return amount


def round_currency(value: Number) -> Decimal:
    """Round to the nearest cent, halves away from zero (2.345 -> 2.35, -2.345 -> -2.35)."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def round_to_rand(value: Number) -> Decimal:
    """Round to the nearest whole rand, halves away from zero."""
    return to_decimal(value).quantize(RAND, rounding=ROUND_HALF_UP)


def truncate_to_rand(value: Number) -> Decimal:
    """Drop the cents, truncating toward zero (1499.99 -> 1499, -3.7 -> -3)."""
    return to_decimal(value).quantize(RAND, rounding=ROUND_DOWN)


def round_paye(value: Number) -> Decimal:
    """PAYE amounts carry cents."""
    return round_currency(value)


def round_uif(value: Number) -> Decimal:
    """UIF amounts carry cents."""
    return round_currency(value)


def round_sdl(value: Number) -> Decimal:
    """SDL amounts carry cents."""
    return round_currency(value)


def round_eti(value: Number) -> Decimal:
    """ETI amounts are declared in whole rands; cents are dropped."""
    return truncate_to_rand(value)
