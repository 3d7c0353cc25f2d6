"""
Exact decimal arithmetic for prices, volumes and values.

Feed values arrive as strings, ints or floats; everything is converted to
``Decimal`` before any arithmetic so summing many small order rows never
drifts the way binary floats do.
"""

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any, Iterable

logger = logging.getLogger(__name__)

ZERO = Decimal(0)
HUNDRED = Decimal(100)


def to_decimal(value: Any) -> Decimal:
    """Convert a feed value to Decimal. Missing or malformed values become zero."""
    if value is None or value == "":
        return ZERO
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool):
        result = Decimal(int(value))
    else:
        try:
            # str() keeps floats at their shortest repr instead of the binary expansion
            result = Decimal(str(value).strip().replace(",", ""))
        except (InvalidOperation, ValueError, TypeError):
            logger.debug(f"Treating malformed numeric value as zero: {value!r}")
            return ZERO
    if not result.is_finite():
        logger.debug(f"Treating non-finite numeric value as zero: {value!r}")
        return ZERO
    return result


def dsum(values: Iterable[Any]) -> Decimal:
    """Exact sum of numeric values."""
    total = ZERO
    for value in values:
        total += to_decimal(value)
    return total


def safe_divide(numerator: Any, denominator: Any, default: Decimal = ZERO) -> Decimal:
    """Divide, returning ``default`` when the denominator is zero."""
    denominator = to_decimal(denominator)
    if denominator == 0:
        return default
    return to_decimal(numerator) / denominator


def format_fixed(value: Any, places: int = 4) -> str:
    """Fixed-point string with ``places`` decimals, rounding half up."""
    quantum = Decimal(1).scaleb(-places)
    with localcontext() as ctx:
        ctx.prec = 60
        result = to_decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)
    if result == 0:
        # Avoid "-0.0000"
        result = abs(result)
    return f"{result:f}"
