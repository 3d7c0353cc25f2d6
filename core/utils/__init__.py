"""
Utility functions for Bitpin Monitor.
"""

from decimal import Decimal

from core.decimal_math import format_fixed, to_decimal


def format_number(value: Decimal | float | str | None, places: int | None = None) -> str:
    """
    Format a number with thousands separators for display.

    Args:
        value: The number to format. Missing or malformed values show as 0.
        places: Fixed number of decimals. If None, trailing zeros are dropped.

    Returns:
        Formatted string, e.g. "1,234,567.5".
    """
    number = to_decimal(value)

    if places is not None and places >= 0:
        text = format_fixed(number, places)
    else:
        text = f"{number.normalize():f}" if number != 0 else "0"

    sign = ""
    if text.startswith("-"):
        sign, text = "-", text[1:]

    whole, _, fraction = text.partition(".")
    whole = f"{int(whole):,}"
    return f"{sign}{whole}.{fraction}" if fraction else f"{sign}{whole}"


def format_percent(value: Decimal | float | str | None) -> str:
    """Signed percentage, e.g. "+1.25%"."""
    text = format_fixed(value, 2)
    return f"{text}%" if text.startswith("-") else f"+{text}%"
