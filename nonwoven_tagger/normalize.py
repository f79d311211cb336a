"""
normalize.py — Shared text and number helpers for the extractors.

Descriptions are matched in uppercase. Anything that is not a string (NaN from
an empty spreadsheet cell, numbers, dates) is treated as an empty description.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP


NOT_FOUND = "N/A"
NO_ADD_ONS = "-"

# Number with an optional decimal part, comma or dot separated
NUMBER = r'\d+(?:[.,]\d+)?'

_TWO_PLACES = Decimal("0.01")


def to_text(value) -> str:
    if isinstance(value, str):
        return value
    return ""


def fold(value) -> str:
    """Uppercase form used for all pattern matching."""
    return to_text(value).upper()


def to_decimal(raw: str) -> Decimal | None:
    """Parse a matched number, treating a comma as the decimal separator."""
    try:
        return Decimal(raw.replace(",", "."))
    except (InvalidOperation, AttributeError):
        return None


def decimal_string(raw: str) -> str:
    return raw.replace(",", ".")


def format_cm(value: Decimal) -> str:
    return str(value.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))
