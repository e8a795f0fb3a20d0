"""Snippets for utils."""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal
from typing import TypeVar

T = TypeVar("T")
U = TypeVar("U")

# Norwegian letters sort after z
_NORWEGIAN_TAIL = {"æ": "z\x01", "ø": "z\x02", "å": "z\x03"}


def group_pairs(data: Iterable[tuple[T, U]]) -> dict[T, list[U]]:
    """Group the second entries of the tuples by their first entry, keeping
    the order of appearance."""
    grouped: dict[T, list[U]] = {}
    for k, v in data:
        grouped.setdefault(k, []).append(v)
    return grouped


def keep_repeated_keys(data: dict[T, list[U]]) -> dict[T, list[U]]:
    """Filter the dictionary to keep only the keys with multiple distinct
    values."""
    return {k: v for k, v in data.items() if len(set(v)) > 1}


def strip_leading_zeros(code: str) -> str:
    """Product codes are compared without zero padding."""
    return code.strip().lstrip("0") or "0"


def norwegian_sort_key(text: str) -> tuple[str, str]:
    """Case-insensitive collation key for Norwegian text."""
    folded = "".join(_NORWEGIAN_TAIL.get(ch, ch) for ch in text.casefold())
    return folded, text


def round_half_up(value: float, places: int) -> Decimal:
    return Decimal(repr(value)).quantize(
        Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP
    )


def format_number(value: float, places: int = 2) -> str:
    """Round for display, dropping trailing zeros (60.00 -> "60")."""
    text = f"{round_half_up(value, places):f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
