"""Parsing helpers for provider and state-file values."""

from __future__ import annotations

from typing import Any


def safe_int(value: Any) -> int | None:
    """Parse number-like input into int, returning None when invalid."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        if raw.startswith("+"):
            raw = raw[1:]
        try:
            return int(raw)
        except ValueError:
            return None
    return None


def strict_int(value: Any) -> int | None:
    """Like ``safe_int`` but refuses fractional floats instead of truncating."""
    if isinstance(value, float) and not value.is_integer():
        return None
    return safe_int(value)


def to_price(value: Any) -> float | None:
    """Parse a decimal-odds price; zero, negative, or non-numeric values are missing."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    if parsed != parsed or parsed <= 0:
        return None
    return parsed
