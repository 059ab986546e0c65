"""Tolerant value coercion shared by the row mappers and the decoder."""

from __future__ import annotations

import math
import re
from typing import Any

_WS = re.compile(r"\s+")
_NUMBER = re.compile(r"-?\d{1,3}(?:,\d{3})+(?!\d)(?:\.\d+)?|-?\d+(?:[.,]\d+)?")
_THOUSANDS = re.compile(r"-?\d{1,3}(?:,\d{3})+(?:\.\d+)?")


def to_number(value: Any) -> float | None:
    """
    Best-effort numeric coercion.

    "4.5" -> 4.5, "4,5" -> 4.5, "1,234" -> 1234.0, "8/10" -> 8.0, "n/a" -> None.
    Never returns NaN or infinity, and to_number(to_number(x)) == to_number(x).
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    if not isinstance(value, str):
        return None
    match = _NUMBER.search(value)
    if not match:
        return None
    raw = match.group(0)
    raw = raw.replace(",", "") if _THOUSANDS.fullmatch(raw) else raw.replace(",", ".")
    number = float(raw)
    return number if math.isfinite(number) else None


def clean_text(value: Any) -> str | None:
    """Collapse whitespace in scalar values; containers and blanks become None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if not isinstance(value, str):
        return None
    text = _WS.sub(" ", value).strip()
    return text or None


def scalar(value: Any) -> float | int | str | None:
    """Keep numbers as numbers and text as cleaned text."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value if math.isfinite(value) else None
    return clean_text(value)


def to_bool(value: Any) -> bool | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "y", "1", "refundable"}:
            return True
        if lowered in {"false", "no", "n", "0", "non-refundable", "nonrefundable"}:
            return False
    return None


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))
