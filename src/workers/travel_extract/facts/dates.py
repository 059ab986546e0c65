"""Date normalization for travel facts.

Accepts ISO (2025-03-05), numeric slash/dot (03/05/2025, 5.3.25) and
month-name (March 5, 2025) forms and returns one ISO-8601 UTC timestamp
format. Anything that does not parse is dropped, never guessed.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any

from workers.travel_extract.coerce import clean_text

_ISO_DATE = re.compile(r"\b(\d{4})[-/.](\d{1,2})[-/.](\d{1,2})\b")
_NUMERIC_DATE = re.compile(r"\b(\d{1,2})[/.](\d{1,2})[/.](\d{2,4})\b")
_MONTH_NAME_DATE = re.compile(r"\b([A-Za-z]{3,9})\.?\s+(\d{1,2})(?:st|nd|rd|th)?,?\s+(\d{4})\b")

_MONTHS = (
    "january", "february", "march", "april", "may", "june",
    "july", "august", "september", "october", "november", "december",
)


def _month_number(name: str) -> int | None:
    lowered = name.lower()
    if lowered == "sept":
        return 9
    for index, full in enumerate(_MONTHS, start=1):
        if len(lowered) >= 3 and full.startswith(lowered):
            return index
    return None


def format_utc(dt: datetime) -> str:
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _build(year: int, month: int, day: int) -> str | None:
    try:
        return format_utc(datetime(year, month, day, tzinfo=timezone.utc))
    except ValueError:
        return None


def to_iso_date(text: Any) -> str | None:
    """Find the first recognizable date in text; None if none parses."""
    text = clean_text(text)
    if not text:
        return None

    match = _ISO_DATE.search(text)
    if match:
        year, month, day = (int(g) for g in match.groups())
        return _build(year, month, day)

    match = _NUMERIC_DATE.search(text)
    if match:
        first, second, year_text = match.groups()
        year = int(year_text) + 2000 if len(year_text) == 2 else int(year_text)
        month, day = int(first), int(second)
        # US order unless only day-first can be valid
        if month > 12 and day <= 12:
            month, day = day, month
        return _build(year, month, day)

    for match in _MONTH_NAME_DATE.finditer(text):
        month = _month_number(match.group(1))
        if month is not None:
            return _build(int(match.group(3)), month, int(match.group(2)))

    return None


def normalize_datetime(value: Any) -> str | None:
    """Full ISO timestamps keep their time of day; other forms go through to_iso_date."""
    text = clean_text(value)
    if not text:
        return None
    try:
        return format_utc(datetime.fromisoformat(text))
    except ValueError:
        return to_iso_date(text)
