"""
Tolerant parsers for the numeric and date text found in scraped deal rows.

Every function returns None instead of raising; an absent value stays absent
all the way into the persisted deal.
"""

from __future__ import annotations

import math
import re
from datetime import date

_NON_NUMERIC = re.compile(r"[^0-9.]")
_DATE = re.compile(r"(\d{1,2})[/.\-](\d{1,2})[/.\-](\d{4})")
_WHITESPACE = re.compile(r"\s+")


def parse_number(text: object) -> float | None:
    """
    Parse "1,250,000 ₪" style text into 1250000.0.

    Everything except digits and '.' is dropped, then only the first decimal
    point is kept.
    """

    if text is None or isinstance(text, bool):
        return None
    if isinstance(text, (int, float)):
        return float(text) if math.isfinite(text) and text >= 0 else None

    cleaned = _NON_NUMERIC.sub("", str(text))
    head, dot, tail = cleaned.partition(".")
    cleaned = head + dot + tail.replace(".", "")
    if not cleaned or cleaned == ".":
        return None
    try:
        value = float(cleaned)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def parse_int(text: object) -> int | None:
    """
    Parse the leading integer of a value such as "12" or "12 א".
    """

    if text is None or isinstance(text, bool):
        return None
    if isinstance(text, int):
        return text
    match = re.search(r"\d+", str(text))
    return int(match.group(0)) if match else None


def parse_date(text: object) -> str | None:
    """
    Convert DD/MM/YYYY (separator '/', '-' or '.') into ISO YYYY-MM-DD.
    """

    if not text:
        return None
    match = _DATE.search(str(text))
    if match is None:
        return None
    day, month, year = (int(part) for part in match.groups())
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def clean_text(value: object) -> str | None:
    """
    Collapse whitespace; empty strings become None.
    """

    if value is None:
        return None
    collapsed = _WHITESPACE.sub(" ", str(value)).strip()
    return collapsed or None
