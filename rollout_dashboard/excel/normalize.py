from __future__ import annotations

import math
import re
from collections.abc import Iterable
from datetime import datetime

"""Normalizers: canonical comparable keys for spreadsheet text.

All functions are pure and total; unrecognised input maps to "" or None.
"""

__all__ = [
    "MAX_ACRONYM_LENGTH",
    "UNSPECIFIED_QUARTER",
    "is_summary_label",
    "normalize_acronym",
    "normalize_header",
    "normalize_percent",
    "normalize_quarter",
    "quarter_from_date",
    "quarter_sort_value",
    "round_half_up",
]

MAX_ACRONYM_LENGTH = 8
UNSPECIFIED_QUARTER = "Unspecified"

_NON_HEADER_CHARS = re.compile(r"[^a-z0-9]")
_NON_ACRONYM_CHARS = re.compile(r"[^A-Z0-9]")
_QUARTER_PATTERNS = (
    re.compile(r"q\s*([1-4])", re.IGNORECASE),
    re.compile(r"quarter\s*([1-4])", re.IGNORECASE),
    re.compile(r"^([1-4])$"),
)
_CANONICAL_QUARTER = re.compile(r"^Q([1-4])$")


def normalize_header(value: object) -> str:
    """Lowercase and strip everything but ``[a-z0-9]``: ``"Roll-out Date"`` -> ``"rolloutdate"``."""
    if value is None:
        return ""
    return _NON_HEADER_CHARS.sub("", str(value).lower().strip())


def normalize_acronym(value: object) -> str:
    """Uppercase alphanumeric acronym, or "" when empty or longer than 8 chars."""
    if value is None:
        return ""
    text = _NON_ACRONYM_CHARS.sub("", str(value).upper())
    if not text or len(text) > MAX_ACRONYM_LENGTH:
        return ""
    return text


def normalize_quarter(value: object) -> str:
    """Map ``q3``, ``Quarter 3``, ``FY24 Q3`` or a bare ``3`` to ``"Q3"``."""
    if value is None:
        return ""
    text = str(value).strip().lower()
    if not text:
        return ""
    for pattern in _QUARTER_PATTERNS:
        match = pattern.search(text)
        if match:
            return f"Q{match.group(1)}"
    return ""


def normalize_percent(value: float | None) -> float | None:
    """Normalise a conversion rate to a percentage in [0, 100].

    Values up to 1 are treated as fractions (0.42 -> 42.0). Zero, negative
    and non-finite input means "unknown" and yields None.
    """
    if value is None or not math.isfinite(value):
        return None
    if value <= 0:
        return None
    percent = value * 100 if value <= 1 else value
    return max(0.0, min(100.0, percent))


def is_summary_label(name: str, patterns: Iterable[str]) -> bool:
    """True if ``name`` looks like a subtotal or annotation row label."""
    text = (name or "").lower()
    if not text:
        return False
    return any(p.lower() in text for p in patterns)


def quarter_from_date(value: datetime) -> str:
    return f"Q{(value.month - 1) // 3 + 1}"


def quarter_sort_value(value: str) -> int:
    """Q1..Q4 -> 1..4; anything else sorts last."""
    match = _CANONICAL_QUARTER.match((value or "").upper())
    return int(match.group(1)) if match else 99


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (spreadsheet style, not banker's)."""
    return int(math.floor(value + 0.5))
