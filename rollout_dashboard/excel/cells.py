from __future__ import annotations

import math
import numbers
import re
from collections.abc import Sequence
from datetime import date, datetime, time, timedelta
from typing import Any

import pandas as pd

from rollout_dashboard.models.cells import Cell, DateCell, EmptyCell, NumberCell, TextCell

"""Cell readers: raw matrix values -> typed values.

``to_cell`` is the only place that inspects the Python type of a raw value.
The ``read_cell_*`` helpers take a row and a column index (negative or out of
range means "column not present") and pattern-match on the resulting variant.
None of them raise for bad data; they return "", None or an empty result.
"""

__all__ = [
    "cell_text",
    "read_cell_date",
    "read_cell_number",
    "read_cell_text",
    "serial_to_datetime",
    "to_cell",
]

# 1900 date system: serial 1 == 1899-12-31, anchored at noon
EXCEL_EPOCH = datetime(1899, 12, 30, 12, 0, 0)
SERIAL_MIN = 20000  # ~1954
SERIAL_MAX = 70000  # ~2091

_ISO_DATE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")
# free-form date text must name a 4-digit year and at least one other number
_YEAR = re.compile(r"(?<!\d)(\d{4})(?!\d)")
_DIGITS = re.compile(r"\d+")
_NUMBER_NOISE = re.compile(r"[,%\s]")


def to_cell(value: Any) -> Cell:
    """Wrap a raw value into its tagged variant."""
    if value is None or value is pd.NaT:
        return EmptyCell()
    if isinstance(value, bool):
        return TextCell(str(value))
    if isinstance(value, pd.Timestamp):
        if pd.isna(value):
            return EmptyCell()
        return DateCell(value.to_pydatetime())
    if isinstance(value, datetime):
        return DateCell(value)
    if isinstance(value, date):
        return DateCell(datetime.combine(value, time(0, 0)))
    if isinstance(value, numbers.Real):
        number = float(value)
        if math.isnan(number):
            return EmptyCell()
        return NumberCell(number)
    text = str(value)
    if text.strip() == "":
        return EmptyCell()
    return TextCell(text)


def cell_text(cell: Cell) -> str:
    if isinstance(cell, TextCell):
        return cell.value.strip()
    if isinstance(cell, NumberCell):
        v = cell.value
        if math.isfinite(v) and v == int(v):
            return str(int(v))
        return str(v)
    if isinstance(cell, DateCell):
        return cell.value.date().isoformat()
    return ""


def _cell_at(row: Sequence[Any], index: int | None) -> Cell:
    if index is None or index < 0 or index >= len(row):
        return EmptyCell()
    return to_cell(row[index])


def read_cell_text(row: Sequence[Any], index: int | None) -> str:
    return cell_text(_cell_at(row, index))


def read_cell_number(row: Sequence[Any], index: int | None) -> float | None:
    """Read a number; text has thousands separators, '%' and spaces removed."""
    cell = _cell_at(row, index)
    if isinstance(cell, NumberCell):
        return cell.value if math.isfinite(cell.value) else None
    if isinstance(cell, TextCell):
        cleaned = _NUMBER_NOISE.sub("", cell.value)
        try:
            number = float(cleaned)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def serial_to_datetime(serial: float) -> datetime:
    # time-of-day fraction is dropped
    return EXCEL_EPOCH + timedelta(days=math.floor(serial))


def _at_noon(value: datetime) -> datetime:
    return datetime.combine(value.date(), time(12, 0))


def read_cell_date(row: Sequence[Any], index: int | None) -> datetime | None:
    """Read a date-or-null.

    Accepts real date cells, 1900-system serials in a plausible range, ISO
    ``YYYY-MM-DD`` text and other text pandas can parse when it names a full
    year and a day (``June 5, 2024``); partial dates are null. Calendar dates
    are pinned to noon.
    """
    cell = _cell_at(row, index)
    if isinstance(cell, DateCell):
        return _at_noon(cell.value)
    if isinstance(cell, NumberCell):
        v = cell.value
        if math.isfinite(v) and SERIAL_MIN < v < SERIAL_MAX:
            return serial_to_datetime(v)
        return None
    if isinstance(cell, TextCell):
        return _parse_date_text(cell.value.strip())
    return None


def _parse_date_text(text: str) -> datetime | None:
    if not text:
        return None
    iso = _ISO_DATE.match(text)
    if iso:
        try:
            return datetime(int(iso.group(1)), int(iso.group(2)), int(iso.group(3)), 12, 0)
        except ValueError:
            return None
    year = _YEAR.search(text)
    if year is None or len(_DIGITS.findall(text)) < 2:
        return None
    try:
        parsed = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if parsed is None or pd.isna(parsed):
        return None
    if parsed.year != int(year.group(1)):
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.tz_localize(None)
    return _at_noon(parsed.to_pydatetime())
