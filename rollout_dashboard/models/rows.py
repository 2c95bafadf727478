from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

"""Typed rows emitted by the sheet extractors.

Each dataclass corresponds to one logical sheet type. Rows are created only
after the acronym (or quarter, for theme rows) has been normalised and
validated, so downstream code never sees an empty key.
"""

__all__ = [
    "CorrectedName",
    "DeptCountRow",
    "ParsedWorkbook",
    "QuarterTheme",
    "TimelineRow",
]


@dataclass(frozen=True)
class CorrectedName:
    acronym: str
    name: str


@dataclass(frozen=True)
class QuarterTheme:
    quarter: str  # Q1..Q4
    theme: str


@dataclass(frozen=True)
class DeptCountRow:
    """One department line from a department-count sheet."""
    acronym: str
    name: str
    headcount: int  # >= 0
    quarter: str  # Q1..Q4 or ""
    conversion_rate: float | None  # [0, 100]


@dataclass(frozen=True)
class TimelineRow:
    """One department line from the communication timeline sheet."""
    acronym: str
    name: str
    quarter: str
    rollout_date: datetime | None
    owner: str
    note: str
    count: int  # >= 0, 0 when the sheet has no count column
    conversion_rate: float | None


@dataclass(frozen=True)
class ParsedWorkbook:
    """Everything the extractors pulled out of a single workbook.

    ``dept_rows`` and ``timeline_rows`` keep file order; the reconciler relies
    on it. ``corrected_names`` and ``quarter_themes`` are lookups where a later
    sheet row overwrites an earlier one for the same key.
    """
    dept_rows: list[DeptCountRow] = field(default_factory=list)
    timeline_rows: list[TimelineRow] = field(default_factory=list)
    corrected_names: dict[str, str] = field(default_factory=dict)
    quarter_themes: dict[str, str] = field(default_factory=dict)
    sheets_scanned: int = 0
    timeline_sheet: str | None = None
