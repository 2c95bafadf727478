from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from rollout_dashboard.models.rows import CorrectedName, DeptCountRow, QuarterTheme, TimelineRow

from .cells import read_cell_date, read_cell_number, read_cell_text
from .header import DEFAULT_SCAN_ROWS, find_header_row
from .normalize import (
    is_summary_label,
    normalize_acronym,
    normalize_header,
    normalize_percent,
    normalize_quarter,
    round_half_up,
)

"""Sheet extractors and sheet role classification.

Each extractor turns one raw matrix into typed rows. A sheet without a
recognisable header yields an empty list; malformed rows are skipped. Nothing
in here raises for bad spreadsheet content.
"""

logger = logging.getLogger(__name__)

Matrix = Sequence[Sequence[Any]]

CORRECTED_NAMES_FIELDS = ("abbreviation", "fulldepartmentname")
DEPT_COUNT_FIELDS = ("abbreviation", "fulldepartmentname", "headcount")
TIMELINE_FIELDS = ("dept", "rolloutdate")


class SheetRole(Enum):
    CORRECTED_NAMES = "corrected_names"
    QUARTER_THEMES = "quarter_themes"
    DEPT_COUNTS = "dept_counts"
    TIMELINE = "timeline"


# Evaluated top to bottom against the normalised sheet name. A sheet may match
# several non-timeline roles; the timeline rules pick a single sheet, first
# rule with any match wins.
ROLE_RULES: tuple[tuple[Callable[[str], bool], SheetRole], ...] = (
    (lambda name: "correcteddeptnames" in name, SheetRole.CORRECTED_NAMES),
    (lambda name: "quarterlyrollout" in name, SheetRole.QUARTER_THEMES),
    (lambda name: "deptcnt" in name, SheetRole.DEPT_COUNTS),
)
TIMELINE_RULES: tuple[Callable[[str], bool], ...] = (
    lambda name: "communicationtimelinev2" in name,
    lambda name: "communicationtimelinev1" in name,
    lambda name: "communicationtimeline" in name,
)


@dataclass(frozen=True)
class SheetPlan:
    """Roles assigned to workbook sheets, in workbook order."""
    roles: dict[str, tuple[SheetRole, ...]] = field(default_factory=dict)
    timeline_sheet: str | None = None

    def sheets_for(self, role: SheetRole) -> list[str]:
        return [name for name, roles in self.roles.items() if role in roles]


def classify_sheets(sheet_names: Iterable[str]) -> SheetPlan:
    """Assign semantic roles to sheets by fuzzy name matching."""
    names = list(sheet_names)
    roles: dict[str, tuple[SheetRole, ...]] = {}
    for name in names:
        normalized = normalize_header(name)
        matched = tuple(role for predicate, role in ROLE_RULES if predicate(normalized))
        if matched:
            roles[name] = matched

    timeline_sheet = None
    for predicate in TIMELINE_RULES:
        timeline_sheet = next((n for n in names if predicate(normalize_header(n))), None)
        if timeline_sheet is not None:
            break
    if timeline_sheet is not None:
        roles[timeline_sheet] = roles.get(timeline_sheet, ()) + (SheetRole.TIMELINE,)

    # keep workbook order
    ordered = {n: roles[n] for n in names if n in roles}
    return SheetPlan(roles=ordered, timeline_sheet=timeline_sheet)


def _whole_number(value: float | None) -> int:
    if value is None:
        return 0
    return max(0, round_half_up(value))


def parse_corrected_names(matrix: Matrix, scan_rows: int = DEFAULT_SCAN_ROWS) -> list[CorrectedName]:
    header = find_header_row(matrix, CORRECTED_NAMES_FIELDS, scan_rows)
    if header is None:
        return []

    out: list[CorrectedName] = []
    for row in matrix[header.row_index + 1:]:
        acronym = normalize_acronym(read_cell_text(row, header.column("abbreviation")))
        name = read_cell_text(row, header.column("fulldepartmentname"))
        if not acronym or not name:
            continue
        out.append(CorrectedName(acronym=acronym, name=name))
    return out


def parse_quarter_themes(matrix: Matrix) -> list[QuarterTheme]:
    """Quarter in column A, theme in column B; no header row needed."""
    out: list[QuarterTheme] = []
    for row in matrix:
        quarter = normalize_quarter(read_cell_text(row, 0))
        theme = read_cell_text(row, 1)
        if not quarter or not theme:
            continue
        out.append(QuarterTheme(quarter=quarter, theme=theme))
    return out


def parse_dept_counts(
    matrix: Matrix,
    scan_rows: int = DEFAULT_SCAN_ROWS,
    summary_patterns: Iterable[str] = (),
) -> list[DeptCountRow]:
    header = find_header_row(matrix, DEPT_COUNT_FIELDS, scan_rows)
    if header is None:
        return []

    patterns = tuple(summary_patterns)
    out: list[DeptCountRow] = []
    for offset, row in enumerate(matrix[header.row_index + 1:], start=header.row_index + 1):
        acronym = normalize_acronym(read_cell_text(row, header.column("abbreviation")))
        name = read_cell_text(row, header.column("fulldepartmentname"))
        if not acronym or is_summary_label(name, patterns):
            logger.debug("dept count row %d skipped (acronym=%r name=%r)", offset, acronym, name)
            continue
        out.append(
            DeptCountRow(
                acronym=acronym,
                name=name,
                headcount=_whole_number(read_cell_number(row, header.column("headcount"))),
                quarter=normalize_quarter(read_cell_text(row, header.column("quarter"))),
                conversion_rate=normalize_percent(
                    read_cell_number(row, header.column("conversionrate"))
                ),
            )
        )
    return out


def parse_communication_timeline(matrix: Matrix, scan_rows: int = DEFAULT_SCAN_ROWS) -> list[TimelineRow]:
    header = find_header_row(matrix, TIMELINE_FIELDS, scan_rows)
    if header is None:
        return []

    out: list[TimelineRow] = []
    for row in matrix[header.row_index + 1:]:
        acronym = normalize_acronym(read_cell_text(row, header.column("dept")))
        if not acronym:
            continue
        out.append(
            TimelineRow(
                acronym=acronym,
                name=read_cell_text(row, header.column("fulldepartmentname")),
                quarter=normalize_quarter(read_cell_text(row, header.column("qtr"))),
                rollout_date=read_cell_date(row, header.column("rolloutdate")),
                owner=read_cell_text(row, header.column("commsteward")),
                note=read_cell_text(row, header.column("note")),
                count=_whole_number(read_cell_number(row, header.column("count"))),
                conversion_rate=normalize_percent(
                    read_cell_number(row, header.column("conversionrate"))
                ),
            )
        )
    return out
