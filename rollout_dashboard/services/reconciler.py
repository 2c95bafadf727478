from __future__ import annotations

from collections.abc import Iterable
from datetime import date, datetime

from rollout_dashboard.config.loader import DEFAULT_AT_RISK_KEYWORDS
from rollout_dashboard.excel.normalize import quarter_from_date, round_half_up
from rollout_dashboard.models.department import (
    NO_THEME,
    Department,
    DepartmentRecord,
    RolloutStatus,
)
from rollout_dashboard.models.rows import DeptCountRow, ParsedWorkbook, TimelineRow

"""Record reconciler: extraction rows -> one Department per acronym.

Merge order is fixed: all department-count rows in file order, then all
timeline rows in file order. Field rules:

- name, owner, note: latest non-empty value wins
- headcount: running maximum (timeline ``count`` only when > 0)
- quarter: first non-empty value wins, derived from the rollout date at
  finalisation if still empty
- rollout_date: earliest date seen
- conversion_rate: latest non-null value wins

Finalisation fills the name from the corrected-names lookup, then derives
milestone theme, status and badge users.
"""

__all__ = [
    "derive_status",
    "merge_dept_row",
    "merge_timeline_row",
    "reconcile",
]


def merge_dept_row(dept: DepartmentRecord, row: DeptCountRow) -> None:
    dept.name = row.name or dept.name
    dept.headcount = max(dept.headcount, row.headcount)
    dept.quarter = dept.quarter or row.quarter
    if row.conversion_rate is not None:
        dept.conversion_rate = row.conversion_rate


def merge_timeline_row(dept: DepartmentRecord, row: TimelineRow) -> None:
    dept.name = row.name or dept.name
    if row.count > 0:
        dept.headcount = max(dept.headcount, row.count)
    dept.quarter = dept.quarter or row.quarter
    dept.owner = row.owner or dept.owner
    dept.note = row.note or dept.note
    if row.conversion_rate is not None:
        dept.conversion_rate = row.conversion_rate
    if row.rollout_date is not None and (
        dept.rollout_date is None or row.rollout_date < dept.rollout_date
    ):
        dept.rollout_date = row.rollout_date


def derive_status(
    rollout_date: datetime | None,
    note: str,
    today: date,
    *,
    at_risk_keywords: Iterable[str] = DEFAULT_AT_RISK_KEYWORDS,
    watch_window_days: int = 30,
) -> RolloutStatus:
    """Classify rollout health; first matching rule wins.

    1. note mentions an at-risk keyword -> At Risk
    2. no rollout date -> Watch
    3. rollout date before today -> Complete
    4. rollout within ``watch_window_days`` (inclusive) -> Watch
    5. otherwise -> On Track
    """
    note_text = (note or "").lower()
    if any(k.lower() in note_text for k in at_risk_keywords):
        return RolloutStatus.AT_RISK

    if rollout_date is None:
        return RolloutStatus.WATCH

    rollout_day = rollout_date.date()
    if rollout_day < today:
        return RolloutStatus.COMPLETE
    if (rollout_day - today).days <= watch_window_days:
        return RolloutStatus.WATCH
    return RolloutStatus.ON_TRACK


def _badge_users(dept: DepartmentRecord) -> int:
    if dept.conversion_rate is None or dept.headcount <= 0:
        return 0
    return round_half_up(dept.conversion_rate / 100 * dept.headcount)


def reconcile(
    parsed: ParsedWorkbook,
    today: date,
    *,
    at_risk_keywords: Iterable[str] = DEFAULT_AT_RISK_KEYWORDS,
    watch_window_days: int = 30,
) -> list[Department]:
    """Merge all extraction rows and return finalised departments.

    The result is in first-seen order; display ordering is the
    aggregators' job.
    """
    records: dict[str, DepartmentRecord] = {}

    def record_for(acronym: str) -> DepartmentRecord:
        if acronym not in records:
            records[acronym] = DepartmentRecord(acronym=acronym)
        return records[acronym]

    for dept_row in parsed.dept_rows:
        merge_dept_row(record_for(dept_row.acronym), dept_row)
    for timeline_row in parsed.timeline_rows:
        merge_timeline_row(record_for(timeline_row.acronym), timeline_row)

    keywords = tuple(at_risk_keywords)
    finalized: list[Department] = []
    for dept in records.values():
        if not dept.name:
            dept.name = parsed.corrected_names.get(dept.acronym, "")
        if not dept.quarter and dept.rollout_date is not None:
            dept.quarter = quarter_from_date(dept.rollout_date)
        dept.milestone_theme = parsed.quarter_themes.get(dept.quarter, NO_THEME) if dept.quarter else NO_THEME
        dept.status = derive_status(
            dept.rollout_date,
            dept.note,
            today,
            at_risk_keywords=keywords,
            watch_window_days=watch_window_days,
        )
        dept.badge_users = _badge_users(dept)
        finalized.append(dept.freeze())
    return finalized
