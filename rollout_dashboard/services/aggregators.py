from __future__ import annotations

from collections.abc import Sequence
from datetime import date, timedelta
from typing import Any

from rollout_dashboard.excel.normalize import UNSPECIFIED_QUARTER, quarter_sort_value
from rollout_dashboard.models.department import NO_THEME, Department, RolloutStatus
from rollout_dashboard.models.snapshot import (
    Forecast,
    HealthStat,
    PhaseStat,
    Summary,
    TimelineEntry,
)

"""Aggregators over finalised departments.

Every function here is a pure function of its arguments. ``today`` is
always passed in explicitly; windows are measured in whole calendar days
from it.
"""

__all__ = [
    "build_forecast",
    "build_health_stats",
    "build_phase_stats",
    "build_summary",
    "build_timeline",
    "sort_departments",
    "sort_departments_by",
]

SORT_KEYS = (
    "acronym",
    "name",
    "headcount",
    "badge_users",
    "conversion_rate",
    "quarter",
    "rollout_date",
    "status",
)


def sort_departments(departments: Sequence[Department]) -> list[Department]:
    """Display order: headcount descending, then acronym ascending."""
    return sorted(departments, key=lambda d: (-d.headcount, d.acronym))


def _sortable(dept: Department, key: str) -> Any:
    if key == "status":
        return dept.status.value
    if key == "rollout_date":
        return dept.rollout_date
    value = getattr(dept, key)
    if isinstance(value, str):
        return value.lower()
    return value


def sort_departments_by(
    departments: Sequence[Department], key: str, descending: bool = False
) -> list[Department]:
    """Sort for an interactive table; missing values always sort last."""
    if key not in SORT_KEYS:
        raise ValueError(f"unsupported sort key: {key}")
    present = [d for d in departments if _sortable(d, key) is not None]
    missing = [d for d in departments if _sortable(d, key) is None]
    present.sort(key=lambda d: _sortable(d, key), reverse=descending)
    return present + missing


def build_timeline(
    departments: Sequence[Department], today: date, limit: int = 12
) -> list[TimelineEntry]:
    """Upcoming rollouts, or the earliest ones overall when none are upcoming."""
    with_dates = sorted(
        (d for d in departments if d.rollout_date is not None),
        key=lambda d: (d.rollout_date, d.acronym),
    )
    upcoming = [d for d in with_dates if d.rollout_date.date() >= today]
    source = upcoming or with_dates

    entries: list[TimelineEntry] = []
    for d in source[:limit]:
        if d.milestone_theme != NO_THEME:
            milestone = d.milestone_theme
        else:
            milestone = f"{d.quarter or UNSPECIFIED_QUARTER} rollout"
        entries.append(
            TimelineEntry(
                department=d.acronym,
                date=d.rollout_date,
                milestone=milestone,
                status=d.status.value,
            )
        )
    return entries


def build_phase_stats(departments: Sequence[Department]) -> list[PhaseStat]:
    totals: dict[str, list[int]] = {}
    for d in departments:
        phase = d.quarter or UNSPECIFIED_QUARTER
        bucket = totals.setdefault(phase, [0, 0])
        bucket[0] += 1
        bucket[1] += d.headcount
    stats = [PhaseStat(phase=p, total=t, headcount=h) for p, (t, h) in totals.items()]
    return sorted(stats, key=lambda s: (quarter_sort_value(s.phase), s.phase))


def build_health_stats(departments: Sequence[Department]) -> list[HealthStat]:
    counters = {status: 0 for status in RolloutStatus}
    for d in departments:
        counters[d.status] += 1
    return [HealthStat(label=s.value, count=c) for s, c in counters.items() if c > 0]


def build_forecast(
    departments: Sequence[Department],
    today: date,
    windows: tuple[int, int] = (30, 90),
) -> Forecast:
    """Scheduled departments falling in ``[today, today + window]`` (inclusive)."""
    near_end = today + timedelta(days=windows[0])
    far_end = today + timedelta(days=windows[1])

    scheduled = [d for d in departments if d.rollout_date is not None]
    near = [d for d in scheduled if today <= d.rollout_date.date() <= near_end]
    far = [d for d in scheduled if today <= d.rollout_date.date() <= far_end]

    return Forecast(
        near_days=windows[0],
        near_count=len(near),
        near_headcount=sum(d.headcount for d in near),
        far_days=windows[1],
        far_count=len(far),
        unscheduled=len(departments) - len(scheduled),
    )


def build_summary(departments: Sequence[Department]) -> Summary:
    total_headcount = sum(d.headcount for d in departments)
    total_badge_users = sum(d.badge_users for d in departments)
    conversion_rate = (total_badge_users / total_headcount * 100) if total_headcount > 0 else 0.0
    return Summary(
        departments=len(departments),
        total_headcount=total_headcount,
        with_dates=sum(1 for d in departments if d.rollout_date is not None),
        conversion_dept_count=sum(
            1 for d in departments if d.conversion_rate is not None and d.headcount > 0
        ),
        total_badge_users=total_badge_users,
        conversion_rate=conversion_rate,
    )
