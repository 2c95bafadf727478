from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .department import Department

"""Dashboard snapshot models.

A ``DashboardSnapshot`` is the complete derived state of one workbook load.
It is rebuilt from scratch on every load and never updated in place; the
presentation layer keeps a reference to the current snapshot and swaps it
wholesale.
"""

__all__ = [
    "DashboardSnapshot",
    "Forecast",
    "HealthStat",
    "LoadMeta",
    "PhaseStat",
    "Summary",
    "TimelineEntry",
]


def _iso_date(value: datetime | None) -> str | None:
    return value.date().isoformat() if value is not None else None


@dataclass(frozen=True)
class TimelineEntry:
    department: str
    date: datetime
    milestone: str
    status: str

    def to_dict(self) -> dict[str, object]:
        return {
            "department": self.department,
            "date": _iso_date(self.date),
            "milestone": self.milestone,
            "status": self.status,
        }


@dataclass(frozen=True)
class PhaseStat:
    phase: str  # Q1..Q4 or "Unspecified"
    total: int
    headcount: int

    def to_dict(self) -> dict[str, object]:
        return {"phase": self.phase, "total": self.total, "headcount": self.headcount}


@dataclass(frozen=True)
class HealthStat:
    label: str
    count: int

    def to_dict(self) -> dict[str, object]:
        return {"label": self.label, "count": self.count}


@dataclass(frozen=True)
class Forecast:
    """Rollout forecast relative to a fixed day.

    ``near`` and ``far`` are inclusive windows of ``near_days`` / ``far_days``
    calendar days starting today (30 and 90 by default).

    ``unscheduled`` counts departments with no rollout date at all; a
    department scheduled in the past lands in none of the buckets.
    """
    near_days: int
    near_count: int
    near_headcount: int
    far_days: int
    far_count: int
    unscheduled: int

    def to_dict(self) -> dict[str, object]:
        return {
            "near_days": self.near_days,
            "near_count": self.near_count,
            "near_headcount": self.near_headcount,
            "far_days": self.far_days,
            "far_count": self.far_count,
            "unscheduled": self.unscheduled,
        }


@dataclass(frozen=True)
class Summary:
    departments: int
    total_headcount: int
    with_dates: int
    conversion_dept_count: int
    total_badge_users: int
    conversion_rate: float  # percent, unrounded

    def to_dict(self) -> dict[str, object]:
        return {
            "departments": self.departments,
            "total_headcount": self.total_headcount,
            "with_dates": self.with_dates,
            "conversion_dept_count": self.conversion_dept_count,
            "total_badge_users": self.total_badge_users,
            "conversion_rate": round(self.conversion_rate, 1),
        }


@dataclass(frozen=True)
class LoadMeta:
    source: str
    sheets_scanned: int = 0
    dept_rows: int = 0
    timeline_rows: int = 0
    timeline_sheet: str | None = None
    loaded_at: datetime | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "source": self.source,
            "sheets_scanned": self.sheets_scanned,
            "dept_rows": self.dept_rows,
            "timeline_rows": self.timeline_rows,
            "timeline_sheet": self.timeline_sheet,
            "loaded_at": self.loaded_at.isoformat() if self.loaded_at else None,
        }


@dataclass(frozen=True)
class DashboardSnapshot:
    """Immutable derived state of one workbook load."""
    meta: LoadMeta
    departments: tuple[Department, ...] = field(default_factory=tuple)
    timeline: tuple[TimelineEntry, ...] = field(default_factory=tuple)
    phases: tuple[PhaseStat, ...] = field(default_factory=tuple)
    health: tuple[HealthStat, ...] = field(default_factory=tuple)
    forecast: Forecast | None = None
    summary: Summary | None = None

    @staticmethod
    def empty(source: str) -> DashboardSnapshot:
        """Empty-state snapshot shown after a failed load."""
        return DashboardSnapshot(meta=LoadMeta(source=source))

    @property
    def is_empty(self) -> bool:
        return self.summary is None

    def to_dict(self) -> dict[str, object]:
        return {
            "departments": [d.to_dict() for d in self.departments],
            "timeline": [t.to_dict() for t in self.timeline],
            "phases": [p.to_dict() for p in self.phases],
            "health": [h.to_dict() for h in self.health],
            "forecast": self.forecast.to_dict() if self.forecast else None,
            "summary": self.summary.to_dict() if self.summary else None,
            "meta": self.meta.to_dict(),
        }
