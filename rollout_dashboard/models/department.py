from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

"""Department domain models.

The reconciler builds one ``DepartmentRecord`` per acronym and mutates it
while rows are merged. Once every row has been consumed the record is
finalised and frozen into a ``Department``, which is what the snapshot and
the aggregators see.
"""

__all__ = [
    "NO_THEME",
    "Department",
    "DepartmentRecord",
    "RolloutStatus",
]

# Sentinel for a department whose quarter has no milestone theme
NO_THEME = "-"


class RolloutStatus(Enum):
    """Derived health classification of a department rollout.

    Declaration order is the order used by the health histogram.
    """
    AT_RISK = "At Risk"
    WATCH = "Watch"
    ON_TRACK = "On Track"
    COMPLETE = "Complete"
    NO_DATA = "No Data"


@dataclass
class DepartmentRecord:
    """Mutable merge target, keyed by normalised acronym."""
    acronym: str
    name: str = ""
    headcount: int = 0
    quarter: str = ""
    rollout_date: datetime | None = None
    owner: str = ""
    note: str = ""
    conversion_rate: float | None = None
    milestone_theme: str = NO_THEME
    status: RolloutStatus = RolloutStatus.NO_DATA
    badge_users: int = 0

    def freeze(self) -> Department:
        return Department(
            acronym=self.acronym,
            name=self.name,
            headcount=self.headcount,
            quarter=self.quarter,
            rollout_date=self.rollout_date,
            owner=self.owner,
            note=self.note,
            conversion_rate=self.conversion_rate,
            milestone_theme=self.milestone_theme,
            status=self.status,
            badge_users=self.badge_users,
        )


@dataclass(frozen=True)
class Department:
    """Finalised, read-only department record."""
    acronym: str
    name: str
    headcount: int
    quarter: str
    rollout_date: datetime | None
    owner: str
    note: str
    conversion_rate: float | None
    milestone_theme: str
    status: RolloutStatus
    badge_users: int

    def to_dict(self) -> dict[str, object]:
        return {
            "acronym": self.acronym,
            "name": self.name,
            "headcount": self.headcount,
            "quarter": self.quarter,
            "rollout_date": self.rollout_date.date().isoformat() if self.rollout_date else None,
            "owner": self.owner,
            "note": self.note,
            "conversion_rate": self.conversion_rate,
            "milestone_theme": self.milestone_theme,
            "status": self.status.value,
            "badge_users": self.badge_users,
        }
