"""Domain models for the rollout readiness dashboard.

Cells and extraction rows describe what was read from the workbook;
departments and snapshot types describe what the dashboard shows.
"""

from .cells import Cell, DateCell, EmptyCell, NumberCell, TextCell
from .department import NO_THEME, Department, DepartmentRecord, RolloutStatus
from .error_record import ErrorRecord
from .rows import CorrectedName, DeptCountRow, ParsedWorkbook, QuarterTheme, TimelineRow
from .snapshot import (
    DashboardSnapshot,
    Forecast,
    HealthStat,
    LoadMeta,
    PhaseStat,
    Summary,
    TimelineEntry,
)

__all__ = [
    # Cell variants
    "Cell",
    "DateCell",
    "EmptyCell",
    "NumberCell",
    "TextCell",
    # Extraction rows
    "CorrectedName",
    "DeptCountRow",
    "ParsedWorkbook",
    "QuarterTheme",
    "TimelineRow",
    # Departments
    "NO_THEME",
    "Department",
    "DepartmentRecord",
    "RolloutStatus",
    # Snapshot
    "DashboardSnapshot",
    "Forecast",
    "HealthStat",
    "LoadMeta",
    "PhaseStat",
    "Summary",
    "TimelineEntry",
    # Errors
    "ErrorRecord",
]
