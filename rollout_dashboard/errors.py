"""Load-level error types.

Row-level problems in a workbook never raise; only failures that make a
whole load unusable are represented here. Callers treat every ``LoadError``
the same way (clear state, show the message), so the subclasses exist for
logging and the error log's ``error_type`` column, not for control flow.
"""

from __future__ import annotations

__all__ = [
    "FetchError",
    "LoadError",
    "NoUsableDataError",
    "WorkbookReadError",
]


class LoadError(Exception):
    """Base class for failures that abort a dashboard load."""

    stage = "load"
    error_type = "LOAD_ERROR"


class FetchError(LoadError):
    """Workbook could not be retrieved (network, HTTP status, file access)."""

    stage = "fetch"
    error_type = "FETCH_ERROR"


class WorkbookReadError(LoadError):
    """Workbook bytes could not be parsed, or no parser engine is installed."""

    stage = "read"
    error_type = "WORKBOOK_READ_ERROR"


class NoUsableDataError(LoadError):
    """No recognised sheet produced a department or timeline row."""

    stage = "extract"
    error_type = "NO_USABLE_DATA"
