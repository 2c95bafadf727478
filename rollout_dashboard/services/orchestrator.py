from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from ..config.loader import DashboardConfig
from ..errors import LoadError, NoUsableDataError
from ..excel.extractors import (
    SheetRole,
    classify_sheets,
    parse_communication_timeline,
    parse_corrected_names,
    parse_dept_counts,
    parse_quarter_themes,
)
from ..excel.reader import read_workbook_bytes
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.rows import DeptCountRow, ParsedWorkbook, TimelineRow
from ..models.snapshot import DashboardSnapshot, LoadMeta
from .aggregators import (
    build_forecast,
    build_health_stats,
    build_phase_stats,
    build_summary,
    build_timeline,
    sort_departments,
)
from .fetch import fetch_workbook
from .progress import SheetProgressTracker
from .reconciler import reconcile

logger = logging.getLogger(__name__)

"""Pipeline orchestration: workbook bytes -> DashboardSnapshot.

``build_snapshot`` is pure given its arguments (same bytes, same ``today``,
same ``loaded_at`` -> identical snapshot). ``load_snapshot`` wraps it with
the single fetch attempt and the load-level error policy: any failure yields
the empty snapshot plus a human readable message, never a partial dashboard.
"""

LOADING_MESSAGE = "Loading latest roadmap data..."


@dataclass(frozen=True)
class LoadResult:
    """Outcome of one load attempt; ``snapshot`` is empty when ``ok`` is False."""
    snapshot: DashboardSnapshot
    ok: bool
    message: str


def parse_workbook(
    matrices: Mapping[str, Sequence[Sequence[Any]]],
    config: DashboardConfig | None = None,
) -> ParsedWorkbook:
    """Run every extractor over the workbook's sheets, in workbook order.

    Raises:
        NoUsableDataError: Neither department-count nor timeline rows found
    """
    cfg = config or DashboardConfig()
    plan = classify_sheets(matrices.keys())

    corrected: dict[str, str] = {}
    themes: dict[str, str] = {}
    dept_rows: list[DeptCountRow] = []
    timeline_rows: list[TimelineRow] = []

    with SheetProgressTracker(len(matrices)) as progress:
        for sheet_name, matrix in matrices.items():
            progress.start_sheet(sheet_name)
            roles = plan.roles.get(sheet_name, ())
            if not roles:
                logger.debug("sheet '%s' has no recognised role", sheet_name)

            if SheetRole.CORRECTED_NAMES in roles:
                for row in parse_corrected_names(matrix, cfg.header_scan_rows):
                    corrected[row.acronym] = row.name
            if SheetRole.QUARTER_THEMES in roles:
                for theme in parse_quarter_themes(matrix):
                    themes[theme.quarter] = theme.theme
            if SheetRole.DEPT_COUNTS in roles:
                rows = parse_dept_counts(
                    matrix, cfg.header_scan_rows, cfg.summary_label_patterns
                )
                logger.info(f"sheet '{sheet_name}': {len(rows)} department rows")
                dept_rows.extend(rows)
            progress.finish_sheet(dept_rows=len(dept_rows))

    if plan.timeline_sheet is not None:
        timeline_rows.extend(
            parse_communication_timeline(matrices[plan.timeline_sheet], cfg.header_scan_rows)
        )
        logger.info(f"sheet '{plan.timeline_sheet}': {len(timeline_rows)} timeline rows")

    if not dept_rows and not timeline_rows:
        raise NoUsableDataError("No usable roadmap data found in workbook")

    return ParsedWorkbook(
        dept_rows=dept_rows,
        timeline_rows=timeline_rows,
        corrected_names=corrected,
        quarter_themes=themes,
        sheets_scanned=len(matrices),
        timeline_sheet=plan.timeline_sheet,
    )


def snapshot_from_parsed(
    parsed: ParsedWorkbook,
    *,
    source: str,
    today: date,
    config: DashboardConfig | None = None,
    loaded_at: datetime | None = None,
) -> DashboardSnapshot:
    cfg = config or DashboardConfig()
    departments = sort_departments(
        reconcile(
            parsed,
            today,
            at_risk_keywords=cfg.at_risk_keywords,
            watch_window_days=cfg.watch_window_days,
        )
    )
    return DashboardSnapshot(
        departments=tuple(departments),
        timeline=tuple(build_timeline(departments, today, cfg.timeline_limit)),
        phases=tuple(build_phase_stats(departments)),
        health=tuple(build_health_stats(departments)),
        forecast=build_forecast(departments, today, cfg.forecast_windows),
        summary=build_summary(departments),
        meta=LoadMeta(
            source=source,
            sheets_scanned=parsed.sheets_scanned,
            dept_rows=len(parsed.dept_rows),
            timeline_rows=len(parsed.timeline_rows),
            timeline_sheet=parsed.timeline_sheet,
            loaded_at=loaded_at,
        ),
    )


def build_snapshot(
    data: bytes,
    *,
    source: str,
    today: date,
    config: DashboardConfig | None = None,
    loaded_at: datetime | None = None,
) -> DashboardSnapshot:
    """Build model from bytes: read, extract, reconcile, aggregate.

    Raises:
        LoadError: Unreadable workbook or no usable rows
    """
    matrices = read_workbook_bytes(data)
    parsed = parse_workbook(matrices, config)
    return snapshot_from_parsed(
        parsed, source=source, today=today, config=config, loaded_at=loaded_at
    )


def format_loaded_at(value: datetime) -> str:
    """``Oct 18, 3:05 PM`` style timestamp."""
    hour = value.hour % 12 or 12
    return f"{value:%b} {value.day}, {hour}:{value:%M} {value:%p}"


def status_message(snapshot: DashboardSnapshot) -> str:
    if snapshot.is_empty:
        return LOADING_MESSAGE
    loaded = format_loaded_at(snapshot.meta.loaded_at) if snapshot.meta.loaded_at else "-"
    return f"Live data loaded ({snapshot.meta.sheets_scanned} sheets) • Updated {loaded}"


def load_snapshot(
    source: str | None = None,
    *,
    config: DashboardConfig | None = None,
    today: date | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> LoadResult:
    """Fetch the workbook once and build a snapshot.

    Failures never propagate: the result carries the empty snapshot and a
    ``Data load error: ...`` message, and the failure is appended to
    ``error_log`` when one is given.
    """
    cfg = config or DashboardConfig()
    src = source or cfg.workbook_source
    now = datetime.now()
    day = today or now.date()

    logger.info(f"loading workbook from: {src}")
    try:
        data = fetch_workbook(src, timeout_seconds=cfg.request_timeout_seconds)
        snapshot = build_snapshot(data, source=src, today=day, config=cfg, loaded_at=now)
    except LoadError as e:
        logger.error(f"load failed ({e.stage}): {e}")
        if error_log is not None:
            error_log.append(
                ErrorRecord.create(source=src, stage=e.stage, error_type=e.error_type, message=str(e))
            )
        return LoadResult(
            snapshot=DashboardSnapshot.empty(src),
            ok=False,
            message=f"Data load error: {e}",
        )

    return LoadResult(snapshot=snapshot, ok=True, message=status_message(snapshot))
