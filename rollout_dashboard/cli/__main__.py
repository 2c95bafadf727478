from __future__ import annotations

import argparse
import sys
from datetime import date
from pathlib import Path

from dotenv import load_dotenv

from rollout_dashboard.config.loader import DEFAULT_CONFIG_PATH, ConfigError, DashboardConfig, load_config
from rollout_dashboard.errors import LoadError
from rollout_dashboard.excel.extractors import classify_sheets
from rollout_dashboard.excel.reader import read_workbook_bytes
from rollout_dashboard.logging.error_log import ErrorLogBuffer
from rollout_dashboard.logging.init import log_summary, set_debug, setup_logging
from rollout_dashboard.services.fetch import fetch_workbook
from rollout_dashboard.services.orchestrator import load_snapshot
from rollout_dashboard.services.summary import render_dashboard, render_summary_line, snapshot_to_json

"""CLI entrypoint.

Flow:
- Load ``.env`` (``ROLLOUT_WORKBOOK_SOURCE`` may be set there)
- Load config (``--config``; the default path is optional)
- Fetch and parse the workbook once, build the snapshot
- Print the dashboard and the SUMMARY line, optionally export JSON

Exit codes: 0 loaded, 1 fatal startup error (arguments, config), 2 load failure.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_LOAD_FAILED = 2


def _load_env_file(path: Path) -> None:
    """Load .env without overriding variables already set in the process."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=False)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Department rollout readiness dashboard")
    p.add_argument("--config", type=Path, default=None, help=f"YAML config (default: {DEFAULT_CONFIG_PATH})")
    p.add_argument("--source", default=None, help="Workbook URL or path (overrides config)")
    p.add_argument("--today", type=date.fromisoformat, default=None, help="Reference date YYYY-MM-DD")
    p.add_argument("--json", type=Path, default=None, dest="json_path", help="Write snapshot JSON here")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print sheet roles & first rows then exit")
    return p.parse_args(argv)


def _inspect_data(cfg: DashboardConfig) -> int:
    try:
        data = fetch_workbook(cfg.workbook_source, timeout_seconds=cfg.request_timeout_seconds)
        matrices = read_workbook_bytes(data)
    except LoadError as e:
        print(f"inspect: {e}")
        return EXIT_LOAD_FAILED

    plan = classify_sheets(matrices.keys())
    print(f"FILE: {cfg.workbook_source}")
    for sname, matrix in matrices.items():
        roles = ",".join(r.value for r in plan.roles.get(sname, ())) or "-"
        print(f"  SHEET: {sname} roles={roles} rows={len(matrix)}")
        for row in matrix[:3]:
            print("    ", [v.isoformat() if hasattr(v, "isoformat") else v for v in row])
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # Only read sys.argv when no list was passed (tests call main([]))
    if argv is None:
        argv = sys.argv[1:]
    try:
        args = _parse_args(argv)
    except SystemExit as e:
        # usage errors exit 1, not argparse's 2
        if e.code in (0, None):
            return EXIT_SUCCESS
        logger.error("arguments: invalid command line")
        return EXIT_FATAL
    _load_env_file(Path(".env"))

    config_path = args.config or DEFAULT_CONFIG_PATH
    try:
        cfg = load_config(config_path, required=args.config is not None)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL
    cfg = cfg.with_source(args.source)

    if args.debug:
        set_debug(True)
        logger.debug("debug mode enabled")

    if args.inspect_data:
        return _inspect_data(cfg)

    error_log = ErrorLogBuffer()
    result = load_snapshot(config=cfg, today=args.today, error_log=error_log)

    if result.ok:
        logger.info(result.message)
    else:
        logger.error(result.message)
        log_path = error_log.flush()
        if log_path is not None:
            logger.info(f"error log written: {log_path}")

    for line in render_dashboard(result.snapshot):
        print(line)

    if args.json_path is not None and result.ok:
        args.json_path.parent.mkdir(parents=True, exist_ok=True)
        args.json_path.write_text(snapshot_to_json(result.snapshot) + "\n", encoding="utf-8")
        logger.info(f"snapshot written: {args.json_path}")

    # log_summary adds the "SUMMARY " label itself
    log_summary(render_summary_line(result.snapshot)[len("SUMMARY "):])
    return EXIT_SUCCESS if result.ok else EXIT_LOAD_FAILED


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
