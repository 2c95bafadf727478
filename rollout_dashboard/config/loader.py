from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

"""Config loader for the rollout dashboard.

Responsibilities:
- Load the YAML config (default ``config/dashboard.yml``)
- Validate it against the JSON schema shipped next to this module
- Apply defaults for every optional key
- Let ``ROLLOUT_WORKBOOK_SOURCE`` override ``workbook_source``
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/dashboard.yml")
SOURCE_ENV_VAR = "ROLLOUT_WORKBOOK_SOURCE"

DEFAULT_WORKBOOK_SOURCE = "data/Mobile%20Credentials%20Departments.xlsx"
DEFAULT_SUMMARY_LABEL_PATTERNS = (
    "sum of",
    "cummulative",
    "each quarter",
    "planned",
    "remaining",
    "need",
)
DEFAULT_AT_RISK_KEYWORDS = ("missed", "delay", "overdue", "risk")


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class DashboardConfig:
    """Settings for one dashboard load.

    Every field except ``workbook_source`` only tunes heuristics; the
    defaults reproduce the stock dashboard behaviour.
    """
    workbook_source: str = DEFAULT_WORKBOOK_SOURCE
    header_scan_rows: int = 30
    timeline_limit: int = 12
    watch_window_days: int = 30
    forecast_windows: tuple[int, int] = (30, 90)
    summary_label_patterns: tuple[str, ...] = field(default=DEFAULT_SUMMARY_LABEL_PATTERNS)
    at_risk_keywords: tuple[str, ...] = field(default=DEFAULT_AT_RISK_KEYWORDS)
    request_timeout_seconds: float = 30.0

    def with_source(self, source: str | None) -> DashboardConfig:
        if not source:
            return self
        return replace(self, workbook_source=source)


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: If the schema file is missing or unreadable, or the
            config data violates it (unknown keys, wrong types, bad ranges).
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")

    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def config_from_mapping(data: dict[str, Any]) -> DashboardConfig:
    """Build a DashboardConfig from an already validated mapping."""
    defaults = DashboardConfig()
    windows = data.get("forecast_windows")
    return DashboardConfig(
        workbook_source=data.get("workbook_source", defaults.workbook_source),
        header_scan_rows=int(data.get("header_scan_rows", defaults.header_scan_rows)),
        timeline_limit=int(data.get("timeline_limit", defaults.timeline_limit)),
        watch_window_days=int(data.get("watch_window_days", defaults.watch_window_days)),
        forecast_windows=(int(windows[0]), int(windows[1])) if windows else defaults.forecast_windows,
        summary_label_patterns=tuple(
            data.get("summary_label_patterns", defaults.summary_label_patterns)
        ),
        at_risk_keywords=tuple(data.get("at_risk_keywords", defaults.at_risk_keywords)),
        request_timeout_seconds=float(
            data.get("request_timeout_seconds", defaults.request_timeout_seconds)
        ),
    )


def load_config(path: Path, *, required: bool = True) -> DashboardConfig:
    """Load, validate and default the dashboard configuration.

    Args:
        path: YAML config file
        required: When False a missing file yields the defaults instead of
            an error

    Raises:
        ConfigError: Missing file (when required), invalid YAML or schema
            violation
    """
    if not path.exists():
        if required:
            raise ConfigError(f"config file not found: {path}")
        data: Any = {}
    else:
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"invalid yaml: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")

    _validate_config_schema(data)
    cfg = config_from_mapping(data)

    env_source = os.getenv(SOURCE_ENV_VAR)
    if env_source:
        cfg = cfg.with_source(env_source)
    return cfg
