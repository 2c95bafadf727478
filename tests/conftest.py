# Shared pytest fixtures
from __future__ import annotations

import io
import tempfile
from datetime import date, datetime
from pathlib import Path

import pandas as pd
import pytest

from rollout_dashboard.logging.init import reset_logging

TODAY = date(2024, 6, 15)


def make_workbook_bytes(sheets: dict[str, list[list[object]]]) -> bytes:
    """Build an .xlsx in memory; every sheet is written without header/index."""
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        for sheet_name, rows in sheets.items():
            df = pd.DataFrame(rows)
            df.to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    return buffer.getvalue()


def roadmap_sheets() -> dict[str, list[list[object]]]:
    """A small but realistic roadmap workbook."""
    return {
        "Corrected Dept Names": [
            ["Abbreviation", "Full Department Name"],
            ["FIN", "Finance"],
            ["HR", "Human Resources"],
            ["OPS", "Operations"],
        ],
        "Quarterly Rollout": [
            ["Q1", "Pilot"],
            ["Q2", "Early adopters"],
            ["Q3", "Broad rollout"],
        ],
        "Dept Cnt": [
            ["Department counts", None, None, None, None],
            ["Abbreviation", "Full Department Name", "Headcount", "Quarter", "Conversion Rate"],
            ["FIN", "Finance Dept", 100, "Q2", 0.5],
            ["HR", "", 40, "", None],
            ["IT", "Information Technology", 25, "Q3", 80],
            [None, "Sum of headcount", 165, None, None],
            ["TOT", "Planned total", 999, None, None],
        ],
        "Communication Timeline v1": [
            ["Dept", "Rollout Date"],
            ["OLD", "2024-01-01"],
        ],
        "Communication Timeline v2": [
            ["Dept", "Full Department Name", "Qtr", "Rollout Date", "Comm Steward", "Note", "Count"],
            ["FIN", "", "", datetime(2024, 7, 10), "Alice", "", 120],
            ["HR", "", "", "2024-06-20", "Bob", "", 0],
            ["OPS", "", "", None, "", "", 10],
            ["IT", "", "", "2024-05-01", "Carol", "launch delayed", 0],
        ],
    }


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("ROLLOUT_WORKBOOK_SOURCE", raising=False)
        yield p


@pytest.fixture()
def today() -> date:
    return TODAY


@pytest.fixture()
def make_workbook():
    return make_workbook_bytes


@pytest.fixture()
def roadmap_bytes() -> bytes:
    return make_workbook_bytes(roadmap_sheets())


@pytest.fixture()
def roadmap_file(temp_workdir: Path, roadmap_bytes: bytes) -> Path:
    path = temp_workdir / "data" / "roadmap.xlsx"
    path.write_bytes(roadmap_bytes)
    return path


@pytest.fixture()
def sample_config_yaml() -> str:
    return """workbook_source: ./data/roadmap.xlsx
header_scan_rows: 30
timeline_limit: 12
forecast_windows: [30, 90]
summary_label_patterns: [sum of, planned, remaining, need]
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "dashboard.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg
