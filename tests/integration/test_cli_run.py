from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

from rollout_dashboard.cli import main as cli_main

"""CLI runs against a real workbook in a temp working directory."""


def test_run_with_default_config(write_config: Path, roadmap_file: Path, capsys):
    code = cli_main(["--today", "2024-06-15"])
    out = capsys.readouterr().out
    assert code == 0
    assert "INFO loading workbook from: ./data/roadmap.xlsx" in out
    assert "INFO Live data loaded (5 sheets)" in out
    assert "  FIN | 120 | 60 | 50.0% | Q2 | Jul 10, 2024 | Watch" in out
    assert "  Jun 20, 2024 - HR [Watch] Early adopters" in out
    assert "  Next 30 Days: 2 depts" in out
    assert out.rstrip().splitlines()[-1] == (
        "SUMMARY departments=4 headcount=195 with_dates=3 badge_users=80 conversion_pct=41.0 sheets=5"
    )


def test_source_flag_and_json_export(temp_workdir: Path, roadmap_file: Path, capsys):
    out_path = temp_workdir / "out" / "snapshot.json"
    code = cli_main(
        ["--source", str(roadmap_file), "--today", "2024-06-15", "--json", str(out_path)]
    )
    assert code == 0
    payload = json.loads(out_path.read_text(encoding="utf-8"))
    assert [d["acronym"] for d in payload["departments"]] == ["FIN", "HR", "IT", "OPS"]
    assert payload["departments"][0]["rollout_date"] == "2024-07-10"
    assert payload["summary"]["conversion_rate"] == 41.0
    assert payload["forecast"]["near_count"] == 2
    assert payload["meta"]["timeline_sheet"] == "Communication Timeline v2"
    assert "snapshot written" in capsys.readouterr().out


def test_env_file_sets_source(temp_workdir: Path, roadmap_file: Path, capsys):
    (temp_workdir / ".env").write_text(f"ROLLOUT_WORKBOOK_SOURCE={roadmap_file}\n", encoding="utf-8")
    # dotenv writes straight into os.environ
    with patch.dict(os.environ):
        code = cli_main(["--today", "2024-06-15"])
    assert code == 0
    assert f"loading workbook from: {roadmap_file}" in capsys.readouterr().out


def test_inspect_data(temp_workdir: Path, roadmap_file: Path, capsys):
    code = cli_main(["--source", str(roadmap_file), "--inspect-data"])
    out = capsys.readouterr().out
    assert code == 0
    assert "SHEET: Dept Cnt roles=dept_counts rows=7" in out
    assert "SHEET: Communication Timeline v2 roles=timeline" in out
    assert "SHEET: Communication Timeline v1 roles=- " in out


def test_debug_flag(temp_workdir: Path, roadmap_file: Path, capsys):
    code = cli_main(["--source", str(roadmap_file), "--today", "2024-06-15", "--debug"])
    out = capsys.readouterr().out
    assert code == 0
    assert "DEBUG debug mode enabled" in out
    assert "DEBUG dept count row" in out
