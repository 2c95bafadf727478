#!/usr/bin/env python3
"""Sample roadmap workbook generator.

Writes a synthetic roadmap workbook with the sheet layout the dashboard
recognises, for demos and performance checks:
- Corrected Dept Names: acronym -> official name
- Quarterly Rollout: quarter -> milestone theme (no header)
- Dept Cnt: title row, header row, one row per department plus summary rows
- Communication Timeline v2: rollout dates, stewards, notes, counts
"""
from __future__ import annotations

import argparse
import string
import sys
from datetime import date, timedelta
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

THEMES = ["Pilot", "Early adopters", "Broad rollout", "Legacy cutover"]
STEWARDS = ["Alice", "Bob", "Carol", "Dan", "Erin", ""]
NOTES = ["", "", "", "on schedule", "waiting on readers", "launch delayed", "missed kickoff"]


def _acronym(i: int) -> str:
    letters = string.ascii_uppercase
    return f"{letters[i // 676 % 26]}{letters[i // 26 % 26]}{letters[i % 26]}"


def generate_roadmap_sheets(
    departments: int, start: date, seed: int = 42
) -> dict[str, list[list[Any]]]:
    """Build the sheet matrices for ``departments`` synthetic departments.

    Args:
        departments: Number of departments
        start: First possible rollout date; dates spread over one year
        seed: Random seed for reproducible data

    Returns:
        Sheet name -> row lists, in workbook order
    """
    np.random.seed(seed)
    acronyms = [_acronym(i) for i in range(departments)]

    corrected = [["Abbreviation", "Full Department Name"]]
    corrected += [[a, f"Department of {a}"] for a in acronyms]

    themes = [[f"Q{i + 1}", t] for i, t in enumerate(THEMES)]

    counts: list[list[Any]] = [
        ["Department headcount", None, None, None, None],
        ["Abbreviation", "Full Department Name", "Headcount", "Quarter", "Conversion Rate"],
    ]
    headcounts = np.random.randint(5, 2000, departments)
    for a, hc in zip(acronyms, headcounts):
        quarter = f"Q{np.random.randint(1, 5)}" if np.random.rand() < 0.8 else ""
        rate = round(float(np.random.uniform(0, 1)), 2) if np.random.rand() < 0.6 else None
        counts.append([a, "", int(hc), quarter, rate])
    counts.append([None, "Sum of headcount", int(headcounts.sum()), None, None])
    counts.append(["REM", "Remaining to convert", None, None, None])

    timeline: list[list[Any]] = [
        ["Dept", "Qtr", "Rollout Date", "Comm Steward", "Note", "Count"],
    ]
    for a in acronyms:
        if np.random.rand() < 0.85:
            rollout = start + timedelta(days=int(np.random.randint(0, 365)))
            rollout_cell: Any = pd.Timestamp(rollout)
        else:
            rollout_cell = None
        timeline.append(
            [
                a,
                "",
                rollout_cell,
                str(np.random.choice(STEWARDS)),
                str(np.random.choice(NOTES)),
                0,
            ]
        )

    return {
        "Corrected Dept Names": corrected,
        "Quarterly Rollout": themes,
        "Dept Cnt": counts,
        "Communication Timeline v2": timeline,
    }


def write_workbook(output_path: Path, sheets: dict[str, list[list[Any]]]) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
        for sheet_name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate a synthetic roadmap workbook",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s data/roadmap.xlsx
  %(prog)s data/large.xlsx --departments 2000 --start 2024-01-01 --seed 7
        """,
    )
    parser.add_argument("output", type=Path, help="Output .xlsx path")
    parser.add_argument("--departments", type=int, default=60, help="Number of departments (default: 60)")
    parser.add_argument(
        "--start",
        type=date.fromisoformat,
        default=date.today(),
        help="Earliest rollout date YYYY-MM-DD (default: today)",
    )
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.departments <= 0:
        print("Error: --departments must be positive", file=sys.stderr)
        return 1
    if args.departments > 26 ** 3:
        print(f"Error: at most {26 ** 3} departments", file=sys.stderr)
        return 1

    write_workbook(args.output, generate_roadmap_sheets(args.departments, args.start, args.seed))
    print(f"Created workbook: {args.output} ({args.departments} departments)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
