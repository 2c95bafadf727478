from __future__ import annotations

from datetime import date, datetime

import pytest

from rollout_dashboard.models import DeptCountRow, ParsedWorkbook, RolloutStatus, TimelineRow
from rollout_dashboard.models.department import NO_THEME
from rollout_dashboard.services.reconciler import derive_status, reconcile

TODAY = date(2024, 6, 15)


def dept_row(acronym="FIN", name="", headcount=0, quarter="", rate=None):
    return DeptCountRow(acronym=acronym, name=name, headcount=headcount, quarter=quarter, conversion_rate=rate)


def timeline_row(acronym="FIN", rollout_date=None, count=0, note="", owner="", quarter="", name="", rate=None):
    return TimelineRow(
        acronym=acronym,
        name=name,
        quarter=quarter,
        rollout_date=rollout_date,
        owner=owner,
        note=note,
        count=count,
        conversion_rate=rate,
    )


def by_acronym(departments):
    return {d.acronym: d for d in departments}


@pytest.mark.parametrize("first, second", [(10, 25), (25, 10)])
def test_headcount_is_the_maximum_regardless_of_order(first, second):
    parsed = ParsedWorkbook(dept_rows=[dept_row(headcount=first), dept_row(headcount=second)])
    (fin,) = reconcile(parsed, TODAY)
    assert fin.headcount == 25


def test_timeline_count_only_raises_headcount_when_positive():
    parsed = ParsedWorkbook(
        dept_rows=[dept_row(acronym="FIN", headcount=40), dept_row(acronym="HR", headcount=40)],
        timeline_rows=[timeline_row(acronym="FIN", count=0), timeline_row(acronym="HR", count=90)],
    )
    result = by_acronym(reconcile(parsed, TODAY))
    assert result["FIN"].headcount == 40
    assert result["HR"].headcount == 90


def test_latest_non_empty_name_wins_and_corrected_names_fill_gaps():
    parsed = ParsedWorkbook(
        dept_rows=[
            dept_row(acronym="FIN", name="Finance"),
            dept_row(acronym="FIN", name="Finance Division"),
            dept_row(acronym="FIN", name=""),
            dept_row(acronym="HR"),
        ],
        corrected_names={"FIN": "Corrected Finance", "HR": "Human Resources"},
    )
    result = by_acronym(reconcile(parsed, TODAY))
    assert result["FIN"].name == "Finance Division"
    assert result["HR"].name == "Human Resources"


def test_name_stays_empty_without_any_source():
    (ops,) = reconcile(ParsedWorkbook(timeline_rows=[timeline_row(acronym="OPS")]), TODAY)
    assert ops.name == ""


def test_first_quarter_wins_then_date_derivation():
    parsed = ParsedWorkbook(
        dept_rows=[dept_row(acronym="FIN", quarter="Q2"), dept_row(acronym="FIN", quarter="Q4")],
        timeline_rows=[
            timeline_row(acronym="FIN", quarter="Q3"),
            timeline_row(acronym="HR", rollout_date=datetime(2024, 11, 2, 12)),
        ],
        quarter_themes={"Q2": "Early adopters"},
    )
    result = by_acronym(reconcile(parsed, TODAY))
    assert result["FIN"].quarter == "Q2"
    assert result["FIN"].milestone_theme == "Early adopters"
    assert result["HR"].quarter == "Q4"
    assert result["HR"].milestone_theme == NO_THEME


def test_earliest_rollout_date_wins():
    parsed = ParsedWorkbook(
        timeline_rows=[
            timeline_row(rollout_date=datetime(2024, 9, 1, 12)),
            timeline_row(rollout_date=None),
            timeline_row(rollout_date=datetime(2024, 7, 1, 12)),
            timeline_row(rollout_date=datetime(2024, 8, 1, 12)),
        ]
    )
    (fin,) = reconcile(parsed, TODAY)
    assert fin.rollout_date == datetime(2024, 7, 1, 12)


def test_latest_non_null_conversion_rate_and_badge_users():
    parsed = ParsedWorkbook(
        dept_rows=[dept_row(headcount=100, rate=40.0)],
        timeline_rows=[timeline_row(rate=None), timeline_row(rate=62.5)],
    )
    (fin,) = reconcile(parsed, TODAY)
    assert fin.conversion_rate == 62.5
    # 62.5% of 100 rounds half up
    assert fin.badge_users == 63


def test_badge_users_zero_without_rate():
    (fin,) = reconcile(ParsedWorkbook(dept_rows=[dept_row(headcount=50)]), TODAY)
    assert fin.badge_users == 0


def test_first_seen_order_is_kept():
    parsed = ParsedWorkbook(
        dept_rows=[dept_row(acronym="HR"), dept_row(acronym="FIN")],
        timeline_rows=[timeline_row(acronym="OPS"), timeline_row(acronym="HR")],
    )
    assert [d.acronym for d in reconcile(parsed, TODAY)] == ["HR", "FIN", "OPS"]


def test_empty_workbook_gives_no_departments():
    assert reconcile(ParsedWorkbook(), TODAY) == []


@pytest.mark.parametrize(
    "rollout_date, note, expected",
    [
        (datetime(2024, 9, 1, 12), "Launch delayed by vendor", RolloutStatus.AT_RISK),
        (None, "", RolloutStatus.WATCH),
        (datetime(2024, 5, 1, 12), "", RolloutStatus.COMPLETE),
        (datetime(2024, 6, 20, 12), "", RolloutStatus.WATCH),
        (datetime(2024, 9, 1, 12), "", RolloutStatus.ON_TRACK),
        (datetime(2024, 6, 15, 12), "", RolloutStatus.WATCH),
        (datetime(2024, 7, 15, 12), "", RolloutStatus.WATCH),
        (datetime(2024, 7, 16, 12), "", RolloutStatus.ON_TRACK),
        (None, "OVERDUE", RolloutStatus.AT_RISK),
    ],
)
def test_derive_status(rollout_date, note, expected):
    assert derive_status(rollout_date, note, TODAY) is expected


def test_derive_status_uses_configured_keywords_and_window():
    assert derive_status(None, "blocked", TODAY, at_risk_keywords=["blocked"]) is RolloutStatus.AT_RISK
    assert derive_status(None, "delayed", TODAY, at_risk_keywords=["blocked"]) is RolloutStatus.WATCH
    d = datetime(2024, 7, 1, 12)
    assert derive_status(d, "", TODAY, watch_window_days=7) is RolloutStatus.ON_TRACK


def test_status_is_never_no_data_after_reconcile():
    parsed = ParsedWorkbook(
        dept_rows=[dept_row(acronym="A"), dept_row(acronym="B")],
        timeline_rows=[timeline_row(acronym="C", rollout_date=datetime(2024, 1, 1, 12))],
    )
    assert all(d.status is not RolloutStatus.NO_DATA for d in reconcile(parsed, TODAY))
