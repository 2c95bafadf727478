from __future__ import annotations

from datetime import date, datetime

import pytest

from rollout_dashboard.models import Department, RolloutStatus
from rollout_dashboard.models.department import NO_THEME
from rollout_dashboard.services.aggregators import (
    build_forecast,
    build_health_stats,
    build_phase_stats,
    build_summary,
    build_timeline,
    sort_departments,
    sort_departments_by,
)

TODAY = date(2024, 6, 15)


def make_dept(
    acronym,
    headcount=0,
    rollout_date=None,
    quarter="",
    rate=None,
    badge_users=0,
    status=RolloutStatus.WATCH,
    theme=NO_THEME,
    name="",
):
    return Department(
        acronym=acronym,
        name=name,
        headcount=headcount,
        quarter=quarter,
        rollout_date=rollout_date,
        owner="",
        note="",
        conversion_rate=rate,
        milestone_theme=theme,
        status=status,
        badge_users=badge_users,
    )


def noon(y, m, d):
    return datetime(y, m, d, 12)


def test_sort_departments_headcount_desc_then_acronym():
    depts = [make_dept("OPS", 10), make_dept("HR", 40), make_dept("FIN", 40), make_dept("IT", 25)]
    assert [d.acronym for d in sort_departments(depts)] == ["FIN", "HR", "IT", "OPS"]


def test_sort_departments_by_puts_missing_values_last():
    depts = [
        make_dept("A", rollout_date=noon(2024, 9, 1)),
        make_dept("B"),
        make_dept("C", rollout_date=noon(2024, 7, 1)),
    ]
    assert [d.acronym for d in sort_departments_by(depts, "rollout_date")] == ["C", "A", "B"]
    assert [d.acronym for d in sort_departments_by(depts, "rollout_date", descending=True)] == ["A", "C", "B"]


def test_sort_departments_by_text_is_case_insensitive():
    depts = [make_dept("A", name="beta"), make_dept("B", name="Alpha")]
    assert [d.acronym for d in sort_departments_by(depts, "name")] == ["B", "A"]


def test_sort_departments_by_rejects_unknown_key():
    with pytest.raises(ValueError):
        sort_departments_by([], "owner")


def test_timeline_lists_upcoming_in_date_order_with_limit():
    depts = [
        make_dept("LATE", rollout_date=noon(2024, 12, 1), quarter="Q4"),
        make_dept("PAST", rollout_date=noon(2024, 1, 1)),
        make_dept("SOON", rollout_date=noon(2024, 6, 15), theme="Early adopters"),
        make_dept("NEXT", rollout_date=noon(2024, 7, 1)),
        make_dept("NODATE"),
    ]
    timeline = build_timeline(depts, TODAY, limit=2)
    assert [e.department for e in timeline] == ["SOON", "NEXT"]
    assert timeline[0].milestone == "Early adopters"
    assert timeline[1].milestone == "Unspecified rollout"
    assert timeline[0].status == "Watch"

    full = build_timeline(depts, TODAY)
    assert [e.department for e in full] == ["SOON", "NEXT", "LATE"]
    assert full[2].milestone == "Q4 rollout"


def test_timeline_falls_back_to_past_rollouts():
    depts = [
        make_dept("B", rollout_date=noon(2024, 3, 1)),
        make_dept("A", rollout_date=noon(2024, 2, 1)),
    ]
    assert [e.department for e in build_timeline(depts, TODAY)] == ["A", "B"]


def test_timeline_empty_without_dates():
    assert build_timeline([make_dept("A")], TODAY) == []


def test_phase_stats_sorted_with_unspecified_last():
    depts = [
        make_dept("A", 10),
        make_dept("B", 20, quarter="Q3"),
        make_dept("C", 5, quarter="Q1"),
        make_dept("D", 7, quarter="Q3"),
    ]
    stats = build_phase_stats(depts)
    assert [(s.phase, s.total, s.headcount) for s in stats] == [
        ("Q1", 1, 5),
        ("Q3", 2, 27),
        ("Unspecified", 1, 10),
    ]
    assert sum(s.total for s in stats) == len(depts)


def test_health_stats_follow_status_order_and_skip_zero():
    depts = [
        make_dept("A", status=RolloutStatus.COMPLETE),
        make_dept("B", status=RolloutStatus.AT_RISK),
        make_dept("C", status=RolloutStatus.COMPLETE),
    ]
    stats = build_health_stats(depts)
    assert [(s.label, s.count) for s in stats] == [("At Risk", 1), ("Complete", 2)]


def test_forecast_windows_are_inclusive():
    depts = [
        make_dept("IN30", 100, rollout_date=noon(2024, 7, 10)),
        make_dept("EDGE30", 1, rollout_date=noon(2024, 7, 15)),
        make_dept("IN90", 50, rollout_date=noon(2024, 9, 13)),
        make_dept("OUT", 5, rollout_date=noon(2024, 9, 14)),
        make_dept("PAST", 5, rollout_date=noon(2024, 6, 1)),
        make_dept("NONE", 5),
    ]
    forecast = build_forecast(depts, TODAY)
    assert forecast.near_days == 30
    assert forecast.near_count == 2
    assert forecast.near_headcount == 101
    assert forecast.far_days == 90
    assert forecast.far_count == 3
    # past rollouts are neither upcoming nor unscheduled
    assert forecast.unscheduled == 1


def test_forecast_custom_windows():
    depts = [make_dept("A", 10, rollout_date=noon(2024, 6, 22))]
    forecast = build_forecast(depts, TODAY, windows=(7, 14))
    assert (forecast.near_count, forecast.far_count) == (1, 1)
    forecast = build_forecast(depts, TODAY, windows=(5, 14))
    assert (forecast.near_count, forecast.far_count) == (0, 1)


def test_summary_conversion_rate():
    depts = [
        make_dept("A", 100, rate=50.0, badge_users=50, rollout_date=noon(2024, 7, 1)),
        make_dept("B", 50),
    ]
    summary = build_summary(depts)
    assert summary.departments == 2
    assert summary.total_headcount == 150
    assert summary.with_dates == 1
    assert summary.conversion_dept_count == 1
    assert summary.total_badge_users == 50
    assert summary.conversion_rate == pytest.approx(33.333, rel=1e-3)
    assert summary.to_dict()["conversion_rate"] == 33.3


def test_summary_zero_headcount_is_zero_rate():
    summary = build_summary([make_dept("A", 0, rate=80.0)])
    assert summary.conversion_rate == 0.0
    assert summary.conversion_dept_count == 0


def test_summary_of_nothing():
    summary = build_summary([])
    assert summary.departments == 0
    assert summary.conversion_rate == 0.0
