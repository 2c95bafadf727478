from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime

from ..excel.normalize import round_half_up
from ..models.snapshot import DashboardSnapshot, Summary

"""Text rendering of a dashboard snapshot.

Produces the KPI cards, the section blocks printed by the CLI, the
machine-readable SUMMARY line and the JSON export. Nothing here computes new
figures; it only formats what the aggregators produced.
"""

EMPTY_VALUE = "-"


@dataclass(frozen=True)
class KpiCard:
    label: str
    value: str
    trend: str


def format_number(value: float | int | None) -> str:
    """Thousands-separated whole number: 12345.6 -> '12,346'."""
    return f"{round_half_up(value or 0):,}"


def format_percent(value: float) -> str:
    return f"{value:.1f}%"


def format_date(value: datetime) -> str:
    """``Jun 5, 2024`` style date."""
    return f"{value:%b} {value.day}, {value.year}"


def build_kpi_cards(summary: Summary | None) -> list[KpiCard]:
    if summary is None:
        return []
    conversion = (
        format_percent(summary.conversion_rate) if summary.total_headcount > 0 else EMPTY_VALUE
    )
    return [
        KpiCard("Departments", format_number(summary.departments), "Using acronym-keyed department records"),
        KpiCard("Total Headcount", format_number(summary.total_headcount), "Headcount from roadmap sheets"),
        KpiCard(
            "With Rollout Dates",
            format_number(summary.with_dates),
            "Departments with a scheduled rollout date",
        ),
        KpiCard("Digital Badge", format_number(summary.total_badge_users), "Derived from Excel conversion rates"),
        KpiCard(
            "Conversion Rate",
            conversion,
            f"{format_number(summary.total_badge_users)} / {format_number(summary.total_headcount)} across all depts",
        ),
    ]


def render_dashboard(snapshot: DashboardSnapshot) -> list[str]:
    """Plain-text dashboard, one string per output line."""
    lines: list[str] = []

    lines.append("KPIs")
    cards = build_kpi_cards(snapshot.summary)
    if not cards:
        lines.append("  Roadmap data is not available yet.")
    for card in cards:
        lines.append(f"  {card.label}: {card.value} ({card.trend})")

    lines.append("Phases")
    if not snapshot.phases:
        lines.append("  No quarter/phase data found.")
    for p in snapshot.phases:
        lines.append(f"  {p.phase}: {p.total} depts, headcount {format_number(p.headcount)}")

    lines.append("Health")
    if not snapshot.health:
        lines.append("  No health distribution available.")
    for h in snapshot.health:
        lines.append(f"  {h.label}: {h.count}")

    lines.append("Forecast")
    f = snapshot.forecast
    if f is None or not snapshot.departments:
        lines.append("  No forecast available.")
    else:
        lines.append(f"  Next {f.near_days} Days: {f.near_count} depts")
        lines.append(f"  {f.near_days}-Day Headcount: {format_number(f.near_headcount)}")
        lines.append(f"  Next {f.far_days} Days: {f.far_count} depts")
        lines.append(f"  Unscheduled: {f.unscheduled} depts")

    lines.append("Timeline")
    if not snapshot.timeline:
        lines.append("  No rollout dates found.")
    else:
        first, last = snapshot.timeline[0].date, snapshot.timeline[-1].date
        lines.append(f"  {format_date(first)} to {format_date(last)}")
        for item in snapshot.timeline:
            lines.append(f"  {format_date(item.date)} - {item.department} [{item.status}] {item.milestone}")

    lines.append("Departments")
    if not snapshot.departments:
        lines.append("  No department data available.")
    for d in snapshot.departments:
        known = d.conversion_rate is not None
        lines.append(
            "  "
            + " | ".join(
                [
                    d.acronym,
                    format_number(d.headcount),
                    format_number(d.badge_users) if known else EMPTY_VALUE,
                    format_percent(d.conversion_rate) if known else EMPTY_VALUE,
                    d.quarter or EMPTY_VALUE,
                    format_date(d.rollout_date) if d.rollout_date else EMPTY_VALUE,
                    d.status.value,
                ]
            )
        )
    return lines


def render_summary_line(snapshot: DashboardSnapshot) -> str:
    """Render the SUMMARY line.

    Format:
    SUMMARY departments={n} headcount={n} with_dates={n} badge_users={n}
    conversion_pct={x.x} sheets={n}

    Examples:
        >>> render_summary_line(DashboardSnapshot.empty("wb.xlsx"))
        'SUMMARY departments=0 headcount=0 with_dates=0 badge_users=0 conversion_pct=0.0 sheets=0'
    """
    s = snapshot.summary
    if s is None:
        s = Summary(0, 0, 0, 0, 0, 0.0)
    return (
        f"SUMMARY departments={s.departments} "
        f"headcount={s.total_headcount} "
        f"with_dates={s.with_dates} "
        f"badge_users={s.total_badge_users} "
        f"conversion_pct={s.conversion_rate:.1f} "
        f"sheets={snapshot.meta.sheets_scanned}"
    )


def snapshot_to_json(snapshot: DashboardSnapshot) -> str:
    return json.dumps(snapshot.to_dict(), ensure_ascii=False, indent=2)
