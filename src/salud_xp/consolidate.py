"""Consolidación diaria: snapshots por día, rachas e historial de XP."""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import asdict
from datetime import date, timedelta
from typing import Any

import pandas as pd

from salud_xp.glucose import get_glucose_status
from salud_xp.model import (
    DailyActivitySnapshot,
    DailyXPLog,
    GlucoseReading,
    WellnessLog,
)
from salud_xp.xp_system import (
    GLUCOSE_IN_RANGE_HIGH,
    GLUCOSE_IN_RANGE_LOW,
    MIN_REQUIRED_RECORDS,
    compute_daily_xp,
)

logger = logging.getLogger(__name__)

HISTORY_COLUMNS = [
    "date",
    "records_completed",
    "in_range_percent",
    "streak_days",
    "streak_multiplier",
    "base_xp",
    "final_xp",
    "total_xp",
]


def readings_to_frame(readings: Sequence[GlucoseReading]) -> pd.DataFrame:
    """Convert glucose readings to DataFrame with date/time, kind and status."""
    rows = [
        {
            "datetime": r.timestamp,
            "date": r.timestamp.date(),
            "time": r.timestamp.time().replace(second=0, microsecond=0),
            "glucose_mg_dl": r.mg_dl,
            "kind": r.kind,
            "status": get_glucose_status(r.mg_dl),
        }
        for r in readings
    ]
    df = pd.DataFrame(rows)
    if df.empty:
        return df
    return df.sort_values("datetime").reset_index(drop=True)


def daily_glucose_summary(glucose_events: pd.DataFrame) -> pd.DataFrame:
    """Aggregate glucose by day (count/min/max/avg/in-range count)."""
    columns = [
        "date",
        "glucose_count",
        "glucose_min",
        "glucose_max",
        "glucose_avg",
        "in_range_count",
    ]
    if glucose_events.empty:
        return pd.DataFrame(columns=columns)

    events = glucose_events.assign(
        in_range=glucose_events["glucose_mg_dl"].between(
            GLUCOSE_IN_RANGE_LOW, GLUCOSE_IN_RANGE_HIGH
        )
    )
    g = events.groupby("date", as_index=False).agg(
        glucose_count=("glucose_mg_dl", "count"),
        glucose_min=("glucose_mg_dl", "min"),
        glucose_max=("glucose_mg_dl", "max"),
        glucose_avg=("glucose_mg_dl", "mean"),
        in_range_count=("in_range", "sum"),
    )
    g["glucose_avg"] = g["glucose_avg"].round(2)
    g["in_range_count"] = g["in_range_count"].astype(int)
    return g[columns].sort_values("date").reset_index(drop=True)


def qualifying_days(readings: Iterable[GlucoseReading]) -> set[date]:
    """Days with at least ``MIN_REQUIRED_RECORDS`` glucose readings."""
    counts: dict[date, int] = defaultdict(int)
    for r in readings:
        counts[r.timestamp.date()] += 1
    return {day for day, n in counts.items() if n >= MIN_REQUIRED_RECORDS}


def streak_before(day: date, qualifying: set[date]) -> int:
    """Count consecutive qualifying days ending the day before ``day``."""
    streak = 0
    cursor = day - timedelta(days=1)
    while cursor in qualifying:
        streak += 1
        cursor -= timedelta(days=1)
    return streak


def group_by_day(
    items: Iterable[GlucoseReading] | Iterable[WellnessLog],
) -> dict[date, list[Any]]:
    """Bucket readings or wellness logs by their local calendar day."""
    by_day: dict[date, list[Any]] = defaultdict(list)
    for item in items:
        by_day[item.timestamp.date()].append(item)
    return dict(by_day)


def build_snapshot(
    day: date,
    readings: Iterable[GlucoseReading],
    wellness: Iterable[WellnessLog],
    *,
    streak_days: int,
    accumulated_xp: int,
) -> DailyActivitySnapshot:
    """Select ``day``'s glucose values and wellness flags into a snapshot."""
    day_readings = sorted(
        (r for r in readings if r.timestamp.date() == day),
        key=lambda r: r.timestamp,
    )
    categories = {w.category for w in wellness if w.timestamp.date() == day}
    return DailyActivitySnapshot(
        glucose_reading_values=tuple(r.mg_dl for r in day_readings),
        sleep_logged="sleep" in categories,
        stress_logged="stress" in categories,
        streak_days=streak_days,
        accumulated_xp_before_today=accumulated_xp,
    )


def replay_xp_history(
    readings: Sequence[GlucoseReading],
    wellness: Sequence[WellnessLog],
    start: date,
    end: date,
    *,
    accumulated_xp: int = 0,
) -> list[DailyXPLog]:
    """Award XP day by day from ``start`` to ``end`` (inclusive).

    Streaks look at every reading, not only those inside the window, so a
    short window does not reset a running streak.

    Args:
        readings: All known glucose readings.
        wellness: All known sleep/stress logs.
        start: First day to score.
        end: Last day to score.
        accumulated_xp: Lifetime XP earned before ``start``.

    Returns:
        One log per calendar day, in order.

    Raises:
        ValueError: If ``end`` is before ``start``.
    """
    if end < start:
        raise ValueError(f"end ({end}) is before start ({start})")

    qualifying = qualifying_days(readings)
    readings_by_day = group_by_day(readings)
    wellness_by_day = group_by_day(wellness)
    logs: list[DailyXPLog] = []
    total_xp = accumulated_xp
    day = start
    while day <= end:
        snapshot = build_snapshot(
            day,
            readings_by_day.get(day, []),
            wellness_by_day.get(day, []),
            streak_days=streak_before(day, qualifying),
            accumulated_xp=total_xp,
        )
        result = compute_daily_xp(snapshot)
        total_xp += result.final_xp
        logs.append(
            DailyXPLog(
                day=day,
                base_xp=result.base_xp,
                final_xp=result.final_xp,
                records_completed=result.records_completed,
                in_range_percent=result.in_range_percent,
                streak_days=result.streak_days,
                streak_multiplier=result.streak_multiplier,
                total_xp=total_xp,
            )
        )
        day += timedelta(days=1)

    logger.info(
        "Replayed %d days (%s..%s), total XP %d", len(logs), start, end, total_xp
    )
    return logs


def history_to_frame(logs: Sequence[DailyXPLog]) -> pd.DataFrame:
    """One row per replayed day, columns ``HISTORY_COLUMNS``."""
    if not logs:
        return pd.DataFrame(columns=HISTORY_COLUMNS)
    df = pd.DataFrame([asdict(log) for log in logs]).rename(columns={"day": "date"})
    df["in_range_percent"] = df["in_range_percent"].round(2)
    return df[HISTORY_COLUMNS]
