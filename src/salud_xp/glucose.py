"""Rangos de glucosa, clasificación de lecturas y estadísticas por período."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import date
from typing import Literal

import pandas as pd

from salud_xp.model import GlucoseReading, PeriodStats
from salud_xp.xp_system import (
    GLUCOSE_IN_RANGE_HIGH,
    GLUCOSE_IN_RANGE_LOW,
    round_half_up,
)

GlucoseStatus = Literal["critical_low", "low", "normal", "high", "critical_high"]

GLUCOSE_RANGES: dict[str, int] = {
    "critical_low": 54,
    "low": GLUCOSE_IN_RANGE_LOW,
    "high": GLUCOSE_IN_RANGE_HIGH,
    "critical_high": 250,
}


def get_glucose_status(value: float) -> GlucoseStatus:
    """Classify a mg/dL value against ``GLUCOSE_RANGES``."""
    if value < GLUCOSE_RANGES["critical_low"]:
        return "critical_low"
    if value < GLUCOSE_RANGES["low"]:
        return "low"
    if value <= GLUCOSE_RANGES["high"]:
        return "normal"
    if value <= GLUCOSE_RANGES["critical_high"]:
        return "high"
    return "critical_high"


def calculate_period_stats(
    readings: Sequence[GlucoseReading],
    start: date,
    end: date,
) -> PeriodStats | None:
    """Summarize readings between ``start`` and ``end`` (both inclusive).

    Readings are assumed to be already filtered to the period; ``start`` and
    ``end`` only define how many calendar days the period spans.

    Args:
        readings: Glucose readings in the period.
        start: First day of the period.
        end: Last day of the period.

    Returns:
        Period statistics, or None when there are no readings.
    """
    if not readings:
        return None

    values = pd.Series([r.mg_dl for r in readings], dtype="float64")
    in_range_count = int(
        values.between(GLUCOSE_IN_RANGE_LOW, GLUCOSE_IN_RANGE_HIGH).sum()
    )
    total_days = (end - start).days + 1
    days_with_records = len({r.timestamp.date() for r in readings})
    count = len(values)

    return PeriodStats(
        count=count,
        avg=round_half_up(float(values.mean())),
        min=float(values.min()),
        max=float(values.max()),
        in_range_count=in_range_count,
        in_range_percent=round_half_up(in_range_count / count * 100),
        total_days=total_days,
        days_with_records=days_with_records,
        days_with_records_percent=round_half_up(
            days_with_records / total_days * 100
        ),
        avg_takes_per_day=round_half_up(count / total_days * 10) / 10,
        std_dev=round_half_up(float(values.std(ddof=0))),
    )
