"""Modelos tipados para registros diarios, XP y estadísticas de glucosa."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Literal

WellnessCategory = Literal["sleep", "stress"]


@dataclass(frozen=True)
class GlucoseReading:
    """One glucose measurement event (timestamped)."""

    timestamp: datetime
    mg_dl: float
    kind: str | None = None


@dataclass(frozen=True)
class WellnessLog:
    """A sleep or stress record; only its existence per day matters for XP."""

    timestamp: datetime
    category: WellnessCategory


@dataclass(frozen=True)
class DailyActivitySnapshot:
    """Everything the score engine needs to know about one day."""

    glucose_reading_values: tuple[float, ...] = ()
    sleep_logged: bool = False
    stress_logged: bool = False
    streak_days: int = 0
    accumulated_xp_before_today: int = 0


@dataclass(frozen=True)
class XPBreakdown:
    """XP per component, before the streak multiplier."""

    records_xp: int
    base_records_xp: int
    extra_records_xp: int
    in_range_xp: int
    wellness_xp: int


@dataclass(frozen=True)
class LevelInfo:
    """Current tier and progress bar values."""

    level: int
    title: str
    current_level_xp: int
    next_level_threshold: int
    progress_percent: float


@dataclass(frozen=True)
class DailyXPResult:
    """Daily XP award with breakdown, streak and level readout."""

    base_xp: int
    final_xp: int
    breakdown: XPBreakdown
    streak_days: int
    streak_multiplier: float
    records_completed: int
    min_required_records: int
    has_min_records: bool
    in_range_percent: float
    has_sleep_logged: bool
    has_stress_logged: bool
    level_info: LevelInfo
    max_daily_xp: int


@dataclass(frozen=True)
class DailyXPLog:
    """One replayed day of XP history."""

    day: date
    base_xp: int
    final_xp: int
    records_completed: int
    in_range_percent: float
    streak_days: int
    streak_multiplier: float
    total_xp: int


@dataclass(frozen=True)
class PeriodStats:
    """Glucose statistics for a date range."""

    count: int
    avg: int
    min: float
    max: float
    in_range_count: int
    in_range_percent: int
    total_days: int
    days_with_records: int
    days_with_records_percent: int
    avg_takes_per_day: float
    std_dev: int
