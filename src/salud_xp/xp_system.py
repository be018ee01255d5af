"""Sistema de XP: puntaje diario, multiplicador de racha y niveles.

Funciones puras, sin estado ni I/O. Todas las entradas llegan en un
``DailyActivitySnapshot`` armado por quien llama (ver ``consolidate``).
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from numbers import Integral, Real

from salud_xp.model import (
    DailyActivitySnapshot,
    DailyXPResult,
    LevelInfo,
    XPBreakdown,
)

MIN_REQUIRED_RECORDS = 2

FIRST_RECORD_XP = 20
SECOND_RECORD_XP = 20
EXTRA_RECORD_XP = 5
IN_RANGE_MAX_XP = 30
SLEEP_LOG_XP = 5
STRESS_LOG_XP = 5

STREAK_MULTIPLIER_PER_DAY = 0.03

GLUCOSE_IN_RANGE_LOW = 70
GLUCOSE_IN_RANGE_HIGH = 180

# Width given to the open-ended top tier for progress-bar purposes.
TOP_LEVEL_WIDTH = 300


@dataclass(frozen=True)
class XPLevel:
    """One row of the level table (inclusive bounds)."""

    level: int
    title: str
    min: int
    max: float


XP_LEVELS: tuple[XPLevel, ...] = (
    XPLevel(level=1, title="Principiante", min=0, max=299),
    XPLevel(level=2, title="En Progreso", min=300, max=599),
    XPLevel(level=3, title="Aprendiz Avanzado", min=600, max=899),
    XPLevel(level=4, title="Experto en Glucemia", min=900, max=1199),
    XPLevel(level=5, title="Maestro del Control", min=1200, max=math.inf),
)

# "Complete day" target shown in the UI; not enforced on final XP.
MAX_DAILY_XP = (
    FIRST_RECORD_XP
    + SECOND_RECORD_XP
    + IN_RANGE_MAX_XP
    + SLEEP_LOG_XP
    + STRESS_LOG_XP
)


class XPValidationError(ValueError):
    """Raised when a snapshot violates the engine's input contract."""


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from -inf (2.5 -> 3)."""
    return math.floor(value + 0.5)


def calculate_records_xp(records_completed: int) -> tuple[int, int, int]:
    """XP for the number of glucose records logged today.

    Returns:
        ``(base_xp, extra_xp, total)``.
    """
    _require_count("records_completed", records_completed)
    if records_completed == 0:
        return 0, 0, 0

    base_xp = FIRST_RECORD_XP
    if records_completed >= 2:
        base_xp += SECOND_RECORD_XP
    extra_xp = max(0, records_completed - MIN_REQUIRED_RECORDS) * EXTRA_RECORD_XP
    return base_xp, extra_xp, base_xp + extra_xp


def calculate_in_range_xp(values: Sequence[float]) -> tuple[float, int]:
    """Percent of readings within [70, 180] mg/dL and the XP it earns.

    Returns:
        ``(in_range_percent, in_range_xp)``; the percent is not rounded.
    """
    _require_glucose_values(values)
    if not values:
        return 0.0, 0

    in_range_count = sum(
        1 for v in values if GLUCOSE_IN_RANGE_LOW <= v <= GLUCOSE_IN_RANGE_HIGH
    )
    in_range_percent = in_range_count / len(values) * 100
    in_range_xp = round_half_up(in_range_percent / 100 * IN_RANGE_MAX_XP)
    return in_range_percent, in_range_xp


def calculate_wellness_xp(sleep_logged: bool, stress_logged: bool) -> int:
    """Flat bonus for logging sleep and/or stress."""
    wellness_xp = 0
    if sleep_logged:
        wellness_xp += SLEEP_LOG_XP
    if stress_logged:
        wellness_xp += STRESS_LOG_XP
    return wellness_xp


def get_streak_multiplier(streak_days: int) -> float:
    """+3% per consecutive streak day; never below 1."""
    _require_count("streak_days", streak_days)
    return 1 + streak_days * STREAK_MULTIPLIER_PER_DAY


def get_current_level(total_xp: int) -> LevelInfo:
    """Find the tier for ``total_xp`` and the progress within it."""
    _require_count("total_xp", total_xp)
    # The last tier is unbounded, so a match always exists.
    tier = next(t for t in XP_LEVELS if total_xp <= t.max)
    level_start = tier.min
    level_end = (
        tier.min + TOP_LEVEL_WIDTH if math.isinf(tier.max) else int(tier.max)
    )
    current_level_xp = total_xp - level_start
    width = level_end - level_start
    progress = min(100.0, current_level_xp / width * 100)
    return LevelInfo(
        level=tier.level,
        title=tier.title,
        current_level_xp=current_level_xp,
        next_level_threshold=width,
        progress_percent=max(0.0, progress),
    )


def compute_daily_xp(snapshot: DailyActivitySnapshot) -> DailyXPResult:
    """Convert one day of activity into an XP award and level readout.

    Args:
        snapshot: Today's glucose values, wellness flags, streak and the
            lifetime XP earned before today.

    Returns:
        The daily result; ``final_xp`` is ``base_xp`` scaled by the streak
        multiplier and rounded half-up.

    Raises:
        XPValidationError: If the snapshot breaks the input contract.
    """
    validate_snapshot(snapshot)

    values = snapshot.glucose_reading_values
    records_completed = len(values)
    base_records_xp, extra_records_xp, records_xp = calculate_records_xp(
        records_completed
    )
    in_range_percent, in_range_xp = calculate_in_range_xp(values)
    wellness_xp = calculate_wellness_xp(
        snapshot.sleep_logged, snapshot.stress_logged
    )

    base_xp = records_xp + in_range_xp + wellness_xp
    streak_multiplier = get_streak_multiplier(snapshot.streak_days)
    final_xp = round_half_up(base_xp * streak_multiplier)

    total_xp = snapshot.accumulated_xp_before_today + final_xp
    return DailyXPResult(
        base_xp=base_xp,
        final_xp=final_xp,
        breakdown=XPBreakdown(
            records_xp=records_xp,
            base_records_xp=base_records_xp,
            extra_records_xp=extra_records_xp,
            in_range_xp=in_range_xp,
            wellness_xp=wellness_xp,
        ),
        streak_days=snapshot.streak_days,
        streak_multiplier=streak_multiplier,
        records_completed=records_completed,
        min_required_records=MIN_REQUIRED_RECORDS,
        has_min_records=records_completed >= MIN_REQUIRED_RECORDS,
        in_range_percent=in_range_percent,
        has_sleep_logged=snapshot.sleep_logged,
        has_stress_logged=snapshot.stress_logged,
        level_info=get_current_level(total_xp),
        max_daily_xp=MAX_DAILY_XP,
    )


def validate_snapshot(snapshot: DailyActivitySnapshot) -> None:
    """Fail fast on out-of-contract input instead of scoring garbage.

    Raises:
        XPValidationError: On negative counts, non-boolean flags or
            non-finite glucose values.
    """
    _require_glucose_values(snapshot.glucose_reading_values)
    for name in ("sleep_logged", "stress_logged"):
        if not isinstance(getattr(snapshot, name), bool):
            raise XPValidationError(f"{name} must be a bool")
    _require_count("streak_days", snapshot.streak_days)
    _require_count(
        "accumulated_xp_before_today", snapshot.accumulated_xp_before_today
    )


def _require_count(name: str, value: object) -> None:
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise XPValidationError(f"{name} must be an integer, got {value!r}")
    if value < 0:
        raise XPValidationError(f"{name} must be >= 0, got {value}")


def _require_glucose_values(values: Sequence[float]) -> None:
    for idx, value in enumerate(values):
        if isinstance(value, bool) or not isinstance(value, Real):
            raise XPValidationError(
                f"glucose value at position {idx} is not a number: {value!r}"
            )
        if not math.isfinite(value):
            raise XPValidationError(
                f"glucose value at position {idx} is not finite: {value!r}"
            )
