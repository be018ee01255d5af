from __future__ import annotations

import math

import pytest

from salud_xp.model import DailyActivitySnapshot
from salud_xp.xp_system import (
    MAX_DAILY_XP,
    MIN_REQUIRED_RECORDS,
    XPValidationError,
    calculate_in_range_xp,
    calculate_records_xp,
    calculate_wellness_xp,
    compute_daily_xp,
    get_current_level,
    get_streak_multiplier,
    round_half_up,
)


def test_zero_activity_baseline() -> None:
    result = compute_daily_xp(DailyActivitySnapshot())
    assert result.base_xp == 0
    assert result.final_xp == 0
    assert result.level_info.level == 1
    assert result.level_info.title == "Principiante"
    assert result.has_min_records is False
    assert result.in_range_percent == 0


def test_minimum_completion_bonus() -> None:
    result = compute_daily_xp(
        DailyActivitySnapshot(glucose_reading_values=(95.0, 150.0))
    )
    assert result.breakdown.records_xp == 40
    assert result.breakdown.in_range_xp == 30
    assert result.breakdown.wellness_xp == 0
    assert result.base_xp == 70
    assert result.final_xp == 70
    assert result.has_min_records is True
    assert result.min_required_records == MIN_REQUIRED_RECORDS


def test_extra_records_add_linearly_regardless_of_range() -> None:
    result = compute_daily_xp(
        DailyActivitySnapshot(glucose_reading_values=(100, 120, 40, 250, 300))
    )
    assert result.breakdown.base_records_xp == 40
    assert result.breakdown.extra_records_xp == 15
    assert result.breakdown.records_xp == 55
    assert result.records_completed == 5


def test_streak_multiplier_scales_final_xp() -> None:
    values = (100.0, 120.0)
    no_streak = compute_daily_xp(
        DailyActivitySnapshot(glucose_reading_values=values, sleep_logged=True)
    )
    streak = compute_daily_xp(
        DailyActivitySnapshot(
            glucose_reading_values=values, sleep_logged=True, streak_days=10
        )
    )
    assert streak.base_xp == no_streak.base_xp == 75
    assert streak.streak_multiplier == pytest.approx(1.3)
    assert streak.final_xp == round_half_up(streak.base_xp * 1.3) == 98
    assert streak.final_xp >= no_streak.final_xp


def test_in_range_rounding_boundary() -> None:
    percent, xp = calculate_in_range_xp([100.0, 40.0, 250.0])
    assert percent == pytest.approx(33.33, abs=0.01)
    assert xp == 10


def test_in_range_half_rounds_up() -> None:
    # 75% of 30 = 22.5
    _, xp = calculate_in_range_xp([100.0, 110.0, 120.0, 300.0])
    assert xp == 23


def test_in_range_bounds_are_inclusive() -> None:
    percent, xp = calculate_in_range_xp([70.0, 180.0])
    assert percent == 100
    assert xp == 30
    percent, xp = calculate_in_range_xp([69.9, 180.1])
    assert percent == 0
    assert xp == 0


def test_in_range_empty() -> None:
    assert calculate_in_range_xp([]) == (0.0, 0)


def test_records_xp_table() -> None:
    assert calculate_records_xp(0) == (0, 0, 0)
    assert calculate_records_xp(1) == (20, 0, 20)
    assert calculate_records_xp(2) == (40, 0, 40)
    assert calculate_records_xp(12) == (40, 50, 90)


def test_wellness_xp_is_additive() -> None:
    assert calculate_wellness_xp(False, False) == 0
    assert calculate_wellness_xp(True, False) == 5
    assert calculate_wellness_xp(False, True) == 5
    assert calculate_wellness_xp(True, True) == 10


def test_streak_multiplier_never_below_one() -> None:
    assert get_streak_multiplier(0) == 1
    assert get_streak_multiplier(1) == pytest.approx(1.03)


def test_level_boundary_at_300() -> None:
    assert get_current_level(299).level == 1
    info = get_current_level(300)
    assert info.level == 2
    assert info.title == "En Progreso"
    assert info.current_level_xp == 0
    assert info.next_level_threshold == 299


def test_level_boundary_reached_through_daily_award() -> None:
    # The smallest non-zero daily award is 5 XP, so 299 + 1 cannot happen;
    # 280 + 20 lands on the same 300 boundary.
    result = compute_daily_xp(
        DailyActivitySnapshot(
            glucose_reading_values=(250.0,), accumulated_xp_before_today=280
        )
    )
    assert result.final_xp == 20
    assert result.level_info.level == 2
    assert result.level_info.title == "En Progreso"


def test_level_progress_within_first_tier() -> None:
    info = get_current_level(150)
    assert info.current_level_xp == 150
    assert info.progress_percent == pytest.approx(150 / 299 * 100)


def test_max_level_saturation() -> None:
    result = compute_daily_xp(
        DailyActivitySnapshot(accumulated_xp_before_today=5000)
    )
    assert result.level_info.level == 5
    assert result.level_info.title == "Maestro del Control"
    assert result.level_info.next_level_threshold == 300
    assert result.level_info.progress_percent == 100


def test_top_tier_progress_before_saturation() -> None:
    info = get_current_level(1350)
    assert info.level == 5
    assert info.current_level_xp == 150
    assert info.progress_percent == pytest.approx(50.0)


def test_identical_input_gives_identical_output() -> None:
    snapshot = DailyActivitySnapshot(
        glucose_reading_values=(65.0, 110.0, 190.0),
        sleep_logged=True,
        stress_logged=True,
        streak_days=4,
        accumulated_xp_before_today=612,
    )
    assert compute_daily_xp(snapshot) == compute_daily_xp(snapshot)


def test_max_daily_xp_is_not_a_cap() -> None:
    result = compute_daily_xp(
        DailyActivitySnapshot(
            glucose_reading_values=(100.0,) * 8,
            sleep_logged=True,
            stress_logged=True,
            streak_days=5,
        )
    )
    assert result.max_daily_xp == MAX_DAILY_XP == 80
    assert result.base_xp == 110
    assert result.final_xp > MAX_DAILY_XP


@pytest.mark.parametrize(
    "snapshot",
    [
        DailyActivitySnapshot(streak_days=-1),
        DailyActivitySnapshot(accumulated_xp_before_today=-5),
        DailyActivitySnapshot(glucose_reading_values=(100.0, math.nan)),
        DailyActivitySnapshot(glucose_reading_values=(math.inf,)),
        DailyActivitySnapshot(glucose_reading_values=("110",)),  # type: ignore[arg-type]
        DailyActivitySnapshot(streak_days=True),
        DailyActivitySnapshot(sleep_logged=1),  # type: ignore[arg-type]
    ],
)
def test_out_of_contract_input_fails_fast(snapshot: DailyActivitySnapshot) -> None:
    with pytest.raises(XPValidationError):
        compute_daily_xp(snapshot)


def test_validation_error_is_value_error() -> None:
    with pytest.raises(ValueError, match="streak_days"):
        get_streak_multiplier(-2)


def test_round_half_up() -> None:
    assert round_half_up(2.5) == 3
    assert round_half_up(22.5) == 23
    assert round_half_up(2.49) == 2
    assert round_half_up(0.0) == 0
