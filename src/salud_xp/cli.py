"""CLI para calcular el XP diario a partir de la exportación de registros."""

from __future__ import annotations

import argparse
import logging
from datetime import date, datetime, timedelta
from pathlib import Path

from dateutil import tz

from salud_xp.config import load_config
from salud_xp.consolidate import (
    build_snapshot,
    history_to_frame,
    qualifying_days,
    replay_xp_history,
    streak_before,
)
from salud_xp.excel_writer import ExcelLayout, write_xp_xlsx
from salud_xp.glucose import calculate_period_stats
from salud_xp.model import DailyXPResult, PeriodStats
from salud_xp.sources.daily_log import DailyLogPaths, DailyLogSource
from salud_xp.xp_system import compute_daily_xp, round_half_up

logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        Parsed argparse namespace.
    """
    parser = argparse.ArgumentParser(
        description="XP diario: registros de glucosa, sueño y estrés."
    )
    parser.add_argument(
        "--base-dir",
        default=str(Path.home() / "proyectos" / "salud"),
        help="Directorio base (default: ~/proyectos/salud).",
    )
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Día a puntuar, YYYY-MM-DD (default: hoy).",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=None,
        help="Días de historial a recalcular (default: configuración, 30).",
    )
    parser.add_argument(
        "--accumulated-xp",
        type=int,
        default=0,
        help="XP acumulado antes del primer día del historial.",
    )
    parser.add_argument(
        "--export",
        action="store_true",
        help="Exportar el historial de XP a Excel.",
    )
    parser.add_argument("--verbose", action="store_true", help="Logging INFO.")
    return parser.parse_args()


def format_summary(result: DailyXPResult) -> list[str]:
    """Render a day's XP result as Spanish text lines."""
    b = result.breakdown
    level = result.level_info
    min_ok = " OK" if result.has_min_records else ""
    lines = [
        f"XP de hoy: +{result.final_xp} XP",
        f"Progreso diario: {round_half_up(daily_progress_percent(result))}%",
        (
            f"Registros: {result.records_completed} "
            f"(min. {result.min_required_records}{min_ok}) +{b.records_xp} XP"
        ),
        f"En rango: {round_half_up(result.in_range_percent)}% +{b.in_range_xp} XP",
        (
            f"Sueno: {_check(result.has_sleep_logged)} "
            f"Estres: {_check(result.has_stress_logged)} +{b.wellness_xp} XP"
        ),
    ]
    if result.streak_days > 0:
        lines.append(
            f"Racha {result.streak_days}d: x{result.streak_multiplier:.2f} "
            f"({result.base_xp} -> {result.final_xp} XP)"
        )
    lines.append(
        f"Nivel {level.level} - {level.title}: "
        f"{level.current_level_xp}/{level.next_level_threshold} XP "
        f"({round_half_up(level.progress_percent)}%)"
    )
    return lines


def daily_progress_percent(result: DailyXPResult) -> float:
    """Share of the day's target reached, with the streak bonus folded in."""
    target = result.max_daily_xp * result.streak_multiplier
    return min(100.0, result.final_xp / target * 100)


def format_stats(stats: PeriodStats | None) -> list[str]:
    """Render period statistics as Spanish text lines."""
    if stats is None:
        return ["Sin mediciones de glucosa en el periodo."]
    return [
        (
            f"Mediciones: {stats.count} | Promedio: {stats.avg} mg/dL "
            f"| Min/Max: {stats.min:g}/{stats.max:g} | Desvio: {stats.std_dev}"
        ),
        (
            f"En rango: {stats.in_range_count} ({stats.in_range_percent}%) "
            f"| Dias con registros: {stats.days_with_records}/{stats.total_days} "
            f"({stats.days_with_records_percent}%) "
            f"| Tomas/dia: {stats.avg_takes_per_day:g}"
        ),
    ]


def _check(flag: bool) -> str:
    return "si" if flag else "no"


def main() -> int:
    """Run the daily XP CLI.

    Returns:
        Exit code (0 on success).
    """
    ns = parse_args()
    logging.basicConfig(
        level=logging.INFO if ns.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    base = Path(ns.base_dir).expanduser().resolve()
    config = load_config(base)

    source = DailyLogSource(DailyLogPaths(root=config.logs_dir), config.timezone)
    source.validate()
    log_file = source.newest_json()
    daily_log = source.load(log_file)

    local_tz = tz.gettz(config.timezone)
    end = ns.date or datetime.now(tz=local_tz).date()
    days = ns.days if ns.days is not None else config.days_back
    if days < 1:
        raise ValueError(f"--days must be >= 1, got {days}")
    start = end - timedelta(days=days - 1)

    history = replay_xp_history(
        daily_log.readings,
        daily_log.wellness,
        start,
        end,
        accumulated_xp=ns.accumulated_xp,
    )
    last = history[-1]
    snapshot = build_snapshot(
        end,
        daily_log.readings,
        daily_log.wellness,
        streak_days=streak_before(end, qualifying_days(daily_log.readings)),
        accumulated_xp=last.total_xp - last.final_xp,
    )
    result = compute_daily_xp(snapshot)
    period_readings = [
        r for r in daily_log.readings if start <= r.timestamp.date() <= end
    ]
    stats = calculate_period_stats(period_readings, start, end)

    print(f"OK: Registros: {log_file}")
    print(f"Dia: {end.isoformat()}")
    for line in format_summary(result):
        print(line)
    print(f"Periodo {start.isoformat()} .. {end.isoformat()}:")
    for line in format_stats(stats):
        print(line)

    if ns.export:
        ts = datetime.now(tz=local_tz).strftime("%Y-%m-%d_%H-%M-%S")
        out_path = config.output_dir / f"salud_xp_historial_{ts}.xlsx"
        write_xp_xlsx(history_to_frame(history), out_path, ExcelLayout())
        print(f"OK: Output: {out_path}")
    return 0
