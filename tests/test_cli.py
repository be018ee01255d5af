"""Tests for CLI entrypoints."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from salud_xp import cli
from salud_xp.model import DailyActivitySnapshot
from salud_xp.xp_system import compute_daily_xp


def _write_export(base: Path) -> None:
    logs_dir = base / "registros"
    logs_dir.mkdir(parents=True)
    payload = {
        "glucose": [
            {"value": 100, "timestamp": "2026-01-05T08:00:00"},
            {"value": 120, "timestamp": "2026-01-05T13:00:00"},
        ],
        "sleep": [{"timestamp": "2026-01-05T07:00:00"}],
    }
    (logs_dir / "registros_2026-01-05.json").write_text(
        json.dumps(payload), encoding="utf-8"
    )


def test_parse_args_custom_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "sys.argv",
        ["prog", "--base-dir", "/tmp/base", "--date", "2026-01-05", "--days", "10"],
    )
    ns = cli.parse_args()
    assert ns.base_dir == "/tmp/base"
    assert ns.date == date(2026, 1, 5)
    assert ns.days == 10
    assert ns.accumulated_xp == 0
    assert ns.export is False


def test_main_happy_path(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
    capsys: pytest.CaptureFixture[str],
) -> None:
    _write_export(tmp_path)
    monkeypatch.setattr(
        "sys.argv",
        [
            "prog",
            "--base-dir",
            str(tmp_path),
            "--date",
            "2026-01-05",
            "--days",
            "3",
            "--export",
        ],
    )

    code = cli.main()
    assert code == 0
    out = capsys.readouterr().out
    assert "XP de hoy: +75 XP" in out
    assert "Progreso diario: 94%" in out
    assert "Nivel 1 - Principiante: 75/299 XP (25%)" in out
    assert "Racha" not in out
    assert "Dias con registros: 1/3" in out
    exported = list((tmp_path / "salidas").glob("salud_xp_historial_*.xlsx"))
    assert len(exported) == 1


def test_main_propagates_missing_logs_dir(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setattr("sys.argv", ["prog", "--base-dir", str(tmp_path)])
    with pytest.raises(FileNotFoundError):
        cli.main()


def test_main_rejects_non_positive_days(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    _write_export(tmp_path)
    monkeypatch.setattr(
        "sys.argv", ["prog", "--base-dir", str(tmp_path), "--days", "0"]
    )
    with pytest.raises(ValueError, match="--days"):
        cli.main()


def test_format_summary_with_streak() -> None:
    result = compute_daily_xp(
        DailyActivitySnapshot(
            glucose_reading_values=(100.0, 120.0),
            sleep_logged=True,
            streak_days=10,
        )
    )
    lines = cli.format_summary(result)
    assert lines[0] == "XP de hoy: +98 XP"
    assert "Registros: 2 (min. 2 OK) +40 XP" in lines
    assert "Racha 10d: x1.30 (75 -> 98 XP)" in lines


def test_format_stats_without_readings() -> None:
    assert cli.format_stats(None) == ["Sin mediciones de glucosa en el periodo."]
