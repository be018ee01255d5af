"""Configuración de la herramienta: defaults + archivo salud_xp.json opcional."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from dateutil import tz

from salud_xp.sources.daily_log import DEFAULT_TIMEZONE

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "salud_xp.json"


@dataclass(frozen=True)
class AppConfig:
    """Configuracion de la herramienta."""

    base_dir: Path
    timezone: str = DEFAULT_TIMEZONE
    days_back: int = 30
    export_dir: str = ""

    @property
    def logs_dir(self) -> Path:
        return self.base_dir / "registros"

    @property
    def output_dir(self) -> Path:
        if self.export_dir:
            return Path(self.export_dir).expanduser()
        return self.base_dir / "salidas"


def load_config(base_dir: Path) -> AppConfig:
    """Devuelve configuracion del archivo en ``base_dir`` o defaults.

    Unknown keys are ignored; values of the wrong type keep the default, and
    so does a timezone name that dateutil cannot resolve.
    """
    defaults: dict[str, Any] = {
        "timezone": DEFAULT_TIMEZONE,
        "days_back": 30,
        "export_dir": "",
    }
    values = _read_json_object(base_dir / CONFIG_FILENAME)
    merged = {**defaults, **{k: v for k, v in values.items() if k in defaults}}

    days_back = merged["days_back"]
    if isinstance(days_back, bool) or not isinstance(days_back, int) or days_back < 1:
        days_back = defaults["days_back"]

    timezone = merged["timezone"]
    if not isinstance(timezone, str) or tz.gettz(timezone) is None:
        logger.warning("Ignoring timezone %r, using %s", timezone, DEFAULT_TIMEZONE)
        timezone = defaults["timezone"]

    export_dir = merged["export_dir"]
    if not isinstance(export_dir, str):
        export_dir = defaults["export_dir"]
    return AppConfig(
        base_dir=base_dir,
        timezone=timezone,
        days_back=days_back,
        export_dir=export_dir,
    )


def _read_json_object(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        parsed: Any = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", path, exc)
        return {}
    if not isinstance(parsed, dict):
        logger.warning("Ignoring config %s: top level is not an object", path)
        return {}
    return parsed
