"""Lectura de exportaciones JSON de registros diarios (glucosa, sueño, estrés)."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from pathlib import Path
from typing import Any

from dateutil import parser as date_parser
from dateutil import tz

from salud_xp.model import GlucoseReading, WellnessCategory, WellnessLog
from salud_xp.sources.base import DataSource, SourcePaths

logger = logging.getLogger(__name__)

DEFAULT_TIMEZONE = "America/Bogota"


@dataclass(frozen=True)
class DailyLogPaths(SourcePaths):
    """Folder containing registros_*.json exports."""


@dataclass(frozen=True)
class DailyLog:
    """Parsed export: glucose readings plus sleep/stress logs."""

    readings: list[GlucoseReading] = field(default_factory=list)
    wellness: list[WellnessLog] = field(default_factory=list)


class DailyLogSource(DataSource):
    """Daily log JSON export reader."""

    def __init__(
        self, paths: DailyLogPaths, timezone: str = DEFAULT_TIMEZONE
    ) -> None:
        super().__init__(paths)
        local_tz = tz.gettz(timezone)
        if local_tz is None:
            raise ValueError(f"Unknown timezone: {timezone}")
        self._tz = local_tz

    def validate(self) -> None:
        """Validate that the export directory exists."""
        if not self.root.exists():
            raise FileNotFoundError(str(self.root))

    def newest_json(self) -> Path:
        """Return newest registros_*.json by mtime."""
        files = sorted(
            self.root.glob("registros_*.json"),
            key=lambda p: p.stat().st_mtime,
            reverse=True,
        )
        if not files:
            raise FileNotFoundError(f"No registros_*.json in {self.root}")
        return files[0]

    def load(self, path: Path) -> DailyLog:
        """Parse an export into typed readings and wellness logs.

        Args:
            path: Path to JSON file.

        Returns:
            Readings and wellness logs, each sorted by timestamp.

        Raises:
            ValueError: If the JSON top level is not an object.
        """
        raw = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError("Daily log JSON must be an object")

        readings: list[GlucoseReading] = []
        for item in _as_list(raw.get("glucose"), "glucose"):
            reading = _item_to_reading(item, self._tz)
            if reading is not None:
                readings.append(reading)

        wellness: list[WellnessLog] = []
        category: WellnessCategory
        for category in ("sleep", "stress"):
            for item in _as_list(raw.get(category), category):
                log = _item_to_wellness(item, category, self._tz)
                if log is not None:
                    wellness.append(log)

        readings.sort(key=lambda r: r.timestamp)
        wellness.sort(key=lambda w: w.timestamp)
        logger.info(
            "Loaded %d glucose readings and %d wellness logs from %s",
            len(readings),
            len(wellness),
            path.name,
        )
        return DailyLog(readings=readings, wellness=wellness)


def _as_list(value: Any, key: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"'{key}' must be a list")
    return value


def _item_to_reading(item: Any, local_tz: tzinfo) -> GlucoseReading | None:
    """Convierte un ítem dict en GlucoseReading; None si no es utilizable."""
    if not isinstance(item, dict):
        logger.warning("Skipping glucose entry that is not an object: %r", item)
        return None
    value = _parse_value(item.get("value"))
    if value is None:
        logger.warning("Skipping glucose entry without a finite value: %r", item)
        return None
    ts = _parse_timestamp(item.get("timestamp"), item.get("epoch"), local_tz)
    if ts is None:
        logger.warning("Skipping glucose entry without timestamp: %r", item)
        return None
    return GlucoseReading(timestamp=ts, mg_dl=value, kind=_parse_kind(item))


def _parse_kind(item: dict[str, Any]) -> str | None:
    """Extrae y normaliza el tipo de medición (vacío -> None)."""
    kind = item.get("type")
    if kind is None:
        return None
    text = str(kind).strip()
    return text if text else None


def _item_to_wellness(
    item: Any, category: WellnessCategory, local_tz: tzinfo
) -> WellnessLog | None:
    if not isinstance(item, dict):
        logger.warning("Skipping %s entry that is not an object: %r", category, item)
        return None
    ts = _parse_timestamp(item.get("timestamp"), item.get("epoch"), local_tz)
    if ts is None:
        logger.warning("Skipping %s entry without timestamp: %r", category, item)
        return None
    return WellnessLog(timestamp=ts, category=category)


def _parse_value(raw: Any) -> float | None:
    if raw is None or isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def _parse_timestamp(ts_str: Any, epoch: Any, local_tz: tzinfo) -> datetime | None:
    """ISO-8601 text (naive = local time) or epoch seconds, in local time."""
    if isinstance(ts_str, str) and ts_str.strip():
        try:
            dt = date_parser.isoparse(ts_str.strip())
        except ValueError:
            return None
        if dt.tzinfo is None:
            return dt.replace(tzinfo=local_tz)
        return dt.astimezone(local_tz)

    if epoch is not None:
        try:
            return datetime.fromtimestamp(int(epoch), tz=local_tz)
        except (TypeError, ValueError, OverflowError, OSError):
            return None

    return None
