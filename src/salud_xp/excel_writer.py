"""Generación de Excel formateado con el historial diario de XP."""

from __future__ import annotations

from dataclasses import dataclass
from numbers import Real
from pathlib import Path
from typing import Any

import pandas as pd
from openpyxl.styles import Alignment, Border, Font, Side

_DIA_SEMANA: tuple[str, ...] = ("lun", "mar", "mie", "jue", "vie", "sab", "dom")

_HEADER_MAP: dict[str, str] = {
    "weekday": "Día",
    "date": "Fecha",
    "records_completed": "Registros",
    "in_range_percent": "% en rango",
    "streak_days": "Racha",
    "streak_multiplier": "Multiplicador",
    "base_xp": "XP base",
    "final_xp": "XP final",
    "total_xp": "XP total",
}

_COLUMN_WIDTHS: tuple[tuple[str, int], ...] = (
    ("Día", 6),
    ("Fecha", 12),
    ("Registros", 10),
    ("% en rango", 11),
    ("Racha", 8),
    ("Multiplicador", 13),
    ("XP base", 9),
    ("XP final", 9),
    ("XP total", 10),
)

_NUMBER_FORMATS: dict[str, str] = {
    "Fecha": "dd/mm/yyyy",
    "Registros": "0",
    "% en rango": "0.0",
    "Racha": "0",
    "Multiplicador": "0.00",
    "XP base": "#,##0",
    "XP final": "#,##0",
    "XP total": "#,##0",
}


@dataclass(frozen=True)
class ExcelLayout:
    """Layout/formatting configuration for the XP sheet."""

    sheet_name: str = "Historial XP"


def _weekday_label(i: object) -> str:
    """Convierte índice 0-6 (lunes-domingo) a etiqueta de 3 letras."""
    if isinstance(i, Real) and not pd.isna(i) and 0 <= int(i) < 7:
        return _DIA_SEMANA[int(i)]
    return ""


def _prepare_frame(history: pd.DataFrame) -> pd.DataFrame:
    """Añade Día, pasa date a datetime naive y renombra cabeceras."""
    export_df = history.copy()
    if "date" in export_df.columns:
        dates = pd.to_datetime(export_df["date"], errors="coerce")
        export_df["date"] = dates
        export_df.insert(0, "weekday", dates.dt.weekday.map(_weekday_label))
    return export_df.rename(columns=_HEADER_MAP)


def write_xp_xlsx(history: pd.DataFrame, out_path: Path, layout: ExcelLayout) -> None:
    """Write the XP history as a formatted, printable Excel sheet.

    Args:
        history: Frame from ``consolidate.history_to_frame``.
        out_path: Output path for the XLSX file.
        layout: Excel layout parameters.
    """
    out_path.parent.mkdir(parents=True, exist_ok=True)
    export_df = _prepare_frame(history)

    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        export_df.to_excel(writer, index=False, sheet_name=layout.sheet_name)
        ws = writer.book[layout.sheet_name]
        _format_sheet(ws)


def _format_sheet(ws: Any) -> None:
    """Apply borders, widths and number formats to a worksheet.

    Args:
        ws: openpyxl worksheet.
    """
    thin = Side(style="thin")
    border = Border(left=thin, right=thin, top=thin, bottom=thin)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)

    for cell in ws[1]:
        cell.font = Font(bold=True)
        cell.alignment = center
        cell.border = border

    col_index = {str(cell.value): idx + 1 for idx, cell in enumerate(ws[1])}
    for row in ws.iter_rows(min_row=2):
        for cell in row:
            cell.alignment = center
            cell.border = border
        for header, fmt in _NUMBER_FORMATS.items():
            idx = col_index.get(header)
            if idx is not None:
                row[idx - 1].number_format = fmt

    for header, width in _COLUMN_WIDTHS:
        idx = col_index.get(header)
        if idx is not None:
            letter = ws.cell(row=1, column=idx).column_letter
            ws.column_dimensions[letter].width = width
