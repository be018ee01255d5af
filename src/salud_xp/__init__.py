"""Puntaje diario (XP) y niveles para el autocontrol de diabetes."""
