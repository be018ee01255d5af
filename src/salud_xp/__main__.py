"""Punto de entrada: python -m salud_xp."""

from __future__ import annotations

from salud_xp.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
