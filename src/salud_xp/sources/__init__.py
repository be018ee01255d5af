"""Fuentes de registros diarios."""
