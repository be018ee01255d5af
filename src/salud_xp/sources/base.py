"""Clases base para fuentes de registros."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class SourcePaths:
    """Folder a source reads its exports from."""

    root: Path


class DataSource(ABC):
    """Abstract export reader bound to a folder."""

    def __init__(self, paths: SourcePaths) -> None:
        self._paths = paths

    @property
    def root(self) -> Path:
        return self._paths.root

    @abstractmethod
    def validate(self) -> None:
        """Check that the export folder is usable before reading.

        Raises:
            FileNotFoundError: If the folder is missing.
        """
