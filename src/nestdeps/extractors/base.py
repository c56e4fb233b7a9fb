"""Extractor protocol: anything that fills a project graph from a directory."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from nestdeps.model import ProjectGraph


class Extractor(Protocol):
    """Protocol for module graph extractors."""

    def can_handle(self, project_dir: Path) -> bool:
        """Return True if this extractor can scan the given project."""
        ...

    def extract(self, project_dir: Path, graph: ProjectGraph) -> None:
        """Register in *graph* every module found under *project_dir*."""
        ...
