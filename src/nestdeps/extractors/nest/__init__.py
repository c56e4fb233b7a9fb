"""NestJS extractors — shared helpers."""

from __future__ import annotations

from pathlib import Path

DEFAULT_MODULE_SUFFIX = ".module.ts"


def is_nest_module_file(path: Path, suffix: str = DEFAULT_MODULE_SUFFIX) -> bool:
    """Return True if *path* follows the ``*.module.ts`` naming convention."""
    return path.name.endswith(suffix)
