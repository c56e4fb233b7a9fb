"""Read per-project analyzer settings."""

from __future__ import annotations

import json
import logging
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from nestdeps.extractors.nest import DEFAULT_MODULE_SUFFIX

logger = logging.getLogger(__name__)


@dataclass
class AnalyzerConfig:
    """Discovery settings: which directories to skip, which files are modules."""

    exclude: list[str] = field(default_factory=list)
    suffix: str = DEFAULT_MODULE_SUFFIX


def load_config(project_dir: Path) -> AnalyzerConfig:
    """Read settings from .nestdeps.toml, falling back to package.json."""
    data = _read_toml_section(project_dir) or _read_package_json_section(project_dir) or {}
    return AnalyzerConfig(
        exclude=list(data.get("exclude", [])),
        suffix=data.get("suffix", DEFAULT_MODULE_SUFFIX),
    )


def _read_toml_section(project_dir: Path) -> dict | None:
    config_toml = project_dir / ".nestdeps.toml"
    if not config_toml.exists():
        return None
    try:
        with open(config_toml, "rb") as f:
            data = tomllib.load(f)
        section = data.get("nestdeps", None)
        return section if isinstance(section, dict) else None
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.debug("Could not read %s: %s", config_toml, e)
        return None


def _read_package_json_section(project_dir: Path) -> dict | None:
    package_json = project_dir / "package.json"
    if not package_json.exists():
        return None
    try:
        data = json.loads(package_json.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.debug("Could not read %s: %s", package_json, e)
        return None
    section = data.get("nestdeps") if isinstance(data, dict) else None
    return section if isinstance(section, dict) else None
