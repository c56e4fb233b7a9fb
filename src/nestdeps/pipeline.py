"""Orchestrator: configure → extract → link → render."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from nestdeps.analysis import link_modules
from nestdeps.config import AnalyzerConfig, load_config
from nestdeps.extractors.base import Extractor
from nestdeps.extractors.nest.scan import NestModuleExtractor
from nestdeps.model import ProjectGraph
from nestdeps.renderer.dot import render_dot, write_dot
from nestdeps.renderer.structured import render_json, write_json

logger = logging.getLogger(__name__)

FORMATS = ("json", "dot")


def _guess_project_name(project_dir: Path) -> str:
    """Guess the project display name from package.json or the directory name."""
    package_json = project_dir / "package.json"
    if package_json.exists():
        try:
            data = json.loads(package_json.read_text(encoding="utf-8"))
            name = data.get("name") if isinstance(data, dict) else None
            if name:
                return name
        except (OSError, ValueError):
            pass
    return project_dir.name


def analyze(project_dir: Path, *, name: str | None = None) -> ProjectGraph:
    """Extract and link every module under *project_dir*.

    Raises OSError if the directory or any module file cannot be read.
    """
    project_dir = project_dir.resolve()
    config = load_config(project_dir) if project_dir.is_dir() else AnalyzerConfig()

    graph = ProjectGraph(
        project_name=name or _guess_project_name(project_dir),
        root_dir=str(project_dir),
    )

    extractor: Extractor = NestModuleExtractor(
        exclude=config.exclude,
        suffix=config.suffix,
    )
    if not extractor.can_handle(project_dir):
        raise NotADirectoryError(f"Not a directory: {project_dir}")

    logger.debug("Project: %s, root: %s", graph.project_name, graph.root_dir)
    extractor.extract(project_dir, graph)
    link_modules(graph.modules)
    return graph


def normalize_format(fmt: str | None) -> str:
    """Lower-case *fmt*; anything unrecognised falls back to ``json``."""
    fmt = (fmt or "json").lower()
    if fmt not in FORMATS:
        logger.debug("Unknown output format %r, using json", fmt)
        return "json"
    return fmt


def render(graph: ProjectGraph, fmt: str = "json") -> str:
    if normalize_format(fmt) == "dot":
        return render_dot(graph.modules)
    return render_json(graph.modules)


def run(
    project_dir: Path,
    *,
    fmt: str = "json",
    output: Path | None = None,
    name: str | None = None,
) -> str:
    """Run the full pipeline and return the rendered text.

    With *output* the text is also written to disk (plus a PNG for DOT
    output when Graphviz is available).
    """
    graph = analyze(project_dir, name=name)
    fmt = normalize_format(fmt)
    text = render(graph, fmt)

    if output is not None:
        if fmt == "dot":
            write_dot(graph.modules, output)
        else:
            write_json(graph.modules, output)
            logger.info("JSON saved to: %s", output)

    return text
