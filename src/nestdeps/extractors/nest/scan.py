"""Walk a project directory and register every NestJS module it declares."""

from __future__ import annotations

import logging
from pathlib import Path

from nestdeps.extractors.nest import DEFAULT_MODULE_SUFFIX, is_nest_module_file
from nestdeps.extractors.nest.module_parser import ModuleParser
from nestdeps.model import ModuleData, ProjectGraph

logger = logging.getLogger(__name__)


class NestModuleExtractor:
    """Populate ``graph.modules`` from every module file under the project."""

    def __init__(
        self,
        *,
        exclude: list[str] | None = None,
        suffix: str = DEFAULT_MODULE_SUFFIX,
    ):
        self._exclude = set(exclude or ())
        self._suffix = suffix

    def can_handle(self, project_dir: Path) -> bool:
        return project_dir.is_dir()

    def extract(self, project_dir: Path, graph: ProjectGraph) -> None:
        file_count = 0
        for module_file in self._walk(project_dir):
            file_count += 1
            module = _parse_file(module_file)
            if module is not None:
                _register(graph, module, str(module_file))

        logger.debug(
            "NestJS: %d module files, %d modules registered",
            file_count,
            len(graph.modules),
        )

    def _walk(self, directory: Path):
        """Yield module files depth-first, entries in name order.

        Symlinked directories are not followed.  An unreadable directory
        aborts the walk.
        """
        try:
            entries = sorted(directory.iterdir(), key=lambda p: p.name)
        except OSError:
            logger.error("Error scanning directory %s", directory)
            raise

        for entry in entries:
            if entry.is_dir() and not entry.is_symlink():
                if entry.name in self._exclude:
                    continue
                yield from self._walk(entry)
            elif is_nest_module_file(entry, self._suffix):
                yield entry


def _parse_file(module_file: Path) -> ModuleData | None:
    try:
        source = module_file.read_text(encoding="utf-8", errors="replace")
    except OSError:
        logger.error("Error parsing module %s", module_file)
        raise
    return ModuleParser(source, str(module_file)).parse_module()


def _register(graph: ProjectGraph, module: ModuleData, file_path: str) -> None:
    """Add *module* to the graph; a later module with the same name wins."""
    module.file_path = file_path
    previous = graph.modules.get(module.name)
    if previous is not None:
        logger.warning(
            "Module %s in %s replaces the one declared in %s",
            module.name,
            file_path,
            previous.file_path,
        )
    # An overwritten name keeps its original position in the ordering.
    graph.modules[module.name] = module
    logger.debug("Registered module %s from %s", module.name, file_path)
