"""Post-extraction graph analysis: cross-file linking and provider closures."""

from __future__ import annotations

import logging
from collections.abc import Callable

from nestdeps.model import ModuleData, ModuleSnapshot, ProviderData

logger = logging.getLogger(__name__)


def provider_dependency_closure(
    name: str, lookup: Callable[[str], ProviderData | None]
) -> list[str]:
    """Return every name reachable from provider *name* through its dependencies.

    Direct dependencies come first, then deeper ones in traversal order, each
    name once.  Names *lookup* does not know still appear but are not expanded.
    A name already visited is not expanded again, so mutual references
    terminate; the root itself is reported if something depends back on it.
    """
    result: list[str] = []
    seen: set[str] = set()
    visited = {name}
    stack = [name]

    while stack:
        provider = lookup(stack.pop())
        if provider is None:
            continue
        for dep in provider.dependencies:
            if dep not in seen:
                seen.add(dep)
                result.append(dep)
        for dep in reversed(provider.dependencies):
            if dep not in visited:
                visited.add(dep)
                stack.append(dep)

    return result


def _provider_index(modules: dict[str, ModuleData]) -> dict[str, ProviderData]:
    """Map each provider name and ``provide`` token to its first declaring provider."""
    index: dict[str, ProviderData] = {}
    for module in modules.values():
        for provider in module.providers:
            index.setdefault(provider.name, provider)
            if provider.provide is not None:
                index.setdefault(provider.provide, provider)
    return index


def link_modules(modules: dict[str, ModuleData]) -> None:
    """Resolve imports and provider dependencies across the whole project.

    Imports naming a known module get its file path and a snapshot of its
    providers and controllers.  Provider dependencies are rewritten to the
    canonical name of the first provider (in module order) whose name or
    token matches.  Unresolved imports lose their path and snapshot;
    unresolved dependency names are left untouched.
    """
    index = _provider_index(modules)
    linked_imports = 0
    linked_deps = 0

    for module in modules.values():
        for imp in module.imports:
            target = modules.get(imp.name)
            if target is None:
                imp.path = None
                imp.module = None
                continue
            imp.path = target.file_path
            imp.module = ModuleSnapshot(
                name=target.name,
                providers=target.providers,
                controllers=target.controllers,
            )
            linked_imports += 1

        for provider in module.providers:
            resolved: list[str] = []
            for dep in provider.dependencies:
                match = index.get(dep)
                if match is not None:
                    linked_deps += 1
                    resolved.append(match.name)
                else:
                    resolved.append(dep)
            provider.dependencies = resolved

    logger.debug(
        "Linked %d imports and %d provider dependencies across %d modules",
        linked_imports,
        linked_deps,
        len(modules),
    )
