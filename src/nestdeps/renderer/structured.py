"""Serialize a module graph to JSON and load it back."""

from __future__ import annotations

import json
from pathlib import Path

from nestdeps.model import ImportData, ModuleData, ModuleSnapshot, ProviderData


def _provider_to_dict(provider: ProviderData) -> dict:
    d: dict = {
        "name": provider.name,
        "type": provider.type,
        "dependencies": provider.dependencies,
        "isInjectable": provider.is_injectable,
    }
    if provider.provide is not None:
        d["provide"] = provider.provide
    if provider.use_class is not None:
        d["useClass"] = provider.use_class
    if provider.use_value is not None:
        d["useValue"] = provider.use_value
    if provider.use_factory is not None:
        d["useFactory"] = provider.use_factory
    if provider.inject is not None:
        d["inject"] = provider.inject
    return d


def _import_to_dict(imp: ImportData) -> dict:
    d: dict = {"name": imp.name}
    if imp.path is not None:
        d["path"] = imp.path
    d["isAsync"] = imp.is_async
    d["isForwardReference"] = imp.is_forward_reference
    d["dependencies"] = imp.dependencies
    if imp.module is not None:
        d["module"] = {
            "name": imp.module.name,
            "providers": [_provider_to_dict(p) for p in imp.module.providers],
            "controllers": imp.module.controllers,
        }
    return d


def module_to_dict(module: ModuleData) -> dict:
    d: dict = {"name": module.name}
    if module.file_path is not None:
        d["filePath"] = module.file_path
    d["imports"] = [_import_to_dict(i) for i in module.imports]
    d["exports"] = module.exports
    d["providers"] = [_provider_to_dict(p) for p in module.providers]
    d["controllers"] = module.controllers
    d["entityCount"] = module.entity_count
    return d


def render_json(modules: dict[str, ModuleData]) -> str:
    """Return ``[[name, module], ...]`` as indented JSON, in mapping order."""
    pairs = [[name, module_to_dict(module)] for name, module in modules.items()]
    return json.dumps(pairs, indent=2)


def _provider_from_dict(d: dict) -> ProviderData:
    return ProviderData(
        name=d["name"],
        type=d["type"],
        dependencies=list(d.get("dependencies", [])),
        is_injectable=d.get("isInjectable", False),
        provide=d.get("provide"),
        use_class=d.get("useClass"),
        use_value=d.get("useValue"),
        use_factory=d.get("useFactory"),
        inject=d.get("inject"),
    )


def _import_from_dict(d: dict) -> ImportData:
    snapshot = d.get("module")
    return ImportData(
        name=d["name"],
        path=d.get("path"),
        is_async=d.get("isAsync", False),
        is_forward_reference=d.get("isForwardReference", False),
        dependencies=list(d.get("dependencies", [])),
        module=ModuleSnapshot(
            name=snapshot["name"],
            providers=[_provider_from_dict(p) for p in snapshot.get("providers", [])],
            controllers=list(snapshot.get("controllers", [])),
        )
        if snapshot is not None
        else None,
    )


def module_from_dict(d: dict) -> ModuleData:
    return ModuleData(
        name=d["name"],
        file_path=d.get("filePath"),
        imports=[_import_from_dict(i) for i in d.get("imports", [])],
        exports=list(d.get("exports", [])),
        providers=[_provider_from_dict(p) for p in d.get("providers", [])],
        controllers=list(d.get("controllers", [])),
        entity_count=d.get("entityCount", 0),
    )


def load_json(text: str) -> dict[str, ModuleData]:
    """Rebuild the module mapping from :func:`render_json` output."""
    return {name: module_from_dict(d) for name, d in json.loads(text)}


def write_json(modules: dict[str, ModuleData], output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(render_json(modules), encoding="utf-8")
