"""Data model for NestJS module dependency graphs."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class ProviderData:
    """An injectable unit declared in a module's ``providers`` array."""

    name: str
    type: str  # "class", "value", "factory"
    dependencies: list[str] = field(default_factory=list)
    is_injectable: bool = False
    provide: str | None = None
    use_class: str | None = None
    use_value: str | None = None
    use_factory: str | None = None
    inject: list[str] | None = None


@dataclass
class ModuleSnapshot:
    """Partial view of an imported module, attached during linking."""

    name: str
    providers: list[ProviderData] = field(default_factory=list)
    controllers: list[str] = field(default_factory=list)


@dataclass
class ImportData:
    """One entry of a module's ``imports`` array."""

    name: str
    path: str | None = None
    is_async: bool = False
    is_forward_reference: bool = False
    dependencies: list[str] = field(default_factory=list)
    module: ModuleSnapshot | None = None


@dataclass
class ModuleData:
    """A class decorated with ``@Module`` and its declared metadata."""

    name: str
    file_path: str | None = None
    imports: list[ImportData] = field(default_factory=list)
    exports: list[str] = field(default_factory=list)
    providers: list[ProviderData] = field(default_factory=list)
    controllers: list[str] = field(default_factory=list)
    entity_count: int = 0


@dataclass
class ProjectGraph:
    """Complete module graph produced by extractors.

    ``modules`` keeps discovery order; a later module registered under an
    existing name replaces the earlier one.
    """

    project_name: str
    root_dir: str | None = None
    modules: dict[str, ModuleData] = field(default_factory=dict)
