"""Extract ``@Module`` metadata from one TypeScript file via tree-sitter."""

from __future__ import annotations

import logging

from tree_sitter import Node

from nestdeps.analysis import provider_dependency_closure
from nestdeps.extractors.nest.symbols import SymbolResolver
from nestdeps.extractors.nest.syntax import (
    ClassDeclaration,
    call_arguments,
    decorator_expression,
    find_decorator,
    find_property,
    name_or_string,
    named_elements,
    node_text,
    parse_typescript,
)
from nestdeps.model import ImportData, ModuleData, ProviderData

logger = logging.getLogger(__name__)

# Class names containing any of these are decoys, not real modules.
_REJECTED_NAME_PARTS = ("Unknown", "Angular")

# Callees whose single array argument lists entities or models.
_FEATURE_REGISTRATIONS = {
    "TypeOrmModule.forFeature",
    "MongooseModule.forFeature",
    "SequelizeModule.forFeature",
}

# Calls on this object taking ``{ entities: [...] }`` register entities too.
_ENTITY_CONFIG_ROOT = "TypeOrmModule"


class ModuleParser:
    """Parse one module file.

    Each instance owns its placeholder counter and the module/provider caches
    used by second-level enrichment, so separate files never share state.
    """

    def __init__(self, source: str, file_path: str):
        self.file_path = file_path
        self._tree = parse_typescript(source)
        self._symbols = SymbolResolver(self._tree.root_node)
        self._next_id = 1
        self._module_cache: dict[str, ModuleData] = {}
        self._provider_cache: dict[str, ProviderData] = {}

    def parse_module(self) -> ModuleData | None:
        """Return the file's module metadata, or None if it declares no module."""
        module_class = self._find_module_class()
        if module_class is None:
            return None

        metadata = self._parse_module_decorator(module_class)
        self._module_cache[metadata.name] = metadata
        self._enrich(metadata)
        return metadata

    def _generate_name(self, prefix: str) -> str:
        name = f"{prefix}_{self._next_id}"
        self._next_id += 1
        return name

    def _find_module_class(self) -> ClassDeclaration | None:
        for decl in self._symbols.classes:
            if not decl.name:
                continue
            if find_decorator(decl.decorators, "Module") is None:
                continue
            if any(part in decl.name for part in _REJECTED_NAME_PARTS):
                logger.debug("%s: skipping decoy module class %s", self.file_path, decl.name)
                continue
            return decl
        return None

    def _parse_module_decorator(self, decl: ClassDeclaration) -> ModuleData:
        decorator = find_decorator(decl.decorators, "Module")
        expr = decorator_expression(decorator) if decorator is not None else None
        if expr is None or expr.type != "call_expression":
            return self._empty_module()

        args = call_arguments(expr)
        if not args or args[0].type != "object":
            return self._empty_module()

        config = args[0]
        return ModuleData(
            name=decl.name,
            file_path=self.file_path,
            imports=self._extract_imports(config),
            exports=self._identifier_list(config, "exports"),
            providers=self._extract_providers(config),
            controllers=self._identifier_list(config, "controllers"),
            entity_count=self._extract_entity_count(config),
        )

    def _empty_module(self) -> ModuleData:
        name = self._generate_name("Module")
        logger.debug("%s: @Module has no configuration object, using %s", self.file_path, name)
        return ModuleData(name=name)

    # -- second-level enrichment ----------------------------------------

    def _enrich(self, module: ModuleData) -> None:
        """Attach dependencies known to this parser's own caches."""
        for imp in module.imports:
            imp.dependencies = self._module_dependencies(imp.name)

        closures = [
            provider_dependency_closure(provider.name, self._provider_cache.get)
            for provider in module.providers
        ]
        # Closures read the cached direct dependencies, so assign afterwards.
        for provider, closure in zip(module.providers, closures):
            provider.dependencies = closure

    def _module_dependencies(self, name: str) -> list[str]:
        cached = self._module_cache.get(name)
        if cached is None:
            return []
        return [imp.name for imp in cached.imports] + [p.name for p in cached.providers]

    # -- imports ----------------------------------------------------------

    def _array_field(self, config: Node, field_name: str) -> list[Node] | None:
        value = find_property(config, field_name)
        if value is None or value.type != "array":
            return None
        return named_elements(value)

    def _extract_imports(self, config: Node) -> list[ImportData]:
        elements = self._array_field(config, "imports")
        if elements is None:
            return []

        imports: list[ImportData] = []
        for element in elements:
            if element.type == "identifier":
                name = node_text(element)
                imports.append(
                    ImportData(name=name, path=self._symbols.resolve_import_path(name))
                )
            elif element.type == "call_expression":
                imports.append(self._parse_call_import(element))
            else:
                imports.append(self._unknown_import(element))
        return imports

    def _parse_call_import(self, call: Node) -> ImportData:
        callee = call.child_by_field_name("function")
        if callee is None:
            return self._unknown_import(call)

        if callee.type == "identifier" and node_text(callee) == "forwardRef":
            args = call_arguments(call)
            target = args[0] if args else None
            if target is not None and target.type == "arrow_function":
                body = target.child_by_field_name("body")
                if body is not None and body.type == "identifier":
                    name = node_text(body)
                    return ImportData(
                        name=name,
                        path=self._symbols.resolve_import_path(name),
                        is_async=True,
                        is_forward_reference=True,
                    )
            return self._unknown_import(call)

        if callee.type == "identifier":
            name = node_text(callee)
        elif callee.type == "member_expression":
            # ConfigModule.forRoot({...}) -> ConfigModule
            obj = callee.child_by_field_name("object")
            if obj is None:
                return self._unknown_import(call)
            name = node_text(obj)
        else:
            return self._unknown_import(call)

        return ImportData(
            name=name,
            path=self._symbols.resolve_import_path(name),
            is_async=True,
        )

    def _unknown_import(self, element: Node) -> ImportData:
        name = self._generate_name("UnknownModule")
        logger.debug(
            "%s: unrecognised import %r recorded as %s",
            self.file_path,
            node_text(element),
            name,
        )
        return ImportData(name=name)

    def _extract_entity_count(self, config: Node) -> int:
        elements = self._array_field(config, "imports")
        if elements is None:
            return 0

        count = 0
        for element in elements:
            if element.type != "call_expression":
                continue
            callee = element.child_by_field_name("function")
            if callee is None or callee.type != "member_expression":
                continue
            args = call_arguments(element)
            first = args[0] if args else None
            if first is None:
                continue

            if node_text(callee) in _FEATURE_REGISTRATIONS and first.type == "array":
                count += len(named_elements(first))

            obj = callee.child_by_field_name("object")
            if obj is not None and node_text(obj) == _ENTITY_CONFIG_ROOT and first.type == "object":
                entities = find_property(first, "entities")
                if entities is not None and entities.type == "array":
                    count += len(named_elements(entities))
        return count

    # -- exports / controllers ------------------------------------------

    def _identifier_list(self, config: Node, field_name: str) -> list[str]:
        elements = self._array_field(config, field_name)
        if elements is None:
            return []
        return [node_text(e) for e in elements if e.type == "identifier"]

    # -- providers --------------------------------------------------------

    def _extract_providers(self, config: Node) -> list[ProviderData]:
        elements = self._array_field(config, "providers")
        if elements is None:
            return []

        providers: list[ProviderData] = []
        for element in elements:
            if element.type == "identifier":
                provider = self._class_provider(node_text(element))
            elif element.type == "object":
                provider = self._parse_provider_object(element)
            else:
                provider = None

            if provider is None:
                logger.debug("%s: dropping provider %r", self.file_path, node_text(element))
                continue
            self._provider_cache[provider.name] = provider
            providers.append(provider)
        return providers

    def _class_provider(self, name: str) -> ProviderData:
        return ProviderData(
            name=name,
            type="class",
            dependencies=self._symbols.constructor_dependencies(name),
            is_injectable=self._symbols.is_class_injectable(name),
            provide=name,
        )

    def _parse_provider_object(self, obj: Node) -> ProviderData | None:
        provide = name_or_string(find_property(obj, "provide"))
        if provide is None:
            return None

        use_class_node = find_property(obj, "useClass")
        use_factory_node = find_property(obj, "useFactory")
        use_value_node = find_property(obj, "useValue")
        use_class = _raw_value(use_class_node)
        use_factory = _raw_value(use_factory_node)
        use_value = _raw_value(use_value_node)

        inject: list[str] | None = None
        if find_property(obj, "inject") is not None:
            inject = self._token_list(obj, "inject")

        dependencies: list[str] = []
        if use_class_node is not None:
            type_ = "class"
            dependencies = self._symbols.constructor_dependencies(use_class)
        elif use_factory_node is not None:
            type_ = "factory"
            if inject is None:
                inject = []
            dependencies = list(inject)
        elif use_value_node is not None:
            type_ = "value"
        else:
            type_ = "class"

        is_injectable = type_ == "class" and self._symbols.is_class_injectable(
            use_class or provide
        )
        return ProviderData(
            name=provide,
            type=type_,
            dependencies=dependencies,
            is_injectable=is_injectable,
            provide=provide,
            use_class=use_class,
            use_value=use_value,
            use_factory=use_factory,
            inject=inject,
        )

    def _token_list(self, obj: Node, field_name: str) -> list[str]:
        elements = self._array_field(obj, field_name)
        if elements is None:
            return []
        tokens = [name_or_string(e) for e in elements]
        return [t for t in tokens if t is not None]


def _raw_value(node: Node | None) -> str | None:
    """Identifier name or string contents; other expressions keep their source text."""
    if node is None:
        return None
    value = name_or_string(node)
    return value if value is not None else node_text(node)
