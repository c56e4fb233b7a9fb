"""Resolve identifiers against the top-level declarations of a single file.

Resolution is purely syntactic and file-local: nothing here looks at other
files or evaluates types.
"""

from __future__ import annotations

from tree_sitter import Node

from nestdeps.extractors.nest.syntax import (
    ClassDeclaration,
    find_decorator,
    named_elements,
    node_text,
    string_value,
    top_level_classes,
)

# Specifiers under this package root are shortened to their last segment.
FRAMEWORK_PACKAGE_ROOT = "@nestjs/"

# Parameter node types that may carry a type annotation.
_PARAMETER_TYPES = {"required_parameter", "optional_parameter"}


class SymbolResolver:
    """Answer "where does this name come from" questions for one syntax tree."""

    def __init__(self, root: Node):
        self._root = root
        self._classes = top_level_classes(root)

    @property
    def classes(self) -> list[ClassDeclaration]:
        return self._classes

    def resolve_import_path(self, identifier: str) -> str | None:
        """Return the module specifier *identifier* was imported from, if any."""
        for stmt in self._root.named_children:
            if stmt.type != "import_statement":
                continue
            clause = next(
                (c for c in stmt.named_children if c.type == "import_clause"), None
            )
            if clause is None or identifier not in _local_bindings(clause):
                continue

            source = stmt.child_by_field_name("source")
            if source is None or source.type != "string":
                return None
            specifier = string_value(source)
            if specifier.startswith(FRAMEWORK_PACKAGE_ROOT):
                return specifier.split("/")[-1]
            return specifier
        return None

    def find_class_declaration(self, name: str) -> ClassDeclaration | None:
        for decl in self._classes:
            if decl.name == name:
                return decl
        return None

    def is_class_injectable(self, name: str) -> bool:
        decl = self.find_class_declaration(name)
        return decl is not None and find_decorator(decl.decorators, "Injectable") is not None

    def constructor_dependencies(self, name: str) -> list[str]:
        """Constructor parameter type names of class *name*; [] when not declared here."""
        decl = self.find_class_declaration(name)
        if decl is None:
            return []
        return extract_constructor_dependencies(decl)


def extract_constructor_dependencies(decl: ClassDeclaration) -> list[str]:
    """Named type of each annotated parameter of the first constructor, in order.

    Parameters typed with primitives, arrays, unions or inline object types
    are skipped rather than represented by a placeholder.
    """
    body = decl.node.child_by_field_name("body")
    if body is None:
        return []

    constructor = None
    for member in body.named_children:
        if member.type not in ("method_definition", "method_signature"):
            continue
        name_node = member.child_by_field_name("name")
        if name_node is not None and node_text(name_node) == "constructor":
            constructor = member
            break
    if constructor is None:
        return []

    params = constructor.child_by_field_name("parameters")
    if params is None:
        return []

    dependencies: list[str] = []
    for param in params.named_children:
        if param.type not in _PARAMETER_TYPES:
            continue
        annotation = param.child_by_field_name("type")
        if annotation is None:
            continue
        elements = named_elements(annotation)
        type_name = _type_reference_name(elements[0]) if elements else None
        if type_name:
            dependencies.append(type_name)
    return dependencies


def _type_reference_name(node: Node) -> str | None:
    # Foo -> Foo, ns.Foo -> ns.Foo, Foo<T> -> Foo
    if node.type in ("type_identifier", "nested_type_identifier"):
        return node_text(node)
    if node.type == "generic_type":
        name_node = node.child_by_field_name("name")
        if name_node is None:
            name_node = next(iter(named_elements(node)), None)
        return _type_reference_name(name_node) if name_node is not None else None
    return None


def _local_bindings(clause: Node) -> set[str]:
    """Names an import clause introduces into the file's scope."""
    names: set[str] = set()
    for child in clause.named_children:
        if child.type == "identifier":
            names.add(node_text(child))
        elif child.type == "namespace_import":
            for ident in child.named_children:
                if ident.type == "identifier":
                    names.add(node_text(ident))
        elif child.type == "named_imports":
            for spec in child.named_children:
                if spec.type != "import_specifier":
                    continue
                local = spec.child_by_field_name("alias")
                if local is None:
                    local = spec.child_by_field_name("name")
                if local is not None:
                    names.add(node_text(local))
    return names
