"""Parse TypeScript source via tree-sitter and read the node shapes NestJS modules use."""

from __future__ import annotations

from dataclasses import dataclass

import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Node, Parser, Tree

_LANGUAGE = Language(tstypescript.language_typescript())

# tree-sitter node types that declare a class at statement level.
_CLASS_DECL_TYPES = {"class_declaration", "abstract_class_declaration"}


@dataclass
class ClassDeclaration:
    """A top-level class together with every decorator written on it."""

    node: Node
    name: str | None
    decorators: list[Node]


def parse_typescript(source: str) -> Tree:
    """Parse *source* into a tree-sitter tree. Never raises on bad syntax."""
    parser = Parser(_LANGUAGE)
    return parser.parse(source.encode("utf-8"))


def node_text(node: Node) -> str:
    return node.text.decode("utf-8")


def named_elements(node: Node) -> list[Node]:
    """Named children of *node*, without comments."""
    return [child for child in node.named_children if child.type != "comment"]


def top_level_classes(root: Node) -> list[ClassDeclaration]:
    """Return class declarations at file level, unwrapping ``export`` statements.

    Decorators may sit on the export statement (``@Module() export class``)
    or on the class itself (``export @Module() class``); both are collected.
    """
    classes: list[ClassDeclaration] = []
    for stmt in root.named_children:
        if stmt.type in _CLASS_DECL_TYPES:
            classes.append(_class_declaration(stmt, []))
        elif stmt.type == "export_statement":
            decl = stmt.child_by_field_name("declaration")
            if decl is not None and decl.type in _CLASS_DECL_TYPES:
                outer = [c for c in stmt.children if c.type == "decorator"]
                classes.append(_class_declaration(decl, outer))
    return classes


def _class_declaration(node: Node, outer_decorators: list[Node]) -> ClassDeclaration:
    name_node = node.child_by_field_name("name")
    decorators = outer_decorators + [c for c in node.children if c.type == "decorator"]
    return ClassDeclaration(
        node=node,
        name=node_text(name_node) if name_node is not None else None,
        decorators=decorators,
    )


def find_decorator(decorators: list[Node], name: str) -> Node | None:
    """Return the first decorator spelled ``@name``, ``@x.name`` or a call of either."""
    for decorator in decorators:
        expr = decorator_expression(decorator)
        if expr is None:
            continue
        callee = expr.child_by_field_name("function") if expr.type == "call_expression" else expr
        if callee is not None and _simple_name(callee) == name:
            return decorator
    return None


def decorator_expression(decorator: Node) -> Node | None:
    elements = named_elements(decorator)
    return elements[0] if elements else None


def _simple_name(node: Node) -> str | None:
    if node.type == "identifier":
        return node_text(node)
    if node.type == "member_expression":
        prop = node.child_by_field_name("property")
        return node_text(prop) if prop is not None else None
    return None


def call_arguments(call: Node) -> list[Node]:
    args = call.child_by_field_name("arguments")
    if args is None:
        return []
    return named_elements(args)


def find_property(obj: Node, name: str) -> Node | None:
    """Return the value of the first ``name: value`` pair in object literal *obj*."""
    for child in obj.named_children:
        if child.type != "pair":
            continue
        key = child.child_by_field_name("key")
        if key is not None and key.type == "property_identifier" and node_text(key) == name:
            return child.child_by_field_name("value")
    return None


def string_value(node: Node) -> str:
    """Contents of a string literal node, quotes stripped."""
    return node_text(node)[1:-1]


def name_or_string(node: Node | None) -> str | None:
    """Identifier name or string literal contents; None for any other shape."""
    if node is None:
        return None
    if node.type == "identifier":
        return node_text(node)
    if node.type == "string":
        return string_value(node)
    return None
