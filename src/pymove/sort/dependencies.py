"""Referenced-name collection for declarations.

Resolution is purely lexical: a name is referenced when an identifier
appears in one of the positions below, regardless of scoping or imports.

- decorator expressions (root name and call arguments)
- call targets ``f()`` and call receivers ``obj.m()``
- class base lists
- parameter annotations, default values and return annotations, for a
  function and for every method of a class
- the right-hand side of a constant assignment
"""

from __future__ import annotations

from typing import Any

from pymove.parsing.queries import (
    CALL_TARGET_QUERY,
    DEFAULT_VALUE_QUERY,
    IDENTIFIER_QUERY,
    TYPE_ANNOTATION_QUERY,
)
from pymove.parsing.treesitter import PythonParser, field_node, node_text


def identifiers(parser: PythonParser, node: Any) -> list[str]:
    """Distinct identifiers under ``node`` in source order."""
    seen: dict[str, None] = {}
    if node.type == "identifier":
        seen[node_text(node)] = None
    for _name, id_node in parser.captures(node, IDENTIFIER_QUERY):
        seen.setdefault(node_text(id_node), None)
    return list(seen)


def unwrap_decorated(node: Any) -> Any:
    """The function/class definition inside a ``decorated_definition``."""
    if node.type != "decorated_definition":
        return node
    definition = field_node(node, "definition")
    if definition is not None:
        return definition
    for child in node.children:
        if child.type in ("function_definition", "class_definition"):
            return child
    return node


def decorator_nodes(definition: Any) -> list[Any]:
    """Decorator expression nodes of ``definition`` (without the ``@``)."""
    parent = definition.parent
    if parent is None or parent.type != "decorated_definition":
        return []
    exprs = []
    for child in parent.children:
        if child.type == "decorator":
            expr = next((c for c in child.named_children if c.type != "comment"), None)
            if expr is not None:
                exprs.append(expr)
    return exprs


def decorator_name(expr: Any) -> str:
    """Display name of a decorator: ``@app.route("/")`` -> ``app.route``."""
    if expr.type == "call":
        function = field_node(expr, "function")
        if function is not None:
            return node_text(function)
    return node_text(expr)


def _root_name(expr: Any) -> str | None:
    while expr is not None:
        if expr.type == "identifier":
            return node_text(expr)
        if expr.type == "attribute":
            expr = field_node(expr, "object")
        elif expr.type == "call":
            expr = field_node(expr, "function")
        else:
            return None
    return None


def _signature_names(parser: PythonParser, function: Any) -> list[str]:
    names: list[str] = []
    params = field_node(function, "parameters")
    if params is not None:
        for _name, type_node in parser.captures(params, TYPE_ANNOTATION_QUERY):
            names.extend(identifiers(parser, type_node))
        for _name, default_node in parser.captures(params, DEFAULT_VALUE_QUERY):
            names.extend(identifiers(parser, default_node))
    return_type = field_node(function, "return_type")
    if return_type is not None:
        names.extend(identifiers(parser, return_type))
    return names


def _decorator_names(parser: PythonParser, definition: Any) -> list[str]:
    names: list[str] = []
    for expr in decorator_nodes(definition):
        root = _root_name(expr)
        if root is not None:
            names.append(root)
        if expr.type == "call":
            arguments = field_node(expr, "arguments")
            if arguments is not None:
                names.extend(identifiers(parser, arguments))
    return names


def _call_names(parser: PythonParser, node: Any) -> list[str]:
    return [node_text(n) for _name, n in parser.captures(node, CALL_TARGET_QUERY)]


def collect_dependencies(parser: PythonParser, definition: Any) -> frozenset[str]:
    """Names referenced by a ``function_definition`` or ``class_definition``."""
    names = _decorator_names(parser, definition)

    if definition.type == "class_definition":
        superclasses = field_node(definition, "superclasses")
        if superclasses is not None:
            names.extend(identifiers(parser, superclasses))
        body = field_node(definition, "body")
        if body is not None:
            for child in body.named_children:
                method = unwrap_decorated(child)
                if method.type == "function_definition":
                    names.extend(_signature_names(parser, method))
    elif definition.type == "function_definition":
        names.extend(_signature_names(parser, definition))

    names.extend(_call_names(parser, definition))
    return frozenset(names)


def collect_assignment_dependencies(parser: PythonParser, assignment: Any) -> frozenset[str]:
    """Every identifier on the right-hand side of an assignment."""
    right = field_node(assignment, "right")
    if right is None:
        return frozenset()
    return frozenset(identifiers(parser, right))
