"""Declaration extraction from module and class scopes.

Each extractor walks the immediate children of one scope and returns the
declarations found there in source order. Decorators and directly attached
leading comment lines are part of a declaration's text span. A scope with
no declarations yields an empty list.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pymove.core.errors import RecoverableAnalysisError, ScopeRewriteError
from pymove.parsing.queries import CLASS_QUERY
from pymove.parsing.treesitter import ParseResult, PythonParser, field_node, node_text
from pymove.sort.categories import (
    categorize_function,
    categorize_module_object,
    is_constant_name,
)
from pymove.sort.dependencies import (
    collect_assignment_dependencies,
    collect_dependencies,
    decorator_name,
    decorator_nodes,
    unwrap_decorated,
)
from pymove.sort.models import Declaration, DeclarationKind

_DEFINITION_TYPES = ("function_definition", "class_definition")


@dataclass(frozen=True, slots=True)
class ClassInfo:
    """A class definition found anywhere in a file."""

    qualified_name: str
    node: Any
    start_line: int
    end_line: int


def _end_line(node: Any) -> int:
    end_row, end_col = node.end_point
    if end_col == 0 and end_row > node.start_point[0]:
        end_row -= 1
    return end_row + 1


def _is_own_line_comment(node: Any) -> bool:
    if node.type != "comment":
        return False
    prev = node.prev_sibling
    return prev is None or prev.end_point[0] < node.start_point[0]


def _attached_comments(node: Any) -> list[Any]:
    """Own-line comments directly above ``node`` with no blank line between."""
    comments: list[Any] = []
    start_row = node.start_point[0]
    prev = node.prev_sibling
    while prev is not None and _is_own_line_comment(prev) and prev.end_point[0] == start_row - 1:
        comments.append(prev)
        start_row = prev.start_point[0]
        prev = prev.prev_sibling
    return comments


def _attached_comment_ids(node: Any) -> set[int]:
    return {c.id for c in _attached_comments(node)}


def _span(result: ParseResult, outer: Any) -> tuple[int, int, tuple[str, ...]]:
    comments = _attached_comments(outer)
    start_line = (comments[-1] if comments else outer).start_point[0] + 1
    end_line = _end_line(outer)
    lines = result.lines
    return start_line, end_line, tuple(lines[start_line - 1 : end_line])


def _definition_name(definition: Any) -> str:
    name_node = field_node(definition, "name")
    if name_node is None:
        raise RecoverableAnalysisError.unnamed_scope(definition.type, definition.start_point[0] + 1)
    return node_text(name_node)


def build_declaration(
    parser: PythonParser,
    result: ParseResult,
    outer: Any,
    *,
    module_level: bool,
) -> Declaration:
    """Declaration for a (possibly decorated) function or class node."""
    definition = unwrap_decorated(outer)
    name = _definition_name(definition)
    start_line, end_line, raw_text = _span(result, outer)
    kind = (
        DeclarationKind.CLASS
        if definition.type == "class_definition"
        else DeclarationKind.FUNCTION
    )
    category = categorize_module_object(name) if module_level else categorize_function(name)
    return Declaration(
        name=name,
        kind=kind,
        start_line=start_line,
        end_line=end_line,
        raw_text=raw_text,
        decorators=tuple(decorator_name(e) for e in decorator_nodes(definition)),
        dependency_names=collect_dependencies(parser, definition),
        category=category,
        node_start_line=outer.start_point[0] + 1,
    )


def _constant_assignment(node: Any) -> tuple[str, Any] | None:
    if node.type != "expression_statement" or node.named_child_count != 1:
        return None
    assignment = node.named_children[0]
    if assignment.type != "assignment":
        return None
    left = field_node(assignment, "left")
    if left is None or left.type != "identifier":
        return None
    name = node_text(left)
    if not is_constant_name(name):
        return None
    return name, assignment


def _functions_in(
    parser: PythonParser,
    result: ParseResult,
    body: Any,
    *,
    on_error: list[RecoverableAnalysisError] | None,
) -> list[Declaration]:
    declarations: list[Declaration] = []
    for child in body.named_children:
        if unwrap_decorated(child).type != "function_definition":
            continue
        try:
            declarations.append(build_declaration(parser, result, child, module_level=False))
        except RecoverableAnalysisError as e:
            if on_error is None:
                raise
            on_error.append(e)
    return declarations


def extract_class_methods(
    parser: PythonParser,
    result: ParseResult,
    class_node: Any,
    *,
    errors: list[RecoverableAnalysisError] | None = None,
) -> list[Declaration]:
    """Methods declared directly in the body of ``class_node``.

    Unnamed definitions are appended to ``errors`` and skipped when a list
    is given, otherwise raised.
    """
    body = field_node(class_node, "body")
    if body is None:
        return []
    return _functions_in(parser, result, body, on_error=errors)


def extract_module_functions(
    parser: PythonParser,
    result: ParseResult,
    *,
    errors: list[RecoverableAnalysisError] | None = None,
) -> list[Declaration]:
    """Functions declared at module level, excluding anything inside classes."""
    return _functions_in(parser, result, result.root_node, on_error=errors)


def extract_module_objects(
    parser: PythonParser,
    result: ParseResult,
    *,
    errors: list[RecoverableAnalysisError] | None = None,
) -> list[Declaration]:
    """Module-level functions, classes and constants.

    Any other statement (or floating comment) lying between the first and
    the last of those is returned as a ``STATEMENT`` declaration so that a
    rewrite of the covering range reproduces it verbatim. A trailing comment
    belongs to the line it ends.

    Raises:
        ScopeRewriteError: If two statements share a line inside that range
            (``a = 1; b = 2``), since lines are the unit of reordering.
    """
    root = result.root_node
    entries: list[Declaration | Any] = []
    shared_lines: list[int] = []
    prev_end_row = -1
    for child in root.named_children:
        start_row = child.start_point[0]
        on_prev_line = start_row <= prev_end_row
        if child.type == "comment" and on_prev_line:
            continue
        if on_prev_line:
            shared_lines.append(start_row + 1)
        prev_end_row = max(prev_end_row, _end_line(child) - 1)

        definition = unwrap_decorated(child)
        if definition.type in _DEFINITION_TYPES:
            try:
                entries.append(build_declaration(parser, result, child, module_level=True))
            except RecoverableAnalysisError as e:
                if errors is None:
                    raise
                errors.append(e)
                entries.append(child)
            continue

        constant = _constant_assignment(child)
        if constant is not None:
            name, assignment = constant
            start_line, end_line, raw_text = _span(result, child)
            entries.append(
                Declaration(
                    name=name,
                    kind=DeclarationKind.CONSTANT,
                    start_line=start_line,
                    end_line=end_line,
                    raw_text=raw_text,
                    dependency_names=collect_assignment_dependencies(parser, assignment),
                    category=categorize_module_object(name),
                    node_start_line=child.start_point[0] + 1,
                )
            )
            continue

        entries.append(child)

    declared = [i for i, e in enumerate(entries) if isinstance(e, Declaration)]
    if not declared:
        return []

    first_line = entries[declared[0]].start_line
    last_line = entries[declared[-1]].end_line
    for line in shared_lines:
        if first_line <= line <= last_line:
            raise ScopeRewriteError.interleaved_content(line)

    attached: set[int] = set()
    for child in root.named_children:
        attached.update(_attached_comment_ids(child))

    objects: list[Declaration] = []
    for entry in entries[declared[0] : declared[-1] + 1]:
        if isinstance(entry, Declaration):
            objects.append(entry)
        elif entry.id not in attached:
            objects.append(_statement(result, entry))
    return objects


def _statement(result: ParseResult, node: Any) -> Declaration:
    start_line, end_line, raw_text = _span(result, node)
    return Declaration(
        name=f"<{node.type}:{node.start_point[0] + 1}>",
        kind=DeclarationKind.STATEMENT,
        start_line=start_line,
        end_line=end_line,
        raw_text=raw_text,
        category="statement",
        node_start_line=node.start_point[0] + 1,
    )


def find_classes(parser: PythonParser, result: ParseResult) -> list[ClassInfo]:
    """Every class in the file, outermost first, with dotted qualified names."""
    classes: list[ClassInfo] = []
    for _name, node in parser.captures(result.root_node, CLASS_QUERY):
        name_node = field_node(node, "name")
        if name_node is None:
            continue
        classes.append(
            ClassInfo(
                qualified_name=qualified_class_name(node),
                node=node,
                start_line=node.start_point[0] + 1,
                end_line=_end_line(node),
            )
        )
    return classes


def qualified_class_name(class_node: Any) -> str:
    """``Outer.Inner`` style name built from enclosing classes and functions."""
    parts: list[str] = []
    node = class_node
    while node is not None:
        if node.type in _DEFINITION_TYPES:
            name_node = field_node(node, "name")
            parts.append(node_text(name_node) if name_node is not None else "?")
        node = node.parent
    return ".".join(reversed(parts))


def class_at_line(parser: PythonParser, result: ParseResult, line: int) -> Any | None:
    """Innermost class whose definition spans ``line``."""
    lines = result.lines
    col = 0
    if 0 < line <= len(lines):
        text = lines[line - 1]
        col = len(text.encode("utf-8")) - len(text.lstrip().encode("utf-8"))
    node = parser.node_at(result.root_node, line, col)
    while node is not None:
        if node.type == "class_definition":
            return node
        node = node.parent
    return None


def class_enclosing(
    parser: PythonParser, result: ParseResult, start_line: int, end_line: int
) -> Any | None:
    """Innermost class that fully contains ``start_line``..``end_line``."""
    best = None
    for info in find_classes(parser, result):
        if info.start_line <= start_line and info.end_line >= end_line:
            if best is None or info.start_line >= best.start_line:
                best = info
    return best.node if best is not None else None
