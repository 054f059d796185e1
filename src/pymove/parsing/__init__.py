"""Tree-sitter based parsing of Python sources."""

from pymove.parsing.treesitter import (
    NodeRange,
    ParseResult,
    PythonParser,
    field_node,
    node_range,
    node_text,
)

__all__ = [
    "NodeRange",
    "ParseResult",
    "PythonParser",
    "field_node",
    "node_range",
    "node_text",
]
