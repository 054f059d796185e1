"""Tree-sitter parsing for Python sources.

Thin adapter over py-tree-sitter exposing the four capabilities the
analyzers rely on:

- parse source text into a tree
- run a pattern query over a subtree
- map a node to its line/column range
- map a node to its exact text

Line numbers exposed by this module are 1-based (tree-sitter rows + 1).
"""

from __future__ import annotations

import importlib
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import Any

import tree_sitter
from tree_sitter import Query as _TSQuery
from tree_sitter import QueryCursor as _TSQueryCursor

from pymove.core.errors import RecoverableAnalysisError

GRAMMAR_MODULE = "tree_sitter_python"


@dataclass(frozen=True, slots=True)
class NodeRange:
    """Position of a node. Lines are 1-based, columns are byte offsets."""

    start_line: int
    start_col: int
    end_line: int
    end_col: int


@dataclass
class ParseResult:
    """Result of parsing one source text."""

    tree: Any  # Tree-sitter Tree (not serializable)
    root_node: Any  # Tree-sitter Node
    source: bytes
    error_count: int
    path: Path | None = None

    @property
    def has_errors(self) -> bool:
        return self.error_count > 0

    @cached_property
    def text(self) -> str:
        return self.source.decode("utf-8")

    @cached_property
    def lines(self) -> list[str]:
        """Source split on tree-sitter row boundaries, without terminators."""
        return split_lines(self.text)

    @property
    def newline(self) -> str:
        return "\r\n" if "\r\n" in self.text else "\n"


def split_lines(text: str) -> list[str]:
    """Split ``text`` on ``\\n`` (the only row separator tree-sitter counts)."""
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def node_text(node: Any) -> str:
    """Exact source text of ``node``."""
    return node.text.decode("utf-8") if node.text else ""


def node_range(node: Any) -> NodeRange:
    return NodeRange(
        start_line=node.start_point[0] + 1,
        start_col=node.start_point[1],
        end_line=node.end_point[0] + 1,
        end_col=node.end_point[1],
    )


def field_node(node: Any, name: str) -> Any | None:
    """First child under field ``name``, or None."""
    return node.child_by_field_name(name)


@dataclass
class PythonParser:
    """
    Tree-sitter parser bound to the Python grammar.

    The grammar is loaded lazily on first use so that a missing grammar
    package surfaces as a RecoverableAnalysisError on the file being
    analyzed rather than at import time.

    Usage::

        parser = PythonParser()
        result = parser.parse("def f():\\n    pass\\n")
        for name, node in parser.captures(result.root_node, "(identifier) @id"):
            print(name, node_text(node))
    """

    _parser: Any = field(default=None, repr=False)
    _language: Any = field(default=None, repr=False)
    _queries: dict[str, Any] = field(default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        self._parser = tree_sitter.Parser()

    @property
    def language(self) -> Any:
        """The tree-sitter Language object, loading it if needed."""
        if self._language is None:
            try:
                module = importlib.import_module(GRAMMAR_MODULE)
                self._language = tree_sitter.Language(module.language())
            except (ImportError, AttributeError, ValueError) as err:
                raise RecoverableAnalysisError.parser_unavailable(str(err)) from err
            self._parser.language = self._language
        return self._language

    def parse(self, content: bytes | str, path: Path | None = None) -> ParseResult:
        """
        Parse Python source.

        Args:
            content: Source text, as bytes or str.
            path: Originating file, kept on the result for error reporting.

        Returns:
            ParseResult with tree, root node, source bytes and error count.
        """
        if isinstance(content, str):
            content = content.encode("utf-8")
        _ = self.language
        tree = self._parser.parse(content)

        error_count = 0
        stack = [tree.root_node]
        while stack:
            node = stack.pop()
            if node.type == "ERROR" or node.is_missing:
                error_count += 1
            stack.extend(node.children)

        return ParseResult(
            tree=tree,
            root_node=tree.root_node,
            source=content,
            error_count=error_count,
            path=path,
        )

    def parse_file(self, path: Path) -> ParseResult:
        """Read and parse ``path``.

        Raises:
            RecoverableAnalysisError: If the file cannot be read or decoded.
        """
        try:
            content = path.read_bytes()
            content.decode("utf-8")
        except (OSError, UnicodeDecodeError) as err:
            raise RecoverableAnalysisError.parse_failed(str(path), str(err)) from err
        return self.parse(content, path)

    def _compile(self, query_text: str) -> Any:
        query = self._queries.get(query_text)
        if query is None:
            query = _TSQuery(self.language, query_text)
            self._queries[query_text] = query
        return query

    def captures(self, node: Any, query_text: str) -> list[tuple[str, Any]]:
        """Run ``query_text`` over ``node``; (capture_name, node) in source order."""
        cursor = _TSQueryCursor(self._compile(query_text))
        captured: dict[str, list[Any]] = cursor.captures(node)
        pairs = [(name, n) for name, nodes in captured.items() for n in nodes]
        pairs.sort(key=lambda pair: (pair[1].start_byte, pair[1].end_byte))
        return pairs

    @staticmethod
    def node_at(root: Any, line: int, col: int = 0) -> Any | None:
        """Smallest named node spanning (``line``, ``col``)."""
        row = line - 1
        if row < 0 or row > root.end_point[0]:
            return None
        return root.named_descendant_for_point_range((row, col), (row, col))
