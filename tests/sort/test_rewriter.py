"""Tests for range rewriting."""

from __future__ import annotations

import pytest

from pymove.core.errors import ScopeRewriteError
from pymove.sort.models import Declaration, DeclarationKind
from pymove.sort.rewriter import covering_range, order_changed, rewrite_range

LINES = [
    "import os",
    "",
    "def b():",
    "    pass",
    "",
    "",
    "def a():",
    "    pass",
    "",
    "x()",
]


def span(name: str, start: int, end: int, lines: list[str] = LINES) -> Declaration:
    return Declaration(
        name=name,
        kind=DeclarationKind.FUNCTION,
        start_line=start,
        end_line=end,
        raw_text=tuple(lines[start - 1 : end]),
    )


class TestOrderChanged:
    """Name-sequence comparison."""

    def test_same_names_same_order(self) -> None:
        b, a = span("b", 3, 4), span("a", 7, 8)
        assert not order_changed([b, a], [b, a])

    def test_compares_names_not_objects(self) -> None:
        b, a = span("b", 3, 4), span("a", 7, 8)
        assert not order_changed([b, a], [span("b", 1, 1), span("a", 2, 2)])

    def test_different_order(self) -> None:
        b, a = span("b", 3, 4), span("a", 7, 8)
        assert order_changed([b, a], [a, b])


class TestRewriteRange:
    """Covering-range replacement."""

    def test_reorders_and_keeps_surroundings(self) -> None:
        b, a = span("b", 3, 4), span("a", 7, 8)
        assert covering_range([b, a]) == (3, 8)
        assert rewrite_range(LINES, [b, a], [a, b]) == [
            "import os",
            "",
            "def a():",
            "    pass",
            "",
            "def b():",
            "    pass",
            "",
            "x()",
        ]

    def test_unchanged_order_returns_none(self) -> None:
        b, a = span("b", 3, 4), span("a", 7, 8)
        assert rewrite_range(LINES, [b, a], [b, a]) is None

    def test_empty_scope_returns_none(self) -> None:
        assert rewrite_range(LINES, [], []) is None

    def test_foreign_line_in_range_is_refused(self) -> None:
        lines = [*LINES[:4], "X = 1", *LINES[5:]]
        b, a = span("b", 3, 4, lines), span("a", 7, 8, lines)
        with pytest.raises(ScopeRewriteError) as exc_info:
            rewrite_range(lines, [b, a], [a, b])
        assert exc_info.value.details["line"] == 5
