"""Range rewriting of reordered declarations."""

from __future__ import annotations

from collections.abc import Sequence

from pymove.core.errors import ScopeRewriteError
from pymove.sort.models import Declaration


def order_changed(original: Sequence[Declaration], ordered: Sequence[Declaration]) -> bool:
    """Whether ``ordered`` differs from ``original`` by name sequence."""
    return [d.name for d in original] != [d.name for d in ordered]


def covering_range(declarations: Sequence[Declaration]) -> tuple[int, int]:
    """Smallest (start_line, end_line) containing every declaration."""
    return (
        min(d.start_line for d in declarations),
        max(d.end_line for d in declarations),
    )


def check_gaps(lines: Sequence[str], declarations: Sequence[Declaration]) -> None:
    """Refuse a range holding non-blank lines that belong to no declaration.

    Raises:
        ScopeRewriteError: Naming the first offending line.
    """
    start, end = covering_range(declarations)
    covered: set[int] = set()
    for d in declarations:
        covered.update(range(d.start_line, d.end_line + 1))
    for line_no in range(start, end + 1):
        if line_no not in covered and lines[line_no - 1].strip():
            raise ScopeRewriteError.interleaved_content(line_no)


def rewrite_range(
    lines: Sequence[str],
    original: Sequence[Declaration],
    ordered: Sequence[Declaration],
) -> list[str] | None:
    """Replace the covering range of ``original`` with ``ordered`` texts.

    Texts are reproduced verbatim and joined by exactly one blank line.
    Lines before and after the range are untouched.

    Returns:
        The new lines, or None when the name order is unchanged (no write
        should happen).

    Raises:
        ScopeRewriteError: If the range holds foreign content.
    """
    if not original or not order_changed(original, ordered):
        return None
    check_gaps(lines, original)

    start, end = covering_range(original)
    body: list[str] = []
    for i, decl in enumerate(ordered):
        if i:
            body.append("")
        body.extend(decl.raw_text)
    return [*lines[: start - 1], *body, *lines[end:]]
