"""Sort data models - declarations, policies and results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from pymove.config.constants import FUNCTION_CATEGORIES
from pymove.config.models import SortingConfig


class DeclarationKind(Enum):
    """Kind of an extracted declaration."""

    FUNCTION = "function"
    CLASS = "class"
    CONSTANT = "constant"
    # Any other module-level statement inside a rewrite range. Never moves.
    STATEMENT = "statement"


@dataclass(frozen=True, slots=True)
class Declaration:
    """A named declaration extracted from one scope of a parsed file.

    Lines are 1-based and inclusive. The span starts at the first attached
    leading comment line or decorator and ends at the last line of the
    definition. Declarations are only valid for the text they were
    extracted from; any rewrite of the scope requires re-extraction.
    """

    name: str
    kind: DeclarationKind
    start_line: int
    end_line: int
    raw_text: tuple[str, ...]
    decorators: tuple[str, ...] = ()
    dependency_names: frozenset[str] = frozenset()
    category: str = "public"
    node_start_line: int = 0  # first line of the node itself, without leading comments

    @property
    def declared_range(self) -> tuple[int, int]:
        return (self.start_line, self.end_line)

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1


@dataclass(frozen=True, slots=True)
class SortPolicy:
    """Ordering policy for a method or function sort.

    ``preserve_names`` always head the output, ordered by their position in
    this tuple. Categories not listed in ``category_order`` follow the listed
    ones so no declaration is ever dropped.
    """

    preserve_names: tuple[str, ...] = ()
    category_order: tuple[str, ...] = FUNCTION_CATEGORIES
    sort_within_categories: bool = False
    dependency_sort_enabled: bool = False

    @classmethod
    def from_config(
        cls,
        config: SortingConfig,
        *,
        sort_within_categories: bool | None = None,
        dependency_sort: bool = False,
    ) -> SortPolicy:
        return cls(
            preserve_names=tuple(config.preserve_methods),
            category_order=tuple(config.category_order),
            sort_within_categories=(
                config.sort_within_categories
                if sort_within_categories is None
                else sort_within_categories
            ),
            dependency_sort_enabled=dependency_sort,
        )


@dataclass(frozen=True, slots=True)
class FileScope:
    """The whole file: module objects, then the methods of every class."""


@dataclass(frozen=True, slots=True)
class ClassScope:
    """The innermost class enclosing ``line`` (1-based)."""

    line: int


@dataclass(frozen=True, slots=True)
class SelectionScope:
    """Declarations fully inside ``start_line``..``end_line`` (1-based, inclusive)."""

    start_line: int
    end_line: int


Scope = FileScope | ClassScope | SelectionScope


@dataclass
class RewriteResult:
    """Outcome of a reorganize call."""

    changed: bool
    count: int  # declarations in rewritten scopes
    content: str = ""
    scopes: list[str] = field(default_factory=list)  # rewritten scope names
    skipped: list[str] = field(default_factory=list)  # scopes refused, with reason
    cyclic: list[str] = field(default_factory=list)  # names placed by cycle fallback
