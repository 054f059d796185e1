"""Sort operations - declaration reorganization.

Three scopes are supported:

- ``FileScope``: module objects first (functions, classes, constants),
  then the methods of every class, nested classes included
- ``ClassScope``: the methods of the innermost class enclosing a line
- ``SelectionScope``: methods of the class enclosing a line range, or
  module functions, fully inside that range

Every rewrite re-parses the text before the next scope is analyzed; no
declaration ranges survive a write.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

from pymove.config.models import SortingConfig
from pymove.core.errors import RecoverableAnalysisError, ScopeRewriteError
from pymove.core.files import join_lines, read_source, write_text_atomic
from pymove.core.logging import clear_operation_id, get_logger, set_operation_id
from pymove.parsing.treesitter import ParseResult, PythonParser
from pymove.sort.extraction import (
    class_at_line,
    class_enclosing,
    extract_class_methods,
    extract_module_functions,
    extract_module_objects,
    find_classes,
    qualified_class_name,
)
from pymove.sort.models import (
    ClassScope,
    Declaration,
    FileScope,
    RewriteResult,
    Scope,
    SelectionScope,
    SortPolicy,
)
from pymove.sort.rewriter import rewrite_range
from pymove.sort.sorter import TopologicalOrder, sort_functions, sort_module_objects

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger


class _Buffer:
    """Mutable source text, re-parsed after every rewrite."""

    def __init__(self, parser: PythonParser, content: str) -> None:
        self._parser = parser
        self.trailing_newline = content.endswith("\n")
        self.result: ParseResult = parser.parse(content)
        self.newline = self.result.newline

    @property
    def text(self) -> str:
        return self.result.text

    def replace_lines(self, lines: list[str]) -> None:
        text = join_lines(lines, self.newline, trailing=self.trailing_newline)
        self.result = self._parser.parse(text)


class SortOps:
    """Declaration reorganizer.

    Usage::

        ops = SortOps(config.sorting)
        result = ops.reorganize(Path("pkg/mod.py"), FileScope())
        if result.changed:
            print(f"reordered {result.count} declarations")
    """

    def __init__(
        self,
        config: SortingConfig | None = None,
        *,
        parser: PythonParser | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self._config = config or SortingConfig()
        self._parser = parser or PythonParser()
        self._log = logger or get_logger("sort")

    # =========================================================================
    # Public API
    # =========================================================================

    def reorganize(
        self,
        path: Path,
        scope: Scope | None = None,
        *,
        use_dependency_sort: bool | None = None,
        write: bool = True,
    ) -> RewriteResult:
        """Reorganize declarations of ``path`` in place.

        Args:
            path: Python file to rewrite.
            scope: File, class or selection scope. Defaults to the file.
            use_dependency_sort: Force function-level dependency sorting on or
                off. None uses the scope default (on for module functions
                in a selection when ``enable_dependency_sort``, off for
                methods).
            write: When False, compute the result without touching disk.

        Returns:
            RewriteResult; ``content`` holds the new text.

        Raises:
            RecoverableAnalysisError: File unreadable or grammar unavailable.
            ScopeRewriteError: Class/selection scope missing or not rewritable.
        """
        set_operation_id()
        try:
            try:
                content = read_source(path)
            except (OSError, UnicodeDecodeError) as e:
                raise RecoverableAnalysisError.parse_failed(str(path), str(e)) from e

            result = self.reorganize_source(
                content, scope, use_dependency_sort=use_dependency_sort
            )
            if result.changed and write:
                write_text_atomic(path, result.content)
                self._log.info("file_reorganized", path=str(path), count=result.count)
            return result
        finally:
            clear_operation_id()

    def reorganize_source(
        self,
        content: str,
        scope: Scope | None = None,
        *,
        use_dependency_sort: bool | None = None,
    ) -> RewriteResult:
        """Reorganize declarations of ``content`` and return the new text."""
        scope = scope or FileScope()
        buffer = _Buffer(self._parser, content)
        if buffer.result.has_errors:
            self._log.warning("parse_errors", error_count=buffer.result.error_count)

        outcome = RewriteResult(changed=False, count=0, content=content)
        if isinstance(scope, ClassScope):
            self._sort_class(buffer, outcome, scope.line, use_dependency_sort)
        elif isinstance(scope, SelectionScope):
            self._sort_selection(
                buffer, outcome, scope.start_line, scope.end_line, use_dependency_sort
            )
        else:
            self._sort_file(buffer, outcome, use_dependency_sort)

        outcome.content = buffer.text
        outcome.changed = buffer.text != content
        return outcome

    # =========================================================================
    # Scopes
    # =========================================================================

    def _method_policy(self, lexsort: bool | None, dependency_sort: bool) -> SortPolicy:
        return SortPolicy.from_config(
            self._config,
            sort_within_categories=lexsort,
            dependency_sort=dependency_sort,
        )

    def _sort_file(
        self,
        buffer: _Buffer,
        outcome: RewriteResult,
        use_dependency_sort: bool | None,
    ) -> None:
        # Phase 1: module objects
        errors: list[RecoverableAnalysisError] = []
        try:
            objects = extract_module_objects(self._parser, buffer.result, errors=errors)
            self._log_skipped(errors, outcome)
            if objects:
                ordered, topo = sort_module_objects(objects, self._config.module_categories)
                self._note_cycle(topo, "<module>", outcome)
                self._apply(buffer, objects, ordered, "<module>", outcome)
        except ScopeRewriteError as e:
            self._skip("<module>", e, outcome)

        # Phase 2: methods of every class, re-parsing after each write
        policy = self._method_policy(None, bool(use_dependency_sort))
        processed: set[str] = set()
        while True:
            target = None
            for info in find_classes(self._parser, buffer.result):
                if info.qualified_name not in processed:
                    target = info
                    break
            if target is None:
                break
            processed.add(target.qualified_name)
            try:
                self._sort_methods(buffer, target.node, target.qualified_name, policy, outcome)
            except ScopeRewriteError as e:
                self._skip(target.qualified_name, e, outcome)

    def _sort_class(
        self,
        buffer: _Buffer,
        outcome: RewriteResult,
        line: int,
        use_dependency_sort: bool | None,
    ) -> None:
        class_node = class_at_line(self._parser, buffer.result, line)
        if class_node is None:
            raise ScopeRewriteError.no_scope("class", f"no class encloses line {line}")
        policy = self._method_policy(None, bool(use_dependency_sort))
        self._sort_methods(buffer, class_node, qualified_class_name(class_node), policy, outcome)

    def _sort_selection(
        self,
        buffer: _Buffer,
        outcome: RewriteResult,
        start_line: int,
        end_line: int,
        use_dependency_sort: bool | None,
    ) -> None:
        if start_line > end_line:
            start_line, end_line = end_line, start_line

        errors: list[RecoverableAnalysisError] = []
        class_node = class_enclosing(self._parser, buffer.result, start_line, end_line)
        if class_node is not None:
            name = qualified_class_name(class_node)
            candidates = extract_class_methods(
                self._parser, buffer.result, class_node, errors=errors
            )
        else:
            name = "<module>"
            candidates = extract_module_functions(self._parser, buffer.result, errors=errors)
        self._log_skipped(errors, outcome)

        selected = [
            d for d in candidates if d.node_start_line >= start_line and d.end_line <= end_line
        ]
        if not selected:
            self._log.info("selection_empty", start_line=start_line, end_line=end_line)
            return

        if use_dependency_sort is None:
            dependency_sort = self._config.enable_dependency_sort and class_node is None
        else:
            dependency_sort = use_dependency_sort
        policy = self._method_policy(self._config.visual_selection_lexsort, dependency_sort)
        ordered, topo = sort_functions(selected, policy)
        self._note_cycle(topo, name, outcome)
        self._apply(buffer, selected, ordered, name, outcome)

    def _sort_methods(
        self,
        buffer: _Buffer,
        class_node: Any,
        name: str,
        policy: SortPolicy,
        outcome: RewriteResult,
    ) -> None:
        errors: list[RecoverableAnalysisError] = []
        methods = extract_class_methods(self._parser, buffer.result, class_node, errors=errors)
        self._log_skipped(errors, outcome)
        if not methods:
            self._log.debug("class_without_methods", scope=name)
            return
        ordered, topo = sort_functions(methods, policy)
        self._note_cycle(topo, name, outcome)
        self._apply(buffer, methods, ordered, name, outcome)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _apply(
        self,
        buffer: _Buffer,
        original: list[Declaration],
        ordered: list[Declaration],
        name: str,
        outcome: RewriteResult,
    ) -> None:
        new_lines = rewrite_range(buffer.result.lines, original, ordered)
        if new_lines is None:
            self._log.debug("scope_unchanged", scope=name, count=len(original))
            return
        buffer.replace_lines(new_lines)
        outcome.count += len(original)
        outcome.scopes.append(name)
        self._log.debug(
            "scope_rewritten",
            scope=name,
            order=[d.name for d in ordered],
        )

    def _note_cycle(
        self, topo: TopologicalOrder | None, name: str, outcome: RewriteResult
    ) -> None:
        if topo is not None and topo.has_cycle:
            outcome.cyclic.extend(topo.cyclic)
            self._log.debug("dependency_cycle", scope=name, names=list(topo.cyclic))

    def _skip(self, name: str, error: ScopeRewriteError, outcome: RewriteResult) -> None:
        outcome.skipped.append(f"{name}: {error.message}")
        self._log.warning("scope_skipped", scope=name, reason=error.message)

    def _log_skipped(
        self, errors: list[RecoverableAnalysisError], outcome: RewriteResult
    ) -> None:
        for e in errors:
            outcome.skipped.append(e.message)
            self._log.warning("declaration_skipped", error=e.error_name, **e.details)
