"""Move operations: plan_move, preview_move, toggle_change, apply_change_set.

A move relocates one module or package and rewrites every import that
refers to it. ``plan_move`` does both in one step. ``preview_move`` builds a
reviewable ``ChangeSet`` instead; the caller toggles records and hands the
set to ``apply_change_set``, which moves the path (when accepted) and then
patches each file holding accepted import edits.

Nothing touches disk before ``apply_change_set`` (or a non-dry-run
``plan_move``). Once applying, every file is patched independently: a
failure is recorded and the next file is processed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from pymove.config.loader import find_project_root
from pymove.config.models import MoveConfig
from pymove.core.errors import (
    InternalError,
    PartialApplyError,
    RecoverableAnalysisError,
    ValidationError,
)
from pymove.core.files import read_source
from pymove.core.logging import clear_operation_id, get_logger, set_operation_id
from pymove.core.progress import ProgressCallback, pluralize
from pymove.move.changeset import ChangeSet, ChangeStatus, FileMove, ImportEdit
from pymove.move.collector import (
    CompletionCallback,
    ImportSite,
    collect_changes,
    find_import_sites,
    relative_posix,
)
from pymove.move.filesystem import is_git_repo, move_path, remove_path, validate_move
from pymove.move.patch import FilePatch, apply_patch, generate_patch
from pymove.move.paths import estimate_change, file_change_pattern, path_to_dotted_name
from pymove.move.search import TextSearch, build_providers
from pymove.parsing.treesitter import PythonParser, split_lines

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger


@dataclass
class MoveResult:
    """Result of a direct move."""

    success: bool
    files_affected: int
    message: str
    errors: list[tuple[str, str]] = field(default_factory=list)
    diffs: list[str] = field(default_factory=list)  # unified diffs, dry run only


@dataclass
class ApplyResult:
    """Per-file outcome of applying a change set."""

    moved: bool
    files_updated: int
    errors: list[tuple[str, str]] = field(default_factory=list)  # (file, reason)

    @property
    def success(self) -> bool:
        return not self.errors


@dataclass
class _Plan:
    old_path: Path
    new_path: Path
    old_rel: str
    new_rel: str
    old_dotted: str
    new_dotted: str


class MoveOps:
    """Import-aware module and package moves within one project."""

    def __init__(
        self,
        project_root: Path | None = None,
        config: MoveConfig | None = None,
        *,
        parser: PythonParser | None = None,
        search: TextSearch | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self._root = (project_root or find_project_root()).resolve()
        self._config = config or MoveConfig()
        self._parser = parser or PythonParser()
        self._log = logger or get_logger("move")
        self._search = search or TextSearch(
            build_providers(self._config.search_providers), logger=self._log
        )

    @property
    def project_root(self) -> Path:
        return self._root

    # =========================================================================
    # Direct move
    # =========================================================================

    async def plan_move(
        self,
        old_path: str | Path,
        new_path: str | Path,
        *,
        dry_run: bool = False,
        use_git: bool | None = None,
    ) -> MoveResult:
        """Move a module or package and rewrite every import of it.

        With ``dry_run`` nothing is written; the result reports how many
        files would change and carries a unified diff per file. Validation failures are returned as an
        unsuccessful result before anything is touched.
        """
        set_operation_id()
        try:
            try:
                plan = self._plan(old_path, new_path)
                for warning in validate_move(plan.old_path, plan.new_path):
                    self._log.warning("move_warning", message=warning)
            except ValidationError as e:
                self._log.warning("move_rejected", error=e.error_name, reason=e.message)
                return MoveResult(success=False, files_affected=0, message=e.message)

            files = await self._candidate_files(plan)
            edits = await collect_changes(
                files,
                self._root,
                plan.old_dotted,
                plan.new_dotted,
                context_lines=0,
                batch_size=self._config.batch_size,
                parser=self._parser,
                logger=self._log,
            )
            affected = len({e.file for e in edits})

            if dry_run:
                diffs, errors = self._diffs(edits, plan.old_dotted)
                return MoveResult(
                    success=not errors,
                    files_affected=affected,
                    message=(
                        f"Would move {plan.old_rel} → {plan.new_rel} and update "
                        f"{pluralize(len(edits), 'import')} in {pluralize(affected, 'file')}"
                    ),
                    errors=errors,
                    diffs=diffs,
                )

            try:
                move_path(
                    plan.old_path,
                    plan.new_path,
                    prefer_vcs=self._resolve_use_git(use_git),
                    logger=self._log,
                )
            except PartialApplyError as e:
                return MoveResult(success=False, files_affected=0, message=e.message)

            updated, errors = self._apply_edits(
                edits, plan.old_dotted, plan.old_path, plan.new_path
            )
            message = (
                f"Moved {plan.old_rel} → {plan.new_rel}, updated {pluralize(updated, 'file')}"
            )
            if errors:
                message += f", {pluralize(len(errors), 'file')} failed"
            self._log.info("move_complete", files_updated=updated, failed=len(errors))
            return MoveResult(
                success=not errors, files_affected=updated, message=message, errors=errors
            )
        finally:
            clear_operation_id()

    # =========================================================================
    # Preview / review
    # =========================================================================

    async def preview_move(
        self,
        old_path: str | Path,
        new_path: str | Path,
        *,
        use_git: bool | None = None,
        max_files: int | None = None,
        progress_cb: ProgressCallback | None = None,
        on_complete: CompletionCallback | None = None,
    ) -> ChangeSet:
        """Build the change set for a move without touching disk.

        An existing destination does not fail the preview; it is flagged
        on the ``FileMove`` record and must be confirmed at apply time.

        Raises:
            ValidationError: If the source is missing or not Python.
        """
        set_operation_id()
        try:
            plan = self._plan(old_path, new_path)
            for warning in validate_move(
                plan.old_path, plan.new_path, allow_existing_destination=True
            ):
                self._log.warning("move_warning", message=warning)

            move = FileMove(
                old_path=plan.old_rel,
                new_path=plan.new_rel,
                use_git=self._resolve_use_git(use_git),
                dest_exists=plan.new_path.exists(),
            )

            files = await self._candidate_files(plan)
            cap = max_files or self._config.max_files
            total = len(files)
            truncated = total > cap
            if truncated:
                self._log.warning("candidates_truncated", total=total, processed=cap)
                files = files[:cap]

            edits = await collect_changes(
                files,
                self._root,
                plan.old_dotted,
                plan.new_dotted,
                context_lines=self._config.context_lines,
                batch_size=self._config.batch_size,
                progress_cb=progress_cb,
                on_complete=on_complete,
                parser=self._parser,
                logger=self._log,
            )

            message = ""
            if not files:
                message = f"No files found that may import {plan.old_dotted}"
            elif not edits:
                message = (
                    f"No imports of {plan.old_dotted} found in {pluralize(len(files), 'file')}"
                )

            self._log.info(
                "preview_built", edits=len(edits), files=len({e.file for e in edits})
            )
            return ChangeSet(
                project_root=self._root,
                old_name=plan.old_dotted,
                new_name=plan.new_dotted,
                records=[move, *edits],
                truncated=truncated,
                total_files=total,
                message=message,
            )
        finally:
            clear_operation_id()

    def toggle_change(self, change_set: ChangeSet, position: int) -> ChangeStatus | None:
        """Toggle the record rendered at or before preview line ``position``.

        Returns the record's new status, or None when no record precedes
        ``position``.
        """
        index = change_set.find_at(position)
        if index is None:
            return None
        return change_set.toggle(index)

    async def apply_change_set(
        self,
        change_set: ChangeSet,
        *,
        confirm_overwrite: bool = False,
    ) -> ApplyResult:
        """Apply the accepted records of ``change_set``.

        The move runs first (when accepted). Accepted import edits are then
        applied file by file at their post-move locations.

        Raises:
            ValidationError: If the accepted move's source is gone or its
                destination exists without ``confirm_overwrite``. Nothing
                is modified in that case.
            InternalError: If the change set was already applied.
        """
        if change_set.applied:
            raise InternalError.unexpected("change set was already applied")
        if change_set.project_root.resolve() != self._root:
            raise InternalError.unexpected(
                "change set belongs to another project", project_root=str(change_set.project_root)
            )

        set_operation_id()
        try:
            move = change_set.move
            old_path = self._root / move.old_path
            new_path = self._root / move.new_path
            moving = move.status is ChangeStatus.ACCEPTED
            if moving:
                validate_move(old_path, new_path, allow_existing_destination=confirm_overwrite)

            change_set.applied = True
            errors: list[tuple[str, str]] = []
            moved = False
            if moving:
                try:
                    if new_path.exists():
                        remove_path(new_path)
                        self._log.info("destination_removed", path=move.new_path)
                    move_path(old_path, new_path, prefer_vcs=move.use_git, logger=self._log)
                    moved = True
                except PartialApplyError as e:
                    errors.append((move.old_path, e.message))
                except OSError as e:
                    errors.append((move.new_path, str(e)))

            updated, edit_errors = self._apply_edits(
                change_set.accepted_edits,
                change_set.old_name,
                old_path if moved else None,
                new_path if moved else None,
            )
            errors.extend(edit_errors)
            self._log.info(
                "change_set_applied", moved=moved, files_updated=updated, failed=len(errors)
            )
            return ApplyResult(moved=moved, files_updated=updated, errors=errors)
        finally:
            clear_operation_id()

    # =========================================================================
    # Internals
    # =========================================================================

    def _plan(self, old_path: str | Path, new_path: str | Path) -> _Plan:
        old_abs = self._absolute(old_path)
        new_abs = self._absolute(new_path)
        try:
            old_rel = relative_posix(old_abs, self._root)
            new_rel = relative_posix(new_abs, self._root)
        except ValueError as e:
            raise ValidationError.invalid_import_path(f"{old_path} -> {new_path}") from e
        return _Plan(
            old_path=old_abs,
            new_path=new_abs,
            old_rel=old_rel,
            new_rel=new_rel,
            old_dotted=path_to_dotted_name(old_rel),
            new_dotted=path_to_dotted_name(new_rel),
        )

    def _absolute(self, path: str | Path) -> Path:
        p = Path(path).expanduser()
        return p if p.is_absolute() else self._root / p

    def _resolve_use_git(self, use_git: bool | None) -> bool:
        if use_git is not None:
            return use_git
        if self._config.use_git is not None:
            return self._config.use_git
        return is_git_repo(self._root)

    async def _candidate_files(self, plan: _Plan) -> list[Path]:
        pattern = file_change_pattern(estimate_change(plan.old_dotted, plan.new_dotted))
        self._log.debug("candidate_search", pattern=pattern, old=plan.old_dotted)
        return await self._search.find_files(pattern, self._root, self._config.file_glob)

    def _apply_edits(
        self,
        edits: list[ImportEdit],
        old_dotted: str,
        moved_from: Path | None,
        moved_to: Path | None,
    ) -> tuple[int, list[tuple[str, str]]]:
        """Patch every file holding ``edits``; returns (files updated, errors)."""
        updated = 0
        errors: list[tuple[str, str]] = []
        for original, file_edits in _by_file(edits):
            target = _remap(original, moved_from, moved_to)
            try:
                self._rewrite_imports(original, target, old_dotted, file_edits)
            except (PartialApplyError, RecoverableAnalysisError) as e:
                self._log.warning("file_apply_failed", file=str(target), reason=e.message)
                errors.append((str(target), e.message))
                continue
            updated += 1
        return updated, errors

    def _diffs(
        self, edits: list[ImportEdit], old_dotted: str
    ) -> tuple[list[str], list[tuple[str, str]]]:
        diffs: list[str] = []
        errors: list[tuple[str, str]] = []
        for original, file_edits in _by_file(edits):
            try:
                patch = self._build_patch(original, original, old_dotted, file_edits)
            except (PartialApplyError, RecoverableAnalysisError) as e:
                errors.append((str(original), e.message))
                continue
            if patch.diff:
                diffs.append(patch.diff)
        return diffs, errors

    def _rewrite_imports(
        self, original: Path, target: Path, old_dotted: str, edits: list[ImportEdit]
    ) -> None:
        patch = self._build_patch(original, target, old_dotted, edits)
        apply_patch(patch)
        self._log.debug("imports_rewritten", file=str(target), count=len(edits))

    def _build_patch(
        self, original: Path, target: Path, old_dotted: str, edits: list[ImportEdit]
    ) -> FilePatch:
        """Re-locate each edit's import in ``target`` and build its patch.

        Relative imports resolve against ``original`` so that edits made
        before a directory move still match after it.
        """
        rel_path = relative_posix(original, self._root)
        try:
            text = read_source(target)
        except (OSError, UnicodeDecodeError) as e:
            raise PartialApplyError.patch_failed(str(target), str(e)) from e

        result = self._parser.parse(text, target)
        available: dict[tuple[int, str], list[ImportSite]] = {}
        for site in find_import_sites(
            self._parser,
            result,
            rel_path,
            old_dotted,
            old_dotted,
            logger=self._log,
        ):
            available.setdefault((site.line_num, site.old_import), []).append(site)

        chosen: list[tuple[ImportSite, str]] = []
        for edit in sorted(edits, key=lambda e: e.line_num):
            sites = available.get((edit.line_num, edit.old_import))
            if not sites:
                raise PartialApplyError.patch_failed(
                    str(target), f"import of {edit.old_import} at line {edit.line_num} not found"
                )
            chosen.append((sites.pop(0), edit.new_import))

        source = result.source
        for site, new_import in sorted(chosen, key=lambda c: c[0].start_byte, reverse=True):
            source = source[: site.start_byte] + new_import.encode("utf-8") + source[site.end_byte :]

        return generate_patch(
            target,
            result.lines,
            split_lines(source.decode("utf-8")),
            label=relative_posix(target, self._root),
        )


def _by_file(edits: list[ImportEdit]) -> list[tuple[Path, list[ImportEdit]]]:
    grouped: dict[Path, list[ImportEdit]] = {}
    for edit in edits:
        grouped.setdefault(edit.file, []).append(edit)
    return sorted(grouped.items())


def _remap(path: Path, moved_from: Path | None, moved_to: Path | None) -> Path:
    """Location of ``path`` after ``moved_from`` was moved to ``moved_to``."""
    if moved_from is None or moved_to is None:
        return path
    old = moved_from.resolve()
    try:
        rest = path.relative_to(old)
    except ValueError:
        return path
    return moved_to.resolve() / rest
