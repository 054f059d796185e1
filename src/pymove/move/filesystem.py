"""Move validation and ranked move providers.

``GitMoveProvider`` mirrors ``git mv`` through pygit2: the path is renamed
on disk and its index entries are re-keyed, keeping staged content. It
refuses untracked sources, in which case ``FilesystemMoveProvider`` takes
over with a plain rename.
"""

from __future__ import annotations

import shutil
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import pygit2

from pymove.core.errors import PartialApplyError, ValidationError
from pymove.core.logging import get_logger

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger


class MoveUnavailable(Exception):
    """A provider could not perform the move; the next one is tried."""


class MoveProvider(Protocol):
    name: str

    def move(self, old_path: Path, new_path: Path) -> None: ...


def is_git_repo(project_root: Path) -> bool:
    return pygit2.discover_repository(str(project_root)) is not None


def validate_move(
    old_path: Path,
    new_path: Path,
    *,
    allow_existing_destination: bool = False,
) -> list[str]:
    """Check a move's preconditions without touching disk.

    Returns:
        Warnings that do not block the move.

    Raises:
        ValidationError: Source missing, destination occupied (unless
            allowed) or a source file that is not Python.
    """
    if not old_path.exists():
        raise ValidationError.source_missing(str(old_path))
    if new_path.exists() and not allow_existing_destination:
        raise ValidationError.destination_exists(str(new_path))
    if old_path.is_file() and old_path.suffix != ".py":
        raise ValidationError.not_python(str(old_path))

    warnings: list[str] = []
    if old_path.is_dir() and not (old_path / "__init__.py").exists():
        warnings.append(f"Source directory is not a Python package (no __init__.py): {old_path}")
    return warnings


def create_parent_dirs(path: Path) -> bool:
    """Create missing parents of ``path``; True when something was created."""
    if path.parent.exists():
        return False
    path.parent.mkdir(parents=True, exist_ok=True)
    return True


def remove_path(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


class GitMoveProvider:
    name = "git"

    def move(self, old_path: Path, new_path: Path) -> None:
        repo_path = pygit2.discover_repository(str(old_path.parent))
        if repo_path is None:
            raise MoveUnavailable(f"Not inside a git repository: {old_path}")
        try:
            repo = pygit2.Repository(repo_path)
        except pygit2.GitError as e:
            raise MoveUnavailable(str(e)) from e
        if repo.workdir is None:
            raise MoveUnavailable("Bare repository")

        workdir = Path(repo.workdir).resolve()
        try:
            old_rel = old_path.resolve().relative_to(workdir).as_posix()
            new_rel = new_path.resolve().relative_to(workdir).as_posix()
        except ValueError as e:
            raise MoveUnavailable(f"Path outside of the work tree: {e}") from e

        index = repo.index
        prefix = old_rel + "/"
        entries = [e for e in index if e.path == old_rel or e.path.startswith(prefix)]
        if not entries:
            raise MoveUnavailable(f"Not under version control: {old_rel}")

        old_path.rename(new_path)
        for entry in entries:
            moved = new_rel + entry.path[len(old_rel) :]
            index.add(pygit2.IndexEntry(moved, entry.id, entry.mode))
            index.remove(entry.path)
        index.write()


class FilesystemMoveProvider:
    name = "filesystem"

    def move(self, old_path: Path, new_path: Path) -> None:
        try:
            shutil.move(str(old_path), str(new_path))
        except OSError as e:
            raise MoveUnavailable(str(e)) from e


def move_path(
    old_path: Path,
    new_path: Path,
    *,
    prefer_vcs: bool,
    providers: Sequence[MoveProvider] | None = None,
    logger: BoundLogger | None = None,
) -> str:
    """Move ``old_path`` to ``new_path`` with the first provider that succeeds.

    Missing parent directories are created first.

    Returns:
        Name of the provider that performed the move.

    Raises:
        PartialApplyError: If every provider failed.
    """
    log = logger or get_logger("move.filesystem")
    if providers is None:
        providers = [FilesystemMoveProvider()]
        if prefer_vcs:
            providers.insert(0, GitMoveProvider())

    if create_parent_dirs(new_path):
        log.info("parent_dirs_created", path=str(new_path.parent))

    reasons: list[str] = []
    for provider in providers:
        try:
            provider.move(old_path, new_path)
        except MoveUnavailable as e:
            reasons.append(f"{provider.name}: {e}")
            log.warning("move_provider_failed", provider=provider.name, reason=str(e))
            continue
        log.info("path_moved", provider=provider.name, old=str(old_path), new=str(new_path))
        return provider.name

    raise PartialApplyError.move_failed(str(old_path), str(new_path), "; ".join(reasons))
