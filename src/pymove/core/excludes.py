"""Directories never searched for importer files.

Tier 0 (HARDCODED_DIRS): VCS internals, never traversed.
Tier 1 (DEFAULT_PRUNABLE_DIRS): environments, caches and build outputs.
"""

from __future__ import annotations

HARDCODED_DIRS: frozenset[str] = frozenset(
    (
        ".git",
        ".svn",
        ".hg",
        ".bzr",
    )
)

DEFAULT_PRUNABLE_DIRS: frozenset[str] = frozenset(
    (
        # Environments
        "venv",
        ".venv",
        ".virtualenv",
        ".tox",
        ".nox",
        # Caches
        "__pycache__",
        ".pytest_cache",
        ".mypy_cache",
        ".ruff_cache",
        ".hypothesis",
        # Build outputs
        "build",
        "dist",
        ".eggs",
        "node_modules",
    )
)

PRUNABLE_DIRS: frozenset[str] = HARDCODED_DIRS | DEFAULT_PRUNABLE_DIRS


def is_prunable(dirname: str) -> bool:
    """Whether a directory name is skipped by the in-process search."""
    return dirname in PRUNABLE_DIRS or dirname.endswith(".egg-info")
