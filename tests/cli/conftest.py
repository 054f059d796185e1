"""Shared fixtures for CLI tests."""

from pathlib import Path

import pytest

from pymove.core.progress import get_console


@pytest.fixture(autouse=True)
def wide_console(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep rich from wrapping status lines in captured output."""
    monkeypatch.setattr(get_console(), "width", 500)


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A small package with one importer, used as the working directory."""
    (tmp_path / "pyproject.toml").write_text("")
    pkg = tmp_path / "pkg"
    pkg.mkdir()
    (pkg / "__init__.py").write_text("")
    (pkg / "old.py").write_text("X = 1\n")
    (pkg / "user.py").write_text("from pkg.old import X\n\nprint(X)\n")
    monkeypatch.chdir(tmp_path)
    return tmp_path
