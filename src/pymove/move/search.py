"""Candidate file search.

Ranked provider strategies behind one interface. Each provider either
returns the matching files (possibly none) or raises ``SearchUnavailable``;
the first provider that answers wins, failures are logged and the next
provider is tried.

- ``ripgrep``: ``rg --files-with-matches``; honors ignore files
- ``grep``: ``grep -rlE``
- ``python``: in-process regex walk, skipping environments and caches
"""

from __future__ import annotations

import asyncio
import fnmatch
import os
import re
import shutil
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from pymove.config.constants import SEARCH_TIMEOUT_SEC
from pymove.core.excludes import is_prunable
from pymove.core.logging import get_logger

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger


class SearchUnavailable(Exception):
    """A provider could not answer (missing tool, crash, timeout)."""


class SearchProvider(Protocol):
    name: str

    async def search(self, pattern: str, directory: Path, file_glob: str) -> list[Path]: ...


async def _run_tool(cmd: list[str], cwd: Path, timeout: float) -> str:
    """Run a search tool; exit status 1 means "no matches"."""
    if not shutil.which(cmd[0]):
        raise SearchUnavailable(f"Executable not found: {cmd[0]}")
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=cwd,
        )
    except OSError as e:
        raise SearchUnavailable(str(e)) from e

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(proc.communicate(), timeout)
    except TimeoutError as e:
        proc.kill()
        await proc.wait()
        raise SearchUnavailable(f"{cmd[0]} timed out after {timeout}s") from e

    if proc.returncode == 1:
        return ""
    if proc.returncode != 0:
        stderr = stderr_bytes.decode(errors="replace").strip()
        raise SearchUnavailable(f"{cmd[0]} exited with {proc.returncode}: {stderr}")
    return stdout_bytes.decode(errors="replace")


def _parse_paths(output: str, directory: Path) -> list[Path]:
    paths = []
    for line in output.splitlines():
        line = line.strip()
        if line:
            p = Path(line)
            paths.append((p if p.is_absolute() else directory / p).resolve())
    return paths


class RipgrepProvider:
    name = "ripgrep"

    def __init__(self, timeout: float = SEARCH_TIMEOUT_SEC) -> None:
        self._timeout = timeout

    async def search(self, pattern: str, directory: Path, file_glob: str) -> list[Path]:
        cmd = [
            "rg",
            "--files-with-matches",
            "--no-messages",
            "-g",
            file_glob,
            "-e",
            pattern,
            ".",
        ]
        return _parse_paths(await _run_tool(cmd, directory, self._timeout), directory)


class GrepProvider:
    name = "grep"

    def __init__(self, timeout: float = SEARCH_TIMEOUT_SEC) -> None:
        self._timeout = timeout

    async def search(self, pattern: str, directory: Path, file_glob: str) -> list[Path]:
        cmd = ["grep", "-rlE", "--include", file_glob]
        cmd.extend(f"--exclude-dir={d}" for d in (".git", ".hg", ".svn"))
        cmd.extend(["-e", pattern, "."])
        return _parse_paths(await _run_tool(cmd, directory, self._timeout), directory)


class PythonSearchProvider:
    """In-process fallback; always available."""

    name = "python"

    async def search(self, pattern: str, directory: Path, file_glob: str) -> list[Path]:
        try:
            regex = re.compile(pattern)
        except re.error as e:
            raise SearchUnavailable(f"Invalid pattern: {e}") from e

        matches: list[Path] = []
        for count, path in enumerate(_walk(directory, file_glob), 1):
            try:
                text = path.read_text(encoding="utf-8", errors="replace")
            except OSError:
                continue
            if any(regex.search(line) for line in text.splitlines()):
                matches.append(path.resolve())
            if count % 50 == 0:
                await asyncio.sleep(0)
        return matches


def _walk(directory: Path, file_glob: str) -> list[Path]:
    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(directory):
        dirnames[:] = sorted(d for d in dirnames if not is_prunable(d))
        for filename in sorted(filenames):
            if fnmatch.fnmatch(filename, file_glob):
                found.append(Path(dirpath) / filename)
    return found


_PROVIDERS: dict[str, type[RipgrepProvider] | type[GrepProvider] | type[PythonSearchProvider]] = {
    "ripgrep": RipgrepProvider,
    "grep": GrepProvider,
    "python": PythonSearchProvider,
}


def build_providers(names: Sequence[str]) -> list[SearchProvider]:
    """Instantiate providers by configured name, preserving rank."""
    return [_PROVIDERS[name]() for name in names]


class TextSearch:
    """Tries each provider in rank order until one answers."""

    def __init__(
        self,
        providers: Sequence[SearchProvider] | None = None,
        *,
        logger: BoundLogger | None = None,
    ) -> None:
        self._providers = list(providers or build_providers(["ripgrep", "grep", "python"]))
        self._log = logger or get_logger("move.search")

    async def find_files(self, pattern: str, directory: Path, file_glob: str = "*.py") -> list[Path]:
        """Files under ``directory`` matching ``file_glob`` with a line matching ``pattern``.

        Returns a sorted, de-duplicated list, or an empty list when every
        provider failed.
        """
        for provider in self._providers:
            try:
                files = await provider.search(pattern, directory, file_glob)
            except SearchUnavailable as e:
                self._log.debug("search_provider_failed", provider=provider.name, reason=str(e))
                continue
            self._log.debug(
                "search_complete", provider=provider.name, pattern=pattern, count=len(files)
            )
            return sorted(set(files))

        self._log.warning("search_unavailable", pattern=pattern, directory=str(directory))
        return []
