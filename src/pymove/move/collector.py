"""Import change collection.

For each candidate file: parse, query the module names of ``import`` and
``from ... import`` statements, resolve relative names against the file's
position in the project and keep every name equal to the old module or
one of its submodules.

Collection is cooperative: ``iter_change_batches`` is an async producer
yielding one batch of edits per ``batch_size`` files and handing control
back to the event loop in between. The consumer pulls batches at its own
pace and may stop (or be cancelled) between any two of them.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pymove.core.errors import RecoverableAnalysisError, ValidationError
from pymove.core.logging import get_logger
from pymove.core.progress import ProgressCallback
from pymove.move.changeset import ImportEdit
from pymove.move.paths import absolute_dotted_path, matches_module, replace_module_prefix
from pymove.parsing.queries import IMPORT_MODULE_QUERY
from pymove.parsing.treesitter import ParseResult, PythonParser, node_text

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

CompletionCallback = Callable[[list[ImportEdit]], None]


@dataclass(frozen=True, slots=True)
class ImportSite:
    """One matching module name node in a parsed file."""

    line_num: int  # 1-based
    end_line: int
    start_byte: int
    end_byte: int
    start_col: int  # byte column on line_num
    end_col: int  # byte column on end_line
    text: str  # as written, possibly relative
    old_import: str  # resolved absolute name
    new_import: str


def relative_posix(path: Path, project_root: Path) -> str:
    return path.resolve().relative_to(project_root.resolve()).as_posix()


def find_import_sites(
    parser: PythonParser,
    result: ParseResult,
    rel_path: str,
    old_dotted: str,
    new_dotted: str,
    *,
    logger: BoundLogger | None = None,
) -> list[ImportSite]:
    """Import module names in ``result`` that refer to ``old_dotted``.

    Relative names that climb out of the project are logged and skipped.
    """
    log = logger or get_logger("move.collector")
    sites: list[ImportSite] = []
    for _name, node in parser.captures(result.root_node, IMPORT_MODULE_QUERY):
        text = node_text(node)
        name = text
        if text.startswith("."):
            try:
                name = absolute_dotted_path(rel_path, text)
            except ValidationError as e:
                log.debug("relative_import_skipped", file=rel_path, name=text, reason=e.message)
                continue
        if not matches_module(name, old_dotted):
            continue
        sites.append(
            ImportSite(
                line_num=node.start_point[0] + 1,
                end_line=node.end_point[0] + 1,
                start_byte=node.start_byte,
                end_byte=node.end_byte,
                start_col=node.start_point[1],
                end_col=node.end_point[1],
                text=text,
                old_import=name,
                new_import=replace_module_prefix(name, old_dotted, new_dotted),
            )
        )
    return sites


def _replace_on_line(line: str, start_col: int, end_col: int, new_text: str) -> str:
    raw = line.encode("utf-8")
    return (raw[:start_col] + new_text.encode("utf-8") + raw[end_col:]).decode("utf-8")


def collect_file_changes(
    parser: PythonParser,
    file: Path,
    project_root: Path,
    old_dotted: str,
    new_dotted: str,
    *,
    context_lines: int = 3,
    logger: BoundLogger | None = None,
) -> list[ImportEdit]:
    """ImportEdits for one file.

    Raises:
        RecoverableAnalysisError: If the file cannot be read or parsed.
    """
    try:
        rel_path = relative_posix(file, project_root)
    except ValueError as e:
        raise RecoverableAnalysisError.parse_failed(str(file), "outside the project root") from e
    result = parser.parse_file(file)
    lines = result.lines
    edits: list[ImportEdit] = []
    for site in find_import_sites(
        parser, result, rel_path, old_dotted, new_dotted, logger=logger
    ):
        start = site.line_num - 1
        full_line = lines[start] if start < len(lines) else ""
        if site.end_line == site.line_num:
            new_line = _replace_on_line(full_line, site.start_col, site.end_col, site.new_import)
        else:
            new_line = full_line.replace(site.text.splitlines()[0], site.new_import, 1)
        edits.append(
            ImportEdit(
                file=file.resolve(),
                line_num=site.line_num,
                old_import=site.old_import,
                new_import=site.new_import,
                full_line=full_line,
                new_line=new_line,
                context_before=lines[max(0, start - context_lines) : start],
                context_after=lines[site.end_line : site.end_line + context_lines],
            )
        )
    return edits


async def iter_change_batches(
    files: Sequence[Path],
    project_root: Path,
    old_dotted: str,
    new_dotted: str,
    *,
    context_lines: int = 3,
    batch_size: int = 10,
    progress_cb: ProgressCallback | None = None,
    parser: PythonParser | None = None,
    logger: BoundLogger | None = None,
) -> AsyncIterator[list[ImportEdit]]:
    """Yield the edits of each batch of ``batch_size`` files.

    ``progress_cb(current, total, file)`` runs after each file. Files that
    cannot be analyzed are logged and skipped.
    """
    parser = parser or PythonParser()
    log = logger or get_logger("move.collector")
    total = len(files)
    for batch_start in range(0, total, batch_size):
        batch: list[ImportEdit] = []
        for offset, file in enumerate(files[batch_start : batch_start + batch_size]):
            try:
                batch.extend(
                    collect_file_changes(
                        parser,
                        file,
                        project_root,
                        old_dotted,
                        new_dotted,
                        context_lines=context_lines,
                        logger=log,
                    )
                )
            except RecoverableAnalysisError as e:
                log.warning("file_skipped", file=str(file), error=e.error_name, reason=e.message)
            if progress_cb is not None:
                progress_cb(batch_start + offset + 1, total, str(file))
        yield batch
        await asyncio.sleep(0)


async def collect_changes(
    files: Sequence[Path],
    project_root: Path,
    old_dotted: str,
    new_dotted: str,
    *,
    context_lines: int = 3,
    batch_size: int = 10,
    progress_cb: ProgressCallback | None = None,
    on_complete: CompletionCallback | None = None,
    **kwargs: Any,
) -> list[ImportEdit]:
    """Collect every edit, then call ``on_complete`` once with the full list."""
    changes: list[ImportEdit] = []
    async for batch in iter_change_batches(
        files,
        project_root,
        old_dotted,
        new_dotted,
        context_lines=context_lines,
        batch_size=batch_size,
        progress_cb=progress_cb,
        **kwargs,
    ):
        changes.extend(batch)
    if on_complete is not None:
        on_complete(changes)
    return changes
