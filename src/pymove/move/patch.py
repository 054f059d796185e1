"""Per-file patch generation and application.

A patch holds one hunk per contiguous run of changed lines, each with up
to N lines of surrounding context (hunks whose context would overlap are
merged, as in unified diff). Applying a patch checks every context and
removed line against the file's current text before anything is written.
"""

from __future__ import annotations

import difflib
from dataclasses import dataclass, field
from pathlib import Path

from pymove.core.errors import PartialApplyError
from pymove.core.files import join_lines, read_source, write_text_atomic
from pymove.parsing.treesitter import split_lines


@dataclass(frozen=True, slots=True)
class Hunk:
    """Lines are 0-based indexes into the old/new line lists."""

    old_start: int
    old_lines: tuple[str, ...]  # context + removed, in order
    new_start: int
    new_lines: tuple[str, ...]  # context + added, in order


@dataclass
class FilePatch:
    path: Path
    hunks: list[Hunk] = field(default_factory=list)
    diff: str = ""

    @property
    def is_empty(self) -> bool:
        return not self.hunks


def generate_patch(
    path: Path,
    old_lines: list[str],
    new_lines: list[str],
    *,
    context_lines: int = 3,
    label: str | None = None,
) -> FilePatch:
    """Patch turning ``old_lines`` into ``new_lines``.

    ``label`` names the file in the diff headers (default: its base name).
    """
    matcher = difflib.SequenceMatcher(a=old_lines, b=new_lines, autojunk=False)
    hunks: list[Hunk] = []
    for group in matcher.get_grouped_opcodes(context_lines):
        old_start, old_end = group[0][1], group[-1][2]
        new_start, new_end = group[0][3], group[-1][4]
        hunks.append(
            Hunk(
                old_start=old_start,
                old_lines=tuple(old_lines[old_start:old_end]),
                new_start=new_start,
                new_lines=tuple(new_lines[new_start:new_end]),
            )
        )

    diff = "\n".join(
        difflib.unified_diff(
            old_lines,
            new_lines,
            fromfile=f"a/{label or path.name}",
            tofile=f"b/{label or path.name}",
            n=context_lines,
            lineterm="",
        )
    )
    return FilePatch(path=path, hunks=hunks, diff=diff)


def apply_hunks(lines: list[str], patch: FilePatch) -> list[str]:
    """Apply ``patch`` to ``lines`` in memory.

    Raises:
        PartialApplyError: If a hunk's old side does not match.
    """
    result = list(lines)
    shift = 0
    for hunk in patch.hunks:
        start = hunk.old_start + shift
        end = start + len(hunk.old_lines)
        if tuple(result[start:end]) != hunk.old_lines:
            raise PartialApplyError.patch_failed(
                str(patch.path), f"hunk at line {hunk.old_start + 1} does not match"
            )
        result[start:end] = hunk.new_lines
        shift += len(hunk.new_lines) - len(hunk.old_lines)
    return result


def apply_patch(patch: FilePatch) -> None:
    """Re-read ``patch.path``, apply the hunks and write atomically.

    Raises:
        PartialApplyError: If the file changed underneath the patch or the
            write failed. The file is untouched in either case.
    """
    if patch.is_empty:
        return
    try:
        text = read_source(patch.path)
    except (OSError, UnicodeDecodeError) as e:
        raise PartialApplyError.patch_failed(str(patch.path), str(e)) from e

    newline = "\r\n" if "\r\n" in text else "\n"
    new_lines = apply_hunks(split_lines(text), patch)
    try:
        write_text_atomic(
            patch.path, join_lines(new_lines, newline, trailing=text.endswith("\n"))
        )
    except OSError as e:
        raise PartialApplyError.write_failed(str(patch.path), str(e)) from e
