"""Change set and review state.

A change set holds exactly one ``FileMove`` record, always first, followed
by the ``ImportEdit`` records found by the collector. Records are mutated
only through status toggles:

    pending -> accepted -> declined -> pending

The move and the import edits are independent: accepting edits never
accepts the move, and edits may be applied while the move is declined.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from pymove.core.errors import InternalError


class ChangeStatus(Enum):
    """Review status of a change record."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"

    def next(self) -> ChangeStatus:
        return _CYCLE[self]

    @property
    def marker(self) -> str:
        return _MARKERS[self]


_CYCLE = {
    ChangeStatus.PENDING: ChangeStatus.ACCEPTED,
    ChangeStatus.ACCEPTED: ChangeStatus.DECLINED,
    ChangeStatus.DECLINED: ChangeStatus.PENDING,
}

_MARKERS = {
    ChangeStatus.PENDING: "",
    ChangeStatus.ACCEPTED: " ✓",
    ChangeStatus.DECLINED: " ✗",
}


@dataclass
class FileMove:
    """The module or package relocation itself."""

    old_path: str  # relative to the project root
    new_path: str
    use_git: bool
    status: ChangeStatus = ChangeStatus.PENDING
    dest_exists: bool = False
    preview_line: int = 0

    def describe(self) -> str:
        cmd = "git mv" if self.use_git else "mv"
        line = f"  {cmd} {self.old_path} → {self.new_path}{self.status.marker}"
        if self.dest_exists:
            line += " ⚠  (destination exists)"
        return line


@dataclass
class ImportEdit:
    """One import module name to rewrite.

    ``file`` is the importer's location when the change set was built.
    ``old_import`` is the resolved absolute module name (relative imports
    are resolved against ``file``); ``full_line`` / ``new_line`` are the
    source line before and after the edit.
    """

    file: Path
    line_num: int  # 1-based
    old_import: str
    new_import: str
    full_line: str = ""
    new_line: str = ""
    context_before: list[str] = field(default_factory=list)
    context_after: list[str] = field(default_factory=list)
    status: ChangeStatus = ChangeStatus.PENDING
    preview_line: int = 0


ChangeRecord = FileMove | ImportEdit


def _boxed(label: str) -> list[str]:
    border = "═" * (len(label) + 2)
    return [f"╔{border}╗", f"║ {label} ║", f"╚{border}╝"]


@dataclass
class ChangeSet:
    """Reviewable changes for one move, consumed once by the applier."""

    project_root: Path
    old_name: str
    new_name: str
    records: list[ChangeRecord]
    truncated: bool = False
    total_files: int = 0
    message: str = ""
    applied: bool = False

    def __post_init__(self) -> None:
        moves = [i for i, r in enumerate(self.records) if isinstance(r, FileMove)]
        if moves != [0]:
            raise InternalError.unexpected(
                "change set must hold exactly one file move, first", positions=moves
            )

    @property
    def move(self) -> FileMove:
        record = self.records[0] if self.records else None
        if not isinstance(record, FileMove):
            raise InternalError.unexpected("change set lost its file move record")
        return record

    @property
    def edits(self) -> list[ImportEdit]:
        return [r for r in self.records if isinstance(r, ImportEdit)]

    @property
    def accepted_edits(self) -> list[ImportEdit]:
        return [e for e in self.edits if e.status is ChangeStatus.ACCEPTED]

    @property
    def files(self) -> list[Path]:
        return sorted({e.file for e in self.edits})

    # =========================================================================
    # Review state
    # =========================================================================

    def toggle(self, index: int) -> ChangeStatus:
        """Advance record ``index`` one step through the status cycle."""
        record = self.records[index]
        record.status = record.status.next()
        return record.status

    def accept_all(self) -> int:
        """Accept every pending record; declined records are left alone.

        Returns:
            Number of records accepted.
        """
        count = 0
        for record in self.records:
            if record.status is ChangeStatus.PENDING:
                record.status = ChangeStatus.ACCEPTED
                count += 1
        return count

    def find_at(self, position: int) -> int | None:
        """Index of the nearest record rendered at or before preview line ``position``."""
        best: int | None = None
        best_line = 0
        for i, record in enumerate(self.records):
            if 0 < record.preview_line <= position and record.preview_line >= best_line:
                best, best_line = i, record.preview_line
        return best

    def counts(self) -> dict[str, int]:
        result = {s.value: 0 for s in ChangeStatus}
        for e in self.edits:
            result[e.status.value] += 1
        return result

    # =========================================================================
    # Rendering
    # =========================================================================

    def render(self) -> list[str]:
        """Render the preview and record each record's 1-based preview line."""
        lines = _boxed("File Operation")
        move = self.move
        lines.append(move.describe())
        move.preview_line = len(lines)
        if self.truncated:
            lines.append(
                "  ⚠ Warning: Showing changes from limited file set"
                f" (processed subset of {self.total_files} files)"
            )
        lines.append("")

        by_file: dict[Path, list[ImportEdit]] = {}
        for edit in self.edits:
            by_file.setdefault(edit.file, []).append(edit)

        for file in sorted(by_file):
            edits = sorted(by_file[file], key=lambda e: e.line_num)
            lines.extend(_boxed(f"File: {self._display_path(file)}"))
            _render_file(lines, edits)
            lines.append("")
        return lines

    def _display_path(self, file: Path) -> str:
        try:
            return str(file.relative_to(self.project_root))
        except ValueError:
            return str(file)


def _render_file(lines: list[str], edits: list[ImportEdit]) -> None:
    changed = {e.line_num for e in edits}
    last_shown = 0
    for i, edit in enumerate(edits):
        before_start = edit.line_num - len(edit.context_before)
        if before_start > last_shown + 1 and last_shown > 0:
            lines.append("     | ...")
        for offset, text in enumerate(edit.context_before):
            line_num = before_start + offset
            if line_num > last_shown and line_num not in changed:
                lines.append(f" {line_num:3d} | {text}")
                last_shown = line_num

        marker = edit.status.marker
        if edit.status is ChangeStatus.ACCEPTED:
            lines.append(f"+ {edit.line_num:3d} | {edit.new_line}{marker}")
            edit.preview_line = len(lines)
        elif edit.status is ChangeStatus.DECLINED:
            lines.append(f"- {edit.line_num:3d} | {edit.full_line}{marker}")
            edit.preview_line = len(lines)
        else:
            lines.append(f"- {edit.line_num:3d} | {edit.full_line}")
            edit.preview_line = len(lines)
            lines.append(f"+ {edit.line_num:3d} | {edit.new_line}")
        last_shown = max(last_shown, edit.line_num)

        following = edits[i + 1] if i + 1 < len(edits) else None
        if following is None or following.line_num > edit.line_num + len(edit.context_after):
            for offset, text in enumerate(edit.context_after, 1):
                line_num = edit.line_num + offset
                if line_num > last_shown and line_num not in changed:
                    lines.append(f" {line_num:3d} | {text}")
                    last_shown = line_num
