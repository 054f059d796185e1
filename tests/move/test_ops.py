"""Tests for MoveOps: direct moves, previews and applying change sets."""

from __future__ import annotations

from pathlib import Path

import pytest

from pymove.config.models import MoveConfig
from pymove.core.errors import ErrorCode, InternalError, ValidationError
from pymove.move.changeset import ChangeSet, ChangeStatus, ImportEdit
from pymove.move.ops import MoveOps

USER = "from pkg.old import X\n\nprint(X)\n"


@pytest.fixture
def project(tmp_path: Path) -> Path:
    pkg = tmp_path / "pkg"
    pkg.mkdir()
    (pkg / "__init__.py").write_text("")
    (pkg / "old.py").write_text("X = 1\n")
    (pkg / "user.py").write_text(USER)
    (pkg / "other.py").write_text("import os\n")
    return tmp_path


@pytest.fixture
def ops(project: Path) -> MoveOps:
    return MoveOps(project, MoveConfig(use_git=False, search_providers=["python"]))


class TestPreviewMove:
    """Change set construction without side effects."""

    async def test_single_importer(self, ops: MoveOps, project: Path) -> None:
        change_set = await ops.preview_move("pkg/old.py", "pkg/new/old.py")

        move = change_set.move
        assert (move.old_path, move.new_path) == ("pkg/old.py", "pkg/new/old.py")
        assert move.status is ChangeStatus.PENDING
        assert not move.use_git
        assert not move.dest_exists

        (edit,) = change_set.edits
        assert edit.old_import == "pkg.old"
        assert edit.new_import == "pkg.new.old"
        assert edit.file == (project / "pkg" / "user.py").resolve()
        assert edit.new_line == "from pkg.new.old import X"
        assert edit.status is ChangeStatus.PENDING

        assert change_set.old_name == "pkg.old"
        assert change_set.new_name == "pkg.new.old"
        assert (project / "pkg" / "old.py").exists()
        assert not (project / "pkg" / "new").exists()

    async def test_missing_source(self, ops: MoveOps) -> None:
        with pytest.raises(ValidationError) as exc_info:
            await ops.preview_move("pkg/gone.py", "pkg/new.py")
        assert exc_info.value.code == ErrorCode.MOVE_SOURCE_MISSING

    async def test_existing_destination_is_flagged(self, ops: MoveOps, project: Path) -> None:
        (project / "pkg" / "taken.py").write_text("Y = 2\n")
        change_set = await ops.preview_move("pkg/old.py", "pkg/taken.py")
        assert change_set.move.dest_exists

    async def test_no_importers(self, ops: MoveOps) -> None:
        change_set = await ops.preview_move("pkg/other.py", "pkg/misc.py")
        assert change_set.edits == []
        assert change_set.message

    async def test_truncation(self, ops: MoveOps, project: Path) -> None:
        (project / "pkg" / "second.py").write_text("import pkg.old\n")
        change_set = await ops.preview_move("pkg/old.py", "pkg/new/old.py", max_files=1)
        assert change_set.truncated
        assert change_set.total_files == 2
        assert len(change_set.files) == 1
        assert any("limited file set" in line for line in change_set.render())

    async def test_progress_and_completion(self, ops: MoveOps) -> None:
        progress: list[tuple[int, int]] = []
        completed: list[list[ImportEdit]] = []
        change_set = await ops.preview_move(
            "pkg/old.py",
            "pkg/new/old.py",
            progress_cb=lambda cur, total, _file: progress.append((cur, total)),
            on_complete=completed.append,
        )
        assert progress == [(1, 1)]
        assert completed == [change_set.edits]


class TestToggleChange:
    """Review by preview line."""

    async def test_toggle_by_rendered_line(self, ops: MoveOps) -> None:
        change_set = await ops.preview_move("pkg/old.py", "pkg/new/old.py")
        change_set.render()
        edit = change_set.edits[0]
        assert ops.toggle_change(change_set, edit.preview_line) is ChangeStatus.ACCEPTED
        assert edit.status is ChangeStatus.ACCEPTED
        assert change_set.move.status is ChangeStatus.PENDING

    async def test_toggle_move_line(self, ops: MoveOps) -> None:
        change_set = await ops.preview_move("pkg/old.py", "pkg/new/old.py")
        change_set.render()
        assert ops.toggle_change(change_set, change_set.move.preview_line) is ChangeStatus.ACCEPTED

    async def test_nothing_before_first_record(self, ops: MoveOps) -> None:
        change_set = await ops.preview_move("pkg/old.py", "pkg/new/old.py")
        change_set.render()
        assert ops.toggle_change(change_set, 1) is None


class TestApplyChangeSet:
    """Applying accepted records."""

    @pytest.fixture
    async def change_set(self, ops: MoveOps) -> ChangeSet:
        return await ops.preview_move("pkg/old.py", "pkg/new/old.py")

    async def test_accept_all(self, ops: MoveOps, change_set: ChangeSet, project: Path) -> None:
        change_set.accept_all()
        result = await ops.apply_change_set(change_set)
        assert result.success
        assert result.moved
        assert result.files_updated == 1
        assert (project / "pkg" / "new" / "old.py").read_text() == "X = 1\n"
        assert not (project / "pkg" / "old.py").exists()
        assert (project / "pkg" / "user.py").read_text() == "from pkg.new.old import X\n\nprint(X)\n"

    async def test_declined_move_still_applies_edits(
        self, ops: MoveOps, change_set: ChangeSet, project: Path
    ) -> None:
        change_set.edits[0].status = ChangeStatus.ACCEPTED
        result = await ops.apply_change_set(change_set)
        assert not result.moved
        assert result.files_updated == 1
        assert (project / "pkg" / "old.py").exists()
        assert (project / "pkg" / "user.py").read_text().startswith("from pkg.new.old import X")

    async def test_declined_edit_is_left_alone(
        self, ops: MoveOps, change_set: ChangeSet, project: Path
    ) -> None:
        change_set.toggle(0)
        result = await ops.apply_change_set(change_set)
        assert result.moved
        assert result.files_updated == 0
        assert (project / "pkg" / "user.py").read_text() == USER

    async def test_existing_destination_needs_confirmation(
        self, ops: MoveOps, project: Path
    ) -> None:
        dest = project / "pkg" / "taken.py"
        dest.write_text("Y = 2\n")
        change_set = await ops.preview_move("pkg/old.py", "pkg/taken.py")
        change_set.accept_all()

        with pytest.raises(ValidationError) as exc_info:
            await ops.apply_change_set(change_set)
        assert exc_info.value.code == ErrorCode.MOVE_DESTINATION_EXISTS
        assert not change_set.applied
        assert (project / "pkg" / "old.py").read_text() == "X = 1\n"
        assert dest.read_text() == "Y = 2\n"
        assert (project / "pkg" / "user.py").read_text() == USER

        result = await ops.apply_change_set(change_set, confirm_overwrite=True)
        assert result.moved
        assert dest.read_text() == "X = 1\n"
        assert (project / "pkg" / "user.py").read_text().startswith("from pkg.taken import X")

    async def test_source_removed_after_preview(
        self, ops: MoveOps, change_set: ChangeSet, project: Path
    ) -> None:
        change_set.accept_all()
        (project / "pkg" / "old.py").unlink()
        with pytest.raises(ValidationError):
            await ops.apply_change_set(change_set)
        assert (project / "pkg" / "user.py").read_text() == USER

    async def test_stale_file_is_reported(
        self, ops: MoveOps, change_set: ChangeSet, project: Path
    ) -> None:
        user = project / "pkg" / "user.py"
        user.write_text("import os\n" + USER)
        change_set.accept_all()
        result = await ops.apply_change_set(change_set)
        assert result.moved
        assert result.files_updated == 0
        assert [file for file, _reason in result.errors] == [str(user.resolve())]
        assert user.read_text() == "import os\n" + USER

    async def test_applied_only_once(self, ops: MoveOps, change_set: ChangeSet) -> None:
        change_set.accept_all()
        await ops.apply_change_set(change_set)
        with pytest.raises(InternalError):
            await ops.apply_change_set(change_set)

    async def test_other_project_rejected(self, change_set: ChangeSet, tmp_path: Path) -> None:
        other_root = tmp_path / "elsewhere"
        other_root.mkdir()
        other = MoveOps(other_root, MoveConfig(use_git=False, search_providers=["python"]))
        with pytest.raises(InternalError):
            await other.apply_change_set(change_set)

    async def test_package_move_rewrites_moved_files(self, ops: MoveOps, project: Path) -> None:
        sub = project / "pkg" / "sub"
        sub.mkdir()
        (sub / "__init__.py").write_text("")
        (sub / "a.py").write_text("import pkg.sub.b\nfrom .b import f\n")
        (sub / "b.py").write_text("def f():\n    pass\n")
        (project / "pkg" / "user.py").write_text("from pkg.sub.b import f\n")

        change_set = await ops.preview_move("pkg/sub", "pkg/lib/sub")
        assert {e.file.name for e in change_set.edits} == {"a.py", "user.py"}
        change_set.accept_all()
        result = await ops.apply_change_set(change_set)

        assert result.success
        assert result.files_updated == 2
        moved = project / "pkg" / "lib" / "sub" / "a.py"
        assert moved.read_text() == "import pkg.lib.sub.b\nfrom pkg.lib.sub.b import f\n"
        assert (project / "pkg" / "user.py").read_text() == "from pkg.lib.sub.b import f\n"


class TestPlanMove:
    """Direct moves."""

    async def test_dry_run(self, ops: MoveOps, project: Path) -> None:
        result = await ops.plan_move("pkg/old.py", "pkg/new/old.py", dry_run=True)
        assert result.success
        assert result.files_affected == 1
        assert result.message.startswith("Would move pkg/old.py → pkg/new/old.py")
        assert (project / "pkg" / "old.py").exists()
        assert (project / "pkg" / "user.py").read_text() == USER

    async def test_dry_run_carries_unified_diff(self, ops: MoveOps) -> None:
        result = await ops.plan_move("pkg/old.py", "pkg/new/old.py", dry_run=True)
        (diff,) = result.diffs
        lines = diff.splitlines()
        assert lines[:2] == ["--- a/pkg/user.py", "+++ b/pkg/user.py"]
        assert "-from pkg.old import X" in lines
        assert "+from pkg.new.old import X" in lines

    async def test_real_run_has_no_diffs(self, ops: MoveOps) -> None:
        result = await ops.plan_move("pkg/old.py", "pkg/new/old.py")
        assert result.diffs == []

    async def test_moves_and_rewrites(self, ops: MoveOps, project: Path) -> None:
        result = await ops.plan_move("pkg/old.py", "pkg/new/old.py")
        assert result.success
        assert result.files_affected == 1
        assert (project / "pkg" / "new" / "old.py").exists()
        assert (project / "pkg" / "user.py").read_text().startswith("from pkg.new.old import X")

    async def test_absolute_paths(self, ops: MoveOps, project: Path) -> None:
        result = await ops.plan_move(project / "pkg" / "old.py", project / "pkg" / "renamed.py")
        assert result.success
        assert (project / "pkg" / "user.py").read_text().startswith("from pkg.renamed import X")

    async def test_validation_failure_is_a_result(self, ops: MoveOps, project: Path) -> None:
        (project / "pkg" / "taken.py").write_text("")
        result = await ops.plan_move("pkg/old.py", "pkg/taken.py")
        assert not result.success
        assert result.files_affected == 0
        assert (project / "pkg" / "old.py").exists()

    async def test_path_outside_project(self, ops: MoveOps, tmp_path: Path) -> None:
        result = await ops.plan_move("pkg/old.py", tmp_path.parent / "elsewhere.py")
        assert not result.success
