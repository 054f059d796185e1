"""Tests for pymove preview command."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from pymove.cli import preview
from pymove.cli.main import cli

runner = CliRunner()

ARGS = ["preview", "pkg/old.py", "pkg/new/old.py", "--no-git"]
USER = "from pkg.old import X\n\nprint(X)\n"


class TestPreviewCommand:
    """pymove preview command tests."""

    def test_given_accept_all_when_preview_then_applies_everything(self, project: Path) -> None:
        """--accept-all prints the change set and applies it."""
        # When
        result = runner.invoke(cli, [*ARGS, "--accept-all"])

        # Then
        assert result.exit_code == 0, result.output
        assert "File: pkg/user.py" in result.output
        assert "Moved pkg/old.py → pkg/new/old.py" in result.output
        assert (project / "pkg" / "new" / "old.py").exists()
        assert (project / "pkg" / "user.py").read_text().startswith("from pkg.new.old import X")

    def test_given_review_cancel_when_preview_then_nothing_changes(self, project: Path) -> None:
        result = runner.invoke(cli, ARGS, input="c\n")

        assert result.exit_code == 0, result.output
        assert "Cancelled" in result.output
        assert (project / "pkg" / "old.py").exists()
        assert (project / "pkg" / "user.py").read_text() == USER

    def test_given_toggle_by_line_when_review_then_only_edit_applied(self, project: Path) -> None:
        """The gutter number of the edit's first line toggles it."""
        # When
        result = runner.invoke(cli, ARGS, input="t 9\nq\n")

        # Then
        assert result.exit_code == 0, result.output
        assert "Line 9: accepted" in result.output
        assert "File move not accepted" in result.output
        assert (project / "pkg" / "old.py").exists()
        assert (project / "pkg" / "user.py").read_text().startswith("from pkg.new.old import X")

    def test_given_move_and_accept_all_when_review_then_applies(self, project: Path) -> None:
        result = runner.invoke(cli, ARGS, input="m\na\nq\n")

        assert result.exit_code == 0, result.output
        assert "File move: accepted" in result.output
        assert "Accepted 1 change" in result.output
        assert (project / "pkg" / "new" / "old.py").exists()

    def test_given_unknown_line_when_toggle_then_warns(self, project: Path) -> None:
        result = runner.invoke(cli, ARGS, input="t 2\nc\n")

        assert "No change at line 2" in result.output

    def test_given_existing_destination_when_declined_then_untouched(
        self, project: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Replacing an existing destination needs confirmation."""
        # Given
        (project / "pkg" / "new").mkdir()
        (project / "pkg" / "new" / "old.py").write_text("Y = 2\n")
        monkeypatch.setattr(preview, "_confirm_overwrite", lambda _change_set: False)

        # When
        result = runner.invoke(cli, [*ARGS, "--accept-all"])

        # Then
        assert result.exit_code == 0, result.output
        assert "destination exists" in result.output
        assert "Cancelled" in result.output
        assert (project / "pkg" / "new" / "old.py").read_text() == "Y = 2\n"
        assert (project / "pkg" / "user.py").read_text() == USER

    def test_given_existing_destination_and_yes_when_preview_then_replaced(
        self, project: Path
    ) -> None:
        (project / "pkg" / "new").mkdir()
        (project / "pkg" / "new" / "old.py").write_text("Y = 2\n")

        result = runner.invoke(cli, [*ARGS, "--accept-all", "--yes"])

        assert result.exit_code == 0, result.output
        assert (project / "pkg" / "new" / "old.py").read_text() == "X = 1\n"

    def test_given_missing_source_when_preview_then_error(self, project: Path) -> None:
        result = runner.invoke(cli, ["preview", "pkg/gone.py", "pkg/new.py"])

        assert result.exit_code == 1
        assert "does not exist" in result.output

    def test_given_no_importers_when_preview_then_reports(self, project: Path) -> None:
        (project / "pkg" / "lonely.py").write_text("")

        result = runner.invoke(cli, ["preview", "pkg/lonely.py", "pkg/alone.py", "--accept-all"])

        assert result.exit_code == 0, result.output
        assert "No files found that may import pkg.lonely" in result.output
        assert (project / "pkg" / "alone.py").exists()
