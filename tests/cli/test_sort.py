"""Tests for pymove sort command."""

from pathlib import Path

from click.testing import CliRunner

from pymove.cli.main import cli

runner = CliRunner()

UNSORTED = "def b():\n    pass\n\n\ndef a():\n    pass\n"
SORTED = "def a():\n    pass\n\ndef b():\n    pass\n"


class TestSortCommand:
    """pymove sort command tests."""

    def test_given_unsorted_file_when_sort_then_rewrites(self, project: Path) -> None:
        """Sort writes the reorganized file."""
        # Given
        (project / "m.py").write_text(UNSORTED)

        # When
        result = runner.invoke(cli, ["sort", "m.py"])

        # Then
        assert result.exit_code == 0, result.output
        assert (project / "m.py").read_text() == SORTED
        assert "reorganized 2 declarations in <module>" in result.output

    def test_given_sorted_file_when_sort_then_reports_sorted(self, project: Path) -> None:
        (project / "m.py").write_text(SORTED)

        result = runner.invoke(cli, ["sort", "m.py"])

        assert result.exit_code == 0
        assert "already sorted" in result.output

    def test_given_check_when_unsorted_then_exit_one_and_untouched(self, project: Path) -> None:
        """--check reports without writing."""
        # Given
        (project / "m.py").write_text(UNSORTED)

        # When
        result = runner.invoke(cli, ["sort", "--check", "m.py"])

        # Then
        assert result.exit_code == 1
        assert "would reorganize" in result.output
        assert (project / "m.py").read_text() == UNSORTED

    def test_given_class_scope_without_line_when_sort_then_usage_error(
        self, project: Path
    ) -> None:
        (project / "m.py").write_text(UNSORTED)

        result = runner.invoke(cli, ["sort", "--scope", "class", "m.py"])

        assert result.exit_code == 2
        assert "--line" in result.output

    def test_given_no_class_at_line_when_sort_then_error(self, project: Path) -> None:
        (project / "m.py").write_text(UNSORTED)

        result = runner.invoke(cli, ["sort", "--scope", "class", "--line", "1", "m.py"])

        assert result.exit_code == 1
        assert "No class scope found" in result.output

    def test_given_selection_when_sort_then_only_range_changes(self, project: Path) -> None:
        """Selection scope leaves declarations outside the range alone."""
        # Given
        source = UNSORTED + "\n\ndef c():\n    pass\n"
        (project / "m.py").write_text(source)

        # When
        result = runner.invoke(
            cli, ["sort", "--scope", "selection", "--start", "1", "--end", "6", "m.py"]
        )

        # Then
        assert result.exit_code == 0, result.output
        assert (project / "m.py").read_text() == SORTED + "\n\ndef c():\n    pass\n"

    def test_given_config_option_when_sort_then_policy_applied(self, project: Path) -> None:
        """--config replaces the project's .pymove.yaml."""
        # Given
        (project / "m.py").write_text(UNSORTED)
        config = project / "custom.yaml"
        config.write_text("sorting:\n  module_categories: []\n")

        # When
        result = runner.invoke(cli, ["--config", str(config), "sort", "m.py"])

        # Then
        assert result.exit_code == 0
        assert (project / "m.py").read_text() == UNSORTED

    def test_given_invalid_config_when_sort_then_error(self, project: Path) -> None:
        (project / "m.py").write_text(UNSORTED)
        (project / ".pymove.yaml").write_text("sorting:\n  categories: [bogus]\n")

        result = runner.invoke(cli, ["sort", "m.py"])

        assert result.exit_code == 1
        assert "categories" in result.output
