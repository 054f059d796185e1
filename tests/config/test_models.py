"""Tests for config/models.py validation."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from pymove.config.constants import MAX_FILES_HARD_LIMIT
from pymove.config.models import LogOutputConfig, MoveConfig, PyMoveConfig, SortingConfig


class TestLogOutputConfig:
    def test_stream_destinations(self) -> None:
        assert LogOutputConfig(destination="stdout").destination == "stdout"

    def test_relative_file_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LogOutputConfig(destination="logs/pymove.log")


class TestSortingConfig:
    """Category lists and derived order."""

    def test_defaults(self) -> None:
        config = SortingConfig()
        assert config.categories == ["dunder", "public", "private"]
        assert config.module_categories == ["constants", "public", "utility"]
        assert config.enable_dependency_sort
        assert not config.sort_within_categories

    def test_category_order_appends_missing(self) -> None:
        config = SortingConfig(categories=["private"])
        assert config.category_order == ["private", "dunder", "public"]

    def test_unknown_category_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SortingConfig(categories=["public", "static"])

    def test_duplicate_category_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SortingConfig(module_categories=["public", "public"])

    def test_empty_module_categories_allowed(self) -> None:
        assert SortingConfig(module_categories=[]).module_categories == []


class TestMoveConfig:
    """Bounds on move settings."""

    @pytest.mark.parametrize(
        ("field", "value"),
        [
            ("max_files", 0),
            ("max_files", MAX_FILES_HARD_LIMIT + 1),
            ("context_lines", -1),
            ("batch_size", 0),
            ("search_providers", []),
            ("search_providers", ["ack"]),
        ],
    )
    def test_out_of_range_rejected(self, field: str, value: object) -> None:
        with pytest.raises(ValidationError):
            MoveConfig(**{field: value})

    def test_use_git_defaults_to_auto(self) -> None:
        assert MoveConfig().use_git is None


class TestPyMoveConfig:
    def test_sections_present(self) -> None:
        config = PyMoveConfig()
        assert config.move.search_providers == ["ripgrep", "grep", "python"]
        assert config.logging.outputs[0].destination == "stderr"
