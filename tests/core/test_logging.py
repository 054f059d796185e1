"""Tests for structured logging."""

import json
import logging
from pathlib import Path

import pytest
import structlog

from pymove.config.models import LoggingConfig, LogOutputConfig
from pymove.core.logging import (
    clear_operation_id,
    configure_logging,
    get_logger,
    get_operation_id,
    set_operation_id,
)
from pymove.core.progress import suppress_console_logs


class TestOperationIdCorrelation:
    """Operation ID context variable tests."""

    def setup_method(self) -> None:
        """Clear operation ID before each test."""
        clear_operation_id()

    def test_given_operation_id_when_set_then_can_retrieve(self) -> None:
        """Operation ID can be set and retrieved."""
        # Given
        operation_id = "move-123"

        # When
        result = set_operation_id(operation_id)

        # Then
        assert result == operation_id
        assert get_operation_id() == operation_id

    def test_given_no_id_when_set_then_generates_uuid(self) -> None:
        """Set generates UUID-based ID when none provided."""
        # When
        oid = set_operation_id()

        # Then
        assert len(oid) == 12

    def test_given_set_id_when_clear_then_removes_id(self) -> None:
        """Clear removes the current operation ID."""
        # Given
        set_operation_id("to-clear")

        # When
        clear_operation_id()

        # Then
        assert get_operation_id() is None


class TestLoggingConfiguration:
    """Logging configuration tests."""

    def setup_method(self) -> None:
        """Reset structlog and stdlib logging before each test."""
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()
        clear_operation_id()

    def teardown_method(self) -> None:
        logging.getLogger().handlers.clear()
        clear_operation_id()

    def test_given_file_output_when_log_then_json_with_fields(self, tmp_path: Path) -> None:
        """JSON file output carries event, fields, level, timestamp and operation ID."""
        # Given
        log_file = tmp_path / "pymove.log"
        configure_logging(
            config=LoggingConfig(
                level="INFO",
                outputs=[LogOutputConfig(format="json", destination=str(log_file))],
            )
        )
        set_operation_id("op-1")

        # When
        get_logger("move").info("path_moved", provider="git")

        # Then
        data = json.loads(log_file.read_text().strip().splitlines()[-1])
        assert data["event"] == "path_moved"
        assert data["provider"] == "git"
        assert data["logger"] == "move"
        assert data["level"] == "info"
        assert data["operation_id"] == "op-1"
        assert "timestamp" in data

    def test_given_config_object_when_configure_then_takes_precedence(self, tmp_path: Path) -> None:
        """LoggingConfig object takes precedence over simple params."""
        # Given
        log_file = tmp_path / "test.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[LogOutputConfig(format="json", destination=str(log_file))],
        )

        # When
        configure_logging(config=config, level="ERROR")
        get_logger().debug("debug msg")

        # Then
        assert "debug msg" in log_file.read_text()

    def test_given_multi_output_config_when_configure_then_levels_per_output(
        self, tmp_path: Path
    ) -> None:
        """Each output filters by its own level."""
        # Given
        debug_file = tmp_path / "debug.log"
        info_file = tmp_path / "info.log"
        config = LoggingConfig(
            level="DEBUG",
            outputs=[
                LogOutputConfig(format="json", destination=str(info_file), level="INFO"),
                LogOutputConfig(format="json", destination=str(debug_file)),
            ],
        )

        # When
        configure_logging(config=config)
        logger = get_logger()
        logger.debug("debug only")
        logger.info("info msg")

        # Then
        info_content = info_file.read_text()
        assert "info msg" in info_content
        assert "debug only" not in info_content
        debug_content = debug_file.read_text()
        assert "debug only" in debug_content
        assert "info msg" in debug_content

    def test_given_live_display_when_log_then_console_suppressed(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        """Console handlers drop records while a live display is active."""
        # Given
        configure_logging(level="INFO")

        # When
        with suppress_console_logs():
            get_logger().warning("hidden")
        get_logger().warning("shown")

        # Then
        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "shown" in err
