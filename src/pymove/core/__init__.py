"""Core module exports."""

from pymove.core.errors import (
    ConfigError,
    ErrorCode,
    InternalError,
    PartialApplyError,
    PyMoveError,
    RecoverableAnalysisError,
    ScopeRewriteError,
    ValidationError,
)
from pymove.core.logging import (
    clear_operation_id,
    configure_logging,
    get_logger,
    get_operation_id,
    set_operation_id,
)
from pymove.core.progress import file_progress, pluralize, status

__all__ = [
    # Errors
    "ConfigError",
    "ErrorCode",
    "InternalError",
    "PartialApplyError",
    "PyMoveError",
    "RecoverableAnalysisError",
    "ScopeRewriteError",
    "ValidationError",
    # Logging
    "clear_operation_id",
    "configure_logging",
    "get_logger",
    "get_operation_id",
    "set_operation_id",
    # Progress
    "file_progress",
    "pluralize",
    "status",
]
