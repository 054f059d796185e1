"""Config module exports."""

from pymove.config.loader import find_project_root, load_config
from pymove.config.models import (
    LoggingConfig,
    LogOutputConfig,
    MoveConfig,
    PyMoveConfig,
    SortingConfig,
)

__all__ = [
    "find_project_root",
    "load_config",
    "LoggingConfig",
    "LogOutputConfig",
    "MoveConfig",
    "PyMoveConfig",
    "SortingConfig",
]
