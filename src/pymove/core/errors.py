"""pymove error types with typed error codes.

Error code ranges:
- 2xxx: Config
- 3xxx: Analysis (parsing, extraction)
- 4xxx: Sort (scope rewrites)
- 5xxx: Move validation
- 6xxx: Apply (per-file patch application)
- 9xxx: Internal
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any


class ErrorCode(IntEnum):
    """Typed error codes for programmatic handling."""

    # Config (2xxx)
    CONFIG_PARSE_ERROR = 2001
    CONFIG_INVALID_VALUE = 2002
    CONFIG_FILE_NOT_FOUND = 2004

    # Analysis (3xxx)
    ANALYSIS_PARSER_UNAVAILABLE = 3001
    ANALYSIS_PARSE_FAILED = 3002
    ANALYSIS_UNNAMED_SCOPE = 3003

    # Sort (4xxx)
    SORT_NO_SCOPE = 4001
    SORT_INTERLEAVED_CONTENT = 4002

    # Move validation (5xxx)
    MOVE_SOURCE_MISSING = 5001
    MOVE_DESTINATION_EXISTS = 5002
    MOVE_NOT_PYTHON = 5003
    MOVE_INVALID_IMPORT_PATH = 5004
    MOVE_OUTSIDE_PROJECT = 5005

    # Apply (6xxx)
    APPLY_PATCH_FAILED = 6001
    APPLY_WRITE_FAILED = 6002
    APPLY_MOVE_FAILED = 6003

    # Internal (9xxx)
    INTERNAL_ERROR = 9001


@dataclass(frozen=True, slots=True)
class PyMoveError(Exception):
    """Base error with structured context."""

    code: ErrorCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def error_name(self) -> str:
        """String identifier for logging (e.g., 'MOVE_SOURCE_MISSING')."""
        return self.code.name

    def to_dict(self) -> dict[str, Any]:
        """Serialize for JSON output."""
        return {
            "code": self.code.value,
            "error": self.error_name,
            "message": self.message,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code.value}] {self.error_name}: {self.message}"


class ConfigError(PyMoveError):
    """Configuration-related errors."""

    @classmethod
    def parse_error(cls, path: str, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_PARSE_ERROR,
            message=f"Failed to parse config at {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def invalid_value(cls, field: str, value: Any, reason: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_INVALID_VALUE,
            message=f"Invalid value for '{field}': {reason}",
            details={"field": field, "value": str(value), "reason": reason},
        )

    @classmethod
    def file_not_found(cls, path: str) -> "ConfigError":
        return cls(
            code=ErrorCode.CONFIG_FILE_NOT_FOUND,
            message=f"Config file not found: {path}",
            details={"path": path},
        )


class RecoverableAnalysisError(PyMoveError):
    """A single file or scope could not be analyzed.

    Multi-item operations log these and continue with the next item.
    """

    @classmethod
    def parser_unavailable(cls, reason: str) -> "RecoverableAnalysisError":
        return cls(
            code=ErrorCode.ANALYSIS_PARSER_UNAVAILABLE,
            message=f"Python tree-sitter grammar not available: {reason}",
            details={"reason": reason},
        )

    @classmethod
    def parse_failed(cls, path: str, reason: str) -> "RecoverableAnalysisError":
        return cls(
            code=ErrorCode.ANALYSIS_PARSE_FAILED,
            message=f"Failed to read or parse {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def unnamed_scope(cls, node_type: str, line: int) -> "RecoverableAnalysisError":
        return cls(
            code=ErrorCode.ANALYSIS_UNNAMED_SCOPE,
            message=f"{node_type} at line {line} has no name field",
            details={"node_type": node_type, "line": line},
        )


class ScopeRewriteError(PyMoveError):
    """A scope cannot be rewritten without damaging surrounding code."""

    @classmethod
    def no_scope(cls, scope: str, reason: str) -> "ScopeRewriteError":
        return cls(
            code=ErrorCode.SORT_NO_SCOPE,
            message=f"No {scope} scope found: {reason}",
            details={"scope": scope, "reason": reason},
        )

    @classmethod
    def interleaved_content(cls, line: int) -> "ScopeRewriteError":
        return cls(
            code=ErrorCode.SORT_INTERLEAVED_CONTENT,
            message=(
                f"Line {line} holds code between declarations; "
                "reordering would move or drop it"
            ),
            details={"line": line},
        )


class ValidationError(PyMoveError):
    """A planned mutation failed its preconditions. Nothing was touched."""

    @classmethod
    def source_missing(cls, path: str) -> "ValidationError":
        return cls(
            code=ErrorCode.MOVE_SOURCE_MISSING,
            message=f"Source path does not exist: {path}",
            details={"path": path},
        )

    @classmethod
    def destination_exists(cls, path: str) -> "ValidationError":
        return cls(
            code=ErrorCode.MOVE_DESTINATION_EXISTS,
            message=f"Destination path already exists: {path}",
            details={"path": path},
        )

    @classmethod
    def not_python(cls, path: str) -> "ValidationError":
        return cls(
            code=ErrorCode.MOVE_NOT_PYTHON,
            message=f"Source file is not a Python file: {path}",
            details={"path": path},
        )

    @classmethod
    def invalid_import_path(cls, path: str) -> "ValidationError":
        return cls(
            code=ErrorCode.MOVE_INVALID_IMPORT_PATH,
            message=f"Path cannot be expressed as a Python import: {path}",
            details={"path": path},
        )

    @classmethod
    def outside_project(cls, import_path: str, file: str) -> "ValidationError":
        return cls(
            code=ErrorCode.MOVE_OUTSIDE_PROJECT,
            message=f"Relative import {import_path} in {file} leads outside of the project",
            details={"import": import_path, "file": file},
        )


class PartialApplyError(PyMoveError):
    """One file of a multi-file apply failed. Other files are unaffected."""

    @classmethod
    def patch_failed(cls, path: str, reason: str) -> "PartialApplyError":
        return cls(
            code=ErrorCode.APPLY_PATCH_FAILED,
            message=f"Patch did not apply to {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def write_failed(cls, path: str, reason: str) -> "PartialApplyError":
        return cls(
            code=ErrorCode.APPLY_WRITE_FAILED,
            message=f"Failed to write {path}: {reason}",
            details={"path": path, "reason": reason},
        )

    @classmethod
    def move_failed(cls, old_path: str, new_path: str, reason: str) -> "PartialApplyError":
        return cls(
            code=ErrorCode.APPLY_MOVE_FAILED,
            message=f"Failed to move {old_path} -> {new_path}: {reason}",
            details={"old_path": old_path, "new_path": new_path, "reason": reason},
        )


class InternalError(PyMoveError):
    """Internal/unexpected errors."""

    @classmethod
    def unexpected(cls, reason: str, **details: Any) -> "InternalError":
        return cls(
            code=ErrorCode.INTERNAL_ERROR,
            message=f"Internal error: {reason}",
            details=details,
        )
