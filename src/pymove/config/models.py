"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (PYMOVE__SECTION__KEY)
3. Project YAML (.pymove.yaml at the project root)
4. Global YAML (~/.config/pymove/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    PYMOVE__<SECTION>__<KEY>=<VALUE>

Examples:
    PYMOVE__LOGGING__LEVEL=DEBUG
    PYMOVE__SORTING__SORT_WITHIN_CATEGORIES=true
    PYMOVE__MOVE__MAX_FILES=500
    PYMOVE__MOVE__USE_GIT=false
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from pymove.config.constants import (
    BATCH_SIZE_MAX,
    CONTEXT_LINES_MAX,
    DEFAULT_PRESERVE_METHODS,
    FUNCTION_CATEGORIES,
    MAX_FILES_HARD_LIMIT,
    MODULE_CATEGORIES,
)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
SearchProviderName = Literal["ripgrep", "grep", "python"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        PYMOVE__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="WARNING",
        description="Root log level. Use DEBUG to trace extraction and search.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


def _check_categories(v: list[str], allowed: tuple[str, ...]) -> list[str]:
    unknown = [c for c in v if c not in allowed]
    if unknown:
        raise ValueError(f"Unknown categories {unknown}; expected a subset of {list(allowed)}")
    if len(set(v)) != len(v):
        raise ValueError(f"Duplicate categories in {v}")
    return v


class SortingConfig(BaseModel):
    """Declaration reorganizer policy.

    Env vars:
        PYMOVE__SORTING__PRESERVE_METHODS: JSON list of method names kept first
        PYMOVE__SORTING__CATEGORIES: JSON list, e.g. '["dunder","public","private"]'
        PYMOVE__SORTING__SORT_WITHIN_CATEGORIES: Alphabetize inside each category
        PYMOVE__SORTING__ENABLE_DEPENDENCY_SORT: Topologically sort module functions
        PYMOVE__SORTING__MODULE_CATEGORIES: JSON list; [] disables module sorting
    """

    preserve_methods: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PRESERVE_METHODS),
        description="Methods that always stay at the top in their original order.",
    )
    categories: list[str] = Field(
        default_factory=lambda: list(FUNCTION_CATEGORIES),
        description="Order of method/function categories (first to last). "
        "Categories left out are placed after the listed ones in default order.",
    )
    sort_within_categories: bool = Field(
        default=False,
        description="Sort alphabetically within each category.",
    )
    visual_selection_lexsort: bool = Field(
        default=True,
        description="Always sort alphabetically within categories for selections.",
    )
    enable_dependency_sort: bool = Field(
        default=True,
        description="Topologically sort module-level functions so callees precede callers.",
    )
    module_categories: list[str] = Field(
        default_factory=lambda: ["constants", "public", "utility"],
        description="Module-level categories that may move. Objects in other categories "
        "keep their position. An empty list disables module-level sorting.",
    )

    @field_validator("categories")
    @classmethod
    def validate_categories(cls, v: list[str]) -> list[str]:
        return _check_categories(v, FUNCTION_CATEGORIES)

    @field_validator("module_categories")
    @classmethod
    def validate_module_categories(cls, v: list[str]) -> list[str]:
        return _check_categories(v, MODULE_CATEGORIES)

    @property
    def category_order(self) -> list[str]:
        """Configured categories followed by any omitted ones."""
        return self.categories + [c for c in FUNCTION_CATEGORIES if c not in self.categories]


class MoveConfig(BaseModel):
    """Module/package move configuration.

    Env vars:
        PYMOVE__MOVE__USE_GIT: true/false; unset auto-detects a git repository
        PYMOVE__MOVE__MAX_FILES: Candidate files processed by one preview
        PYMOVE__MOVE__CONTEXT_LINES: Context lines around each import edit
        PYMOVE__MOVE__BATCH_SIZE: Files processed between two yields
        PYMOVE__MOVE__SEARCH_PROVIDERS: JSON list, tried in order
    """

    use_git: bool | None = Field(
        default=None,
        description="Move through git when true; None auto-detects a git repository.",
    )
    max_files: int = Field(
        default=200,
        description="Candidate files processed by one preview. Extra files are dropped "
        "and the change set is flagged as truncated.",
    )
    context_lines: int = Field(
        default=3,
        description="Context lines captured before and after each import edit.",
    )
    batch_size: int = Field(
        default=10,
        description="Files processed between two yields back to the event loop.",
    )
    search_providers: list[SearchProviderName] = Field(
        default_factory=lambda: ["ripgrep", "grep", "python"],
        description="Candidate file search strategies, tried in order.",
    )
    file_glob: str = Field(
        default="*.py",
        description="Glob restricting candidate files.",
    )

    @field_validator("max_files")
    @classmethod
    def validate_max_files(cls, v: int) -> int:
        if not (1 <= v <= MAX_FILES_HARD_LIMIT):
            raise ValueError(f"max_files must be 1-{MAX_FILES_HARD_LIMIT}, got {v}")
        return v

    @field_validator("context_lines")
    @classmethod
    def validate_context_lines(cls, v: int) -> int:
        if not (0 <= v <= CONTEXT_LINES_MAX):
            raise ValueError(f"context_lines must be 0-{CONTEXT_LINES_MAX}, got {v}")
        return v

    @field_validator("batch_size")
    @classmethod
    def validate_batch_size(cls, v: int) -> int:
        if not (1 <= v <= BATCH_SIZE_MAX):
            raise ValueError(f"batch_size must be 1-{BATCH_SIZE_MAX}, got {v}")
        return v

    @field_validator("search_providers")
    @classmethod
    def validate_search_providers(cls, v: list[SearchProviderName]) -> list[SearchProviderName]:
        if not v:
            raise ValueError("At least one search provider is required")
        return v


class PyMoveConfig(BaseModel):
    """Root configuration for pymove.

    All settings can be configured via:
    1. Environment variables: PYMOVE__SECTION__KEY
    2. YAML config files (project or global)
    3. Direct kwargs to load_config()
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    sorting: SortingConfig = Field(default_factory=SortingConfig)
    move: MoveConfig = Field(default_factory=MoveConfig)
