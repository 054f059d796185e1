"""Configuration constants.

Values here are NOT user-configurable: category vocabularies, hard caps
and implementation details. For configurable values see models.py.
"""

# =============================================================================
# Category vocabularies
# =============================================================================

FUNCTION_CATEGORIES: tuple[str, ...] = ("dunder", "public", "private")
"""Buckets for methods and functions, in default order."""

MODULE_CATEGORIES: tuple[str, ...] = ("constants", "public", "utility", "private")
"""Buckets for module-level objects (functions, classes, constants)."""

DEFAULT_PRESERVE_METHODS: tuple[str, ...] = ("__init__", "__new__", "__str__", "__repr__")
"""Methods kept at the head of a class in their original relative order."""

# =============================================================================
# Move / preview hard limits
# =============================================================================
# Users can configure defaults below these, but cannot exceed them.

MAX_FILES_HARD_LIMIT = 5000
"""Maximum candidate files processed by one preview."""

CONTEXT_LINES_MAX = 25
"""Maximum context lines captured around an import edit."""

BATCH_SIZE_MAX = 500
"""Maximum files processed between two yields of the collector."""

SEARCH_TIMEOUT_SEC = 60.0
"""Timeout for an external search tool invocation."""

VCS_MOVE_TIMEOUT_SEC = 30.0
"""Timeout for a version-control move."""

# =============================================================================
# Project discovery
# =============================================================================

PROJECT_MARKERS: tuple[str, ...] = (".git", "pyproject.toml", "setup.py", "setup.cfg")
"""Files or directories that mark a project root."""

PROJECT_CONFIG_FILENAME = ".pymove.yaml"
"""Per-project YAML configuration file name."""
