"""Name-pattern categorization of declarations."""

import re

_DUNDER = re.compile(r"^__.*__$")
_CONSTANT = re.compile(r"^[A-Z_][A-Z0-9_]*$")


def categorize_function(name: str) -> str:
    """Bucket a method or function name.

    Examples:
        categorize_function("__init__") -> "dunder"
        categorize_function("_helper") -> "private"
        categorize_function("run") -> "public"
    """
    if _DUNDER.match(name):
        return "dunder"
    if name.startswith("_"):
        return "private"
    return "public"


def categorize_module_object(name: str) -> str:
    """Bucket a module-level function, class or constant name.

    Double-underscore names are private, single-underscore names utility,
    ALL_CAPS names constants, everything else public.
    """
    if name.startswith("__"):
        return "private"
    if name.startswith("_"):
        return "utility"
    if _CONSTANT.match(name):
        return "constants"
    return "public"


def is_constant_name(name: str) -> bool:
    """Whether a module-level assignment target counts as a constant."""
    return bool(_CONSTANT.match(name)) or name.startswith("_")
