"""Import path arithmetic.

Conversions between filesystem module paths (``pkg/sub/mod.py``) and
dotted import names (``pkg.sub.mod``), relative import resolution, and the
coarse search pattern used to find candidate importer files.
"""

from __future__ import annotations

import re
from pathlib import PurePosixPath

from pymove.core.errors import ValidationError


def split_import_path(dotted: str) -> list[str]:
    """Components of a dotted name; leading dots form one component.

    Examples:
        split_import_path("pkg.mod") -> ["pkg", "mod"]
        split_import_path("..pkg.mod") -> ["..", "pkg", "mod"]
    """
    stripped = dotted.lstrip(".")
    components = [dotted[: len(dotted) - len(stripped)]] if stripped != dotted else []
    components.extend(part for part in stripped.split(".") if part)
    return components


def path_to_dotted_name(path: str) -> str:
    """Convert a project-relative module path to a dotted import name.

    ``.py`` and trailing slashes are stripped, slashes become dots and
    hyphens become underscores. A name without slashes is returned as is.

    Raises:
        ValidationError: For backslashes, dots inside directory names or
            dots combined with hyphens.
    """
    chopped = path[2:] if path.startswith("./") else path
    chopped = chopped.removesuffix(".py").rstrip("/")
    if (
        "\\" in chopped
        or ("/" in chopped and "." in chopped)
        or ("." in chopped and "-" in chopped)
    ):
        raise ValidationError.invalid_import_path(path)
    if "/" in chopped:
        return chopped.replace("-", "_").replace("/", ".")
    return chopped.replace("-", "_")


def absolute_dotted_path(rel_path: str, rel_dotted: str) -> str:
    """Resolve a relative import found in ``rel_path`` to an absolute name.

    Args:
        rel_path: Importing file, relative to the project root.
        rel_dotted: Module name as written, e.g. ``..utils``.

    Raises:
        ValidationError: If the leading dots climb above the top package.
    """
    suffix = rel_dotted.lstrip(".")
    level = max(len(rel_dotted) - len(suffix), 1)
    package_parts = list(PurePosixPath(rel_path).parent.parts)
    if level > len(package_parts):
        raise ValidationError.outside_project(rel_dotted, rel_path)
    prefix = package_parts[: len(package_parts) - (level - 1)]
    dotted_prefix = path_to_dotted_name("/".join(prefix))
    return f"{dotted_prefix}.{suffix}" if suffix else dotted_prefix


def estimate_change(old_dotted: str, new_dotted: str) -> list[str]:
    """Old components absent from the new name (all old components if none).

    This is a coarse filter: renames that only change casing or swap
    hyphens for underscores may be missed or over-matched.
    """
    new_set = set(split_import_path(new_dotted))
    changes = [c for c in split_import_path(old_dotted) if c not in new_set]
    return changes or split_import_path(old_dotted)


def file_change_pattern(change: list[str]) -> str:
    """Regex finding lines that may import the changed components."""
    joined = ".*".join(re.escape(c) for c in change)
    return f"import.*{joined}|{joined}.*import"


def matches_module(name: str, old_dotted: str) -> bool:
    """Whether ``name`` is ``old_dotted`` or one of its submodules."""
    return name == old_dotted or name.startswith(old_dotted + ".")


def replace_module_prefix(name: str, old_dotted: str, new_dotted: str) -> str:
    return new_dotted + name[len(old_dotted) :]
