"""Declaration reorganizer."""

from pymove.sort.categories import categorize_function, categorize_module_object
from pymove.sort.models import (
    ClassScope,
    Declaration,
    DeclarationKind,
    FileScope,
    RewriteResult,
    Scope,
    SelectionScope,
    SortPolicy,
)
from pymove.sort.ops import SortOps
from pymove.sort.sorter import (
    TopologicalOrder,
    sort_functions,
    sort_module_objects,
    topological_sort,
)

__all__ = [
    "categorize_function",
    "categorize_module_object",
    "ClassScope",
    "Declaration",
    "DeclarationKind",
    "FileScope",
    "RewriteResult",
    "Scope",
    "SelectionScope",
    "SortOps",
    "SortPolicy",
    "TopologicalOrder",
    "sort_functions",
    "sort_module_objects",
    "topological_sort",
]
