"""Import-aware module and package moves."""

from pymove.move.changeset import ChangeSet, ChangeStatus, FileMove, ImportEdit
from pymove.move.ops import ApplyResult, MoveOps, MoveResult
from pymove.move.paths import absolute_dotted_path, path_to_dotted_name
from pymove.move.search import TextSearch

__all__ = [
    "ApplyResult",
    "ChangeSet",
    "ChangeStatus",
    "FileMove",
    "ImportEdit",
    "MoveOps",
    "MoveResult",
    "TextSearch",
    "absolute_dotted_path",
    "path_to_dotted_name",
]
