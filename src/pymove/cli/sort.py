"""pymove sort command - reorganize declarations in a file."""

import sys
from pathlib import Path

import click

from pymove.cli.utils import load_cli_config, resolve_project_root
from pymove.core.errors import PyMoveError
from pymove.core.progress import pluralize, status
from pymove.sort.models import ClassScope, FileScope, Scope, SelectionScope
from pymove.sort.ops import SortOps


def _build_scope(scope: str, line: int | None, start: int | None, end: int | None) -> Scope:
    if scope == "class":
        if line is None:
            raise click.UsageError("--scope class requires --line")
        return ClassScope(line)
    if scope == "selection":
        if start is None or end is None:
            raise click.UsageError("--scope selection requires --start and --end")
        return SelectionScope(start, end)
    return FileScope()


@click.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--scope",
    type=click.Choice(["file", "class", "selection"]),
    default="file",
    show_default=True,
    help="What to reorganize",
)
@click.option("--line", type=int, help="A line inside the class (class scope)")
@click.option("--start", type=int, help="First selected line (selection scope)")
@click.option("--end", type=int, help="Last selected line (selection scope)")
@click.option(
    "--deps/--no-deps",
    default=None,
    help="Force dependency sorting of methods and functions on or off",
)
@click.option("--check", is_flag=True, help="Exit 1 if the file would change; write nothing")
@click.pass_context
def sort_command(
    ctx: click.Context,
    file: Path,
    scope: str,
    line: int | None,
    start: int | None,
    end: int | None,
    deps: bool | None,
    check: bool,
) -> None:
    """Reorganize functions, classes, methods and constants of FILE.

    Lines are 1-based. Without --scope the whole file is sorted: module
    objects first, then the methods of every class.
    """
    target = _build_scope(scope, line, start, end)
    config = load_cli_config(ctx, resolve_project_root(None, file.resolve().parent))
    ops = SortOps(config.sorting)

    try:
        result = ops.reorganize(file, target, use_dependency_sort=deps, write=not check)
    except PyMoveError as e:
        raise click.ClickException(e.message) from e

    for skipped in result.skipped:
        status(f"Skipped {skipped}", style="warning")
    if result.cyclic:
        status(f"Dependency cycle among: {', '.join(result.cyclic)}", style="warning")

    if not result.changed:
        status(f"{file}: already sorted", style="success")
        return

    if check:
        status(f"{file}: would reorganize {', '.join(result.scopes)}", style="error")
        sys.exit(1)

    status(
        f"{file}: reorganized {pluralize(result.count, 'declaration')} "
        f"in {', '.join(result.scopes)}",
        style="success",
    )
