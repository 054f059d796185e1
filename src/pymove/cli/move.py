"""pymove move command - move a module or package and rewrite its imports."""

import asyncio
import sys
from pathlib import Path

import click
from rich.text import Text

from pymove.cli.utils import load_cli_config, resolve_project_root
from pymove.core.progress import get_console, status
from pymove.move.ops import MoveOps


def _diff_style(line: str) -> str:
    if line.startswith(("---", "+++", "@@")):
        return "cyan"
    if line.startswith("+"):
        return "green"
    if line.startswith("-"):
        return "red"
    return ""


def print_diffs(diffs: list[str]) -> None:
    console = get_console()
    for diff in diffs:
        for line in diff.splitlines():
            console.print(Text(line, style=_diff_style(line)))


@click.command()
@click.argument("old_path")
@click.argument("new_path")
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Project root (default: auto-detected from the current directory)",
)
@click.option(
    "--dry-run", is_flag=True, help="Show the import rewrites as a diff without writing"
)
@click.option("--git/--no-git", "use_git", default=None, help="Move through git (default: auto)")
@click.pass_context
def move_command(
    ctx: click.Context,
    old_path: str,
    new_path: str,
    root: Path | None,
    dry_run: bool,
    use_git: bool | None,
) -> None:
    """Move OLD_PATH to NEW_PATH and update every import of it.

    Paths are module files or package directories, relative to the
    project root. Use 'pymove preview' to review each change first.
    """
    project_root = resolve_project_root(root)
    config = load_cli_config(ctx, project_root)
    ops = MoveOps(project_root, config.move)

    result = asyncio.run(ops.plan_move(old_path, new_path, dry_run=dry_run, use_git=use_git))

    if not result.success and not result.errors:
        raise click.ClickException(result.message)

    status(result.message, style="success" if result.success else "warning")
    print_diffs(result.diffs)
    for file, reason in result.errors:
        status(f"{file}: {reason}", style="error", indent=2)
    if not result.success:
        sys.exit(1)
