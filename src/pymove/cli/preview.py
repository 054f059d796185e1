"""pymove preview command - review a move change by change before applying.

The rendered change set is printed with a line-number gutter. Review
commands refer to those numbers:

    t <line>  toggle the change shown at (or above) <line>
    a         accept every pending change
    m         toggle the file move
    p         print the change set again
    q         apply accepted changes and quit
    c         cancel without touching anything
"""

import asyncio
import sys
from pathlib import Path

import click
import questionary
from rich.console import Console
from rich.text import Text

from pymove.cli.utils import load_cli_config, resolve_project_root
from pymove.core.errors import ValidationError
from pymove.core.progress import file_progress, get_console, pluralize, status
from pymove.move.changeset import ChangeSet, ChangeStatus
from pymove.move.ops import ApplyResult, MoveOps

_HELP = "t <line> toggle · a accept all · m toggle move · p print · q apply · c cancel"


def _line_style(line: str) -> str:
    if line.startswith("+ "):
        return "green"
    if line.startswith("- "):
        return "red"
    if line[:1] in ("╔", "║", "╚"):
        return "bold cyan"
    if line.startswith("  ⚠"):
        return "yellow"
    return ""


def print_change_set(change_set: ChangeSet, console: Console) -> None:
    for number, line in enumerate(change_set.render(), 1):
        console.print(Text.assemble((f"{number:4d} ", "dim"), (line, _line_style(line))))
    counts = change_set.counts()
    console.print(
        f"\n{pluralize(len(change_set.edits), 'import edit')}: "
        f"{counts['accepted']} accepted, {counts['declined']} declined, "
        f"{counts['pending']} pending",
        highlight=False,
    )


def review(ops: MoveOps, change_set: ChangeSet, console: Console) -> bool:
    """Interactive review loop. True means apply, False means cancel."""
    print_change_set(change_set, console)
    console.print(_HELP, style="dim", highlight=False)
    while True:
        raw = click.prompt("review", default="p", show_default=False).strip()
        cmd, _, arg = raw.partition(" ")
        if cmd == "q":
            return True
        if cmd == "c":
            return False
        if cmd == "p":
            print_change_set(change_set, console)
        elif cmd == "a":
            status(f"Accepted {pluralize(change_set.accept_all(), 'change')}", style="success")
        elif cmd == "m":
            new_status = change_set.toggle(0)
            status(f"File move: {new_status.value}", style="info")
        elif cmd == "t" and arg.strip().isdigit():
            new_status = ops.toggle_change(change_set, int(arg))
            if new_status is None:
                status(f"No change at line {arg.strip()}", style="warning")
            else:
                status(f"Line {arg.strip()}: {new_status.value}", style="info")
        else:
            console.print(_HELP, style="dim", highlight=False)


def _confirm_overwrite(change_set: ChangeSet) -> bool:
    answer = questionary.confirm(
        f"{change_set.move.new_path} already exists. Replace it?",
        default=False,
    ).ask()
    return bool(answer)


def _report(result: ApplyResult, change_set: ChangeSet) -> None:
    move = change_set.move
    if result.moved:
        status(f"Moved {move.old_path} → {move.new_path}", style="success")
    elif move.status is not ChangeStatus.ACCEPTED:
        status("File move not accepted; left in place", style="info")
    status(f"Updated {pluralize(result.files_updated, 'file')}", style="success")
    for file, reason in result.errors:
        status(f"{file}: {reason}", style="error", indent=2)


@click.command()
@click.argument("old_path")
@click.argument("new_path")
@click.option(
    "--root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Project root (default: auto-detected from the current directory)",
)
@click.option("--git/--no-git", "use_git", default=None, help="Move through git (default: auto)")
@click.option("--max-files", type=int, help="Candidate files to process (default: from config)")
@click.option("--accept-all", is_flag=True, help="Accept every change and apply without review")
@click.option("--yes", "-y", is_flag=True, help="Replace an existing destination without asking")
@click.pass_context
def preview_command(
    ctx: click.Context,
    old_path: str,
    new_path: str,
    root: Path | None,
    use_git: bool | None,
    max_files: int | None,
    accept_all: bool,
    yes: bool,
) -> None:
    """Preview moving OLD_PATH to NEW_PATH, review the changes, then apply.

    The file move and each import edit start pending and are applied only
    once accepted.
    """
    console = get_console()
    project_root = resolve_project_root(root)
    config = load_cli_config(ctx, project_root)
    ops = MoveOps(project_root, config.move)

    with file_progress("Scanning imports", total=max_files or config.move.max_files) as advance:
        try:
            change_set = asyncio.run(
                ops.preview_move(
                    old_path,
                    new_path,
                    use_git=use_git,
                    max_files=max_files,
                    progress_cb=advance,
                )
            )
        except ValidationError as e:
            raise click.ClickException(e.message) from e

    if change_set.message:
        status(change_set.message, style="info")

    if accept_all:
        change_set.accept_all()
        print_change_set(change_set, console)
    elif not review(ops, change_set, console):
        console.print("[dim]Cancelled[/dim]")
        return

    move = change_set.move
    confirm = yes
    if move.status is ChangeStatus.ACCEPTED and move.dest_exists and not yes:
        confirm = _confirm_overwrite(change_set)
        if not confirm:
            console.print("[dim]Cancelled[/dim]")
            return

    try:
        result = asyncio.run(ops.apply_change_set(change_set, confirm_overwrite=confirm))
    except ValidationError as e:
        raise click.ClickException(e.message) from e

    _report(result, change_set)
    if result.errors:
        sys.exit(1)
