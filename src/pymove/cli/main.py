"""pymove CLI - pymove command."""

from pathlib import Path

import click

from pymove.cli.move import move_command
from pymove.cli.preview import preview_command
from pymove.cli.sort import sort_command
from pymove.core.logging import configure_logging


@click.group()
@click.version_option(package_name="pymove", prog_name="pymove")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Read configuration from this YAML file instead of .pymove.yaml",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """pymove - reorganize Python declarations and move modules with their imports."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config_path"] = config_path
    configure_logging(level="DEBUG" if verbose else "WARNING")


cli.add_command(sort_command, name="sort")
cli.add_command(move_command, name="move")
cli.add_command(preview_command, name="preview")


if __name__ == "__main__":
    cli()
