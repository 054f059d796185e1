"""CLI utilities."""

from pathlib import Path

import click

from pymove.config.loader import find_project_root, load_config
from pymove.config.models import PyMoveConfig
from pymove.core.errors import ConfigError
from pymove.core.logging import configure_logging


def resolve_project_root(root: Path | None, start: Path | None = None) -> Path:
    """Explicit ``root`` if given, else the nearest project root above ``start``.

    Walks up looking for .git, pyproject.toml, setup.py or setup.cfg and
    falls back to the starting directory.
    """
    if root is not None:
        return root.resolve()
    return find_project_root(start)


def load_cli_config(ctx: click.Context, project_root: Path) -> PyMoveConfig:
    """Load config for ``project_root`` and apply its logging section.

    With ``-v`` the DEBUG console logging set up by the group is kept.

    Raises:
        click.ClickException: If the configuration is invalid.
    """
    obj = ctx.find_root().obj or {}
    try:
        config = load_config(project_root, config_path=obj.get("config_path"))
    except ConfigError as e:
        raise click.ClickException(e.message) from e

    if not obj.get("verbose"):
        configure_logging(config=config.logging)
    return config
