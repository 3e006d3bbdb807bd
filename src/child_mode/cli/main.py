"""
Main CLI entry point for Child Mode Kit.

Provides a command-line interface over the restriction store of one
namespace, with subcommand groups for configuration, content approval and
session control.
"""

import dataclasses
import logging
from pathlib import Path
from typing import Optional

import click

from .. import __version__
from ..core.config import Settings
from ..core.exceptions import ConfigurationError
from ..core.logging import configure_logging
from .config import config_commands
from .content import content_commands
from .session import session_commands

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="YAML settings file",
)
@click.option("--namespace", "-n", help="App identifier whose settings to use")
@click.option(
    "--store",
    type=click.Path(dir_okay=False, path_type=Path),
    help="JSON file backing the key-value store",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--debug", "-d", is_flag=True, help="Enable debug output")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: Optional[Path],
    namespace: Optional[str],
    store: Optional[Path],
    verbose: bool,
    debug: bool,
) -> None:
    """
    Child Mode CLI

    Manage restricted-mode settings, the content allow-list and session
    countdowns for an application namespace.
    """
    ctx.ensure_object(dict)

    try:
        settings = Settings.load(config_path)
        overrides = {}
        if namespace:
            overrides["namespace"] = namespace
        if store:
            overrides["storage_path"] = store
        if overrides:
            settings = dataclasses.replace(settings, **overrides)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e

    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    else:
        level = settings.log_level
    configure_logging(level, json_format=settings.json_logs)
    logger.debug(
        f"Using namespace {settings.namespace} with store {settings.storage_path}"
    )

    ctx.obj["settings"] = settings
    ctx.obj["verbose"] = verbose
    ctx.obj["debug"] = debug


@cli.group()
def config() -> None:
    """Restriction settings commands."""
    pass


@cli.group()
def content() -> None:
    """Content allow-list commands."""
    pass


@cli.group()
def session() -> None:
    """Session timer and override commands."""
    pass


for command in config_commands.commands.values():
    config.add_command(command)
for command in content_commands.commands.values():
    content.add_command(command)
for command in session_commands.commands.values():
    session.add_command(command)


if __name__ == "__main__":
    cli()
