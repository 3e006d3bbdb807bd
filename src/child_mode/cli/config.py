"""
Restriction settings commands for the Child Mode CLI.

Provides Click-based commands for inspecting and changing the persisted
restriction fields of a namespace.
"""

import json
import logging
from pathlib import Path
from typing import Optional

import click
import yaml

from ..core.exceptions import ValidationError
from ..features.restrictions import BUDGET_PRESETS, ConfigField
from .helpers import get_session, parse_budget, parse_field_value, printable_snapshot

logger = logging.getLogger(__name__)


@click.group()
def config_commands() -> None:
    """Restriction settings commands."""
    pass


@config_commands.command()
@click.option(
    "--format",
    type=click.Choice(["json", "yaml", "table"]),
    default="table",
    help="Output format",
)
@click.pass_context
def show(ctx: click.Context, format: str) -> None:
    """Show the current restriction settings."""
    session = get_session(ctx)
    data = printable_snapshot(session.configuration)

    if format == "json":
        click.echo(json.dumps(data, indent=2, ensure_ascii=False))
    elif format == "yaml":
        click.echo(yaml.dump(data, default_flow_style=False, allow_unicode=True))
    else:
        click.echo(f"Child Mode Configuration ({session.configuration.namespace})")
        click.echo("=" * 50)
        for key, value in data.items():
            click.echo(f"{key}: {value}")
        click.echo(
            f"effective budget: {session.configuration.session_budget.describe()}"
            f" ({session.configuration.session_budget_seconds}s)"
        )


@config_commands.command(name="set")
@click.argument("field_name")
@click.argument("value")
@click.pass_context
def set_field(ctx: click.Context, field_name: str, value: str) -> None:
    """Set FIELD_NAME (storage or attribute name) to VALUE."""
    try:
        field = ConfigField.parse(field_name)
    except KeyError as e:
        raise click.BadParameter(str(e), param_hint="FIELD_NAME") from e
    if field is ConfigField.OVERRIDE_PASSCODE:
        raise click.BadParameter(
            "use 'config passcode set' to change the passcode", param_hint="FIELD_NAME"
        )

    session = get_session(ctx)
    try:
        session.configuration.set(field, parse_field_value(field, value))
    except ValidationError as e:
        raise click.ClickException(str(e)) from e
    logger.info(f"Set {field.value} in namespace {session.configuration.namespace}")
    click.echo(f"{field.value} updated")


@config_commands.command()
@click.argument("value", required=False)
@click.option("--presets", is_flag=True, help="List the common budget choices")
@click.pass_context
def budget(ctx: click.Context, value: Optional[str], presets: bool) -> None:
    """Show or set the session budget (seconds, 'unlimited' or 'unset')."""
    if presets:
        for seconds, label in BUDGET_PRESETS:
            click.echo(f"{seconds:>5}  {label}")
        return

    configuration = get_session(ctx).configuration
    if value is not None:
        configuration.set(ConfigField.SESSION_BUDGET_SECONDS, parse_budget(value))
    click.echo(
        f"Session budget: {configuration.session_budget.describe()} "
        f"({configuration.session_budget_seconds}s)"
    )


@config_commands.group()
def passcode() -> None:
    """Override passcode commands."""
    pass


@passcode.command(name="set")
@click.option(
    "--passcode",
    "new_passcode",
    prompt=True,
    hide_input=True,
)
@click.option("--confirm", "confirmation", prompt=True, hide_input=True)
@click.pass_context
def set_passcode(ctx: click.Context, new_passcode: str, confirmation: str) -> None:
    """Set the override passcode."""
    configuration = get_session(ctx).configuration
    if not configuration.set_passcode(new_passcode, confirmation):
        raise click.ClickException("Passcodes don't match")
    click.echo("Passcode set")


@passcode.command(name="clear")
@click.pass_context
def clear_passcode(ctx: click.Context) -> None:
    """Remove the override passcode (disables the override)."""
    get_session(ctx).configuration.clear_passcode()
    click.echo("Passcode cleared")


@config_commands.command()
@click.pass_context
def capabilities(ctx: click.Context) -> None:
    """Show the sharing capabilities available in the current mode."""
    configuration = get_session(ctx).configuration
    mode = "restricted" if configuration.restricted_mode else "unrestricted"
    click.echo(f"Mode: {mode}")
    click.echo(f"receive files: {configuration.can_receive_files()}")
    click.echo(f"NFC: {configuration.can_use_nfc()}")
    click.echo(f"AirDrop: {configuration.can_receive_airdrop()}")


@config_commands.command()
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def init(ctx: click.Context, path: Path) -> None:
    """Write the active runtime settings to a YAML file at PATH."""
    settings = ctx.find_root().obj["settings"]
    settings.save(path)
    click.echo(f"Settings written to {path}")
