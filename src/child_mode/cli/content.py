"""
Content allow-list commands for the Child Mode CLI.
"""

import json
import logging
from pathlib import Path

import click

from ..features.restrictions import ApprovedContent
from .helpers import get_session

logger = logging.getLogger(__name__)


@click.group()
def content_commands() -> None:
    """Content allow-list commands."""
    pass


@content_commands.command()
@click.argument("content_id")
@click.pass_context
def approve(ctx: click.Context, content_id: str) -> None:
    """Add CONTENT_ID to the allow-list."""
    get_session(ctx).configuration.approve_content(content_id)
    click.echo(f"Approved {content_id}")


@content_commands.command()
@click.argument("content_id")
@click.pass_context
def revoke(ctx: click.Context, content_id: str) -> None:
    """Remove CONTENT_ID from the allow-list."""
    get_session(ctx).configuration.revoke_content_approval(content_id)
    click.echo(f"Revoked {content_id}")


@content_commands.command()
@click.argument("content_id")
@click.pass_context
def check(ctx: click.Context, content_id: str) -> None:
    """Tell whether CONTENT_ID may be shown."""
    allowed = get_session(ctx).configuration.is_content_allowed(content_id)
    click.echo(f"{content_id}: {'allowed' if allowed else 'blocked'}")


@content_commands.command(name="list")
@click.pass_context
def list_approved(ctx: click.Context) -> None:
    """List approved content ids."""
    ids = sorted(get_session(ctx).configuration.approved_content_ids)
    if not ids:
        click.echo("No approved content")
        return
    for content_id in ids:
        click.echo(content_id)


@content_commands.command(name="filter")
@click.argument("items_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def filter_items(ctx: click.Context, items_file: Path) -> None:
    """Print the items from ITEMS_FILE (JSON list) visible in the current mode."""
    try:
        raw = json.loads(items_file.read_text(encoding="utf-8"))
        items = [ApprovedContent.from_dict(entry) for entry in raw]
    except (ValueError, KeyError, TypeError) as e:
        raise click.ClickException(f"Invalid items file {items_file}: {e}") from e

    content = get_session(ctx).content
    visible = content.sync_approval_flags(content.filter_allowed(items))
    logger.debug(f"{len(visible)} of {len(items)} items visible")
    click.echo(json.dumps([item.to_dict() for item in visible], indent=2, ensure_ascii=False))
