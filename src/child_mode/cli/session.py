"""
Session timer and override commands for the Child Mode CLI.

Timer state lives only in the process running the countdown, so the reset and
extend override actions are offered by ``session run`` when time is up. Ending
a session changes persisted configuration and is also available on its own.
"""

import asyncio
import logging
from typing import Optional

import click

from ..features.restrictions import ChildModeSession, OverrideOutcome
from .helpers import get_session

logger = logging.getLogger(__name__)

_OVERRIDE_ACTIONS = ["extend", "reset", "end"]


@click.group()
def session_commands() -> None:
    """Session timer and override commands."""
    pass


async def _count_down(session: ChildModeSession, quiet: bool) -> None:
    """Wait on the running loop until the ticking timer reaches its limit."""
    time_up = asyncio.Event()
    session.timer.on_time_up = time_up.set

    interval = session.settings.tick_interval_seconds
    while not time_up.is_set():
        if not quiet:
            click.echo(f"\rRemaining {session.timer.formatted_remaining()}", nl=False)
        try:
            await asyncio.wait_for(time_up.wait(), timeout=interval)
        except asyncio.TimeoutError:
            continue
    if not quiet:
        click.echo()


def _offer_override(session: ChildModeSession, extend_seconds: Optional[int]) -> bool:
    """Prompt for the passcode and one override action.

    Returns True when the countdown is ticking again.
    """
    workflow = session.new_override(
        on_session_end=lambda: click.echo("Restricted mode ended")
    )
    while True:
        passcode = click.prompt(
            "Override passcode (blank to finish)",
            default="",
            hide_input=True,
            show_default=False,
        )
        if not passcode:
            workflow.cancel()
            return False
        if workflow.verify(passcode) is OverrideOutcome.UNLOCKED:
            break
        click.echo("Incorrect passcode")

    action = click.prompt(
        "Action", type=click.Choice(_OVERRIDE_ACTIONS), default="extend"
    )
    logger.info(f"Override action {action} chosen after time up")
    if action == "extend":
        workflow.extend_timer(extend_seconds)
    elif action == "reset":
        workflow.reset_timer()
        session.timer.start()
    else:
        workflow.end_session()

    if session.timer.active:
        click.echo(f"Resuming with {session.timer.formatted_remaining()} left")
        return True
    return False


async def _run_session(
    session: ChildModeSession,
    quiet: bool,
    allow_override: bool,
    extend_seconds: Optional[int],
) -> bool:
    if not session.timer.start():
        return False

    try:
        while True:
            await _count_down(session, quiet)
            click.echo("Time is up")
            if not allow_override or not _offer_override(session, extend_seconds):
                return True
    finally:
        session.timer.stop()


@session_commands.command()
@click.option("--quiet", "-q", is_flag=True, help="Only report when time is up")
@click.option(
    "--allow-override",
    is_flag=True,
    help="When time is up, ask for the passcode to extend, reset or end",
)
@click.option(
    "--extend-seconds",
    type=click.IntRange(min=1),
    default=None,
    help="Seconds added by 'extend' (default from settings)",
)
@click.pass_context
def run(
    ctx: click.Context,
    quiet: bool,
    allow_override: bool,
    extend_seconds: Optional[int],
) -> None:
    """Count the configured budget down and report when time is up."""
    session = get_session(ctx)
    try:
        started = asyncio.run(
            _run_session(session, quiet, allow_override, extend_seconds)
        )
    except KeyboardInterrupt:
        click.echo("\nCountdown stopped")
        return

    if not started:
        raise click.ClickException(
            "Timer not started: restricted mode is off or the budget is unlimited"
        )


@session_commands.command()
@click.option("--passcode", prompt=True, hide_input=True, help="Override passcode")
@click.pass_context
def end(ctx: click.Context, passcode: str) -> None:
    """Leave restricted mode after verifying the override passcode."""
    session = get_session(ctx)
    workflow = session.new_override(
        on_session_end=lambda: click.echo("Restricted mode ended")
    )

    if workflow.verify(passcode) is OverrideOutcome.VERIFICATION_FAILED:
        raise click.ClickException("Incorrect passcode")

    workflow.end_session()
    logger.info("Override ended the session")
    click.echo(
        f"Restricted mode {'on' if session.configuration.restricted_mode else 'off'}"
    )
