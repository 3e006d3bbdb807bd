"""
Passcode-gated override for a restricted session.

A workflow instance is transient: it is created when the override is
requested, unlocked by a correct passcode, and closed by exactly one action.
"""

import logging
from enum import Enum
from typing import Callable, Optional

from ...core.config.base import DEFAULT_EXTEND_SECONDS
from ...core.logging import get_logger
from ...core.protocols import RestrictionSettings
from .timer import SessionTimer

logger = logging.getLogger(__name__)


class OverrideState(Enum):
    """Override workflow states."""

    LOCKED = "locked"
    UNLOCKED = "unlocked"
    CLOSED = "closed"


class OverrideOutcome(Enum):
    """Result of a passcode verification."""

    UNLOCKED = "unlocked"
    VERIFICATION_FAILED = "verification_failed"


class OverrideWorkflow:
    """Unlocks reset, extend and end-session actions behind the passcode."""

    def __init__(
        self,
        configuration: RestrictionSettings,
        timer: SessionTimer,
        on_session_end: Optional[Callable[[], None]] = None,
        extend_seconds: int = DEFAULT_EXTEND_SECONDS,
    ):
        self.configuration = configuration
        self.timer = timer
        self.on_session_end = on_session_end
        self.extend_seconds = extend_seconds

        self.state = OverrideState.LOCKED
        self.failed_attempts = 0
        self._log = get_logger(__name__, namespace=configuration.namespace)

    @property
    def unlocked(self) -> bool:
        return self.state is OverrideState.UNLOCKED

    def verify(self, candidate: str) -> OverrideOutcome:
        """Check ``candidate`` against the configured passcode."""
        if self.state is not OverrideState.LOCKED:
            logger.debug(f"Ignoring verification in state {self.state.value}")
            return (
                OverrideOutcome.UNLOCKED
                if self.unlocked
                else OverrideOutcome.VERIFICATION_FAILED
            )

        if self.configuration.is_valid_passcode(candidate):
            self.state = OverrideState.UNLOCKED
            self._log.log_override_event("unlocked")
            return OverrideOutcome.UNLOCKED

        self.failed_attempts += 1
        self._log.log_override_event(
            "verification_failed", failed_attempts=self.failed_attempts
        )
        return OverrideOutcome.VERIFICATION_FAILED

    def reset_timer(self) -> bool:
        """Rewind the countdown to the configured budget."""
        if not self._begin_action("reset_timer"):
            return False
        self.timer.reset()
        return True

    def extend_timer(self, seconds: Optional[int] = None) -> bool:
        """Add ``seconds`` (default five minutes) to the session."""
        if not self._begin_action("extend_timer"):
            return False
        self.timer.add_time(self.extend_seconds if seconds is None else seconds)
        return True

    def end_session(self) -> bool:
        """Stop the countdown and leave restricted mode."""
        if not self._begin_action("end_session"):
            return False
        self.timer.clear()
        self.configuration.restricted_mode = False
        if self.on_session_end is not None:
            self.on_session_end()
        return True

    def cancel(self) -> None:
        """Close the workflow without taking an action."""
        self.state = OverrideState.CLOSED

    def _begin_action(self, action: str) -> bool:
        if not self.unlocked:
            logger.warning(f"Override action {action} refused in state {self.state.value}")
            return False
        self.state = OverrideState.CLOSED
        self._log.log_override_event(action)
        return True
