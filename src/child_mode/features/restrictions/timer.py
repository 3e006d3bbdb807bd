"""
Countdown timer for a restricted session.

The timer reads its budget and the restricted-mode flag from the
configuration and counts down on a periodic tick supplied by a ``Scheduler``.
All methods are expected to run on the same event loop as the ticks.
"""

import logging
from enum import Enum
from typing import Callable, Optional

from ...core.config.base import DEFAULT_TICK_INTERVAL_SECONDS
from ...core.logging import get_logger
from ...core.protocols import RestrictionSettings, Scheduler, TaskHandle
from .scheduler import AsyncioScheduler
from .types import format_remaining

logger = logging.getLogger(__name__)


class TimerState(Enum):
    """Session timer states."""

    IDLE = "idle"
    RUNNING = "running"
    REACHED = "reached"


class SessionTimer:
    """Counts a restricted session down from the configured budget."""

    def __init__(
        self,
        configuration: RestrictionSettings,
        scheduler: Optional[Scheduler] = None,
        on_time_up: Optional[Callable[[], None]] = None,
        tick_interval: float = DEFAULT_TICK_INTERVAL_SECONDS,
    ):
        self.configuration = configuration
        self.scheduler: Scheduler = scheduler or AsyncioScheduler()
        self.on_time_up = on_time_up
        self.tick_interval = tick_interval

        self.remaining_seconds: float = 0.0
        self.limit_reached = False
        self._state = TimerState.IDLE
        self._task: Optional[TaskHandle] = None
        self._log = get_logger(__name__, namespace=configuration.namespace)

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def active(self) -> bool:
        """Whether a tick source is currently scheduled."""
        return self._task is not None and not self._task.cancelled

    def start(self) -> bool:
        """Start counting down from the configured budget.

        Does nothing unless restricted mode is on and the budget is limited.
        Returns True when the countdown started.
        """
        budget = self.configuration.session_budget_seconds
        if not self.configuration.restricted_mode or budget <= 0:
            logger.debug(
                f"Timer not started (restricted={self.configuration.restricted_mode}, budget={budget})"
            )
            return False

        self._begin_ticking()
        self.remaining_seconds = float(budget)
        self.limit_reached = False
        self._log.log_timer_event("started", self.remaining_seconds)
        return True

    def stop(self) -> None:
        """Release the tick source. Keeps remaining time and the reached flag."""
        self._release()
        self._state = TimerState.IDLE

    def reset(self) -> None:
        """Stop and rewind to the configured budget without restarting."""
        self.stop()
        self.remaining_seconds = float(self.configuration.session_budget_seconds)
        self.limit_reached = False
        self._log.log_timer_event("reset", self.remaining_seconds)

    def add_time(self, seconds: int) -> bool:
        """Extend the session by ``seconds``.

        If the limit was already reached the countdown resumes from the
        extension amount; the configured budget is not re-read.
        Returns False for non-positive ``seconds``.
        """
        if seconds <= 0:
            return False

        if self.limit_reached:
            if self.configuration.restricted_mode:
                self._begin_ticking()
            else:
                self._state = TimerState.IDLE
            self.remaining_seconds = max(self.remaining_seconds, 0.0) + seconds
            self.limit_reached = False
        else:
            self.remaining_seconds += seconds

        self._log.log_timer_event("extended", self.remaining_seconds, added=seconds)
        return True

    def clear(self) -> None:
        """Stop and zero the countdown, as when a session is ended."""
        self.stop()
        self.remaining_seconds = 0.0
        self.limit_reached = False

    def formatted_remaining(self) -> str:
        return format_remaining(self.remaining_seconds)

    def _begin_ticking(self) -> None:
        """Schedule a new tick source, then release the previous one.

        Timer state is only touched once scheduling succeeded.
        """
        task = self.scheduler.schedule_periodic(self.tick_interval, self._tick)
        self._release()
        self._task = task
        self._state = TimerState.RUNNING

    def _release(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def _tick(self) -> None:
        if not self.active:
            return

        if self.remaining_seconds > 0:
            self.remaining_seconds -= 1
        if self.remaining_seconds <= 0:
            self.remaining_seconds = 0.0
            self._reach()

    def _reach(self) -> None:
        self.limit_reached = True
        self._release()
        self._state = TimerState.REACHED
        self._log.log_timer_event("limit_reached", self.remaining_seconds)
        if self.on_time_up is not None:
            self.on_time_up()
