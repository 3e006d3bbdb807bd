"""
Periodic tick scheduling on an asyncio event loop.
"""

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTask:
    """Cancellable handle for a repeating ``loop.call_later`` chain.

    The ``cancelled`` flag is checked before every callback so a tick that was
    already queued when ``cancel()`` ran is dropped.
    """

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        interval: float,
        callback: Callable[[], None],
    ):
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._cancelled = False
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def start(self) -> "PeriodicTask":
        self._schedule_next()
        return self

    def cancel(self) -> None:
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _schedule_next(self) -> None:
        if not self._cancelled:
            self._handle = self._loop.call_later(self._interval, self._run)

    def _run(self) -> None:
        self._handle = None
        if self._cancelled:
            return
        try:
            self._callback()
        except Exception:
            logger.exception("Periodic callback failed")
        self._schedule_next()


class AsyncioScheduler:
    """Scheduler backed by the running (or given) asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def schedule_periodic(
        self, interval: float, callback: Callable[[], None]
    ) -> PeriodicTask:
        loop = self._loop or asyncio.get_running_loop()
        return PeriodicTask(loop, interval, callback).start()
