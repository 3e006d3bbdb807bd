"""
Protocols and interfaces for Child Mode Kit.

Defines the contracts between the restriction components and the host
application: the byte-level key-value store, the diagnostic sink, content
items, the tick scheduler and the restriction settings capability.
"""

from typing import Any, Callable, Optional, Protocol, Union, runtime_checkable

StoredValue = Union[str, bool, int, bytes]


# Host collaborators


@runtime_checkable
class KeyValueStore(Protocol):
    """Persistent storage keyed by string.

    Getters return ``None`` when the key is absent or holds a value of a
    different type.
    """

    def get_string(self, key: str) -> Optional[str]:
        ...

    def get_bool(self, key: str) -> Optional[bool]:
        ...

    def get_int(self, key: str) -> Optional[int]:
        ...

    def get_bytes(self, key: str) -> Optional[bytes]:
        ...

    def set(self, key: str, value: StoredValue) -> None:
        ...

    def remove(self, key: str) -> None:
        ...


@runtime_checkable
class DiagnosticSink(Protocol):
    """Receives human-readable reports of persistence and decoding failures."""

    def report(self, message: str, **details: Any) -> None:
        ...


@runtime_checkable
class ContentItem(Protocol):
    """Content shape the approval filter operates over."""

    content_id: str
    approved: bool


# Scheduling


class TaskHandle(Protocol):
    """Handle to a scheduled periodic task."""

    @property
    def cancelled(self) -> bool:
        """Whether the task has been released."""
        ...

    def cancel(self) -> None:
        """Release the task. Must be idempotent."""
        ...


class Scheduler(Protocol):
    """Schedules a callback to run repeatedly on the caller's event loop."""

    def schedule_periodic(
        self, interval: float, callback: Callable[[], None]
    ) -> TaskHandle:
        """Run ``callback`` every ``interval`` seconds until cancelled."""
        ...


# Restriction capability


class RestrictionSettings(Protocol):
    """Capability interface consumed by the timer, filter and override flow.

    ``ConfigurationStore`` is the default implementation. Extend behaviour by
    wrapping an instance and delegating, not by subclassing.
    """

    restricted_mode: bool
    content_approval_restricted: bool

    @property
    def namespace(self) -> str:
        """App identifier the settings are stored under."""
        ...

    @property
    def session_budget_seconds(self) -> int:
        """Effective countdown length in seconds, 0 meaning unlimited."""
        ...

    def is_valid_passcode(self, candidate: str) -> bool:
        ...

    def approve_content(self, content_id: str) -> None:
        ...

    def revoke_content_approval(self, content_id: str) -> None:
        ...

    def is_content_allowed(self, content_id: str) -> bool:
        ...
