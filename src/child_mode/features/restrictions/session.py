"""
Wiring of the restriction components for one namespace.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from ...core.config import Settings
from ...core.persistence import JSONFileKeyValueStore
from ...core.protocols import DiagnosticSink, KeyValueStore, Scheduler
from .configuration import ConfigurationStore
from .content import ContentApprovalFilter
from .override import OverrideWorkflow
from .timer import SessionTimer

logger = logging.getLogger(__name__)


@dataclass
class ChildModeSession:
    """Configuration, timer and content filter sharing one store."""

    settings: Settings
    configuration: ConfigurationStore
    timer: SessionTimer
    content: ContentApprovalFilter

    def new_override(
        self, on_session_end: Optional[Callable[[], None]] = None
    ) -> OverrideWorkflow:
        """Start a fresh override workflow against this session."""
        return OverrideWorkflow(
            self.configuration,
            self.timer,
            on_session_end=on_session_end,
            extend_seconds=self.settings.extend_seconds,
        )


def create_child_mode_session(
    settings: Optional[Settings] = None,
    store: Optional[KeyValueStore] = None,
    scheduler: Optional[Scheduler] = None,
    diagnostics: Optional[DiagnosticSink] = None,
    on_time_up: Optional[Callable[[], None]] = None,
) -> ChildModeSession:
    """Create the restriction components for ``settings.namespace``.

    Uses a JSON file store at ``settings.storage_path`` unless ``store`` is given.
    """
    settings = settings or Settings()
    if store is None:
        store = JSONFileKeyValueStore(settings.storage_path)

    configuration = ConfigurationStore(
        namespace=settings.namespace,
        store=store,
        diagnostics=diagnostics,
        default_budget_seconds=settings.default_budget_seconds,
    )
    timer = SessionTimer(
        configuration,
        scheduler=scheduler,
        on_time_up=on_time_up,
        tick_interval=settings.tick_interval_seconds,
    )
    logger.info(f"Child mode session ready for namespace {settings.namespace}")
    return ChildModeSession(
        settings=settings,
        configuration=configuration,
        timer=timer,
        content=ContentApprovalFilter(configuration),
    )
