"""
Restricted-mode session management.

Configuration store, session timer, content approval filter and the
passcode-gated override workflow.
"""

from .configuration import ConfigurationStore, LoggingDiagnosticSink
from .content import ContentApprovalFilter
from .override import OverrideOutcome, OverrideState, OverrideWorkflow
from .scheduler import AsyncioScheduler, PeriodicTask
from .session import ChildModeSession, create_child_mode_session
from .timer import SessionTimer, TimerState
from .types import (
    BUDGET_PRESETS,
    ApprovedContent,
    BudgetKind,
    ConfigChange,
    ConfigField,
    SessionBudget,
    format_duration,
    format_remaining,
    parse_custom_budget,
)

__all__ = [
    "ApprovedContent",
    "AsyncioScheduler",
    "BUDGET_PRESETS",
    "BudgetKind",
    "ChildModeSession",
    "ConfigChange",
    "ConfigField",
    "ConfigurationStore",
    "ContentApprovalFilter",
    "LoggingDiagnosticSink",
    "OverrideOutcome",
    "OverrideState",
    "OverrideWorkflow",
    "PeriodicTask",
    "SessionBudget",
    "SessionTimer",
    "TimerState",
    "create_child_mode_session",
    "format_duration",
    "format_remaining",
    "parse_custom_budget",
]
