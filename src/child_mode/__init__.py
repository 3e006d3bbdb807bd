"""
Child Mode Kit: restricted-mode sessions with a persisted permission store,
a countdown timer with passcode override and a content allow-list.
"""

from .features.restrictions import (
    ApprovedContent,
    ConfigField,
    ConfigurationStore,
    ContentApprovalFilter,
    OverrideOutcome,
    OverrideWorkflow,
    SessionBudget,
    SessionTimer,
    create_child_mode_session,
)

__version__ = "1.0.0"

__all__ = [
    "ApprovedContent",
    "ConfigField",
    "ConfigurationStore",
    "ContentApprovalFilter",
    "OverrideOutcome",
    "OverrideWorkflow",
    "SessionBudget",
    "SessionTimer",
    "create_child_mode_session",
    "__version__",
]
