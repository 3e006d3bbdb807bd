"""
Feature modules for Child Mode Kit.
"""

from .restrictions import (
    ConfigurationStore,
    ContentApprovalFilter,
    OverrideWorkflow,
    SessionTimer,
)

__all__ = [
    "ConfigurationStore",
    "ContentApprovalFilter",
    "OverrideWorkflow",
    "SessionTimer",
]
