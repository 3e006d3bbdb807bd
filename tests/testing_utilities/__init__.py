"""
Testing utilities for Child Mode Kit.

Provides a manually driven scheduler and store/sink doubles.
"""

from .mock_scheduler import ManualScheduler, ManualTask
from .mock_store import FailingStore, RecordingSink

__all__ = ["FailingStore", "ManualScheduler", "ManualTask", "RecordingSink"]
