"""
Persistence utilities for Child Mode Kit.

Provides JSON file persistence and the reference key-value store backends.
"""

from .json_manager import JSONRepository
from .kv_store import InMemoryKeyValueStore, JSONFileKeyValueStore

__all__ = [
    "InMemoryKeyValueStore",
    "JSONFileKeyValueStore",
    "JSONRepository",
]
