"""
Configuration management for Child Mode Kit.

Provides a clean public API for runtime settings.
"""

from .base import (
    DEFAULT_BUDGET_SECONDS,
    DEFAULT_EXTEND_SECONDS,
    DEFAULT_NAMESPACE,
    DEFAULT_TICK_INTERVAL_SECONDS,
)
from .main import Settings
from .yaml_loader import YAMLConfigLoader

__all__ = [
    "Settings",
    "YAMLConfigLoader",
    "DEFAULT_BUDGET_SECONDS",
    "DEFAULT_EXTEND_SECONDS",
    "DEFAULT_NAMESPACE",
    "DEFAULT_TICK_INTERVAL_SECONDS",
]
