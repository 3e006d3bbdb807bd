"""
Base configuration constants for Child Mode Kit.
"""

DEFAULT_NAMESPACE = "DefaultApp"
DEFAULT_STORAGE_PATH = "data/child_mode.json"
DEFAULT_CONFIG_PATH = "configs/child_mode.yaml"
SETTINGS_SECTION = "child_mode"

# First-run countdown length when no budget has ever been stored
DEFAULT_BUDGET_SECONDS = 600
# Extension granted by the override "add time" action
DEFAULT_EXTEND_SECONDS = 300
DEFAULT_TICK_INTERVAL_SECONDS = 1.0

ENV_PREFIX = "CM_"
