"""
Shared helpers for CLI commands.
"""

from typing import Any, Dict

import click

from ..features.restrictions import (
    ChildModeSession,
    ConfigField,
    ConfigurationStore,
    create_child_mode_session,
)
from ..features.restrictions.types import FieldKind, parse_custom_budget

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def get_session(ctx: click.Context) -> ChildModeSession:
    """Build (once per invocation) the session for the selected namespace."""
    root = ctx.find_root()
    obj = root.ensure_object(dict)
    if "session" not in obj:
        obj["session"] = create_child_mode_session(obj["settings"])
    return obj["session"]


def parse_field_value(field: ConfigField, raw: str) -> Any:
    """Convert command-line text into a value for ``field``."""
    if field.kind is FieldKind.BOOL:
        lowered = raw.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise click.BadParameter(f"expected a boolean, got {raw!r}")

    if field.kind is FieldKind.BUDGET:
        return parse_budget(raw)

    if field.kind is FieldKind.ID_SET:
        return {part.strip() for part in raw.split(",") if part.strip()}

    return raw


def parse_budget(raw: str) -> Any:
    """'unset', 'unlimited' or a non-negative number of seconds."""
    lowered = raw.strip().lower()
    if lowered == "unset":
        return None
    if lowered in {"0", "unlimited", "none", "no-limit"}:
        return 0
    seconds = parse_custom_budget(lowered)
    if seconds is None:
        raise click.BadParameter(
            f"expected positive seconds, 'unlimited' or 'unset', got {raw!r}"
        )
    return seconds


def printable_snapshot(configuration: ConfigurationStore) -> Dict[str, Any]:
    """Snapshot with the passcode masked."""
    data = configuration.snapshot()
    passcode_key = ConfigField.OVERRIDE_PASSCODE.value
    data[passcode_key] = "********" if data[passcode_key] else ""
    return data
