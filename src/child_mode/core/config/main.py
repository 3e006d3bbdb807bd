"""
Runtime settings for Child Mode Kit.

Contains the Settings dataclass controlling which namespace and store the
restriction components use, the tick interval and the logging setup.
"""

import logging
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..exceptions import ConfigurationError
from .base import (
    DEFAULT_BUDGET_SECONDS,
    DEFAULT_CONFIG_PATH,
    DEFAULT_EXTEND_SECONDS,
    DEFAULT_NAMESPACE,
    DEFAULT_STORAGE_PATH,
    DEFAULT_TICK_INTERVAL_SECONDS,
    ENV_PREFIX,
    SETTINGS_SECTION,
)
from .yaml_loader import YAMLConfigLoader

logger = logging.getLogger(__name__)

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass
class Settings:
    """Runtime settings for the restriction components."""

    namespace: str = DEFAULT_NAMESPACE
    storage_path: Path = field(default_factory=lambda: Path(DEFAULT_STORAGE_PATH))
    tick_interval_seconds: float = DEFAULT_TICK_INTERVAL_SECONDS
    default_budget_seconds: int = DEFAULT_BUDGET_SECONDS
    extend_seconds: int = DEFAULT_EXTEND_SECONDS

    # Logging
    log_level: str = "WARNING"
    json_logs: bool = False

    def __post_init__(self) -> None:
        """Validate settings."""
        self.storage_path = Path(self.storage_path)
        self.log_level = str(self.log_level).upper()

        if not self.namespace:
            raise ConfigurationError("namespace must not be empty", component="Settings")
        if self.tick_interval_seconds <= 0:
            raise ConfigurationError(
                f"tick_interval_seconds must be positive, got {self.tick_interval_seconds}",
                component="Settings",
            )
        if self.default_budget_seconds <= 0:
            raise ConfigurationError(
                f"default_budget_seconds must be positive, got {self.default_budget_seconds}",
                component="Settings",
            )
        if self.extend_seconds <= 0:
            raise ConfigurationError(
                f"extend_seconds must be positive, got {self.extend_seconds}",
                component="Settings",
            )
        if self.log_level not in _LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level: {self.log_level}", component="Settings"
            )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        """Create settings from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown settings: {sorted(unknown)}")
        try:
            return cls(**{k: v for k, v in data.items() if k in known})
        except (TypeError, ValueError) as e:
            raise ConfigurationError(
                f"Invalid settings value: {e}", component="Settings"
            ) from e

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = asdict(self)
        data["storage_path"] = str(self.storage_path)
        return data

    @classmethod
    def from_file(cls, config_path: Union[str, Path]) -> "Settings":
        """Load settings from YAML file."""
        data = YAMLConfigLoader.load_section(Path(config_path), SETTINGS_SECTION)
        return cls.from_dict(data)

    def save(self, config_path: Union[str, Path]) -> None:
        """Write settings to a YAML file."""
        YAMLConfigLoader.save_section(self.to_dict(), Path(config_path), SETTINGS_SECTION)

    @classmethod
    def from_env(cls, base: Optional["Settings"] = None) -> "Settings":
        """Load settings from CM_* environment variables on top of ``base``."""

        def getenv_bool(name: str, default: bool) -> bool:
            v = os.getenv(name)
            return default if v is None else v.lower() in {"1", "true", "yes", "on"}

        def getenv_int(name: str, default: int) -> int:
            v = os.getenv(name)
            return default if v is None else int(v)

        def getenv_float(name: str, default: float) -> float:
            v = os.getenv(name)
            return default if v is None else float(v)

        def getenv_str(name: str, default: str) -> str:
            return os.getenv(name, default)

        base = base or cls()
        try:
            return cls(
                namespace=getenv_str(f"{ENV_PREFIX}NAMESPACE", base.namespace),
                storage_path=Path(
                    getenv_str(f"{ENV_PREFIX}STORAGE_PATH", str(base.storage_path))
                ),
                tick_interval_seconds=getenv_float(
                    f"{ENV_PREFIX}TICK_INTERVAL_SECONDS", base.tick_interval_seconds
                ),
                default_budget_seconds=getenv_int(
                    f"{ENV_PREFIX}DEFAULT_BUDGET_SECONDS", base.default_budget_seconds
                ),
                extend_seconds=getenv_int(
                    f"{ENV_PREFIX}EXTEND_SECONDS", base.extend_seconds
                ),
                log_level=getenv_str(f"{ENV_PREFIX}LOG_LEVEL", base.log_level),
                json_logs=getenv_bool(f"{ENV_PREFIX}JSON_LOGS", base.json_logs),
            )
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid environment override: {e}", component="Settings"
            ) from e

    @classmethod
    def load(cls, config_path: Optional[Union[str, Path]] = None) -> "Settings":
        """Load settings from YAML (if present), then apply env overrides."""
        path = Path(config_path or DEFAULT_CONFIG_PATH)
        base = None
        if path.exists():
            base = cls.from_file(path)
            logger.debug(f"Loaded settings from {path}")
        elif config_path is not None:
            raise ConfigurationError(
                f"Settings file not found: {path}", component="Settings"
            )
        return cls.from_env(base)
