"""
YAML settings document loading.

Settings files hold either a flat mapping or one nested under a section name
(``child_mode:``), so one file can be shared with other tools.
"""

import logging
from pathlib import Path
from typing import Any, Dict

import yaml

from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class YAMLConfigLoader:
    """Reads and writes the settings section of a YAML document."""

    @staticmethod
    def load_section(path: Path, section: str) -> Dict[str, Any]:
        """
        Load the mapping stored under ``section``, or the whole document if flat.

        Args:
            path: Path to YAML file
            section: Top-level key holding the settings

        Returns:
            The settings mapping, empty if the file has no content

        Raises:
            ConfigurationError: If the file is missing, unparsable or not a mapping
        """
        if not path.exists():
            raise ConfigurationError(
                f"Settings file not found: {path}", component="YAMLConfigLoader"
            )

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Failed to parse YAML file {path}: {e}")
            raise ConfigurationError(
                f"Invalid YAML in {path}: {e}", component="YAMLConfigLoader"
            ) from e

        if data is None:
            logger.warning(f"YAML file is empty or contains only comments: {path}")
            return {}

        if isinstance(data, dict) and section in data:
            data = data[section] or {}
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Expected a mapping in {path}", component="YAMLConfigLoader"
            )

        logger.debug(f"Loaded settings section '{section}' from {path}")
        return data

    @staticmethod
    def save_section(data: Dict[str, Any], path: Path, section: str) -> None:
        """Write ``data`` under ``section``, creating parent directories."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump({section: data}, f, default_flow_style=False, sort_keys=False)
        logger.debug(f"Saved settings section '{section}' to {path}")
