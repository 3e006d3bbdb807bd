"""
JSON document persistence for the file-backed key-value store.

A store file holds one JSON object. Writes go to a sibling ``.tmp`` file that
replaces the original, so a reader never sees a partially written document.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class JSONRepository:
    """Atomic read and write of single-object JSON documents."""

    @staticmethod
    def read_document(path: Path) -> Optional[Dict[str, Any]]:
        """
        Read the JSON object stored at ``path``.

        Args:
            path: Path to JSON file

        Returns:
            The decoded object, an empty dict when the file does not exist,
            or None when the file cannot be read or does not hold an object
        """
        if not path.exists():
            logger.debug(f"JSON file does not exist: {path}")
            return {}

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read JSON file {path}: {e}")
            return None

        if not isinstance(data, dict):
            logger.error(f"Expected a JSON object in {path}, found {type(data).__name__}")
            return None
        return data

    @staticmethod
    def write_document(path: Path, data: Dict[str, Any]) -> bool:
        """
        Atomically replace ``path`` with ``data``.

        Returns:
            True if successful, False otherwise
        """
        temp_file = path.with_suffix(path.suffix + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False, sort_keys=True)
            temp_file.replace(path)
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"Failed to save JSON file {path}: {e}")
            temp_file.unlink(missing_ok=True)
            return False

        logger.debug(f"Saved {len(data)} keys to {path}")
        return True

    @staticmethod
    def quarantine(path: Path, suffix: str = ".corrupt") -> Optional[Path]:
        """
        Copy an unreadable document aside before it is overwritten.

        Returns:
            Path to the copy if successful, None otherwise
        """
        target = path.with_suffix(path.suffix + suffix)
        try:
            target.write_bytes(path.read_bytes())
        except OSError as e:
            logger.error(f"Failed to back up {path}: {e}")
            return None

        logger.warning(f"Kept unreadable store as {target}")
        return target
