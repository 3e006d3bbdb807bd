"""
Key-value store backends.

Two reference implementations of the ``KeyValueStore`` protocol: a process
local dictionary and a single JSON document on disk.
"""

import base64
import binascii
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..exceptions import StorageError
from ..protocols import StoredValue
from .json_manager import JSONRepository

logger = logging.getLogger(__name__)

_BYTES_MARKER = "__bytes__"


class InMemoryKeyValueStore:
    """Dictionary-backed store. Values live as long as the instance."""

    def __init__(self, initial: Optional[Dict[str, StoredValue]] = None):
        self._data: Dict[str, StoredValue] = dict(initial or {})

    def _get_typed(self, key: str, kind: type) -> Any:
        value = self._data.get(key)
        # bool is a subclass of int; keep the two apart
        if kind is int and isinstance(value, bool):
            return None
        return value if isinstance(value, kind) else None

    def get_string(self, key: str) -> Optional[str]:
        return self._get_typed(key, str)

    def get_bool(self, key: str) -> Optional[bool]:
        return self._get_typed(key, bool)

    def get_int(self, key: str) -> Optional[int]:
        return self._get_typed(key, int)

    def get_bytes(self, key: str) -> Optional[bytes]:
        return self._get_typed(key, bytes)

    def set(self, key: str, value: StoredValue) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        return list(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data


class JSONFileKeyValueStore(InMemoryKeyValueStore):
    """Store persisted as one JSON object on disk.

    Each ``set`` or ``remove`` re-reads the document, changes only its own key
    and atomically replaces the file, so several stores (or processes) sharing
    one path keep each other's keys and the last writer wins per key.
    Bytes values are kept as ``{"__bytes__": "<base64>"}`` since JSON has no
    binary type. A document that cannot be parsed is backed up and the store
    starts empty.
    """

    def __init__(self, path: Union[str, Path]):
        super().__init__()
        self.path = Path(path)
        self._load()

    def _load(self) -> None:
        raw = JSONRepository.read_document(self.path)
        if raw is None:
            backup = JSONRepository.quarantine(self.path)
            logger.warning(
                f"Unreadable store {self.path}, starting empty (backup: {backup})"
            )
            return

        self._data = self._decode_document(raw)
        logger.debug(f"Loaded {len(self._data)} keys from {self.path}")

    @classmethod
    def _decode_document(cls, raw: Dict[str, Any]) -> Dict[str, StoredValue]:
        data: Dict[str, StoredValue] = {}
        for key, value in raw.items():
            decoded = cls._decode(key, value)
            if decoded is not None:
                data[key] = decoded
        return data

    @staticmethod
    def _decode(key: str, value: Any) -> Optional[StoredValue]:
        if isinstance(value, dict) and set(value) == {_BYTES_MARKER}:
            try:
                return base64.b64decode(value[_BYTES_MARKER], validate=True)
            except (binascii.Error, TypeError, ValueError):
                logger.warning(f"Dropping undecodable bytes value for {key}")
                return None
        if isinstance(value, (str, bool, int)):
            return value
        logger.warning(f"Dropping unsupported value type for {key}: {type(value)}")
        return None

    @staticmethod
    def _encode(value: StoredValue) -> Any:
        if isinstance(value, bytes):
            return {_BYTES_MARKER: base64.b64encode(value).decode("ascii")}
        return value

    def _write_key(self, key: str, value: Optional[StoredValue]) -> None:
        """Merge one key into the current file document; None removes it."""
        document = JSONRepository.read_document(self.path)
        if document is None:
            # Unreadable since load: rebuild from what this store knows
            JSONRepository.quarantine(self.path)
            document = {k: self._encode(v) for k, v in self._data.items()}

        if value is None:
            if key not in document:
                self._data = self._decode_document(document)
                return
            del document[key]
        else:
            document[key] = self._encode(value)

        if not JSONRepository.write_document(self.path, document):
            raise StorageError(
                f"Failed to write {key} to {self.path}",
                error_code="STORE_WRITE_FAILED",
                details={"key": key, "path": str(self.path)},
                component="JSONFileKeyValueStore",
            )
        self._data = self._decode_document(document)

    def set(self, key: str, value: StoredValue) -> None:
        self._write_key(key, value)

    def remove(self, key: str) -> None:
        self._write_key(key, None)
