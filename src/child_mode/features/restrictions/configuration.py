"""
Persistent, namespaced restriction configuration.

Every field lives in memory and is written through to a ``KeyValueStore``
under ``"{namespace}_{fieldName}"`` on each mutation. Observers subscribed to
the store receive a ``ConfigChange`` for every mutation.
"""

import json
import logging
from typing import Any, Callable, Dict, FrozenSet, Iterable, List, Optional, Union

from ...core.config.base import DEFAULT_BUDGET_SECONDS, DEFAULT_NAMESPACE
from ...core.exceptions import DecodeError, EncodeError, ValidationError
from ...core.logging import get_logger
from ...core.persistence import InMemoryKeyValueStore
from ...core.protocols import DiagnosticSink, KeyValueStore
from .types import ConfigChange, ConfigField, FieldKind, SessionBudget

logger = logging.getLogger(__name__)

ChangeObserver = Callable[[ConfigChange], None]
FieldRef = Union[ConfigField, str]


class LoggingDiagnosticSink:
    """Default diagnostic sink: structured warning log records."""

    def __init__(
        self, name: str = "child_mode.diagnostics", namespace: Optional[str] = None
    ):
        self._logger = get_logger(name, namespace=namespace)

    def report(self, message: str, **details: Any) -> None:
        self._logger.warning(message, **details)


def encode_content_ids(key: str, ids: Iterable[str]) -> bytes:
    """Serialize an allow-list as a sorted UTF-8 JSON array."""
    try:
        return json.dumps(sorted(ids), ensure_ascii=False).encode("utf-8")
    except (TypeError, ValueError) as e:
        raise EncodeError(key, str(e), component="ConfigurationStore") from e


def decode_content_ids(key: str, blob: bytes) -> FrozenSet[str]:
    """Deserialize an allow-list blob written by ``encode_content_ids``."""
    try:
        data = json.loads(blob.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as e:
        raise DecodeError(key, str(e), component="ConfigurationStore") from e

    if not isinstance(data, list) or not all(isinstance(i, str) for i in data):
        raise DecodeError(
            key, "expected a JSON array of strings", component="ConfigurationStore"
        )
    return frozenset(data)


class _StoredField:
    """Attribute access to one configuration field."""

    def __init__(self, field: ConfigField):
        self.field = field

    def __get__(self, obj: Optional["ConfigurationStore"], owner: type) -> Any:
        if obj is None:
            return self
        return obj.get(self.field)

    def __set__(self, obj: "ConfigurationStore", value: Any) -> None:
        obj.set(self.field, value)


class ConfigurationStore:
    """Typed restriction settings for one namespace, written through to storage."""

    restricted_mode = _StoredField(ConfigField.RESTRICTED_MODE)
    session_budget = _StoredField(ConfigField.SESSION_BUDGET_SECONDS)
    override_passcode = _StoredField(ConfigField.OVERRIDE_PASSCODE)
    allow_camera_switch = _StoredField(ConfigField.ALLOW_CAMERA_SWITCH)
    allow_photo_capture = _StoredField(ConfigField.ALLOW_PHOTO_CAPTURE)
    allow_video_recording = _StoredField(ConfigField.ALLOW_VIDEO_RECORDING)
    enable_audio_recording = _StoredField(ConfigField.ENABLE_AUDIO_RECORDING)
    auto_start_recording = _StoredField(ConfigField.AUTO_START_RECORDING)
    allow_stop_recording = _StoredField(ConfigField.ALLOW_STOP_RECORDING)
    content_approval_restricted = _StoredField(ConfigField.CONTENT_APPROVAL_RESTRICTED)
    allow_file_sharing = _StoredField(ConfigField.ALLOW_FILE_SHARING)
    allow_nfc_sharing = _StoredField(ConfigField.ALLOW_NFC_SHARING)
    allow_airdrop_receiving = _StoredField(ConfigField.ALLOW_AIRDROP_RECEIVING)
    approved_content_ids = _StoredField(ConfigField.APPROVED_CONTENT_IDS)

    def __init__(
        self,
        namespace: str = DEFAULT_NAMESPACE,
        store: Optional[KeyValueStore] = None,
        diagnostics: Optional[DiagnosticSink] = None,
        default_budget_seconds: int = DEFAULT_BUDGET_SECONDS,
    ):
        """
        Create the store and load every field from ``store``.

        Args:
            namespace: App identifier prefixed to every storage key
            store: Backing key-value store (process-local when omitted)
            diagnostics: Receives persistence and decoding failure reports
            default_budget_seconds: Countdown length while no budget is stored
        """
        if not namespace:
            raise ValidationError("namespace", namespace, "must not be empty")

        self._namespace = namespace
        self._store: KeyValueStore = store if store is not None else InMemoryKeyValueStore()
        self._diagnostics: DiagnosticSink = diagnostics or LoggingDiagnosticSink(namespace=namespace)
        self._default_budget_seconds = default_budget_seconds
        self._values: Dict[ConfigField, Any] = {}
        self._observers: List[ChangeObserver] = []
        self._log = get_logger(__name__, namespace=namespace)

        self.reload()

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def default_budget_seconds(self) -> int:
        return self._default_budget_seconds

    def storage_key(self, field: FieldRef) -> str:
        """Key under which ``field`` is persisted."""
        return f"{self._namespace}_{ConfigField.parse(field).value}"

    # Loading

    def reload(self) -> None:
        """Re-read every field from the backing store."""
        for field in ConfigField:
            self._values[field] = self._load_field(field)
        logger.debug(f"Loaded configuration for namespace {self._namespace}")

    def _load_field(self, field: ConfigField) -> Any:
        key = self.storage_key(field)

        if field.kind is FieldKind.BOOL:
            value = self._store.get_bool(key)
            return field.default if value is None else value

        if field.kind is FieldKind.STRING:
            value = self._store.get_string(key)
            return field.default if value is None else value

        if field.kind is FieldKind.BUDGET:
            return self._load_budget(key)

        return self._load_content_ids(key)

    def _load_budget(self, key: str) -> SessionBudget:
        raw = self._store.get_int(key)
        if raw is None:
            return SessionBudget.unset()
        try:
            return SessionBudget.from_seconds(raw)
        except ValueError:
            self._diagnostics.report(
                f"Discarding invalid session budget {raw} stored under {key}",
                key=key,
            )
            self._clear_key(key)
            return SessionBudget.unset()

    def _load_content_ids(self, key: str) -> FrozenSet[str]:
        blob = self._store.get_bytes(key)
        if blob is None:
            text = self._store.get_string(key)
            if text is None:
                return frozenset()
            blob = text.encode("utf-8")

        try:
            return decode_content_ids(key, blob)
        except DecodeError as e:
            self._diagnostics.report(
                f"Failed to decode approved content, clearing record: {e}", key=key
            )
            self._clear_key(key)
            return frozenset()

    # Field access

    def get(self, field: FieldRef) -> Any:
        """Current in-memory value of ``field``."""
        return self._values[ConfigField.parse(field)]

    def set(self, field: FieldRef, value: Any) -> None:
        """Validate, apply and persist ``value``, then notify observers.

        Raises:
            ValidationError: If ``value`` has the wrong type for ``field``
        """
        field = ConfigField.parse(field)
        value = self._coerce(field, value)
        self._values[field] = value
        self._persist(field, value)
        self._log.log_config_change(field.value, value=self._loggable(field, value))
        self._notify(ConfigChange(field, value))

    def _coerce(self, field: ConfigField, value: Any) -> Any:
        if field.kind is FieldKind.BOOL:
            if not isinstance(value, bool):
                raise ValidationError(field.value, value, "expected a boolean")
            return value

        if field.kind is FieldKind.STRING:
            if not isinstance(value, str):
                raise ValidationError(field.value, value, "expected a string")
            return value

        if field.kind is FieldKind.BUDGET:
            if value is None:
                return SessionBudget.unset()
            if isinstance(value, SessionBudget):
                return value
            if isinstance(value, int) and not isinstance(value, bool):
                try:
                    return SessionBudget.from_seconds(value)
                except ValueError as e:
                    raise ValidationError(field.value, value, str(e)) from e
            raise ValidationError(
                field.value, value, "expected seconds or a SessionBudget"
            )

        if isinstance(value, (str, bytes)):
            raise ValidationError(field.value, value, "expected a collection of ids")
        try:
            ids = frozenset(value)
        except TypeError as e:
            raise ValidationError(field.value, value, "expected a collection of ids") from e
        if not all(isinstance(i, str) for i in ids):
            raise ValidationError(field.value, value, "content ids must be strings")
        return ids

    def _persist(self, field: ConfigField, value: Any) -> None:
        key = self.storage_key(field)
        try:
            if field.kind is FieldKind.BUDGET:
                stored = value.to_stored()
                if stored is None:
                    self._store.remove(key)
                else:
                    self._store.set(key, stored)
            elif field.kind is FieldKind.ID_SET:
                self._store.set(key, encode_content_ids(key, value))
            else:
                self._store.set(key, value)
        except Exception as e:
            self._diagnostics.report(f"Failed to persist {key}: {e}", key=key)
            self._clear_key(key)

    def _clear_key(self, key: str) -> None:
        try:
            self._store.remove(key)
        except Exception as e:
            self._diagnostics.report(f"Failed to clear {key}: {e}", key=key)

    @staticmethod
    def _loggable(field: ConfigField, value: Any) -> Any:
        if field is ConfigField.OVERRIDE_PASSCODE:
            return "set" if value else "cleared"
        if field.kind is FieldKind.ID_SET:
            return len(value)
        if field.kind is FieldKind.BUDGET:
            return value.describe()
        return value

    # Change notification

    def subscribe(self, observer: ChangeObserver) -> Callable[[], None]:
        """Register ``observer`` for change events. Returns an unsubscribe function."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _notify(self, change: ConfigChange) -> None:
        for observer in list(self._observers):
            try:
                observer(change)
            except Exception:
                logger.exception(f"Observer failed handling change to {change.field.value}")

    # Session budget

    @property
    def session_budget_seconds(self) -> int:
        """Effective countdown length; 0 means unlimited."""
        return self.session_budget.effective_seconds(self._default_budget_seconds)

    @session_budget_seconds.setter
    def session_budget_seconds(self, seconds: int) -> None:
        self.set(ConfigField.SESSION_BUDGET_SECONDS, seconds)

    # Passcode

    def is_valid_passcode(self, candidate: str) -> bool:
        """True iff a passcode is set and ``candidate`` equals it exactly."""
        passcode = self.override_passcode
        return bool(passcode) and candidate == passcode

    def has_passcode(self) -> bool:
        return bool(self.override_passcode)

    def set_passcode(self, new_passcode: str, confirmation: str) -> bool:
        """Set the override passcode when both entries match and are non-empty."""
        if not new_passcode or new_passcode != confirmation:
            return False
        self.override_passcode = new_passcode
        return True

    def clear_passcode(self) -> None:
        """Remove the passcode, disabling the override."""
        self.override_passcode = ""

    # Content approval

    def approve_content(self, content_id: str) -> None:
        self.approved_content_ids = self.approved_content_ids | {content_id}

    def revoke_content_approval(self, content_id: str) -> None:
        self.approved_content_ids = self.approved_content_ids - {content_id}

    def is_content_allowed(self, content_id: str) -> bool:
        if not self.content_approval_restricted:
            return True
        return content_id in self.approved_content_ids

    # Capabilities

    def can_receive_files(self) -> bool:
        return not self.restricted_mode or self.allow_file_sharing

    def can_use_nfc(self) -> bool:
        return not self.restricted_mode or self.allow_nfc_sharing

    def can_receive_airdrop(self) -> bool:
        return not self.restricted_mode or self.allow_airdrop_receiving

    def snapshot(self) -> Dict[str, Any]:
        """Plain mapping of storage name to a printable value."""
        data: Dict[str, Any] = {}
        for field, value in self._values.items():
            if field.kind is FieldKind.ID_SET:
                value = sorted(value)
            elif field.kind is FieldKind.BUDGET:
                value = value.to_stored()
            data[field.value] = value
        return data
