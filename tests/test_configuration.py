"""
Tests for the persistent restriction configuration store.
"""

import json

import pytest

from child_mode.core.exceptions import ValidationError
from child_mode.core.persistence import InMemoryKeyValueStore
from child_mode.features.restrictions import (
    BudgetKind,
    ConfigChange,
    ConfigField,
    ConfigurationStore,
    SessionBudget,
)
from child_mode.features.restrictions.types import (
    BOOLEAN_FIELDS,
    BUDGET_PRESETS,
    format_duration,
    parse_custom_budget,
)
from testing_utilities import FailingStore, RecordingSink


def _reload(store: ConfigurationStore, kv: InMemoryKeyValueStore) -> ConfigurationStore:
    return ConfigurationStore(namespace=store.namespace, store=kv)


class TestDefaults:
    """First-run defaults with nothing persisted."""

    def test_default_flags(self, configuration: ConfigurationStore) -> None:
        """Test default values of every field."""
        assert configuration.restricted_mode is False
        assert configuration.override_passcode == ""
        assert configuration.allow_camera_switch is True
        assert configuration.allow_photo_capture is True
        assert configuration.allow_video_recording is True
        assert configuration.enable_audio_recording is True
        assert configuration.auto_start_recording is False
        assert configuration.allow_stop_recording is True
        assert configuration.content_approval_restricted is True
        assert configuration.allow_file_sharing is False
        assert configuration.allow_nfc_sharing is False
        assert configuration.allow_airdrop_receiving is False
        assert configuration.approved_content_ids == frozenset()

    def test_default_budget_is_ten_minutes(
        self, configuration: ConfigurationStore
    ) -> None:
        """Test unset budget resolves to the first-run default."""
        assert configuration.session_budget.kind is BudgetKind.UNSET
        assert configuration.session_budget_seconds == 600

    def test_defaults_are_not_persisted(
        self, configuration: ConfigurationStore, kv_store: InMemoryKeyValueStore
    ) -> None:
        """Test construction alone writes nothing."""
        assert kv_store.keys() == []

    def test_custom_default_budget(self, kv_store: InMemoryKeyValueStore) -> None:
        """Test the first-run budget can be configured."""
        store = ConfigurationStore("App", store=kv_store, default_budget_seconds=120)
        assert store.session_budget_seconds == 120

    def test_empty_namespace_rejected(self) -> None:
        """Test an empty namespace is refused."""
        with pytest.raises(ValidationError):
            ConfigurationStore(namespace="")


class TestPersistence:
    """Write-through persistence of individual fields."""

    @pytest.mark.parametrize("field", BOOLEAN_FIELDS)
    @pytest.mark.parametrize("value", [True, False])
    def test_boolean_round_trip(
        self,
        configuration: ConfigurationStore,
        kv_store: InMemoryKeyValueStore,
        field: ConfigField,
        value: bool,
    ) -> None:
        """Test every boolean field survives a reload."""
        configuration.set(field, value)
        assert configuration.get(field) is value
        assert _reload(configuration, kv_store).get(field) is value

    def test_storage_key_format(
        self, configuration: ConfigurationStore, kv_store: InMemoryKeyValueStore
    ) -> None:
        """Test keys are '{namespace}_{fieldName}'."""
        configuration.restricted_mode = True
        key = f"{configuration.namespace}_restrictedMode"
        assert configuration.storage_key(ConfigField.RESTRICTED_MODE) == key
        assert kv_store.get_bool(key) is True

    def test_namespaces_are_isolated(self, kv_store: InMemoryKeyValueStore) -> None:
        """Test two namespaces sharing one store do not see each other."""
        first = ConfigurationStore("First", store=kv_store)
        second = ConfigurationStore("Second", store=kv_store)

        first.restricted_mode = True
        first.approve_content("video-1")

        assert _reload(second, kv_store).restricted_mode is False
        assert _reload(second, kv_store).approved_content_ids == frozenset()

    def test_passcode_round_trip(
        self, configuration: ConfigurationStore, kv_store: InMemoryKeyValueStore
    ) -> None:
        """Test the passcode is persisted."""
        configuration.override_passcode = "1234"
        assert _reload(configuration, kv_store).override_passcode == "1234"

    def test_get_and_set_accept_names(self, configuration: ConfigurationStore) -> None:
        """Test fields can be addressed by storage or attribute name."""
        configuration.set("allowFileSharing", True)
        assert configuration.get("allow_file_sharing") is True
        assert configuration.allow_file_sharing is True

    def test_unknown_field(self, configuration: ConfigurationStore) -> None:
        """Test unknown names raise KeyError."""
        with pytest.raises(KeyError):
            configuration.get("notAField")

    @pytest.mark.parametrize(
        "field, value",
        [
            (ConfigField.RESTRICTED_MODE, "yes"),
            (ConfigField.RESTRICTED_MODE, 1),
            (ConfigField.OVERRIDE_PASSCODE, 1234),
            (ConfigField.APPROVED_CONTENT_IDS, "abc"),
            (ConfigField.APPROVED_CONTENT_IDS, {1, 2}),
            (ConfigField.SESSION_BUDGET_SECONDS, -1),
            (ConfigField.SESSION_BUDGET_SECONDS, True),
        ],
    )
    def test_wrong_types_rejected(
        self, configuration: ConfigurationStore, field: ConfigField, value: object
    ) -> None:
        """Test setters validate value types."""
        before = configuration.get(field)
        with pytest.raises(ValidationError):
            configuration.set(field, value)
        assert configuration.get(field) == before


class TestSessionBudget:
    """Tri-state session budget handling."""

    def test_limited_budget_round_trip(
        self, configuration: ConfigurationStore, kv_store: InMemoryKeyValueStore
    ) -> None:
        """Test a limited budget is persisted as its seconds."""
        configuration.session_budget_seconds = 90
        assert kv_store.get_int(configuration.storage_key("sessionBudgetSeconds")) == 90
        assert _reload(configuration, kv_store).session_budget_seconds == 90

    def test_explicit_unlimited_survives_reload(
        self, configuration: ConfigurationStore, kv_store: InMemoryKeyValueStore
    ) -> None:
        """Test an explicit 'no limit' is not overwritten by the default."""
        configuration.session_budget = SessionBudget.unlimited()
        reloaded = _reload(configuration, kv_store)
        assert reloaded.session_budget.is_unlimited
        assert reloaded.session_budget_seconds == 0

    def test_unset_removes_stored_budget(
        self, configuration: ConfigurationStore, kv_store: InMemoryKeyValueStore
    ) -> None:
        """Test returning to unset clears the persisted value."""
        configuration.session_budget_seconds = 30
        configuration.session_budget = None
        assert configuration.session_budget.kind is BudgetKind.UNSET
        assert "sessionBudgetSeconds" not in "".join(kv_store.keys())

    def test_legacy_negative_budget_discarded(self, sink: RecordingSink) -> None:
        """Test a stored '-1' custom marker loads as unset and is removed."""
        kv = InMemoryKeyValueStore({"App_sessionBudgetSeconds": -1})
        store = ConfigurationStore("App", store=kv, diagnostics=sink)

        assert store.session_budget.kind is BudgetKind.UNSET
        assert store.session_budget_seconds == 600
        assert "App_sessionBudgetSeconds" not in kv
        assert len(sink.reports) == 1


class TestBudgetHelpers:
    """Budget presets, custom entry and labels."""

    def test_presets_end_with_no_limit(self) -> None:
        """Test the preset list."""
        assert [seconds for seconds, _ in BUDGET_PRESETS] == [10, 30, 60, 120, 300, 600, 0]
        assert BUDGET_PRESETS[-1] == (0, "No limit")

    @pytest.mark.parametrize(
        "text, expected",
        [("45", 45), (" 90 ", 90), ("0", None), ("-1", None), ("abc", None), ("", None)],
    )
    def test_parse_custom_budget(self, text: str, expected: object) -> None:
        """Test custom entry accepts positive integers only."""
        assert parse_custom_budget(text) == expected

    @pytest.mark.parametrize(
        "seconds, expected",
        [(45, "45 sec"), (60, "1 min"), (600, "10 min"), (125, "2m 5s")],
    )
    def test_format_duration(self, seconds: int, expected: str) -> None:
        """Test budget labels."""
        assert format_duration(seconds) == expected

    def test_describe(self) -> None:
        """Test budget descriptions for each state."""
        assert SessionBudget.unset().describe() == "unset"
        assert SessionBudget.unlimited().describe() == "No limit"
        assert SessionBudget.limited(300).describe() == "5 min"

    def test_invalid_budget_construction(self) -> None:
        """Test inconsistent budgets cannot be built."""
        with pytest.raises(ValueError):
            SessionBudget.limited(0)
        with pytest.raises(ValueError):
            SessionBudget(BudgetKind.UNLIMITED, 30)


class TestApprovedContent:
    """Allow-list encoding and recovery."""

    def test_approve_and_revoke(
        self, configuration: ConfigurationStore, kv_store: InMemoryKeyValueStore
    ) -> None:
        """Test approve/revoke update and persist the allow-list."""
        configuration.approve_content("a")
        configuration.approve_content("b")
        configuration.revoke_content_approval("a")

        assert configuration.approved_content_ids == frozenset({"b"})
        assert _reload(configuration, kv_store).approved_content_ids == frozenset({"b"})

    def test_revoke_missing_id_is_harmless(
        self, configuration: ConfigurationStore
    ) -> None:
        """Test revoking an unknown id leaves the set unchanged."""
        configuration.revoke_content_approval("missing")
        assert configuration.approved_content_ids == frozenset()

    def test_blob_is_json_array(
        self, configuration: ConfigurationStore, kv_store: InMemoryKeyValueStore
    ) -> None:
        """Test the stored blob is a UTF-8 JSON array."""
        configuration.approved_content_ids = {"b", "a"}
        blob = kv_store.get_bytes(configuration.storage_key("approvedContentIds"))
        assert json.loads(blob.decode("utf-8")) == ["a", "b"]

    def test_unicode_and_edge_ids_round_trip(
        self, configuration: ConfigurationStore, kv_store: InMemoryKeyValueStore
    ) -> None:
        """Test unusual ids survive persistence."""
        ids = {
            "",
            "🎬📹🎥",
            "测试视频",
            "فيديو تجريبي",
            'video"with"quotes',
            "video\\with\\backslashes",
            "line\nbreak",
            "x" * 10_000,
        }
        configuration.approved_content_ids = ids
        assert _reload(configuration, kv_store).approved_content_ids == frozenset(ids)

    def test_empty_set_round_trip(
        self, configuration: ConfigurationStore, kv_store: InMemoryKeyValueStore
    ) -> None:
        """Test an explicitly emptied allow-list reloads empty."""
        configuration.approve_content("a")
        configuration.approved_content_ids = set()
        assert _reload(configuration, kv_store).approved_content_ids == frozenset()

    @pytest.mark.parametrize(
        "blob",
        [
            b"",
            b'["video1", "video2"',
            b'{"invalid": unclosed string',
            b'{"a": 1}',
            b"[1, 2, 3]",
            b"\xff\xfe\x00",
        ],
    )
    def test_corrupted_blob_recovers(self, blob: bytes, sink: RecordingSink) -> None:
        """Test corrupted blobs yield an empty set and are wiped."""
        kv = InMemoryKeyValueStore({"App_approvedContentIds": blob})
        store = ConfigurationStore("App", store=kv, diagnostics=sink)

        assert store.approved_content_ids == frozenset()
        assert "App_approvedContentIds" not in kv
        assert sink.reports

        store.approve_content("new_video")
        reloaded = ConfigurationStore("App", store=kv, diagnostics=sink)
        assert reloaded.approved_content_ids == frozenset({"new_video"})

    def test_string_blob_accepted(self) -> None:
        """Test an allow-list stored as text is read as well."""
        kv = InMemoryKeyValueStore({"App_approvedContentIds": '["a"]'})
        assert ConfigurationStore("App", store=kv).approved_content_ids == frozenset({"a"})

    def test_encode_failure_keeps_memory_and_clears_key(
        self, configuration: ConfigurationStore, kv_store: InMemoryKeyValueStore, sink: RecordingSink
    ) -> None:
        """Test an unencodable id is kept in memory but not half-written."""
        configuration.approve_content("ok")
        configuration.approve_content("\ud800")

        assert "\ud800" in configuration.approved_content_ids
        assert configuration.storage_key("approvedContentIds") not in kv_store
        assert any("Failed to persist" in message for message in sink.messages)


class TestPersistenceFailure:
    """Backing store write failures."""

    def test_failed_write_is_non_fatal(self, sink: RecordingSink) -> None:
        """Test the in-memory value applies and the key is cleared."""
        kv = FailingStore({"App_restrictedMode"})
        store = ConfigurationStore("App", store=kv, diagnostics=sink)

        store.restricted_mode = True

        assert store.restricted_mode is True
        assert "App_restrictedMode" in kv.removed
        assert len(sink.reports) == 1
        assert sink.reports[0][1]["key"] == "App_restrictedMode"

    def test_other_fields_unaffected(self, sink: RecordingSink) -> None:
        """Test a failing key does not affect others."""
        kv = FailingStore({"App_restrictedMode"})
        store = ConfigurationStore("App", store=kv, diagnostics=sink)

        store.allow_file_sharing = True
        assert kv.get_bool("App_allowFileSharing") is True
        assert sink.reports == []


class TestPasscode:
    """Override passcode checks."""

    def test_no_passcode_never_valid(self, configuration: ConfigurationStore) -> None:
        """Test an empty passcode disables the override, even for ''."""
        assert configuration.is_valid_passcode("") is False
        assert configuration.is_valid_passcode("1234") is False
        assert configuration.has_passcode() is False

    def test_exact_match_required(self, configuration: ConfigurationStore) -> None:
        """Test comparison is exact and case-sensitive."""
        configuration.override_passcode = "Abc1"
        assert configuration.is_valid_passcode("Abc1") is True
        assert configuration.is_valid_passcode("abc1") is False
        assert configuration.is_valid_passcode("Abc1 ") is False
        assert configuration.is_valid_passcode("") is False

    def test_set_passcode_requires_confirmation(
        self, configuration: ConfigurationStore
    ) -> None:
        """Test set_passcode needs matching, non-empty entries."""
        assert configuration.set_passcode("1234", "4321") is False
        assert configuration.set_passcode("", "") is False
        assert configuration.has_passcode() is False

        assert configuration.set_passcode("1234", "1234") is True
        assert configuration.is_valid_passcode("1234") is True

    def test_clear_passcode(self, configuration: ConfigurationStore) -> None:
        """Test clearing the passcode disables the override."""
        configuration.override_passcode = "1234"
        configuration.clear_passcode()
        assert configuration.is_valid_passcode("1234") is False


class TestContentAllowed:
    """is_content_allowed semantics."""

    def test_blocked_until_approved(self, configuration: ConfigurationStore) -> None:
        """Test ids are blocked while filtering until approved."""
        assert configuration.is_content_allowed("x") is False
        configuration.approve_content("x")
        assert configuration.is_content_allowed("x") is True

    def test_everything_allowed_without_filtering(
        self, configuration: ConfigurationStore
    ) -> None:
        """Test all ids pass when approval filtering is off."""
        configuration.content_approval_restricted = False
        assert configuration.is_content_allowed("anything") is True
        assert configuration.is_content_allowed("") is True


class TestCapabilities:
    """Sharing capability checks."""

    def test_unrestricted_has_full_capability(
        self, configuration: ConfigurationStore
    ) -> None:
        """Test unrestricted mode allows everything regardless of flags."""
        assert configuration.can_receive_files() is True
        assert configuration.can_use_nfc() is True
        assert configuration.can_receive_airdrop() is True

    def test_restricted_requires_opt_in(self, configuration: ConfigurationStore) -> None:
        """Test restricted mode needs the per-capability flag."""
        configuration.restricted_mode = True
        assert configuration.can_receive_files() is False
        assert configuration.can_use_nfc() is False
        assert configuration.can_receive_airdrop() is False

        configuration.allow_file_sharing = True
        configuration.allow_nfc_sharing = True
        configuration.allow_airdrop_receiving = True
        assert configuration.can_receive_files() is True
        assert configuration.can_use_nfc() is True
        assert configuration.can_receive_airdrop() is True


class TestChangeNotification:
    """Observer fan-out."""

    def test_observers_receive_changes(self, configuration: ConfigurationStore) -> None:
        """Test each mutation is broadcast to every observer."""
        first, second = [], []
        configuration.subscribe(first.append)
        configuration.subscribe(second.append)

        configuration.restricted_mode = True
        configuration.approve_content("a")

        expected = [
            ConfigChange(ConfigField.RESTRICTED_MODE, True),
            ConfigChange(ConfigField.APPROVED_CONTENT_IDS, frozenset({"a"})),
        ]
        assert first == expected
        assert second == expected

    def test_unsubscribe(self, configuration: ConfigurationStore) -> None:
        """Test unsubscribed observers stop receiving events."""
        events = []
        unsubscribe = configuration.subscribe(events.append)
        unsubscribe()
        unsubscribe()

        configuration.restricted_mode = True
        assert events == []

    def test_failing_observer_does_not_block_others(
        self, configuration: ConfigurationStore
    ) -> None:
        """Test one observer raising does not stop the broadcast."""
        events = []

        def broken(change: ConfigChange) -> None:
            raise RuntimeError("observer bug")

        configuration.subscribe(broken)
        configuration.subscribe(events.append)

        configuration.allow_nfc_sharing = True
        assert events == [ConfigChange(ConfigField.ALLOW_NFC_SHARING, True)]

    def test_rejected_value_is_not_broadcast(
        self, configuration: ConfigurationStore
    ) -> None:
        """Test validation failures emit nothing."""
        events = []
        configuration.subscribe(events.append)
        with pytest.raises(ValidationError):
            configuration.restricted_mode = "on"
        assert events == []


class TestSnapshot:
    """snapshot() and reload()."""

    def test_snapshot_uses_storage_names(
        self, configuration: ConfigurationStore
    ) -> None:
        """Test snapshot keys and printable values."""
        configuration.approved_content_ids = {"b", "a"}
        configuration.session_budget_seconds = 45
        data = configuration.snapshot()

        assert data["approvedContentIds"] == ["a", "b"]
        assert data["sessionBudgetSeconds"] == 45
        assert data["restrictedMode"] is False

    def test_reload_picks_up_external_writes(
        self, configuration: ConfigurationStore, kv_store: InMemoryKeyValueStore
    ) -> None:
        """Test reload() re-reads the backing store."""
        kv_store.set(configuration.storage_key("restrictedMode"), True)
        assert configuration.restricted_mode is False
        configuration.reload()
        assert configuration.restricted_mode is True
