"""
Restriction types and data structures.

Contains the configuration field catalogue, the session budget tri-state,
change events, the content item shape and small formatting helpers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


class FieldKind(Enum):
    """Value kinds a configuration field can hold."""

    BOOL = "bool"
    STRING = "string"
    BUDGET = "budget"
    ID_SET = "id_set"


class ConfigField(Enum):
    """Configuration fields. The value is the name used in storage keys."""

    RESTRICTED_MODE = "restrictedMode"
    SESSION_BUDGET_SECONDS = "sessionBudgetSeconds"
    OVERRIDE_PASSCODE = "overridePasscode"
    ALLOW_CAMERA_SWITCH = "allowCameraSwitch"
    ALLOW_PHOTO_CAPTURE = "allowPhotoCapture"
    ALLOW_VIDEO_RECORDING = "allowVideoRecording"
    ENABLE_AUDIO_RECORDING = "enableAudioRecording"
    AUTO_START_RECORDING = "autoStartRecording"
    ALLOW_STOP_RECORDING = "allowStopRecording"
    CONTENT_APPROVAL_RESTRICTED = "contentApprovalRestricted"
    ALLOW_FILE_SHARING = "allowFileSharing"
    ALLOW_NFC_SHARING = "allowNFCSharing"
    ALLOW_AIRDROP_RECEIVING = "allowAirDropReceiving"
    APPROVED_CONTENT_IDS = "approvedContentIds"

    @property
    def attribute(self) -> str:
        """Python attribute name on ConfigurationStore."""
        return _FIELD_SPECS[self][0]

    @property
    def kind(self) -> FieldKind:
        return _FIELD_SPECS[self][1]

    @property
    def default(self) -> Any:
        return _FIELD_SPECS[self][2]

    @classmethod
    def parse(cls, name: Union["ConfigField", str]) -> "ConfigField":
        """Resolve a field from itself, its storage name or its attribute name."""
        if isinstance(name, cls):
            return name
        for field in cls:
            if name in (field.value, field.attribute, field.name):
                return field
        raise KeyError(f"Unknown configuration field: {name}")


# field -> (attribute, kind, default)
_FIELD_SPECS: Dict[ConfigField, Tuple[str, FieldKind, Any]] = {
    ConfigField.RESTRICTED_MODE: ("restricted_mode", FieldKind.BOOL, False),
    ConfigField.SESSION_BUDGET_SECONDS: ("session_budget", FieldKind.BUDGET, None),
    ConfigField.OVERRIDE_PASSCODE: ("override_passcode", FieldKind.STRING, ""),
    ConfigField.ALLOW_CAMERA_SWITCH: ("allow_camera_switch", FieldKind.BOOL, True),
    ConfigField.ALLOW_PHOTO_CAPTURE: ("allow_photo_capture", FieldKind.BOOL, True),
    ConfigField.ALLOW_VIDEO_RECORDING: ("allow_video_recording", FieldKind.BOOL, True),
    ConfigField.ENABLE_AUDIO_RECORDING: (
        "enable_audio_recording",
        FieldKind.BOOL,
        True,
    ),
    ConfigField.AUTO_START_RECORDING: ("auto_start_recording", FieldKind.BOOL, False),
    ConfigField.ALLOW_STOP_RECORDING: ("allow_stop_recording", FieldKind.BOOL, True),
    ConfigField.CONTENT_APPROVAL_RESTRICTED: (
        "content_approval_restricted",
        FieldKind.BOOL,
        True,
    ),
    ConfigField.ALLOW_FILE_SHARING: ("allow_file_sharing", FieldKind.BOOL, False),
    ConfigField.ALLOW_NFC_SHARING: ("allow_nfc_sharing", FieldKind.BOOL, False),
    ConfigField.ALLOW_AIRDROP_RECEIVING: (
        "allow_airdrop_receiving",
        FieldKind.BOOL,
        False,
    ),
    ConfigField.APPROVED_CONTENT_IDS: (
        "approved_content_ids",
        FieldKind.ID_SET,
        frozenset(),
    ),
}

BOOLEAN_FIELDS: Tuple[ConfigField, ...] = tuple(
    f for f in ConfigField if f.kind is FieldKind.BOOL
)


class BudgetKind(Enum):
    """Session budget states."""

    UNSET = "unset"  # never configured, first-run default applies
    UNLIMITED = "unlimited"  # explicit "no limit"
    LIMITED = "limited"


@dataclass(frozen=True)
class SessionBudget:
    """Configured countdown length for one restricted session."""

    kind: BudgetKind = BudgetKind.UNSET
    seconds: int = 0

    def __post_init__(self) -> None:
        if self.kind is BudgetKind.LIMITED and self.seconds <= 0:
            raise ValueError(f"Limited budget needs positive seconds, got {self.seconds}")
        if self.kind is not BudgetKind.LIMITED and self.seconds != 0:
            raise ValueError(f"{self.kind.value} budget cannot carry seconds")

    @classmethod
    def unset(cls) -> "SessionBudget":
        return cls(BudgetKind.UNSET)

    @classmethod
    def unlimited(cls) -> "SessionBudget":
        return cls(BudgetKind.UNLIMITED)

    @classmethod
    def limited(cls, seconds: int) -> "SessionBudget":
        return cls(BudgetKind.LIMITED, seconds)

    @classmethod
    def from_seconds(cls, seconds: int) -> "SessionBudget":
        """0 means unlimited, positive means limited. Negative raises ValueError."""
        if seconds < 0:
            raise ValueError(f"Budget seconds cannot be negative: {seconds}")
        return cls.unlimited() if seconds == 0 else cls.limited(seconds)

    @property
    def is_unlimited(self) -> bool:
        return self.kind is BudgetKind.UNLIMITED

    def effective_seconds(self, default_seconds: int) -> int:
        """Countdown length to use; 0 means no countdown."""
        if self.kind is BudgetKind.UNSET:
            return default_seconds
        return self.seconds

    def to_stored(self) -> Optional[int]:
        """Integer persisted for this budget, or None when nothing is stored."""
        if self.kind is BudgetKind.UNSET:
            return None
        return self.seconds

    def describe(self) -> str:
        if self.kind is BudgetKind.UNSET:
            return "unset"
        if self.kind is BudgetKind.UNLIMITED:
            return "No limit"
        return format_duration(self.seconds)


@dataclass(frozen=True)
class ConfigChange:
    """Change event broadcast after a field mutation."""

    field: ConfigField
    value: Any


@dataclass
class ApprovedContent:
    """A content item whose ``approved`` flag mirrors the allow-list."""

    content_id: str
    title: str = ""
    approved: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "content_id": self.content_id,
            "title": self.title,
            "approved": self.approved,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ApprovedContent":
        """Create from dictionary."""
        return cls(
            content_id=str(data["content_id"]),
            title=data.get("title", ""),
            approved=bool(data.get("approved", False)),
        )


# Budget choices offered by settings screens (seconds, label); 0 is "No limit"
BUDGET_PRESETS: List[Tuple[int, str]] = [
    (10, "10 sec"),
    (30, "30 sec"),
    (60, "1 min"),
    (120, "2 min"),
    (300, "5 min"),
    (600, "10 min"),
    (0, "No limit"),
]


def parse_custom_budget(text: str) -> Optional[int]:
    """Parse a user-entered custom budget. Returns None unless a positive integer."""
    try:
        seconds = int(text.strip())
    except (AttributeError, ValueError):
        return None
    return seconds if seconds > 0 else None


def format_duration(seconds: int) -> str:
    """Human readable budget: '45 sec', '10 min' or '2m 5s'."""
    if seconds < 60:
        return f"{seconds} sec"
    minutes, remainder = divmod(seconds, 60)
    if remainder == 0:
        return f"{minutes} min"
    return f"{minutes}m {remainder}s"


def format_remaining(seconds: float) -> str:
    """Countdown display 'MM:SS'; fractions are truncated, minutes unbounded."""
    total = max(int(seconds), 0)
    minutes = total // 60
    secs = total % 60
    return f"{minutes:02d}:{secs:02d}"
