"""Pydantic models for contingent accounting and user identities."""

import re
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from .contingent_limits import ContingentLimits
from .utils import parse_bool

DISPLAY_NAME_PATTERN = re.compile(r"^([A-Z])-(\d+)$")


class UserKind(str, Enum):
    """Identity kind; the value doubles as the display-name prefix."""

    ORDINARY = "U"
    PRIVILEGED = "P"


class AppVersion(BaseModel):
    """Client app version reported at registration."""

    major: int = Field(..., ge=0)
    minor: int = Field(..., ge=0)
    date: str = ""


class DeviceInfo(BaseModel):
    """Client device metadata."""

    user_agent: str = ""
    platform: str = ""
    language: str = ""
    app_version: AppVersion | None = None


class PrivilegedDevice(BaseModel):
    """A device whose user is treated as privileged (internal)."""

    user_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1, max_length=100)


class ContingentConfig(BaseModel):
    """Per-period contingent control document.

    Limit fields are optional: a value missing from the stored document
    falls back to the static ContingentLimits when the policy is evaluated.
    """

    stop_all: bool = False
    per_user_monthly_limit: int | None = None
    global_monthly_limit: int | None = None
    global_buffer: int | None = None
    last_updated: str | None = None

    @classmethod
    def defaults(cls, limits: ContingentLimits, last_updated: str | None = None) -> "ContingentConfig":
        """Build the default config written when a period starts.

        Args:
            limits: Static fallback limits
            last_updated: Optional creation timestamp

        Returns:
            ContingentConfig with every field populated
        """
        return cls(
            stop_all=False,
            per_user_monthly_limit=limits.PER_USER_MONTHLY_CHARS,
            global_monthly_limit=limits.GLOBAL_MONTHLY_CHARS,
            global_buffer=limits.GLOBAL_BUFFER_CHARS,
            last_updated=last_updated,
        )

    @classmethod
    def from_db_item(cls, item: dict[str, Any]) -> "ContingentConfig":
        """Create a config from a stored item, ignoring key attributes."""
        return cls(
            stop_all=_stored_flag(item.get("stop_all", False)),
            per_user_monthly_limit=_optional_int(item.get("per_user_monthly_limit")),
            global_monthly_limit=_optional_int(item.get("global_monthly_limit")),
            global_buffer=_optional_int(item.get("global_buffer")),
            last_updated=item.get("last_updated"),
        )


class UserUsageRecord(BaseModel):
    """Characters translated by one user within one period."""

    user_id: str
    char_count: int = Field(default=0, ge=0)
    target_languages: list[str] = Field(default_factory=list)
    last_updated: str | None = None

    @classmethod
    def from_db_item(cls, item: dict[str, Any]) -> "UserUsageRecord":
        """Create a usage record from a stored item."""
        return cls(
            user_id=item["user_id"],
            char_count=int(item.get("char_count", 0)),
            target_languages=list(item.get("target_languages", [])),
            last_updated=item.get("last_updated"),
        )


class UserIdentityRecord(BaseModel):
    """Maps an opaque user ID to a human-readable sequential name."""

    user_id: str
    display_name: str
    kind: UserKind
    created_at: str
    device: str | None = None
    device_info: DeviceInfo | None = None
    is_native: bool = False
    # Names held before a promotion; their numbers stay taken
    former_display_names: list[str] = Field(default_factory=list)
    last_updated: str | None = None

    def issued_sequence_numbers(self, kind: UserKind) -> list[int]:
        """Sequence numbers this identity has held for a kind's prefix.

        Args:
            kind: Kind whose 'X-n' prefix to match

        Returns:
            Numeric suffixes of current and former names with that prefix
        """
        numbers = []
        for name in [self.display_name, *self.former_display_names]:
            match = DISPLAY_NAME_PATTERN.match(name)
            if match and match.group(1) == kind.value:
                numbers.append(int(match.group(2)))
        return numbers

    def to_db_item(self) -> dict[str, Any]:
        """Convert to stored attributes (without keys)."""
        return self.model_dump(mode="json", exclude_none=True)

    @classmethod
    def from_db_item(cls, item: dict[str, Any]) -> "UserIdentityRecord":
        """Create an identity from a stored item."""
        return cls(**{k: v for k, v in item.items() if k not in ("PK", "SK")})


def _optional_int(value: Any) -> int | None:
    return None if value is None else int(value)


def _stored_flag(value: Any) -> bool:
    # Hand-edited documents may hold strings; an unreadable flag halts translation
    if value is None:
        return False
    parsed = parse_bool(value)
    return True if parsed is None else parsed
