"""Notification vocabulary."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Self
from uuid import UUID, uuid4

from core.domain.value_objects import ParseableEnum


@dataclass(frozen=True)
class NotificationPreferenceId:
    """Unique identifier for a NotificationPreference."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    @classmethod
    def generate(cls) -> Self:
        return cls(value=uuid4())

    def __str__(self) -> str:
        return str(self.value)


class NotificationChannel(ParseableEnum):
    """Delivery channel. Declaration order is the resolution order."""

    EMAIL = "EMAIL"
    PUSH = "PUSH"
    IN_APP = "IN_APP"
    SMS = "SMS"


class NotificationType(ParseableEnum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"

    EVENT_CREATED = "event_created"
    EVENT_UPDATED = "event_updated"
    EVENT_CANCELLED = "event_cancelled"
    EVENT_REMINDER = "event_reminder"
    EVENT_STARTING_SOON = "event_starting_soon"

    ATTENDEE_ADDED = "attendee_added"
    ATTENDEE_REMOVED = "attendee_removed"

    COMMENT_ADDED = "comment_added"
    COMMENT_REPLIED = "comment_replied"

    RATING_ADDED = "rating_added"

    REMINDER = "reminder"


@dataclass(frozen=True)
class ChannelPreference:
    """Global switch for one channel plus channel-specific settings."""

    enabled: bool
    settings: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "settings", MappingProxyType(dict(self.settings)))

    def to_dict(self) -> dict[str, Any]:
        return {"enabled": self.enabled, "settings": dict(self.settings)}


@dataclass(frozen=True)
class TypePreference:
    """Switch for one notification type.

    An empty ``channels`` tuple means every globally enabled channel may be
    used; a non-empty one is an allow-list.
    """

    enabled: bool
    channels: tuple[NotificationChannel, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {"enabled": self.enabled, "channels": [channel.value for channel in self.channels]}
