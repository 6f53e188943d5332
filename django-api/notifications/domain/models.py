"""Per-user notification preferences.

Whether a notification of a given type reaches a user on a given channel is
computed from two layers: a global switch per channel and a switch (plus an
optional channel allow-list) per notification type.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from types import MappingProxyType
from typing import Any

from core.domain.clock import parse_datetime, utc_now
from notifications.domain.errors import NotificationPreferenceError
from notifications.domain.value_objects import (
    ChannelPreference,
    NotificationChannel,
    NotificationPreferenceId,
    NotificationType,
    TypePreference,
)

DEFAULT_ENABLED_CHANNELS = frozenset({NotificationChannel.IN_APP, NotificationChannel.EMAIL})

_FACTORY = object()


def default_channel_preferences() -> dict[NotificationChannel, ChannelPreference]:
    return {
        channel: ChannelPreference(enabled=channel in DEFAULT_ENABLED_CHANNELS)
        for channel in NotificationChannel
    }


def default_type_preferences() -> dict[NotificationType, TypePreference]:
    return {notification_type: TypePreference(enabled=True) for notification_type in NotificationType}


@dataclass(frozen=True, eq=False)
class NotificationPreference:
    """Domain representation of a user's notification preferences."""

    id: NotificationPreferenceId
    user_id: str
    channel_preferences: Mapping[NotificationChannel, ChannelPreference]
    type_preferences: Mapping[NotificationType, TypePreference]
    created_at: datetime
    updated_at: datetime
    _token: object = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self._token is not _FACTORY:
            raise TypeError(
                "Preferences are built with NotificationPreference.create() or .reconstitute()"
            )
        object.__setattr__(self, "channel_preferences", MappingProxyType(dict(self.channel_preferences)))
        object.__setattr__(self, "type_preferences", MappingProxyType(dict(self.type_preferences)))

    @classmethod
    def create(
        cls,
        user_id: str,
        channel_preferences: Mapping[Any, Any] | None = None,
        type_preferences: Mapping[Any, Any] | None = None,
        id: NotificationPreferenceId | str | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ) -> "NotificationPreference":
        """Build preferences from the defaults, overridden by the given entries.

        Defaults: IN_APP and EMAIL on, PUSH and SMS off, every type on with
        no channel allow-list.

        Raises:
            NotificationPreferenceError: If the user id is blank or an
                override names an unknown channel or type.
        """
        if not user_id or not str(user_id).strip():
            raise NotificationPreferenceError("User ID is required")

        channels = default_channel_preferences()
        for key, value in (channel_preferences or {}).items():
            channels[_parse_channel(key)] = _coerce_channel_preference(value)

        types = default_type_preferences()
        for key, value in (type_preferences or {}).items():
            types[_parse_type(key)] = _coerce_type_preference(value)

        now = utc_now()
        return cls(
            id=_coerce_id(id),
            user_id=str(user_id),
            channel_preferences=channels,
            type_preferences=types,
            created_at=created_at or now,
            updated_at=updated_at or now,
            _token=_FACTORY,
        )

    @classmethod
    def reconstitute(cls, data: Mapping[str, Any]) -> "NotificationPreference":
        """Rebuild preferences from stored data (the shape of ``to_dict``)."""
        return cls(
            id=_coerce_id(data["id"]),
            user_id=data["user_id"],
            channel_preferences={
                _parse_channel(key): _coerce_channel_preference(value)
                for key, value in data.get("channel_preferences", {}).items()
            },
            type_preferences={
                _parse_type(key): _coerce_type_preference(value)
                for key, value in data.get("type_preferences", {}).items()
            },
            created_at=parse_datetime(data["created_at"]),
            updated_at=parse_datetime(data["updated_at"]),
            _token=_FACTORY,
        )

    def is_type_enabled(self, notification_type: NotificationType) -> bool:
        preference = self.type_preferences.get(notification_type)
        return preference.enabled if preference else True

    def is_channel_enabled(self, channel: NotificationChannel) -> bool:
        preference = self.channel_preferences.get(channel)
        return preference.enabled if preference else False

    def is_channel_enabled_for_type(
        self, notification_type: NotificationType, channel: NotificationChannel
    ) -> bool:
        if not self.is_type_enabled(notification_type) or not self.is_channel_enabled(channel):
            return False
        preference = self.type_preferences.get(notification_type)
        if preference and preference.channels:
            return channel in preference.channels
        return True

    def get_channel_settings(self, channel: NotificationChannel) -> dict[str, Any] | None:
        preference = self.channel_preferences.get(channel)
        return dict(preference.settings) if preference else None

    def get_enabled_channels_for_type(self, notification_type: NotificationType) -> list[NotificationChannel]:
        """Channels a notification of this type should be delivered on."""
        if not self.is_type_enabled(notification_type):
            return []
        preference = self.type_preferences.get(notification_type)
        if preference and preference.channels:
            return [channel for channel in preference.channels if self.is_channel_enabled(channel)]
        return [channel for channel in NotificationChannel if self.is_channel_enabled(channel)]

    def update_channel_preference(
        self,
        channel: NotificationChannel | str,
        enabled: bool,
        settings: Mapping[str, Any] | None = None,
    ) -> "NotificationPreference":
        """Switch a channel, merging ``settings`` over the existing ones."""
        channel = _parse_channel(channel)
        current = self.channel_preferences.get(channel, ChannelPreference(enabled=False))
        merged = {**current.settings, **settings} if settings else dict(current.settings)
        channels = dict(self.channel_preferences)
        channels[channel] = ChannelPreference(enabled=enabled, settings=merged)
        return replace(self, channel_preferences=channels, updated_at=utc_now())

    def update_type_preference(
        self,
        notification_type: NotificationType | str,
        enabled: bool,
        channels: Iterable[NotificationChannel | str] | None = None,
    ) -> "NotificationPreference":
        """Switch a type; the allow-list is kept unless ``channels`` is given."""
        notification_type = _parse_type(notification_type)
        current = self.type_preferences.get(notification_type, TypePreference(enabled=True))
        allowed = (
            tuple(_parse_channel(channel) for channel in channels)
            if channels is not None
            else current.channels
        )
        types = dict(self.type_preferences)
        types[notification_type] = TypePreference(enabled=enabled, channels=allowed)
        return replace(self, type_preferences=types, updated_at=utc_now())

    def enable_type(self, notification_type: NotificationType | str) -> "NotificationPreference":
        return self.update_type_preference(notification_type, True)

    def disable_type(self, notification_type: NotificationType | str) -> "NotificationPreference":
        return self.update_type_preference(notification_type, False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": str(self.id),
            "user_id": self.user_id,
            "channel_preferences": {
                channel.value: preference.to_dict() for channel, preference in self.channel_preferences.items()
            },
            "type_preferences": {
                notification_type.value: preference.to_dict()
                for notification_type, preference in self.type_preferences.items()
            },
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NotificationPreference):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


def _parse_channel(value: NotificationChannel | str) -> NotificationChannel:
    try:
        return NotificationChannel.parse(value)
    except ValueError as exc:
        raise NotificationPreferenceError(str(exc)) from exc


def _parse_type(value: NotificationType | str) -> NotificationType:
    try:
        return NotificationType.parse(value)
    except ValueError as exc:
        raise NotificationPreferenceError(str(exc)) from exc


def _coerce_channel_preference(value: ChannelPreference | Mapping[str, Any]) -> ChannelPreference:
    if isinstance(value, ChannelPreference):
        return value
    return ChannelPreference(enabled=bool(value.get("enabled", False)), settings=dict(value.get("settings") or {}))


def _coerce_type_preference(value: TypePreference | Mapping[str, Any]) -> TypePreference:
    if isinstance(value, TypePreference):
        return value
    channels = tuple(_parse_channel(channel) for channel in value.get("channels") or ())
    return TypePreference(enabled=bool(value.get("enabled", True)), channels=channels)


def _coerce_id(value: NotificationPreferenceId | str | None) -> NotificationPreferenceId:
    if value is None:
        return NotificationPreferenceId.generate()
    if isinstance(value, NotificationPreferenceId):
        return value
    try:
        return NotificationPreferenceId.from_string(str(value))
    except ValueError as exc:
        raise NotificationPreferenceError("Notification preference ID is not valid") from exc
