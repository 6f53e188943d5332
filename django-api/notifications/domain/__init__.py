from notifications.domain.errors import NotificationPreferenceError
from notifications.domain.models import NotificationPreference
from notifications.domain.value_objects import (
    ChannelPreference,
    NotificationChannel,
    NotificationPreferenceId,
    NotificationType,
    TypePreference,
)

__all__ = [
    "NotificationPreference",
    "NotificationPreferenceError",
    "NotificationPreferenceId",
    "NotificationChannel",
    "NotificationType",
    "ChannelPreference",
    "TypePreference",
]
