"""Notification preference service.

Resolves which channels a notification of a given type should use for a
user. Delivery itself happens elsewhere.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from notifications.domain import (
    NotificationChannel,
    NotificationPreference,
    NotificationPreferenceError,
    NotificationType,
)
from notifications.stores.interfaces import NotificationPreferenceStore

logger = logging.getLogger(__name__)


class NotificationPreferenceService:
    """Service for reading and changing notification preferences."""

    def __init__(self, store: NotificationPreferenceStore) -> None:
        self._store = store

    def get_preferences(self, user_id: str) -> NotificationPreference:
        """Return the user's preferences, storing the defaults on first access.

        Raises:
            NotificationPreferenceError: If the user_id is blank.
        """
        preference = self._store.get_for_user(user_id)
        if preference is None:
            preference = self._store.save(NotificationPreference.create(user_id))
            logger.info("Default notification preferences created", extra={"user_id": user_id})
        return preference

    def update_channel(
        self,
        user_id: str,
        channel: NotificationChannel | str,
        enabled: bool,
        settings: Mapping[str, Any] | None = None,
    ) -> NotificationPreference:
        preference = self.get_preferences(user_id).update_channel_preference(channel, enabled, settings)
        logger.info(
            "Notification channel preference updated",
            extra={"user_id": user_id, "channel": str(channel), "enabled": enabled},
        )
        return self._store.save(preference)

    def update_type(
        self,
        user_id: str,
        notification_type: NotificationType | str,
        enabled: bool,
        channels: Iterable[NotificationChannel | str] | None = None,
    ) -> NotificationPreference:
        preference = self.get_preferences(user_id).update_type_preference(notification_type, enabled, channels)
        logger.info(
            "Notification type preference updated",
            extra={"user_id": user_id, "notification_type": str(notification_type), "enabled": enabled},
        )
        return self._store.save(preference)

    def channels_for(self, user_id: str, notification_type: NotificationType | str) -> list[NotificationChannel]:
        """Channels a notification of ``notification_type`` should reach ``user_id`` on."""
        try:
            parsed = NotificationType.parse(notification_type)
        except ValueError as exc:
            raise NotificationPreferenceError(str(exc)) from exc
        return self.get_preferences(user_id).get_enabled_channels_for_type(parsed)
