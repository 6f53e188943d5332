"""Store interfaces for notification preferences."""

from abc import ABC, abstractmethod

from notifications.domain import NotificationPreference


class NotificationPreferenceStore(ABC):
    """Interface for notification preference persistence. One record per user."""

    @abstractmethod
    def get_for_user(self, user_id: str) -> NotificationPreference | None:
        """Return the user's preferences, or None if none were stored."""
        ...

    @abstractmethod
    def save(self, preference: NotificationPreference) -> NotificationPreference:
        """Insert or replace the preferences of ``preference.user_id``."""
        ...

    @abstractmethod
    def delete_for_user(self, user_id: str) -> bool:
        ...
