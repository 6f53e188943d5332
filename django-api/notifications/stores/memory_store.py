"""In-process NotificationPreferenceStore for tests and local runs."""

import threading

from notifications.domain import NotificationPreference
from notifications.stores.interfaces import NotificationPreferenceStore


class InMemoryNotificationPreferenceStore(NotificationPreferenceStore):
    def __init__(self) -> None:
        self._by_user: dict[str, NotificationPreference] = {}
        self._lock = threading.Lock()

    def get_for_user(self, user_id: str) -> NotificationPreference | None:
        return self._by_user.get(user_id)

    def save(self, preference: NotificationPreference) -> NotificationPreference:
        with self._lock:
            self._by_user[preference.user_id] = preference
        return preference

    def delete_for_user(self, user_id: str) -> bool:
        with self._lock:
            return self._by_user.pop(user_id, None) is not None
