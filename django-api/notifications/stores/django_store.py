"""Django ORM implementation of the NotificationPreferenceStore."""

from notifications import models as orm
from notifications.domain import NotificationPreference
from notifications.stores.interfaces import NotificationPreferenceStore


class DjangoNotificationPreferenceStore(NotificationPreferenceStore):
    """PostgreSQL-backed preference store using Django ORM."""

    def get_for_user(self, user_id: str) -> NotificationPreference | None:
        record = orm.NotificationPreference.objects.filter(user_id=user_id).first()
        if record is None:
            return None
        return NotificationPreference.reconstitute(
            {
                "id": record.id,
                "user_id": record.user_id,
                "channel_preferences": record.channel_preferences,
                "type_preferences": record.type_preferences,
                "created_at": record.created_at,
                "updated_at": record.updated_at,
            }
        )

    def save(self, preference: NotificationPreference) -> NotificationPreference:
        data = preference.to_dict()
        fields = {
            "channel_preferences": data["channel_preferences"],
            "type_preferences": data["type_preferences"],
            "created_at": data["created_at"],
            "updated_at": data["updated_at"],
        }
        orm.NotificationPreference.objects.update_or_create(
            user_id=preference.user_id,
            defaults=fields,
            create_defaults={"id": preference.id.value, **fields},
        )
        return preference

    def delete_for_user(self, user_id: str) -> bool:
        deleted, _ = orm.NotificationPreference.objects.filter(user_id=user_id).delete()
        return deleted > 0
