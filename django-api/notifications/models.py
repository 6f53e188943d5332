"""Django ORM models (persistence layer) for notification preferences."""

from django.db import models


class NotificationPreference(models.Model):
    """Persistence model for a user's notification preferences.

    Both preference matrices are stored as JSON keyed by the enum string
    values (``"EMAIL"``, ``"event_created"``).
    """

    id = models.UUIDField(primary_key=True, editable=False)
    user_id = models.TextField(unique=True)
    channel_preferences = models.JSONField(default=dict)
    type_preferences = models.JSONField(default=dict)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    def __str__(self) -> str:
        return f"Notification preferences for {self.user_id}"
