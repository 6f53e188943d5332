"""Django ORM models (persistence layer).

These models handle database concerns. Domain logic lives in domain/models.py.
"""

from django.db import models

from events.domain.value_objects import EventStatus


class Event(models.Model):
    """Persistence model for events."""

    id = models.UUIDField(primary_key=True, editable=False)
    title = models.CharField(max_length=100)
    description = models.TextField()
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    organizer_id = models.TextField()
    capacity = models.PositiveIntegerField(blank=True, null=True)
    status = models.CharField(
        max_length=16,
        choices=[(status.value, status.value) for status in EventStatus],
        default=EventStatus.DRAFT.value,
    )
    is_active = models.BooleanField(default=True)

    address = models.TextField()
    city = models.TextField()
    state = models.TextField(blank=True, null=True)
    country = models.TextField()
    postal_code = models.TextField(blank=True, null=True)
    virtual_event = models.BooleanField(default=False)
    virtual_url = models.TextField(blank=True, null=True)
    latitude = models.FloatField(blank=True, null=True)
    longitude = models.FloatField(blank=True, null=True)

    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"]),
            models.Index(fields=["organizer_id"]),
            models.Index(fields=["status"]),
            models.Index(fields=["start_date"]),
        ]

    def __str__(self) -> str:
        return self.title


class EventAttendee(models.Model):
    """Roster entry; ``position`` keeps registration order."""

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="attendee_links")
    user_id = models.TextField()
    position = models.PositiveIntegerField()

    class Meta:
        ordering = ["position"]
        constraints = [
            models.UniqueConstraint(fields=["event", "user_id"], name="unique_event_attendee"),
        ]
        indexes = [
            models.Index(fields=["user_id"]),
        ]

    def __str__(self) -> str:
        return f"{self.user_id} @ {self.event_id}"


class EventTag(models.Model):
    """Normalized tag attached to an event."""

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="tag_links")
    name = models.CharField(max_length=30)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(fields=["event", "name"], name="unique_event_tag"),
        ]
        indexes = [
            models.Index(fields=["name"]),
        ]

    def __str__(self) -> str:
        return self.name
