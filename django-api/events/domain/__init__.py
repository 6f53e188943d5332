from events.domain.errors import (
    EventAttendanceError,
    EventCreateError,
    EventNotFoundError,
    EventUpdateError,
    InvalidEventIdError,
)
from events.domain.models import Event, EventCreateProps, EventUpdateProps
from events.domain.value_objects import EventId, EventLocation, EventStatus, EventTags

__all__ = [
    "Event",
    "EventCreateProps",
    "EventUpdateProps",
    "EventId",
    "EventLocation",
    "EventStatus",
    "EventTags",
    "EventAttendanceError",
    "EventCreateError",
    "EventNotFoundError",
    "EventUpdateError",
    "InvalidEventIdError",
]
