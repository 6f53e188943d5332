"""Event aggregate.

Events are immutable: every mutating operation validates against the current
state and returns a new instance (or the same one when nothing changes), so a
failed operation never leaves a half-applied event behind.

Ticket inventory is a separate aggregate. Nothing here knows about tickets,
and "tickets sold <= capacity" is not enforced by either side; that is an
orchestration concern for the service layer.
"""

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from core.domain.clock import parse_datetime, utc_now
from core.domain.sentinels import UNSET, Unsettable, is_set
from events.domain.errors import EventAttendanceError, EventCreateError, EventUpdateError
from events.domain.value_objects import EventId, EventLocation, EventStatus, EventTags

MAX_TITLE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 2000

_FACTORY = object()


@dataclass(frozen=True)
class EventCreateProps:
    """Input for Event.create."""

    title: str
    description: str
    start_date: datetime | str
    end_date: datetime | str
    location: EventLocation | Mapping[str, Any]
    organizer_id: str
    id: EventId | str | None = None
    capacity: int | None = None
    attendees: Sequence[str] = ()
    status: EventStatus | str | None = None
    tags: EventTags | Iterable[str] | None = None
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class EventUpdateProps:
    """Partial update for Event.update. Fields left UNSET are not touched.

    ``capacity=None`` is an explicit change to unlimited capacity.
    """

    title: Unsettable[str] = UNSET
    description: Unsettable[str] = UNSET
    start_date: Unsettable[datetime | str] = UNSET
    end_date: Unsettable[datetime | str] = UNSET
    location: Unsettable[EventLocation | Mapping[str, Any]] = UNSET
    capacity: Unsettable[int | None] = UNSET
    tags: Unsettable[EventTags | Iterable[str]] = UNSET


@dataclass(frozen=True, eq=False)
class Event:
    """Domain representation of an Event."""

    id: EventId
    title: str
    description: str
    start_date: datetime
    end_date: datetime
    location: EventLocation
    organizer_id: str
    capacity: int | None
    attendees: tuple[str, ...]
    status: EventStatus
    tags: EventTags
    is_active: bool
    created_at: datetime
    updated_at: datetime
    _token: object = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self._token is not _FACTORY:
            raise TypeError("Events are built with Event.create() or Event.reconstitute()")

    @classmethod
    def create(cls, props: EventCreateProps) -> "Event":
        """Validate input and build a new event.

        Raises:
            EventCreateError: If any field breaks an event invariant.
        """
        _check_text(props.title, "Title", MAX_TITLE_LENGTH, EventCreateError)
        _check_text(props.description, "Description", MAX_DESCRIPTION_LENGTH, EventCreateError)
        if not props.organizer_id or not str(props.organizer_id).strip():
            raise EventCreateError("Organizer is required")

        start_date = _coerce_date(props.start_date, "Start date", EventCreateError)
        end_date = _coerce_date(props.end_date, "End date", EventCreateError)
        now = utc_now()
        # a supplied id marks an existing event; only new ones must start in the future
        if props.id is None and start_date <= now:
            raise EventCreateError("Start date must be in the future")
        if end_date < start_date:
            raise EventCreateError("End date must be after the start date")

        capacity = _check_capacity(props.capacity, EventCreateError)

        attendees = tuple(props.attendees or ())
        if len(set(attendees)) != len(attendees):
            raise EventCreateError("Attendees cannot contain duplicates")
        if capacity is not None and len(attendees) > capacity:
            raise EventCreateError(f"The event exceeds its maximum capacity of {capacity} attendees")

        try:
            status = EventStatus.parse(props.status) if props.status is not None else EventStatus.DRAFT
        except ValueError as exc:
            raise EventCreateError(str(exc)) from exc

        return cls(
            id=_coerce_id(props.id, EventCreateError),
            title=props.title,
            description=props.description,
            start_date=start_date,
            end_date=end_date,
            location=_coerce_location(props.location, EventCreateError),
            organizer_id=str(props.organizer_id),
            capacity=capacity,
            attendees=attendees,
            status=status,
            tags=_coerce_tags(props.tags, EventCreateError),
            is_active=props.is_active,
            created_at=props.created_at or now,
            updated_at=props.updated_at or now,
            _token=_FACTORY,
        )

    @classmethod
    def reconstitute(cls, data: Mapping[str, Any]) -> "Event":
        """Rebuild an event from stored data (the shape of ``to_dict``) without validation."""
        raw_id = data["id"]
        location = data["location"]
        tags = data.get("tags") or ()
        return cls(
            id=raw_id if isinstance(raw_id, EventId) else EventId.from_string(str(raw_id)),
            title=data["title"],
            description=data["description"],
            start_date=parse_datetime(data["start_date"]),
            end_date=parse_datetime(data["end_date"]),
            location=location if isinstance(location, EventLocation) else EventLocation.from_dict(location),
            organizer_id=data["organizer_id"],
            capacity=data.get("capacity"),
            attendees=tuple(data.get("attendees") or ()),
            status=EventStatus.parse(data["status"]),
            tags=tags if isinstance(tags, EventTags) else EventTags.of(tags),
            is_active=data.get("is_active", True),
            created_at=parse_datetime(data["created_at"]),
            updated_at=parse_datetime(data["updated_at"]),
            _token=_FACTORY,
        )

    def update(self, props: EventUpdateProps) -> "Event":
        """Apply a partial update.

        Raises:
            EventUpdateError: If the event is cancelled or a provided field is invalid.
        """
        if self.status.is_cancelled:
            raise EventUpdateError("A cancelled event cannot be updated")

        changes: dict[str, Any] = {}
        if is_set(props.title):
            _check_text(props.title, "Title", MAX_TITLE_LENGTH, EventUpdateError)
            changes["title"] = props.title
        if is_set(props.description):
            _check_text(props.description, "Description", MAX_DESCRIPTION_LENGTH, EventUpdateError)
            changes["description"] = props.description

        start_date = self.start_date
        end_date = self.end_date
        if is_set(props.start_date):
            start_date = changes["start_date"] = _coerce_date(props.start_date, "Start date", EventUpdateError)
        if is_set(props.end_date):
            end_date = changes["end_date"] = _coerce_date(props.end_date, "End date", EventUpdateError)
        if end_date < start_date:
            raise EventUpdateError("End date must be after the start date")

        if is_set(props.capacity):
            capacity = _check_capacity(props.capacity, EventUpdateError)
            if capacity is not None and len(self.attendees) > capacity:
                raise EventUpdateError(
                    f"The event already has {len(self.attendees)} attendees, "
                    f"capacity cannot be reduced to {capacity}"
                )
            changes["capacity"] = capacity
        if is_set(props.location):
            changes["location"] = _coerce_location(props.location, EventUpdateError)
        if is_set(props.tags):
            changes["tags"] = _coerce_tags(props.tags, EventUpdateError)

        return replace(self, **changes, updated_at=utc_now())

    def add_attendee(self, user_id: str) -> "Event":
        """Register a user, appending them to the roster.

        Raises:
            EventAttendanceError: If the event is cancelled, inactive, over,
                full, or the user is already registered.
        """
        if self.status.is_cancelled:
            raise EventAttendanceError("Cannot register for a cancelled event")
        if not self.is_active:
            raise EventAttendanceError("Cannot register for an inactive event")
        if self.has_ended():
            raise EventAttendanceError("Cannot register for an event that has already ended")
        if user_id in self.attendees:
            raise EventAttendanceError("User is already registered for this event")
        if not self.has_available_capacity():
            raise EventAttendanceError("The event has reached its maximum capacity")
        return replace(self, attendees=self.attendees + (user_id,), updated_at=utc_now())

    def remove_attendee(self, user_id: str) -> "Event":
        """Unregister a user.

        Raises:
            EventAttendanceError: If the event is cancelled or the user is not registered.
        """
        if self.status.is_cancelled:
            raise EventAttendanceError("Cannot change attendance of a cancelled event")
        if user_id not in self.attendees:
            raise EventAttendanceError("User is not registered for this event")
        remaining = tuple(attendee for attendee in self.attendees if attendee != user_id)
        return replace(self, attendees=remaining, updated_at=utc_now())

    def cancel(self) -> "Event":
        if self.status.is_cancelled:
            return self
        return replace(self, status=EventStatus.CANCELLED, updated_at=utc_now())

    def change_status(self, status: EventStatus | str) -> "Event":
        """Set the status directly.

        There is no transition table beyond the cancelled lock: once
        cancelled, an event stays cancelled.
        """
        try:
            new_status = EventStatus.parse(status)
        except ValueError as exc:
            raise EventUpdateError(str(exc)) from exc
        if new_status is self.status:
            return self
        if self.status.is_cancelled:
            raise EventUpdateError("The status of a cancelled event cannot be changed")
        return replace(self, status=new_status, updated_at=utc_now())

    def publish(self) -> "Event":
        return self.change_status(EventStatus.PUBLISHED)

    def activate(self) -> "Event":
        if self.is_active:
            return self
        return replace(self, is_active=True, updated_at=utc_now())

    def deactivate(self) -> "Event":
        if not self.is_active:
            return self
        return replace(self, is_active=False, updated_at=utc_now())

    def is_organizer(self, user_id: str) -> bool:
        return self.organizer_id == user_id

    def is_attendee(self, user_id: str) -> bool:
        return user_id in self.attendees

    def has_started(self) -> bool:
        return self.start_date <= utc_now()

    def has_ended(self) -> bool:
        return self.end_date < utc_now()

    def has_available_capacity(self) -> bool:
        return self.capacity is None or len(self.attendees) < self.capacity

    @property
    def attendee_count(self) -> int:
        return len(self.attendees)

    @property
    def remaining_capacity(self) -> int | None:
        if self.capacity is None:
            return None
        return self.capacity - len(self.attendees)

    def to_dict(self) -> dict[str, Any]:
        """Plain-data snapshot, the inverse of ``reconstitute``."""
        return {
            "id": str(self.id),
            "title": self.title,
            "description": self.description,
            "start_date": self.start_date,
            "end_date": self.end_date,
            "location": self.location.to_dict(),
            "organizer_id": self.organizer_id,
            "capacity": self.capacity,
            "attendees": list(self.attendees),
            "status": self.status.value,
            "tags": self.tags.to_list(),
            "is_active": self.is_active,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Event):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


def _check_text(value: Any, label: str, max_length: int, error: type[Exception]) -> None:
    if not isinstance(value, str) or not value.strip():
        raise error(f"{label} is required")
    if len(value) > max_length:
        raise error(f"{label} cannot be longer than {max_length} characters")


def _check_capacity(value: Any, error: type[Exception]) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise error("Capacity must be a whole number")
    if value < 1:
        raise error("Capacity must be greater than zero")
    return value


def _coerce_date(value: Any, label: str, error: type[Exception]) -> datetime:
    try:
        return parse_datetime(value)
    except (TypeError, ValueError) as exc:
        raise error(f"{label} is not valid") from exc


def _coerce_id(value: EventId | str | None, error: type[Exception]) -> EventId:
    if value is None:
        return EventId.generate()
    if isinstance(value, EventId):
        return value
    try:
        return EventId.from_string(str(value))
    except ValueError as exc:
        raise error("Event ID is not valid") from exc


def _coerce_location(value: Any, error: type[Exception]) -> EventLocation:
    if isinstance(value, EventLocation):
        return value
    if not isinstance(value, Mapping):
        raise error("Location is required")
    try:
        return EventLocation.from_dict(value)
    except (TypeError, ValueError) as exc:
        raise error(str(exc)) from exc


def _coerce_tags(value: Any, error: type[Exception]) -> EventTags:
    if value is None:
        return EventTags.empty()
    if isinstance(value, EventTags):
        return value
    try:
        if isinstance(value, str):
            return EventTags.from_string(value)
        return EventTags.of(value)
    except (TypeError, ValueError) as exc:
        raise error(str(exc)) from exc
