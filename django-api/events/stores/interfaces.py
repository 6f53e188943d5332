"""Store interfaces (repository pattern).

Stores must be swappable and return domain models.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime

from core.domain.pagination import Page, PageRequest
from events.domain import Event, EventId, EventStatus

EventMutation = Callable[[Event], Event]

EVENT_ORDER_FIELDS = frozenset({"start_date", "created_at", "title"})


@dataclass(frozen=True)
class EventFilters:
    """Criteria for EventStore.find_with_filters. Unset criteria match everything.

    ``query`` matches title, description, address or city; ``tags`` requires
    every listed tag; ``available_capacity`` keeps events with room left.
    """

    organizer_id: str | None = None
    status: EventStatus | None = None
    start_date_from: datetime | None = None
    start_date_to: datetime | None = None
    query: str | None = None
    tags: tuple[str, ...] = ()
    city: str | None = None
    country: str | None = None
    virtual_only: bool = False
    available_capacity: bool = False


class EventStore(ABC):
    """Interface for event persistence operations."""

    @abstractmethod
    def get(self, event_id: EventId) -> Event | None:
        """Return an event by ID, or None if not found."""
        ...

    @abstractmethod
    def exists(self, event_id: EventId) -> bool:
        """Check if an event exists."""
        ...

    @abstractmethod
    def save(self, event: Event) -> Event:
        """Insert or replace the full state of an event."""
        ...

    @abstractmethod
    def update(self, event: Event) -> Event:
        """Replace the full state of an existing event.

        Raises:
            EventNotFoundError: If the event has never been saved.
        """
        ...

    @abstractmethod
    def delete(self, event_id: EventId) -> bool:
        """Delete an event. Return False if it did not exist."""
        ...

    @abstractmethod
    def mutate(self, event_id: EventId, mutation: EventMutation) -> Event | None:
        """Load, apply ``mutation`` and persist, holding the event's lock throughout.

        Check-then-act operations (capacity checks on ``add_attendee``) must
        go through here so no two writers act on the same snapshot. Errors
        raised by ``mutation`` propagate and nothing is written.
        Returns None if the event does not exist.
        """
        ...

    @abstractmethod
    def list_events(self) -> list[Event]:
        """Return all events ordered by created_at descending."""
        ...

    @abstractmethod
    def find_by_organizer(self, organizer_id: str) -> list[Event]:
        ...

    @abstractmethod
    def find_by_status(self, status: EventStatus) -> list[Event]:
        ...

    @abstractmethod
    def find_by_tags(self, tags: Iterable[str]) -> list[Event]:
        """Return events carrying every one of ``tags`` (normalized)."""
        ...

    @abstractmethod
    def find_by_date_range(self, date: datetime, days_before: int, days_after: int) -> list[Event]:
        """Return events starting within [date - days_before, date + days_after]."""
        ...

    @abstractmethod
    def find_by_city(self, city: str) -> list[Event]:
        ...

    @abstractmethod
    def find_by_attendee(self, user_id: str) -> list[Event]:
        ...

    @abstractmethod
    def find_upcoming_by_attendee(self, user_id: str) -> list[Event]:
        """Return not-yet-started events the user attends, soonest first."""
        ...

    @abstractmethod
    def search(self, query: str) -> list[Event]:
        """Case-insensitive match on title, description or tags."""
        ...

    @abstractmethod
    def find_with_filters(self, filters: EventFilters, page: PageRequest) -> Page[Event]:
        """Return one page of matching events and the total number of matches.

        Default order is created_at descending.

        Raises:
            ValueError: If ``page.order_by`` is not in EVENT_ORDER_FIELDS.
        """
        ...
