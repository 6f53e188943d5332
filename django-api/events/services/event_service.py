"""Event service - all business logic lives here.

Services:
- Depend only on interfaces (stores)
- Validate domain invariants
- Perform orchestration and error mapping
- Return domain models or domain errors

Every state change on an existing event runs through ``EventStore.mutate``,
so roster and capacity checks are evaluated against the locked, committed
state rather than a stale copy.
"""

import logging
from collections.abc import Callable

from core.domain.errors import DomainError
from core.domain.pagination import Page, PageRequest
from events.domain import (
    Event,
    EventCreateProps,
    EventId,
    EventNotFoundError,
    EventStatus,
    EventUpdateProps,
    InvalidEventIdError,
)
from events.stores.interfaces import EventFilters, EventStore

logger = logging.getLogger(__name__)


class EventService:
    """Service for event lifecycle and attendance operations."""

    def __init__(self, store: EventStore) -> None:
        self._store = store

    def create_event(self, props: EventCreateProps) -> Event:
        """Create and persist a new event.

        Raises:
            EventCreateError: If the input breaks an event invariant.
        """
        event = self._store.save(Event.create(props))
        logger.info(
            "Event created",
            extra={"event_id": str(event.id), "organizer_id": event.organizer_id},
        )
        return event

    def list_events(self) -> list[Event]:
        """Return all events."""
        return self._store.list_events()

    def get_event(self, event_id: str) -> Event:
        """Return an event by ID.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
        """
        event = self._store.get(parse_event_id(event_id))
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    def update_event(self, event_id: str, props: EventUpdateProps) -> Event:
        return self._mutate(event_id, lambda event: event.update(props), "update")

    def register_attendee(self, event_id: str, user_id: str) -> Event:
        """Add ``user_id`` to the roster under the event's lock.

        Raises:
            EventAttendanceError: If the event is cancelled, inactive, over,
                full, or the user is already registered.
        """
        return self._mutate(
            event_id, lambda event: event.add_attendee(user_id), "register_attendee", user_id=user_id
        )

    def unregister_attendee(self, event_id: str, user_id: str) -> Event:
        return self._mutate(
            event_id, lambda event: event.remove_attendee(user_id), "unregister_attendee", user_id=user_id
        )

    def cancel_event(self, event_id: str) -> Event:
        return self._mutate(event_id, lambda event: event.cancel(), "cancel")

    def change_status(self, event_id: str, status: EventStatus | str) -> Event:
        return self._mutate(event_id, lambda event: event.change_status(status), "change_status")

    def publish_event(self, event_id: str) -> Event:
        return self._mutate(event_id, lambda event: event.publish(), "publish")

    def events_for_attendee(self, user_id: str, upcoming_only: bool = False) -> list[Event]:
        if upcoming_only:
            return self._store.find_upcoming_by_attendee(user_id)
        return self._store.find_by_attendee(user_id)

    def events_for_organizer(self, organizer_id: str) -> list[Event]:
        return self._store.find_by_organizer(organizer_id)

    def search_events(self, query: str) -> list[Event]:
        return self._store.search(query)

    def find_events(self, filters: EventFilters | None = None, page: PageRequest | None = None) -> Page[Event]:
        """Return one page of events matching ``filters`` with the total match count.

        Raises:
            ValueError: If the page orders by an unsortable field.
        """
        return self._store.find_with_filters(filters or EventFilters(), page or PageRequest())

    def _mutate(
        self,
        event_id: str,
        mutation: Callable[[Event], Event],
        action: str,
        **log_fields: str,
    ) -> Event:
        parsed = parse_event_id(event_id)
        try:
            event = self._store.mutate(parsed, mutation)
        except DomainError as exc:
            logger.warning(
                "Event %s rejected: %s",
                action,
                exc.message,
                extra={"event_id": event_id, "error_code": exc.code.value, **log_fields},
            )
            raise
        if event is None:
            raise EventNotFoundError(event_id)
        logger.info(
            "Event %s applied",
            action,
            extra={"event_id": event_id, "status": event.status.value, **log_fields},
        )
        return event


def parse_event_id(event_id: str) -> EventId:
    """Parse a raw event ID.

    Raises:
        InvalidEventIdError: If the value is not a valid UUID.
    """
    try:
        return EventId.from_string(event_id)
    except (TypeError, ValueError, AttributeError):
        raise InvalidEventIdError() from None
