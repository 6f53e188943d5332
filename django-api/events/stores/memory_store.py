"""In-process EventStore for tests and local runs.

Events are immutable, so the store keeps the instances themselves. A single
lock serializes writers, which is enough for ``mutate``'s contract.
"""

import threading
from collections.abc import Iterable
from datetime import datetime, timedelta

from core.domain.clock import ensure_aware, utc_now
from core.domain.pagination import Page, PageRequest, check_order_field
from events.domain import Event, EventId, EventNotFoundError, EventStatus, EventTags
from events.stores.interfaces import EVENT_ORDER_FIELDS, EventFilters, EventMutation, EventStore


class InMemoryEventStore(EventStore):
    """Dictionary-backed event store."""

    def __init__(self, events: Iterable[Event] = ()) -> None:
        self._events: dict[EventId, Event] = {event.id: event for event in events}
        self._lock = threading.RLock()

    def get(self, event_id: EventId) -> Event | None:
        return self._events.get(event_id)

    def exists(self, event_id: EventId) -> bool:
        return event_id in self._events

    def save(self, event: Event) -> Event:
        with self._lock:
            self._events[event.id] = event
        return event

    def update(self, event: Event) -> Event:
        with self._lock:
            if event.id not in self._events:
                raise EventNotFoundError(str(event.id))
            self._events[event.id] = event
        return event

    def delete(self, event_id: EventId) -> bool:
        with self._lock:
            return self._events.pop(event_id, None) is not None

    def mutate(self, event_id: EventId, mutation: EventMutation) -> Event | None:
        with self._lock:
            current = self._events.get(event_id)
            if current is None:
                return None
            updated = mutation(current)
            self._events[event_id] = updated
            return updated

    def _select(self, predicate) -> list[Event]:
        with self._lock:
            events = list(self._events.values())
        return sorted(
            (event for event in events if predicate(event)),
            key=lambda event: event.created_at,
            reverse=True,
        )

    def list_events(self) -> list[Event]:
        return self._select(lambda event: True)

    def find_by_organizer(self, organizer_id: str) -> list[Event]:
        return self._select(lambda event: event.organizer_id == organizer_id)

    def find_by_status(self, status: EventStatus) -> list[Event]:
        return self._select(lambda event: event.status is status)

    def find_by_tags(self, tags: Iterable[str]) -> list[Event]:
        wanted = EventTags.of(tags)
        return self._select(lambda event: all(event.tags.has(tag) for tag in wanted))

    def find_by_date_range(self, date: datetime, days_before: int, days_after: int) -> list[Event]:
        date = ensure_aware(date)
        start = date - timedelta(days=days_before)
        end = date + timedelta(days=days_after)
        return self._select(lambda event: start <= event.start_date <= end)

    def find_by_city(self, city: str) -> list[Event]:
        city = city.strip().lower()
        return self._select(lambda event: event.location.city.lower() == city)

    def find_by_attendee(self, user_id: str) -> list[Event]:
        return self._select(lambda event: event.is_attendee(user_id))

    def find_upcoming_by_attendee(self, user_id: str) -> list[Event]:
        now = utc_now()
        events = self._select(lambda event: event.is_attendee(user_id) and event.start_date > now)
        return sorted(events, key=lambda event: event.start_date)

    def search(self, query: str) -> list[Event]:
        needle = query.strip().lower()
        if not needle:
            return []
        return self._select(
            lambda event: needle in event.title.lower()
            or needle in event.description.lower()
            or any(needle in tag for tag in event.tags)
        )

    def find_with_filters(self, filters: EventFilters, page: PageRequest) -> Page[Event]:
        check_order_field(page, EVENT_ORDER_FIELDS)
        matches = self._select(lambda event: _matches(event, filters))
        if page.order_by is not None:
            matches.sort(key=lambda event: getattr(event, page.order_by), reverse=page.descending)
        return Page(
            items=matches[page.offset : page.offset + page.limit],
            total=len(matches),
            page=page.page,
            limit=page.limit,
        )


def _matches(event: Event, filters: EventFilters) -> bool:
    location = event.location
    if filters.organizer_id is not None and event.organizer_id != filters.organizer_id:
        return False
    if filters.status is not None and event.status is not filters.status:
        return False
    if filters.start_date_from is not None and event.start_date < ensure_aware(filters.start_date_from):
        return False
    if filters.start_date_to is not None and event.start_date > ensure_aware(filters.start_date_to):
        return False
    if filters.tags and not all(event.tags.has(tag) for tag in EventTags.of(filters.tags)):
        return False
    if filters.city is not None and location.city.lower() != filters.city.strip().lower():
        return False
    if filters.country is not None and location.country.lower() != filters.country.strip().lower():
        return False
    if filters.virtual_only and not location.is_virtual:
        return False
    if filters.available_capacity and not event.has_available_capacity():
        return False
    needle = (filters.query or "").strip().lower()
    if needle:
        haystack = (event.title, event.description, location.address, location.city)
        return any(needle in text.lower() for text in haystack)
    return True
