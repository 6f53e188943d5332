"""Pytest configuration and shared fixtures."""

from datetime import datetime, timedelta

import pytest

from core.domain.clock import utc_now
from core.domain.value_objects import Money
from events.domain import Event, EventCreateProps, EventLocation
from events.stores.memory_store import InMemoryEventStore
from notifications.stores.memory_store import InMemoryNotificationPreferenceStore
from tickets.domain import Ticket, TicketCreateProps, TicketType
from tickets.stores.memory_store import InMemoryTicketStore


@pytest.fixture
def start() -> datetime:
    return utc_now() + timedelta(days=7)


@pytest.fixture
def location() -> EventLocation:
    return EventLocation(address="Calle Mayor 1", city="Madrid", country="Spain")


@pytest.fixture
def make_event(start, location):
    """Factory for valid future events; keyword arguments override the props."""

    def _make(**overrides) -> Event:
        props = {
            "title": "Conf",
            "description": "Yearly conference",
            "start_date": start,
            "end_date": start + timedelta(days=1),
            "location": location,
            "organizer_id": "u1",
        }
        props.update(overrides)
        return Event.create(EventCreateProps(**props))

    return _make


@pytest.fixture
def make_ticket(make_event):
    """Factory for valid ticket tiers; keyword arguments override the props."""

    def _make(**overrides) -> Ticket:
        props = {
            "name": "GA",
            "description": "General admission",
            "price": Money.create(10, "EUR"),
            "quantity": 1,
            "type": TicketType.GENERAL,
            "event": make_event(),
        }
        props.update(overrides)
        return Ticket.create(TicketCreateProps(**props))

    return _make


@pytest.fixture
def event_store() -> InMemoryEventStore:
    return InMemoryEventStore()


@pytest.fixture
def ticket_store() -> InMemoryTicketStore:
    return InMemoryTicketStore()


@pytest.fixture
def preference_store() -> InMemoryNotificationPreferenceStore:
    return InMemoryNotificationPreferenceStore()
