"""Unit tests for the service layer.

These test error handling, domain error mapping and the locking contract,
against the in-memory stores.
Run with: pytest tests/test_services.py -v
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
from decimal import Decimal

import pytest

from core.domain.errors import ErrorCode
from core.domain.pagination import PageRequest
from core.domain.value_objects import Money
from events.domain import (
    EventAttendanceError,
    EventCreateProps,
    EventNotFoundError,
    EventStatus,
    EventUpdateProps,
    InvalidEventIdError,
)
from events.services.event_service import EventService
from events.stores.interfaces import EventFilters
from notifications.domain import NotificationChannel, NotificationPreferenceError, NotificationType
from notifications.services.notification_preference_service import NotificationPreferenceService
from tickets.domain import (
    InvalidTicketIdError,
    TicketCreateError,
    TicketNotFoundError,
    TicketStatus,
    TicketUpdateError,
    TicketUpdateProps,
)
from tickets.services.ticket_service import TicketService
from tickets.stores.interfaces import TicketFilters

MISSING_ID = "00000000-0000-4000-8000-000000000000"


@pytest.fixture
def event_service(event_store) -> EventService:
    return EventService(event_store)


@pytest.fixture
def ticket_service(ticket_store, event_store) -> TicketService:
    return TicketService(ticket_store, event_store)


@pytest.fixture
def conference(event_service, start, location):
    return event_service.create_event(
        EventCreateProps(
            title="Conf",
            description="Yearly conference",
            start_date=start,
            end_date=start + timedelta(days=1),
            location=location,
            organizer_id="u1",
            capacity=2,
        )
    )


class TestEventService:
    """Tests for EventService."""

    def test_get_event_invalid_id_raises_error(self, event_service):
        """get_event raises InvalidEventIdError for malformed UUID."""
        with pytest.raises(InvalidEventIdError) as exc_info:
            event_service.get_event("not-a-uuid")
        assert exc_info.value.code is ErrorCode.INVALID_ID

    def test_get_event_not_found_raises_error(self, event_service):
        """get_event raises EventNotFoundError when store returns None."""
        with pytest.raises(EventNotFoundError) as exc_info:
            event_service.get_event(MISSING_ID)
        assert exc_info.value.event_id == MISSING_ID

    def test_create_and_get(self, event_service, conference):
        assert event_service.get_event(str(conference.id)) == conference
        assert event_service.list_events() == [conference]

    def test_register_attendee_persists(self, event_service, conference):
        event_service.register_attendee(str(conference.id), "a")
        assert event_service.get_event(str(conference.id)).attendees == ("a",)
        assert event_service.events_for_attendee("a") == [conference]
        assert event_service.events_for_attendee("a", upcoming_only=True) == [conference]

    def test_register_over_capacity_is_rejected(self, event_service, conference, caplog):
        event_id = str(conference.id)
        event_service.register_attendee(event_id, "a")
        event_service.register_attendee(event_id, "b")
        with caplog.at_level(logging.WARNING, logger="events.services.event_service"):
            with pytest.raises(EventAttendanceError):
                event_service.register_attendee(event_id, "c")
        assert "register_attendee rejected" in caplog.text
        assert event_service.get_event(event_id).attendees == ("a", "b")

    def test_unregister_attendee(self, event_service, conference):
        event_id = str(conference.id)
        event_service.register_attendee(event_id, "a")
        assert event_service.unregister_attendee(event_id, "a").attendees == ()

    def test_concurrent_registrations_respect_capacity(self, event_service, conference):
        event_id = str(conference.id)
        barrier = threading.Barrier(8)

        def register(user_id: str) -> bool:
            barrier.wait()
            try:
                event_service.register_attendee(event_id, user_id)
            except EventAttendanceError:
                return False
            return True

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(register, [f"user-{i}" for i in range(8)]))

        assert results.count(True) == 2
        assert event_service.get_event(event_id).attendee_count == 2

    def test_update_missing_event_raises_not_found(self, event_service):
        with pytest.raises(EventNotFoundError):
            event_service.update_event(MISSING_ID, EventUpdateProps(title="x"))

    def test_status_operations(self, event_service, conference):
        event_id = str(conference.id)
        assert event_service.publish_event(event_id).status is EventStatus.PUBLISHED
        assert event_service.change_status(event_id, "SUSPENDED").status is EventStatus.SUSPENDED
        assert event_service.cancel_event(event_id).status is EventStatus.CANCELLED

    def test_search_and_organizer_queries(self, event_service, conference):
        assert event_service.search_events("yearly") == [conference]
        assert event_service.events_for_organizer("u1") == [conference]
        assert event_service.search_events("  ") == []

    def test_find_events_filters_and_pages(self, event_service, conference, start, location):
        """Filtered listings report the full match count alongside one page of items."""
        for number in range(3):
            event_service.create_event(
                EventCreateProps(
                    title=f"Meetup {number}",
                    description="Monthly meetup",
                    start_date=start + timedelta(days=number + 1),
                    end_date=start + timedelta(days=number + 2),
                    location=location,
                    organizer_id="u2",
                    tags=["python"],
                )
            )

        page = event_service.find_events(
            EventFilters(organizer_id="u2", tags=("Python",)),
            PageRequest(page=1, limit=2, order_by="start_date"),
        )
        assert page.total == 3
        assert [event.title for event in page.items] == ["Meetup 0", "Meetup 1"]
        assert page.has_next

        last = event_service.find_events(
            EventFilters(organizer_id="u2"), PageRequest(page=2, limit=2, order_by="start_date")
        )
        assert [event.title for event in last.items] == ["Meetup 2"]
        assert not last.has_next

    def test_find_events_by_query_and_capacity(self, event_service, conference):
        event_id = str(conference.id)
        assert event_service.find_events(EventFilters(query="YEARLY")).items == [conference]
        assert event_service.find_events(EventFilters(city="madrid")).total == 1
        assert event_service.find_events(EventFilters(virtual_only=True)).total == 0

        event_service.register_attendee(event_id, "a")
        event_service.register_attendee(event_id, "b")
        assert event_service.find_events(EventFilters(available_capacity=True)).total == 0

    def test_find_events_defaults_to_everything(self, event_service, conference):
        page = event_service.find_events()
        assert page.items == [conference]
        assert page.total == 1
        assert page.total_pages == 1

    def test_find_events_rejects_unknown_order_field(self, event_service, conference):
        with pytest.raises(ValueError, match="Cannot order by"):
            event_service.find_events(page=PageRequest(order_by="capacity"))


class TestTicketService:
    """Tests for TicketService."""

    def test_create_ticket_uses_default_currency(self, ticket_service, conference, settings):
        settings.EVENTHUB = {"DEFAULT_CURRENCY": "USD"}
        ticket = ticket_service.create_ticket(str(conference.id), "GA", "General", "25", 10)
        assert ticket.price == Money.create(25, "USD")
        assert ticket.event_id == conference.id
        assert ticket_service.tickets_for_event(str(conference.id)) == [ticket]

    def test_create_ticket_for_missing_event(self, ticket_service):
        with pytest.raises(EventNotFoundError):
            ticket_service.create_ticket(MISSING_ID, "GA", "General", Money.create(10), 1)

    def test_create_ticket_for_cancelled_event(self, ticket_service, event_service, conference):
        event_service.cancel_event(str(conference.id))
        with pytest.raises(TicketCreateError):
            ticket_service.create_ticket(str(conference.id), "GA", "General", Money.create(10), 1)

    def test_invalid_price_is_reported_as_create_error(self, ticket_service, conference):
        with pytest.raises(TicketCreateError):
            ticket_service.create_ticket(str(conference.id), "GA", "General", "ten", 1)

    @pytest.mark.parametrize("price", ["1e30", "Infinity", 10**27])
    def test_out_of_range_price_is_reported_as_create_error(self, ticket_service, conference, price):
        """Prices the decimal context cannot hold never escape as decimal errors."""
        with pytest.raises(TicketCreateError):
            ticket_service.create_ticket(str(conference.id), "GA", "General", price, 5)
        assert ticket_service.tickets_for_event(str(conference.id)) == []

    def test_get_ticket_errors(self, ticket_service):
        with pytest.raises(InvalidTicketIdError):
            ticket_service.get_ticket("nope")
        with pytest.raises(TicketNotFoundError):
            ticket_service.get_ticket(MISSING_ID)

    def test_purchase_and_cancel(self, ticket_service, conference):
        ticket = ticket_service.create_ticket(str(conference.id), "GA", "General", Money.create(10), 1)
        sold = ticket_service.purchase_ticket(str(ticket.id), "userX")
        assert sold.status is TicketStatus.SOLD
        assert ticket_service.tickets_for_user("userX") == [sold]
        assert ticket_service.tickets_for_event(str(conference.id), available_only=True) == []
        restored = ticket_service.cancel_purchase(str(ticket.id))
        assert restored.available_quantity == 1

    def test_concurrent_purchases_of_last_unit(self, ticket_service, conference):
        """Only one of many simultaneous buyers gets a one-unit tier."""
        ticket = ticket_service.create_ticket(str(conference.id), "GA", "General", Money.create(10), 1)
        ticket_id = str(ticket.id)
        barrier = threading.Barrier(10)

        def buy(user_id: str) -> bool:
            barrier.wait()
            try:
                ticket_service.purchase_ticket(ticket_id, user_id)
            except TicketUpdateError:
                return False
            return True

        with ThreadPoolExecutor(max_workers=10) as pool:
            results = list(pool.map(buy, [f"buyer-{i}" for i in range(10)]))

        assert results.count(True) == 1
        assert ticket_service.get_ticket(ticket_id).available_quantity == 0

    def test_deactivated_ticket_rejects_purchase(self, ticket_service, conference):
        ticket = ticket_service.create_ticket(str(conference.id), "GA", "General", Money.create(10), 5)
        ticket_service.deactivate_ticket(str(ticket.id))
        with pytest.raises(TicketUpdateError):
            ticket_service.purchase_ticket(str(ticket.id), "a")
        assert ticket_service.activate_ticket(str(ticket.id)).is_active

    def test_update_ticket(self, ticket_service, conference):
        ticket = ticket_service.create_ticket(str(conference.id), "GA", "General", Money.create(10), 5)
        updated = ticket_service.update_ticket(str(ticket.id), TicketUpdateProps(quantity=8))
        assert updated.available_quantity == 8

    def test_mutating_missing_ticket_raises_not_found(self, ticket_service):
        with pytest.raises(TicketNotFoundError):
            ticket_service.purchase_ticket(MISSING_ID, "a")

    def test_available_only_skips_tiers_left_sold(self, ticket_service, conference):
        """A tier with units left but SOLD status is not offered as purchasable."""
        event_id = str(conference.id)
        sold = ticket_service.create_ticket(event_id, "GA", "General", Money.create(10), 5)
        open_tier = ticket_service.create_ticket(event_id, "VIP", "Front row", Money.create(50), 5)
        ticket_service.purchase_ticket(str(sold.id), "a")

        assert ticket_service.get_ticket(str(sold.id)).available_quantity == 4
        assert ticket_service.tickets_for_event(event_id, available_only=True) == [open_tier]
        assert len(ticket_service.tickets_for_event(event_id)) == 2

    def test_find_tickets_filters_and_pages(self, ticket_service, conference):
        event_id = str(conference.id)
        for name, price in [("Early", 5), ("Standard", 20), ("Late", 35), ("VIP", 80)]:
            ticket_service.create_ticket(event_id, name, f"{name} entry", Money.create(price), 10)

        page = ticket_service.find_tickets(
            TicketFilters(event_id=conference.id, min_price=Decimal("20"), max_price=Decimal("80")),
            PageRequest(page=1, limit=2, order_by="price", descending=True),
        )
        assert page.total == 3
        assert [ticket.name for ticket in page.items] == ["VIP", "Late"]
        assert page.total_pages == 2

        by_name = ticket_service.find_tickets(TicketFilters(query="entry"), PageRequest(order_by="name"))
        assert [ticket.name for ticket in by_name.items] == ["Early", "Late", "Standard", "VIP"]

    def test_find_tickets_by_buyer_and_activity(self, ticket_service, conference):
        event_id = str(conference.id)
        bought = ticket_service.create_ticket(event_id, "GA", "General", Money.create(10), 5)
        hidden = ticket_service.create_ticket(event_id, "Staff", "Crew", Money.create(1), 5)
        ticket_service.purchase_ticket(str(bought.id), "userX")
        ticket_service.deactivate_ticket(str(hidden.id))

        assert ticket_service.find_tickets(TicketFilters(user_id="userX")).items == [bought]
        assert ticket_service.find_tickets(TicketFilters(status=TicketStatus.SOLD)).total == 1
        assert ticket_service.find_tickets(TicketFilters(is_active=False)).items == [hidden]

    def test_find_tickets_rejects_unknown_order_field(self, ticket_service):
        with pytest.raises(ValueError):
            ticket_service.find_tickets(page=PageRequest(order_by="quantity"))

    @pytest.mark.parametrize("page, limit", [(0, 20), (1, 0), (1, 101), (True, 20)])
    def test_invalid_page_request_is_rejected(self, page, limit):
        with pytest.raises(ValueError):
            PageRequest(page=page, limit=limit)


class TestNotificationPreferenceService:
    """Tests for NotificationPreferenceService."""

    def test_defaults_are_stored_on_first_access(self, preference_store):
        service = NotificationPreferenceService(preference_store)
        assert preference_store.get_for_user("u1") is None
        created = service.get_preferences("u1")
        assert preference_store.get_for_user("u1") is created
        assert service.get_preferences("u1") is created

    def test_channels_for_reflects_updates(self, preference_store):
        service = NotificationPreferenceService(preference_store)
        service.update_channel("u1", "PUSH", True)
        service.update_type("u1", NotificationType.EVENT_REMINDER, True, ["PUSH"])
        assert service.channels_for("u1", "event_reminder") == [NotificationChannel.PUSH]
        assert service.channels_for("u1", NotificationType.INFO) == [
            NotificationChannel.EMAIL,
            NotificationChannel.PUSH,
            NotificationChannel.IN_APP,
        ]

    def test_unknown_type_is_rejected(self, preference_store):
        service = NotificationPreferenceService(preference_store)
        with pytest.raises(NotificationPreferenceError):
            service.channels_for("u1", "carrier_pigeon")
