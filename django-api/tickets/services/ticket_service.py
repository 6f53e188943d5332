"""Ticket service - inventory and purchase use cases.

Purchases and cancellations go through ``TicketStore.mutate``, which holds
the ticket's lock while ``Ticket.purchase`` re-checks availability, so at
most one purchase succeeds per unit.

Event capacity (attendee roster) and ticket inventory are separate
aggregates and are not kept transactionally consistent here: selling more
units than the event's capacity is not prevented. Callers that need that
guarantee must coordinate both stores themselves.
"""

import logging
from collections.abc import Callable
from decimal import Decimal

from django.conf import settings

from core.domain.errors import DomainError
from core.domain.pagination import Page, PageRequest
from core.domain.value_objects import Money
from events.domain import EventNotFoundError
from events.services.event_service import parse_event_id
from events.stores.interfaces import EventStore
from tickets.domain import (
    InvalidTicketIdError,
    Ticket,
    TicketCreateError,
    TicketCreateProps,
    TicketId,
    TicketNotFoundError,
    TicketType,
    TicketUpdateProps,
)
from tickets.stores.interfaces import TicketFilters, TicketStore

logger = logging.getLogger(__name__)


class TicketService:
    """Service for ticket tier operations."""

    def __init__(self, tickets: TicketStore, events: EventStore) -> None:
        self._tickets = tickets
        self._events = events

    def create_ticket(
        self,
        event_id: str,
        name: str,
        description: str,
        price: Money | Decimal | int | str,
        quantity: int,
        ticket_type: TicketType | str = TicketType.GENERAL,
        currency: str | None = None,
    ) -> Ticket:
        """Open a new ticket tier for an existing, non-cancelled event.

        Plain prices are interpreted in ``currency`` or, when omitted, in
        ``settings.EVENTHUB["DEFAULT_CURRENCY"]``.

        Raises:
            InvalidEventIdError: If the event_id is not a valid UUID.
            EventNotFoundError: If the event does not exist.
            TicketCreateError: If the event is cancelled or the input is invalid.
        """
        event = self._events.get(parse_event_id(event_id))
        if event is None:
            raise EventNotFoundError(event_id)
        if event.status.is_cancelled:
            raise TicketCreateError("Cannot sell tickets for a cancelled event")

        if not isinstance(price, Money):
            try:
                price = Money.create(price, currency or settings.EVENTHUB["DEFAULT_CURRENCY"])
            except ValueError as exc:
                raise TicketCreateError(str(exc)) from exc

        ticket = Ticket.create(
            TicketCreateProps(
                name=name,
                description=description,
                price=price,
                quantity=quantity,
                type=ticket_type,
                event=event,
            )
        )
        self._tickets.save(ticket)
        logger.info(
            "Ticket tier created",
            extra={"ticket_id": str(ticket.id), "event_id": event_id, "quantity": ticket.quantity},
        )
        return ticket

    def get_ticket(self, ticket_id: str) -> Ticket:
        """Return a ticket by ID.

        Raises:
            InvalidTicketIdError: If the ticket_id is not a valid UUID.
            TicketNotFoundError: If the ticket does not exist.
        """
        ticket = self._tickets.get(parse_ticket_id(ticket_id))
        if ticket is None:
            raise TicketNotFoundError(ticket_id)
        return ticket

    def tickets_for_event(self, event_id: str, available_only: bool = False) -> list[Ticket]:
        tickets = self._tickets.find_by_event(parse_event_id(event_id))
        if available_only:
            return [ticket for ticket in tickets if _is_purchasable(ticket)]
        return tickets

    def tickets_for_user(self, user_id: str) -> list[Ticket]:
        return self._tickets.find_by_user(user_id)

    def find_tickets(self, filters: TicketFilters | None = None, page: PageRequest | None = None) -> Page[Ticket]:
        return self._tickets.find_with_filters(filters or TicketFilters(), page or PageRequest())

    def update_ticket(self, ticket_id: str, props: TicketUpdateProps) -> Ticket:
        return self._mutate(ticket_id, lambda ticket: ticket.update(props), "update")

    def purchase_ticket(self, ticket_id: str, user_id: str) -> Ticket:
        """Sell one unit of the tier to ``user_id``.

        Raises:
            TicketUpdateError: If the tier is inactive, sold out or not AVAILABLE.
        """
        return self._mutate(ticket_id, lambda ticket: ticket.purchase(user_id), "purchase", user_id=user_id)

    def cancel_purchase(self, ticket_id: str) -> Ticket:
        return self._mutate(ticket_id, lambda ticket: ticket.cancel_purchase(), "cancel_purchase")

    def activate_ticket(self, ticket_id: str) -> Ticket:
        return self._mutate(ticket_id, lambda ticket: ticket.activate(), "activate")

    def deactivate_ticket(self, ticket_id: str) -> Ticket:
        return self._mutate(ticket_id, lambda ticket: ticket.deactivate(), "deactivate")

    def _mutate(
        self,
        ticket_id: str,
        mutation: Callable[[Ticket], Ticket],
        action: str,
        **log_fields: str,
    ) -> Ticket:
        parsed = parse_ticket_id(ticket_id)
        try:
            ticket = self._tickets.mutate(parsed, mutation)
        except DomainError as exc:
            logger.warning(
                "Ticket %s rejected: %s",
                action,
                exc.message,
                extra={"ticket_id": ticket_id, "error_code": exc.code.value, **log_fields},
            )
            raise
        if ticket is None:
            raise TicketNotFoundError(ticket_id)
        logger.info(
            "Ticket %s applied",
            action,
            extra={
                "ticket_id": ticket_id,
                "available_quantity": ticket.available_quantity,
                **log_fields,
            },
        )
        return ticket


def _is_purchasable(ticket: Ticket) -> bool:
    return ticket.is_active and ticket.is_available() and ticket.available_quantity > 0


def parse_ticket_id(ticket_id: str) -> TicketId:
    try:
        return TicketId.from_string(ticket_id)
    except (TypeError, ValueError, AttributeError):
        raise InvalidTicketIdError() from None
