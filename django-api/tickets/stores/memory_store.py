"""In-process TicketStore for tests and local runs."""

import threading
from collections.abc import Iterable

from core.domain.pagination import Page, PageRequest, check_order_field
from events.domain import EventId
from tickets.domain import Ticket, TicketId, TicketNotFoundError, TicketStatus, TicketType
from tickets.stores.interfaces import TICKET_ORDER_FIELDS, TicketFilters, TicketMutation, TicketStore

_SORT_KEYS = {
    "created_at": lambda ticket: ticket.created_at,
    "name": lambda ticket: ticket.name,
    "price": lambda ticket: ticket.price.amount,
}


class InMemoryTicketStore(TicketStore):
    """Dictionary-backed ticket store; one lock serializes writers."""

    def __init__(self, tickets: Iterable[Ticket] = ()) -> None:
        self._tickets: dict[TicketId, Ticket] = {ticket.id: ticket for ticket in tickets}
        self._lock = threading.RLock()

    def get(self, ticket_id: TicketId) -> Ticket | None:
        return self._tickets.get(ticket_id)

    def save(self, ticket: Ticket) -> Ticket:
        with self._lock:
            self._tickets[ticket.id] = ticket
        return ticket

    def update(self, ticket: Ticket) -> Ticket:
        with self._lock:
            if ticket.id not in self._tickets:
                raise TicketNotFoundError(str(ticket.id))
            self._tickets[ticket.id] = ticket
        return ticket

    def delete(self, ticket_id: TicketId) -> bool:
        with self._lock:
            return self._tickets.pop(ticket_id, None) is not None

    def mutate(self, ticket_id: TicketId, mutation: TicketMutation) -> Ticket | None:
        with self._lock:
            current = self._tickets.get(ticket_id)
            if current is None:
                return None
            updated = mutation(current)
            self._tickets[ticket_id] = updated
            return updated

    def _select(self, predicate) -> list[Ticket]:
        with self._lock:
            tickets = list(self._tickets.values())
        return sorted((ticket for ticket in tickets if predicate(ticket)), key=lambda ticket: ticket.created_at)

    def find_by_event(self, event_id: EventId) -> list[Ticket]:
        return self._select(lambda ticket: ticket.event_id == event_id)

    def find_by_user(self, user_id: str) -> list[Ticket]:
        return self._select(lambda ticket: ticket.purchased_by == user_id)

    def find_by_type(self, ticket_type: TicketType) -> list[Ticket]:
        return self._select(lambda ticket: ticket.type is ticket_type)

    def find_by_status(self, status: TicketStatus) -> list[Ticket]:
        return self._select(lambda ticket: ticket.status is status)

    def find_available(self) -> list[Ticket]:
        return self._select(
            lambda ticket: ticket.is_active and ticket.is_available() and ticket.available_quantity > 0
        )

    def find_sold(self) -> list[Ticket]:
        return self.find_by_status(TicketStatus.SOLD)

    def find_active(self) -> list[Ticket]:
        return self._select(lambda ticket: ticket.is_active)

    def find_inactive(self) -> list[Ticket]:
        return self._select(lambda ticket: not ticket.is_active)

    def search(self, query: str) -> list[Ticket]:
        needle = query.strip().lower()
        if not needle:
            return []
        return self._select(
            lambda ticket: needle in ticket.name.lower() or needle in ticket.description.lower()
        )

    def find_with_filters(self, filters: TicketFilters, page: PageRequest) -> Page[Ticket]:
        check_order_field(page, TICKET_ORDER_FIELDS)
        matches = self._select(lambda ticket: _matches(ticket, filters))
        if page.order_by is not None:
            matches.sort(key=_SORT_KEYS[page.order_by], reverse=page.descending)
        return Page(
            items=matches[page.offset : page.offset + page.limit],
            total=len(matches),
            page=page.page,
            limit=page.limit,
        )


def _matches(ticket: Ticket, filters: TicketFilters) -> bool:
    if filters.event_id is not None and ticket.event_id != filters.event_id:
        return False
    if filters.user_id is not None and ticket.purchased_by != filters.user_id:
        return False
    if filters.type is not None and ticket.type is not filters.type:
        return False
    if filters.status is not None and ticket.status is not filters.status:
        return False
    if filters.min_price is not None and ticket.price.amount < filters.min_price:
        return False
    if filters.max_price is not None and ticket.price.amount > filters.max_price:
        return False
    if filters.is_active is not None and ticket.is_active != filters.is_active:
        return False
    needle = (filters.query or "").strip().lower()
    if needle:
        return needle in ticket.name.lower() or needle in ticket.description.lower()
    return True
