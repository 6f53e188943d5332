"""Store interfaces for ticket tiers."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal

from core.domain.pagination import Page, PageRequest
from events.domain import EventId
from tickets.domain import Ticket, TicketId, TicketStatus, TicketType

TicketMutation = Callable[[Ticket], Ticket]

TICKET_ORDER_FIELDS = frozenset({"created_at", "name", "price"})


@dataclass(frozen=True)
class TicketFilters:
    """Criteria for TicketStore.find_with_filters. Unset criteria match everything.

    Price bounds are inclusive and compare amounts only, whatever the currency.
    """

    event_id: EventId | None = None
    user_id: str | None = None
    type: TicketType | None = None
    status: TicketStatus | None = None
    min_price: Decimal | None = None
    max_price: Decimal | None = None
    is_active: bool | None = None
    query: str | None = None


class TicketStore(ABC):
    """Interface for ticket persistence operations."""

    @abstractmethod
    def get(self, ticket_id: TicketId) -> Ticket | None:
        """Return a ticket by ID, or None if not found."""
        ...

    @abstractmethod
    def save(self, ticket: Ticket) -> Ticket:
        """Insert or replace the full state of a ticket."""
        ...

    @abstractmethod
    def update(self, ticket: Ticket) -> Ticket:
        """Replace the full state of an existing ticket.

        Raises:
            TicketNotFoundError: If the ticket has never been saved.
        """
        ...

    @abstractmethod
    def delete(self, ticket_id: TicketId) -> bool:
        """Delete a ticket. Return False if it did not exist."""
        ...

    @abstractmethod
    def mutate(self, ticket_id: TicketId, mutation: TicketMutation) -> Ticket | None:
        """Load, apply ``mutation`` and persist, holding the ticket's lock throughout.

        ``purchase`` and ``cancel_purchase`` must run through here: at most
        one purchase may observe a given unit of ``available_quantity``.
        Errors raised by ``mutation`` propagate and nothing is written.
        Returns None if the ticket does not exist.
        """
        ...

    @abstractmethod
    def find_by_event(self, event_id: EventId) -> list[Ticket]:
        ...

    @abstractmethod
    def find_by_user(self, user_id: str) -> list[Ticket]:
        """Return tickets whose current buyer is ``user_id``."""
        ...

    @abstractmethod
    def find_by_type(self, ticket_type: TicketType) -> list[Ticket]:
        ...

    @abstractmethod
    def find_by_status(self, status: TicketStatus) -> list[Ticket]:
        ...

    @abstractmethod
    def find_available(self) -> list[Ticket]:
        """Return active AVAILABLE tickets with units left."""
        ...

    @abstractmethod
    def find_sold(self) -> list[Ticket]:
        ...

    @abstractmethod
    def find_active(self) -> list[Ticket]:
        ...

    @abstractmethod
    def find_inactive(self) -> list[Ticket]:
        ...

    @abstractmethod
    def search(self, query: str) -> list[Ticket]:
        """Case-insensitive match on name or description."""
        ...

    @abstractmethod
    def find_with_filters(self, filters: TicketFilters, page: PageRequest) -> Page[Ticket]:
        """Return one page of matching tickets and the total number of matches.

        Default order is created_at ascending.

        Raises:
            ValueError: If ``page.order_by`` is not in TICKET_ORDER_FIELDS.
        """
        ...
