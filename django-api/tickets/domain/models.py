"""Ticket aggregate.

A Ticket is a priced inventory line (a tier) for one event: ``quantity``
units were offered and ``available_quantity`` of them are still unsold.

``purchased_by``/``purchased_at`` hold a single buyer even though a tier
sells many interchangeable units, so only the most recent buyer is kept on
the aggregate. Per-unit issuance records belong to a separate ledger.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Any

from core.domain.clock import parse_datetime, utc_now
from core.domain.sentinels import UNSET, Unsettable, is_set
from core.domain.value_objects import Money
from events.domain.models import Event
from events.domain.value_objects import EventId
from tickets.domain.errors import TicketCreateError, TicketUpdateError
from tickets.domain.value_objects import TicketId, TicketStatus, TicketType

MAX_NAME_LENGTH = 100

_FACTORY = object()


@dataclass(frozen=True)
class TicketCreateProps:
    """Input for Ticket.create."""

    name: str
    description: str
    price: Money | None
    quantity: int
    type: TicketType | str | None
    event: Event | EventId | str | None
    id: TicketId | str | None = None


@dataclass(frozen=True)
class TicketUpdateProps:
    """Partial update for Ticket.update. Fields left UNSET are not touched."""

    name: Unsettable[str] = UNSET
    description: Unsettable[str] = UNSET
    price: Unsettable[Money] = UNSET
    quantity: Unsettable[int] = UNSET
    type: Unsettable[TicketType | str] = UNSET


@dataclass(frozen=True, eq=False)
class Ticket:
    """Domain representation of a Ticket tier."""

    id: TicketId
    event_id: EventId
    name: str
    description: str
    price: Money
    quantity: int
    available_quantity: int
    type: TicketType
    status: TicketStatus
    is_active: bool
    created_at: datetime
    updated_at: datetime
    purchased_by: str | None = None
    purchased_at: datetime | None = None
    _token: object = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if self._token is not _FACTORY:
            raise TypeError("Tickets are built with Ticket.create() or Ticket.reconstitute()")

    @classmethod
    def create(cls, props: TicketCreateProps) -> "Ticket":
        """Validate input and open a new tier with every unit available.

        Raises:
            TicketCreateError: If any field is missing or invalid.
        """
        name = _clean_text(props.name, "Ticket name", TicketCreateError, MAX_NAME_LENGTH)
        description = _clean_text(props.description, "Ticket description", TicketCreateError)
        if props.price is None:
            raise TicketCreateError("Ticket price is required")
        _check_price(props.price, TicketCreateError)
        _check_quantity(props.quantity, TicketCreateError)
        if props.type is None:
            raise TicketCreateError("Ticket type is required")
        if props.event is None:
            raise TicketCreateError("Ticket event is required")

        now = utc_now()
        return cls(
            id=_coerce_ticket_id(props.id),
            event_id=_coerce_event_id(props.event),
            name=name,
            description=description,
            price=props.price,
            quantity=props.quantity,
            available_quantity=props.quantity,
            type=_coerce_type(props.type, TicketCreateError),
            status=TicketStatus.AVAILABLE,
            is_active=True,
            created_at=now,
            updated_at=now,
            _token=_FACTORY,
        )

    @classmethod
    def reconstitute(cls, data: Mapping[str, Any]) -> "Ticket":
        """Rebuild a ticket from stored data (the shape of ``to_dict``) without validation."""
        raw_id = data["id"]
        raw_event_id = data["event_id"]
        price = data["price"]
        purchased_at = data.get("purchased_at")
        return cls(
            id=raw_id if isinstance(raw_id, TicketId) else TicketId.from_string(str(raw_id)),
            event_id=raw_event_id if isinstance(raw_event_id, EventId) else EventId.from_string(str(raw_event_id)),
            name=data["name"],
            description=data["description"],
            price=price if isinstance(price, Money) else Money.create(price["amount"], price["currency"]),
            quantity=data["quantity"],
            available_quantity=data["available_quantity"],
            type=TicketType.parse(data["type"]),
            status=TicketStatus.parse(data["status"]),
            is_active=data.get("is_active", True),
            created_at=parse_datetime(data["created_at"]),
            updated_at=parse_datetime(data["updated_at"]),
            purchased_by=data.get("purchased_by"),
            purchased_at=parse_datetime(purchased_at) if purchased_at else None,
            _token=_FACTORY,
        )

    def update(self, props: TicketUpdateProps) -> "Ticket":
        """Apply a partial update, returning the same instance if nothing changed.

        A quantity change moves ``available_quantity`` by the same delta, so
        the sold count is preserved.

        Raises:
            TicketUpdateError: If the ticket is SOLD, a provided field is
                invalid, or the new quantity is below the number of units
                already sold.
        """
        if self.is_purchased():
            raise TicketUpdateError("A purchased ticket cannot be updated")

        changes: dict[str, Any] = {}

        if is_set(props.name):
            name = _clean_text(props.name, "Ticket name", TicketUpdateError, MAX_NAME_LENGTH)
            if name != self.name:
                changes["name"] = name
        if is_set(props.description):
            description = _clean_text(props.description, "Ticket description", TicketUpdateError)
            if description != self.description:
                changes["description"] = description
        if is_set(props.price):
            _check_price(props.price, TicketUpdateError)
            if props.price != self.price:
                changes["price"] = props.price
        if is_set(props.quantity):
            _check_quantity(props.quantity, TicketUpdateError)
            if props.quantity < self.sold_quantity:
                raise TicketUpdateError("Quantity cannot be reduced below the number of tickets already sold")
            if props.quantity != self.quantity:
                changes["quantity"] = props.quantity
                changes["available_quantity"] = self.available_quantity + (props.quantity - self.quantity)
        if is_set(props.type):
            ticket_type = _coerce_type(props.type, TicketUpdateError)
            if ticket_type is not self.type:
                changes["type"] = ticket_type

        if not changes:
            return self
        return replace(self, **changes, updated_at=utc_now())

    def purchase(self, user_id: str) -> "Ticket":
        """Sell one unit to ``user_id``.

        Check-then-act on a shared counter: callers persisting the result
        must hold the ticket's lock (see TicketStore.mutate).

        Raises:
            TicketUpdateError: If there is no buyer, the ticket is inactive,
                sold out, or not AVAILABLE.
        """
        if not user_id:
            raise TicketUpdateError("A user is required to purchase a ticket")
        if not self.is_active:
            raise TicketUpdateError("Cannot purchase an inactive ticket")
        if self.available_quantity <= 0:
            raise TicketUpdateError("No tickets available for purchase")
        if self.status is not TicketStatus.AVAILABLE:
            raise TicketUpdateError("The ticket is not available for purchase")

        now = utc_now()
        return replace(
            self,
            available_quantity=self.available_quantity - 1,
            status=TicketStatus.SOLD,
            purchased_by=user_id,
            purchased_at=now,
            updated_at=now,
        )

    def cancel_purchase(self) -> "Ticket":
        """Return one sold unit to the pool.

        Raises:
            TicketUpdateError: If the ticket is inactive or not SOLD.
        """
        if not self.is_active:
            raise TicketUpdateError("Cannot cancel the purchase of an inactive ticket")
        if self.status is not TicketStatus.SOLD:
            raise TicketUpdateError("The ticket has not been sold, the purchase cannot be cancelled")
        if self.available_quantity >= self.quantity:
            raise TicketUpdateError("No sold units to return to availability")

        return replace(
            self,
            available_quantity=self.available_quantity + 1,
            status=TicketStatus.AVAILABLE,
            purchased_by=None,
            purchased_at=None,
            updated_at=utc_now(),
        )

    def activate(self) -> "Ticket":
        if self.is_active:
            return self
        return replace(self, is_active=True, updated_at=utc_now())

    def deactivate(self) -> "Ticket":
        if not self.is_active:
            return self
        return replace(self, is_active=False, updated_at=utc_now())

    def is_available(self) -> bool:
        return self.status is TicketStatus.AVAILABLE

    def is_purchased(self) -> bool:
        return self.status is TicketStatus.SOLD

    def is_cancelled(self) -> bool:
        return self.status is TicketStatus.CANCELLED

    def is_sold_out(self) -> bool:
        return self.available_quantity == 0

    @property
    def sold_quantity(self) -> int:
        return self.quantity - self.available_quantity

    def total_value(self) -> Money:
        """Revenue of the units sold so far."""
        return self.price.multiply(self.sold_quantity)

    def to_dict(self) -> dict[str, Any]:
        """Plain-data snapshot, the inverse of ``reconstitute``."""
        return {
            "id": str(self.id),
            "event_id": str(self.event_id),
            "name": self.name,
            "description": self.description,
            "price": {"amount": self.price.amount, "currency": self.price.currency},
            "quantity": self.quantity,
            "available_quantity": self.available_quantity,
            "type": self.type.value,
            "status": self.status.value,
            "is_active": self.is_active,
            "purchased_by": self.purchased_by,
            "purchased_at": self.purchased_at,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ticket):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)


def _clean_text(value: Any, label: str, error: type[Exception], max_length: int | None = None) -> str:
    if not isinstance(value, str) or not value.strip():
        raise error(f"{label} is required")
    value = value.strip()
    if max_length is not None and len(value) > max_length:
        raise error(f"{label} cannot be longer than {max_length} characters")
    return value


def _check_price(price: Any, error: type[Exception]) -> None:
    if not isinstance(price, Money):
        raise error("Ticket price must be a Money amount")
    if price.amount <= Decimal("0"):
        raise error("Ticket price must be greater than zero")


def _check_quantity(quantity: Any, error: type[Exception]) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise error("Ticket quantity must be a whole number")
    if quantity <= 0:
        raise error("Ticket quantity must be greater than zero")


def _coerce_type(value: TicketType | str, error: type[Exception]) -> TicketType:
    try:
        return TicketType.parse(value)
    except ValueError as exc:
        raise error(str(exc)) from exc


def _coerce_ticket_id(value: TicketId | str | None) -> TicketId:
    if value is None:
        return TicketId.generate()
    if isinstance(value, TicketId):
        return value
    try:
        return TicketId.from_string(str(value))
    except ValueError as exc:
        raise TicketCreateError("Ticket ID is not valid") from exc


def _coerce_event_id(value: Event | EventId | str) -> EventId:
    if isinstance(value, Event):
        return value.id
    if isinstance(value, EventId):
        return value
    try:
        return EventId.from_string(str(value))
    except ValueError as exc:
        raise TicketCreateError("Ticket event is not valid") from exc
