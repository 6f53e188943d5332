from tickets.domain.errors import (
    InvalidTicketIdError,
    TicketCreateError,
    TicketNotFoundError,
    TicketUpdateError,
)
from tickets.domain.models import Ticket, TicketCreateProps, TicketUpdateProps
from tickets.domain.value_objects import TicketId, TicketStatus, TicketType

__all__ = [
    "Ticket",
    "TicketCreateProps",
    "TicketUpdateProps",
    "TicketId",
    "TicketStatus",
    "TicketType",
    "InvalidTicketIdError",
    "TicketCreateError",
    "TicketNotFoundError",
    "TicketUpdateError",
]
