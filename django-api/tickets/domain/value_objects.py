"""Ticket domain primitives."""

from dataclasses import dataclass
from typing import Self
from uuid import UUID, uuid4

from core.domain.value_objects import ParseableEnum


@dataclass(frozen=True)
class TicketId:
    """Unique identifier for a Ticket."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    @classmethod
    def generate(cls) -> Self:
        return cls(value=uuid4())

    def __str__(self) -> str:
        return str(self.value)


class TicketStatus(ParseableEnum):
    """Inventory status of a ticket tier.

    Only AVAILABLE and SOLD are driven by Ticket methods. The rest are set by
    external processes (door scanning, expiry sweeps, reservations).
    """

    AVAILABLE = "AVAILABLE"
    RESERVED = "RESERVED"
    SOLD = "SOLD"
    USED = "USED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"

    @property
    def is_available(self) -> bool:
        return self is TicketStatus.AVAILABLE

    @property
    def is_reserved(self) -> bool:
        return self is TicketStatus.RESERVED

    @property
    def is_sold(self) -> bool:
        return self is TicketStatus.SOLD

    @property
    def is_used(self) -> bool:
        return self is TicketStatus.USED

    @property
    def is_expired(self) -> bool:
        return self is TicketStatus.EXPIRED

    @property
    def is_cancelled(self) -> bool:
        return self is TicketStatus.CANCELLED


class TicketType(ParseableEnum):
    """Commercial category of a ticket tier."""

    GENERAL = "GENERAL"
    VIP = "VIP"
    EARLY_BIRD = "EARLY_BIRD"
    STUDENT = "STUDENT"
    SENIOR = "SENIOR"
    GROUP = "GROUP"
    SPECIAL = "SPECIAL"

    @property
    def is_general(self) -> bool:
        return self is TicketType.GENERAL

    @property
    def is_vip(self) -> bool:
        return self is TicketType.VIP

    @property
    def is_early_bird(self) -> bool:
        return self is TicketType.EARLY_BIRD

    @property
    def is_discounted(self) -> bool:
        return self in (TicketType.EARLY_BIRD, TicketType.STUDENT, TicketType.SENIOR, TicketType.GROUP)
