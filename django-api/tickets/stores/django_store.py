"""Django ORM implementation of the TicketStore.

``mutate`` re-reads the row under ``select_for_update`` in the same
transaction as the write, so a purchase always decrements the committed
``available_quantity`` and two buyers cannot both take the last unit.
"""

import logging

from django.db import transaction
from django.db.models import Q, QuerySet

from core.domain.pagination import Page, PageRequest, check_order_field
from events.domain import EventId
from tickets import models as orm
from tickets.domain import Ticket, TicketId, TicketNotFoundError, TicketStatus, TicketType
from tickets.stores.interfaces import TICKET_ORDER_FIELDS, TicketFilters, TicketMutation, TicketStore

_ORDER_COLUMNS = {"created_at": "created_at", "name": "name", "price": "price_amount"}

logger = logging.getLogger(__name__)


class DjangoTicketStore(TicketStore):
    """PostgreSQL-backed ticket store using Django ORM."""

    def _fetch(self, queryset: QuerySet) -> list[Ticket]:
        return [_to_domain(record) for record in queryset]

    def get(self, ticket_id: TicketId) -> Ticket | None:
        record = orm.Ticket.objects.filter(pk=ticket_id.value).first()
        return _to_domain(record) if record else None

    def save(self, ticket: Ticket) -> Ticket:
        _write(ticket)
        return ticket

    def update(self, ticket: Ticket) -> Ticket:
        with transaction.atomic():
            if not orm.Ticket.objects.select_for_update().filter(pk=ticket.id.value).exists():
                raise TicketNotFoundError(str(ticket.id))
            _write(ticket)
        return ticket

    def delete(self, ticket_id: TicketId) -> bool:
        deleted, _ = orm.Ticket.objects.filter(pk=ticket_id.value).delete()
        return deleted > 0

    def mutate(self, ticket_id: TicketId, mutation: TicketMutation) -> Ticket | None:
        with transaction.atomic():
            record = orm.Ticket.objects.select_for_update().filter(pk=ticket_id.value).first()
            if record is None:
                return None
            updated = mutation(_to_domain(record))
            _write(updated)
        logger.debug("Ticket mutated under row lock", extra={"ticket_id": str(ticket_id)})
        return updated

    def find_by_event(self, event_id: EventId) -> list[Ticket]:
        return self._fetch(orm.Ticket.objects.filter(event_id=event_id.value))

    def find_by_user(self, user_id: str) -> list[Ticket]:
        return self._fetch(orm.Ticket.objects.filter(purchased_by=user_id))

    def find_by_type(self, ticket_type: TicketType) -> list[Ticket]:
        return self._fetch(orm.Ticket.objects.filter(type=ticket_type.value))

    def find_by_status(self, status: TicketStatus) -> list[Ticket]:
        return self._fetch(orm.Ticket.objects.filter(status=status.value))

    def find_available(self) -> list[Ticket]:
        return self._fetch(
            orm.Ticket.objects.filter(
                is_active=True,
                status=TicketStatus.AVAILABLE.value,
                available_quantity__gt=0,
            )
        )

    def find_sold(self) -> list[Ticket]:
        return self.find_by_status(TicketStatus.SOLD)

    def find_active(self) -> list[Ticket]:
        return self._fetch(orm.Ticket.objects.filter(is_active=True))

    def find_inactive(self) -> list[Ticket]:
        return self._fetch(orm.Ticket.objects.filter(is_active=False))

    def search(self, query: str) -> list[Ticket]:
        needle = query.strip()
        if not needle:
            return []
        return self._fetch(
            orm.Ticket.objects.filter(Q(name__icontains=needle) | Q(description__icontains=needle))
        )

    def find_with_filters(self, filters: TicketFilters, page: PageRequest) -> Page[Ticket]:
        check_order_field(page, TICKET_ORDER_FIELDS)
        queryset = _filtered(filters)
        column = _ORDER_COLUMNS[page.order_by or "created_at"]
        ordering = f"-{column}" if page.order_by and page.descending else column
        records = queryset.order_by(ordering)[page.offset : page.offset + page.limit]
        return Page(items=self._fetch(records), total=queryset.count(), page=page.page, limit=page.limit)


def _filtered(filters: TicketFilters) -> QuerySet:
    queryset = orm.Ticket.objects.all()
    if filters.event_id is not None:
        queryset = queryset.filter(event_id=filters.event_id.value)
    if filters.user_id is not None:
        queryset = queryset.filter(purchased_by=filters.user_id)
    if filters.type is not None:
        queryset = queryset.filter(type=filters.type.value)
    if filters.status is not None:
        queryset = queryset.filter(status=filters.status.value)
    if filters.min_price is not None:
        queryset = queryset.filter(price_amount__gte=filters.min_price)
    if filters.max_price is not None:
        queryset = queryset.filter(price_amount__lte=filters.max_price)
    if filters.is_active is not None:
        queryset = queryset.filter(is_active=filters.is_active)
    needle = (filters.query or "").strip()
    if needle:
        queryset = queryset.filter(Q(name__icontains=needle) | Q(description__icontains=needle))
    return queryset


def _write(ticket: Ticket) -> None:
    data = ticket.to_dict()
    orm.Ticket.objects.update_or_create(
        id=ticket.id.value,
        defaults={
            "event_id": ticket.event_id.value,
            "name": data["name"],
            "description": data["description"],
            "price_amount": data["price"]["amount"],
            "price_currency": data["price"]["currency"],
            "quantity": data["quantity"],
            "available_quantity": data["available_quantity"],
            "type": data["type"],
            "status": data["status"],
            "is_active": data["is_active"],
            "purchased_by": data["purchased_by"],
            "purchased_at": data["purchased_at"],
            "created_at": data["created_at"],
            "updated_at": data["updated_at"],
        },
    )


def _to_domain(record: orm.Ticket) -> Ticket:
    return Ticket.reconstitute(
        {
            "id": record.id,
            "event_id": record.event_id,
            "name": record.name,
            "description": record.description,
            "price": {"amount": record.price_amount, "currency": record.price_currency},
            "quantity": record.quantity,
            "available_quantity": record.available_quantity,
            "type": record.type,
            "status": record.status,
            "is_active": record.is_active,
            "purchased_by": record.purchased_by,
            "purchased_at": record.purchased_at,
            "created_at": record.created_at,
            "updated_at": record.updated_at,
        }
    )
