"""Django ORM implementation of the EventStore.

``mutate`` takes a row lock with ``select_for_update`` inside a transaction,
so concurrent registrations against the same event are serialized and each
one re-checks capacity against committed state.
"""

import logging
from collections.abc import Iterable
from datetime import datetime, timedelta

from django.db import transaction
from django.db.models import Count, F, Q, QuerySet

from core.domain.clock import ensure_aware, utc_now
from core.domain.pagination import Page, PageRequest, check_order_field
from events import models as orm
from events.domain import Event, EventId, EventNotFoundError, EventStatus, EventTags
from events.stores.interfaces import EVENT_ORDER_FIELDS, EventFilters, EventMutation, EventStore

logger = logging.getLogger(__name__)


class DjangoEventStore(EventStore):
    """PostgreSQL-backed event store using Django ORM."""

    def _queryset(self) -> QuerySet:
        return orm.Event.objects.prefetch_related("attendee_links", "tag_links")

    def _fetch(self, queryset: QuerySet) -> list[Event]:
        return [_to_domain(record) for record in queryset]

    def get(self, event_id: EventId) -> Event | None:
        record = self._queryset().filter(pk=event_id.value).first()
        return _to_domain(record) if record else None

    def exists(self, event_id: EventId) -> bool:
        return orm.Event.objects.filter(pk=event_id.value).exists()

    def save(self, event: Event) -> Event:
        with transaction.atomic():
            _write(event)
        return event

    def update(self, event: Event) -> Event:
        with transaction.atomic():
            if not orm.Event.objects.select_for_update().filter(pk=event.id.value).exists():
                raise EventNotFoundError(str(event.id))
            _write(event)
        return event

    def delete(self, event_id: EventId) -> bool:
        deleted, _ = orm.Event.objects.filter(pk=event_id.value).delete()
        return deleted > 0

    def mutate(self, event_id: EventId, mutation: EventMutation) -> Event | None:
        with transaction.atomic():
            record = orm.Event.objects.select_for_update().filter(pk=event_id.value).first()
            if record is None:
                return None
            updated = mutation(_to_domain(record))
            _write(updated)
        logger.debug("Event mutated under row lock", extra={"event_id": str(event_id)})
        return updated

    def list_events(self) -> list[Event]:
        return self._fetch(self._queryset().order_by("-created_at"))

    def find_by_organizer(self, organizer_id: str) -> list[Event]:
        return self._fetch(self._queryset().filter(organizer_id=organizer_id))

    def find_by_status(self, status: EventStatus) -> list[Event]:
        return self._fetch(self._queryset().filter(status=status.value))

    def find_by_tags(self, tags: Iterable[str]) -> list[Event]:
        queryset = self._queryset()
        for tag in EventTags.of(tags):
            queryset = queryset.filter(tag_links__name=tag)
        return self._fetch(queryset.distinct())

    def find_by_date_range(self, date: datetime, days_before: int, days_after: int) -> list[Event]:
        date = ensure_aware(date)
        window = (date - timedelta(days=days_before), date + timedelta(days=days_after))
        return self._fetch(self._queryset().filter(start_date__range=window))

    def find_by_city(self, city: str) -> list[Event]:
        return self._fetch(self._queryset().filter(city__iexact=city.strip()))

    def find_by_attendee(self, user_id: str) -> list[Event]:
        return self._fetch(self._queryset().filter(attendee_links__user_id=user_id).distinct())

    def find_upcoming_by_attendee(self, user_id: str) -> list[Event]:
        queryset = (
            self._queryset()
            .filter(attendee_links__user_id=user_id, start_date__gt=utc_now())
            .distinct()
            .order_by("start_date")
        )
        return self._fetch(queryset)

    def search(self, query: str) -> list[Event]:
        needle = query.strip()
        if not needle:
            return []
        matches = (
            Q(title__icontains=needle)
            | Q(description__icontains=needle)
            | Q(tag_links__name__icontains=needle)
        )
        return self._fetch(self._queryset().filter(matches).distinct())

    def find_with_filters(self, filters: EventFilters, page: PageRequest) -> Page[Event]:
        check_order_field(page, EVENT_ORDER_FIELDS)
        matching = _filtered(filters)
        if page.order_by is None:
            ordering = "-created_at"
        else:
            ordering = f"-{page.order_by}" if page.descending else page.order_by
        records = (
            self._queryset()
            .filter(pk__in=matching.values("pk"))
            .order_by(ordering)[page.offset : page.offset + page.limit]
        )
        return Page(items=self._fetch(records), total=matching.count(), page=page.page, limit=page.limit)


def _filtered(filters: EventFilters) -> QuerySet:
    queryset = orm.Event.objects.all()
    if filters.organizer_id is not None:
        queryset = queryset.filter(organizer_id=filters.organizer_id)
    if filters.status is not None:
        queryset = queryset.filter(status=filters.status.value)
    if filters.start_date_from is not None:
        queryset = queryset.filter(start_date__gte=ensure_aware(filters.start_date_from))
    if filters.start_date_to is not None:
        queryset = queryset.filter(start_date__lte=ensure_aware(filters.start_date_to))
    for tag in EventTags.of(filters.tags):
        queryset = queryset.filter(tag_links__name=tag)
    if filters.city is not None:
        queryset = queryset.filter(city__iexact=filters.city.strip())
    if filters.country is not None:
        queryset = queryset.filter(country__iexact=filters.country.strip())
    if filters.virtual_only:
        queryset = queryset.filter(virtual_event=True)
    if filters.available_capacity:
        queryset = queryset.annotate(attendee_total=Count("attendee_links", distinct=True)).filter(
            Q(capacity__isnull=True) | Q(capacity__gt=F("attendee_total"))
        )
    needle = (filters.query or "").strip()
    if needle:
        queryset = queryset.filter(
            Q(title__icontains=needle)
            | Q(description__icontains=needle)
            | Q(address__icontains=needle)
            | Q(city__icontains=needle)
        )
    return queryset.distinct()


def _write(event: Event) -> None:
    data = event.to_dict()
    location = data["location"]
    orm.Event.objects.update_or_create(
        id=event.id.value,
        defaults={
            "title": data["title"],
            "description": data["description"],
            "start_date": data["start_date"],
            "end_date": data["end_date"],
            "organizer_id": data["organizer_id"],
            "capacity": data["capacity"],
            "status": data["status"],
            "is_active": data["is_active"],
            "address": location["address"],
            "city": location["city"],
            "state": location["state"],
            "country": location["country"],
            "postal_code": location["postal_code"],
            "virtual_event": location["virtual_event"],
            "virtual_url": location["virtual_url"],
            "latitude": location["latitude"],
            "longitude": location["longitude"],
            "created_at": data["created_at"],
            "updated_at": data["updated_at"],
        },
    )
    orm.EventAttendee.objects.filter(event_id=event.id.value).delete()
    orm.EventAttendee.objects.bulk_create(
        orm.EventAttendee(event_id=event.id.value, user_id=user_id, position=position)
        for position, user_id in enumerate(data["attendees"])
    )
    orm.EventTag.objects.filter(event_id=event.id.value).delete()
    orm.EventTag.objects.bulk_create(
        orm.EventTag(event_id=event.id.value, name=tag) for tag in data["tags"]
    )


def _to_domain(record: orm.Event) -> Event:
    return Event.reconstitute(
        {
            "id": record.id,
            "title": record.title,
            "description": record.description,
            "start_date": record.start_date,
            "end_date": record.end_date,
            "location": {
                "address": record.address,
                "city": record.city,
                "state": record.state,
                "country": record.country,
                "postal_code": record.postal_code,
                "virtual_event": record.virtual_event,
                "virtual_url": record.virtual_url,
                "latitude": record.latitude,
                "longitude": record.longitude,
            },
            "organizer_id": record.organizer_id,
            "capacity": record.capacity,
            "attendees": [link.user_id for link in record.attendee_links.all()],
            "status": record.status,
            "tags": [link.name for link in record.tag_links.all()],
            "is_active": record.is_active,
            "created_at": record.created_at,
            "updated_at": record.updated_at,
        }
    )
