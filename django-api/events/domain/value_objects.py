"""Domain primitives that enforce validity at creation time."""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Self
from uuid import UUID, uuid4

from django.core.exceptions import ValidationError
from django.core.validators import URLValidator

from core.domain.value_objects import ParseableEnum

_url_validator = URLValidator()


@dataclass(frozen=True)
class EventId:
    """Unique identifier for an Event."""

    value: UUID

    @classmethod
    def from_string(cls, value: str) -> Self:
        return cls(value=UUID(value))

    @classmethod
    def generate(cls) -> Self:
        return cls(value=uuid4())

    def __str__(self) -> str:
        return str(self.value)


class EventStatus(ParseableEnum):
    """Lifecycle status of an event.

    Transition rules live on the Event aggregate, not here.
    """

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"
    SUSPENDED = "SUSPENDED"

    @property
    def is_draft(self) -> bool:
        return self is EventStatus.DRAFT

    @property
    def is_published(self) -> bool:
        return self is EventStatus.PUBLISHED

    @property
    def is_cancelled(self) -> bool:
        return self is EventStatus.CANCELLED

    @property
    def is_completed(self) -> bool:
        return self is EventStatus.COMPLETED

    @property
    def is_suspended(self) -> bool:
        return self is EventStatus.SUSPENDED


_TAG_PATTERN = re.compile(r"[a-zA-Z0-9À-ÿ\s-]+")


@dataclass(frozen=True)
class EventTags:
    """Set of normalized labels attached to an event.

    Tags are trimmed, lower-cased, deduplicated and kept sorted, so two
    instances built from the same labels in any order or casing compare
    equal.
    """

    MAX_TAGS = 10
    MAX_TAG_LENGTH = 30

    tags: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if isinstance(self.tags, str):
            raise ValueError("Tags must be given as a collection, not a single string")
        normalized = set()
        for raw in self.tags:
            tag = str(raw).strip()
            if not tag:
                raise ValueError("Tags cannot be empty")
            if len(tag) > self.MAX_TAG_LENGTH:
                raise ValueError(f"Tags cannot be longer than {self.MAX_TAG_LENGTH} characters")
            if not _TAG_PATTERN.fullmatch(tag):
                raise ValueError(f'Tag "{tag}" contains characters that are not allowed')
            normalized.add(tag.lower())
        if len(normalized) > self.MAX_TAGS:
            raise ValueError(f"An event cannot have more than {self.MAX_TAGS} tags")
        object.__setattr__(self, "tags", tuple(sorted(normalized)))

    @classmethod
    def of(cls, tags: Iterable[str] | None = None) -> Self:
        return cls(tags=tuple(tags or ()))

    @classmethod
    def from_string(cls, value: str | None) -> Self:
        """Build tags from a comma-separated string such as ``"rock, jazz"``."""
        if not value or not value.strip():
            return cls()
        return cls(tags=tuple(part.strip() for part in value.split(",")))

    @classmethod
    def empty(cls) -> Self:
        return cls()

    def has(self, tag: str) -> bool:
        return tag.strip().lower() in self.tags

    def add(self, tags: Iterable[str]) -> "EventTags":
        return EventTags(tags=self.tags + tuple(tags))

    def remove(self, tags: Iterable[str]) -> "EventTags":
        to_remove = {tag.strip().lower() for tag in tags}
        return EventTags(tags=tuple(tag for tag in self.tags if tag not in to_remove))

    def to_list(self) -> list[str]:
        return list(self.tags)

    def __len__(self) -> int:
        return len(self.tags)

    def __iter__(self):
        return iter(self.tags)

    def __str__(self) -> str:
        return ", ".join(self.tags)


@dataclass(frozen=True, eq=False)
class EventLocation:
    """Where an event takes place: a physical address or a virtual URL."""

    address: str
    city: str
    country: str
    state: str | None = None
    postal_code: str | None = None
    virtual_event: bool = False
    virtual_url: str | None = None
    latitude: float | None = None
    longitude: float | None = None

    def __post_init__(self) -> None:
        if self.virtual_event:
            self._validate_virtual()
        else:
            self._validate_physical()
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("Latitude and longitude must be provided together")
        if self.latitude is not None and not -90 <= self.latitude <= 90:
            raise ValueError("Latitude must be between -90 and 90 degrees")
        if self.longitude is not None and not -180 <= self.longitude <= 180:
            raise ValueError("Longitude must be between -180 and 180 degrees")

    def _validate_virtual(self) -> None:
        if not self.virtual_url:
            raise ValueError("Virtual events must have a URL")
        try:
            _url_validator(self.virtual_url)
        except ValidationError:
            raise ValueError("Virtual event URL is not valid") from None

    def _validate_physical(self) -> None:
        for name in ("address", "city", "country"):
            value = getattr(self, name)
            if not value or not value.strip():
                raise ValueError(f"{name.capitalize()} is required for in-person events")

    @classmethod
    def virtual(cls, url: str) -> Self:
        return cls(address="Virtual", city="Online", country="Global", virtual_event=True, virtual_url=url)

    @classmethod
    def with_coordinates(cls, latitude: float, longitude: float, **props: Any) -> Self:
        return cls(latitude=latitude, longitude=longitude, **props)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Self:
        return cls(
            address=data.get("address", ""),
            city=data.get("city", ""),
            country=data.get("country", ""),
            state=data.get("state") or None,
            postal_code=data.get("postal_code") or None,
            virtual_event=bool(data.get("virtual_event", False)),
            virtual_url=data.get("virtual_url") or None,
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "address": self.address,
            "city": self.city,
            "country": self.country,
            "state": self.state,
            "postal_code": self.postal_code,
            "virtual_event": self.virtual_event,
            "virtual_url": self.virtual_url,
            "latitude": self.latitude,
            "longitude": self.longitude,
        }

    @property
    def is_virtual(self) -> bool:
        return self.virtual_event

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    def _identity(self) -> tuple:
        return (self.address, self.city, self.country, self.virtual_event, self.virtual_url)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, EventLocation):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self) -> int:
        return hash(self._identity())

    def __str__(self) -> str:
        if self.virtual_event and self.virtual_url:
            return f"Virtual event: {self.virtual_url}"
        parts = [self.address, self.city]
        if self.state:
            parts.append(self.state)
        parts.append(self.country)
        if self.postal_code:
            parts.append(self.postal_code)
        return ", ".join(parts)
