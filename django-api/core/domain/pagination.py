"""Page requests and results for filtered listings."""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")

MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class PageRequest:
    """One page of a listing. Pages are numbered from 1.

    ``order_by`` names a sortable field of the listed aggregate; ``None``
    leaves the store's default order.
    """

    page: int = 1
    limit: int = 20
    order_by: str | None = None
    descending: bool = False

    def __post_init__(self) -> None:
        if isinstance(self.page, bool) or not isinstance(self.page, int) or self.page < 1:
            raise ValueError("Page must be a whole number of at least 1")
        if isinstance(self.limit, bool) or not isinstance(self.limit, int) or not 1 <= self.limit <= MAX_PAGE_SIZE:
            raise ValueError(f"Limit must be a whole number between 1 and {MAX_PAGE_SIZE}")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class Page(Generic[T]):
    """A slice of matching items plus the total number of matches."""

    items: list[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return -(-self.total // self.limit)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def check_order_field(page: PageRequest, fields: frozenset[str]) -> None:
    """Raises ValueError if ``page.order_by`` is not one of ``fields``."""
    if page.order_by is not None and page.order_by not in fields:
        valid = ", ".join(sorted(fields))
        raise ValueError(f"Cannot order by {page.order_by!r}. Valid fields: {valid}")
