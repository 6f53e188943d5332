"""Marker for "field not provided" in partial-update records.

``None`` is a real value for some fields (``capacity=None`` means unlimited),
so absence needs its own marker.
"""

from enum import Enum
from typing import Final, TypeVar

T = TypeVar("T")


class _Unset(Enum):
    UNSET = "UNSET"

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Final = _Unset.UNSET

Unsettable = T | _Unset


def is_set(value: object) -> bool:
    return value is not UNSET
