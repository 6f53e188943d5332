from core.domain.errors import DomainError, ErrorCode, InvalidIdError
from core.domain.sentinels import UNSET, Unsettable, is_set
from core.domain.value_objects import DEFAULT_CURRENCY, Money, ParseableEnum

__all__ = [
    "DomainError",
    "ErrorCode",
    "InvalidIdError",
    "UNSET",
    "Unsettable",
    "is_set",
    "DEFAULT_CURRENCY",
    "Money",
    "ParseableEnum",
]
