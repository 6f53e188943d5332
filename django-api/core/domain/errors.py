"""Domain error base shared by every bounded context."""

from dataclasses import dataclass
from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    EVENT_CREATE_INVALID = "EVENT_CREATE_INVALID"
    EVENT_UPDATE_INVALID = "EVENT_UPDATE_INVALID"
    EVENT_ATTENDANCE_REJECTED = "EVENT_ATTENDANCE_REJECTED"
    TICKET_NOT_FOUND = "TICKET_NOT_FOUND"
    TICKET_CREATE_INVALID = "TICKET_CREATE_INVALID"
    TICKET_UPDATE_INVALID = "TICKET_UPDATE_INVALID"
    NOTIFICATION_PREFERENCE_INVALID = "NOTIFICATION_PREFERENCE_INVALID"
    INVALID_ID = "INVALID_ID"


@dataclass(frozen=True)
class DomainError(Exception):
    """Base domain error with code and user-safe message."""

    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code.value}: {self.message}"


class InvalidIdError(DomainError):
    """Raised when an identifier is not a valid UUID."""

    def __init__(self, kind: str = "resource") -> None:
        super().__init__(
            code=ErrorCode.INVALID_ID,
            message=f"Invalid {kind} ID format",
        )
