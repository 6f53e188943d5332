"""Domain errors for the events module."""

from core.domain.errors import DomainError, ErrorCode, InvalidIdError


class EventCreateError(DomainError):
    """Raised when an event cannot be created from the given data."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.EVENT_CREATE_INVALID) -> None:
        super().__init__(code=code, message=message)


class EventUpdateError(DomainError):
    """Raised when an update would break an event invariant."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.EVENT_UPDATE_INVALID) -> None:
        super().__init__(code=code, message=message)


class EventAttendanceError(DomainError):
    """Raised when an attendee cannot be registered or removed."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.EVENT_ATTENDANCE_REJECTED) -> None:
        super().__init__(code=code, message=message)


class EventNotFoundError(DomainError):
    """Raised when an event is not found."""

    def __init__(self, event_id: str) -> None:
        super().__init__(
            code=ErrorCode.EVENT_NOT_FOUND,
            message="Event not found",
        )
        self.event_id = event_id


class InvalidEventIdError(InvalidIdError):
    """Raised when an event ID is invalid."""

    def __init__(self) -> None:
        super().__init__("event")
