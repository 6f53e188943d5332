"""Domain errors for the tickets module."""

from core.domain.errors import DomainError, ErrorCode, InvalidIdError


class TicketCreateError(DomainError):
    """Raised when a ticket tier cannot be created from the given data."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.TICKET_CREATE_INVALID) -> None:
        super().__init__(code=code, message=message)


class TicketUpdateError(DomainError):
    """Raised when an update, purchase or cancellation is not allowed."""

    def __init__(self, message: str, code: ErrorCode = ErrorCode.TICKET_UPDATE_INVALID) -> None:
        super().__init__(code=code, message=message)


class TicketNotFoundError(DomainError):
    """Raised when a ticket is not found."""

    def __init__(self, ticket_id: str) -> None:
        super().__init__(
            code=ErrorCode.TICKET_NOT_FOUND,
            message="Ticket not found",
        )
        self.ticket_id = ticket_id


class InvalidTicketIdError(InvalidIdError):
    """Raised when a ticket ID is invalid."""

    def __init__(self) -> None:
        super().__init__("ticket")
