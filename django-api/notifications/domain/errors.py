"""Domain errors for the notifications module."""

from core.domain.errors import DomainError, ErrorCode


class NotificationPreferenceError(DomainError):
    """Raised when notification preferences are built or changed with invalid data."""

    def __init__(
        self, message: str, code: ErrorCode = ErrorCode.NOTIFICATION_PREFERENCE_INVALID
    ) -> None:
        super().__init__(code=code, message=message)
