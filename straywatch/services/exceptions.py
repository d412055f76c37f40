"""
Custom exceptions for the StrayWatch service layer.

Every failure a user action can hit derives from StrayWatchError, so view
controllers can catch one type and turn it into a notification.
"""

from typing import Any


class StrayWatchError(Exception):
    """Base exception for all StrayWatch errors."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class AuthRequiredError(StrayWatchError):
    """Raised when a write is attempted without an authenticated identity."""

    def __init__(self, message: str = "You must be logged in to create a report") -> None:
        super().__init__(message)


class LocationRequiredError(StrayWatchError):
    """Raised when the report form is submitted without a selected location."""

    def __init__(self, message: str = "Please select a location") -> None:
        super().__init__(message)


class NotFoundError(StrayWatchError):
    """
    Raised when a mutation targets a report that does not exist.

    Attributes:
        report_id: The identifier that matched nothing
    """

    def __init__(self, message: str, report_id: str | None = None) -> None:
        super().__init__(message, {"report_id": report_id} if report_id else None)
        self.report_id = report_id


class TransportError(StrayWatchError):
    """
    Raised for network or backend failures.

    The message is passed through from the backend when it provides one.

    Attributes:
        status_code: HTTP status code, if a response was received
        transient: Whether retrying the call may succeed
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        transient: bool = False,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.status_code = status_code
        self.transient = transient


class BackendNotConfiguredError(TransportError):
    """Raised when a write or auth call is made without backend configuration."""

    def __init__(self) -> None:
        super().__init__(
            "Backend is not configured. Set SUPABASE_URL and SUPABASE_ANON_KEY."
        )


class ValidationError(StrayWatchError):
    """Raised when user input is rejected before reaching the backend."""

    pass


class InvalidCountError(ValidationError):
    """Raised when the count is not an integer of at least 1."""

    def __init__(self, raw_value: Any) -> None:
        super().__init__("Count must be at least 1", {"value": str(raw_value)})


class InvalidLocationError(ValidationError):
    """Raised when coordinates are out of range or not finite."""

    pass


class InvalidCredentialsError(ValidationError):
    """Raised when the sign-in or sign-up fields are incomplete or inconsistent."""

    pass
