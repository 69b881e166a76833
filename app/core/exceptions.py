"""Custom application exceptions."""

from typing import Any

from fastapi import HTTPException, status


class AppException(HTTPException):
    """Base application exception."""

    def __init__(
        self,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail: Any = "An unexpected error occurred",
        headers: dict[str, str] | None = None,
    ) -> None:
        super().__init__(status_code=status_code, detail=detail, headers=headers)


class ValidationError(AppException):
    """Validation error exception."""

    def __init__(self, detail: str = "Validation failed", errors: list[dict[str, Any]] | None = None) -> None:
        self.errors = errors
        body: Any = detail if errors is None else {"message": detail, "errors": errors}
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=body)


class NotFoundError(AppException):
    """Resource not found exception."""

    def __init__(self, resource: str = "Resource", identifier: str | None = None) -> None:
        detail = f"{resource} not found"
        if identifier:
            detail = f"{resource} with ID '{identifier}' not found"
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class AuthenticationError(AppException):
    """Authentication failed exception."""

    def __init__(self, detail: str = "Authentication failed") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthorizationError(AppException):
    """Authorization denied exception."""

    def __init__(self, detail: str = "You don't have permission to access this resource") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class InvalidBooking(ValidationError):
    """Order items break the booking rules for their meal type."""

    def __init__(self, errors: list[dict[str, Any]]) -> None:
        super().__init__("Invalid meal selection", errors=errors)


class PriceMismatch(ValidationError):
    """Declared total does not match the item subtotals."""

    def __init__(self, declared: int, calculated: int) -> None:
        self.declared = declared
        self.calculated = calculated
        super().__init__(
            f"Total price {declared} does not match item total {calculated}"
        )


class MenuNotAvailable(AppException):
    """Menu inactive or fully booked."""

    def __init__(self, detail: str = "This menu is not available") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class DuplicateBooking(AppException):
    """User already holds an open booking for the same meal."""

    def __init__(self, detail: str = "You already have a booking for this meal") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class InvalidStatusTransition(AppException):
    """Requested status change is not in the transition table."""

    def __init__(self, current_status: str, requested_status: str, allowed_transitions: list[str]) -> None:
        self.current_status = current_status
        self.requested_status = requested_status
        self.allowed_transitions = allowed_transitions
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": f"Invalid status transition: {current_status} → {requested_status}",
                "current_status": current_status,
                "allowed_transitions": allowed_transitions,
            },
        )


class BookingStatusConflict(AppException):
    """Booking status changed between read and write."""

    def __init__(self, detail: str = "Booking was modified concurrently, reload and retry") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class CancellationNotAllowed(AppException):
    """Booking can no longer be cancelled."""

    def __init__(self, detail: str = "This booking can no longer be cancelled") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class RateLimitExceeded(AppException):
    """Rate limit exceeded exception."""

    def __init__(self, detail: str = "Too many requests. Please try again later.") -> None:
        super().__init__(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail=detail)
