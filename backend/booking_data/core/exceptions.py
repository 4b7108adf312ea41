"""
Domain errors raised by the data layer.

Each error carries the HTTP status a request layer should answer with, so
callers can translate them without string matching. Connection failures are
not wrapped: the driver's own exceptions reach the caller unchanged.
"""

from typing import Any, Optional


class BookingDataError(Exception):
    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> dict:
        return {"error": type(self).__name__, "detail": self.message}


class ConfigurationError(BookingDataError):
    """Required settings are missing or invalid. Fatal at startup."""


class BookingValidationError(BookingDataError):
    status_code = 422


class ReferenceIntegrityError(BookingDataError):
    """A booking points at an event that does not exist."""

    status_code = 422

    def __init__(self, event_id: Any):
        super().__init__(f"Event with ID {event_id} does not exist")
        self.event_id = event_id

    def to_dict(self) -> dict:
        return {**super().to_dict(), "event_id": self.event_id}


class EventNotFoundError(BookingDataError):
    status_code = 404

    def __init__(self, event_id: Any):
        super().__init__(f"Event {event_id} not found")
        self.event_id = event_id


class BookingNotFoundError(BookingDataError):
    status_code = 404

    def __init__(self, booking_id: Any):
        super().__init__(f"Booking {booking_id} not found")
        self.booking_id = booking_id
