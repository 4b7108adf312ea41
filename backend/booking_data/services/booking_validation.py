"""
Validation step run by the booking write path before anything is flushed.

Order matters:
  1. Email is trimmed, lower-cased and checked against EMAIL_PATTERN.
     A bad email stops the write before any database round trip.
  2. event_id must be set.
  3. The referenced event is looked up, but only when the booking is new or
     its event_id differs from the last value confirmed to exist (recorded on
     load and after every successful save). A stable reference that
     was valid when written is not checked again.

Events are reached through the injected EventLookup, so this module has no
import-time dependency on the event model.
"""

import re
from typing import Any

from sqlalchemy import inspect

from booking_data.core.exceptions import BookingValidationError, ReferenceIntegrityError
from booking_data.core.logging import get_logger
from booking_data.core.metrics import record_reference_check
from booking_data.models.booking import Booking
from booking_data.services.event_service import EventLookup

logger = get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def normalize_email(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise BookingValidationError("Email is required")

    email = value.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise BookingValidationError("Please provide a valid email address")
    return email


def needs_reference_check(booking: Booking) -> bool:
    """True for unsaved bookings and for bookings whose event_id differs from the last confirmed one."""
    state = inspect(booking)
    if state.transient or state.pending:
        return True
    return booking.event_id != booking.validated_event_id


async def validate_booking(booking: Booking, events: EventLookup) -> None:
    booking.email = normalize_email(booking.email)

    if booking.event_id is None:
        raise BookingValidationError("Event ID is required")

    if not needs_reference_check(booking):
        return

    found = await events.exists(booking.event_id)
    record_reference_check(found)
    if not found:
        logger.warning("event_reference_missing", event_id=booking.event_id)
        raise ReferenceIntegrityError(booking.event_id)
