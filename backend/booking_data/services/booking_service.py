"""
Booking service: the single write path for bookings.

Every insert and every update goes through save_booking(), which runs
validate_booking() before the session sees the change:

  create:  new Booking -> validate (email, then event lookup) -> add -> flush
  update:  load -> apply set fields -> validate -> flush
           the event lookup only happens when event_id differs from the
           last event confirmed to exist

A rejected create never reaches the session. A rejected update is reloaded
from the database so the in-memory object matches what is stored, without
rolling back the caller's transaction.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from booking_data.core.exceptions import (
    BookingNotFoundError,
    BookingValidationError,
    ReferenceIntegrityError,
)
from booking_data.core.logging import get_logger
from booking_data.core.metrics import record_booking_write
from booking_data.models.booking import Booking
from booking_data.schemas.booking import BookingCreate, BookingUpdate
from booking_data.services.booking_validation import validate_booking
from booking_data.services.event_service import EventLookup, EventRepository

logger = get_logger(__name__)


async def save_booking(
    db: AsyncSession,
    booking: Booking,
    events: Optional[EventLookup] = None,
) -> Booking:
    """Validate and persist a new or modified booking."""
    if events is None:
        events = EventRepository(db)

    await validate_booking(booking, events)

    db.add(booking)
    await db.flush()
    booking.mark_event_validated()
    await db.refresh(booking)
    return booking


async def create_booking(
    db: AsyncSession,
    booking_data: BookingCreate,
    events: Optional[EventLookup] = None,
) -> Booking:
    booking = Booking(event_id=booking_data.event_id, email=booking_data.email)
    try:
        booking = await save_booking(db, booking, events)
    except BookingValidationError as e:
        record_booking_write("create", "invalid")
        logger.warning("booking_rejected", reason="invalid", error=e.message)
        raise
    except ReferenceIntegrityError as e:
        record_booking_write("create", "missing_event")
        logger.warning("booking_rejected", reason="missing_event", event_id=e.event_id)
        raise

    record_booking_write("create", "success")
    logger.info("booking_created", booking_id=booking.id, event_id=booking.event_id, email=booking.email)
    return booking


async def update_booking(
    db: AsyncSession,
    booking_id: int,
    booking_data: BookingUpdate,
    events: Optional[EventLookup] = None,
) -> Booking:
    """
    Apply the fields the caller explicitly set.
    Leaving event_id out (or setting it to its current value) skips the event lookup.
    """
    booking = await get_booking(db, booking_id)

    for field, value in booking_data.model_dump(exclude_unset=True).items():
        setattr(booking, field, value)

    try:
        booking = await save_booking(db, booking, events)
    except (BookingValidationError, ReferenceIntegrityError) as e:
        with db.sync_session.no_autoflush:
            await db.refresh(booking)
        status = "missing_event" if isinstance(e, ReferenceIntegrityError) else "invalid"
        record_booking_write("update", status)
        logger.warning("booking_update_rejected", booking_id=booking_id, reason=status)
        raise

    record_booking_write("update", "success")
    logger.info("booking_updated", booking_id=booking.id, event_id=booking.event_id)
    return booking


async def get_booking(db: AsyncSession, booking_id: int) -> Booking:
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    booking = result.scalar_one_or_none()
    if not booking:
        raise BookingNotFoundError(booking_id)
    return booking


async def list_event_bookings(db: AsyncSession, event_id: int) -> list[Booking]:
    """All bookings for one event. Served by ix_bookings_event_id."""
    result = await db.execute(
        select(Booking)
        .where(Booking.event_id == event_id)
        .order_by(Booking.created_at.asc(), Booking.id.asc())
    )
    return list(result.scalars().all())


async def delete_booking(db: AsyncSession, booking_id: int) -> None:
    booking = await get_booking(db, booking_id)
    await db.delete(booking)
    await db.flush()

    record_booking_write("delete", "success")
    logger.info("booking_deleted", booking_id=booking_id, event_id=booking.event_id)
