"""
Tests for the booking write path: email normalization, event reference
checks, and when those checks are skipped.
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from booking_data.core.exceptions import (
    BookingNotFoundError,
    BookingValidationError,
    ReferenceIntegrityError,
)
from booking_data.models.booking import Booking
from booking_data.schemas.booking import BookingCreate, BookingResponse, BookingUpdate
from booking_data.services.booking_service import (
    create_booking,
    delete_booking,
    get_booking,
    list_event_bookings,
    save_booking,
    update_booking,
)


async def _booking_count(db: AsyncSession) -> int:
    return (await db.execute(select(func.count()).select_from(Booking))).scalar()


@pytest.mark.asyncio
async def test_create_booking_missing_event(db_session):
    """Unknown event_id is rejected and nothing is stored."""
    with pytest.raises(ReferenceIntegrityError) as exc_info:
        await create_booking(db_session, BookingCreate(event_id=99999, email="user@example.com"))

    assert exc_info.value.event_id == 99999
    assert "99999" in str(exc_info.value)
    assert await _booking_count(db_session) == 0


@pytest.mark.asyncio
async def test_create_booking_normalizes_email(db_session, test_event):
    """Email is trimmed and lower-cased before it is stored."""
    booking = await create_booking(
        db_session, BookingCreate(event_id=test_event.id, email="  User@Example.com ")
    )
    await db_session.commit()

    stored = await db_session.execute(select(Booking.email).where(Booking.id == booking.id))
    assert stored.scalar_one() == "user@example.com"
    assert booking.event_id == test_event.id
    assert booking.created_at is not None
    assert booking.updated_at is not None


@pytest.mark.asyncio
async def test_create_booking_checks_event_once(db_session, test_event, event_lookup):
    await create_booking(
        db_session, BookingCreate(event_id=test_event.id, email="a@example.com"), events=event_lookup
    )
    assert event_lookup.calls == [test_event.id]


@pytest.mark.asyncio
@pytest.mark.parametrize("event_exists", [True, False])
async def test_invalid_email_rejected_before_event_lookup(db_session, test_event, event_lookup, event_exists):
    """A malformed email fails validation whether or not the event exists."""
    event_id = test_event.id if event_exists else 99999

    with pytest.raises(BookingValidationError):
        await create_booking(
            db_session, BookingCreate(event_id=event_id, email="not-an-email"), events=event_lookup
        )

    assert event_lookup.calls == []
    assert await _booking_count(db_session) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("email", ["", "   ", "user@example", "user @example.com", "@example.com"])
async def test_malformed_emails_rejected(db_session, test_event, email):
    with pytest.raises(BookingValidationError):
        await create_booking(db_session, BookingCreate(event_id=test_event.id, email=email))


@pytest.mark.asyncio
async def test_email_only_update_skips_event_lookup(db_session, test_event, event_lookup):
    """Changing the email of a saved booking does not re-check its event."""
    booking = await create_booking(
        db_session, BookingCreate(event_id=test_event.id, email="old@example.com")
    )
    await db_session.commit()

    updated = await update_booking(
        db_session, booking.id, BookingUpdate(email="New@Example.COM"), events=event_lookup
    )

    assert event_lookup.calls == []
    assert updated.email == "new@example.com"
    assert updated.event_id == test_event.id


@pytest.mark.asyncio
async def test_update_with_same_event_id_skips_lookup(db_session, test_event, event_lookup):
    booking = await create_booking(
        db_session, BookingCreate(event_id=test_event.id, email="same@example.com")
    )
    await db_session.commit()

    await update_booking(
        db_session, booking.id, BookingUpdate(event_id=test_event.id), events=event_lookup
    )
    assert event_lookup.calls == []


@pytest.mark.asyncio
async def test_changing_event_revalidates(db_session, test_event, other_event, event_lookup):
    booking = await create_booking(
        db_session, BookingCreate(event_id=test_event.id, email="move@example.com")
    )
    await db_session.commit()

    updated = await update_booking(
        db_session, booking.id, BookingUpdate(event_id=other_event.id), events=event_lookup
    )

    assert event_lookup.calls == [other_event.id]
    assert updated.event_id == other_event.id


@pytest.mark.asyncio
async def test_changing_to_missing_event_is_rejected(db_session, test_event):
    """The stored booking keeps its original event when the update is refused."""
    booking = await create_booking(
        db_session, BookingCreate(event_id=test_event.id, email="stay@example.com")
    )
    await db_session.commit()

    with pytest.raises(ReferenceIntegrityError):
        await update_booking(db_session, booking.id, BookingUpdate(event_id=424242))

    await db_session.commit()
    stored = await db_session.execute(select(Booking.event_id).where(Booking.id == booking.id))
    assert stored.scalar_one() == test_event.id
    assert booking.event_id == test_event.id


@pytest.mark.asyncio
async def test_update_with_invalid_email_keeps_stored_email(db_session, test_event):
    booking = await create_booking(
        db_session, BookingCreate(event_id=test_event.id, email="keep@example.com")
    )
    await db_session.commit()

    with pytest.raises(BookingValidationError):
        await update_booking(db_session, booking.id, BookingUpdate(email="broken"))

    assert booking.email == "keep@example.com"


@pytest.mark.asyncio
async def test_update_unknown_booking(db_session):
    with pytest.raises(BookingNotFoundError):
        await update_booking(db_session, 12345, BookingUpdate(email="x@example.com"))


@pytest.mark.asyncio
async def test_list_event_bookings(db_session, test_event, other_event):
    """Only bookings for the requested event come back, oldest first."""
    first = await create_booking(db_session, BookingCreate(event_id=test_event.id, email="one@example.com"))
    await create_booking(db_session, BookingCreate(event_id=other_event.id, email="two@example.com"))
    second = await create_booking(db_session, BookingCreate(event_id=test_event.id, email="three@example.com"))
    await db_session.commit()

    bookings = await list_event_bookings(db_session, test_event.id)

    assert [b.id for b in bookings] == [first.id, second.id]
    assert await list_event_bookings(db_session, 99999) == []


@pytest.mark.asyncio
async def test_delete_booking(db_session, test_event):
    booking = await create_booking(
        db_session, BookingCreate(event_id=test_event.id, email="gone@example.com")
    )
    await db_session.commit()

    await delete_booking(db_session, booking.id)
    await db_session.commit()

    with pytest.raises(BookingNotFoundError):
        await get_booking(db_session, booking.id)
    assert await _booking_count(db_session) == 0


@pytest.mark.asyncio
async def test_reassigned_event_checked_after_autoflush(db_session, test_event):
    """A query between reassigning event_id and saving must not hide the change."""
    booking = await create_booking(
        db_session, BookingCreate(event_id=test_event.id, email="flush@example.com")
    )
    await db_session.commit()

    booking.event_id = 424242
    await get_booking(db_session, booking.id)

    with pytest.raises(ReferenceIntegrityError) as exc_info:
        await save_booking(db_session, booking)
    assert exc_info.value.event_id == 424242

    await db_session.rollback()
    stored = await db_session.execute(select(Booking.event_id).where(Booking.id == booking.id))
    assert stored.scalar_one() == test_event.id


@pytest.mark.asyncio
async def test_booking_loaded_in_new_session_keeps_confirmed_event(db_session, test_event, event_lookup):
    """Bookings read back from the database count their stored event as confirmed."""
    booking = await create_booking(
        db_session, BookingCreate(event_id=test_event.id, email="reload@example.com")
    )
    await db_session.commit()
    db_session.expunge_all()

    loaded = await get_booking(db_session, booking.id)
    assert loaded is not booking
    assert loaded.validated_event_id == test_event.id

    await update_booking(db_session, loaded.id, BookingUpdate(email="Reloaded@Example.com"), events=event_lookup)
    assert event_lookup.calls == []


@pytest.mark.asyncio
async def test_booking_response_from_model(db_session, test_event):
    booking = await create_booking(
        db_session, BookingCreate(event_id=test_event.id, email="Reader@Example.com")
    )
    await db_session.commit()

    data = BookingResponse.model_validate(booking)
    assert data.id == booking.id
    assert data.event_id == test_event.id
    assert data.email == "reader@example.com"
    assert data.created_at is not None
