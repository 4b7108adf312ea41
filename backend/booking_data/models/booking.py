"""
Booking model linking a contact email to an event.

Key design decisions:
- event_id is a plain indexed column, not a foreign key. The write path in
  booking_service checks the event exists before any insert or reference change.
- validated_event_id remembers the last event_id known to exist (loaded from
  the database or confirmed by a save). It is not a column and is not reset by
  flushes, so a reassigned event_id is caught even after an autoflush.
- ix_bookings_event_id keeps "all bookings for event X" queries cheap.
- email is stored normalized (trimmed, lower-cased).
"""

from sqlalchemy import Column, Index, Integer, String, event

from booking_data.db.base import Base, TimestampMixin


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(Integer, nullable=False)
    email = Column(String(255), nullable=False)

    # Not mapped; see _remember_stored_event
    validated_event_id = None

    __table_args__ = (
        Index("ix_bookings_event_id", "event_id"),
    )

    def mark_event_validated(self) -> None:
        self.validated_event_id = self.event_id

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, event={self.event_id}, email={self.email})>"


@event.listens_for(Booking, "load")
def _remember_stored_event(booking: Booking, context) -> None:
    # Only on first load; a refresh may pick up an unvalidated autoflushed value
    booking.validated_event_id = booking.__dict__.get("event_id")
