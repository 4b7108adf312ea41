"""
Event model: the record a booking must reference.

Only the fields bookings depend on live here; anything richer belongs to
the service that owns events.
"""

from sqlalchemy import Column, DateTime, Index, Integer, String

from booking_data.db.base import Base, TimestampMixin


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    date = Column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_events_date", "date"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title})>"
