"""
Event service: creation, lookup, and the existence check bookings depend on.
"""

from typing import Optional, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from booking_data.core.exceptions import EventNotFoundError
from booking_data.core.logging import get_logger
from booking_data.models.event import Event
from booking_data.schemas.event import EventCreate

logger = get_logger(__name__)


class EventLookup(Protocol):
    """What the booking write path needs to know about events."""

    async def exists(self, event_id: int) -> bool: ...


class EventRepository:
    """EventLookup backed by the events table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, event_id: int) -> Optional[Event]:
        result = await self.db.execute(select(Event).where(Event.id == event_id))
        return result.scalar_one_or_none()

    async def exists(self, event_id: int) -> bool:
        # Called mid-write; pending booking changes must not be flushed first
        with self.db.sync_session.no_autoflush:
            result = await self.db.execute(select(Event.id).where(Event.id == event_id))
        return result.scalar_one_or_none() is not None


async def create_event(db: AsyncSession, event_data: EventCreate) -> Event:
    event = Event(title=event_data.title, date=event_data.date)
    db.add(event)
    await db.flush()
    await db.refresh(event)

    logger.info("event_created", event_id=event.id, title=event.title)
    return event


async def get_event(db: AsyncSession, event_id: int) -> Event:
    """Get a single event by ID."""
    event = await EventRepository(db).find_by_id(event_id)
    if not event:
        raise EventNotFoundError(event_id)
    return event


async def event_exists(db: AsyncSession, event_id: int) -> bool:
    return await EventRepository(db).exists(event_id)
