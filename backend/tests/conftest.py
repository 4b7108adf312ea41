"""
Pytest fixtures for the test database, sessions, and events.

Settings are read when booking_data.db.connection is imported, so the
environment is prepared before any application import.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import datetime, timezone, timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from booking_data.db.base import Base
from booking_data.models.event import Event
from booking_data.services.event_service import EventRepository

# One shared in-memory connection so every session sees the same tables
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables, yield session, then drop everything for isolation."""
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def test_event(db_session: AsyncSession) -> Event:
    event = Event(
        title="Test Concert",
        date=datetime.now(timezone.utc) + timedelta(days=30),
    )
    db_session.add(event)
    await db_session.commit()
    await db_session.refresh(event)
    return event


@pytest_asyncio.fixture
async def other_event(db_session: AsyncSession) -> Event:
    event = Event(title="Second Show")
    db_session.add(event)
    await db_session.commit()
    await db_session.refresh(event)
    return event


class CountingEventLookup:
    """EventLookup that records every existence check it answers."""

    def __init__(self, db: AsyncSession):
        self.repository = EventRepository(db)
        self.calls: list[int] = []

    async def exists(self, event_id: int) -> bool:
        self.calls.append(event_id)
        return await self.repository.exists(event_id)


@pytest.fixture
def event_lookup(db_session: AsyncSession) -> CountingEventLookup:
    return CountingEventLookup(db_session)
