"""
Cached database connection.

CONNECTION STRATEGY: one engine per process, connected exactly once
===================================================================

Problem:
  Every request handler (and every worker started by a reload) wants a ready
  engine. Building one per call opens a new pool each time, and two handlers
  arriving together on a cold process would each start their own connect.

Solution:
  ConnectionCache keeps two fields:
  - connection: the engine once it has connected successfully
  - pending:    the task currently connecting, if any

  acquire() returns the cached engine without suspending when there is one.
  Otherwise callers join the in-flight task, or start it if nobody has. All
  callers waiting on one attempt see the same engine or the same exception.

  A failed attempt is not cached: pending is cleared so the next acquire()
  starts from scratch. Nothing is retried automatically.

  Settings are read once at import. A missing DATABASE_URL raises
  ConfigurationError here, at startup, instead of on the first request.
"""

import asyncio
from functools import lru_cache
from typing import Awaitable, Callable, Optional

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from booking_data.core.config import get_settings
from booking_data.core.logging import get_logger
from booking_data.core.metrics import record_connection_attempt

logger = get_logger(__name__)
settings = get_settings()

Connector = Callable[..., Awaitable[AsyncEngine]]


async def connect_engine(url: str, **options) -> AsyncEngine:
    """
    Create an engine and prove it can reach the database.

    create_async_engine is lazy; without the probe a bad URL would only
    surface on the first query. The probe makes acquisition fail fast.
    """
    engine = create_async_engine(url, **options)
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception:
        await engine.dispose()
        raise
    return engine


class ConnectionCache:
    """Memoized engine plus its in-flight acquisition."""

    def __init__(self, url: str, connect: Connector = connect_engine, **engine_options):
        self._url = url
        self._connect = connect
        self._engine_options = engine_options
        self.connection: Optional[AsyncEngine] = None
        self.pending: Optional[asyncio.Task] = None

    @property
    def is_connected(self) -> bool:
        return self.connection is not None

    async def acquire(self) -> AsyncEngine:
        if self.connection is not None:
            return self.connection

        if self.pending is None:
            self.pending = asyncio.ensure_future(self._open())
            self.pending.add_done_callback(self._attempt_finished)

        attempt = self.pending
        try:
            # Shielded: a cancelled caller must not cancel the shared attempt
            engine = await asyncio.shield(attempt)
        except Exception:
            if self.pending is attempt:
                self.pending = None
            raise

        # close() may have run while this caller was waiting
        if self.pending is attempt:
            self.connection = engine
        return engine

    def _attempt_finished(self, attempt: asyncio.Task) -> None:
        # Runs even when every waiter was cancelled, so a failure is never cached
        if attempt.cancelled() or attempt.exception() is not None:
            if self.pending is attempt:
                self.pending = None
        elif self.pending is attempt and self.connection is None:
            self.connection = attempt.result()

    async def _open(self) -> AsyncEngine:
        try:
            engine = await self._connect(self._url, **self._engine_options)
        except Exception as e:
            record_connection_attempt(success=False)
            logger.error("database_connection_failed", error=str(e))
            raise
        record_connection_attempt(success=True)
        logger.info("database_connected", backend=make_url(self._url).get_backend_name())
        return engine

    async def close(self) -> None:
        """
        Dispose the engine on shutdown.

        An attempt still in flight is awaited and its engine disposed, so a
        connect that finishes after shutdown never ends up cached.
        """
        engine, attempt = self.connection, self.pending
        self.connection, self.pending = None, None

        if engine is None and attempt is not None:
            try:
                engine = await asyncio.shield(attempt)
            except Exception:
                # Already logged by _open; a failed attempt holds nothing to dispose
                engine = None

        if engine is not None:
            await engine.dispose()
            logger.info("database_disconnected")


@lru_cache()
def get_connection_cache() -> ConnectionCache:
    return ConnectionCache(settings.DATABASE_URL, **settings.engine_options)


async def acquire_connection() -> AsyncEngine:
    return await get_connection_cache().acquire()


async def close_connection() -> None:
    await get_connection_cache().close()
