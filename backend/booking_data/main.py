"""
Booking Data Service - application entry point.

Wires the data layer into a FastAPI process:
- the shared database engine is acquired at startup and disposed at shutdown
- data layer errors are translated into JSON responses
- /health reports database reachability, /metrics exposes Prometheus counters
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from booking_data.api.middleware import RequestContextMiddleware
from booking_data.core.config import get_settings
from booking_data.core.exceptions import BookingDataError
from booking_data.core.logging import get_logger, setup_logging
from booking_data.core.metrics import metrics_endpoint
from booking_data.db.connection import acquire_connection, close_connection, get_connection_cache

logger = get_logger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()

    logger.info(
        "application_starting",
        app=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
    )

    # Failing here aborts startup rather than serving requests without a database
    await acquire_connection()

    yield

    await close_connection()
    logger.info("application_shutdown")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan,
)

app.add_middleware(RequestContextMiddleware)


@app.exception_handler(BookingDataError)
async def booking_data_error_handler(request: Request, exc: BookingDataError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.get("/health", tags=["Health"])
async def health_check():
    cache = get_connection_cache()
    if not cache.is_connected:
        try:
            await cache.acquire()
        except Exception as e:
            logger.warning("health_database_unavailable", error=str(e))
    return {
        "status": "healthy" if cache.is_connected else "degraded",
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "database": "connected" if cache.is_connected else "unavailable",
    }


@app.get("/metrics", include_in_schema=False)
def metrics():
    return metrics_endpoint()
