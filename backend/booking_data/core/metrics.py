"""
Metrics instrumentation for the data layer.
Exposes Prometheus-compatible metrics at the /metrics endpoint.
"""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, generate_latest

db_connection_attempts = Counter(
    'db_connection_attempts_total',
    'Underlying database connect attempts',
    ['result']  # success, failure
)

event_reference_checks = Counter(
    'event_reference_checks_total',
    'Event existence lookups made while saving bookings',
    ['result']  # found, missing
)

booking_writes = Counter(
    'booking_writes_total',
    'Booking write attempts',
    ['operation', 'status']  # create/update/delete, success/invalid/missing_event
)


def metrics_endpoint() -> Response:
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_connection_attempt(success: bool):
    db_connection_attempts.labels(result="success" if success else "failure").inc()


def record_reference_check(found: bool):
    event_reference_checks.labels(result="found" if found else "missing").inc()


def record_booking_write(operation: str, status: str):
    """Record booking write. Status: success, invalid, missing_event"""
    booking_writes.labels(operation=operation, status=status).inc()
