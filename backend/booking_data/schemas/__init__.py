from booking_data.schemas.event import EventCreate, EventResponse
from booking_data.schemas.booking import BookingCreate, BookingUpdate, BookingResponse

__all__ = [
    "EventCreate", "EventResponse",
    "BookingCreate", "BookingUpdate", "BookingResponse",
]
