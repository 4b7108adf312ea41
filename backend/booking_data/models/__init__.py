from booking_data.models.event import Event
from booking_data.models.booking import Booking

__all__ = ["Event", "Booking"]
