# Import every model so relationships resolve and metadata knows all tables
from eventbook.models.bookings import Booking
from eventbook.models.events import Event
from eventbook.models.users import User

__all__ = ["Booking", "Event", "User"]
