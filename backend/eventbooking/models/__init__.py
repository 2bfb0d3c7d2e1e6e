from eventbooking.models.user import User
from eventbooking.models.event import Event
from eventbooking.models.booking import Booking
from eventbooking.models.review import Review
from eventbooking.models.pending_order import PendingOrder

__all__ = ["User", "Event", "Booking", "Review", "PendingOrder"]
