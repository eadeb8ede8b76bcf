from .booking import Booking, BookingStatus, MeetingType
from .notification import Notification
from .room import Room
from .user import User, UserRole
from .waitlist_entry import WaitlistEntry

__all__ = [
    "Booking",
    "BookingStatus",
    "MeetingType",
    "Notification",
    "Room",
    "User",
    "UserRole",
    "WaitlistEntry",
]
