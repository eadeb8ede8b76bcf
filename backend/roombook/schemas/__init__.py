from .booking import (
    ApprovalRead,
    BookingCreate,
    BookingRead,
    CancelSeriesRead,
    CheckInLink,
    CheckInRead,
    PendingCount,
    Recurrence,
    RejectRequest,
    SeriesRead,
    SlotCheckRequest,
    SlotCheckResponse,
)
from .notification import NotificationRead, UnreadCount
from .room import HourlySlotRead, RoomAvailability, RoomCreate, RoomRead, RoomUpdate
from .waitlist import WaitlistEntryCreate, WaitlistEntryRead

__all__ = [
    "ApprovalRead",
    "BookingCreate",
    "BookingRead",
    "CancelSeriesRead",
    "CheckInLink",
    "CheckInRead",
    "HourlySlotRead",
    "NotificationRead",
    "PendingCount",
    "Recurrence",
    "RejectRequest",
    "RoomAvailability",
    "RoomCreate",
    "RoomRead",
    "RoomUpdate",
    "SeriesRead",
    "SlotCheckRequest",
    "SlotCheckResponse",
    "UnreadCount",
    "WaitlistEntryCreate",
    "WaitlistEntryRead",
]
