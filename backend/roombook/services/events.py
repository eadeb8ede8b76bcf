"""Booking events handed to external delivery collaborators.

The core only records *that* a transition happened and *who* must be told.
Events are published after the unit of work that produced them commits.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Optional, Protocol
from uuid import UUID

from pydantic import BaseModel, Field

from roombook.core.celery_utils import safe_celery_delay
from roombook.models import Booking, WaitlistEntry

logger = logging.getLogger(__name__)


class EventKind:
    BOOKING_CREATED = "booking.created"
    CHECKIN_ISSUED = "booking.checkin_issued"
    BOOKING_APPROVED = "booking.approved"
    BOOKING_REJECTED = "booking.rejected"
    BOOKING_AUTO_REJECTED = "booking.auto_rejected"
    BOOKING_CANCELLED = "booking.cancelled"
    CALENDAR_SYNC_REQUESTED = "calendar.sync_requested"
    WAITLIST_SLOT_AVAILABLE = "waitlist.slot_available"


class Audience:
    OWNER = "owner"
    ADMINS = "admins"


class BookingEvent(BaseModel):
    kind: str
    audience: str = Audience.OWNER
    user_id: UUID
    booking_id: Optional[UUID] = None
    waitlist_entry_id: Optional[UUID] = None
    payload: dict[str, Any] = {}
    occurred_at: datetime = Field(default_factory=datetime.utcnow)


def _hhmm(value) -> str:
    return value.strftime("%H:%M")


def booking_event(
    kind: str,
    booking: Booking,
    *,
    audience: str = Audience.OWNER,
    **extra: Any,
) -> BookingEvent:
    """Snapshot a booking into an event while it is still in the session."""
    payload = {
        "room_id": str(booking.room_id),
        "date": booking.date.isoformat(),
        "start_time": _hhmm(booking.start_time),
        "end_time": _hhmm(booking.end_time),
        "meeting_type": booking.meeting_type,
        "purpose": booking.purpose,
        "status": booking.status,
        "recurring_group": booking.recurring_group,
        "guest_emails": list(booking.guest_emails or []),
    }
    if booking.rejection_reason:
        payload["rejection_reason"] = booking.rejection_reason
    payload.update(extra)
    return BookingEvent(
        kind=kind,
        audience=audience,
        user_id=booking.user_id,
        booking_id=booking.id,
        payload=payload,
    )


def waitlist_event(entry: WaitlistEntry, *, freed_start, freed_end) -> BookingEvent:
    return BookingEvent(
        kind=EventKind.WAITLIST_SLOT_AVAILABLE,
        user_id=entry.user_id,
        waitlist_entry_id=entry.id,
        payload={
            "room_id": str(entry.room_id),
            "date": entry.date.isoformat(),
            "start_time": _hhmm(entry.start_time),
            "end_time": _hhmm(entry.end_time),
            "freed_start_time": _hhmm(freed_start),
            "freed_end_time": _hhmm(freed_end),
        },
    )


class EventSink(Protocol):
    def publish(self, booking_event: BookingEvent) -> None:
        ...


class CeleryEventSink:
    """Fire-and-forget dispatch to the Celery delivery task."""

    def publish(self, booking_event: BookingEvent) -> None:
        from roombook.tasks.notifications import deliver_booking_event_task

        result = safe_celery_delay(
            deliver_booking_event_task, booking_event.model_dump(mode="json")
        )
        if result is None:
            logger.warning(
                f"Event {booking_event.kind} for user {booking_event.user_id} "
                f"was not queued"
            )


celery_event_sink = CeleryEventSink()
