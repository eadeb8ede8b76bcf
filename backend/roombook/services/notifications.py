"""In-app notifications rendered from booking events."""

from __future__ import annotations

import logging
from typing import Any, List
from uuid import UUID

from sqlmodel import Session, select

from roombook.models import Notification, Room, User, UserRole
from roombook.services.events import Audience, EventKind

logger = logging.getLogger(__name__)

# kind -> (title, message template); kinds without an entry are not shown in-app
NOTIFICATION_TEMPLATES: dict[str, tuple[str, str]] = {
    EventKind.BOOKING_CREATED: (
        "New Booking",
        "{owner_name} booked {room_name} on {date} ({start_time}-{end_time}).",
    ),
    EventKind.BOOKING_APPROVED: (
        "Booking Approved",
        "Your booking for {room_name} on {date} ({start_time}-{end_time}) has been approved.",
    ),
    EventKind.BOOKING_REJECTED: (
        "Booking Rejected",
        "Your booking for {room_name} on {date} was rejected. Reason: {rejection_reason}",
    ),
    EventKind.BOOKING_AUTO_REJECTED: (
        "Booking Auto-Rejected",
        "Another booking was approved for the same slot in {room_name} on {date}.",
    ),
    EventKind.BOOKING_CANCELLED: (
        "Booking Cancelled",
        "Your booking for {room_name} on {date} ({start_time}-{end_time}) was cancelled.",
    ),
    EventKind.WAITLIST_SLOT_AVAILABLE: (
        "Waitlist Slot Available",
        "A slot opened for {room_name} on {date} ({start_time}-{end_time}). Book now!",
    ),
}


def create_notification(
    session: Session,
    user_id: UUID,
    type: str,
    title: str,
    message: str,
    booking_id: UUID | None = None,
    waitlist_entry_id: UUID | None = None,
) -> Notification:
    """Create a notification for a user."""
    notification = Notification(
        user_id=user_id,
        booking_id=booking_id,
        waitlist_entry_id=waitlist_entry_id,
        type=type,
        title=title,
        message=message,
    )
    session.add(notification)
    return notification


def _recipients(session: Session, audience: str, user_id: UUID) -> List[UUID]:
    if audience == Audience.ADMINS:
        return list(
            session.exec(
                select(User.id).where(User.role == UserRole.ADMIN, User.is_active == True)  # noqa: E712
            ).all()
        )
    return [user_id]


def record_event_notifications(session: Session, event: dict[str, Any]) -> List[Notification]:
    """Write one notification per recipient of a serialized booking event."""
    template = NOTIFICATION_TEMPLATES.get(event["kind"])
    if template is None:
        logger.debug(f"No in-app notification for event kind {event['kind']}")
        return []

    payload = dict(event.get("payload") or {})
    room = session.get(Room, UUID(payload["room_id"])) if payload.get("room_id") else None
    payload.setdefault("room_name", room.name if room else "the room")
    payload.setdefault("owner_name", "Someone")
    payload.setdefault("rejection_reason", "")

    title, message = template
    booking_id = event.get("booking_id")
    entry_id = event.get("waitlist_entry_id")
    notifications = [
        create_notification(
            session=session,
            user_id=recipient,
            type=event["kind"],
            title=title,
            message=message.format(**payload),
            booking_id=UUID(str(booking_id)) if booking_id else None,
            waitlist_entry_id=UUID(str(entry_id)) if entry_id else None,
        )
        for recipient in _recipients(session, event["audience"], UUID(str(event["user_id"])))
    ]
    return notifications
