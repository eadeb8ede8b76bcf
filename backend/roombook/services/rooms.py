from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from datetime import time
from typing import List
from uuid import UUID

from sqlmodel import Session, select

from roombook.core.config import BookingRules, settings
from roombook.core.errors import NotFoundError, StateError
from roombook.models import Booking, BookingStatus, Room, WaitlistEntry
from roombook.services.slots import overlaps


@dataclass
class HourlySlot:
    start: time
    end: time
    free: bool
    pending_requests: int


def get_room(session: Session, room_id: UUID) -> Room:
    room = session.get(Room, room_id)
    if not room:
        raise NotFoundError("Room not found", "room_not_found")
    return room


def room_availability(
    session: Session,
    room_id: UUID,
    booking_date: dt.date,
    rules: BookingRules | None = None,
) -> tuple[List[HourlySlot], List[Booking]]:
    """Hourly grid over office hours for one room and date.

    A slot is busy only if an approved booking overlaps it. Pending requests
    are counted but do not block.
    """
    rules = rules or settings.booking_rules
    get_room(session, room_id)

    bookings = session.exec(
        select(Booking)
        .where(
            Booking.room_id == room_id,
            Booking.date == booking_date,
            Booking.status.in_(BookingStatus.ACTIVE),
        )
        .order_by(Booking.start_time)
    ).all()

    slots: List[HourlySlot] = []
    for hour in range(rules.office_start.hour, rules.office_end.hour):
        start, end = time(hour, 0), time(hour + 1, 0) if hour < 23 else time.max
        overlapping = [
            b for b in bookings if overlaps(b.start_time, b.end_time, start, end)
        ]
        slots.append(
            HourlySlot(
                start=start,
                end=end,
                free=not any(b.status == BookingStatus.APPROVED for b in overlapping),
                pending_requests=sum(
                    1 for b in overlapping if b.status == BookingStatus.PENDING
                ),
            )
        )
    return slots, list(bookings)


def delete_room(session: Session, room_id: UUID) -> None:
    """Delete a room nothing refers to. Rooms with history are blocked instead."""
    room = get_room(session, room_id)
    referenced = session.exec(
        select(Booking.id).where(Booking.room_id == room_id).limit(1)
    ).first() or session.exec(
        select(WaitlistEntry.id).where(WaitlistEntry.room_id == room_id).limit(1)
    ).first()
    if referenced:
        raise StateError(
            "Room has bookings or waitlist entries; block it instead of deleting.",
            "room_in_use",
        )
    session.delete(room)
    session.commit()
