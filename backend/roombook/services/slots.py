"""Slot validation.

A slot is a (room, date, start, end) candidate. Validation runs the business
rules in a fixed order and reports the first one that fails.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from datetime import datetime, time
from typing import Any, Optional
from uuid import UUID

from sqlmodel import Session, select

from roombook.core import clock
from roombook.core.config import BookingRules, settings
from roombook.core.errors import (
    BookingError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from roombook.models import Booking, BookingStatus, Room, User


class SlotViolationCode:
    INVALID_TIME = "invalid_time"
    END_BEFORE_START = "end_before_start"
    OUTSIDE_OFFICE_HOURS = "outside_office_hours"
    SLOT_TOO_SHORT = "slot_too_short"
    DATE_IN_PAST = "date_in_past"
    ROOM_NOT_FOUND = "room_not_found"
    ROOM_BLOCKED = "room_blocked"
    EXCEEDS_MAX_DURATION = "exceeds_max_duration"
    EXCEEDS_CAPACITY = "exceeds_capacity"
    SLOT_CONFLICT = "slot_conflict"


@dataclass(frozen=True)
class SlotViolation:
    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_error(self) -> BookingError:
        if self.code == SlotViolationCode.SLOT_CONFLICT:
            return ConflictError(self.message, self.code, self.details)
        if self.code == SlotViolationCode.ROOM_NOT_FOUND:
            return NotFoundError(self.message, self.code)
        return ValidationError(self.message, self.code, self.details)


def parse_clock(value: str | time) -> time:
    """Parse an ``HH:MM`` time of day. Raises ValueError when malformed."""
    if isinstance(value, time):
        if value.second or value.microsecond:
            raise ValueError(f"{value} is not on a minute boundary")
        return value
    return datetime.strptime(value.strip(), "%H:%M").time()


def format_clock(value: time) -> str:
    return value.strftime("%H:%M")


def to_minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def overlaps(a_start: time, a_end: time, b_start: time, b_end: time) -> bool:
    """Half-open interval overlap. Touching endpoints do not overlap."""
    return a_start < b_end and b_start < a_end


def find_approved_overlap(
    session: Session,
    *,
    room_id: UUID,
    booking_date: dt.date,
    start: time,
    end: time,
    exclude_id: UUID | None = None,
) -> tuple[Booking, User] | None:
    filters = [
        Booking.room_id == room_id,
        Booking.date == booking_date,
        Booking.status == BookingStatus.APPROVED,
        Booking.start_time < end,
        Booking.end_time > start,
    ]
    if exclude_id:
        filters.append(Booking.id != exclude_id)

    statement = (
        select(Booking, User)
        .join(User, Booking.user_id == User.id)
        .where(*filters)
        .order_by(Booking.start_time)
    )
    return session.exec(statement).first()


def conflict_violation(existing: Booking, owner: User) -> SlotViolation:
    start, end = format_clock(existing.start_time), format_clock(existing.end_time)
    return SlotViolation(
        code=SlotViolationCode.SLOT_CONFLICT,
        message=(
            f"Time slot already booked ({start}-{end}) by {owner.display_name}. "
            f"Please choose a different slot."
        ),
        details={
            "conflicting_booking_id": str(existing.id),
            "owner": owner.display_name,
            "start_time": start,
            "end_time": end,
        },
    )


def validate_slot(
    session: Session,
    *,
    room_id: UUID,
    booking_date: dt.date,
    start: str | time,
    end: str | time,
    persons: Optional[int] = None,
    exclude_id: UUID | None = None,
    rules: BookingRules | None = None,
    today: dt.date | None = None,
) -> SlotViolation | None:
    """Check a candidate slot against the booking rules.

    Returns None when the slot is bookable, otherwise the first violation.
    Only approved bookings block a slot; pending ones are competing demand
    that gets resolved when one of them is approved.
    """
    rules = rules or settings.booking_rules
    today = today or clock.now().date()

    try:
        start_t, end_t = parse_clock(start), parse_clock(end)
    except (TypeError, ValueError):
        return SlotViolation(SlotViolationCode.INVALID_TIME, "Invalid times.")
    if start_t >= end_t:
        return SlotViolation(
            SlotViolationCode.END_BEFORE_START, "End must be after start."
        )

    if start_t < rules.office_start or end_t > rules.office_end:
        return SlotViolation(
            SlotViolationCode.OUTSIDE_OFFICE_HOURS,
            f"Office hours: {format_clock(rules.office_start)} to "
            f"{format_clock(rules.office_end)} only.",
        )

    duration = to_minutes(end_t) - to_minutes(start_t)
    if duration < rules.min_slot_minutes:
        return SlotViolation(
            SlotViolationCode.SLOT_TOO_SHORT,
            f"Minimum {rules.min_slot_minutes} minutes.",
        )

    if booking_date < today:
        return SlotViolation(SlotViolationCode.DATE_IN_PAST, "Cannot book in the past.")

    room = session.get(Room, room_id)
    if not room:
        return SlotViolation(SlotViolationCode.ROOM_NOT_FOUND, "Room not found.")
    if room.is_blocked:
        return SlotViolation(
            SlotViolationCode.ROOM_BLOCKED, "Room is currently blocked."
        )

    if duration > room.max_duration_minutes:
        return SlotViolation(
            SlotViolationCode.EXCEEDS_MAX_DURATION,
            f"Exceeds max {room.max_duration_minutes / 60:g}h for this room.",
            {"max_duration_minutes": room.max_duration_minutes},
        )

    if persons is not None and persons > room.capacity:
        return SlotViolation(
            SlotViolationCode.EXCEEDS_CAPACITY,
            f"Exceeds room capacity ({room.capacity}).",
            {"capacity": room.capacity},
        )

    existing = find_approved_overlap(
        session,
        room_id=room_id,
        booking_date=booking_date,
        start=start_t,
        end=end_t,
        exclude_id=exclude_id,
    )
    if existing:
        return conflict_violation(*existing)

    return None
