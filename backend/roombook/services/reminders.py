"""Query interface for the external reminder scanner."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import List
from uuid import UUID

from sqlalchemy import update
from sqlmodel import Session, select

from roombook.core.config import settings
from roombook.db import unit_of_work
from roombook.models import Booking, BookingStatus
from roombook.services.slots import to_minutes


def due_for_reminder(
    session: Session,
    now: datetime,
    lead_minutes: int | None = None,
) -> List[Booking]:
    """Approved bookings starting about ``lead_minutes`` from now, not yet reminded.

    The scanner runs once a minute, so a start within one minute of the
    target counts as due.
    """
    if lead_minutes is None:
        lead_minutes = settings.REMINDER_LEAD_MINUTES
    target = now + timedelta(minutes=lead_minutes)

    candidates = session.exec(
        select(Booking)
        .where(
            Booking.date == target.date(),
            Booking.status == BookingStatus.APPROVED,
            Booking.reminder_sent == False,  # noqa: E712
        )
        .order_by(Booking.start_time)
    ).all()
    target_minutes = to_minutes(target.time())
    return [
        booking
        for booking in candidates
        if abs(to_minutes(booking.start_time) - target_minutes) <= 1
    ]


def mark_reminder_sent(session: Session, booking_id: UUID) -> bool:
    """Set the ``reminder_sent`` latch. Returns True only for the call that set it."""
    with unit_of_work(session):
        result = session.exec(
            update(Booking)
            .where(Booking.id == booking_id, Booking.reminder_sent == False)  # noqa: E712
            .values(reminder_sent=True)
        )
    return result.rowcount == 1
