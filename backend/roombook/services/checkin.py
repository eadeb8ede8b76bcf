"""Check-in by token.

The token printed into the QR link is the only credential. It resolves to a
booking and may set that booking's ``checkin_at`` once, inside the window
from shortly before the start until the end of the meeting.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy import update
from sqlmodel import Session, select

from roombook.core import clock
from roombook.core.config import BookingRules, settings
from roombook.core.errors import NotFoundError, StateError
from roombook.db import unit_of_work
from roombook.models import Booking, BookingStatus
from roombook.services.slots import format_clock

logger = logging.getLogger(__name__)


@dataclass
class CheckInResult:
    first_time: bool
    booking: Booking
    checkin_at: datetime


def lookup_by_token(session: Session, token: str) -> Booking:
    booking = session.exec(
        select(Booking).where(Booking.checkin_token == token)
    ).first()
    if not booking:
        raise NotFoundError("Invalid check-in link", "invalid_checkin_link")
    return booking


def checkin_link(booking: Booking) -> str:
    return f"{settings.APP_URL.rstrip('/')}/checkin/{booking.checkin_token}"


def _latch_checkin(session: Session, booking: Booking, at: datetime) -> bool:
    """Set ``checkin_at``. Returns False if someone else set it first."""
    result = session.exec(
        update(Booking)
        .where(Booking.id == booking.id, Booking.checkin_at.is_(None))
        .values(checkin_at=at)
    )
    return result.rowcount == 1


def check_in(
    session: Session,
    token: str,
    *,
    now: datetime | None = None,
    rules: BookingRules | None = None,
) -> CheckInResult:
    now = now or clock.now()
    rules = rules or settings.booking_rules

    with unit_of_work(session):
        booking = lookup_by_token(session, token)
        if booking.checkin_at:
            return CheckInResult(False, booking, booking.checkin_at)

        opens_at = booking.starts_at - timedelta(minutes=rules.checkin_early_minutes)
        if now < opens_at:
            raise StateError(
                f"Too early. Check-in opens at {format_clock(opens_at.time())} "
                f"({rules.checkin_early_minutes} min before {format_clock(booking.start_time)}).",
                "checkin_too_early",
                {"opens_at": opens_at.isoformat()},
            )
        if now > booking.ends_at:
            raise StateError("Meeting has already ended.", "meeting_ended")
        if booking.status != BookingStatus.APPROVED:
            raise StateError("Booking is not approved.", "booking_not_approved")

        if not _latch_checkin(session, booking, now):
            session.refresh(booking)
            return CheckInResult(False, booking, booking.checkin_at)

    logger.info(f"Booking {booking.id} checked in at {now}")
    return CheckInResult(True, booking, now)
