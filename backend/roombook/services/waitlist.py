"""Waitlist for rooms.

When a booking leaves the approved set its slot may satisfy people waiting
for that room and date. Waiters are told once; being told is not a
reservation, the slot still goes to whoever books it first.
"""

from __future__ import annotations

import datetime as dt
import logging
from datetime import time
from typing import List
from uuid import UUID

from sqlalchemy import update
from sqlmodel import Session, select

from roombook.core.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from roombook.db import UnitOfWork
from roombook.models import Room, User, WaitlistEntry
from roombook.schemas.waitlist import WaitlistEntryCreate
from roombook.services.events import waitlist_event
from roombook.services.slots import overlaps, parse_clock

logger = logging.getLogger(__name__)


def _latch_notified(session: Session, entry: WaitlistEntry) -> bool:
    """Set the ``notified`` latch. Returns False if it was already set."""
    result = session.exec(
        update(WaitlistEntry)
        .where(WaitlistEntry.id == entry.id, WaitlistEntry.notified == False)  # noqa: E712
        .values(notified=True)
    )
    return result.rowcount == 1


def on_slot_freed(
    uow: UnitOfWork,
    *,
    room_id: UUID,
    booking_date: dt.date,
    start: time,
    end: time,
) -> List[WaitlistEntry]:
    """Notify un-notified waiters whose desired range overlaps the freed one.

    Runs inside the unit of work of the cancellation or rejection, earliest
    entry first.
    """
    session = uow.session
    waiters = session.exec(
        select(WaitlistEntry)
        .where(
            WaitlistEntry.room_id == room_id,
            WaitlistEntry.date == booking_date,
            WaitlistEntry.notified == False,  # noqa: E712
        )
        .order_by(WaitlistEntry.created_at)
    ).all()

    matched: List[WaitlistEntry] = []
    for entry in waiters:
        if not overlaps(entry.start_time, entry.end_time, start, end):
            continue
        if not _latch_notified(session, entry):
            continue
        uow.emit(waitlist_event(entry, freed_start=start, freed_end=end))
        matched.append(entry)

    if matched:
        logger.info(
            f"Slot freed in room {room_id} on {booking_date}: "
            f"notified {len(matched)} waitlist entries"
        )
    return matched


def register_entry(
    session: Session,
    payload: WaitlistEntryCreate,
    owner: User,
) -> WaitlistEntry:
    try:
        start, end = parse_clock(payload.start_time), parse_clock(payload.end_time)
    except (TypeError, ValueError):
        raise ValidationError("Invalid times.", "invalid_time") from None
    if start >= end:
        raise ValidationError("End must be after start.", "end_before_start")

    if not session.get(Room, payload.room_id):
        raise NotFoundError("Room not found.", "room_not_found")

    existing = session.exec(
        select(WaitlistEntry).where(
            WaitlistEntry.user_id == owner.id,
            WaitlistEntry.room_id == payload.room_id,
            WaitlistEntry.date == payload.date,
            WaitlistEntry.start_time == start,
            WaitlistEntry.end_time == end,
        )
    ).first()
    if existing:
        raise ConflictError(
            "You are already on the waitlist for this slot.", "already_waitlisted"
        )

    entry = WaitlistEntry(
        user_id=owner.id,
        room_id=payload.room_id,
        date=payload.date,
        start_time=start,
        end_time=end,
        purpose=payload.purpose,
    )
    session.add(entry)
    session.commit()
    session.refresh(entry)
    logger.info(f"User {owner.id} joined waitlist for room {entry.room_id} on {entry.date}")
    return entry


def list_entries(session: Session, actor: User) -> List[WaitlistEntry]:
    """Own entries, or every entry for admins. Newest first."""
    statement = select(WaitlistEntry)
    if not actor.is_admin:
        statement = statement.where(WaitlistEntry.user_id == actor.id)
    statement = statement.order_by(WaitlistEntry.created_at.desc())
    return list(session.exec(statement).all())


def remove_entry(session: Session, entry_id: UUID, actor: User) -> None:
    entry = session.get(WaitlistEntry, entry_id)
    if not entry:
        raise NotFoundError("Waitlist entry not found", "waitlist_entry_not_found")
    if not actor.is_admin and entry.user_id != actor.id:
        raise AuthorizationError("Forbidden", "forbidden")
    session.delete(entry)
    session.commit()
