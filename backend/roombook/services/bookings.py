"""Booking lifecycle.

pending -> approved | rejected, pending | approved -> cancelled. Rejected and
cancelled are terminal. Every transition runs inside one unit of work that
holds the room lock, so an overlap check and the write that depends on it
cannot interleave with another request for the same room.
"""

from __future__ import annotations

import datetime as dt
import logging
import secrets
from calendar import monthrange
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Optional
from uuid import UUID

from sqlalchemy import func
from sqlmodel import Session, or_, select

from roombook.core import clock
from roombook.core.config import BookingRules, settings
from roombook.core.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    StateError,
    ValidationError,
)
from roombook.db import UnitOfWork, unit_of_work
from roombook.models import Booking, BookingStatus, MeetingType, Room, User
from roombook.schemas.booking import BookingCreate, Recurrence
from roombook.services.events import (
    Audience,
    EventKind,
    EventSink,
    booking_event,
)
from roombook.services.slots import (
    conflict_violation,
    find_approved_overlap,
    parse_clock,
    validate_slot,
)
from roombook.services.waitlist import on_slot_freed

logger = logging.getLogger(__name__)

CASCADE_REJECTION_REASON = "Slot was taken by another approved booking for the same time."


@dataclass
class SeriesResult:
    created: List[Booking]
    requested_count: int
    skipped_dates: List[dt.date] = field(default_factory=list)
    recurring_group: Optional[str] = None


@dataclass
class ApprovalResult:
    approved: Booking
    auto_rejected: List[Booking]


def lock_room(session: Session, room_id: UUID) -> Room | None:
    """Take the row lock that serializes writers for one room."""
    return session.exec(
        select(Room).where(Room.id == room_id).with_for_update()
    ).first()


def _load_booking(session: Session, booking_id: UUID) -> Booking:
    booking = session.get(Booking, booking_id)
    if not booking:
        raise NotFoundError("Booking not found", "booking_not_found")
    return booking


def _load_locked_booking(session: Session, booking_id: UUID) -> Booking:
    booking = _load_booking(session, booking_id)
    lock_room(session, booking.room_id)
    # Another transaction may have moved it before we got the lock
    session.refresh(booking)
    return booking


def ensure_can_manage(actor: User, owner_id: UUID) -> None:
    if not actor.is_admin and actor.id != owner_id:
        raise AuthorizationError("Forbidden", "forbidden")


def initial_status(meeting_type: str) -> str:
    if meeting_type == MeetingType.EXTERNAL:
        return BookingStatus.PENDING
    return BookingStatus.APPROVED


def series_dates(
    start: dt.date,
    recurrence: str,
    until: dt.date | None,
    limit: int,
) -> List[dt.date]:
    dates = [start]
    if recurrence == Recurrence.NONE or until is None:
        return dates

    step = timedelta(days=1 if recurrence == Recurrence.DAILY else 7)
    current = start + step
    while current <= until and len(dates) < limit:
        dates.append(current)
        current += step
    return dates


def _check_request(payload: BookingCreate) -> None:
    if (
        payload.meeting_type == MeetingType.EXTERNAL
        and payload.food
        and not payload.food_preference
    ):
        raise ValidationError(
            "Food preference required when food is requested",
            "food_preference_required",
        )


def _emit_approved(uow: UnitOfWork, booking: Booking) -> None:
    uow.emit(booking_event(EventKind.BOOKING_APPROVED, booking))
    uow.emit(booking_event(EventKind.CALENDAR_SYNC_REQUESTED, booking))


def _insert_occurrence(
    session: Session,
    payload: BookingCreate,
    owner: User,
    occurrence_date: dt.date,
    *,
    recurring_group: str | None,
    sink: EventSink | None,
    now: datetime,
    rules: BookingRules,
) -> Booking:
    with unit_of_work(session, sink) as uow:
        lock_room(session, payload.room_id)
        violation = validate_slot(
            session,
            room_id=payload.room_id,
            booking_date=occurrence_date,
            start=payload.start_time,
            end=payload.end_time,
            persons=payload.persons,
            rules=rules,
            today=now.date(),
        )
        if violation:
            raise violation.to_error()

        status = initial_status(payload.meeting_type)
        booking = Booking(
            user_id=owner.id,
            room_id=payload.room_id,
            date=occurrence_date,
            start_time=parse_clock(payload.start_time),
            end_time=parse_clock(payload.end_time),
            meeting_type=payload.meeting_type,
            purpose=payload.purpose,
            persons=payload.persons,
            food=payload.food,
            food_preference=payload.food_preference,
            remarks=payload.remarks,
            guest_emails=list(payload.guest_emails),
            status=status,
            approved_at=now if status == BookingStatus.APPROVED else None,
            recurring_group=recurring_group,
        )
        session.add(booking)
        session.flush()

        uow.emit(
            booking_event(
                EventKind.BOOKING_CREATED,
                booking,
                audience=Audience.ADMINS,
                owner_name=owner.display_name,
            )
        )
        uow.emit(
            booking_event(
                EventKind.CHECKIN_ISSUED, booking, checkin_token=booking.checkin_token
            )
        )
        if status == BookingStatus.APPROVED:
            _emit_approved(uow, booking)

    logger.info(
        f"Booking {booking.id} created as {booking.status} for room {booking.room_id} "
        f"on {booking.date} {booking.start_time}-{booking.end_time}"
    )
    return booking


def create_booking(
    session: Session,
    payload: BookingCreate,
    owner: User,
    *,
    sink: EventSink | None = None,
    now: datetime | None = None,
    rules: BookingRules | None = None,
) -> Booking:
    """Create a single booking. Internal meetings are approved immediately."""
    _check_request(payload)
    return _insert_occurrence(
        session,
        payload,
        owner,
        payload.date,
        recurring_group=None,
        sink=sink,
        now=now or clock.now(),
        rules=rules or settings.booking_rules,
    )


def create_recurring_series(
    session: Session,
    payload: BookingCreate,
    owner: User,
    *,
    sink: EventSink | None = None,
    now: datetime | None = None,
    rules: BookingRules | None = None,
) -> SeriesResult:
    """Expand a request into dated occurrences and book each independently.

    The base date must succeed or nothing is created. Later occurrences that
    fail validation are skipped and reported, each one committed on its own.
    """
    _check_request(payload)
    now = now or clock.now()
    rules = rules or settings.booking_rules

    dates = series_dates(
        payload.date,
        payload.recurrence,
        payload.recurrence_end,
        rules.max_series_occurrences,
    )
    recurring_group = secrets.token_hex(20) if payload.is_recurring else None

    options = dict(recurring_group=recurring_group, sink=sink, now=now, rules=rules)
    created = [_insert_occurrence(session, payload, owner, dates[0], **options)]
    skipped: List[dt.date] = []

    for occurrence_date in dates[1:]:
        try:
            created.append(
                _insert_occurrence(session, payload, owner, occurrence_date, **options)
            )
        except (ValidationError, ConflictError) as exc:
            logger.info(f"Skipping occurrence on {occurrence_date}: {exc.message}")
            skipped.append(occurrence_date)

    return SeriesResult(
        created=created,
        requested_count=len(dates),
        skipped_dates=skipped,
        recurring_group=recurring_group,
    )


def approve(
    session: Session,
    booking_id: UUID,
    *,
    sink: EventSink | None = None,
    now: datetime | None = None,
) -> ApprovalResult:
    """Approve a pending booking and reject the pending ones it overlaps."""
    now = now or clock.now()
    with unit_of_work(session, sink) as uow:
        booking = _load_locked_booking(session, booking_id)
        if booking.status != BookingStatus.PENDING:
            raise StateError("Booking is not pending", "not_pending")

        existing = find_approved_overlap(
            session,
            room_id=booking.room_id,
            booking_date=booking.date,
            start=booking.start_time,
            end=booking.end_time,
            exclude_id=booking.id,
        )
        if existing:
            raise conflict_violation(*existing).to_error()

        booking.status = BookingStatus.APPROVED
        booking.approved_at = now
        booking.touch()
        session.add(booking)
        _emit_approved(uow, booking)

        competitors = session.exec(
            select(Booking)
            .where(
                Booking.room_id == booking.room_id,
                Booking.date == booking.date,
                Booking.status == BookingStatus.PENDING,
                Booking.id != booking.id,
                Booking.start_time < booking.end_time,
                Booking.end_time > booking.start_time,
            )
            .order_by(Booking.created_at)
        ).all()

        auto_rejected: List[Booking] = []
        for competitor in competitors:
            competitor.status = BookingStatus.REJECTED
            competitor.rejection_reason = CASCADE_REJECTION_REASON
            competitor.touch()
            session.add(competitor)
            uow.emit(booking_event(EventKind.BOOKING_AUTO_REJECTED, competitor))
            auto_rejected.append(competitor)

    logger.info(
        f"Booking {booking.id} approved; {len(auto_rejected)} competing requests rejected"
    )
    return ApprovalResult(approved=booking, auto_rejected=auto_rejected)


def reject(
    session: Session,
    booking_id: UUID,
    reason: str,
    *,
    sink: EventSink | None = None,
) -> Booking:
    if not reason or not reason.strip():
        raise ValidationError("Rejection reason required", "rejection_reason_required")

    with unit_of_work(session, sink) as uow:
        booking = _load_locked_booking(session, booking_id)
        if booking.status != BookingStatus.PENDING:
            raise StateError("Booking is not pending", "not_pending")

        booking.status = BookingStatus.REJECTED
        booking.rejection_reason = reason.strip()
        booking.touch()
        session.add(booking)
        uow.emit(booking_event(EventKind.BOOKING_REJECTED, booking))
        on_slot_freed(
            uow,
            room_id=booking.room_id,
            booking_date=booking.date,
            start=booking.start_time,
            end=booking.end_time,
        )

    logger.info(f"Booking {booking.id} rejected")
    return booking


def _cancel_in_unit(uow: UnitOfWork, booking: Booking) -> None:
    booking.status = BookingStatus.CANCELLED
    booking.touch()
    uow.session.add(booking)
    uow.emit(booking_event(EventKind.BOOKING_CANCELLED, booking))
    on_slot_freed(
        uow,
        room_id=booking.room_id,
        booking_date=booking.date,
        start=booking.start_time,
        end=booking.end_time,
    )


def cancel(
    session: Session,
    booking_id: UUID,
    actor: User,
    *,
    sink: EventSink | None = None,
    now: datetime | None = None,
) -> Booking:
    """Cancel a pending or approved booking.

    Owners may cancel until the meeting starts; admins at any time.
    """
    now = now or clock.now()
    with unit_of_work(session, sink) as uow:
        booking = _load_locked_booking(session, booking_id)
        ensure_can_manage(actor, booking.user_id)
        if booking.status not in BookingStatus.ACTIVE:
            raise StateError("Cannot cancel this booking", "not_cancellable")
        if not actor.is_admin and now >= booking.starts_at:
            raise StateError("Meeting already started.", "meeting_started")
        _cancel_in_unit(uow, booking)

    logger.info(f"Booking {booking.id} cancelled by {actor.id}")
    return booking


def cancel_series(
    session: Session,
    booking_id: UUID,
    actor: User,
    *,
    sink: EventSink | None = None,
    now: datetime | None = None,
) -> List[Booking]:
    """Cancel every upcoming occurrence of the series ``booking_id`` belongs to."""
    now = now or clock.now()
    with unit_of_work(session, sink) as uow:
        booking = _load_locked_booking(session, booking_id)
        if not booking.recurring_group:
            raise ValidationError("Not a recurring booking", "not_recurring")
        ensure_can_manage(actor, booking.user_id)

        occurrences = session.exec(
            select(Booking)
            .where(
                Booking.recurring_group == booking.recurring_group,
                Booking.status.in_(BookingStatus.ACTIVE),
                Booking.date >= now.date(),
            )
            .order_by(Booking.date)
        ).all()

        cancelled: List[Booking] = []
        for occurrence in occurrences:
            if not actor.is_admin and now >= occurrence.starts_at:
                continue
            _cancel_in_unit(uow, occurrence)
            cancelled.append(occurrence)

    logger.info(
        f"Cancelled {len(cancelled)} occurrences of series {booking.recurring_group}"
    )
    return cancelled


def get_booking(session: Session, booking_id: UUID, actor: User) -> Booking:
    booking = _load_booking(session, booking_id)
    ensure_can_manage(actor, booking.user_id)
    return booking


def list_bookings(
    session: Session,
    actor: User,
    *,
    room_id: UUID | None = None,
    status: str | None = None,
    meeting_type: str | None = None,
    booking_date: dt.date | None = None,
    q: str | None = None,
) -> List[Booking]:
    """Admins see every booking, everyone else only their own."""
    statement = select(Booking).join(User, Booking.user_id == User.id)
    if not actor.is_admin:
        statement = statement.where(Booking.user_id == actor.id)
    if room_id:
        statement = statement.where(Booking.room_id == room_id)
    if status:
        statement = statement.where(Booking.status == status)
    if meeting_type:
        statement = statement.where(Booking.meeting_type == meeting_type)
    if booking_date:
        statement = statement.where(Booking.date == booking_date)
    if q:
        like = f"%{q}%"
        statement = statement.where(
            or_(
                Booking.purpose.ilike(like),
                User.full_name.ilike(like),
                User.email.ilike(like),
            )
        )
    statement = statement.order_by(Booking.date.desc(), Booking.start_time.desc())
    return list(session.exec(statement).all())


def pending_count(session: Session) -> int:
    return session.exec(
        select(func.count()).select_from(Booking).where(
            Booking.status == BookingStatus.PENDING
        )
    ).one()


def calendar_view(
    session: Session,
    *,
    year: int | None = None,
    month: int | None = None,
) -> List[Booking]:
    """Bookings that still occupy or claim a slot, for the shared calendar."""
    statement = select(Booking).where(Booking.status.in_(BookingStatus.ACTIVE))
    if year and month:
        first = dt.date(year, month, 1)
        last = dt.date(year, month, monthrange(year, month)[1])
        statement = statement.where(Booking.date >= first, Booking.date <= last)
    statement = statement.order_by(Booking.date, Booking.start_time)
    return list(session.exec(statement).all())
