from __future__ import annotations

import datetime as dt
from datetime import datetime
from typing import Callable, List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from roombook.api.deps import get_clock, get_current_user, get_event_sink, require_admin
from roombook.db import SessionDep
from roombook.models import Booking, User
from roombook.schemas import (
    ApprovalRead,
    BookingCreate,
    BookingRead,
    CancelSeriesRead,
    CheckInLink,
    PendingCount,
    RejectRequest,
    SeriesRead,
    SlotCheckRequest,
    SlotCheckResponse,
)
from roombook.services import bookings as booking_service
from roombook.services.checkin import checkin_link
from roombook.services.events import EventSink
from roombook.services.slots import validate_slot

router = APIRouter()


@router.get("/", response_model=List[BookingRead], summary="List bookings")
def list_bookings(
    session: SessionDep,
    current_user: User = Depends(get_current_user),
    room_id: Optional[UUID] = Query(default=None),
    status_filter: Optional[str] = Query(default=None, alias="status"),
    meeting_type: Optional[str] = Query(default=None),
    date: Optional[dt.date] = Query(default=None),
    q: Optional[str] = Query(default=None, description="Search purpose or owner"),
) -> List[Booking]:
    return booking_service.list_bookings(
        session,
        current_user,
        room_id=room_id,
        status=status_filter,
        meeting_type=meeting_type,
        booking_date=date,
        q=q,
    )


@router.post(
    "/",
    response_model=SeriesRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create booking or recurring series",
)
def create_booking(
    payload: BookingCreate,
    session: SessionDep,
    current_user: User = Depends(get_current_user),
    sink: EventSink = Depends(get_event_sink),
    now: Callable[[], datetime] = Depends(get_clock),
) -> SeriesRead:
    result = booking_service.create_recurring_series(
        session, payload, current_user, sink=sink, now=now()
    )
    return SeriesRead(
        booking=BookingRead.model_validate(result.created[0]),
        recurring_count=len(result.created),
        recurring_ids=[booking.id for booking in result.created],
        requested_count=result.requested_count,
        skipped_dates=result.skipped_dates,
    )


@router.post(
    "/validate", response_model=SlotCheckResponse, summary="Check a slot without booking"
)
def check_slot(
    payload: SlotCheckRequest,
    session: SessionDep,
    current_user: User = Depends(get_current_user),
    now: Callable[[], datetime] = Depends(get_clock),
) -> SlotCheckResponse:
    violation = validate_slot(
        session,
        room_id=payload.room_id,
        booking_date=payload.date,
        start=payload.start_time,
        end=payload.end_time,
        persons=payload.persons,
        exclude_id=payload.exclude_id,
        today=now().date(),
    )
    if violation is None:
        return SlotCheckResponse(ok=True)
    return SlotCheckResponse(
        ok=False,
        code=violation.code,
        message=violation.message,
        details=violation.details,
    )


@router.get(
    "/pending-count", response_model=PendingCount, summary="Count pending approvals"
)
def get_pending_count(
    session: SessionDep,
    current_user: User = Depends(require_admin),
) -> PendingCount:
    return PendingCount(count=booking_service.pending_count(session))


@router.get(
    "/calendar", response_model=List[BookingRead], summary="Shared booking calendar"
)
def get_calendar(
    session: SessionDep,
    current_user: User = Depends(get_current_user),
    year: Optional[int] = Query(default=None, ge=2000, le=2100),
    month: Optional[int] = Query(default=None, ge=1, le=12),
) -> List[Booking]:
    return booking_service.calendar_view(session, year=year, month=month)


@router.get("/{booking_id}", response_model=BookingRead, summary="Get booking")
def get_booking(
    booking_id: UUID,
    session: SessionDep,
    current_user: User = Depends(get_current_user),
) -> Booking:
    return booking_service.get_booking(session, booking_id, current_user)


@router.get(
    "/{booking_id}/checkin-link",
    response_model=CheckInLink,
    summary="Get the check-in link for a booking",
)
def get_checkin_link(
    booking_id: UUID,
    session: SessionDep,
    current_user: User = Depends(get_current_user),
) -> CheckInLink:
    booking = booking_service.get_booking(session, booking_id, current_user)
    return CheckInLink(url=checkin_link(booking), token=booking.checkin_token)


@router.patch(
    "/{booking_id}/approve", response_model=ApprovalRead, summary="Approve booking"
)
def approve_booking(
    booking_id: UUID,
    session: SessionDep,
    current_user: User = Depends(require_admin),
    sink: EventSink = Depends(get_event_sink),
    now: Callable[[], datetime] = Depends(get_clock),
) -> ApprovalRead:
    result = booking_service.approve(session, booking_id, sink=sink, now=now())
    return ApprovalRead(
        booking=BookingRead.model_validate(result.approved),
        auto_rejected_ids=[booking.id for booking in result.auto_rejected],
    )


@router.patch(
    "/{booking_id}/reject", response_model=BookingRead, summary="Reject booking"
)
def reject_booking(
    booking_id: UUID,
    payload: RejectRequest,
    session: SessionDep,
    current_user: User = Depends(require_admin),
    sink: EventSink = Depends(get_event_sink),
) -> Booking:
    return booking_service.reject(session, booking_id, payload.reason, sink=sink)


@router.patch(
    "/{booking_id}/cancel", response_model=BookingRead, summary="Cancel booking"
)
def cancel_booking(
    booking_id: UUID,
    session: SessionDep,
    current_user: User = Depends(get_current_user),
    sink: EventSink = Depends(get_event_sink),
    now: Callable[[], datetime] = Depends(get_clock),
) -> Booking:
    return booking_service.cancel(session, booking_id, current_user, sink=sink, now=now())


@router.patch(
    "/{booking_id}/cancel-series",
    response_model=CancelSeriesRead,
    summary="Cancel upcoming occurrences of a series",
)
def cancel_series(
    booking_id: UUID,
    session: SessionDep,
    current_user: User = Depends(get_current_user),
    sink: EventSink = Depends(get_event_sink),
    now: Callable[[], datetime] = Depends(get_clock),
) -> CancelSeriesRead:
    cancelled = booking_service.cancel_series(
        session, booking_id, current_user, sink=sink, now=now()
    )
    return CancelSeriesRead(
        cancelled_count=len(cancelled),
        cancelled_ids=[booking.id for booking in cancelled],
    )
