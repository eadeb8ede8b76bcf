from datetime import datetime
from typing import Callable

from fastapi import APIRouter, Depends, Request

from roombook.api.deps import get_clock
from roombook.core.config import settings
from roombook.core.limiter import limiter
from roombook.db import SessionDep
from roombook.schemas import CheckInRead
from roombook.services.checkin import check_in

router = APIRouter()


@router.get("/{token}", response_model=CheckInRead, summary="Check in by QR token")
@limiter.limit(settings.CHECKIN_RATE_LIMIT)
def check_in_by_token(
    request: Request,
    token: str,
    session: SessionDep,
    now: Callable[[], datetime] = Depends(get_clock),
) -> CheckInRead:
    """Public endpoint behind the QR code. The token is the credential."""
    result = check_in(session, token, now=now())
    return CheckInRead(
        first_time=result.first_time,
        booking_id=result.booking.id,
        room_id=result.booking.room_id,
        purpose=result.booking.purpose,
        checkin_at=result.checkin_at,
        message="Checked in." if result.first_time else "Already checked in.",
    )
