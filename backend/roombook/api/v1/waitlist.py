from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from roombook.api.deps import get_current_user
from roombook.db import SessionDep
from roombook.models import User, WaitlistEntry
from roombook.schemas import WaitlistEntryCreate, WaitlistEntryRead
from roombook.services import waitlist as waitlist_service

router = APIRouter()


@router.get("/", response_model=List[WaitlistEntryRead], summary="List waitlist entries")
def list_waitlist(
    session: SessionDep,
    current_user: User = Depends(get_current_user),
) -> List[WaitlistEntry]:
    return waitlist_service.list_entries(session, current_user)


@router.post(
    "/",
    response_model=WaitlistEntryRead,
    status_code=status.HTTP_201_CREATED,
    summary="Join the waitlist for a slot",
)
def join_waitlist(
    payload: WaitlistEntryCreate,
    session: SessionDep,
    current_user: User = Depends(get_current_user),
) -> WaitlistEntry:
    return waitlist_service.register_entry(session, payload, current_user)


@router.delete(
    "/{entry_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Leave the waitlist",
)
def leave_waitlist(
    entry_id: UUID,
    session: SessionDep,
    current_user: User = Depends(get_current_user),
) -> Response:
    waitlist_service.remove_entry(session, entry_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
