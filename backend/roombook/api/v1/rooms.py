from __future__ import annotations

import datetime as dt
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlmodel import select

from roombook.api.deps import get_current_user, require_admin
from roombook.db import SessionDep
from roombook.models import Room, User
from roombook.schemas import (
    BookingRead,
    HourlySlotRead,
    RoomAvailability,
    RoomCreate,
    RoomRead,
    RoomUpdate,
)
from roombook.services import rooms as room_service

router = APIRouter()


@router.get("/", response_model=List[RoomRead], summary="List rooms")
def list_rooms(
    session: SessionDep,
    current_user: User = Depends(get_current_user),
    include_blocked: bool = Query(default=True),
) -> List[Room]:
    statement = select(Room)
    if not include_blocked:
        statement = statement.where(Room.is_blocked == False)  # noqa: E712
    return session.exec(statement.order_by(Room.name)).all()


@router.post(
    "/",
    response_model=RoomRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create room",
)
def create_room(
    payload: RoomCreate,
    session: SessionDep,
    current_user: User = Depends(require_admin),
) -> Room:
    room = Room(**payload.model_dump())
    session.add(room)
    session.commit()
    session.refresh(room)
    return room


@router.get("/{room_id}", response_model=RoomRead, summary="Get room by id")
def get_room(
    room_id: UUID,
    session: SessionDep,
    current_user: User = Depends(get_current_user),
) -> Room:
    return room_service.get_room(session, room_id)


@router.patch("/{room_id}", response_model=RoomRead, summary="Update room")
def update_room(
    room_id: UUID,
    payload: RoomUpdate,
    session: SessionDep,
    current_user: User = Depends(require_admin),
) -> Room:
    room = room_service.get_room(session, room_id)
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(room, field, value)
    room.touch()
    session.add(room)
    session.commit()
    session.refresh(room)
    return room


@router.patch(
    "/{room_id}/toggle-block", response_model=RoomRead, summary="Block or unblock room"
)
def toggle_block(
    room_id: UUID,
    session: SessionDep,
    current_user: User = Depends(require_admin),
) -> Room:
    room = room_service.get_room(session, room_id)
    room.is_blocked = not room.is_blocked
    room.touch()
    session.add(room)
    session.commit()
    session.refresh(room)
    return room


@router.delete(
    "/{room_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete room"
)
def delete_room(
    room_id: UUID,
    session: SessionDep,
    current_user: User = Depends(require_admin),
) -> Response:
    room_service.delete_room(session, room_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/{room_id}/availability",
    response_model=RoomAvailability,
    summary="Hourly availability for a date",
)
def get_room_availability(
    room_id: UUID,
    session: SessionDep,
    date: dt.date = Query(..., description="Date to check (YYYY-MM-DD)"),
    current_user: User = Depends(get_current_user),
) -> RoomAvailability:
    slots, bookings = room_service.room_availability(session, room_id, date)
    return RoomAvailability(
        room_id=room_id,
        date=date,
        slots=[HourlySlotRead.model_validate(slot) for slot in slots],
        bookings=[BookingRead.model_validate(booking) for booking in bookings],
    )
