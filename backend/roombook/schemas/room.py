from __future__ import annotations

import datetime as dt
from datetime import datetime, time
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from .booking import BookingRead


class RoomBase(BaseModel):
    name: str = Field(max_length=255)
    description: Optional[str] = Field(default=None, max_length=500)
    capacity: int = Field(default=10, ge=1)
    max_duration_minutes: int = Field(default=240, ge=15)
    location: Optional[str] = Field(default=None, max_length=255)
    amenities: List[str] = Field(default_factory=list)


class RoomCreate(RoomBase):
    pass


class RoomUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = Field(default=None, max_length=500)
    capacity: Optional[int] = Field(default=None, ge=1)
    max_duration_minutes: Optional[int] = Field(default=None, ge=15)
    location: Optional[str] = Field(default=None, max_length=255)
    amenities: Optional[List[str]] = None

    @field_validator("name", "capacity", "max_duration_minutes", "amenities")
    @classmethod
    def reject_null(cls, value):
        # Omit a field to leave it unchanged; these columns cannot be cleared
        if value is None:
            raise ValueError("may not be null")
        return value


class RoomRead(RoomBase):
    id: UUID
    is_blocked: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class HourlySlotRead(BaseModel):
    start: time
    end: time
    free: bool
    pending_requests: int

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("start", "end")
    def serialize_clock(self, value: time) -> str:
        return value.strftime("%H:%M")


class RoomAvailability(BaseModel):
    room_id: UUID
    date: dt.date
    slots: List[HourlySlotRead]
    bookings: List[BookingRead] = []
