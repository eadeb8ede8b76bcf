from __future__ import annotations

import datetime as dt
from datetime import datetime, time
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


class Recurrence:
    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"


class BookingBase(BaseModel):
    room_id: UUID
    date: dt.date
    start_time: str = Field(description="HH:MM")
    end_time: str = Field(description="HH:MM")
    meeting_type: Literal["internal", "external"] = "internal"
    purpose: str = Field(min_length=1, max_length=500)
    persons: Optional[int] = Field(default=None, ge=1)
    food: bool = False
    food_preference: Optional[Literal["veg", "non-veg", "both"]] = None
    remarks: Optional[str] = Field(default=None, max_length=1000)
    guest_emails: List[str] = Field(default_factory=list)

    @field_validator("guest_emails")
    @classmethod
    def clean_guest_emails(cls, value: List[str]) -> List[str]:
        return [email.strip() for email in value if email and email.strip()]


class BookingCreate(BookingBase):
    recurrence: Literal["none", "daily", "weekly"] = Recurrence.NONE
    recurrence_end: Optional[dt.date] = None

    @field_validator("recurrence_end")
    @classmethod
    def check_recurrence_end(cls, value, info):
        booking_date = info.data.get("date")
        if value and booking_date and value < booking_date:
            raise ValueError("recurrence_end must not be before date")
        return value

    @property
    def is_recurring(self) -> bool:
        return self.recurrence != Recurrence.NONE and self.recurrence_end is not None


class BookingRead(BaseModel):
    id: UUID
    user_id: UUID
    room_id: UUID
    date: dt.date
    start_time: time
    end_time: time
    meeting_type: str
    purpose: str
    persons: Optional[int] = None
    food: bool
    food_preference: Optional[str] = None
    remarks: Optional[str] = None
    guest_emails: List[str] = []
    status: str
    rejection_reason: Optional[str] = None
    approved_at: Optional[datetime] = None
    recurring_group: Optional[str] = None
    checkin_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("start_time", "end_time")
    def serialize_clock(self, value: time) -> str:
        return value.strftime("%H:%M")


class SeriesRead(BaseModel):
    booking: BookingRead
    recurring_count: int
    recurring_ids: List[UUID]
    requested_count: int
    skipped_dates: List[dt.date] = []


class ApprovalRead(BaseModel):
    booking: BookingRead
    auto_rejected_ids: List[UUID] = []


class RejectRequest(BaseModel):
    reason: str = Field(min_length=1, max_length=500)


class CancelSeriesRead(BaseModel):
    cancelled_count: int
    cancelled_ids: List[UUID]


class SlotCheckRequest(BaseModel):
    room_id: UUID
    date: dt.date
    start_time: str
    end_time: str
    persons: Optional[int] = Field(default=None, ge=1)
    exclude_id: Optional[UUID] = None


class SlotCheckResponse(BaseModel):
    ok: bool
    code: Optional[str] = None
    message: Optional[str] = None
    details: dict = {}


class PendingCount(BaseModel):
    count: int


class CheckInLink(BaseModel):
    url: str
    token: str


class CheckInRead(BaseModel):
    first_time: bool
    booking_id: UUID
    room_id: UUID
    purpose: str
    checkin_at: datetime
    message: str
