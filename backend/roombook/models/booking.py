from __future__ import annotations

import datetime as dt
import secrets
from datetime import datetime, time
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class BookingStatus:
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    ACTIVE = (PENDING, APPROVED)


class MeetingType:
    INTERNAL = "internal"
    EXTERNAL = "external"


def generate_checkin_token() -> str:
    return secrets.token_hex(20)


class Booking(SQLModel, table=True):
    """Reservation of a room for a time range on one civil date."""

    __tablename__ = "bookings"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    room_id: UUID = Field(foreign_key="rooms.id", nullable=False, index=True)
    date: dt.date = Field(nullable=False, index=True)
    start_time: time = Field(nullable=False)
    end_time: time = Field(nullable=False)
    meeting_type: str = Field(default=MeetingType.INTERNAL, max_length=20)
    purpose: str = Field(max_length=500)
    persons: Optional[int] = Field(default=None, ge=1)
    food: bool = Field(default=False)
    food_preference: Optional[str] = Field(default=None, max_length=50)
    remarks: Optional[str] = Field(default=None, max_length=1000)
    guest_emails: List[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    status: str = Field(default=BookingStatus.PENDING, max_length=20, index=True)
    rejection_reason: Optional[str] = Field(default=None, max_length=500)
    approved_at: Optional[datetime] = Field(default=None, nullable=True)
    recurring_group: Optional[str] = Field(
        default=None, max_length=64, index=True, nullable=True
    )
    # Latches below are written only through services, never by general update
    checkin_token: str = Field(
        default_factory=generate_checkin_token, max_length=64, unique=True, index=True
    )
    checkin_at: Optional[datetime] = Field(default=None, nullable=True)
    reminder_sent: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.date, self.start_time)

    @property
    def ends_at(self) -> datetime:
        return datetime.combine(self.date, self.end_time)

    def touch(self) -> None:
        self.updated_at = datetime.utcnow()
