from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class NotificationBase(BaseModel):
    type: str
    title: str
    message: str


class NotificationRead(NotificationBase):
    id: UUID
    user_id: UUID
    booking_id: UUID | None
    waitlist_entry_id: UUID | None
    is_read: bool
    created_at: datetime
    read_at: datetime | None

    model_config = {"from_attributes": True}


class UnreadCount(BaseModel):
    count: int
