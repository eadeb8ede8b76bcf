from __future__ import annotations

import datetime as dt
from datetime import datetime, time
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class WaitlistEntry(SQLModel, table=True):
    """A user waiting for a room slot to free up."""

    __tablename__ = "waitlist"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    user_id: UUID = Field(foreign_key="users.id", nullable=False, index=True)
    room_id: UUID = Field(foreign_key="rooms.id", nullable=False, index=True)
    date: dt.date = Field(nullable=False, index=True)
    start_time: time = Field(nullable=False)
    end_time: time = Field(nullable=False)
    purpose: Optional[str] = Field(default=None, max_length=500)
    notified: bool = Field(default=False, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False, index=True)
