from __future__ import annotations

import datetime as dt
from datetime import datetime, time
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class WaitlistEntryCreate(BaseModel):
    room_id: UUID
    date: dt.date
    start_time: str = Field(description="HH:MM")
    end_time: str = Field(description="HH:MM")
    purpose: Optional[str] = Field(default=None, max_length=500)


class WaitlistEntryRead(BaseModel):
    id: UUID
    user_id: UUID
    room_id: UUID
    date: dt.date
    start_time: time
    end_time: time
    purpose: Optional[str] = None
    notified: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("start_time", "end_time")
    def serialize_clock(self, value: time) -> str:
        return value.strftime("%H:%M")
