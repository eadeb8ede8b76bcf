from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class Room(SQLModel, table=True):
    """Meeting room available for booking."""

    __tablename__ = "rooms"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    name: str = Field(max_length=255)
    description: Optional[str] = Field(default=None, max_length=500)
    capacity: int = Field(default=10, ge=1)
    max_duration_minutes: int = Field(default=240, ge=15)
    location: Optional[str] = Field(default=None, max_length=255)
    amenities: List[str] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    is_blocked: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)

    def touch(self) -> None:
        self.updated_at = datetime.utcnow()
