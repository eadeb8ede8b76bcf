from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class UserRole:
    EMPLOYEE = "employee"
    ADMIN = "admin"


class User(SQLModel, table=True):
    """Local mirror of a user from the identity provider."""

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True, index=True)
    email: str = Field(index=True, unique=True, max_length=255)
    full_name: Optional[str] = Field(default=None, max_length=255)
    is_active: bool = Field(default=True)
    role: str = Field(default=UserRole.EMPLOYEE, max_length=50)
    created_at: datetime = Field(default_factory=datetime.utcnow, nullable=False)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def display_name(self) -> str:
        return self.full_name or self.email
