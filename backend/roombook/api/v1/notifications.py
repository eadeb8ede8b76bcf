from __future__ import annotations

from datetime import datetime
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func
from sqlmodel import select

from roombook.api.deps import get_current_user
from roombook.core.errors import NotFoundError
from roombook.db import SessionDep
from roombook.models import Notification, User
from roombook.schemas import NotificationRead, UnreadCount

router = APIRouter()


@router.get("/", response_model=List[NotificationRead], summary="List notifications")
def list_notifications(
    session: SessionDep,
    current_user: User = Depends(get_current_user),
    unread_only: bool = Query(default=False, description="Show only unread notifications"),
    limit: int = Query(default=50, ge=1, le=100, description="Maximum number of notifications"),
) -> List[Notification]:
    """Get user's notifications."""
    statement = select(Notification).where(Notification.user_id == current_user.id)
    if unread_only:
        statement = statement.where(Notification.is_read == False)  # noqa: E712
    statement = statement.order_by(Notification.created_at.desc()).limit(limit)
    return session.exec(statement).all()


@router.get("/unread-count", response_model=UnreadCount, summary="Get unread notifications count")
def get_unread_count(
    session: SessionDep,
    current_user: User = Depends(get_current_user),
) -> UnreadCount:
    count = session.exec(
        select(func.count()).select_from(Notification).where(
            Notification.user_id == current_user.id,
            Notification.is_read == False,  # noqa: E712
        )
    ).one()
    return UnreadCount(count=count)


@router.patch(
    "/{notification_id}/read",
    response_model=NotificationRead,
    summary="Mark notification as read",
)
def mark_as_read(
    notification_id: UUID,
    session: SessionDep,
    current_user: User = Depends(get_current_user),
) -> Notification:
    notification = session.get(Notification, notification_id)
    if not notification or notification.user_id != current_user.id:
        raise NotFoundError("Notification not found", "notification_not_found")
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = datetime.utcnow()
        session.add(notification)
        session.commit()
        session.refresh(notification)
    return notification
