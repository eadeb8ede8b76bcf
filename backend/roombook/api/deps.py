from __future__ import annotations

from datetime import datetime
from typing import Callable
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import select

from roombook.core import clock
from roombook.core.config import settings
from roombook.core.errors import AuthorizationError
from roombook.core.security import verify_token
from roombook.db import SessionDep
from roombook.models import User
from roombook.services.events import EventSink, celery_event_sink

# Tokens are issued by the identity provider; this service only verifies them
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_V1_STR}/auth/login")


def get_current_user(
    session: SessionDep,
    token: str = Depends(oauth2_scheme),
) -> User:
    try:
        payload = verify_token(token, token_type="access")
        user_id = payload.get("sub")
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication payload",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        statement = select(User).where(User.id == UUID(user_id))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication payload",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
    user = session.exec(statement).one_or_none()
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Inactive or missing user",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def require_admin(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_admin:
        raise AuthorizationError("Admin access required", "admin_required")
    return current_user


def get_event_sink() -> EventSink:
    return celery_event_sink


def get_clock() -> Callable[[], datetime]:
    return clock.now
