from __future__ import annotations

import logging
from collections.abc import Generator, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Annotated, Any

from fastapi import Depends
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from roombook.core.config import settings

if TYPE_CHECKING:
    from roombook.services.events import BookingEvent, EventSink

logger = logging.getLogger(__name__)


def _build_engine(url: str) -> Engine:
    connect_args: dict[str, Any] = {}
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": 30}
    engine = create_engine(url, connect_args=connect_args)
    if url.startswith("sqlite"):
        _serialize_sqlite_transactions(engine)
    return engine


def _serialize_sqlite_transactions(engine: Engine) -> None:
    """Start every SQLite transaction holding the database write lock.

    pysqlite defers BEGIN until the first write, which would let two
    connections run the same overlap check before either inserts.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


engine = _build_engine(settings.DATABASE_URL)


def init_db() -> None:
    """Create database tables in environments without migrations."""
    SQLModel.metadata.create_all(bind=engine)


def get_session() -> Generator[Session, None, None]:
    with Session(engine, expire_on_commit=False) as session:
        yield session


SessionDep = Annotated[Session, Depends(get_session)]


class UnitOfWork:
    """One store transaction and the events it produced."""

    def __init__(self, session: Session):
        self.session = session
        self.events: list[BookingEvent] = []

    def emit(self, booking_event: BookingEvent) -> None:
        self.events.append(booking_event)


@contextmanager
def unit_of_work(
    session: Session, sink: EventSink | None = None
) -> Iterator[UnitOfWork]:
    """Run a block as a single transaction.

    Commits on success and rolls back on any exception. Events queued on the
    unit are handed to ``sink`` only after the commit went through.
    """
    uow = UnitOfWork(session)
    try:
        yield uow
        session.commit()
    except Exception:
        session.rollback()
        raise

    if sink is None:
        return
    # Committed state never depends on delivery
    for booking_event in uow.events:
        try:
            sink.publish(booking_event)
        except Exception:
            logger.warning(
                f"Failed to publish {booking_event.kind} for user {booking_event.user_id}",
                exc_info=True,
            )
