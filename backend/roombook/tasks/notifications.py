"""Celery tasks that deliver booking events."""

from __future__ import annotations

import logging

from sqlmodel import Session

from roombook.celery_app import celery_app
from roombook.db import engine
from roombook.services.notifications import record_event_notifications

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3, default_retry_delay=60)
def deliver_booking_event_task(self, event: dict) -> dict:
    """
    Turn a published booking event into in-app notifications.

    Args:
        event: ``BookingEvent`` dumped in JSON mode

    Returns:
        dict: Event kind and the IDs of the notifications written
    """
    try:
        with Session(engine) as session:
            notifications = record_event_notifications(session, event)
            session.commit()
            notification_ids = [str(n.id) for n in notifications]

        logger.info(
            f"Delivered {event['kind']} for user {event['user_id']}: "
            f"{len(notification_ids)} notifications"
        )
        return {"kind": event["kind"], "notification_ids": notification_ids}
    except Exception as exc:
        logger.error(
            f"Error delivering {event.get('kind')} event: {exc}",
            exc_info=True,
        )
        raise self.retry(exc=exc)
