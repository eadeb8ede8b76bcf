"""Helpers for queueing Celery tasks without letting broker trouble leak out."""

from __future__ import annotations

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


def safe_celery_delay(task, *args, **kwargs) -> Optional[Any]:
    """
    Queue a Celery task, swallowing broker failures.

    Booking state must never depend on notification delivery, so an
    unreachable broker is logged and the caller continues.

    Returns:
        The AsyncResult from ``task.delay()`` or None if queueing failed.
    """
    try:
        result = task.delay(*args, **kwargs)
        logger.debug(f"Celery task {task.name} queued with ID: {result.id}")
        return result
    except Exception as e:
        logger.warning(
            f"Failed to queue Celery task {task.name}: {e}. "
            f"Continuing without background delivery."
        )
        return None
