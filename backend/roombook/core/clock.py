"""Office wall-clock time.

Booking dates and times are civil values in the office timezone, so the
current time is always taken there and returned naive.
"""

from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

from roombook.core.config import settings


def now() -> datetime:
    return datetime.now(ZoneInfo(settings.OFFICE_TIMEZONE)).replace(tzinfo=None)
