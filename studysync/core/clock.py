from datetime import datetime, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

from studysync.core.config import settings


class SystemClock:
    """Wall clock in the configured local zone."""

    def __init__(self, tz: Optional[tzinfo] = None):
        self.tz = tz

    def now(self) -> datetime:
        if self.tz is None:
            return datetime.now().astimezone()
        return datetime.now(self.tz)


def get_local_timezone() -> Optional[tzinfo]:
    return ZoneInfo(settings.timezone) if settings.timezone else None


# Dependency for getting the clock
def get_clock() -> SystemClock:
    return SystemClock(get_local_timezone())
