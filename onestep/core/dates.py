from datetime import date, datetime
from zoneinfo import ZoneInfo

from onestep.core.config import TIMEZONE


def get_today(tz: str = TIMEZONE) -> date:
    """Current calendar date in the server's canonical timezone."""
    return datetime.now(ZoneInfo(tz)).date()


def utcnow() -> datetime:
    return datetime.now(ZoneInfo("UTC")).replace(tzinfo=None)
