"""Clock helpers shared by the domain services"""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from ..config import SHOP_TIMEZONE


def utcnow() -> datetime:
    """Naive UTC timestamp, matching what the database columns store"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def shop_now() -> datetime:
    """Naive wall-clock time at the shop, comparable with appointment date+time"""
    if SHOP_TIMEZONE.upper() == "UTC":
        return utcnow()
    return datetime.now(ZoneInfo(SHOP_TIMEZONE)).replace(tzinfo=None)
