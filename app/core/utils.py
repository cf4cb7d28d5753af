from datetime import date, datetime, timezone
from typing import Optional
from zoneinfo import ZoneInfo

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def local_today(tz_name: str, now: Optional[datetime] = None) -> date:
    """Calendar date at a facility, given its IANA time zone name."""
    now = now or utcnow()
    return now.astimezone(ZoneInfo(tz_name)).date()
