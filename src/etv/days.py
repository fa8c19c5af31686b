"""Day keys: local calendar days encoded as YYYYMMDD integers.

Day keys are the join key across energy, HDD and device activity data.
They are only comparable within one timezone.
"""

from datetime import date, datetime, timezone, tzinfo
from zoneinfo import ZoneInfo


def get_zone(tz: str | tzinfo) -> tzinfo:
    """Accept either an IANA zone name or a tzinfo."""
    if isinstance(tz, str):
        return ZoneInfo(tz)
    return tz


def day_key(d: date) -> int:
    """Encode a calendar date as YYYYMMDD."""
    return d.year * 10000 + d.month * 100 + d.day


def date_from_day_key(key: int) -> date:
    """Decode a YYYYMMDD day key; raises ValueError for an impossible date."""
    return date(key // 10000, (key // 100) % 100, key % 100)


def day_key_from_datetime(dt: datetime, tz: str | tzinfo) -> int:
    """Local day key for an aware datetime; naive datetimes are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return day_key(dt.astimezone(get_zone(tz)).date())


def day_key_from_instant(utc_millis: int, tz: str | tzinfo) -> int:
    """Local day key for a UTC instant in milliseconds since the epoch.

    DST days are still keyed by local calendar date, so a 23h or 25h day
    gets a single key like any other.
    """
    dt = datetime.fromtimestamp(utc_millis / 1000, tz=timezone.utc)
    return day_key(dt.astimezone(get_zone(tz)).date())
