from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

import dateparser
from tzlocal import get_localzone_name

from helpdesk.core.config import get_settings


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def get_local_timezone() -> str:
    try:
        return get_localzone_name()
    except Exception:
        return "UTC"


def display_zone() -> ZoneInfo:
    name = get_settings().timezone or get_local_timezone()
    return ZoneInfo(name)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Treat naive values as wall-clock time in the display zone."""
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=display_zone())
    return value.astimezone(timezone.utc)


def to_display(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(display_zone())


def local_date(value: datetime) -> date:
    return to_display(value).date()


def day_start(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=display_zone()).astimezone(timezone.utc)


def day_end(day: date) -> datetime:
    return datetime.combine(day, time.max, tzinfo=display_zone()).astimezone(timezone.utc)


def today_bounds(now: datetime | None = None) -> tuple[datetime, datetime]:
    today = local_date(now or utc_now())
    return day_start(today), day_start(today + timedelta(days=1))


def month_to_date(now: datetime | None = None) -> tuple[datetime, datetime]:
    now = now or utc_now()
    first = local_date(now).replace(day=1)
    return day_start(first), now


def parse_day(value: str | None) -> date | None:
    """Parse a query-string date ("2025-07-01", "yesterday", "1 July") in the display zone."""
    if not value:
        return None

    tz_name = display_zone().key
    settings = {
        "RETURN_AS_TIMEZONE_AWARE": True,
        "TIMEZONE": tz_name,
        "TO_TIMEZONE": tz_name,
        "PREFER_DAY_OF_MONTH": "first",
    }
    parsed = dateparser.parse(value, settings=settings)
    if not parsed:
        return None
    return parsed.date()


def day_range(start: date | None, end: date | None) -> tuple[datetime | None, datetime | None]:
    """Inclusive [start-of-``start``, end-of-``end``] bounds; either side may be open."""
    return (day_start(start) if start else None, day_end(end) if end else None)
