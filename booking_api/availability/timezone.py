# booking_api/availability/timezone.py

import logging
from datetime import date, datetime, time, timedelta
from typing import Optional, Union

import pytz

from booking_api import config
from booking_api.core import MINUTES_PER_DAY, parse_hhmm

logger = logging.getLogger(__name__)


def get_business_timezone(tz_name: Optional[str]) -> pytz.BaseTzInfo:
    tz_name = tz_name or config.DEFAULT_TIMEZONE
    try:
        return pytz.timezone(tz_name)
    except pytz.UnknownTimeZoneError:
        logger.warning("Invalid timezone '%s', using %s", tz_name, config.DEFAULT_TIMEZONE)
        return pytz.timezone(config.DEFAULT_TIMEZONE)


def localize(tz: pytz.BaseTzInfo, naive: datetime) -> datetime:
    return tz.normalize(tz.localize(naive))


def business_datetime(target_date: date, hhmm: str, tz: pytz.BaseTzInfo) -> datetime:
    """Aware instant of the wall-clock time hhmm on target_date in the business zone."""
    minutes = parse_hhmm(hhmm)
    naive = datetime.combine(target_date, time()) + timedelta(minutes=minutes)
    return localize(tz, naive)


def business_now(now: datetime, tz: pytz.BaseTzInfo) -> datetime:
    # a naive "now" is already business-local wall time
    if now.tzinfo is None:
        return localize(tz, now)
    return now.astimezone(tz)


def _parse_instant(value: str) -> datetime:
    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def to_business_minutes(
    value: Union[str, datetime],
    target_date: date,
    tz: pytz.BaseTzInfo,
) -> int:
    """Minutes since business-local midnight of target_date.

    "HH:MM" strings are business-local already. ISO-8601 instants are
    converted into the business zone; an instant that lands on another
    local date gives a value outside 0..1439.
    """
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, str):
        if "T" not in value and " " not in value.strip():
            return parse_hhmm(value)
        moment = _parse_instant(value)
    else:
        raise ValueError(f"Expected 'HH:MM' or ISO-8601 string, got {value!r}")

    if moment.tzinfo is None:
        local = moment
    else:
        local = moment.astimezone(tz).replace(tzinfo=None)

    day_offset = (local.date() - target_date).days
    return day_offset * MINUTES_PER_DAY + local.hour * 60 + local.minute
