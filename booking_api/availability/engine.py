# booking_api/availability/engine.py
"""
Slot availability pipeline.

    resolve hours -> generate slots -> index appointments
        -> classify with the service duration -> advance-notice pass

Every stage is a pure function of its inputs. "now" is always passed in,
so computing the same inputs twice gives the same slots.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Mapping, Optional

from booking_api import config
from booking_api.schemas import DayAvailability, DayHours
from booking_api.availability.classifier import classify_slots
from booking_api.availability.conflicts import break_ranges, build_blocked_ranges
from booking_api.availability.hours import resolve_business_hours
from booking_api.availability.notice import apply_advance_notice
from booking_api.availability.slots import generate_slots, opening_window
from booking_api.availability.timezone import business_now, get_business_timezone

logger = logging.getLogger(__name__)

DEFAULT_DAY = DayHours(
    is_open=True,
    open_time=config.DEFAULT_OPEN_TIME,
    close_time=config.DEFAULT_CLOSE_TIME,
)


def _setting(settings: Any, name: str) -> Optional[int]:
    if settings is None:
        return None
    if isinstance(settings, Mapping):
        return settings.get(name)
    return getattr(settings, name, None)


def compute_day_availability(
    target_date: date,
    duration: int,
    now: datetime,
    business_hours: Optional[Mapping[str, Any]] = None,
    overrides: Iterable[Any] = (),
    appointments: Optional[Iterable[Any]] = None,
    timezone: Optional[str] = None,
    reservation_settings: Any = None,
    business_id: Optional[int] = None,
    service_id: Optional[int] = None,
    hours_unavailable: bool = False,
    granularity: int = config.SLOT_MINUTES,
    log: Optional[logging.Logger] = None,
) -> DayAvailability:
    """Compute the slot list for one date and one service duration.

    appointments=None means the day's appointments could not be fetched:
    the result is computed without conflict data and flagged degraded.
    hours_unavailable=True means the business record itself could not be
    fetched, so the generic default window is used.
    """
    log = log or logger
    if duration <= 0:
        raise ValueError("service duration must be positive")

    tz = get_business_timezone(timezone)
    degraded = appointments is None or hours_unavailable

    result = DayAvailability(
        business_id=business_id,
        date=target_date,
        service_id=service_id,
        duration=duration,
        timezone=tz.zone,
        is_open=False,
        degraded=degraded,
    )

    max_days = _setting(reservation_settings, "max_advance_booking_days")
    if max_days:
        today = business_now(now, tz).date()
        if target_date > today + timedelta(days=max_days):
            result.reason = "beyond_booking_window"
            return result

    if hours_unavailable:
        day_hours = DEFAULT_DAY
    else:
        day_hours = resolve_business_hours(business_hours, overrides, target_date)

    if not day_hours.is_open:
        result.reason = "closed"
        return result
    result.is_open = True

    slots = generate_slots(day_hours, granularity)
    if not slots:
        return result

    ranges = []
    if appointments is not None:
        ranges = build_blocked_ranges(
            appointments, target_date, tz, on_skip=result.warnings.append, log=log
        )
    else:
        log.warning("No appointment data for %s, computing slots without conflicts", target_date)
    ranges = sorted(ranges + break_ranges(day_hours), key=lambda r: r.start)

    _, close_minutes = opening_window(day_hours)
    classified = classify_slots(slots, duration, close_minutes, ranges)

    result.slots = apply_advance_notice(
        classified,
        target_date,
        now,
        tz,
        _setting(reservation_settings, "min_notification_hours"),
    )
    return result
