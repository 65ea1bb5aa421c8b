# booking_api/availability/conflicts.py

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Iterable, List, Optional

import pytz

from booking_api.core import parse_hhmm
from booking_api.data import DEFAULT_SERVICE_DURATION
from booking_api.schemas import AppointmentStatus, DayHours
from booking_api.availability.timezone import to_business_minutes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlockedRange:
    start: int  # minutes since business-local midnight
    end: int
    appointment_id: Optional[int] = None
    kind: str = "appointment"


def _field(appointment: Any, name: str):
    if isinstance(appointment, dict):
        return appointment.get(name)
    return getattr(appointment, name, None)


def is_canceled(appointment: Any) -> bool:
    status = _field(appointment, "status")
    if isinstance(status, AppointmentStatus):
        status = status.value
    return str(status or "").upper() == AppointmentStatus.canceled.value


def _range_end(appointment: Any, start: int, target_date: date, tz: pytz.BaseTzInfo) -> int:
    duration = _field(appointment, "duration")
    if isinstance(duration, int) and not isinstance(duration, bool) and duration > 0:
        return start + duration

    end_time = _field(appointment, "end_time")
    if end_time:
        try:
            end = to_business_minutes(end_time, target_date, tz)
        except (TypeError, ValueError):
            end = None
        if end is not None and end > start:
            return end
    return start + DEFAULT_SERVICE_DURATION


def build_blocked_ranges(
    appointments: Iterable[Any],
    target_date: date,
    tz: pytz.BaseTzInfo,
    on_skip: Optional[Callable[[str], None]] = None,
    log: Optional[logging.Logger] = None,
) -> List[BlockedRange]:
    """Sorted occupied ranges for the non-canceled appointments of one day.

    An appointment whose start cannot be parsed is skipped and reported
    through on_skip; the rest are still indexed.
    """
    log = log or logger
    ranges = []
    for appointment in appointments:
        if is_canceled(appointment):
            continue
        appointment_id = _field(appointment, "id")
        start_time = _field(appointment, "start_time")
        try:
            start = to_business_minutes(start_time, target_date, tz)
        except (TypeError, ValueError):
            message = f"Skipped appointment {appointment_id}: unparseable start_time {start_time!r}"
            log.warning(message)
            if on_skip is not None:
                on_skip(message)
            continue

        end = _range_end(appointment, start, target_date, tz)
        ranges.append(BlockedRange(start=start, end=end, appointment_id=appointment_id))

    ranges.sort(key=lambda r: r.start)
    return ranges


def break_ranges(day_hours: DayHours) -> List[BlockedRange]:
    return [
        BlockedRange(start=parse_hhmm(b.start_time), end=parse_hhmm(b.end_time), kind="break")
        for b in day_hours.breaks
    ]
