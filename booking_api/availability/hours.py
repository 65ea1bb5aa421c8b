# booking_api/availability/hours.py

from datetime import date
from enum import IntEnum
from typing import Any, Iterable, Mapping, Optional

from booking_api.schemas import BreakPeriod, DayHours


class Weekday(IntEnum):
    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6

    @classmethod
    def from_date(cls, d: date) -> "Weekday":
        # date.weekday() counts from Monday = 0
        return cls((d.weekday() + 1) % 7)

    @property
    def key(self) -> str:
        return self.name.lower()


CLOSED = DayHours(is_open=False)


def _as_day_hours(entry: Any) -> DayHours:
    if isinstance(entry, DayHours):
        return entry
    return DayHours.model_validate(entry)


def _override_to_day_hours(override: Any) -> DayHours:
    breaks = getattr(override, "breaks", None) or []
    return DayHours(
        is_open=bool(override.is_open),
        open_time=getattr(override, "open_time", None),
        close_time=getattr(override, "close_time", None),
        breaks=[b if isinstance(b, BreakPeriod) else BreakPeriod.model_validate(b) for b in breaks],
    )


def find_override(overrides: Iterable[Any], target_date: date) -> Optional[Any]:
    for override in overrides or ():
        if override.date != target_date:
            continue
        if not getattr(override, "is_active", True):
            continue
        return override
    return None


def resolve_business_hours(
    business_hours: Optional[Mapping[str, Any]],
    overrides: Iterable[Any],
    target_date: date,
) -> DayHours:
    """Effective hours for one calendar date.

    An active override for the exact date replaces the weekday entry
    completely, closures included. A weekday with no entry is closed.
    """
    override = find_override(overrides, target_date)
    if override is not None:
        return _override_to_day_hours(override)

    if not business_hours:
        return CLOSED

    entry = business_hours.get(Weekday.from_date(target_date).key)
    if entry is None:
        return CLOSED
    return _as_day_hours(entry)
