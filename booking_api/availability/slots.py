# booking_api/availability/slots.py

from typing import List, Tuple

from booking_api import config
from booking_api.core import format_minutes, parse_hhmm
from booking_api.schemas import DayHours


def opening_window(day_hours: DayHours) -> Tuple[int, int]:
    """(open, close) in minutes, filling a missing bound with the default window."""
    open_minutes = parse_hhmm(day_hours.open_time or config.DEFAULT_OPEN_TIME)
    close_minutes = parse_hhmm(day_hours.close_time or config.DEFAULT_CLOSE_TIME)
    return open_minutes, close_minutes


def break_windows(day_hours: DayHours) -> List[Tuple[int, int]]:
    return [(parse_hhmm(b.start_time), parse_hhmm(b.end_time)) for b in day_hours.breaks]


def generate_slots(day_hours: DayHours, granularity: int = config.SLOT_MINUTES) -> List[str]:
    """Candidate "HH:MM" start times from opening up to, not including, closing.

    Starts that fall inside a break are left out.
    """
    if not day_hours.is_open:
        return []
    if granularity <= 0:
        raise ValueError("granularity must be positive")

    open_minutes, close_minutes = opening_window(day_hours)
    breaks = break_windows(day_hours)

    slots = []
    current = open_minutes
    while current < close_minutes:
        in_break = any(start <= current < end for start, end in breaks)
        if not in_break:
            slots.append(format_minutes(current))
        current += granularity
    return slots
