# booking_api/availability/classifier.py

from typing import List, Optional, Sequence

from booking_api.core import parse_hhmm
from booking_api.schemas import SlotState, TimeSlot
from booking_api.availability.conflicts import BlockedRange


def _unavailable(slot: str, state: SlotState, blocker: Optional[BlockedRange] = None) -> TimeSlot:
    return TimeSlot(
        time=slot,
        available=False,
        state=state,
        conflicting_appointment_id=blocker.appointment_id if blocker else None,
    )


def classify_slot(
    slot: str,
    duration: int,
    close_minutes: int,
    ranges: Sequence[BlockedRange],
) -> TimeSlot:
    """Decide the state of one candidate start.

    Checks run in order: closing time, a range covering the start, then
    the nearest range starting after the slot. Ending exactly when the
    next booking starts is allowed.
    """
    start = parse_hhmm(slot)
    end = start + duration

    if end > close_minutes:
        return _unavailable(slot, SlotState.beyond_hours)

    for blocked in ranges:
        if blocked.start <= start < blocked.end:
            return _unavailable(slot, SlotState.occupied, blocked)

    upcoming = None
    for blocked in ranges:
        if blocked.start > start and (upcoming is None or blocked.start < upcoming.start):
            upcoming = blocked
    if upcoming is not None and end > upcoming.start:
        return _unavailable(slot, SlotState.insufficient_time, upcoming)

    return TimeSlot(time=slot, available=True, state=SlotState.available)


def classify_slots(
    slots: Sequence[str],
    duration: int,
    close_minutes: int,
    ranges: Sequence[BlockedRange],
) -> List[TimeSlot]:
    if duration <= 0:
        raise ValueError("service duration must be positive")
    return [classify_slot(slot, duration, close_minutes, ranges) for slot in slots]
