# booking_api/availability/notice.py

from datetime import date, datetime, timedelta
from typing import List, Optional, Sequence

import pytz

from booking_api.schemas import SlotState, TimeSlot
from booking_api.availability.timezone import business_datetime, business_now


def minimum_booking_instant(now: datetime, tz: pytz.BaseTzInfo, min_notification_hours: Optional[int]) -> datetime:
    return business_now(now, tz) + timedelta(hours=min_notification_hours or 0)


def apply_advance_notice(
    slots: Sequence[TimeSlot],
    target_date: date,
    now: datetime,
    tz: pytz.BaseTzInfo,
    min_notification_hours: Optional[int] = None,
) -> List[TimeSlot]:
    """Mark slots starting before now + notice as PAST, whatever their state."""
    earliest = minimum_booking_instant(now, tz, min_notification_hours)

    result = []
    for slot in slots:
        if business_datetime(target_date, slot.time, tz) < earliest:
            result.append(TimeSlot(time=slot.time, available=False, state=SlotState.past))
        else:
            result.append(slot)
    return result
