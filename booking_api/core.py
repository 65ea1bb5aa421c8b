# booking_api/core.py

MINUTES_PER_DAY = 24 * 60


def parse_hhmm(value: str) -> int:
    """Return minutes since midnight for an "HH:MM" string.

    Raises ValueError for anything else, including out of range parts.
    """
    if not isinstance(value, str):
        raise ValueError(f"Expected 'HH:MM' string, got {value!r}")
    parts = value.strip().split(":")
    if len(parts) != 2 or not all(p.isdigit() for p in parts):
        raise ValueError(f"Invalid time {value!r}, expected 'HH:MM'")
    hour, minute = int(parts[0]), int(parts[1])
    # 24:00 is accepted as end of day for closing times
    if hour == 24 and minute == 0:
        return MINUTES_PER_DAY
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"Invalid time {value!r}, out of range")
    return hour * 60 + minute


def format_minutes(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def overlaps(a_start, a_end, b_start, b_end) -> bool:
    # half-open intervals: touching ends do not overlap
    return a_start < b_end and b_start < a_end
