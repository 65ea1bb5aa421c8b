"""
Slot availability engine.

- Business hours resolution (hours.py)
- Business-local time normalization (timezone.py)
- Candidate slot generation (slots.py)
- Appointment conflict index (conflicts.py)
- Slot classification (classifier.py)
- Advance-notice filtering (notice.py)
- The combined pipeline (engine.py)
"""

from booking_api.availability.engine import compute_day_availability
from booking_api.availability.hours import Weekday, resolve_business_hours

__all__ = ["compute_day_availability", "resolve_business_hours", "Weekday"]
