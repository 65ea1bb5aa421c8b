# booking_api/data.py

from booking_api import config

DEFAULT_SERVICE_DURATION = 60  # minutes, for appointments stored without one

RESERVATION_LIMITS = {
    "max_advance_booking_days": (1, 365),
    "min_notification_hours": (0, 168),
    "max_daily_appointments": (1, 1000),
}

DEFAULT_RESERVATION_SETTINGS = {
    "max_advance_booking_days": 30,
    "min_notification_hours": 0,
    "max_daily_appointments": 50,
}

# Template handed to newly created businesses
DEFAULT_BUSINESS_HOURS = {
    "sunday": {"is_open": False, "open_time": None, "close_time": None, "breaks": []},
    "monday": {"is_open": True, "open_time": config.DEFAULT_OPEN_TIME, "close_time": config.DEFAULT_CLOSE_TIME, "breaks": []},
    "tuesday": {"is_open": True, "open_time": config.DEFAULT_OPEN_TIME, "close_time": config.DEFAULT_CLOSE_TIME, "breaks": []},
    "wednesday": {"is_open": True, "open_time": config.DEFAULT_OPEN_TIME, "close_time": config.DEFAULT_CLOSE_TIME, "breaks": []},
    "thursday": {"is_open": True, "open_time": config.DEFAULT_OPEN_TIME, "close_time": config.DEFAULT_CLOSE_TIME, "breaks": []},
    "friday": {"is_open": True, "open_time": config.DEFAULT_OPEN_TIME, "close_time": config.DEFAULT_CLOSE_TIME, "breaks": []},
    "saturday": {"is_open": True, "open_time": "10:00", "close_time": "16:00", "breaks": []},
}
