# booking_api/config.py

import os

from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./booking.db")
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Business-local civil time is evaluated in this zone unless the business sets its own
DEFAULT_TIMEZONE = os.getenv("DEFAULT_TIMEZONE", "Europe/Istanbul")

# Candidate start times are generated on this grid
SLOT_MINUTES = int(os.getenv("SLOT_MINUTES", "15"))

# Generic window used when hours are missing a bound or could not be fetched
DEFAULT_OPEN_TIME = os.getenv("DEFAULT_OPEN_TIME", "09:00")
DEFAULT_CLOSE_TIME = os.getenv("DEFAULT_CLOSE_TIME", "18:00")

# Base URL used by the async booking client
BOOKING_API_URL = os.getenv("BOOKING_API_URL", "http://localhost:8000")
