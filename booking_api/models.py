# booking_api/models.py

from typing import Optional, List, Dict, Any
from datetime import datetime, date as Date

from sqlalchemy import UniqueConstraint
from sqlalchemy.types import JSON
from sqlmodel import SQLModel, Field, Column

from booking_api import config


class Business(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    slug: str = Field(index=True, unique=True)
    name: str
    timezone: str = config.DEFAULT_TIMEZONE
    # weekday key ("monday") -> {"is_open", "open_time", "close_time", "breaks"}
    business_hours: Optional[Dict[str, Any]] = Field(default=None, sa_column=Column(JSON))


class ReservationSettings(SQLModel, table=True):
    business_id: int = Field(foreign_key="business.id", primary_key=True)
    max_advance_booking_days: int = 30
    min_notification_hours: int = 0
    max_daily_appointments: int = 50


class BusinessHoursOverride(SQLModel, table=True):
    __table_args__ = (
        UniqueConstraint("business_id", "date", name="uq_business_override_date"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    business_id: int = Field(foreign_key="business.id", index=True)
    date: Date = Field(index=True)
    is_open: bool = False
    open_time: Optional[str] = None
    close_time: Optional[str] = None
    breaks: List[Dict[str, Any]] = Field(default_factory=list, sa_column=Column(JSON))
    reason: str = ""
    is_active: bool = True


class Service(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    business_id: int = Field(foreign_key="business.id", index=True)
    name: str
    duration: int  # minutes
    is_active: bool = True


class Appointment(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)

    business_id: int = Field(foreign_key="business.id", index=True)
    service_id: int = Field(foreign_key="service.id")
    staff_id: Optional[str] = None
    customer_id: str
    date: Date = Field(index=True)
    # "HH:MM" business-local, or an ISO-8601 instant
    start_time: str
    end_time: Optional[str] = None
    duration: int
    status: str = "PENDING"
    customer_notes: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
