# booking_api/schemas.py

from pydantic import BaseModel, Field, field_validator
from enum import Enum
from datetime import date as Date
from typing import Dict, List, Optional

from booking_api.core import format_minutes, parse_hhmm


class AppointmentStatus(str, Enum):
    pending = "PENDING"
    confirmed = "CONFIRMED"
    completed = "COMPLETED"
    canceled = "CANCELED"
    no_show = "NO_SHOW"


class SlotState(str, Enum):
    available = "AVAILABLE"
    occupied = "OCCUPIED"
    insufficient_time = "INSUFFICIENT_TIME"
    past = "PAST"
    beyond_hours = "BEYOND_HOURS"


class BreakPeriod(BaseModel):
    start_time: str
    end_time: str
    description: str = ""

    @field_validator("start_time", "end_time")
    @classmethod
    def check_hhmm(cls, v: str) -> str:
        parse_hhmm(v)
        return v


class DayHours(BaseModel):
    is_open: bool = False
    open_time: Optional[str] = None
    close_time: Optional[str] = None
    breaks: List[BreakPeriod] = []

    @field_validator("open_time", "close_time")
    @classmethod
    def check_hhmm(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            parse_hhmm(v)
        return v


class OverrideCreate(BaseModel):
    date: Date
    is_open: bool = False
    open_time: Optional[str] = None
    close_time: Optional[str] = None
    breaks: List[BreakPeriod] = []
    reason: str = ""

    @field_validator("open_time", "close_time")
    @classmethod
    def check_hhmm(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            parse_hhmm(v)
        return v


class OverridePublic(OverrideCreate):
    id: int
    business_id: int
    is_active: bool


class ReservationSettingsSchema(BaseModel):
    max_advance_booking_days: int = 30
    min_notification_hours: int = 0
    max_daily_appointments: int = 50


class ServiceCreate(BaseModel):
    name: str
    duration: int = Field(gt=0)
    is_active: bool = True


class ServicePublic(ServiceCreate):
    id: int
    business_id: int


class BusinessCreate(BaseModel):
    slug: str
    name: str
    timezone: Optional[str] = None
    business_hours: Optional[Dict[str, DayHours]] = None


class BusinessPublic(BaseModel):
    id: int
    slug: str
    name: str
    timezone: str
    business_hours: Optional[Dict[str, DayHours]] = None
    reservation_settings: ReservationSettingsSchema
    services: List[ServicePublic] = []


class AppointmentRecord(BaseModel):
    """Read snapshot of an appointment as consumed by the availability engine."""

    id: Optional[int] = None
    date: Optional[Date] = None
    start_time: str
    end_time: Optional[str] = None
    duration: Optional[int] = None
    status: str = AppointmentStatus.pending.value
    staff_id: Optional[str] = None
    service_id: Optional[int] = None
    customer_id: Optional[str] = None


class AppointmentCreate(BaseModel):
    service_id: int
    staff_id: Optional[str] = None
    customer_id: str
    date: Date
    start_time: str
    customer_notes: Optional[str] = None

    @field_validator("start_time")
    @classmethod
    def normalize_hhmm(cls, v: str) -> str:
        # "9:30" and " 09:30 " both become the slot label "09:30"
        return format_minutes(parse_hhmm(v))


class AppointmentPublic(AppointmentRecord):
    id: int
    business_id: int
    service_id: int
    date: Date
    duration: int
    customer_notes: Optional[str] = None


class TimeSlot(BaseModel):
    time: str
    available: bool = True
    state: SlotState = SlotState.available
    conflicting_appointment_id: Optional[int] = None


class DayAvailability(BaseModel):
    business_id: Optional[int] = None
    date: Date
    service_id: Optional[int] = None
    duration: int
    timezone: str
    is_open: bool
    degraded: bool = False
    reason: Optional[str] = None
    slots: List[TimeSlot] = []
    warnings: List[str] = []


class PolicyError(BaseModel):
    code: str
    message: str
