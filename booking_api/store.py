# booking_api/store.py
"""
Appointment Store.

Reads businesses and appointments for the availability engine and owns the
authoritative admission check when an appointment is written.
"""

import logging
from datetime import date, datetime, timedelta
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from booking_api.availability import compute_day_availability
from booking_api.availability.timezone import business_now, get_business_timezone
from booking_api.core import format_minutes, parse_hhmm
from booking_api.data import DEFAULT_RESERVATION_SETTINGS
from booking_api.models import (
    Appointment,
    Business,
    BusinessHoursOverride,
    ReservationSettings,
    Service,
)
from booking_api.schemas import AppointmentCreate, AppointmentStatus, DayAvailability, SlotState

logger = logging.getLogger(__name__)


class AdmissionError(Exception):
    """Raised when a requested appointment violates booking policy."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


def get_business(session: Session, id_or_slug: str) -> Optional[Business]:
    if str(id_or_slug).isdigit():
        return session.get(Business, int(id_or_slug))
    return session.exec(select(Business).where(Business.slug == id_or_slug)).first()


def get_reservation_settings(session: Session, business_id: int) -> ReservationSettings:
    settings = session.get(ReservationSettings, business_id)
    if settings is None:
        settings = ReservationSettings(business_id=business_id, **DEFAULT_RESERVATION_SETTINGS)
    return settings


def list_services(session: Session, business_id: int, active_only: bool = True) -> List[Service]:
    stmt = select(Service).where(Service.business_id == business_id)
    if active_only:
        stmt = stmt.where(Service.is_active == True)  # noqa: E712
    return session.exec(stmt.order_by(Service.id)).all()


def list_overrides(
    session: Session,
    business_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[BusinessHoursOverride]:
    stmt = select(BusinessHoursOverride).where(BusinessHoursOverride.business_id == business_id)
    if start_date is not None:
        stmt = stmt.where(BusinessHoursOverride.date >= start_date)
    if end_date is not None:
        stmt = stmt.where(BusinessHoursOverride.date <= end_date)
    return session.exec(stmt.order_by(BusinessHoursOverride.date)).all()


def fetch_appointments(
    session: Session,
    business_id: int,
    start_date: date,
    end_date: date,
) -> List[Appointment]:
    """All appointments in the date range, any status."""
    stmt = (
        select(Appointment)
        .where(Appointment.business_id == business_id)
        .where(Appointment.date >= start_date)
        .where(Appointment.date <= end_date)
        .order_by(Appointment.date, Appointment.start_time)
    )
    return session.exec(stmt).all()


def compute_availability(
    session: Session,
    business: Business,
    duration: int,
    target_date: date,
    now: datetime,
    service_id: Optional[int] = None,
) -> DayAvailability:
    try:
        appointments = fetch_appointments(session, business.id, target_date, target_date)
    except SQLAlchemyError as e:
        logger.warning("Appointment fetch failed for business %s on %s: %s", business.id, target_date, e)
        session.rollback()
        appointments = None

    return compute_day_availability(
        target_date=target_date,
        duration=duration,
        now=now,
        business_hours=business.business_hours,
        overrides=list_overrides(session, business.id, target_date, target_date),
        appointments=appointments,
        timezone=business.timezone,
        reservation_settings=get_reservation_settings(session, business.id),
        business_id=business.id,
        service_id=service_id,
    )


def create_appointment(
    session: Session,
    business: Business,
    payload: AppointmentCreate,
    now: datetime,
) -> Appointment:
    # 1) Validate service
    service = session.get(Service, payload.service_id)
    if service is None or service.business_id != business.id or not service.is_active:
        raise AdmissionError("service_unavailable", "Service not available")

    settings = get_reservation_settings(session, business.id)
    tz = get_business_timezone(business.timezone)
    today = business_now(now, tz).date()

    # 2) Booking window
    if payload.date < today:
        raise AdmissionError("past_date", "Cannot book an appointment in the past")
    if payload.date > today + timedelta(days=settings.max_advance_booking_days):
        raise AdmissionError(
            "beyond_booking_window",
            f"Appointments can be booked at most {settings.max_advance_booking_days} days ahead",
        )

    # 3) Daily cap
    day_appointments = fetch_appointments(session, business.id, payload.date, payload.date)
    active = [a for a in day_appointments if a.status != AppointmentStatus.canceled.value]
    if len(active) >= settings.max_daily_appointments:
        raise AdmissionError("daily_limit_reached", "No more appointments can be booked for this day")

    # 4) Re-run the engine against the current calendar
    availability = compute_day_availability(
        target_date=payload.date,
        duration=service.duration,
        now=now,
        business_hours=business.business_hours,
        overrides=list_overrides(session, business.id, payload.date, payload.date),
        appointments=day_appointments,
        timezone=business.timezone,
        reservation_settings=settings,
        business_id=business.id,
        service_id=service.id,
    )
    slot = next((s for s in availability.slots if s.time == payload.start_time), None)
    if slot is None:
        raise AdmissionError("outside_business_hours", "Requested time is not offered on this date")
    if slot.state != SlotState.available:
        raise AdmissionError(slot.state.value.lower(), f"Requested time {payload.start_time} is not available")

    # 5) Persist
    end_minutes = parse_hhmm(payload.start_time) + service.duration
    db_appt = Appointment(
        business_id=business.id,
        service_id=service.id,
        staff_id=payload.staff_id,
        customer_id=payload.customer_id,
        date=payload.date,
        start_time=payload.start_time,
        end_time=format_minutes(end_minutes),
        duration=service.duration,
        status=AppointmentStatus.pending.value,
        customer_notes=payload.customer_notes,
    )
    session.add(db_appt)
    session.commit()
    session.refresh(db_appt)

    logger.info("Booked appointment %s for business %s at %s %s", db_appt.id, business.id, payload.date, payload.start_time)
    return db_appt


def cancel_appointment(session: Session, appointment: Appointment) -> Appointment:
    if appointment.status == AppointmentStatus.canceled.value:
        raise AdmissionError("already_canceled", "Appointment already canceled")
    appointment.status = AppointmentStatus.canceled.value
    session.add(appointment)
    session.commit()
    session.refresh(appointment)
    return appointment
