# booking_api/routers/businesses_routes.py

from datetime import date
from typing import Dict, List

import pytz
from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from booking_api.availability import Weekday
from booking_api.core import parse_hhmm
from booking_api.data import DEFAULT_BUSINESS_HOURS, RESERVATION_LIMITS
from booking_api.db import get_session
from booking_api.deps import get_business_or_404
from booking_api.models import (
    Business,
    BusinessHoursOverride,
    ReservationSettings as ReservationSettingsModel,
    Service,
)
from booking_api.schemas import (
    BusinessCreate,
    BusinessPublic,
    DayHours,
    OverrideCreate,
    OverridePublic,
    ReservationSettingsSchema,
    ServiceCreate,
    ServicePublic,
)
from booking_api import store

router = APIRouter(
    prefix="/businesses",
    tags=["businesses"],
)

WEEKDAY_KEYS = {day.key for day in Weekday}


def validate_day_hours(label: str, hours: DayHours):
    if not hours.is_open:
        return
    if hours.open_time is None or hours.close_time is None:
        raise HTTPException(status_code=422, detail=f"{label}: open_time and close_time are required when open")
    open_minutes = parse_hhmm(hours.open_time)
    close_minutes = parse_hhmm(hours.close_time)
    if open_minutes >= close_minutes:
        raise HTTPException(status_code=422, detail=f"{label}: open_time must be before close_time")
    for b in hours.breaks:
        start, end = parse_hhmm(b.start_time), parse_hhmm(b.end_time)
        if start >= end:
            raise HTTPException(status_code=422, detail=f"{label}: break start must be before break end")
        if start < open_minutes or end > close_minutes:
            raise HTTPException(status_code=422, detail=f"{label}: breaks must lie within business hours")


def validate_business_hours(hours: Dict[str, DayHours]):
    for key, day in hours.items():
        if key not in WEEKDAY_KEYS:
            raise HTTPException(status_code=422, detail=f"Unknown weekday '{key}'")
        validate_day_hours(key, day)


def to_public(session: Session, business: Business) -> dict:
    settings = store.get_reservation_settings(session, business.id)
    return {
        "id": business.id,
        "slug": business.slug,
        "name": business.name,
        "timezone": business.timezone,
        "business_hours": business.business_hours,
        "reservation_settings": {
            "max_advance_booking_days": settings.max_advance_booking_days,
            "min_notification_hours": settings.min_notification_hours,
            "max_daily_appointments": settings.max_daily_appointments,
        },
        "services": store.list_services(session, business.id),
    }


@router.post("", response_model=BusinessPublic, status_code=201)
def create_business(
    payload: BusinessCreate,
    session: Session = Depends(get_session),
):
    if payload.slug.isdigit():
        raise HTTPException(status_code=422, detail="slug cannot be numeric")
    existing = session.exec(select(Business).where(Business.slug == payload.slug)).first()
    if existing is not None:
        raise HTTPException(status_code=409, detail="Slug already registered")

    if payload.business_hours is not None:
        validate_business_hours(payload.business_hours)
        hours = {key: day.model_dump() for key, day in payload.business_hours.items()}
    else:
        hours = DEFAULT_BUSINESS_HOURS

    if payload.timezone and payload.timezone not in pytz.all_timezones_set:
        raise HTTPException(status_code=422, detail=f"Unknown timezone '{payload.timezone}'")

    business = Business(slug=payload.slug, name=payload.name, business_hours=hours)
    if payload.timezone:
        business.timezone = payload.timezone
    session.add(business)
    session.commit()
    session.refresh(business)
    return to_public(session, business)


@router.get("/{business_id}", response_model=BusinessPublic)
def get_business(
    business: Business = Depends(get_business_or_404),
    session: Session = Depends(get_session),
):
    return to_public(session, business)


@router.put("/{business_id}/hours", response_model=Dict[str, DayHours])
def update_business_hours(
    hours: Dict[str, DayHours],
    business: Business = Depends(get_business_or_404),
    session: Session = Depends(get_session),
):
    validate_business_hours(hours)
    business.business_hours = {key: day.model_dump() for key, day in hours.items()}
    session.add(business)
    session.commit()
    session.refresh(business)
    return business.business_hours


@router.put("/{business_id}/reservation-settings", response_model=ReservationSettingsSchema)
def update_reservation_settings(
    payload: ReservationSettingsSchema,
    business: Business = Depends(get_business_or_404),
    session: Session = Depends(get_session),
):
    values = payload.model_dump()
    for name, (low, high) in RESERVATION_LIMITS.items():
        if not (low <= values[name] <= high):
            raise HTTPException(status_code=422, detail=f"{name} must be between {low} and {high}")

    settings = session.get(ReservationSettingsModel, business.id)
    if settings is None:
        settings = ReservationSettingsModel(business_id=business.id, **values)
        session.add(settings)
    else:
        for name, value in values.items():
            setattr(settings, name, value)

    session.commit()
    session.refresh(settings)
    return values


@router.get("/{business_id}/overrides", response_model=List[OverridePublic])
def list_overrides(
    business: Business = Depends(get_business_or_404),
    session: Session = Depends(get_session),
):
    return store.list_overrides(session, business.id)


@router.put("/{business_id}/overrides", response_model=OverridePublic)
def upsert_override(
    payload: OverrideCreate,
    business: Business = Depends(get_business_or_404),
    session: Session = Depends(get_session),
):
    validate_day_hours(str(payload.date), DayHours(
        is_open=payload.is_open,
        open_time=payload.open_time,
        close_time=payload.close_time,
        breaks=payload.breaks,
    ))

    override = session.exec(
        select(BusinessHoursOverride)
        .where(BusinessHoursOverride.business_id == business.id)
        .where(BusinessHoursOverride.date == payload.date)
    ).first()
    if override is None:
        override = BusinessHoursOverride(business_id=business.id, date=payload.date)

    override.is_open = payload.is_open
    override.open_time = payload.open_time
    override.close_time = payload.close_time
    override.breaks = [b.model_dump() for b in payload.breaks]
    override.reason = payload.reason
    override.is_active = True

    session.add(override)
    session.commit()
    session.refresh(override)
    return override


@router.delete("/{business_id}/overrides/{on_date}", status_code=204)
def delete_override(
    on_date: date,
    business: Business = Depends(get_business_or_404),
    session: Session = Depends(get_session),
):
    override = session.exec(
        select(BusinessHoursOverride)
        .where(BusinessHoursOverride.business_id == business.id)
        .where(BusinessHoursOverride.date == on_date)
    ).first()
    if override is None:
        raise HTTPException(status_code=404, detail="Override not found")
    session.delete(override)
    session.commit()


@router.post("/{business_id}/services", response_model=ServicePublic, status_code=201)
def create_service(
    payload: ServiceCreate,
    business: Business = Depends(get_business_or_404),
    session: Session = Depends(get_session),
):
    service = Service(business_id=business.id, **payload.model_dump())
    session.add(service)
    session.commit()
    session.refresh(service)
    return service
