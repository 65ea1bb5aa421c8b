# booking_api/routers/appointments_routes.py

from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from booking_api.db import get_session
from booking_api.deps import get_business_or_404, get_now, policy_error
from booking_api.models import Appointment, Business
from booking_api.schemas import AppointmentCreate, AppointmentPublic
from booking_api import store

router = APIRouter(
    tags=["appointments"],
)


@router.get("/businesses/{business_id}/appointments", response_model=List[AppointmentPublic])
def list_business_appointments(
    start_date: date,
    end_date: Optional[date] = None,
    business: Business = Depends(get_business_or_404),
    session: Session = Depends(get_session),
):
    end_date = end_date or start_date
    if end_date < start_date:
        raise HTTPException(status_code=422, detail="end_date cannot be before start_date")
    return store.fetch_appointments(session, business.id, start_date, end_date)


@router.post("/businesses/{business_id}/appointments", response_model=AppointmentPublic, status_code=201)
def create_appointment(
    appt: AppointmentCreate,
    business: Business = Depends(get_business_or_404),
    session: Session = Depends(get_session),
    now: datetime = Depends(get_now),
):
    try:
        return store.create_appointment(session, business, appt, now)
    except store.AdmissionError as e:
        raise policy_error(e)


@router.patch("/appointments/{appt_id}/cancel", response_model=AppointmentPublic)
def cancel_appointment(
    appt_id: int,
    session: Session = Depends(get_session),
):
    target = session.get(Appointment, appt_id)
    if target is None:
        raise HTTPException(status_code=404, detail="Appointment not found")
    try:
        return store.cancel_appointment(session, target)
    except store.AdmissionError as e:
        raise policy_error(e)
