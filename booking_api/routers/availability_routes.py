# booking_api/routers/availability_routes.py

from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session

from booking_api.db import get_session
from booking_api.deps import get_business_or_404, get_now
from booking_api.models import Business, Service
from booking_api.schemas import DayAvailability
from booking_api import store

router = APIRouter(
    prefix="/businesses",
    tags=["availability"],
)


@router.get("/{business_id}/availability", response_model=DayAvailability)
def business_availability(
    date: date,
    service_id: int,
    staff_id: Optional[str] = None,
    business: Business = Depends(get_business_or_404),
    session: Session = Depends(get_session),
    now: datetime = Depends(get_now),
):
    # staff_id is accepted so the booking steps can pass it through; the
    # calendar is shared across staff
    service = session.get(Service, service_id)
    if service is None or service.business_id != business.id:
        raise HTTPException(status_code=404, detail="Service not found")
    if not service.is_active:
        raise HTTPException(status_code=422, detail="Service not available")

    return store.compute_availability(
        session,
        business,
        duration=service.duration,
        target_date=date,
        now=now,
        service_id=service.id,
    )
