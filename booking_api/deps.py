# booking_api/deps.py

from datetime import datetime, timezone

from fastapi import Depends, HTTPException
from sqlmodel import Session

from booking_api.db import get_session
from booking_api.models import Business
from booking_api import store


def get_business_or_404(
    business_id: str,
    session: Session = Depends(get_session),
) -> Business:
    business = store.get_business(session, business_id)
    if business is None:
        raise HTTPException(status_code=404, detail="Business not found")
    return business


def get_now() -> datetime:
    # overridden in tests to pin the clock
    return datetime.now(timezone.utc)


def policy_error(exc: store.AdmissionError) -> HTTPException:
    return HTTPException(status_code=409, detail={"code": exc.code, "message": exc.message})
