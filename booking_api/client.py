# booking_api/client.py
"""
Async client for the booking API, used by booking front ends.

Slot lists are recomputed every time the customer changes the date,
service or staff selection. A fetch started for an older selection can
resolve after a newer one; SlotPicker only commits a result when its
selection is still the current one.
"""

import logging
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import httpx

from booking_api import config
from booking_api.availability import compute_day_availability
from booking_api.data import DEFAULT_SERVICE_DURATION
from booking_api.schemas import (
    AppointmentCreate,
    AppointmentPublic,
    AppointmentRecord,
    DayAvailability,
    OverridePublic,
)

logger = logging.getLogger(__name__)


class BookingConflict(Exception):
    """The store refused a slot; availability holds the refreshed slot list."""

    def __init__(self, code: str, message: str, availability: Optional[DayAvailability] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.availability = availability


class BookingClient:
    def __init__(self, base_url: str = config.BOOKING_API_URL, client: Optional[httpx.AsyncClient] = None):
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=10.0)

    async def aclose(self):
        await self._client.aclose()

    async def fetch_business(self, id_or_slug: Any) -> Dict[str, Any]:
        response = await self._client.get(f"/businesses/{id_or_slug}")
        response.raise_for_status()
        return response.json()

    async def fetch_overrides(self, business_id: int) -> List[OverridePublic]:
        response = await self._client.get(f"/businesses/{business_id}/overrides")
        response.raise_for_status()
        return [OverridePublic.model_validate(o) for o in response.json()]

    async def fetch_appointments(self, business_id: int, start_date: date, end_date: date) -> List[AppointmentRecord]:
        response = await self._client.get(
            f"/businesses/{business_id}/appointments",
            params={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
        )
        response.raise_for_status()
        return [AppointmentRecord.model_validate(a) for a in response.json()]

    async def fetch_availability(
        self,
        business_id: int,
        on_date: date,
        service_id: int,
        staff_id: Optional[str] = None,
    ) -> DayAvailability:
        params = {"date": on_date.isoformat(), "service_id": service_id}
        if staff_id:
            params["staff_id"] = staff_id
        response = await self._client.get(f"/businesses/{business_id}/availability", params=params)
        response.raise_for_status()
        return DayAvailability.model_validate(response.json())

    async def create_appointment(self, business_id: int, payload: AppointmentCreate) -> AppointmentPublic:
        response = await self._client.post(
            f"/businesses/{business_id}/appointments",
            json=payload.model_dump(mode="json"),
        )
        if response.status_code == 409:
            detail = response.json().get("detail") or {}
            if not isinstance(detail, dict):
                detail = {"code": "conflict", "message": str(detail)}
            logger.info("Booking refused for %s %s: %s", payload.date, payload.start_time, detail.get("code"))
            try:
                refreshed = await self.fetch_availability(
                    business_id, payload.date, payload.service_id, payload.staff_id
                )
            except httpx.HTTPError as e:
                logger.warning("Could not refresh availability after conflict: %s", e)
                refreshed = None
            raise BookingConflict(
                detail.get("code", "conflict"),
                detail.get("message", "Selected time is no longer available"),
                refreshed,
            )
        response.raise_for_status()
        return AppointmentPublic.model_validate(response.json())


class SelectionGuard:
    """Hands out a token per selection; only the latest token is current."""

    def __init__(self):
        self._generation = 0

    def begin(self) -> int:
        self._generation += 1
        return self._generation

    def is_current(self, token: int) -> bool:
        return token == self._generation


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SlotPicker:
    """Computes the slot list for the customer's current selection."""

    def __init__(
        self,
        client: BookingClient,
        business_id: Any,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.client = client
        self.business_id = business_id
        self.clock = clock
        self.guard = SelectionGuard()
        self.availability: Optional[DayAvailability] = None

    async def select(self, on_date: date, service_id: int, duration: Optional[int] = None) -> bool:
        """Recompute slots for a new selection.

        Returns False when a newer selection started while this one was
        fetching; the stale result is dropped.
        """
        token = self.guard.begin()

        business = None
        try:
            business = await self.client.fetch_business(self.business_id)
        except httpx.HTTPError as e:
            logger.warning("Business fetch failed for %s: %s", self.business_id, e)

        overrides = []
        if business is not None:
            try:
                overrides = await self.client.fetch_overrides(business["id"])
            except httpx.HTTPError as e:
                logger.warning("Override fetch failed for %s, using weekly hours: %s", business["id"], e)

        if business is not None:
            service = next((s for s in business.get("services", []) if s["id"] == service_id), None)
            if service is not None:
                duration = service["duration"]

        appointments = None
        if business is not None:
            try:
                appointments = await self.client.fetch_appointments(business["id"], on_date, on_date)
            except httpx.HTTPError as e:
                logger.warning("Appointment fetch failed for %s: %s", on_date, e)

        if not self.guard.is_current(token):
            logger.debug("Dropping stale slots for %s", on_date)
            return False

        self.availability = compute_day_availability(
            target_date=on_date,
            duration=duration or DEFAULT_SERVICE_DURATION,
            now=self.clock(),
            business_hours=business.get("business_hours") if business else None,
            overrides=overrides,
            appointments=appointments,
            timezone=business.get("timezone") if business else None,
            reservation_settings=business.get("reservation_settings") if business else None,
            business_id=business["id"] if business else None,
            service_id=service_id,
            hours_unavailable=business is None,
        )
        return True
