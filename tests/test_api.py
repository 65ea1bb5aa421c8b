from sqlalchemy.exc import OperationalError

from booking_api import store


def book(client, business, service, start_time, on_date="2024-05-01", customer="cust-1"):
    return client.post(
        f"/businesses/{business['id']}/appointments",
        json={
            "service_id": service["id"],
            "customer_id": customer,
            "date": on_date,
            "start_time": start_time,
        },
    )


def availability(client, business, service, on_date="2024-05-01"):
    response = client.get(
        f"/businesses/{business['id']}/availability",
        params={"date": on_date, "service_id": service["id"]},
    )
    assert response.status_code == 200
    return response.json()


def states(payload):
    return {slot["time"]: slot for slot in payload["slots"]}


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_fetch_business_by_id_and_slug(client, business, haircut):
    by_id = client.get(f"/businesses/{business['id']}").json()
    by_slug = client.get("/businesses/berber-ali").json()
    assert by_id == by_slug
    assert by_id["timezone"] == "Europe/Istanbul"
    assert by_id["reservation_settings"]["max_advance_booking_days"] == 30
    assert [s["name"] for s in by_id["services"]] == ["Haircut"]


def test_unknown_business_is_404(client):
    assert client.get("/businesses/nope").status_code == 404


def test_duplicate_slug_is_rejected(client, business):
    response = client.post("/businesses", json={"slug": "berber-ali", "name": "Other"})
    assert response.status_code == 409


def test_invalid_hours_are_rejected(client, business):
    response = client.put(
        f"/businesses/{business['id']}/hours",
        json={"monday": {"is_open": True, "open_time": "18:00", "close_time": "09:00"}},
    )
    assert response.status_code == 422

    response = client.put(
        f"/businesses/{business['id']}/hours",
        json={"monday": {
            "is_open": True,
            "open_time": "09:00",
            "close_time": "17:00",
            "breaks": [{"start_time": "08:00", "end_time": "09:30"}],
        }},
    )
    assert response.status_code == 422


def test_availability_reflects_bookings_and_breaks(client, business, haircut):
    created = book(client, business, haircut, "10:00")
    assert created.status_code == 201
    appt = created.json()
    assert appt["status"] == "PENDING"
    assert appt["end_time"] == "10:30"

    slots = states(availability(client, business, haircut))
    assert slots["09:30"]["state"] == "AVAILABLE"
    assert slots["09:45"]["state"] == "INSUFFICIENT_TIME"
    assert slots["10:00"]["state"] == "OCCUPIED"
    assert slots["10:00"]["conflicting_appointment_id"] == appt["id"]
    assert slots["10:30"]["state"] == "AVAILABLE"
    assert "12:00" not in slots
    assert slots["11:45"]["state"] == "INSUFFICIENT_TIME"
    assert slots["16:45"]["state"] == "BEYOND_HOURS"


def test_unpadded_start_time_is_accepted(client, business, haircut):
    response = book(client, business, haircut, "9:30")
    assert response.status_code == 201
    assert response.json()["start_time"] == "09:30"
    assert response.json()["end_time"] == "10:00"

    assert states(availability(client, business, haircut))["09:30"]["state"] == "OCCUPIED"


def test_admission_rejects_taken_slot(client, business, haircut):
    assert book(client, business, haircut, "10:00").status_code == 201

    response = book(client, business, haircut, "10:15", customer="cust-2")
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "occupied"

    response = book(client, business, haircut, "09:45", customer="cust-2")
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "insufficient_time"


def test_cancel_frees_the_slot(client, business, haircut):
    appt = book(client, business, haircut, "10:00").json()

    canceled = client.patch(f"/appointments/{appt['id']}/cancel")
    assert canceled.status_code == 200
    assert canceled.json()["status"] == "CANCELED"
    assert client.patch(f"/appointments/{appt['id']}/cancel").status_code == 409

    assert book(client, business, haircut, "10:00", customer="cust-2").status_code == 201

    listed = client.get(
        f"/businesses/{business['id']}/appointments",
        params={"start_date": "2024-05-01", "end_date": "2024-05-01"},
    ).json()
    assert sorted(a["status"] for a in listed) == ["CANCELED", "PENDING"]


def test_override_closes_tuesday(client, business, haircut):
    response = client.put(
        f"/businesses/{business['id']}/overrides",
        json={"date": "2024-05-07", "is_open": False, "reason": "Holiday"},
    )
    assert response.status_code == 200

    payload = availability(client, business, haircut, "2024-05-07")
    assert payload["slots"] == []
    assert payload["reason"] == "closed"
    assert book(client, business, haircut, "10:00", on_date="2024-05-07").status_code == 409

    assert client.delete(f"/businesses/{business['id']}/overrides/2024-05-07").status_code == 204
    assert availability(client, business, haircut, "2024-05-07")["slots"]


def test_minimum_notice_and_booking_window(client, business, haircut):
    response = client.put(
        f"/businesses/{business['id']}/reservation-settings",
        json={"max_advance_booking_days": 7, "min_notification_hours": 2, "max_daily_appointments": 50},
    )
    assert response.status_code == 200

    slots = states(availability(client, business, haircut))
    assert slots["09:45"]["state"] == "PAST"
    assert slots["10:00"]["state"] == "AVAILABLE"
    assert book(client, business, haircut, "09:45").json()["detail"]["code"] == "past"

    far = availability(client, business, haircut, "2024-05-20")
    assert far["reason"] == "beyond_booking_window"
    assert book(client, business, haircut, "10:00", on_date="2024-05-20").json()["detail"]["code"] == "beyond_booking_window"


def test_reservation_settings_bounds(client, business):
    response = client.put(
        f"/businesses/{business['id']}/reservation-settings",
        json={"max_advance_booking_days": 0, "min_notification_hours": 2, "max_daily_appointments": 50},
    )
    assert response.status_code == 422


def test_daily_limit(client, business, haircut):
    client.put(
        f"/businesses/{business['id']}/reservation-settings",
        json={"max_advance_booking_days": 30, "min_notification_hours": 0, "max_daily_appointments": 1},
    )
    assert book(client, business, haircut, "10:00").status_code == 201
    response = book(client, business, haircut, "14:00", customer="cust-2")
    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "daily_limit_reached"


def test_fetch_failure_degrades_availability(client, business, haircut, monkeypatch):
    book(client, business, haircut, "10:00")

    def broken(*args, **kwargs):
        raise OperationalError("SELECT appointment", {}, Exception("database is locked"))

    monkeypatch.setattr(store, "fetch_appointments", broken)
    payload = availability(client, business, haircut)
    assert payload["degraded"] is True
    assert states(payload)["10:00"]["state"] == "AVAILABLE"


def test_inactive_service(client, business):
    service = client.post(
        f"/businesses/{business['id']}/services",
        json={"name": "Perm", "duration": 90, "is_active": False},
    ).json()
    response = client.get(
        f"/businesses/{business['id']}/availability",
        params={"date": "2024-05-01", "service_id": service["id"]},
    )
    assert response.status_code == 422
    assert book(client, business, service, "10:00").json()["detail"]["code"] == "service_unavailable"
