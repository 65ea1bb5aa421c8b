import logging
from datetime import date, datetime, timezone

from booking_api.availability import compute_day_availability
from booking_api.schemas import AppointmentRecord, OverrideCreate, SlotState

WEDNESDAY = date(2024, 5, 1)
TUESDAY = date(2024, 5, 7)
NOW = datetime(2024, 5, 1, 8, 0)  # business-local wall time

HOURS = {
    day: {"is_open": True, "open_time": "09:00", "close_time": "17:00", "breaks": []}
    for day in ("monday", "tuesday", "wednesday", "thursday", "friday")
}


def by_time(result):
    return {slot.time: slot for slot in result.slots}


def test_single_appointment_scenario():
    result = compute_day_availability(
        target_date=WEDNESDAY,
        duration=30,
        now=NOW,
        business_hours=HOURS,
        appointments=[AppointmentRecord(id=1, start_time="10:00", end_time="10:30", duration=30, status="CONFIRMED")],
        reservation_settings={"min_notification_hours": 0},
    )
    slots = by_time(result)

    assert result.is_open
    assert not result.degraded
    assert len(result.slots) == 32
    assert slots["09:30"].state == SlotState.available
    assert slots["09:45"].state == SlotState.insufficient_time
    assert slots["09:45"].conflicting_appointment_id == 1
    assert slots["10:00"].state == SlotState.occupied
    assert slots["10:00"].conflicting_appointment_id == 1
    assert slots["10:30"].state == SlotState.available
    assert slots["16:45"].state == SlotState.beyond_hours


def test_override_closes_a_normally_open_tuesday():
    result = compute_day_availability(
        target_date=TUESDAY,
        duration=30,
        now=NOW,
        business_hours=HOURS,
        overrides=[OverrideCreate(date=TUESDAY, is_open=False, reason="Holiday")],
        appointments=[],
    )
    assert result.slots == []
    assert not result.is_open
    assert result.reason == "closed"


def test_closed_weekday_has_no_slots():
    result = compute_day_availability(
        target_date=date(2024, 5, 5), duration=30, now=NOW, business_hours=HOURS, appointments=[]
    )
    assert result.slots == []
    assert not result.is_open


def test_open_day_covered_by_a_break_is_not_closed():
    hours = dict(HOURS)
    hours["wednesday"] = {
        "is_open": True,
        "open_time": "09:00",
        "close_time": "10:00",
        "breaks": [{"start_time": "09:00", "end_time": "10:00", "description": "Staff meeting"}],
    }
    result = compute_day_availability(
        target_date=WEDNESDAY, duration=30, now=NOW, business_hours=hours, appointments=[]
    )
    assert result.slots == []
    assert result.is_open
    assert result.reason is None


def test_malformed_appointment_is_skipped(caplog):
    appointments = [
        AppointmentRecord(id=1, start_time="??", duration=30, status="CONFIRMED"),
        AppointmentRecord(id=2, start_time="11:00", duration=30, status="PENDING"),
    ]
    with caplog.at_level(logging.WARNING):
        result = compute_day_availability(
            target_date=WEDNESDAY, duration=30, now=NOW, business_hours=HOURS, appointments=appointments
        )
    slots = by_time(result)

    assert slots["10:00"].state == SlotState.available
    assert slots["11:00"].state == SlotState.occupied
    assert len(result.warnings) == 1
    assert sum("'??'" in r.getMessage() for r in caplog.records) == 1


def test_record_without_start_time_does_not_abort():
    appointments = [
        {"id": 1, "start_time": None, "duration": 30, "status": "CONFIRMED"},
        {"id": 2, "start_time": "11:00", "duration": 30, "status": "CONFIRMED"},
    ]
    result = compute_day_availability(
        target_date=WEDNESDAY, duration=30, now=NOW, business_hours=HOURS, appointments=appointments
    )
    assert by_time(result)["11:00"].state == SlotState.occupied
    assert len(result.warnings) == 1


def test_canceled_appointment_frees_its_slot():
    result = compute_day_availability(
        target_date=WEDNESDAY,
        duration=30,
        now=NOW,
        business_hours=HOURS,
        appointments=[AppointmentRecord(id=1, start_time="10:00", duration=30, status="CANCELED")],
    )
    assert by_time(result)["10:00"].state == SlotState.available


def test_missing_appointment_data_runs_degraded():
    result = compute_day_availability(target_date=WEDNESDAY, duration=30, now=NOW, business_hours=HOURS)
    assert result.degraded
    assert all(s.state in (SlotState.available, SlotState.beyond_hours) for s in result.slots)


def test_missing_business_falls_back_to_default_grid():
    result = compute_day_availability(
        target_date=WEDNESDAY, duration=60, now=NOW, appointments=None, hours_unavailable=True
    )
    assert result.degraded
    assert result.slots[0].time == "09:00"
    assert result.slots[-1].time == "17:45"
    assert by_time(result)["17:00"].state == SlotState.available
    assert by_time(result)["17:15"].state == SlotState.beyond_hours


def test_minimum_notice_marks_early_slots_past():
    result = compute_day_availability(
        target_date=WEDNESDAY,
        duration=30,
        now=NOW,
        business_hours=HOURS,
        appointments=[],
        reservation_settings={"min_notification_hours": 2},
    )
    slots = by_time(result)
    assert slots["09:45"].state == SlotState.past
    assert slots["10:00"].state == SlotState.available


def test_dates_beyond_booking_window_have_no_slots():
    result = compute_day_availability(
        target_date=date(2024, 6, 3),
        duration=30,
        now=NOW,
        business_hours=HOURS,
        appointments=[],
        reservation_settings={"max_advance_booking_days": 30},
    )
    assert result.slots == []
    assert result.reason == "beyond_booking_window"


def test_breaks_are_not_offered_and_bound_durations():
    hours = dict(HOURS)
    hours["wednesday"] = {
        "is_open": True,
        "open_time": "09:00",
        "close_time": "17:00",
        "breaks": [{"start_time": "12:00", "end_time": "13:00", "description": "Lunch"}],
    }
    result = compute_day_availability(
        target_date=WEDNESDAY, duration=30, now=NOW, business_hours=hours, appointments=[]
    )
    slots = by_time(result)
    assert "12:00" not in slots
    assert slots["11:30"].state == SlotState.available
    assert slots["11:45"].state == SlotState.insufficient_time
    assert slots["13:00"].state == SlotState.available


def test_same_inputs_give_same_result():
    kwargs = dict(
        target_date=WEDNESDAY,
        duration=45,
        now=datetime(2024, 5, 1, 6, 0, tzinfo=timezone.utc),
        business_hours=HOURS,
        appointments=[AppointmentRecord(id=3, start_time="2024-05-01T10:00:00Z", duration=60, status="CONFIRMED")],
        reservation_settings={"min_notification_hours": 1},
    )
    assert compute_day_availability(**kwargs) == compute_day_availability(**kwargs)
