from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from groomroute.errors import InvalidRequestError, NotFoundError
from groomroute.models.domain import Appointment, AppointmentStatus, Groomer, Pet, Route
from groomroute.services.workload import service as workload_service

TZ = ZoneInfo("America/New_York")
NOW = datetime(2026, 6, 1, 15, 0, tzinfo=timezone.utc)  # 11:00 in New York
GROOMER = Groomer(id="g1", account_id="acct", name="Sam", default_has_assistant=False, daily_intensity_limit=12)


def _appointments(count, completed=0):
    start = datetime(2026, 6, 1, 8, tzinfo=TZ)
    return [
        Appointment(
            id=f"a{i}",
            account_id="acct",
            groomer_id="g1",
            customer_id=f"c{i}",
            start_at=start + timedelta(hours=i),
            service_minutes=60,
            status=AppointmentStatus.COMPLETED if i < completed else AppointmentStatus.CONFIRMED,
            pet=Pet(id=f"p{i}", name="Dog", weight=30.0),
        )
        for i in range(count)
    ]


@pytest.fixture
def day(monkeypatch):
    state = {"appointments": _appointments(6, completed=2), "route": None, "range": None}

    def fake_between(account_id, groomer_id, start, end):
        state["range"] = (start, end)
        return state["appointments"]

    monkeypatch.setattr(workload_service, "get_account_timezone", lambda account_id: TZ)
    monkeypatch.setattr(
        workload_service, "get_groomer", lambda account_id, groomer_id=None: GROOMER if groomer_id in (None, "g1") else None
    )
    monkeypatch.setattr(workload_service, "get_route", lambda account_id, groomer_id, route_date: state["route"])
    monkeypatch.setattr(workload_service, "get_appointments_between", fake_between)
    return state


def test_today_counts_only_remaining_grooms(day):
    response = workload_service.get_day_workload("acct", now=NOW)
    assert response.date == "2026-06-01"
    assert response.has_assistant is False
    assert (response.appointment_count, response.completed_count) == (6, 2)
    assert response.assessment.remaining_appointments == 4
    assert response.assessment.level == "moderate"
    assert day["range"][0] == datetime(2026, 6, 1, 4, tzinfo=timezone.utc)


def test_route_assistant_lightens_the_day(day):
    day["route"] = Route(account_id="acct", groomer_id="g1", route_date=date(2026, 6, 1), has_assistant=True)
    response = workload_service.get_day_workload("acct", now=NOW)
    assert response.has_assistant is True
    assert response.assessment.level == "light"
    assert response.assessment.message == "Easy day with your assistant - smooth sailing ahead"


def test_other_days_assess_the_full_schedule(day):
    response = workload_service.get_day_workload("acct", "2026-06-02", now=NOW)
    assert response.assessment.remaining_appointments == 6
    assert response.assessment.level == "busy"
    assert response.assessment.show_calm_link


def test_intensity_summary_uses_groomer_limit(day):
    response = workload_service.get_day_workload("acct", now=NOW)
    assert response.intensity.total == 12
    assert response.intensity.limit == 12
    assert response.intensity.percentage == 100
    assert (response.intensity.level, response.intensity.message) == ("heavy", "At capacity")


def test_workload_requires_known_groomer(day):
    with pytest.raises(NotFoundError):
        workload_service.get_day_workload("acct", groomer_id="ghost", now=NOW)
    with pytest.raises(InvalidRequestError):
        workload_service.get_day_workload("acct", "tomorrow", now=NOW)


def test_check_intensity_against_budget(day):
    full = workload_service.check_intensity("acct", "2026-06-01", "demanding")
    assert (full.allowed, full.current_total, full.would_be_total, full.remaining, full.over_by) == (
        False, 12, 15, 0, 3
    )

    rebooking = workload_service.check_intensity("acct", "2026-06-01", "LIGHT", exclude_appointment_id="a0")
    assert (rebooking.allowed, rebooking.current_total, rebooking.would_be_total) == (True, 10, 11)

    with pytest.raises(InvalidRequestError):
        workload_service.check_intensity("acct", "2026-06-01", "huge")


def test_estimate_booking_duration():
    estimate = workload_service.estimate_booking_duration("Dog", "Great Pyrenees", "giant")
    assert (estimate.minutes, estimate.formatted, estimate.intensity.value) == (120, "2 hours", "INTENSIVE")

    quick = workload_service.estimate_booking_duration("dog", "Chihuahua", "small")
    assert (quick.minutes, quick.formatted) == (45, "45 min")

    with pytest.raises(InvalidRequestError):
        workload_service.estimate_booking_duration("bird", None, "small")
    with pytest.raises(InvalidRequestError):
        workload_service.estimate_booking_duration("dog", None, "tiny")
