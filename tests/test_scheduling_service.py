from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from groomroute.errors import InvalidRequestError, NotFoundError, PolicyViolationError
from groomroute.models.domain import Appointment, AppointmentStatus, Groomer, Pet
from groomroute.services.scheduling import service as scheduling_service
from groomroute.services.watchlist.ranker import RouteContext
from groomroute.services.watchlist.service import RankingInputs

TZ = ZoneInfo("America/New_York")
GROOMER = Groomer(
    id="g1",
    account_id="acct",
    name="Sam",
    working_hours_start="09:00",
    working_hours_end="17:00",
    large_dog_daily_limit=2,
    booking_slug="sam",
    booking_enabled=True,
)


def _appointment(aid, hour, minute=0, minutes=60, weight=None, status=AppointmentStatus.SCHEDULED):
    return Appointment(
        id=aid,
        account_id="acct",
        groomer_id="g1",
        customer_id=f"c-{aid}",
        start_at=datetime(2026, 6, 1, hour, minute, tzinfo=TZ),
        service_minutes=minutes,
        status=status,
        customer_name=f"Customer {aid}",
        pet=Pet(id=f"p-{aid}", name=f"Pet {aid}", weight=weight),
    )


@pytest.fixture
def schedule(monkeypatch):
    appointments: list[Appointment] = []
    calls = {}

    def fake_appointments(account_id, groomer_id, start, end, *, exclude_statuses=None, exclude_ids=()):
        calls["range"] = (start, end)
        return [a for a in appointments if a.id not in set(exclude_ids) and start <= a.start_at < end]

    monkeypatch.setattr(scheduling_service, "get_account_timezone", lambda account_id: TZ)
    monkeypatch.setattr(scheduling_service, "get_appointments_between", fake_appointments)
    monkeypatch.setattr(
        scheduling_service, "get_groomer", lambda account_id, groomer_id=None: GROOMER if groomer_id in (None, "g1") else None
    )
    monkeypatch.setattr(
        scheduling_service, "get_groomer_by_slug", lambda slug: GROOMER if slug == "sam" else None
    )
    return appointments, calls


def test_available_slots_respect_buffer_and_duration(schedule):
    appointments, calls = schedule
    appointments.append(_appointment("a", 10))
    response = scheduling_service.get_available_slots("sam", "2026-06-01", 60)
    times = [slot.time for slot in response.slots]
    assert times[0] == "09:00"
    assert "10:30" not in times and "11:00" not in times
    assert "11:30" in times
    assert times[-1] == "16:00"
    assert response.total_slots == 15
    assert response.slot_duration_minutes == 60
    assert response.slots[0].time_formatted == "9:00 AM"
    # Day boundaries are computed in the account timezone.
    assert calls["range"][0] == datetime(2026, 6, 1, 4, tzinfo=timezone.utc)


def test_available_slots_clamps_duration(schedule):
    response = scheduling_service.get_available_slots("sam", "2026-06-01", 500)
    assert response.slot_duration_minutes == 180
    assert response.slots[-1].time == "14:00"


def test_available_slots_errors(schedule, monkeypatch):
    with pytest.raises(NotFoundError):
        scheduling_service.get_available_slots("nobody", "2026-06-01")
    with pytest.raises(InvalidRequestError):
        scheduling_service.get_available_slots("sam", "June 1")
    disabled = Groomer(id="g2", account_id="acct", name="Kim", booking_enabled=False)
    monkeypatch.setattr(scheduling_service, "get_groomer_by_slug", lambda slug: disabled)
    with pytest.raises(PolicyViolationError) as excinfo:
        scheduling_service.get_available_slots("kim", "2026-06-01")
    assert excinfo.value.status_code == 403


def test_conflict_reports_next_available(schedule):
    appointments, _ = schedule
    appointments.append(_appointment("a", 9, 30))
    response = scheduling_service.check_conflict("acct", "2026-06-01", "10:00", 60)
    assert response.has_conflict
    assert response.conflicts[0].id == "a"
    assert response.conflicts[0].start_time == "9:30 AM"
    assert response.conflicts[0].pet_name == "Pet a"
    assert response.next_available == "10:45"
    assert response.next_available_formatted == "10:45 AM"


def test_back_to_back_is_not_a_conflict(schedule):
    appointments, _ = schedule
    appointments.append(_appointment("a", 9))
    response = scheduling_service.check_conflict("acct", "2026-06-01", "10:00", 60)
    assert not response.has_conflict
    assert response.next_available is None
    assert response.proposed_end == "11:00 AM"


def test_conflict_ignores_excluded_and_cancelled(schedule):
    appointments, _ = schedule
    appointments.append(_appointment("edit", 10))
    appointments.append(_appointment("gone", 10, status=AppointmentStatus.CANCELLED))
    response = scheduling_service.check_conflict("acct", "2026-06-01", "10:00", 60, exclude_id="edit")
    assert not response.has_conflict


@pytest.mark.parametrize("duration", [29, 181])
def test_conflict_duration_bounds(schedule, duration):
    with pytest.raises(InvalidRequestError):
        scheduling_service.check_conflict("acct", "2026-06-01", "10:00", duration)


def test_conflict_unknown_groomer(schedule):
    with pytest.raises(NotFoundError):
        scheduling_service.check_conflict("acct", "2026-06-01", "10:00", 60, groomer_id="other")


def test_working_hours_check(schedule):
    early = scheduling_service.check_groomer_working_hours("acct", "08:30", 60)
    assert early.status == "STARTS_BEFORE"
    assert early.minutes_outside == 30
    assert not early.within_hours
    assert early.message == "Starts 30 minutes before working hours begin"
    ok = scheduling_service.check_groomer_working_hours("acct", "10:00", 60)
    assert ok.within_hours and ok.message is None


def test_large_dog_count(schedule):
    appointments, _ = schedule
    appointments.extend([_appointment("a", 9, weight=60), _appointment("b", 10, weight=40), _appointment("c", 11, weight=70)])
    response = scheduling_service.get_large_dog_count("acct", "2026-06-01")
    assert response.count == 2
    assert response.at_limit and not response.over_limit
    assert response.remaining_slots == 0
    assert [dog.appointment_id for dog in response.large_dogs] == ["a", "c"]
    edited = scheduling_service.get_large_dog_count("acct", "2026-06-01", exclude_appointment_id="c")
    assert edited.count == 1 and edited.remaining_slots == 1


def test_schedule_gaps_rank_waitlist_once(schedule, monkeypatch):
    appointments, _ = schedule
    appointments.extend([_appointment("a", 10), _appointment("b", 13)])
    loads = []

    def fake_inputs(account_id, groomer, day, day_appointments):
        loads.append(day)
        return RankingInputs(entries=[], histories={}, context=RouteContext())

    monkeypatch.setattr(scheduling_service, "load_ranking_inputs", fake_inputs)
    response = scheduling_service.get_schedule_gaps("acct", "2026-06-01")
    assert [(g.start, g.end) for g in response.gaps] == [("09:00", "10:00"), ("11:00", "13:00"), ("14:00", "17:00")]
    assert [g.time_of_day for g in response.gaps] == ["MORNING", "MORNING", "AFTERNOON"]
    assert response.gaps[1].previous_appointment_id == "a"
    assert response.gaps[1].next_appointment_id == "b"
    assert response.total_gap_minutes == 60 + 120 + 180
    assert len(loads) == 1


def test_schedule_gaps_rejects_negative_minimum(schedule):
    with pytest.raises(InvalidRequestError):
        scheduling_service.get_schedule_gaps("acct", "2026-06-01", min_gap_minutes=-5)
