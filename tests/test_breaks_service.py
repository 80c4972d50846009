from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from groomroute.errors import InvalidRequestError, NotFoundError
from groomroute.models.domain import Appointment, AppointmentStatus, Break, BreakType, Groomer, Pet
from groomroute.schemas.breaks import ScheduleBreakRequest, TakeBreakRequest
from groomroute.services.breaks import service as breaks_service

TZ = ZoneInfo("America/New_York")
NOW = datetime(2026, 6, 1, 16, 0, tzinfo=timezone.utc)  # noon in New York
DAY = date(2026, 6, 1)
GROOMER = Groomer(id="g1", account_id="acct", name="Sam")


def _appointment(aid, hour, minute=0, status=AppointmentStatus.SCHEDULED, weight=30.0):
    return Appointment(
        id=aid,
        account_id="acct",
        groomer_id="g1",
        customer_id=f"c-{aid}",
        start_at=datetime(2026, 6, 1, hour, minute, tzinfo=TZ),
        service_minutes=60,
        status=status,
        pet=Pet(id=f"p-{aid}", name="Dog", weight=weight),
    )


@pytest.fixture
def state(monkeypatch):
    data = {"breaks": [], "appointments": []}

    def fake_create(account_id, groomer_id, day, break_type, *, start_time=None, end_time=None,
                    taken=False, taken_at=None, duration_minutes=None):
        created = Break(
            id=f"b{len(data['breaks']) + 1}",
            account_id=account_id,
            groomer_id=groomer_id,
            break_date=day,
            break_type=break_type,
            start_time=start_time,
            end_time=end_time,
            taken=taken,
            taken_at=taken_at,
            duration_minutes=duration_minutes,
        )
        data["breaks"].append(created)
        return created

    def fake_mark(account_id, groomer_id, day, break_id, taken_at, duration):
        for item in data["breaks"]:
            if item.id == break_id and item.groomer_id == groomer_id and item.break_date == day:
                item.taken, item.taken_at, item.duration_minutes = True, taken_at, duration
                return item
        return None

    monkeypatch.setattr(breaks_service, "get_account_timezone", lambda account_id: TZ)
    monkeypatch.setattr(breaks_service, "get_groomer", lambda account_id, groomer_id=None: GROOMER)
    monkeypatch.setattr(breaks_service, "get_breaks", lambda account_id, groomer_id, day: list(data["breaks"]))
    monkeypatch.setattr(
        breaks_service, "get_appointments_between", lambda account_id, groomer_id, start, end: data["appointments"]
    )
    monkeypatch.setattr(breaks_service, "create_break", fake_create)
    monkeypatch.setattr(breaks_service, "mark_break_taken", fake_mark)
    return data


def test_schedule_then_take_break(state):
    scheduled = breaks_service.schedule_break(
        "acct", ScheduleBreakRequest(date="2026-06-01", start_time="12:00", end_time="12:30")
    )
    assert scheduled.break_type is BreakType.LUNCH
    assert scheduled.start_time == datetime(2026, 6, 1, 12, tzinfo=TZ)

    taken = breaks_service.take_break("acct", TakeBreakRequest(break_id=scheduled.id, duration_minutes=30), now=NOW)
    assert taken.break_.taken
    assert taken.breaks_taken == 1
    assert taken.total_break_minutes == 30
    assert taken.message == "First break of the day - great start!"


def test_take_ad_hoc_break(state):
    taken = breaks_service.take_break("acct", TakeBreakRequest(break_type=BreakType.HYDRATION, duration_minutes=5), now=NOW)
    assert taken.break_.break_type is BreakType.HYDRATION
    assert taken.break_.break_date == "2026-06-01"
    assert state["breaks"][0].taken_at == NOW


def test_take_unknown_break(state):
    with pytest.raises(NotFoundError):
        breaks_service.take_break("acct", TakeBreakRequest(break_id="missing"), now=NOW)


def test_schedule_break_validates_times(state):
    with pytest.raises(InvalidRequestError):
        breaks_service.schedule_break(
            "acct", ScheduleBreakRequest(date="2026-06-01", start_time="13:00", end_time="12:30")
        )
    with pytest.raises(InvalidRequestError):
        breaks_service.schedule_break(
            "acct", ScheduleBreakRequest(date="2026-06-01", start_time="noon", end_time="12:30")
        )


def test_list_breaks_with_slots(state):
    state["appointments"].extend([_appointment("a", 9), _appointment("b", 11)])
    response = breaks_service.list_breaks("acct", now=NOW)
    assert response.date == "2026-06-01"
    assert response.stats.breaks_taken_today == 0
    assert response.wellness_message.startswith("No breaks today")
    assert [slot.start_formatted for slot in response.optimal_slots] == ["10:05 AM"]


def test_suggest_break_after_large_dog(state):
    state["appointments"].extend(
        [
            _appointment("a", 10, status=AppointmentStatus.COMPLETED, weight=75),
            _appointment("b", 12, 30),
        ]
    )
    response = breaks_service.suggest_break("acct", now=NOW)
    assert response.suggestion.should_suggest
    assert response.suggestion.reason == "after_large_dog"
    assert response.completed_today == 1
    assert response.energy_load == 2.0


def test_take_break_ignores_other_groomers_and_days(state):
    state["breaks"].extend(
        [
            Break(id="other", account_id="acct", groomer_id="g2", break_date=DAY, break_type=BreakType.LUNCH),
            Break(id="yesterday", account_id="acct", groomer_id="g1", break_date=date(2026, 5, 31),
                  break_type=BreakType.LUNCH),
        ]
    )
    for break_id in ("other", "yesterday"):
        with pytest.raises(NotFoundError):
            breaks_service.take_break("acct", TakeBreakRequest(break_id=break_id), now=NOW)
    assert not any(item.taken for item in state["breaks"])
