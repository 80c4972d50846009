from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from groomroute.models.domain import Appointment, AppointmentStatus, Break, BreakType, Pet
from groomroute.services.breaks.calculator import (
    BreakPolicy,
    DogSize,
    calculate_break_stats,
    dog_size,
    energy_cost,
    energy_load_since,
    find_optimal_break_slots,
    get_break_suggestion,
    get_wellness_message,
    take_break_message,
)

TZ = ZoneInfo("America/New_York")
POLICY = BreakPolicy()


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2026, 6, 1, hour, minute, tzinfo=TZ)


def _appointment(aid, hour, minute=0, minutes=60, weight=30.0, status=AppointmentStatus.SCHEDULED):
    return Appointment(
        id=aid,
        account_id="acct",
        groomer_id="g1",
        customer_id=f"c-{aid}",
        start_at=_at(hour, minute),
        service_minutes=minutes,
        status=status,
        pet=Pet(id=f"p-{aid}", name="Dog", weight=weight),
    )


def _done(aid, hour, weight=30.0, minute=0):
    return _appointment(aid, hour, minute, weight=weight, status=AppointmentStatus.COMPLETED)


def test_dog_size_bands():
    assert dog_size(None) is DogSize.MEDIUM
    assert dog_size(15) is DogSize.SMALL
    assert dog_size(50) is DogSize.MEDIUM
    assert dog_size(80) is DogSize.LARGE
    assert dog_size(120) is DogSize.GIANT
    assert [energy_cost(w) for w in (10, 40, 70, 100)] == [1.0, 1.5, 2.0, 3.0]


def test_long_gap_suggests_lunch():
    appointments = [_done("a", 9), _appointment("b", 13, 40)]
    suggestion = get_break_suggestion(appointments, None, _at(12), POLICY)
    assert suggestion.should_suggest
    assert suggestion.reason == "long_gap"
    assert suggestion.break_type is BreakType.LUNCH
    assert suggestion.available_minutes == 100
    assert suggestion.suggested_duration_minutes == 30


def test_large_dog_just_finished():
    appointments = [_done("a", 9), _done("b", 10, weight=70), _appointment("c", 12, 30)]
    suggestion = get_break_suggestion(appointments, None, _at(12), POLICY)
    assert suggestion.reason == "after_large_dog"
    assert suggestion.suggested_duration_minutes == 15


def test_heavy_energy_load():
    appointments = [_done(str(i), 7 + i) for i in range(4)] + [_appointment("next", 12, 30)]
    assert energy_load_since(appointments, None) == 6.0
    suggestion = get_break_suggestion(appointments, None, _at(11, 15), POLICY)
    assert suggestion.reason == "heavy_load"


def test_break_after_every_third_dog():
    appointments = [_done(str(i), 8 + i, weight=10) for i in range(3)] + [_appointment("next", 11, 45)]
    suggestion = get_break_suggestion(appointments, None, _at(11, 15), POLICY)
    assert suggestion.reason == "after_dogs"
    assert suggestion.break_type is BreakType.SHORT_BREAK


def test_continuous_work_suggests_hydration():
    appointments = [
        _appointment("early", 7, status=AppointmentStatus.IN_PROGRESS, weight=10),
        _done("a", 8, weight=10),
        _appointment("next", 12, 30),
    ]
    suggestion = get_break_suggestion(appointments, None, _at(12), POLICY)
    assert suggestion.reason == "continuous"
    assert suggestion.break_type is BreakType.HYDRATION
    assert suggestion.suggested_duration_minutes == 10


def test_recent_break_resets_load_and_continuous_timer():
    appointments = [_done(str(i), 7 + i) for i in range(4)] + [_appointment("next", 12, 30)]
    suggestion = get_break_suggestion(appointments, _at(11), _at(11, 15), POLICY)
    assert not suggestion.should_suggest


def test_no_suggestion_without_enough_time():
    appointments = [_done("a", 9, weight=90), _appointment("b", 12, 10)]
    assert not get_break_suggestion(appointments, None, _at(12), POLICY).should_suggest
    assert not get_break_suggestion([_done("a", 9)], None, _at(12), POLICY).should_suggest


def test_cancelled_appointments_do_not_count_as_next():
    appointments = [_done("a", 9), _appointment("b", 12, 30, status=AppointmentStatus.CANCELLED)]
    assert not get_break_suggestion(appointments, None, _at(12), POLICY).should_suggest


def test_break_stats():
    day = date(2026, 6, 1)
    breaks = [
        Break(id="1", account_id="acct", groomer_id="g1", break_date=day, break_type=BreakType.LUNCH,
              start_time=_at(12), end_time=_at(12, 30)),
        Break(id="2", account_id="acct", groomer_id="g1", break_date=day, break_type=BreakType.SHORT_BREAK,
              taken=True, taken_at=_at(10), duration_minutes=15),
        Break(id="3", account_id="acct", groomer_id="g1", break_date=day, break_type=BreakType.HYDRATION,
              taken=True, taken_at=_at(14), duration_minutes=10),
    ]
    stats = calculate_break_stats(breaks)
    assert stats.breaks_taken_today == 2
    assert stats.total_break_minutes == 25
    assert stats.last_break_time == _at(14)
    assert stats.scheduled_breaks == 1


def test_optimal_break_slots():
    appointments = [
        _appointment("a", 9),
        _appointment("b", 11),
        _appointment("c", 12, 40),
        _appointment("d", 13, 45),
    ]
    slots = find_optimal_break_slots(appointments)
    assert [(s.start_time, s.break_type, s.duration_minutes) for s in slots] == [
        (_at(10, 5), BreakType.LUNCH, 30),
        (_at(12, 5), BreakType.SHORT_BREAK, 15),
    ]
    assert slots[0].start_time - _at(10) == timedelta(minutes=5)


def test_messages():
    assert "No breaks" in get_wellness_message(0)
    assert "One break" in get_wellness_message(1)
    assert "career longevity" in get_wellness_message(3)
    assert take_break_message(1) == "First break of the day - great start!"
    assert take_break_message(3) == "You're taking care of yourself - keep it up!"
