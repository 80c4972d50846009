from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from groomroute.models.domain import Appointment, AppointmentStatus, Groomer, Pet, TimeOfDay
from groomroute.services.scheduling.intervals import BusyWindow, busy_windows, overlaps
from groomroute.services.scheduling.slots import (
    WorkingHoursStatus,
    check_working_hours,
    clamp_duration,
    count_large_dogs,
    find_conflicts,
    find_next_available,
    find_schedule_gaps,
    generate_available_slots,
    time_of_day,
    working_hours,
)

TZ = ZoneInfo("America/New_York")
NINE, FIVE = 9 * 60, 17 * 60


def _appointment(aid: str, hour: int, minute: int = 0, minutes: int = 60, status=AppointmentStatus.SCHEDULED, weight=None):
    return Appointment(
        id=aid,
        account_id="acct",
        groomer_id="g1",
        customer_id=f"c-{aid}",
        start_at=datetime(2026, 6, 1, hour, minute, tzinfo=TZ),
        service_minutes=minutes,
        status=status,
        pet=Pet(id=f"p-{aid}", name="Rex", weight=weight) if weight is not None else None,
    )


def test_overlap_is_half_open_and_symmetric():
    assert not overlaps(540, 600, 600, 660)
    assert not overlaps(600, 660, 540, 600)
    assert overlaps(540, 601, 600, 660) == overlaps(600, 660, 540, 601) is True


def test_busy_windows_skip_inactive_and_add_buffer_after():
    appointments = [
        _appointment("b", 11),
        _appointment("a", 10),
        _appointment("x", 12, status=AppointmentStatus.CANCELLED),
        _appointment("y", 13, status=AppointmentStatus.NO_SHOW),
    ]
    windows = busy_windows(appointments, TZ, buffer_minutes=15)
    assert [(w.start, w.end, w.appointment.id) for w in windows] == [(600, 675, "a"), (660, 735, "b")]


def test_last_slot_depends_on_duration():
    sixty = generate_available_slots(NINE, FIVE, [], 60)
    ninety = generate_available_slots(NINE, FIVE, [], 90)
    assert sixty.available[-1] == 16 * 60
    assert ninety.available[-1] == 15 * 60 + 30
    assert sixty.total_slots == 15
    assert ninety.total_slots == 14


def test_total_slots_counts_only_starts_that_fit():
    windows = busy_windows([_appointment("a", 10)], TZ, buffer_minutes=15)
    result = generate_available_slots(NINE, FIVE, windows, 60)
    assert result.total_slots == 15
    assert len(result.available) == 11
    assert generate_available_slots(NINE, NINE + 45, [], 60).total_slots == 0


def test_slots_avoid_buffered_appointments():
    windows = busy_windows([_appointment("a", 10)], TZ, buffer_minutes=15)
    slots = generate_available_slots(NINE, FIVE, windows, 60).available
    assert 540 in slots
    for blocked in (570, 600, 630, 660):
        assert blocked not in slots
    assert 690 in slots


def test_clamp_duration():
    assert clamp_duration(None, 60, 30, 180) == 60
    assert clamp_duration(10, 60, 30, 180) == 30
    assert clamp_duration(500, 60, 30, 180) == 180


def test_conflict_and_next_available_after_buffer():
    windows = busy_windows([_appointment("a", 9, 30)], TZ)
    conflicts = find_conflicts(600, 60, windows)
    assert [w.appointment.id for w in conflicts] == ["a"]
    # 9:30-10:30 booked, so 10:30 + 15 minutes buffer.
    assert find_next_available(600, 60, windows, NINE, FIVE) == 10 * 60 + 45


def test_next_available_none_when_day_is_full():
    windows = [BusyWindow(start=NINE, end=FIVE)]
    assert find_next_available(600, 60, windows, NINE, FIVE) is None


def test_next_available_rounds_to_quarter_hour():
    windows = busy_windows([_appointment("a", 9, 0, minutes=50)], TZ)
    # 9:50 + 15 = 10:05, rounded up to 10:15.
    assert find_next_available(540, 60, windows, NINE, FIVE) == 10 * 60 + 15


def test_working_hours_classification():
    check = check_working_hours(7 * 60 + 30, 60, 8 * 60, FIVE)
    assert check.status is WorkingHoursStatus.STARTS_BEFORE
    assert check.minutes_outside == 30
    assert check_working_hours(FIVE, 60, NINE, FIVE).status is WorkingHoursStatus.STARTS_AFTER
    late = check_working_hours(16 * 60 + 30, 60, NINE, FIVE)
    assert late.status is WorkingHoursStatus.ENDS_AFTER and late.minutes_outside == 30
    assert check_working_hours(NINE, 60, NINE, FIVE).within


def test_working_hours_default_when_groomer_has_none():
    groomer = Groomer(id="g1", account_id="acct", name="Sam")
    assert working_hours(groomer) == (NINE, FIVE)
    groomer.working_hours_start, groomer.working_hours_end = "08:00", "16:30"
    assert working_hours(groomer) == (480, 990)


def test_large_dog_count_at_limit():
    appointments = [
        _appointment("a", 9, weight=60),
        _appointment("b", 10, weight=40),
        _appointment("c", 11, weight=70),
    ]
    result = count_large_dogs(appointments, limit=2)
    assert result.count == 2
    assert result.at_limit and not result.over_limit
    assert result.remaining_slots == 0


def test_large_dog_count_threshold_is_strict_and_excludes():
    appointments = [
        _appointment("a", 9, weight=50),
        _appointment("b", 10, weight=80),
        _appointment("c", 11, weight=90, status=AppointmentStatus.CANCELLED),
        _appointment("d", 12),
    ]
    assert count_large_dogs(appointments, limit=None).count == 1
    excluded = count_large_dogs(appointments, limit=3, exclude_appointment_id="b")
    assert excluded.count == 0
    assert excluded.remaining_slots == 3
    assert count_large_dogs([], limit=None).remaining_slots is None


@pytest.mark.parametrize(
    "minutes, expected",
    [(9 * 60, TimeOfDay.MORNING), (12 * 60, TimeOfDay.AFTERNOON), (17 * 60, TimeOfDay.EVENING)],
)
def test_time_of_day(minutes, expected):
    assert time_of_day(minutes) is expected


def test_schedule_gaps():
    windows = busy_windows([_appointment("a", 10), _appointment("b", 13)], TZ)
    gaps = find_schedule_gaps(NINE, FIVE, windows, min_gap_minutes=45)
    assert [(g.start, g.end) for g in gaps] == [(540, 600), (660, 780), (840, 1020)]
    assert gaps[0].previous is None and gaps[0].following.id == "a"
    assert gaps[1].previous.id == "a" and gaps[1].following.id == "b"
    assert gaps[2].following is None

    wide = find_schedule_gaps(NINE, FIVE, windows, min_gap_minutes=90)
    assert [g.duration_minutes for g in wide] == [120, 180]


def test_gaps_follow_the_latest_end_of_nested_appointments():
    windows = busy_windows([_appointment("long", 9, minutes=240), _appointment("short", 10)], TZ)
    gaps = find_schedule_gaps(NINE, FIVE, windows, min_gap_minutes=45)
    assert [(g.start, g.end) for g in gaps] == [(13 * 60, FIVE)]
    assert gaps[0].previous.id == "long"
