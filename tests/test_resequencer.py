from collections import Counter
from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from groomroute.errors import InvalidRequestError
from groomroute.models.domain import Appointment, AppointmentStatus
from groomroute.services.routing.resequencer import find_overlaps, plan_reorder, validate_order

TZ = ZoneInfo("America/New_York")


def _appointment(aid: str, hour: int, minutes: int = 60) -> Appointment:
    return Appointment(
        id=aid,
        account_id="acct",
        groomer_id="g1",
        customer_id=f"c-{aid}",
        start_at=datetime(2026, 6, 1, hour, tzinfo=TZ),
        service_minutes=minutes,
        status=AppointmentStatus.SCHEDULED,
    )


def test_reorder_swaps_into_existing_slots():
    appointments = [_appointment("A", 9), _appointment("B", 10), _appointment("C", 11)]
    moves = plan_reorder(appointments, ["C", "A", "B"])
    assert [(m.appointment.id, m.new_start_at.hour) for m in moves] == [("C", 9), ("A", 10), ("B", 11)]
    assert all(m.time_changed for m in moves)


def test_reorder_preserves_start_time_multiset():
    appointments = [_appointment("A", 9), _appointment("B", 9), _appointment("C", 13), _appointment("D", 10)]
    moves = plan_reorder(appointments, ["D", "C", "B", "A"])
    assert Counter(m.new_start_at for m in moves) == Counter(a.start_at for a in appointments)


def test_identity_order_changes_nothing():
    appointments = [_appointment("A", 9), _appointment("B", 10)]
    moves = plan_reorder(appointments, ["A", "B"])
    assert not any(m.time_changed for m in moves)


def test_order_must_cover_every_appointment():
    appointments = [_appointment("A", 9), _appointment("B", 10)]
    with pytest.raises(InvalidRequestError):
        plan_reorder(appointments, ["A"])
    with pytest.raises(InvalidRequestError):
        plan_reorder(appointments, ["A", "X"])


@pytest.mark.parametrize("ids", [[], ["A", " "], ["A", "B", "A"]])
def test_validate_order_rejects_bad_input(ids):
    with pytest.raises(InvalidRequestError):
        validate_order(ids)


def test_validate_order_trims_ids():
    assert validate_order([" A", "B "]) == ["A", "B"]


def test_overlaps_reported_when_durations_differ():
    # A long appointment moved into the first slot runs into the next one.
    appointments = [_appointment("A", 9), _appointment("B", 10, minutes=120), _appointment("C", 12)]
    moves = plan_reorder(appointments, ["B", "A", "C"])
    assert find_overlaps(moves) == [("B", "A")]
    assert find_overlaps(plan_reorder(appointments, ["A", "B", "C"])) == []
