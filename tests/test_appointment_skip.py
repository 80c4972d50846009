from datetime import datetime, timezone
from zoneinfo import ZoneInfo

import pytest

from groomroute.errors import NotFoundError, PolicyViolationError
from groomroute.models.domain import Appointment, AppointmentStatus, Customer, SkipReason
from groomroute.schemas.appointments import SkipRequest
from groomroute.services.appointments import service as skip_service

TZ = ZoneInfo("America/New_York")
NOW = datetime(2026, 6, 1, 16, 0, tzinfo=timezone.utc)


@pytest.fixture
def records(monkeypatch):
    appointment = Appointment(
        id="a1",
        account_id="acct",
        groomer_id="g1",
        customer_id="c1",
        start_at=datetime(2026, 6, 1, 13, tzinfo=TZ),
        service_minutes=60,
        status=AppointmentStatus.CONFIRMED,
    )
    customer = Customer(id="c1", account_id="acct", name="Pat", cancellation_count=1, no_show_count=1)
    written = {"status": [], "reliability": [], "events": []}

    monkeypatch.setattr(skip_service, "get_account_timezone", lambda account_id: TZ)
    monkeypatch.setattr(skip_service, "get_appointment", lambda account_id, aid: appointment if aid == "a1" else None)
    monkeypatch.setattr(skip_service, "get_customer", lambda account_id, cid: customer)
    monkeypatch.setattr(
        skip_service,
        "update_appointment_status",
        lambda account_id, aid, status, notes: written["status"].append((aid, status, notes)),
    )
    monkeypatch.setattr(
        skip_service,
        "update_customer_reliability",
        lambda account_id, cid, **fields: written["reliability"].append(fields),
    )
    monkeypatch.setattr(skip_service, "record_appointment_event", lambda event: written["events"].append(event))
    return appointment, customer, written


def test_no_show_updates_counters_and_logs_event(records):
    _, _, written = records
    response = skip_service.skip_appointment(
        "acct", "a1", SkipRequest(reason=SkipReason.NO_SHOW, notes="Nobody home"), now=NOW
    )
    assert response.status is AppointmentStatus.NO_SHOW
    assert response.no_show_count == 2
    assert response.cancellation_count == 1
    fields = written["reliability"][0]
    assert fields["no_show_count"] == 2
    assert fields["last_no_show_at"] == NOW
    assert fields["last_cancellation_at"] is None
    event = written["events"][0]
    assert (event.action, event.reason, event.actor) == ("SKIPPED", "NO_SHOW", "groomer")
    # Two cancellations/no-shows is below the warning threshold.
    assert response.warning is None


def test_legacy_notes_are_appended(records, monkeypatch):
    _, _, written = records
    monkeypatch.setattr(skip_service.settings, "legacy_note_log", True)
    skip_service.skip_appointment("acct", "a1", SkipRequest(reason=SkipReason.CANCELLED, notes="Sick pup"), now=NOW)
    _, status, notes = written["status"][0]
    assert status is AppointmentStatus.CANCELLED
    assert notes == "[SKIPPED] Customer cancelled: Sick pup"
    assert written["reliability"][0]["notes"] == "[2026-06-01] Appointment cancelled: Sick pup"


def test_structured_log_only(records, monkeypatch):
    _, _, written = records
    monkeypatch.setattr(skip_service.settings, "legacy_note_log", False)
    skip_service.skip_appointment("acct", "a1", SkipRequest(reason=SkipReason.OTHER), now=NOW)
    assert written["status"][0][2] is None
    assert written["reliability"][0]["cancellation_count"] == 1
    assert len(written["events"]) == 1


def test_repeat_offender_warning(records):
    _, customer, _ = records
    customer.cancellation_count = 2
    response = skip_service.skip_appointment(
        "acct", "a1", SkipRequest(reason=SkipReason.RESCHEDULED), now=NOW
    )
    assert response.cancellation_count == 3
    assert response.warning is not None
    assert response.warning.message == "Pat has had 4 cancellations/no-shows."
    assert response.warning.suggestions


def test_already_closed_appointments_are_rejected(records):
    appointment, _, written = records
    appointment.status = AppointmentStatus.COMPLETED
    with pytest.raises(PolicyViolationError):
        skip_service.skip_appointment("acct", "a1", SkipRequest(reason=SkipReason.NO_SHOW), now=NOW)
    with pytest.raises(NotFoundError):
        skip_service.skip_appointment("acct", "missing", SkipRequest(reason=SkipReason.NO_SHOW), now=NOW)
    assert written["status"] == [] and written["events"] == []
