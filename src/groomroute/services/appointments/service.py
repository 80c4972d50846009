"""Appointment skip flow: cancellation/no-show status, reliability counters and event log."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from ...config import settings
from ...errors import NotFoundError, PolicyViolationError
from ...models.domain import INACTIVE_STATUSES, AppointmentEvent, AppointmentStatus, SkipReason
from ...persistence.database import (
    get_account_timezone,
    get_appointment,
    get_customer,
    record_appointment_event,
    update_appointment_status,
    update_customer_reliability,
)
from ...schemas.appointments import SkipRequest, SkipResponse, SkipWarningModel
from ..dates import utc_now

logger = logging.getLogger(__name__)

SKIP_STATUS = {
    SkipReason.CANCELLED: AppointmentStatus.CANCELLED,
    SkipReason.NO_SHOW: AppointmentStatus.NO_SHOW,
    SkipReason.RESCHEDULED: AppointmentStatus.CANCELLED,
    SkipReason.OTHER: AppointmentStatus.CANCELLED,
}

REASON_LABELS = {
    SkipReason.CANCELLED: "Customer cancelled",
    SkipReason.NO_SHOW: "Customer no-show",
    SkipReason.RESCHEDULED: "Rescheduled to another date",
    SkipReason.OTHER: "Other reason",
}

REPEAT_OFFENDER_SUGGESTIONS = [
    "Consider requiring an upfront deposit for future bookings",
    "Add a cancellation policy reminder when confirming",
    "Call to confirm 24 hours before appointments",
    "Consider a shorter cancellation window",
]


def _append_line(existing: Optional[str], line: str) -> str:
    return f"{existing}\n{line}" if existing else line


def skip_appointment(
    account_id: str,
    appointment_id: str,
    payload: SkipRequest,
    actor: str = "groomer",
    now: Optional[datetime] = None,
) -> SkipResponse:
    """Mark an appointment cancelled or no-show and update the customer's record."""
    now = now or utc_now()
    appointment = get_appointment(account_id, appointment_id)
    if not appointment:
        raise NotFoundError("Appointment not found")
    if appointment.status in INACTIVE_STATUSES or appointment.status is AppointmentStatus.COMPLETED:
        raise PolicyViolationError(f"Appointment is already {appointment.status.value.lower()}")
    customer = get_customer(account_id, appointment.customer_id)
    if not customer:
        raise NotFoundError("Customer not found")

    status = SKIP_STATUS[payload.reason]
    label = REASON_LABELS[payload.reason]

    appointment_notes = appointment.notes
    customer_notes = customer.notes
    if settings.legacy_note_log:
        skip_note = f"[SKIPPED] {label}{f': {payload.notes}' if payload.notes else ''}"
        appointment_notes = _append_line(appointment_notes, skip_note)
        local_day = now.astimezone(get_account_timezone(account_id)).date()
        customer_notes = _append_line(
            customer_notes,
            f"[{local_day.isoformat()}] Appointment {payload.reason.value.lower()}: {payload.notes or label}",
        )

    update_appointment_status(account_id, appointment.id, status, appointment_notes)

    cancellations, no_shows = customer.cancellation_count, customer.no_show_count
    if payload.reason is SkipReason.NO_SHOW:
        no_shows += 1
    elif payload.reason in (SkipReason.CANCELLED, SkipReason.RESCHEDULED):
        cancellations += 1
    update_customer_reliability(
        account_id,
        customer.id,
        cancellation_count=cancellations,
        no_show_count=no_shows,
        notes=customer_notes,
        last_cancellation_at=now if cancellations != customer.cancellation_count else None,
        last_no_show_at=now if no_shows != customer.no_show_count else None,
    )

    record_appointment_event(
        AppointmentEvent(
            account_id=account_id,
            appointment_id=appointment.id,
            customer_id=customer.id,
            actor=actor,
            action="SKIPPED",
            reason=payload.reason.value,
            occurred_at=now,
            notes=payload.notes,
        )
    )
    logger.info(f"Appointment {appointment.id} skipped ({payload.reason.value}) -> {status.value}")

    warning = None
    total_issues = cancellations + no_shows
    if total_issues >= settings.skip_warning_threshold:
        warning = SkipWarningModel(
            message=f"{customer.name} has had {total_issues} cancellations/no-shows.",
            customer_name=customer.name,
            cancellations=cancellations,
            no_shows=no_shows,
            suggestions=list(REPEAT_OFFENDER_SUGGESTIONS),
        )

    return SkipResponse(
        appointment_id=appointment.id,
        status=status,
        reason=payload.reason,
        cancellation_count=cancellations,
        no_show_count=no_shows,
        warning=warning,
    )
