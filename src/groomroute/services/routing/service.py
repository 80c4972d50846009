"""Route orchestration: today's re-sequencing, workday start and assistant toggle."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional, Sequence

from ...errors import InvalidRequestError, NotFoundError, PartialUpdateError, PolicyViolationError
from ...models.domain import LOCKED_STATUSES, Groomer, Route
from ...persistence.database import (
    get_account_timezone,
    get_appointments_by_ids,
    get_groomer,
    get_route,
    update_appointment_start,
    update_groomer_default_assistant,
    upsert_route,
)
from ...schemas.routing import (
    AssistantRequest,
    AssistantStatusResponse,
    ReorderedAppointmentModel,
    ReorderItemResult,
    ReorderRequest,
    ReorderResponse,
    RouteStatusResponse,
)
from ..dates import parse_date, today_in, utc_now
from .models import PlannedMove, WriteResult, WriteStatus
from .resequencer import find_overlaps, plan_reorder, validate_order

logger = logging.getLogger(__name__)


def _require_groomer(account_id: str, groomer_id: Optional[str]) -> Groomer:
    groomer = get_groomer(account_id, groomer_id)
    if not groomer:
        raise NotFoundError("Groomer not found" if groomer_id else "No groomer found for this account")
    return groomer


def _write_moves(account_id: str, moves: Sequence[PlannedMove]) -> list[WriteResult]:
    """Persist changed start times, undoing applied rows if any write fails.

    Each write is guarded by the appointment's version; a stale version
    counts as a failure.
    """
    results = {
        move.appointment.id: WriteResult(move.appointment.id, WriteStatus.SKIPPED) for move in moves
    }
    applied: list[PlannedMove] = []
    failure: Optional[str] = None
    for move in moves:
        if not move.time_changed:
            continue
        appointment = move.appointment
        try:
            written = update_appointment_start(account_id, appointment.id, move.new_start_at, appointment.version)
        except Exception as e:
            logger.error(f"Failed to move appointment {appointment.id}: {e}")
            written = False
            detail = "Storage error"
        else:
            detail = "Appointment was modified by another request"
        if not written:
            results[appointment.id] = WriteResult(appointment.id, WriteStatus.FAILED, detail)
            failure = appointment.id
            break
        results[appointment.id] = WriteResult(appointment.id, WriteStatus.APPLIED)
        applied.append(move)

    if failure is None:
        return list(results.values())

    for move in reversed(applied):
        appointment = move.appointment
        try:
            restored = update_appointment_start(
                account_id, appointment.id, move.old_start_at, appointment.version + 1
            )
        except Exception as e:
            logger.error(f"Compensation failed for appointment {appointment.id}: {e}")
            restored = False
        if restored:
            results[appointment.id] = WriteResult(appointment.id, WriteStatus.ROLLED_BACK)
        else:
            results[appointment.id] = WriteResult(
                appointment.id, WriteStatus.APPLIED, "Could not restore the previous start time"
            )

    raise PartialUpdateError(
        f"Route reorder failed at appointment {failure}; applied changes were rolled back",
        results=[
            ReorderItemResult(appointment_id=r.appointment_id, status=r.status.value, detail=r.detail).model_dump()
            for r in results.values()
        ],
    )


def reorder_route(account_id: str, payload: ReorderRequest, now: Optional[datetime] = None) -> ReorderResponse:
    """Reassign today's appointments to the existing start times in the requested order."""
    day = parse_date(payload.date)
    ordered_ids = validate_order(payload.appointment_ids)
    tz = get_account_timezone(account_id)
    if day != today_in(tz, now or utc_now()):
        raise PolicyViolationError("Route reordering is only available for today's route")

    groomer = _require_groomer(account_id, payload.groomer_id)
    appointments = get_appointments_by_ids(
        account_id, groomer.id, ordered_ids, exclude_statuses=LOCKED_STATUSES
    )
    found = {appointment.id for appointment in appointments}
    missing = [aid for aid in ordered_ids if aid not in found]
    if missing:
        raise NotFoundError(f"Appointments not found or no longer reorderable: {', '.join(missing)}")
    off_day = [a.id for a in appointments if a.start_at.astimezone(tz).date() != day]
    if off_day:
        raise InvalidRequestError(f"Appointments are not on {day.isoformat()}: {', '.join(off_day)}")

    moves = plan_reorder(appointments, ordered_ids)
    _write_moves(account_id, moves)

    affected = sum(1 for move in moves if move.time_changed)
    logger.info(f"Reordered route for groomer {groomer.id} on {day}: {affected} appointment(s) moved")
    if affected:
        message = f"Route reordered. {affected} appointment{'' if affected == 1 else 's'} updated."
    else:
        message = "Route order confirmed (no time changes needed)."
    return ReorderResponse(
        date=day.isoformat(),
        appointments=[
            ReorderedAppointmentModel(
                appointment_id=move.appointment.id,
                customer_name=move.appointment.customer_name,
                customer_phone=move.appointment.customer_phone,
                pet_name=move.appointment.pet.name if move.appointment.pet else "Pet",
                old_start_at=move.old_start_at,
                new_start_at=move.new_start_at,
                time_changed=move.time_changed,
            )
            for move in moves
        ],
        affected_count=affected,
        message=message,
        warnings=[f"Appointments {a} and {b} now overlap" for a, b in find_overlaps(moves)],
    )


def _todays_route(account_id: str, groomer: Groomer, now: Optional[datetime]) -> tuple[Optional[Route], Route]:
    """Existing route row for today (if any) and the row to write."""
    today = today_in(get_account_timezone(account_id), now or utc_now())
    existing = get_route(account_id, groomer.id, today)
    base = existing or Route(
        account_id=account_id,
        groomer_id=groomer.id,
        route_date=today,
        has_assistant=groomer.default_has_assistant,
    )
    return existing, base


def start_workday(account_id: str, groomer_id: Optional[str] = None, now: Optional[datetime] = None) -> RouteStatusResponse:
    groomer = _require_groomer(account_id, groomer_id)
    _, route = _todays_route(account_id, groomer, now)
    route.workday_started = True
    saved = upsert_route(route)
    logger.info(f"Workday started for groomer {groomer.id} on {saved.route_date}")
    return RouteStatusResponse(
        date=saved.route_date.isoformat(),
        groomer_id=groomer.id,
        workday_started=saved.workday_started,
        has_assistant=saved.has_assistant,
    )


def get_assistant_status(
    account_id: str, groomer_id: Optional[str] = None, now: Optional[datetime] = None
) -> AssistantStatusResponse:
    """Today's route value wins over the groomer default."""
    groomer = _require_groomer(account_id, groomer_id)
    existing, route = _todays_route(account_id, groomer, now)
    return AssistantStatusResponse(
        date=route.route_date.isoformat(),
        groomer_id=groomer.id,
        has_assistant=route.has_assistant,
        default_has_assistant=groomer.default_has_assistant,
        from_route=existing is not None,
    )


def set_assistant(
    account_id: str, payload: AssistantRequest, now: Optional[datetime] = None
) -> AssistantStatusResponse:
    groomer = _require_groomer(account_id, payload.groomer_id)
    _, route = _todays_route(account_id, groomer, now)
    route.has_assistant = payload.has_assistant
    saved = upsert_route(route)
    default = groomer.default_has_assistant
    if payload.set_as_default:
        update_groomer_default_assistant(account_id, groomer.id, payload.has_assistant)
        default = payload.has_assistant
    return AssistantStatusResponse(
        date=saved.route_date.isoformat(),
        groomer_id=groomer.id,
        has_assistant=saved.has_assistant,
        default_has_assistant=default,
        from_route=True,
    )
