"""Scheduling orchestration: public slots, conflict checks, working hours, workload and gaps."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from ...config import settings
from ...errors import InvalidRequestError, NotFoundError, PolicyViolationError
from ...models.domain import Appointment, Groomer
from ...persistence.database import (
    get_account_timezone,
    get_appointments_between,
    get_groomer,
    get_groomer_by_slug,
)
from ...schemas.booking import AvailableSlotsResponse, TimeSlotModel, WorkingHoursModel
from ...schemas.scheduling import (
    ConflictCheckResponse,
    ConflictModel,
    GapModel,
    GapsResponse,
    LargeDogCountResponse,
    LargeDogModel,
    WorkingHoursCheckResponse,
)
from ..dates import day_bounds, format_minutes_12h, minutes_to_hhmm, parse_date, parse_time, utc_now
from ..watchlist.ranker import WatchlistQuery, rank_waitlist
from ..watchlist.service import load_ranking_inputs, to_suggestion_model
from .intervals import busy_windows
from .slots import (
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

logger = logging.getLogger(__name__)

GAP_SUGGESTION_LIMIT = 5


def _require_groomer(account_id: str, groomer_id: Optional[str] = None) -> Groomer:
    groomer = get_groomer(account_id, groomer_id)
    if not groomer:
        raise NotFoundError("Groomer not found" if groomer_id else "No groomer found for this account")
    return groomer


def _appointments_for_day(
    account_id: str, groomer_id: str, day: date, tz: ZoneInfo, exclude_id: Optional[str] = None
) -> list[Appointment]:
    start, end = day_bounds(day, tz)
    return get_appointments_between(
        account_id, groomer_id, start, end, exclude_ids=[exclude_id] if exclude_id else ()
    )


def get_available_slots(groomer_slug: str, date_str: str, duration: Optional[int] = None) -> AvailableSlotsResponse:
    """Bookable start times for a public booking page."""
    if not groomer_slug:
        raise InvalidRequestError("Groomer slug is required")
    day = parse_date(date_str)
    groomer = get_groomer_by_slug(groomer_slug)
    if not groomer:
        raise NotFoundError("Groomer not found")
    if not groomer.booking_enabled:
        raise PolicyViolationError("Online booking is not available", status_code=403)

    tz = get_account_timezone(groomer.account_id)
    slot_duration = clamp_duration(
        duration,
        settings.default_booking_duration_minutes,
        settings.min_duration_minutes,
        settings.max_duration_minutes,
    )
    work_start, work_end = working_hours(groomer)
    appointments = _appointments_for_day(groomer.account_id, groomer.id, day, tz)
    windows = busy_windows(appointments, tz, settings.booking_buffer_minutes)
    availability = generate_available_slots(
        work_start, work_end, windows, slot_duration, settings.slot_interval_minutes
    )
    logger.info(
        f"{len(availability.available)}/{availability.total_slots} slots open for groomer {groomer.id} on {day}"
    )
    return AvailableSlotsResponse(
        date=day.isoformat(),
        groomer_name=groomer.name,
        slots=[
            TimeSlotModel(time=minutes_to_hhmm(m), time_formatted=format_minutes_12h(m))
            for m in availability.available
        ],
        total_slots=availability.total_slots,
        available_count=len(availability.available),
        working_hours=WorkingHoursModel(start=minutes_to_hhmm(work_start), end=minutes_to_hhmm(work_end)),
        slot_duration_minutes=slot_duration,
    )


def check_conflict(
    account_id: str,
    date_str: str,
    time_str: str,
    duration: Optional[int] = None,
    exclude_id: Optional[str] = None,
    groomer_id: Optional[str] = None,
) -> ConflictCheckResponse:
    day = parse_date(date_str)
    start = parse_time(time_str)
    duration = settings.default_conflict_duration_minutes if duration is None else duration
    if not settings.min_duration_minutes <= duration <= settings.max_duration_minutes:
        raise InvalidRequestError(
            f"Duration must be between {settings.min_duration_minutes} and "
            f"{settings.max_duration_minutes} minutes"
        )

    groomer = _require_groomer(account_id, groomer_id)
    tz = get_account_timezone(account_id)
    appointments = _appointments_for_day(account_id, groomer.id, day, tz, exclude_id=exclude_id)
    windows = busy_windows(appointments, tz)
    conflicts = find_conflicts(start, duration, windows)

    next_available = None
    if conflicts:
        work_start, work_end = working_hours(groomer)
        next_available = find_next_available(
            start,
            duration,
            windows,
            work_start,
            work_end,
            buffer_minutes=settings.booking_buffer_minutes,
            rounding_minutes=settings.conflict_rounding_minutes,
        )

    return ConflictCheckResponse(
        has_conflict=bool(conflicts),
        conflicts=[
            ConflictModel(
                id=window.appointment.id,
                customer_name=window.appointment.customer_name or "Unknown",
                pet_name=window.appointment.pet.name if window.appointment.pet else "Unknown",
                start_time=format_minutes_12h(window.start),
                end_time=format_minutes_12h(window.end),
            )
            for window in conflicts
        ],
        proposed_start=format_minutes_12h(start),
        proposed_end=format_minutes_12h(start + duration),
        next_available=minutes_to_hhmm(next_available) if next_available is not None else None,
        next_available_formatted=format_minutes_12h(next_available) if next_available is not None else None,
    )


_HOURS_MESSAGES = {
    WorkingHoursStatus.STARTS_BEFORE: "Starts {minutes} minutes before working hours begin",
    WorkingHoursStatus.STARTS_AFTER: "Starts {minutes} minutes after working hours end",
    WorkingHoursStatus.ENDS_AFTER: "Ends {minutes} minutes after working hours end",
}


def check_groomer_working_hours(
    account_id: str, time_str: str, duration: Optional[int] = None, groomer_id: Optional[str] = None
) -> WorkingHoursCheckResponse:
    start = parse_time(time_str)
    duration = duration or 0
    if duration < 0:
        raise InvalidRequestError("Duration cannot be negative")
    groomer = _require_groomer(account_id, groomer_id)
    work_start, work_end = working_hours(groomer)
    result = check_working_hours(start, duration, work_start, work_end)
    template = _HOURS_MESSAGES.get(result.status)
    return WorkingHoursCheckResponse(
        status=result.status.value,
        within_hours=result.within,
        minutes_outside=result.minutes_outside,
        working_hours_start=minutes_to_hhmm(work_start),
        working_hours_end=minutes_to_hhmm(work_end),
        message=template.format(minutes=result.minutes_outside) if template else None,
    )


def get_large_dog_count(
    account_id: str,
    date_str: str,
    exclude_appointment_id: Optional[str] = None,
    groomer_id: Optional[str] = None,
) -> LargeDogCountResponse:
    day = parse_date(date_str)
    groomer = _require_groomer(account_id, groomer_id)
    tz = get_account_timezone(account_id)
    appointments = _appointments_for_day(account_id, groomer.id, day, tz)
    result = count_large_dogs(
        appointments,
        groomer.large_dog_daily_limit,
        threshold=settings.large_dog_weight_threshold,
        exclude_appointment_id=exclude_appointment_id,
    )
    return LargeDogCountResponse(
        date=day.isoformat(),
        count=result.count,
        limit=result.limit,
        at_limit=result.at_limit,
        over_limit=result.over_limit,
        remaining_slots=result.remaining_slots,
        large_dogs=[
            LargeDogModel(
                appointment_id=appointment.id,
                pet_name=appointment.pet.name if appointment.pet else None,
                weight=appointment.pet.weight,
            )
            for appointment in result.large_dogs
        ],
    )


def get_schedule_gaps(
    account_id: str,
    date_str: str,
    min_gap_minutes: Optional[int] = None,
    groomer_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> GapsResponse:
    """Free windows in the day, each with its best waitlist matches."""
    day = parse_date(date_str)
    min_gap = settings.min_gap_minutes if min_gap_minutes is None else min_gap_minutes
    if min_gap < 0:
        raise InvalidRequestError("Minimum gap cannot be negative")
    groomer = _require_groomer(account_id, groomer_id)
    tz = get_account_timezone(account_id)
    appointments = _appointments_for_day(account_id, groomer.id, day, tz)
    work_start, work_end = working_hours(groomer)
    gaps = find_schedule_gaps(work_start, work_end, busy_windows(appointments, tz), min_gap)

    now = now or utc_now()
    inputs = load_ranking_inputs(account_id, groomer, day, appointments) if gaps else None
    models = []
    for gap in gaps:
        period = time_of_day(gap.start)
        ranked = rank_waitlist(
            inputs.entries,
            inputs.histories,
            WatchlistQuery(target_date=day, limit=GAP_SUGGESTION_LIMIT, time_of_day=period),
            inputs.context,
            now,
        )
        models.append(
            GapModel(
                start=minutes_to_hhmm(gap.start),
                end=minutes_to_hhmm(gap.end),
                start_formatted=format_minutes_12h(gap.start),
                end_formatted=format_minutes_12h(gap.end),
                duration_minutes=gap.duration_minutes,
                time_of_day=period.value,
                previous_appointment_id=gap.previous.id if gap.previous else None,
                next_appointment_id=gap.following.id if gap.following else None,
                suggestions=[to_suggestion_model(item) for item in ranked],
            )
        )
    return GapsResponse(
        date=day.isoformat(),
        gaps=models,
        total_gap_minutes=sum(gap.duration_minutes for gap in gaps),
    )
