"""Break tracking: listing, scheduling, taking and suggesting breaks."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from ...errors import InvalidRequestError, NotFoundError
from ...models.domain import AppointmentStatus, Break, Groomer
from ...persistence.database import (
    create_break,
    get_account_timezone,
    get_appointments_between,
    get_breaks,
    get_groomer,
    mark_break_taken,
)
from ...schemas.breaks import (
    BreakListResponse,
    BreakModel,
    BreakSlotModel,
    BreakStatsModel,
    BreakSuggestionModel,
    BreakSuggestResponse,
    ScheduleBreakRequest,
    TakeBreakRequest,
    TakeBreakResponse,
)
from ..dates import day_bounds, format_time_12h, local_datetime, parse_date, parse_time, today_in, utc_now
from .calculator import (
    BreakStats,
    calculate_break_stats,
    energy_load_since,
    find_optimal_break_slots,
    get_break_suggestion,
    get_wellness_message,
    take_break_message,
)

logger = logging.getLogger(__name__)


def _require_groomer(account_id: str, groomer_id: Optional[str]) -> Groomer:
    groomer = get_groomer(account_id, groomer_id)
    if not groomer:
        raise NotFoundError("Groomer not found" if groomer_id else "No groomer found for this account")
    return groomer


def _break_model(item: Break) -> BreakModel:
    return BreakModel(
        id=item.id,
        break_date=item.break_date.isoformat(),
        break_type=item.break_type,
        start_time=item.start_time,
        end_time=item.end_time,
        taken=item.taken,
        taken_at=item.taken_at,
        duration_minutes=item.duration_minutes,
    )


def _stats_model(stats: BreakStats) -> BreakStatsModel:
    return BreakStatsModel(
        breaks_taken_today=stats.breaks_taken_today,
        total_break_minutes=stats.total_break_minutes,
        last_break_time=stats.last_break_time,
        scheduled_breaks=stats.scheduled_breaks,
    )


def _day_appointments(account_id: str, groomer_id: str, day: date, tz: ZoneInfo):
    start, end = day_bounds(day, tz)
    return get_appointments_between(account_id, groomer_id, start, end)


def list_breaks(
    account_id: str,
    date_str: Optional[str] = None,
    groomer_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> BreakListResponse:
    tz = get_account_timezone(account_id)
    day = parse_date(date_str) if date_str else today_in(tz, now or utc_now())
    groomer = _require_groomer(account_id, groomer_id)
    breaks = get_breaks(account_id, groomer.id, day)
    stats = calculate_break_stats(breaks)
    slots = find_optimal_break_slots(_day_appointments(account_id, groomer.id, day, tz))
    return BreakListResponse(
        date=day.isoformat(),
        breaks=[_break_model(item) for item in breaks],
        stats=_stats_model(stats),
        wellness_message=get_wellness_message(stats.breaks_taken_today),
        optimal_slots=[
            BreakSlotModel(
                start_time=slot.start_time,
                start_formatted=format_time_12h(slot.start_time, tz),
                duration_minutes=slot.duration_minutes,
                break_type=slot.break_type,
            )
            for slot in slots
        ],
    )


def suggest_break(
    account_id: str, groomer_id: Optional[str] = None, now: Optional[datetime] = None
) -> BreakSuggestResponse:
    """Whether to take a break right now, based on today's route."""
    now = now or utc_now()
    tz = get_account_timezone(account_id)
    today = today_in(tz, now)
    groomer = _require_groomer(account_id, groomer_id)
    stats = calculate_break_stats(get_breaks(account_id, groomer.id, today))
    appointments = _day_appointments(account_id, groomer.id, today, tz)
    suggestion = get_break_suggestion(appointments, stats.last_break_time, now)
    return BreakSuggestResponse(
        suggestion=BreakSuggestionModel(
            should_suggest=suggestion.should_suggest,
            reason=suggestion.reason,
            message=suggestion.message,
            subtext=suggestion.subtext,
            break_type=suggestion.break_type,
            available_minutes=suggestion.available_minutes,
            suggested_duration_minutes=suggestion.suggested_duration_minutes,
        ),
        stats=_stats_model(stats),
        completed_today=sum(1 for a in appointments if a.status is AppointmentStatus.COMPLETED),
        energy_load=energy_load_since(appointments, stats.last_break_time),
    )


def schedule_break(account_id: str, payload: ScheduleBreakRequest) -> BreakModel:
    day = parse_date(payload.date)
    start = parse_time(payload.start_time, field="start_time")
    end = parse_time(payload.end_time, field="end_time")
    if end <= start:
        raise InvalidRequestError("end_time must be after start_time")
    groomer = _require_groomer(account_id, payload.groomer_id)
    tz = get_account_timezone(account_id)
    created = create_break(
        account_id,
        groomer.id,
        day,
        payload.break_type,
        start_time=local_datetime(day, start, tz),
        end_time=local_datetime(day, end, tz),
    )
    logger.info(f"Scheduled {payload.break_type.value} break for groomer {groomer.id} on {day}")
    return _break_model(created)


def take_break(account_id: str, payload: TakeBreakRequest, now: Optional[datetime] = None) -> TakeBreakResponse:
    """Mark a scheduled break as taken, or record an ad-hoc one for today."""
    now = now or utc_now()
    groomer = _require_groomer(account_id, payload.groomer_id)
    today = today_in(get_account_timezone(account_id), now)
    if payload.break_id:
        recorded = mark_break_taken(
            account_id, groomer.id, today, payload.break_id, now, payload.duration_minutes
        )
        if recorded is None:
            raise NotFoundError("Break not found")
    else:
        recorded = create_break(
            account_id,
            groomer.id,
            today,
            payload.break_type,
            taken=True,
            taken_at=now,
            duration_minutes=payload.duration_minutes,
        )

    stats = calculate_break_stats(get_breaks(account_id, groomer.id, today))
    return TakeBreakResponse(
        break_=_break_model(recorded),
        breaks_taken=stats.breaks_taken_today,
        total_break_minutes=stats.total_break_minutes,
        message=take_break_message(stats.breaks_taken_today),
    )
