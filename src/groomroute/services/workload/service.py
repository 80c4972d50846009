"""Workload orchestration: day assessment, intensity budget checks and booking length."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Optional
from zoneinfo import ZoneInfo

from ...config import settings
from ...errors import InvalidRequestError, NotFoundError
from ...models.domain import AppointmentStatus, GroomIntensity, Groomer
from ...persistence.database import get_account_timezone, get_appointments_between, get_groomer, get_route
from ...schemas.workload import (
    DurationEstimateResponse,
    IntensityCheckResponse,
    IntensitySummaryModel,
    WorkloadAssessmentModel,
    WorkloadResponse,
)
from ..dates import day_bounds, parse_date, today_in, utc_now
from .assessment import WorkloadPolicy, assess_workload_from_appointments, is_large_dog
from .intensity import (
    SIZE_WEIGHTS,
    calculate_total_intensity,
    check_intensity_limit,
    estimate_duration,
    format_duration,
    intensity_percentage,
    intensity_status,
)

logger = logging.getLogger(__name__)


def _require_groomer(account_id: str, groomer_id: Optional[str]) -> Groomer:
    groomer = get_groomer(account_id, groomer_id)
    if not groomer:
        raise NotFoundError("Groomer not found" if groomer_id else "No groomer found for this account")
    return groomer


def _day_appointments(account_id: str, groomer_id: str, day: date, tz: ZoneInfo):
    start, end = day_bounds(day, tz)
    return get_appointments_between(account_id, groomer_id, start, end)


def get_day_workload(
    account_id: str,
    date_str: Optional[str] = None,
    groomer_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> WorkloadResponse:
    """Assess a groomer's day; today only counts the grooms still ahead.

    Assistant presence comes from the day's route row, falling back to the
    groomer's default.
    """
    groomer = _require_groomer(account_id, groomer_id)
    tz = get_account_timezone(account_id)
    today = today_in(tz, now or utc_now())
    day = parse_date(date_str) if date_str else today
    route = get_route(account_id, groomer.id, day)
    has_assistant = route.has_assistant if route else groomer.default_has_assistant

    appointments = _day_appointments(account_id, groomer.id, day, tz)
    completed = sum(1 for a in appointments if a.status is AppointmentStatus.COMPLETED)
    policy = WorkloadPolicy.from_settings()
    assessment = assess_workload_from_appointments(
        appointments,
        has_assistant,
        completed_count=completed if day == today else None,
        policy=policy,
    )

    total = calculate_total_intensity(appointments)
    level, message = intensity_status(total, groomer.daily_intensity_limit)
    logger.info(
        f"Workload for groomer {groomer.id} on {day}: {assessment.level.value} "
        f"({len(appointments)} appointments, assistant={has_assistant})"
    )
    return WorkloadResponse(
        date=day.isoformat(),
        groomer_id=groomer.id,
        has_assistant=has_assistant,
        appointment_count=len(appointments),
        completed_count=completed,
        large_dog_count=sum(1 for a in appointments if is_large_dog(a, policy.large_dog_threshold)),
        assessment=WorkloadAssessmentModel(
            level=assessment.level.value,
            label=assessment.label,
            message=assessment.message,
            show_calm_link=assessment.show_calm_link,
            workload_score=round(assessment.workload_score, 1),
            remaining_appointments=assessment.remaining_appointments,
            remaining_minutes=assessment.remaining_minutes,
            stress_points=assessment.stress_points,
        ),
        intensity=IntensitySummaryModel(
            total=total,
            limit=groomer.daily_intensity_limit,
            percentage=intensity_percentage(total, groomer.daily_intensity_limit),
            level=level,
            message=message,
        ),
    )


def check_intensity(
    account_id: str,
    date_str: str,
    intensity: str,
    groomer_id: Optional[str] = None,
    exclude_appointment_id: Optional[str] = None,
) -> IntensityCheckResponse:
    """Whether one more pet of the given intensity fits the groomer's daily budget."""
    day = parse_date(date_str)
    try:
        new_intensity = GroomIntensity(intensity.upper())
    except ValueError as exc:
        raise InvalidRequestError(
            f"Invalid intensity '{intensity}'. Use one of: {', '.join(i.value for i in GroomIntensity)}"
        ) from exc
    groomer = _require_groomer(account_id, groomer_id)
    appointments = [
        a for a in _day_appointments(account_id, groomer.id, day, get_account_timezone(account_id))
        if a.id != exclude_appointment_id
    ]
    result = check_intensity_limit(appointments, new_intensity, groomer.daily_intensity_limit)
    return IntensityCheckResponse(
        date=day.isoformat(),
        intensity=new_intensity,
        allowed=result.allowed,
        current_total=result.current_total,
        would_be_total=result.would_be_total,
        limit=result.limit,
        remaining=result.remaining,
        over_by=result.over_by,
    )


def estimate_booking_duration(species: str, breed: Optional[str], size: str) -> DurationEstimateResponse:
    species = (species or "").strip().lower()
    size = (size or "").strip().lower()
    if species not in SIZE_WEIGHTS:
        raise InvalidRequestError("species must be 'dog' or 'cat'")
    if size not in SIZE_WEIGHTS["dog"]:
        raise InvalidRequestError("size must be one of: small, medium, large, giant")
    estimate = estimate_duration(species, breed or "", size)
    minutes = max(settings.min_duration_minutes, min(settings.max_duration_minutes, estimate.minutes))
    return DurationEstimateResponse(
        minutes=minutes,
        formatted=format_duration(minutes),
        intensity=estimate.intensity,
        reasons=estimate.reasons,
        confidence=estimate.confidence.value,
    )
