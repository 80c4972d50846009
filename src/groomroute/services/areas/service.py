"""Service area orchestration: customer assignment, area days and public address checks."""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from ...config import settings
from ...errors import InvalidRequestError, NotFoundError, PolicyViolationError
from ...models.domain import AreaDayAssignment, AreaForDate, Groomer, ServiceArea
from ...persistence.database import (
    get_account_timezone,
    get_area_customer_zip_codes,
    get_area_date_overrides,
    get_area_day_assignments,
    get_customer,
    get_groomer,
    get_groomer_by_slug,
    get_service_area,
    get_service_areas,
    get_unassigned_customers,
    update_customer_area,
)
from ...schemas.areas import (
    AreaAssignmentModel,
    AreaDateModel,
    AreaForDateModel,
    AreaScheduleResponse,
    AreaSuggestionModel,
    AreaSuggestResponse,
    AreaSummaryModel,
    AssignAreaResponse,
    AutoAssignResponse,
    NextAreaDateResponse,
    SuggestDateResponse,
    UnmatchedCustomerModel,
)
from ...schemas.booking import CheckAddressRequest, CheckAddressResponse, RecommendedDayModel
from ..dates import DAY_NAMES, parse_date, today_in, utc_now
from ..geocoding.client import GeocodingResult, geocode_address
from .matcher import (
    Location,
    area_days,
    areas_for_date_range,
    assigned_area_for_weekday,
    build_profiles,
    find_matching_area,
    find_next_area_day_date,
    format_day_names,
    resolve_area_for_date,
    suggest_area_for_zip,
    suggestion_reason,
    upcoming_area_dates,
)

logger = logging.getLogger(__name__)

UNMATCHED_PREVIEW_LIMIT = 20
MAX_SCHEDULE_RANGE_DAYS = 92
UPCOMING_DATES_LIMIT = 5


def _require_groomer(account_id: str, groomer_id: Optional[str]) -> Groomer:
    groomer = get_groomer(account_id, groomer_id)
    if not groomer:
        raise NotFoundError("Groomer not found" if groomer_id else "No groomer found for this account")
    return groomer


def _summary(area: ServiceArea, customer_count: int = 0) -> AreaSummaryModel:
    return AreaSummaryModel(id=area.id, name=area.name, color=area.color, customer_count=customer_count)


def auto_assign_customers(account_id: str) -> AutoAssignResponse:
    """Assign every unassigned customer to the first active area that covers them."""
    areas = get_service_areas(account_id)
    if not areas:
        raise InvalidRequestError("No active service areas. Create an area before auto-assigning customers.")
    areas = sorted(areas, key=lambda a: (a.name, a.id))

    customers = get_unassigned_customers(account_id)
    assignments: list[AreaAssignmentModel] = []
    unmatched: list[UnmatchedCustomerModel] = []
    for customer in customers:
        area = find_matching_area(areas, Location(zip_code=customer.zip_code, lat=customer.lat, lng=customer.lng))
        if area is None:
            unmatched.append(
                UnmatchedCustomerModel(
                    id=customer.id, name=customer.name, address=customer.address, zip_code=customer.zip_code
                )
            )
            continue
        update_customer_area(account_id, customer.id, area.id)
        assignments.append(
            AreaAssignmentModel(
                customer_id=customer.id, customer_name=customer.name, area_id=area.id, area_name=area.name
            )
        )

    logger.info(
        f"Auto-assigned {len(assignments)} of {len(customers)} customers for account {account_id}"
    )
    return AutoAssignResponse(
        total_processed=len(customers),
        assigned_count=len(assignments),
        unmatched_count=len(unmatched),
        assignments=assignments,
        unmatched=unmatched[:UNMATCHED_PREVIEW_LIMIT],
        message=f"Assigned {len(assignments)} customer{'s' if len(assignments) != 1 else ''} to service areas",
    )


def assign_customer_area(account_id: str, customer_id: str, area_id: Optional[str]) -> AssignAreaResponse:
    customer = get_customer(account_id, customer_id)
    if not customer:
        raise NotFoundError("Customer not found")
    area = None
    if area_id:
        area = get_service_area(account_id, area_id)
        if not area:
            raise NotFoundError("Service area not found")
    update_customer_area(account_id, customer.id, area.id if area else None)
    return AssignAreaResponse(
        customer_id=customer.id,
        area_id=area.id if area else None,
        area_name=area.name if area else None,
    )


def suggest_area(account_id: str, zip_code: Optional[str]) -> AreaSuggestResponse:
    """Suggest an area for a zip code from the zip codes of existing customers."""
    if not zip_code or not zip_code.strip():
        raise InvalidRequestError("zip_code is required")
    areas = get_service_areas(account_id)
    if not areas:
        return AreaSuggestResponse(reason="No service areas defined yet")

    profiles = build_profiles(areas, get_area_customer_zip_codes(account_id))
    suggestions = suggest_area_for_zip(profiles, zip_code)
    if not suggestions:
        return AreaSuggestResponse(
            reason="No matching areas found for this zip code",
            all_areas=[_summary(p.area, p.customer_count) for p in profiles],
        )

    best = suggestions[0]
    return AreaSuggestResponse(
        suggestion=AreaSuggestionModel(
            id=best.profile.area.id,
            name=best.profile.area.name,
            color=best.profile.area.color,
            customer_count=best.profile.customer_count,
            confidence=best.confidence,
            score=best.score,
        ),
        reason=suggestion_reason(best, zip_code),
        alternatives=[_summary(s.profile.area, s.profile.customer_count) for s in suggestions[1:3]],
    )


def _calendar(account_id: str, groomer_id: str, start, end) -> tuple[list[AreaDayAssignment], list]:
    return (
        get_area_day_assignments(account_id, groomer_id),
        get_area_date_overrides(account_id, groomer_id, start, end),
    )


def get_groomer_assigned_area(account_id: str, groomer_id: str, day_of_week: int) -> Optional[ServiceArea]:
    """Default weekday assignment (0 = Sunday), ignoring date overrides."""
    if not 0 <= day_of_week <= 6:
        raise InvalidRequestError("day_of_week must be between 0 (Sunday) and 6 (Saturday)")
    return assigned_area_for_weekday(get_area_day_assignments(account_id, groomer_id), day_of_week)


def get_groomer_area_for_date(account_id: str, groomer_id: str, day: date) -> Optional[AreaForDate]:
    assignments, overrides = _calendar(account_id, groomer_id, day, day)
    return resolve_area_for_date(day, assignments, overrides)


def get_groomer_areas_for_date_range(
    account_id: str, groomer_id: str, start: date, end: date
) -> dict[str, Optional[AreaForDate]]:
    assignments, overrides = _calendar(account_id, groomer_id, start, end)
    return areas_for_date_range(start, end, assignments, overrides)


def get_groomer_area_days(account_id: str, groomer_id: str, area_id: str) -> list[int]:
    return area_days(get_area_day_assignments(account_id, groomer_id), area_id)


def find_next_area_day(
    account_id: str, groomer_id: str, area_id: str, from_date: date, max_days_ahead: Optional[int] = None
) -> Optional[tuple[date, bool]]:
    horizon = max_days_ahead or settings.area_search_horizon_days
    assignments, overrides = _calendar(account_id, groomer_id, from_date, from_date + timedelta(days=horizon))
    return find_next_area_day_date(area_id, from_date, assignments, overrides, horizon)


def get_next_area_date(
    account_id: str,
    area_id: str,
    groomer_id: Optional[str] = None,
    from_date: Optional[str] = None,
    now: Optional[datetime] = None,
) -> NextAreaDateResponse:
    """Next and upcoming dates the groomer works ``area_id``, overrides included."""
    area = get_service_area(account_id, area_id)
    if not area:
        raise NotFoundError("Service area not found")
    groomer = _require_groomer(account_id, groomer_id)
    start = parse_date(from_date, field="from_date") if from_date else today_in(
        get_account_timezone(account_id), now or utc_now()
    )
    horizon = settings.area_search_horizon_days
    assignments, overrides = _calendar(account_id, groomer.id, start, start + timedelta(days=horizon))
    upcoming = upcoming_area_dates(area.id, start, assignments, overrides, horizon)
    days = area_days(assignments, area.id)
    dates = [AreaDateModel(date=d.isoformat(), is_override=o) for d, o in upcoming]
    return NextAreaDateResponse(
        groomer_id=groomer.id,
        area_id=area.id,
        area_name=area.name,
        area_days=days,
        area_day_names=format_day_names(days),
        next_date=dates[0] if dates else None,
        upcoming=dates,
    )


def get_area_schedule(
    account_id: str, start_date: str, end_date: str, groomer_id: Optional[str] = None
) -> AreaScheduleResponse:
    start = parse_date(start_date, field="start_date")
    end = parse_date(end_date, field="end_date")
    if end < start:
        raise InvalidRequestError("end_date must not be before start_date")
    if (end - start).days >= MAX_SCHEDULE_RANGE_DAYS:
        raise InvalidRequestError(f"Date range cannot exceed {MAX_SCHEDULE_RANGE_DAYS} days")
    groomer = _require_groomer(account_id, groomer_id)
    mapping = get_groomer_areas_for_date_range(account_id, groomer.id, start, end)
    return AreaScheduleResponse(
        groomer_id=groomer.id,
        start_date=start.isoformat(),
        end_date=end.isoformat(),
        days=[
            AreaForDateModel(
                date=key,
                area_id=value.area.id if value else None,
                area_name=value.area.name if value else None,
                area_color=value.area.color if value else None,
                is_override=value.is_override if value else False,
            )
            for key, value in mapping.items()
        ],
    )


def suggest_date_for_customer(
    account_id: str, customer_id: str, groomer_id: str, now: Optional[datetime] = None
) -> SuggestDateResponse:
    """The customer's area days with this groomer and the next such date from tomorrow."""
    if not customer_id or not groomer_id:
        raise InvalidRequestError("customer_id and groomer_id are required")
    customer = get_customer(account_id, customer_id)
    if not customer:
        raise NotFoundError("Customer not found")
    groomer = _require_groomer(account_id, groomer_id)

    area = get_service_area(account_id, customer.service_area_id) if customer.service_area_id else None
    if area is None:
        return SuggestDateResponse(customer_id=customer.id, customer_name=customer.name)

    tomorrow = today_in(get_account_timezone(account_id), now or utc_now()) + timedelta(days=1)
    horizon = settings.area_search_horizon_days
    assignments, overrides = _calendar(account_id, groomer.id, tomorrow, tomorrow + timedelta(days=horizon))
    days = area_days(assignments, area.id)
    upcoming = upcoming_area_dates(area.id, tomorrow, assignments, overrides, horizon, limit=1)
    reason = None
    if days:
        reason = f"{groomer.name} works in {area.name} on {', '.join(DAY_NAMES[d] for d in days)}"
    return SuggestDateResponse(
        customer_id=customer.id,
        customer_name=customer.name,
        service_area_id=area.id,
        service_area_name=area.name,
        service_area_color=area.color,
        suggested_days=days,
        next_suggested_date=upcoming[0][0].isoformat() if upcoming else None,
        is_override=upcoming[0][1] if upcoming else False,
        reason=reason,
    )


def _recommended(days) -> list[RecommendedDayModel]:
    return [RecommendedDayModel(day_of_week=d, day_name=DAY_NAMES[d]) for d in sorted(set(days))]


def check_address(payload: CheckAddressRequest, now: Optional[datetime] = None) -> CheckAddressResponse:
    """Public check whether an address falls in one of the groomer's service areas."""
    groomer = get_groomer_by_slug(payload.groomer_slug)
    if not groomer:
        raise NotFoundError("Groomer not found")
    if not groomer.booking_enabled:
        raise PolicyViolationError("Online booking is not available", status_code=403)

    if payload.lat is not None and payload.lng is not None:
        geocoded = GeocodingResult(
            success=True,
            lat=payload.lat,
            lng=payload.lng,
            formatted_address=payload.address,
            zip_code=payload.zip_code,
        )
    else:
        geocoded = geocode_address(payload.address)
        if geocoded.success and payload.zip_code:
            geocoded.zip_code = payload.zip_code

    if not geocoded.success:
        return CheckAddressResponse(
            in_service_area=False,
            geocoded=False,
            message="Could not verify this address. Please select an address from the suggestions.",
        )

    located = dict(
        geocoded=True,
        lat=geocoded.lat,
        lng=geocoded.lng,
        formatted_address=geocoded.formatted_address,
        zip_code=geocoded.zip_code,
    )
    account_id = groomer.account_id
    areas = sorted(get_service_areas(account_id), key=lambda a: (a.name, a.id))
    assignments = get_area_day_assignments(account_id, groomer.id)
    if not areas:
        return CheckAddressResponse(
            in_service_area=True,
            all_days_available=True,
            recommended_days=_recommended(a.day_of_week for a in assignments),
            **located,
        )

    area = find_matching_area(areas, Location(zip_code=geocoded.zip_code, lat=geocoded.lat, lng=geocoded.lng))
    if area is None and geocoded.zip_code:
        profiles = build_profiles(areas, get_area_customer_zip_codes(account_id))
        suggestions = suggest_area_for_zip(profiles, geocoded.zip_code)
        area = suggestions[0].profile.area if suggestions else None

    if area is None:
        return CheckAddressResponse(
            in_service_area=False,
            recommended_days=_recommended(a.day_of_week for a in assignments),
            message="This address is outside the current service areas.",
            **located,
        )

    start = today_in(get_account_timezone(account_id), now or utc_now())
    horizon = settings.area_search_horizon_days
    overrides = get_area_date_overrides(account_id, groomer.id, start, start + timedelta(days=horizon))
    upcoming = upcoming_area_dates(area.id, start, assignments, overrides, horizon, limit=UPCOMING_DATES_LIMIT)
    return CheckAddressResponse(
        in_service_area=True,
        area_id=area.id,
        area_name=area.name,
        area_color=area.color,
        recommended_days=_recommended(area_days(assignments, area.id)),
        upcoming_dates=[d.isoformat() for d, _ in upcoming],
        **located,
    )
