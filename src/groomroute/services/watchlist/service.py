"""Waitlist suggestion orchestration."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence

from ...errors import InvalidRequestError, NotFoundError
from ...models.domain import (
    Appointment,
    CustomerHistory,
    Groomer,
    ReliabilityTier,
    ValueTier,
    WaitlistEntry,
)
from ...persistence.database import (
    get_account_timezone,
    get_active_waitlist,
    get_appointments_between,
    get_area_date_overrides,
    get_area_day_assignments,
    get_customer_histories,
    get_groomer,
)
from ...schemas.watchlist import WatchlistResponse, WatchlistSuggestionModel
from ..areas.matcher import resolve_area_for_date
from ..dates import day_bounds, parse_date, utc_now
from .ranker import RankedEntry, RouteContext, WatchlistQuery, rank_waitlist

logger = logging.getLogger(__name__)

MAX_LIMIT = 50


@dataclass(slots=True)
class RankingInputs:
    entries: list[WaitlistEntry]
    histories: dict[str, CustomerHistory]
    context: RouteContext


def load_ranking_inputs(
    account_id: str, groomer: Groomer, day: date, appointments: Sequence[Appointment]
) -> RankingInputs:
    """Waitlist, customer histories and the groomer's position for ``day``."""
    entries = get_active_waitlist(account_id)
    histories = get_customer_histories(account_id, [entry.customer.id for entry in entries])

    area = resolve_area_for_date(
        day,
        get_area_day_assignments(account_id, groomer.id),
        get_area_date_overrides(account_id, groomer.id, day, day),
    )
    stops = [
        (a.customer_lat, a.customer_lng)
        for a in appointments
        if a.is_active and a.customer_lat is not None and a.customer_lng is not None
    ]
    base = (groomer.base_lat, groomer.base_lng) if groomer.base_lat is not None and groomer.base_lng is not None else None
    context = RouteContext(
        area_id=area.area.id if area else None,
        area_name=area.area.name if area else None,
        stop_points=stops,
        base_point=base,
    )
    return RankingInputs(entries=entries, histories=histories, context=context)


def to_suggestion_model(ranked: RankedEntry) -> WatchlistSuggestionModel:
    customer = ranked.entry.customer
    return WatchlistSuggestionModel(
        waitlist_entry_id=ranked.entry.id,
        customer_id=customer.id,
        customer_name=customer.name,
        phone=customer.phone,
        pet_names=[pet.name for pet in customer.pets],
        score=ranked.score,
        reliability_tier=ranked.reliability_tier.value,
        value_tier=ranked.value_tier.value,
        distance_miles=ranked.distance_miles,
        reasons=ranked.reasons,
        preferred_days=list(ranked.entry.preferred_days),
        preferred_times=[t.value for t in ranked.entry.preferred_times],
    )


def _parse_enum(enum_cls, value: str, field: str):
    try:
        return enum_cls(value.strip().lower())
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidRequestError(f"Invalid {field} '{value}'. Use one of: {allowed}") from exc


def get_watchlist_suggestions(
    account_id: str,
    date_str: str,
    *,
    limit: int = 10,
    min_reliability_tier: Optional[str] = None,
    value_tiers: Optional[Sequence[str]] = None,
    max_distance_miles: Optional[float] = None,
    groomer_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> WatchlistResponse:
    day = parse_date(date_str)
    if limit < 1 or limit > MAX_LIMIT:
        raise InvalidRequestError(f"limit must be between 1 and {MAX_LIMIT}")
    if max_distance_miles is not None and max_distance_miles <= 0:
        raise InvalidRequestError("max_distance_miles must be positive")
    query = WatchlistQuery(
        target_date=day,
        limit=limit,
        min_reliability_tier=(
            _parse_enum(ReliabilityTier, min_reliability_tier, "reliability tier") if min_reliability_tier else None
        ),
        value_tier_filter=[_parse_enum(ValueTier, v, "value tier") for v in value_tiers] if value_tiers else None,
        max_distance_miles=max_distance_miles,
    )

    groomer = get_groomer(account_id, groomer_id)
    if not groomer:
        raise NotFoundError("Groomer not found" if groomer_id else "No groomer found for this account")
    tz = get_account_timezone(account_id)
    start, end = day_bounds(day, tz)
    appointments = get_appointments_between(account_id, groomer.id, start, end)

    inputs = load_ranking_inputs(account_id, groomer, day, appointments)
    ranked = rank_waitlist(inputs.entries, inputs.histories, query, inputs.context, now or utc_now())
    logger.info(f"Ranked {len(ranked)} of {len(inputs.entries)} waitlist entries for {day}")
    return WatchlistResponse(
        date=day.isoformat(),
        area_name=inputs.context.area_name,
        total_candidates=len(inputs.entries),
        suggestions=[to_suggestion_model(item) for item in ranked],
    )
