"""Deterministic scoring of waitlisted customers for an open day or gap."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Iterable, Mapping, Optional, Sequence

from ...config import Settings, settings
from ...models.domain import (
    CustomerHistory,
    ReliabilityTier,
    TimeOfDay,
    ValueTier,
    WaitlistEntry,
)
from ..dates import weekday_name
from ..geospatial import nearest_distance_miles

MAX_SCORE = 100


@dataclass(slots=True)
class ScoringPolicy:
    preferred_day: int = 30
    flexible_day: int = 10
    preferred_time: int = 30
    flexible_time: int = 10
    in_area: int = 25
    proximity_bands: tuple[tuple[float, int], ...] = ((2.0, 20), (5.0, 15), (10.0, 10), (15.0, 5))
    value_high: int = 15
    value_medium: int = 8
    reliability_excellent: int = 10
    reliability_good: int = 5
    reliability_poor: int = -10
    recency_bands: tuple[tuple[int, int], ...] = ((60, 10), (45, 7), (30, 5))
    new_customer: int = 8
    default_high_revenue: float = 500.0
    default_medium_revenue: float = 100.0

    @classmethod
    def from_settings(cls, config: Settings = settings) -> "ScoringPolicy":
        return cls(
            preferred_day=config.watchlist_weight_preferred_day,
            flexible_day=config.watchlist_weight_flexible_day,
            preferred_time=config.watchlist_weight_preferred_time,
            flexible_time=config.watchlist_weight_flexible_time,
            in_area=config.watchlist_weight_in_area,
            proximity_bands=tuple(config.watchlist_proximity_bands),
            value_high=config.watchlist_weight_value_high,
            value_medium=config.watchlist_weight_value_medium,
            reliability_excellent=config.watchlist_weight_reliability_excellent,
            reliability_good=config.watchlist_weight_reliability_good,
            reliability_poor=config.watchlist_weight_reliability_poor,
            recency_bands=tuple(config.watchlist_recency_bands),
            new_customer=config.watchlist_weight_new_customer,
            default_high_revenue=config.watchlist_default_high_revenue,
            default_medium_revenue=config.watchlist_default_medium_revenue,
        )


@dataclass(slots=True)
class WatchlistQuery:
    target_date: date
    limit: int = 10
    min_reliability_tier: Optional[ReliabilityTier] = None
    value_tier_filter: Optional[Sequence[ValueTier]] = None
    max_distance_miles: Optional[float] = None
    time_of_day: Optional[TimeOfDay] = None


@dataclass(slots=True)
class RouteContext:
    """Where the groomer is on the target date."""

    area_id: Optional[str] = None
    area_name: Optional[str] = None
    stop_points: list[tuple[float, float]] = field(default_factory=list)
    base_point: Optional[tuple[float, float]] = None


@dataclass(slots=True)
class RankedEntry:
    entry: WaitlistEntry
    score: int
    reliability_tier: ReliabilityTier
    value_tier: ValueTier
    distance_miles: Optional[float]
    reasons: list[str]


def reliability_tier(cancellations: int, no_shows: int) -> ReliabilityTier:
    if no_shows >= 3 or cancellations >= 5:
        return ReliabilityTier.POOR
    if no_shows >= 2 or cancellations >= 3:
        return ReliabilityTier.FAIR
    if no_shows >= 1 or cancellations >= 2:
        return ReliabilityTier.GOOD
    return ReliabilityTier.EXCELLENT


def revenue_thresholds(revenues: Iterable[float], policy: ScoringPolicy) -> tuple[float, float]:
    """(high, medium) cut-offs at the 75th and 25th percentile of positive revenues."""
    positive = sorted(r for r in revenues if r > 0)
    if not positive:
        return policy.default_high_revenue, policy.default_medium_revenue
    return positive[math.floor(len(positive) * 0.75)], positive[math.floor(len(positive) * 0.25)]


def value_tier(revenue: float, thresholds: tuple[float, float]) -> ValueTier:
    high, medium = thresholds
    if revenue >= high:
        return ValueTier.HIGH
    if revenue >= medium:
        return ValueTier.MEDIUM
    return ValueTier.LOW


def distance_to_route(entry: WaitlistEntry, context: RouteContext) -> Optional[float]:
    customer = entry.customer
    if customer.lat is None or customer.lng is None:
        return None
    if context.stop_points:
        return nearest_distance_miles(customer.lat, customer.lng, context.stop_points)
    if context.base_point:
        return nearest_distance_miles(customer.lat, customer.lng, [context.base_point])
    return None


def _score(
    entry: WaitlistEntry,
    history: CustomerHistory,
    reliability: ReliabilityTier,
    value: ValueTier,
    distance: Optional[float],
    query: WatchlistQuery,
    context: RouteContext,
    policy: ScoringPolicy,
    now: datetime,
) -> tuple[int, list[str]]:
    score = 0
    reasons: list[str] = []

    day = weekday_name(query.target_date)
    if day in entry.preferred_days:
        score += policy.preferred_day
        reasons.append(f"Prefers {day.capitalize()}s")
    elif entry.flexible_timing:
        score += policy.flexible_day
        reasons.append("Has flexible timing")

    if query.time_of_day is not None:
        if query.time_of_day in entry.preferred_times:
            score += policy.preferred_time
            reasons.append(f"Prefers {query.time_of_day.value.lower()} appointments")
        elif entry.flexible_timing:
            score += policy.flexible_time

    if context.area_id and entry.customer.service_area_id == context.area_id:
        score += policy.in_area
        reasons.append(f"In today's area ({context.area_name})" if context.area_name else "In today's area")

    if distance is not None:
        for max_miles, points in policy.proximity_bands:
            if distance <= max_miles:
                score += points
                reasons.append(f"Within {max_miles:g} miles of the route")
                break

    if value is ValueTier.HIGH:
        score += policy.value_high
        reasons.append("High-value customer")
    elif value is ValueTier.MEDIUM:
        score += policy.value_medium
        reasons.append("Regular customer")

    if reliability is ReliabilityTier.EXCELLENT:
        score += policy.reliability_excellent
        reasons.append("Excellent reliability")
    elif reliability is ReliabilityTier.GOOD:
        score += policy.reliability_good
    elif reliability is ReliabilityTier.POOR:
        score += policy.reliability_poor
        reasons.append("History of cancellations/no-shows")

    if history.last_completed_at is not None:
        days_since = (now - history.last_completed_at).days
        for min_days, points in policy.recency_bands:
            if days_since >= min_days:
                score += points
                reasons.append(f"Due for appointment ({min_days}+ days)")
                break
    elif history.appointment_count == 0:
        score += policy.new_customer
        reasons.append("New customer")

    return score, reasons


def rank_waitlist(
    entries: Sequence[WaitlistEntry],
    histories: Mapping[str, CustomerHistory],
    query: WatchlistQuery,
    context: RouteContext,
    now: datetime,
    policy: Optional[ScoringPolicy] = None,
) -> list[RankedEntry]:
    """Filter, score and order waitlist entries.

    Filters are hard excludes applied before scoring; an unknown distance
    never excludes. Entries scoring zero or less are dropped. Order is score
    descending, then customer name, then customer id.
    """
    policy = policy or ScoringPolicy.from_settings()

    def history_for(customer_id: str) -> CustomerHistory:
        return histories.get(customer_id) or CustomerHistory(customer_id=customer_id)

    thresholds = revenue_thresholds(
        (history_for(e.customer.id).total_revenue for e in entries), policy
    )
    allowed_values = set(query.value_tier_filter) if query.value_tier_filter else None

    ranked: list[RankedEntry] = []
    for entry in entries:
        customer = entry.customer
        history = history_for(customer.id)

        reliability = reliability_tier(customer.cancellation_count, customer.no_show_count)
        if query.min_reliability_tier and reliability.rank < query.min_reliability_tier.rank:
            continue

        value = value_tier(history.total_revenue, thresholds)
        if allowed_values is not None and value not in allowed_values:
            continue

        distance = distance_to_route(entry, context)
        if distance is not None:
            if query.max_distance_miles is not None and distance > query.max_distance_miles:
                continue
            if entry.max_distance_miles is not None and distance > entry.max_distance_miles:
                continue

        score, reasons = _score(entry, history, reliability, value, distance, query, context, policy, now)
        if score <= 0:
            continue
        ranked.append(
            RankedEntry(
                entry=entry,
                score=min(score, MAX_SCORE),
                reliability_tier=reliability,
                value_tier=value,
                distance_miles=round(distance, 1) if distance is not None else None,
                reasons=reasons,
            )
        )

    ranked.sort(key=lambda r: (-r.score, r.entry.customer.name, r.entry.customer.id))
    return ranked[: max(query.limit, 0)]
