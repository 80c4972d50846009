"""Pure area matching: customer location to service area, groomer calendar to area days."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Iterable, Mapping, Optional, Sequence

from ...models.domain import AreaDateOverride, AreaDayAssignment, AreaForDate, ServiceArea
from ..dates import DAY_NAMES, DAY_NAMES_SHORT, day_of_week
from ..geospatial import haversine_miles


@dataclass(slots=True)
class Location:
    zip_code: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None


@dataclass(slots=True)
class AreaProfile:
    """Zip codes of the customers already assigned to an area."""

    area: ServiceArea
    zip_counts: Counter = field(default_factory=Counter)
    customer_count: int = 0


@dataclass(slots=True)
class AreaSuggestion:
    profile: AreaProfile
    score: float
    confidence: str  # exact | prefix | nearby


def find_matching_area(areas: Sequence[ServiceArea], location: Location) -> Optional[ServiceArea]:
    """Return the first area whose zip list or radius covers ``location``.

    Zip codes are compared exactly after trimming and always take priority
    over the radius check.
    """
    zip_code = (location.zip_code or "").strip()
    if zip_code:
        for area in areas:
            if zip_code in (z.strip() for z in area.zip_codes):
                return area

    if location.lat is None or location.lng is None:
        return None

    for area in areas:
        if area.center_lat is None or area.center_lng is None or area.radius_miles is None:
            continue
        distance = haversine_miles(location.lat, location.lng, area.center_lat, area.center_lng)
        if distance <= area.radius_miles:
            return area
    return None


def assigned_area_for_weekday(
    assignments: Iterable[AreaDayAssignment], weekday: int
) -> Optional[ServiceArea]:
    for assignment in assignments:
        if assignment.day_of_week == weekday:
            return assignment.area
    return None


def _overrides_by_date(overrides: Iterable[AreaDateOverride]) -> dict[date, AreaDateOverride]:
    return {override.date: override for override in overrides}


def resolve_area_for_date(
    day: date,
    assignments: Iterable[AreaDayAssignment],
    overrides: Iterable[AreaDateOverride],
) -> Optional[AreaForDate]:
    """Override for ``day`` wins (an override without an area is a day off)."""
    override = _overrides_by_date(overrides).get(day)
    if override is not None:
        return AreaForDate(area=override.area, is_override=True) if override.area else None
    area = assigned_area_for_weekday(assignments, day_of_week(day))
    return AreaForDate(area=area, is_override=False) if area else None


def areas_for_date_range(
    start: date,
    end: date,
    assignments: Sequence[AreaDayAssignment],
    overrides: Iterable[AreaDateOverride],
) -> dict[str, Optional[AreaForDate]]:
    """Map every ``YYYY-MM-DD`` in ``[start, end]`` to its area, or None."""
    by_date = _overrides_by_date(overrides)
    default_by_day = {assignment.day_of_week: assignment.area for assignment in assignments}
    result: dict[str, Optional[AreaForDate]] = {}
    current = start
    while current <= end:
        override = by_date.get(current)
        if override is not None:
            result[current.isoformat()] = (
                AreaForDate(area=override.area, is_override=True) if override.area else None
            )
        else:
            area = default_by_day.get(day_of_week(current))
            result[current.isoformat()] = AreaForDate(area=area, is_override=False) if area else None
        current += timedelta(days=1)
    return result


def area_days(assignments: Iterable[AreaDayAssignment], area_id: str) -> list[int]:
    return sorted({a.day_of_week for a in assignments if a.area.id == area_id})


def upcoming_area_dates(
    area_id: str,
    from_date: date,
    assignments: Sequence[AreaDayAssignment],
    overrides: Iterable[AreaDateOverride],
    max_days_ahead: int = 30,
    limit: Optional[int] = None,
) -> list[tuple[date, bool]]:
    """Dates in ``[from_date, from_date + max_days_ahead)`` when the groomer works ``area_id``.

    An override decides its date outright; other dates match on the weekday pattern.
    """
    by_date = _overrides_by_date(overrides)
    weekdays = set(area_days(assignments, area_id))
    matches: list[tuple[date, bool]] = []
    for offset in range(max_days_ahead):
        current = from_date + timedelta(days=offset)
        override = by_date.get(current)
        if override is not None:
            if override.area is not None and override.area.id == area_id:
                matches.append((current, True))
        elif day_of_week(current) in weekdays:
            matches.append((current, False))
        if limit is not None and len(matches) >= limit:
            break
    return matches


def find_next_area_day_date(
    area_id: str,
    from_date: date,
    assignments: Sequence[AreaDayAssignment],
    overrides: Iterable[AreaDateOverride],
    max_days_ahead: int = 30,
) -> Optional[tuple[date, bool]]:
    matches = upcoming_area_dates(area_id, from_date, assignments, overrides, max_days_ahead, limit=1)
    return matches[0] if matches else None


def format_day_names(days: Iterable[int], short: bool = False) -> str:
    """Human list such as "Monday, Wednesday and Friday"."""
    names = [(DAY_NAMES_SHORT if short else DAY_NAMES)[d] for d in days]
    if not names:
        return ""
    if len(names) == 1:
        return names[0]
    return f"{', '.join(names[:-1])} and {names[-1]}"


def _zip_as_int(value: str) -> Optional[int]:
    try:
        return int(value)
    except ValueError:
        return None


def score_area_for_zip(profile: AreaProfile, zip_code: str) -> tuple[float, Optional[str]]:
    if profile.zip_counts.get(zip_code):
        return 100 + profile.zip_counts[zip_code], "exact"

    score: float = 0
    confidence: Optional[str] = None
    prefix = zip_code[:3]
    input_number = _zip_as_int(zip_code)
    for area_zip, count in profile.zip_counts.items():
        if area_zip[:3] == prefix:
            candidate, kind = 50 + count, "prefix"
        else:
            area_number = _zip_as_int(area_zip)
            if input_number is None or area_number is None:
                continue
            distance = abs(input_number - area_number)
            if distance > 100:
                continue
            candidate, kind = 25 - distance / 10, "nearby"
        if candidate > score:
            score, confidence = candidate, kind
    return score, confidence


def suggest_area_for_zip(
    profiles: Sequence[AreaProfile], zip_code: str
) -> list[AreaSuggestion]:
    """Score areas by their customers' zip codes; best first, ties by area name."""
    zip_code = zip_code.strip()
    suggestions = []
    for profile in profiles:
        score, confidence = score_area_for_zip(profile, zip_code)
        if score > 0 and confidence:
            suggestions.append(AreaSuggestion(profile=profile, score=score, confidence=confidence))
    suggestions.sort(key=lambda s: (-s.score, s.profile.area.name, s.profile.area.id))
    return suggestions


def suggestion_reason(suggestion: AreaSuggestion, zip_code: str) -> str:
    name = suggestion.profile.area.name
    if suggestion.confidence == "exact":
        count = suggestion.profile.zip_counts.get(zip_code.strip(), 0)
        if count == 1:
            return f"1 other customer in {name} shares this zip code"
        return f"{count} other customers in {name} share this zip code"
    if suggestion.confidence == "prefix":
        return f"This zip code is in the same region as other {name} customers"
    return f"This zip code is near other {name} customers"


def build_profiles(
    areas: Sequence[ServiceArea], zip_codes_by_area: Mapping[str, tuple[Counter, int]]
) -> list[AreaProfile]:
    profiles = []
    for area in areas:
        zips, total = zip_codes_by_area.get(area.id, (Counter(), 0))
        profiles.append(AreaProfile(area=area, zip_counts=Counter(zips), customer_count=total))
    return profiles
