"""Break suggestions from workload, schedule gaps and time since the last rest."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Iterable, Optional, Sequence

from ...config import Settings, settings
from ...models.domain import Appointment, AppointmentStatus, Break, BreakType


class DogSize(str, Enum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    GIANT = "giant"


# (max weight lbs, energy cost); anything heavier is giant.
_SIZE_BANDS = (
    (20.0, DogSize.SMALL, 1.0),
    (50.0, DogSize.MEDIUM, 1.5),
    (80.0, DogSize.LARGE, 2.0),
)
_GIANT_COST = 3.0


def dog_size(weight: Optional[float]) -> DogSize:
    if not weight:
        return DogSize.MEDIUM
    for max_weight, size, _ in _SIZE_BANDS:
        if weight <= max_weight:
            return size
    return DogSize.GIANT


def energy_cost(weight: Optional[float]) -> float:
    size = dog_size(weight)
    for _, band_size, cost in _SIZE_BANDS:
        if band_size is size:
            return cost
    return _GIANT_COST


@dataclass(slots=True)
class BreakPolicy:
    after_dogs: int = 3
    after_hours: float = 4.0
    after_energy_load: float = 5.0
    gap_minutes_for_lunch: int = 90
    min_available_minutes: int = 20
    lunch_minutes: int = 30
    short_minutes: int = 15
    hydration_minutes: int = 10

    @classmethod
    def from_settings(cls, config: Settings = settings) -> "BreakPolicy":
        return cls(
            after_dogs=config.break_after_dogs,
            after_hours=config.break_after_hours,
            after_energy_load=config.break_after_energy_load,
            gap_minutes_for_lunch=config.break_gap_minutes_for_lunch,
            min_available_minutes=config.break_min_available_minutes,
            lunch_minutes=config.break_lunch_minutes,
            short_minutes=config.break_short_minutes,
            hydration_minutes=config.break_hydration_minutes,
        )


@dataclass(slots=True)
class BreakStats:
    breaks_taken_today: int
    total_break_minutes: int
    last_break_time: Optional[datetime]
    scheduled_breaks: int


@dataclass(slots=True)
class BreakSuggestion:
    should_suggest: bool
    reason: str = "none"
    message: str = ""
    subtext: str = ""
    break_type: Optional[BreakType] = None
    available_minutes: int = 0
    suggested_duration_minutes: int = 0


@dataclass(slots=True)
class BreakSlot:
    start_time: datetime
    duration_minutes: int
    break_type: BreakType


NO_SUGGESTION = BreakSuggestion(should_suggest=False)


def calculate_break_stats(breaks: Iterable[Break]) -> BreakStats:
    breaks = list(breaks)
    taken = [b for b in breaks if b.taken]
    taken_times = [b.taken_at for b in taken if b.taken_at is not None]
    return BreakStats(
        breaks_taken_today=len(taken),
        total_break_minutes=sum(b.duration_minutes or 0 for b in taken),
        last_break_time=max(taken_times) if taken_times else None,
        scheduled_breaks=sum(1 for b in breaks if b.start_time is not None),
    )


def _completed(appointments: Iterable[Appointment]) -> list[Appointment]:
    return sorted(
        (a for a in appointments if a.status is AppointmentStatus.COMPLETED), key=lambda a: a.start_at
    )


def next_appointment(appointments: Iterable[Appointment], now: datetime) -> Optional[Appointment]:
    upcoming = [
        a
        for a in appointments
        if a.status not in (AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW)
        and a.start_at > now
    ]
    return min(upcoming, key=lambda a: (a.start_at, a.id)) if upcoming else None


def energy_load_since(appointments: Iterable[Appointment], since: Optional[datetime]) -> float:
    """Energy of dogs completed after ``since`` (all completed dogs when None)."""
    total = sum(
        energy_cost(a.pet.weight if a.pet else None)
        for a in _completed(appointments)
        if since is None or a.end_at > since
    )
    return round(total, 1)


def get_break_suggestion(
    appointments: Sequence[Appointment],
    last_break_time: Optional[datetime],
    now: datetime,
    policy: Optional[BreakPolicy] = None,
) -> BreakSuggestion:
    """Single break suggestion; the first matching rule wins.

    Every rule needs an upcoming appointment at least
    ``min_available_minutes`` away.
    """
    policy = policy or BreakPolicy.from_settings()
    upcoming = next_appointment(appointments, now)
    if upcoming is None:
        return NO_SUGGESTION
    available = int((upcoming.start_at - now).total_seconds() // 60)
    if available < policy.min_available_minutes:
        return NO_SUGGESTION

    short = min(policy.short_minutes, available - 5)
    if available >= policy.gap_minutes_for_lunch:
        return BreakSuggestion(
            should_suggest=True,
            reason="long_gap",
            message="You've got time - real lunch today?",
            subtext=f"Next appointment in {available} minutes.",
            break_type=BreakType.LUNCH,
            available_minutes=available,
            suggested_duration_minutes=policy.lunch_minutes,
        )

    completed = _completed(appointments)
    last = completed[-1] if completed else None
    if last is not None and dog_size(last.pet.weight if last.pet else None) in (DogSize.LARGE, DogSize.GIANT):
        return BreakSuggestion(
            should_suggest=True,
            reason="after_large_dog",
            message="Big dog done - take 5?",
            subtext="Large dogs take extra energy.",
            break_type=BreakType.SHORT_BREAK,
            available_minutes=available,
            suggested_duration_minutes=short,
        )

    if energy_load_since(appointments, last_break_time) >= policy.after_energy_load:
        return BreakSuggestion(
            should_suggest=True,
            reason="heavy_load",
            message="Heavy morning - rest before the next one?",
            subtext="Energy load is high.",
            break_type=BreakType.SHORT_BREAK,
            available_minutes=available,
            suggested_duration_minutes=short,
        )

    if completed and len(completed) % policy.after_dogs == 0:
        return BreakSuggestion(
            should_suggest=True,
            reason="after_dogs",
            message="Good stopping point - stretch your legs?",
            subtext=f"You've completed {len(completed)} dogs.",
            break_type=BreakType.SHORT_BREAK,
            available_minutes=available,
            suggested_duration_minutes=short,
        )

    working_since = last_break_time
    if working_since is None:
        active = [a for a in appointments if a.is_active]
        working_since = min((a.start_at for a in active), default=None)
    if working_since is not None:
        hours = (now - working_since).total_seconds() / 3600
        if hours >= policy.after_hours:
            return BreakSuggestion(
                should_suggest=True,
                reason="continuous",
                message="You've been going strong - hydration check?",
                subtext=f"Over {int(hours)} hours without a break.",
                break_type=BreakType.HYDRATION,
                available_minutes=available,
                suggested_duration_minutes=min(policy.hydration_minutes, available - 5),
            )

    return NO_SUGGESTION


def find_optimal_break_slots(appointments: Iterable[Appointment]) -> list[BreakSlot]:
    """Breaks in gaps of 30+ minutes, starting 5 minutes after the earlier appointment ends."""
    ordered = sorted((a for a in appointments if a.is_active), key=lambda a: (a.start_at, a.id))
    slots = []
    for current, following in zip(ordered, ordered[1:]):
        gap = int((following.start_at - current.end_at).total_seconds() // 60)
        if gap < 30:
            continue
        if gap >= 60:
            slot = BreakSlot(current.end_at + timedelta(minutes=5), min(30, gap - 15), BreakType.LUNCH)
        else:
            slot = BreakSlot(current.end_at + timedelta(minutes=5), min(15, gap - 10), BreakType.SHORT_BREAK)
        slots.append(slot)
    return slots


def get_wellness_message(breaks_taken: int) -> str:
    if breaks_taken >= 2:
        return "You took breaks today - that's protecting your career longevity."
    if breaks_taken == 1:
        return "One break today - try for two tomorrow to keep your energy up."
    return "No breaks today - tomorrow, try to fit one in? Rest isn't lazy, it's sustainable."


def take_break_message(breaks_taken: int) -> str:
    if breaks_taken >= 3:
        return "You're taking care of yourself - keep it up!"
    if breaks_taken == 2:
        return "Two breaks today - protecting your energy!"
    if breaks_taken == 1:
        return "First break of the day - great start!"
    return "Break logged!"
