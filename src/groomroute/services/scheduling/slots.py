"""Pure slot, conflict, working-hours, workload and gap calculations.

All times are local minutes since midnight in the account timezone.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional, Sequence

from ...config import settings
from ...models.domain import Appointment, Groomer, TimeOfDay
from ..dates import parse_time
from .intervals import BusyWindow, conflicting_windows, overlaps


def working_hours(groomer: Groomer) -> tuple[int, int]:
    """Opening and closing minutes, falling back to the configured default day."""
    start = parse_time(
        groomer.working_hours_start or settings.default_working_hours_start, field="working hours start"
    )
    end = parse_time(groomer.working_hours_end or settings.default_working_hours_end, field="working hours end")
    return start, end


@dataclass(slots=True)
class SlotAvailability:
    available: list[int]
    total_slots: int


def clamp_duration(value: Optional[int], default: int, minimum: int, maximum: int) -> int:
    if value is None:
        return default
    return max(minimum, min(maximum, value))


def generate_available_slots(
    work_start: int,
    work_end: int,
    windows: Sequence[BusyWindow],
    duration: int,
    interval: int = 30,
) -> SlotAvailability:
    """Candidates every ``interval`` minutes from opening while before closing.

    Only candidates that end by closing time count towards ``total_slots``;
    those are offered when they overlap no busy window.
    """
    available = []
    total = 0
    for candidate in range(work_start, work_end, interval):
        end = candidate + duration
        if end > work_end:
            continue
        total += 1
        if not any(overlaps(candidate, end, w.start, w.end) for w in windows):
            available.append(candidate)
    return SlotAvailability(available=available, total_slots=total)


def find_conflicts(start: int, duration: int, windows: Sequence[BusyWindow]) -> list[BusyWindow]:
    return conflicting_windows(start, start + duration, windows)


def _round_up(minutes: int, step: int) -> int:
    return int(math.ceil(minutes / step) * step)


def find_next_available(
    proposed_start: int,
    duration: int,
    windows: Sequence[BusyWindow],
    work_start: int,
    work_end: int,
    buffer_minutes: int = 15,
    rounding_minutes: int = 15,
) -> Optional[int]:
    """Walk the free gaps from ``max(proposed_start, work_start)`` and return the first fitting start.

    Inside a gap that follows an appointment the start prefers the buffered
    time after that appointment, then rounds up to ``rounding_minutes``.
    """
    search_start = max(proposed_start, work_start)
    ordered = sorted(windows, key=lambda w: (w.start, w.end))
    previous_end: Optional[int] = None
    for index in range(len(ordered) + 1):
        gap_start = search_start if previous_end is None else max(previous_end, search_start)
        gap_end = ordered[index].start if index < len(ordered) else work_end
        if gap_end - gap_start >= duration and gap_start < work_end:
            if previous_end is not None:
                buffered = previous_end + buffer_minutes
                if buffered > gap_start and buffered + duration <= gap_end:
                    gap_start = buffered
            gap_start = _round_up(gap_start, rounding_minutes)
            finish = gap_start + duration
            if finish <= gap_end and finish <= work_end:
                return gap_start
        if index < len(ordered):
            end = ordered[index].end
            previous_end = end if previous_end is None else max(previous_end, end)
    return None


class WorkingHoursStatus(str, Enum):
    WITHIN = "WITHIN"
    STARTS_BEFORE = "STARTS_BEFORE"
    STARTS_AFTER = "STARTS_AFTER"
    ENDS_AFTER = "ENDS_AFTER"


@dataclass(slots=True)
class WorkingHoursCheck:
    status: WorkingHoursStatus
    minutes_outside: int

    @property
    def within(self) -> bool:
        return self.status is WorkingHoursStatus.WITHIN


def check_working_hours(start: int, duration: int, work_start: int, work_end: int) -> WorkingHoursCheck:
    if start < work_start:
        return WorkingHoursCheck(WorkingHoursStatus.STARTS_BEFORE, work_start - start)
    if start >= work_end:
        return WorkingHoursCheck(WorkingHoursStatus.STARTS_AFTER, start - work_end)
    if duration > 0 and start + duration > work_end:
        return WorkingHoursCheck(WorkingHoursStatus.ENDS_AFTER, start + duration - work_end)
    return WorkingHoursCheck(WorkingHoursStatus.WITHIN, 0)


@dataclass(slots=True)
class LargeDogCount:
    count: int
    limit: Optional[int]
    large_dogs: list[Appointment] = field(default_factory=list)

    @property
    def at_limit(self) -> bool:
        return self.limit is not None and self.count >= self.limit

    @property
    def over_limit(self) -> bool:
        return self.limit is not None and self.count > self.limit

    @property
    def remaining_slots(self) -> Optional[int]:
        if self.limit is None:
            return None
        return max(0, self.limit - self.count)


def count_large_dogs(
    appointments: Iterable[Appointment],
    limit: Optional[int],
    threshold: float = 50.0,
    exclude_appointment_id: Optional[str] = None,
) -> LargeDogCount:
    """Active appointments whose pet weighs strictly more than ``threshold`` lbs."""
    large = [
        appointment
        for appointment in appointments
        if appointment.is_active
        and appointment.id != exclude_appointment_id
        and appointment.pet is not None
        and appointment.pet.weight is not None
        and appointment.pet.weight > threshold
    ]
    return LargeDogCount(count=len(large), limit=limit, large_dogs=large)


def time_of_day(minutes: int) -> TimeOfDay:
    if minutes < 12 * 60:
        return TimeOfDay.MORNING
    if minutes < 17 * 60:
        return TimeOfDay.AFTERNOON
    return TimeOfDay.EVENING


@dataclass(slots=True)
class ScheduleGap:
    start: int
    end: int
    previous: Optional[Appointment] = None
    following: Optional[Appointment] = None

    @property
    def duration_minutes(self) -> int:
        return self.end - self.start


def find_schedule_gaps(
    work_start: int,
    work_end: int,
    windows: Sequence[BusyWindow],
    min_gap_minutes: int = 45,
) -> list[ScheduleGap]:
    """Free windows of at least ``min_gap_minutes`` before, between and after appointments.

    ``previous``/``following`` name the appointments on either side of the gap.
    """
    ordered = sorted(windows, key=lambda w: (w.start, w.end))
    gaps: list[ScheduleGap] = []
    cursor = work_start
    previous: Optional[Appointment] = None
    for window in ordered:
        if window.start - cursor >= min_gap_minutes:
            gaps.append(ScheduleGap(start=cursor, end=window.start, previous=previous, following=window.appointment))
        if window.end >= cursor:
            cursor = window.end
            previous = window.appointment
    if work_end - cursor >= min_gap_minutes:
        gaps.append(ScheduleGap(start=cursor, end=work_end, previous=previous))
    return gaps
