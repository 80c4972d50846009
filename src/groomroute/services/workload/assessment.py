"""Day workload levels from appointment count, grooming minutes, large dogs and assistant help."""

from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Optional

from ...config import Settings, settings
from ...models.domain import Appointment, GroomIntensity


class WorkloadLevel(str, Enum):
    DAY_OFF = "day-off"
    LIGHT = "light"
    MODERATE = "moderate"
    BUSY = "busy"
    HEAVY = "heavy"
    OVERLOADED = "overloaded"


# Checked in this order against the (appointments, minutes) thresholds.
_GRADED = (WorkloadLevel.LIGHT, WorkloadLevel.MODERATE, WorkloadLevel.BUSY, WorkloadLevel.HEAVY)

# level -> (label, solo message, message with an assistant, show calm link)
_DISPLAY = {
    WorkloadLevel.DAY_OFF: ("Day Off", "Enjoy your rest day", "Enjoy your rest day", False),
    WorkloadLevel.LIGHT: (
        "Light Day",
        "A light, manageable day ahead",
        "Easy day with your assistant - smooth sailing ahead",
        False,
    ),
    WorkloadLevel.MODERATE: (
        "Moderate Day",
        "A balanced day with good pacing",
        "Normal workload - you and your assistant have this handled",
        False,
    ),
    WorkloadLevel.BUSY: (
        "Busy Day",
        "Active day ahead - stay focused and pace yourself",
        "Full schedule today, but with your assistant you've got this",
        True,
    ),
    WorkloadLevel.HEAVY: (
        "Heavy Day",
        "Challenging day - prioritize breaks and self-care",
        "Demanding schedule - you'll both need to stay on pace",
        True,
    ),
    WorkloadLevel.OVERLOADED: (
        "Overloaded",
        "This schedule is too heavy - let's find ways to lighten it",
        "Even with help, this schedule is intense - consider adjustments",
        True,
    ),
}


@dataclass(slots=True)
class WorkloadPolicy:
    solo_thresholds: tuple[tuple[int, int], ...] = ((3, 180), (5, 300), (7, 420), (9, 540))
    assistant_multiplier: float = 1.4
    large_dog_weight: float = 0.3
    large_dog_threshold: float = 50.0

    @classmethod
    def from_settings(cls, config: Settings = settings) -> "WorkloadPolicy":
        return cls(
            solo_thresholds=tuple(tuple(pair) for pair in config.workload_solo_thresholds),
            assistant_multiplier=config.workload_assistant_multiplier,
            large_dog_weight=config.workload_large_dog_weight,
            large_dog_threshold=config.large_dog_weight_threshold,
        )

    def thresholds(self, has_assistant: bool) -> list[tuple[int, int]]:
        multiplier = self.assistant_multiplier if has_assistant else 1.0
        return [
            (math.floor(appointments * multiplier), math.floor(minutes * multiplier))
            for appointments, minutes in self.solo_thresholds
        ]


@dataclass(slots=True)
class WorkloadInput:
    appointment_count: int
    total_minutes: int
    large_dog_count: int
    has_assistant: bool
    completed_count: Optional[int] = None


@dataclass(slots=True)
class WorkloadAssessment:
    level: WorkloadLevel
    label: str
    message: str
    show_calm_link: bool
    workload_score: float
    remaining_appointments: int
    remaining_minutes: int
    stress_points: list[str] = field(default_factory=list)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _remaining(workload: WorkloadInput) -> WorkloadInput:
    """Scale the day down to what is left once ``completed_count`` grooms are done."""
    if workload.completed_count is None:
        return workload
    remaining = workload.appointment_count - workload.completed_count
    if workload.appointment_count <= 0:
        return replace(workload, appointment_count=remaining)
    share = remaining / workload.appointment_count
    return replace(
        workload,
        appointment_count=remaining,
        total_minutes=_round_half_up(workload.total_minutes * share),
        large_dog_count=_round_half_up(workload.large_dog_count * share),
    )


def _effective_count(workload: WorkloadInput, policy: WorkloadPolicy) -> float:
    return workload.appointment_count + workload.large_dog_count * policy.large_dog_weight


def determine_level(workload: WorkloadInput, policy: WorkloadPolicy) -> WorkloadLevel:
    """Lowest level whose appointment and minute ceilings both hold."""
    if workload.appointment_count == 0:
        return WorkloadLevel.DAY_OFF
    effective = _effective_count(workload, policy)
    for level, (max_appointments, max_minutes) in zip(_GRADED, policy.thresholds(workload.has_assistant)):
        if effective <= max_appointments and workload.total_minutes <= max_minutes:
            return level
    return WorkloadLevel.OVERLOADED


def workload_score(workload: WorkloadInput, policy: WorkloadPolicy) -> float:
    heavy_appointments, heavy_minutes = policy.thresholds(workload.has_assistant)[-1]
    by_count = _effective_count(workload, policy) / heavy_appointments * 100
    by_minutes = workload.total_minutes / heavy_minutes * 100
    return min(100.0, max(by_count, by_minutes))


def stress_points(workload: WorkloadInput, level: WorkloadLevel, policy: WorkloadPolicy) -> list[str]:
    thresholds = dict(zip(_GRADED, policy.thresholds(workload.has_assistant)))
    points = []
    if workload.large_dog_count >= 3:
        points.append(f"{workload.large_dog_count} large dogs today - pace yourself")
    elif workload.large_dog_count >= 2:
        points.append(f"{workload.large_dog_count} large dogs scheduled")
    if workload.total_minutes > thresholds[WorkloadLevel.BUSY][1]:
        points.append(f"{_round_half_up(workload.total_minutes / 60)}+ hours of grooming time")
    if workload.appointment_count > thresholds[WorkloadLevel.MODERATE][0]:
        points.append("Busy schedule with limited breaks")
    if level is WorkloadLevel.OVERLOADED:
        points.append("Consider rescheduling or adding buffer time")
    return points


def assess_workload(workload: WorkloadInput, policy: Optional[WorkloadPolicy] = None) -> WorkloadAssessment:
    """Assess the work still ahead; an assistant raises every ceiling."""
    policy = policy or WorkloadPolicy.from_settings()
    remaining = _remaining(workload)
    level = determine_level(remaining, policy)
    label, solo_message, assisted_message, show_calm_link = _DISPLAY[level]
    return WorkloadAssessment(
        level=level,
        label=label,
        message=assisted_message if workload.has_assistant else solo_message,
        show_calm_link=show_calm_link,
        workload_score=workload_score(remaining, policy),
        remaining_appointments=remaining.appointment_count,
        remaining_minutes=remaining.total_minutes,
        stress_points=stress_points(remaining, level, policy),
    )


def is_large_dog(appointment: Appointment, threshold: float) -> bool:
    """DEMANDING and INTENSIVE grooms count as large; otherwise fall back to weight."""
    pet = appointment.pet
    if pet is None:
        return False
    if pet.groom_intensity:
        return pet.groom_intensity in (GroomIntensity.DEMANDING, GroomIntensity.INTENSIVE)
    return bool(pet.weight) and pet.weight > threshold


def assess_workload_from_appointments(
    appointments: Iterable[Appointment],
    has_assistant: bool,
    completed_count: Optional[int] = None,
    policy: Optional[WorkloadPolicy] = None,
) -> WorkloadAssessment:
    policy = policy or WorkloadPolicy.from_settings()
    appointments = list(appointments)
    return assess_workload(
        WorkloadInput(
            appointment_count=len(appointments),
            total_minutes=sum(a.service_minutes for a in appointments),
            large_dog_count=sum(1 for a in appointments if is_large_dog(a, policy.large_dog_threshold)),
            has_assistant=has_assistant,
            completed_count=completed_count,
        ),
        policy,
    )
