"""Half-open interval primitives shared by slot generation, conflict checks and reordering."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, TypeVar
from zoneinfo import ZoneInfo

from ...models.domain import Appointment
from ..dates import minutes_since_midnight

T = TypeVar("T")


def overlaps(start_a: T, end_a: T, start_b: T, end_b: T) -> bool:
    """``[start_a, end_a)`` and ``[start_b, end_b)`` intersect. Touching endpoints do not."""
    return start_a < end_b and start_b < end_a


@dataclass(slots=True, frozen=True)
class BusyWindow:
    """Occupied local minutes ``[start, end)`` of one appointment, buffer included."""

    start: int
    end: int
    appointment: Optional[Appointment] = None


def busy_windows(
    appointments: Iterable[Appointment], tz: ZoneInfo, buffer_minutes: int = 0
) -> list[BusyWindow]:
    """Busy windows of active appointments, sorted by start.

    The buffer only extends the window after the appointment ends.
    """
    windows = []
    for appointment in appointments:
        if not appointment.is_active:
            continue
        start = minutes_since_midnight(appointment.start_at, tz)
        windows.append(
            BusyWindow(
                start=start,
                end=start + appointment.service_minutes + buffer_minutes,
                appointment=appointment,
            )
        )
    windows.sort(key=lambda w: (w.start, w.end))
    return windows


def conflicting_windows(start: int, end: int, windows: Iterable[BusyWindow]) -> list[BusyWindow]:
    return [window for window in windows if overlaps(start, end, window.start, window.end)]
