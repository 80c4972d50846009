"""Slot-swap re-sequencing: a new visiting order over the day's existing start times."""

from __future__ import annotations

from datetime import timedelta
from typing import Sequence

from ...errors import InvalidRequestError
from ...models.domain import Appointment
from ..scheduling.intervals import overlaps
from .models import PlannedMove


def validate_order(ordered_ids: Sequence[str]) -> list[str]:
    """Trimmed ids; rejects an empty list, blank ids and duplicates."""
    if not ordered_ids:
        raise InvalidRequestError("appointment_ids must not be empty")
    cleaned = [str(aid).strip() for aid in ordered_ids]
    if any(not aid for aid in cleaned):
        raise InvalidRequestError("appointment_ids must not contain blank ids")
    duplicates = sorted({aid for aid in cleaned if cleaned.count(aid) > 1})
    if duplicates:
        raise InvalidRequestError(f"Duplicate appointment ids: {', '.join(duplicates)}")
    return cleaned


def plan_reorder(appointments: Sequence[Appointment], ordered_ids: Sequence[str]) -> list[PlannedMove]:
    """Give slot ``i`` of the current start times to the ``i``-th requested appointment.

    Slots are the current start times sorted ascending, ties broken by id,
    so the multiset of start times never changes.
    """
    by_id = {appointment.id: appointment for appointment in appointments}
    if set(by_id) != set(ordered_ids) or len(ordered_ids) != len(by_id):
        raise InvalidRequestError("Requested order must name each appointment exactly once")
    slots = [start for start, _ in sorted((a.start_at, a.id) for a in appointments)]
    return [
        PlannedMove(appointment=by_id[aid], old_start_at=by_id[aid].start_at, new_start_at=slots[index])
        for index, aid in enumerate(ordered_ids)
    ]


def find_overlaps(moves: Sequence[PlannedMove]) -> list[tuple[str, str]]:
    """Pairs of appointments whose new windows overlap (durations differ between slots)."""
    windows = sorted(
        (
            (m.new_start_at, m.new_start_at + timedelta(minutes=m.appointment.service_minutes), m.appointment.id)
            for m in moves
        ),
        key=lambda w: (w[0], w[2]),
    )
    pairs = []
    for i, (start_a, end_a, id_a) in enumerate(windows):
        for start_b, end_b, id_b in windows[i + 1:]:
            if start_b >= end_a:
                break
            if overlaps(start_a, end_a, start_b, end_b):
                pairs.append((id_a, id_b))
    return pairs
