"""Data models for route re-sequencing."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from ...models.domain import Appointment


class WriteStatus(str, Enum):
    APPLIED = "applied"
    FAILED = "failed"
    ROLLED_BACK = "rolled_back"
    SKIPPED = "skipped"


@dataclass(slots=True)
class PlannedMove:
    """One appointment's position in the requested order and the slot it receives."""

    appointment: Appointment
    old_start_at: datetime
    new_start_at: datetime

    @property
    def time_changed(self) -> bool:
        return self.old_start_at != self.new_start_at


@dataclass(slots=True)
class WriteResult:
    appointment_id: str
    status: WriteStatus
    detail: str | None = None
