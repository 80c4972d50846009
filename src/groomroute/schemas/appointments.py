"""Appointment skip schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.domain import AppointmentStatus, SkipReason


class SkipRequest(BaseModel):
    reason: SkipReason
    notes: Optional[str] = Field(default=None, max_length=1000)


class SkipWarningModel(BaseModel):
    message: str
    customer_name: str
    cancellations: int
    no_shows: int
    suggestions: List[str]


class SkipResponse(BaseModel):
    success: bool = True
    appointment_id: str
    status: AppointmentStatus
    reason: SkipReason
    cancellation_count: int
    no_show_count: int
    warning: Optional[SkipWarningModel] = None
