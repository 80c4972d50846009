"""Route reorder, workday and assistant schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


class ReorderRequest(BaseModel):
    date: str = Field(..., description="Route date, YYYY-MM-DD; must be today")
    appointment_ids: List[str] = Field(..., description="Appointment ids in the requested visiting order")
    groomer_id: Optional[str] = None


class ReorderedAppointmentModel(BaseModel):
    appointment_id: str
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    pet_name: Optional[str] = None
    old_start_at: datetime
    new_start_at: datetime
    time_changed: bool


class ReorderResponse(BaseModel):
    success: bool = True
    date: str
    appointments: List[ReorderedAppointmentModel]
    affected_count: int
    message: str
    warnings: List[str] = Field(default_factory=list)


class ReorderItemResult(BaseModel):
    appointment_id: str
    status: str = Field(..., description="applied | failed | rolled_back | skipped")
    detail: Optional[str] = None


class GroomerDayRequest(BaseModel):
    groomer_id: Optional[str] = None


class RouteStatusResponse(BaseModel):
    date: str
    groomer_id: str
    workday_started: bool
    has_assistant: bool


class AssistantRequest(BaseModel):
    has_assistant: bool
    set_as_default: bool = False
    groomer_id: Optional[str] = None


class AssistantStatusResponse(BaseModel):
    date: str
    groomer_id: str
    has_assistant: bool
    default_has_assistant: bool
    from_route: bool = Field(..., description="True when today's route row decided the value")
