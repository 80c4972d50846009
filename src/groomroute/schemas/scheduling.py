"""Conflict, working-hours, workload and gap schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from .watchlist import WatchlistSuggestionModel


class ConflictModel(BaseModel):
    id: str
    customer_name: Optional[str] = None
    pet_name: Optional[str] = None
    start_time: str
    end_time: str


class ConflictCheckResponse(BaseModel):
    has_conflict: bool
    conflicts: List[ConflictModel] = Field(default_factory=list)
    proposed_start: str
    proposed_end: str
    next_available: Optional[str] = Field(default=None, description="HH:MM of the next free start")
    next_available_formatted: Optional[str] = None


class WorkingHoursCheckResponse(BaseModel):
    status: str
    within_hours: bool
    minutes_outside: int
    working_hours_start: str
    working_hours_end: str
    message: Optional[str] = None


class LargeDogModel(BaseModel):
    appointment_id: str
    pet_name: Optional[str] = None
    weight: float


class LargeDogCountResponse(BaseModel):
    date: str
    count: int
    limit: Optional[int] = None
    at_limit: bool
    over_limit: bool
    remaining_slots: Optional[int] = None
    large_dogs: List[LargeDogModel] = Field(default_factory=list)


class GapModel(BaseModel):
    start: str
    end: str
    start_formatted: str
    end_formatted: str
    duration_minutes: int
    time_of_day: str
    previous_appointment_id: Optional[str] = None
    next_appointment_id: Optional[str] = None
    suggestions: List[WatchlistSuggestionModel] = Field(default_factory=list)


class GapsResponse(BaseModel):
    date: str
    gaps: List[GapModel]
    total_gap_minutes: int
