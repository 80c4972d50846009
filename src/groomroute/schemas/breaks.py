"""Break tracking schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.domain import BreakType


class BreakModel(BaseModel):
    id: str
    break_date: str
    break_type: BreakType
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    taken: bool
    taken_at: Optional[datetime] = None
    duration_minutes: Optional[int] = None


class BreakStatsModel(BaseModel):
    breaks_taken_today: int
    total_break_minutes: int
    last_break_time: Optional[datetime] = None
    scheduled_breaks: int


class BreakSlotModel(BaseModel):
    start_time: datetime
    start_formatted: str
    duration_minutes: int
    break_type: BreakType


class BreakListResponse(BaseModel):
    date: str
    breaks: List[BreakModel]
    stats: BreakStatsModel
    wellness_message: str
    optimal_slots: List[BreakSlotModel] = Field(default_factory=list)


class BreakSuggestionModel(BaseModel):
    should_suggest: bool
    reason: str
    message: str = ""
    subtext: str = ""
    break_type: Optional[BreakType] = None
    available_minutes: int = 0
    suggested_duration_minutes: int = 0


class BreakSuggestResponse(BaseModel):
    suggestion: BreakSuggestionModel
    stats: BreakStatsModel
    completed_today: int
    energy_load: float


class ScheduleBreakRequest(BaseModel):
    date: str = Field(..., description="YYYY-MM-DD")
    break_type: BreakType = BreakType.LUNCH
    start_time: str = Field(..., description="HH:MM")
    end_time: str = Field(..., description="HH:MM")
    groomer_id: Optional[str] = None


class TakeBreakRequest(BaseModel):
    break_id: Optional[str] = None
    break_type: BreakType = BreakType.SHORT_BREAK
    duration_minutes: int = Field(default=15, ge=1, le=240)
    groomer_id: Optional[str] = None


class TakeBreakResponse(BaseModel):
    success: bool = True
    break_: BreakModel = Field(..., alias="break")
    breaks_taken: int
    total_break_minutes: int
    message: str

    model_config = {"populate_by_name": True}
