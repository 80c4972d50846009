"""Service area schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class AreaSummaryModel(BaseModel):
    id: str
    name: str
    color: str
    customer_count: int = 0


class AreaAssignmentModel(BaseModel):
    customer_id: str
    customer_name: str
    area_id: str
    area_name: str


class UnmatchedCustomerModel(BaseModel):
    id: str
    name: str
    address: Optional[str] = None
    zip_code: Optional[str] = None


class AutoAssignResponse(BaseModel):
    success: bool = True
    total_processed: int
    assigned_count: int
    unmatched_count: int
    assignments: List[AreaAssignmentModel]
    unmatched: List[UnmatchedCustomerModel] = Field(
        default_factory=list, description="First 20 customers no area covers."
    )
    message: str


class AreaSuggestionModel(AreaSummaryModel):
    confidence: str
    score: float


class AreaSuggestResponse(BaseModel):
    success: bool = True
    suggestion: Optional[AreaSuggestionModel] = None
    reason: str
    alternatives: List[AreaSummaryModel] = Field(default_factory=list)
    all_areas: List[AreaSummaryModel] = Field(default_factory=list)


class AreaDateModel(BaseModel):
    date: str
    is_override: bool


class NextAreaDateResponse(BaseModel):
    groomer_id: str
    area_id: str
    area_name: str
    area_days: List[int]
    area_day_names: str
    next_date: Optional[AreaDateModel] = None
    upcoming: List[AreaDateModel] = Field(default_factory=list)


class AreaForDateModel(BaseModel):
    date: str
    area_id: Optional[str] = None
    area_name: Optional[str] = None
    area_color: Optional[str] = None
    is_override: bool = False


class AreaScheduleResponse(BaseModel):
    groomer_id: str
    start_date: str
    end_date: str
    days: List[AreaForDateModel]


class AssignAreaRequest(BaseModel):
    area_id: Optional[str] = Field(default=None, description="None clears the assignment")


class AssignAreaResponse(BaseModel):
    success: bool = True
    customer_id: str
    area_id: Optional[str] = None
    area_name: Optional[str] = None


class SuggestDateResponse(BaseModel):
    success: bool = True
    customer_id: str
    customer_name: str
    service_area_id: Optional[str] = None
    service_area_name: Optional[str] = None
    service_area_color: Optional[str] = None
    suggested_days: List[int] = Field(default_factory=list)
    next_suggested_date: Optional[str] = None
    is_override: bool = False
    reason: Optional[str] = None
