"""Day workload, intensity budget and booking duration schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.domain import GroomIntensity


class WorkloadAssessmentModel(BaseModel):
    level: str = Field(..., description="day-off | light | moderate | busy | heavy | overloaded")
    label: str
    message: str
    show_calm_link: bool
    workload_score: float = Field(..., ge=0.0, le=100.0)
    remaining_appointments: int
    remaining_minutes: int
    stress_points: List[str] = Field(default_factory=list)


class IntensitySummaryModel(BaseModel):
    total: int
    limit: Optional[int] = None
    percentage: int
    level: str
    message: str


class WorkloadResponse(BaseModel):
    date: str
    groomer_id: str
    has_assistant: bool
    appointment_count: int
    completed_count: int
    large_dog_count: int
    assessment: WorkloadAssessmentModel
    intensity: IntensitySummaryModel


class IntensityCheckResponse(BaseModel):
    date: str
    intensity: GroomIntensity
    allowed: bool
    current_total: int
    would_be_total: int
    limit: Optional[int] = None
    remaining: Optional[int] = None
    over_by: int = 0


class DurationEstimateResponse(BaseModel):
    minutes: int
    formatted: str
    intensity: GroomIntensity
    reasons: List[str]
    confidence: str
