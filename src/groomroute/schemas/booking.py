"""Public booking request/response schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class TimeSlotModel(BaseModel):
    time: str = Field(..., description="Slot start, HH:MM 24-hour")
    time_formatted: str = Field(..., description="Slot start, h:mm AM")


class WorkingHoursModel(BaseModel):
    start: str
    end: str


class AvailableSlotsResponse(BaseModel):
    date: str
    groomer_name: Optional[str] = None
    slots: List[TimeSlotModel]
    total_slots: int
    available_count: int
    working_hours: WorkingHoursModel
    slot_duration_minutes: int


class CheckAddressRequest(BaseModel):
    groomer_slug: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    lat: Optional[float] = None
    lng: Optional[float] = None
    zip_code: Optional[str] = None


class RecommendedDayModel(BaseModel):
    day_of_week: int
    day_name: str


class CheckAddressResponse(BaseModel):
    success: bool = True
    in_service_area: bool
    geocoded: bool
    area_id: Optional[str] = None
    area_name: Optional[str] = None
    area_color: Optional[str] = None
    recommended_days: List[RecommendedDayModel] = Field(default_factory=list)
    upcoming_dates: List[str] = Field(default_factory=list)
    all_days_available: bool = False
    lat: Optional[float] = None
    lng: Optional[float] = None
    formatted_address: Optional[str] = None
    zip_code: Optional[str] = None
    message: Optional[str] = None
