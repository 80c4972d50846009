"""Waitlist suggestion schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class WatchlistSuggestionModel(BaseModel):
    waitlist_entry_id: str
    customer_id: str
    customer_name: str
    phone: Optional[str] = None
    pet_names: List[str] = Field(default_factory=list)
    score: int
    reliability_tier: str
    value_tier: str
    distance_miles: Optional[float] = None
    reasons: List[str] = Field(default_factory=list)
    preferred_days: List[str] = Field(default_factory=list)
    preferred_times: List[str] = Field(default_factory=list)


class WatchlistResponse(BaseModel):
    date: str
    area_name: Optional[str] = None
    total_candidates: int
    suggestions: List[WatchlistSuggestionModel]
