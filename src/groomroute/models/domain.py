"""Domain models for appointments, customers, areas and groomer schedules."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Optional


class AppointmentStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"


# Statuses that never occupy a time slot.
INACTIVE_STATUSES = frozenset({AppointmentStatus.CANCELLED, AppointmentStatus.NO_SHOW})
# Statuses that cannot be moved by a route reorder.
LOCKED_STATUSES = INACTIVE_STATUSES | {AppointmentStatus.COMPLETED}


class BreakType(str, Enum):
    LUNCH = "LUNCH"
    SHORT_BREAK = "SHORT_BREAK"
    HYDRATION = "HYDRATION"


class SkipReason(str, Enum):
    CANCELLED = "CANCELLED"
    NO_SHOW = "NO_SHOW"
    RESCHEDULED = "RESCHEDULED"
    OTHER = "OTHER"


class GroomIntensity(str, Enum):
    LIGHT = "LIGHT"
    MODERATE = "MODERATE"
    DEMANDING = "DEMANDING"
    INTENSIVE = "INTENSIVE"


class TimeOfDay(str, Enum):
    MORNING = "MORNING"
    AFTERNOON = "AFTERNOON"
    EVENING = "EVENING"


class ReliabilityTier(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"

    @property
    def rank(self) -> int:
        return {"excellent": 4, "good": 3, "fair": 2, "poor": 1}[self.value]


class ValueTier(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


@dataclass(slots=True)
class Pet:
    id: str
    name: str
    weight: Optional[float] = None
    breed: Optional[str] = None
    groom_intensity: Optional[GroomIntensity] = None


@dataclass(slots=True)
class Appointment:
    """One scheduled visit. ``start_at`` is always timezone-aware."""

    id: str
    account_id: str
    groomer_id: str
    customer_id: str
    start_at: datetime
    service_minutes: int
    status: AppointmentStatus
    pet: Optional[Pet] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    customer_lat: Optional[float] = None
    customer_lng: Optional[float] = None
    notes: Optional[str] = None
    price: Optional[float] = None
    version: int = 0

    @property
    def end_at(self) -> datetime:
        return self.start_at + timedelta(minutes=self.service_minutes)

    @property
    def is_active(self) -> bool:
        return self.status not in INACTIVE_STATUSES


@dataclass(slots=True)
class Customer:
    id: str
    account_id: str
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    zip_code: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    service_area_id: Optional[str] = None
    cancellation_count: int = 0
    no_show_count: int = 0
    notes: Optional[str] = None
    pets: list[Pet] = field(default_factory=list)


@dataclass(slots=True)
class ServiceArea:
    """A named zone: explicit zip codes and/or a center point with a radius."""

    id: str
    account_id: str
    name: str
    color: str = "#3B82F6"
    zip_codes: list[str] = field(default_factory=list)
    center_lat: Optional[float] = None
    center_lng: Optional[float] = None
    radius_miles: Optional[float] = None
    is_active: bool = True


@dataclass(slots=True)
class AreaDayAssignment:
    groomer_id: str
    day_of_week: int  # 0 = Sunday
    area: ServiceArea


@dataclass(slots=True)
class AreaDateOverride:
    groomer_id: str
    date: date
    area: Optional[ServiceArea]  # None means day off


@dataclass(slots=True)
class AreaForDate:
    area: ServiceArea
    is_override: bool


@dataclass(slots=True)
class Groomer:
    id: str
    account_id: str
    name: str
    working_hours_start: Optional[str] = None
    working_hours_end: Optional[str] = None
    large_dog_daily_limit: Optional[int] = None
    daily_intensity_limit: Optional[int] = None
    default_has_assistant: bool = False
    booking_slug: Optional[str] = None
    booking_enabled: bool = False
    base_lat: Optional[float] = None
    base_lng: Optional[float] = None
    phone: Optional[str] = None
    email: Optional[str] = None


@dataclass(slots=True)
class Route:
    account_id: str
    groomer_id: str
    route_date: date
    workday_started: bool = False
    has_assistant: bool = False


@dataclass(slots=True)
class Break:
    id: str
    account_id: str
    groomer_id: str
    break_date: date
    break_type: BreakType
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    taken: bool = False
    taken_at: Optional[datetime] = None
    duration_minutes: Optional[int] = None


@dataclass(slots=True)
class CustomerHistory:
    customer_id: str
    appointment_count: int = 0
    total_revenue: float = 0.0
    completed_count: int = 0
    last_completed_at: Optional[datetime] = None


@dataclass(slots=True)
class WaitlistEntry:
    id: str
    account_id: str
    customer: Customer
    preferred_days: list[str] = field(default_factory=list)
    preferred_times: list[TimeOfDay] = field(default_factory=list)
    flexible_timing: bool = False
    max_distance_miles: Optional[float] = None
    is_active: bool = True


@dataclass(slots=True)
class AppointmentEvent:
    """Structured audit entry for status changes such as skips."""

    account_id: str
    appointment_id: str
    customer_id: str
    actor: str
    action: str
    reason: str
    occurred_at: datetime
    notes: Optional[str] = None
    id: Optional[str] = None
