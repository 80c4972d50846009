"""Application configuration and settings management."""

from typing import Any, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="GROOMROUTE_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "GroomRoute Scheduling API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root log level applied at startup.")
    default_timezone: str = Field(
        default="America/New_York",
        description="IANA timezone used when an account has none recorded.",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    # Working hours and slot generation
    default_working_hours_start: str = Field(default="09:00", pattern=r"^\d{2}:\d{2}$")
    default_working_hours_end: str = Field(default="17:00", pattern=r"^\d{2}:\d{2}$")
    slot_interval_minutes: int = Field(default=30, ge=5)
    booking_buffer_minutes: int = Field(
        default=15,
        ge=0,
        description="Travel/setup time added after each existing appointment for public slots.",
    )
    default_booking_duration_minutes: int = Field(default=60, ge=1)
    default_conflict_duration_minutes: int = Field(default=90, ge=1)
    min_duration_minutes: int = Field(default=30, ge=1)
    max_duration_minutes: int = Field(default=180, ge=1)
    conflict_rounding_minutes: int = Field(default=15, ge=1)
    large_dog_weight_threshold: float = Field(default=50.0, ge=0.0)
    min_gap_minutes: int = Field(default=45, ge=0)
    area_search_horizon_days: int = Field(default=30, ge=1)

    # Break policy
    break_after_dogs: int = Field(default=3, ge=1)
    break_after_hours: float = Field(default=4.0, ge=0.0)
    break_after_energy_load: float = Field(default=5.0, ge=0.0)
    break_gap_minutes_for_lunch: int = Field(default=90, ge=1)
    break_min_available_minutes: int = Field(default=20, ge=0)
    break_lunch_minutes: int = Field(default=30, ge=1)
    break_short_minutes: int = Field(default=15, ge=1)
    break_hydration_minutes: int = Field(default=10, ge=1)

    # Watchlist scoring weights
    watchlist_weight_preferred_day: int = 30
    watchlist_weight_flexible_day: int = 10
    watchlist_weight_preferred_time: int = 30
    watchlist_weight_flexible_time: int = 10
    watchlist_weight_in_area: int = 25
    watchlist_proximity_bands: tuple[tuple[float, int], ...] = Field(
        default=((2.0, 20), (5.0, 15), (10.0, 10), (15.0, 5)),
        description="(max miles, points) pairs checked in order.",
    )
    watchlist_weight_value_high: int = 15
    watchlist_weight_value_medium: int = 8
    watchlist_weight_reliability_excellent: int = 10
    watchlist_weight_reliability_good: int = 5
    watchlist_weight_reliability_poor: int = -10
    watchlist_recency_bands: tuple[tuple[int, int], ...] = Field(
        default=((60, 10), (45, 7), (30, 5)),
        description="(min days since last visit, points) pairs checked in order.",
    )
    watchlist_weight_new_customer: int = 8
    watchlist_default_high_revenue: float = 500.0
    watchlist_default_medium_revenue: float = 100.0

    # Day workload
    workload_solo_thresholds: tuple[tuple[int, int], ...] = Field(
        default=((3, 180), (5, 300), (7, 420), (9, 540)),
        description="(max appointments, max minutes) for light, moderate, busy and heavy days working solo.",
    )
    workload_assistant_multiplier: float = Field(default=1.4, ge=1.0)
    workload_large_dog_weight: float = Field(
        default=0.3,
        ge=0.0,
        description="Extra appointments each large dog counts for.",
    )

    # Skip flow
    legacy_note_log: bool = Field(
        default=True,
        description="Also append skip history to the free-text notes fields.",
    )
    skip_warning_threshold: int = Field(default=3, ge=1)

    # Geocoding
    nominatim_base_url: str = "https://nominatim.openstreetmap.org"
    geocoding_user_agent: str = "GroomRoute/1.0"
    geocoding_timeout_seconds: float = Field(default=10.0, gt=0.0)
    geocoding_max_retries: int = Field(default=2, ge=0)
    geocoding_backoff_seconds: float = Field(default=1.0, ge=0.0)

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(str(item) for item in value)
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
                if isinstance(parsed, list):
                    return tuple(str(item) for item in parsed)
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in value:
                return tuple(item.strip() for item in value.split(",") if item.strip())
            if value.strip():
                return (value.strip(),)
        return tuple()

    @field_validator(
        "watchlist_proximity_bands", "watchlist_recency_bands", "workload_solo_thresholds", mode="before"
    )
    @classmethod
    def _parse_bands_from_env(cls, value: Any) -> Any:
        """Accept bands as a JSON array of pairs, e.g. [[2, 20], [5, 15]]."""
        if isinstance(value, str):
            parsed = json.loads(value)
            return tuple(tuple(item) for item in parsed)
        return value


settings = Settings()
