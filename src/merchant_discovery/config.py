"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="DISCOVERY_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Merchant Discovery API"
    api_prefix: str = "/api"

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key for backend operations.",
    )

    # Routes matrix API
    routes_api_key: Optional[str] = Field(
        default=None,
        description="API key for the Routes distance matrix service.",
    )
    routes_base_url: str = Field(
        default="https://routes.googleapis.com",
        description="Base URL for the Routes API.",
    )
    routes_travel_mode: Literal["TWO_WHEELER", "DRIVE"] = Field(
        default="TWO_WHEELER",
        description="Travel mode used for routed distances. Riders travel by motorcycle.",
    )
    routes_routing_preference: Literal["TRAFFIC_AWARE", "TRAFFIC_AWARE_OPTIMAL", "TRAFFIC_UNAWARE"] = Field(
        default="TRAFFIC_AWARE",
    )
    routes_max_elements_per_request: int = Field(
        default=625,
        ge=1,
        description="Provider limit on origins x destinations per matrix request.",
    )
    routes_max_parallel_requests: int = Field(default=4, ge=1)
    routes_timeout_seconds: float = Field(default=15.0, gt=0.0)
    routes_health_check_timeout_seconds: float = Field(default=5.0, gt=0.0)
    routes_max_retries: int = Field(default=2, ge=0)
    routes_backoff_seconds: float = Field(default=0.5, ge=0.0)

    # Search behaviour
    distance_strategy: Literal["routed", "spatial", "haversine"] = Field(
        default="routed",
        description="Distance provider used by display searches.",
    )
    max_search_radius_meters: int = Field(default=100_000, ge=1)
    default_radius_meters: int = Field(default=10_000, ge=1)
    checkout_radius_meters: int = Field(default=100_000, ge=1)
    candidate_overfetch_factor: int = Field(default=3, ge=1)
    max_candidates: int = Field(default=500, ge=1)
    default_delivery_time_minutes: int = Field(default=30, ge=0)
    haversine_speed_kmh: float = Field(default=30.0, gt=0.0)
    zone_mode: Literal["presence", "containment"] = Field(
        default="presence",
        description="How zone membership is decided: geometry presence or point-in-polygon.",
    )

    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

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


settings = Settings()
