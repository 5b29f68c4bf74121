"""Application configuration and settings management."""

from typing import Any, Optional

import json
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="FIELDOPS_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Field Dispatch Core API"
    api_prefix: str = "/api"
    log_level: str = Field(default="INFO", description="Root log level for the service.")
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    # Location synchronization
    poll_interval_ms: int = Field(
        default=30000,
        ge=1000,
        description="Fallback polling interval for technician locations (milliseconds).",
    )
    enable_realtime: bool = Field(
        default=True,
        description="Subscribe to location changes in addition to polling.",
    )
    refresh_timeout_seconds: Optional[float] = Field(
        default=None,
        gt=0.0,
        description="Abort a refresh cycle that takes longer than this. Unset means no timeout.",
    )
    fresh_threshold_minutes: int = Field(default=5, ge=1)
    degraded_threshold_minutes: int = Field(default=30, ge=1)

    # Routing policy
    average_speed_mph: float = Field(
        default=30.0,
        gt=0.0,
        description="Assumed average urban driving speed used for travel estimates.",
    )
    default_stop_duration_minutes: int = Field(
        default=60,
        ge=0,
        description="On-site time assumed for stops without an estimated duration.",
    )
    urgent_priorities: tuple[str, ...] = Field(
        default=("emergency", "high"),
        description="Priorities visited ahead of nearest-neighbour ordering.",
    )

    # Supabase configuration
    supabase_url: Optional[str] = Field(
        default=None,
        description="Supabase project URL (e.g., https://xxx.supabase.co).",
    )
    supabase_key: Optional[str] = Field(
        default=None,
        description="Supabase key used by the dispatch backend.",
    )

    @field_validator("frontend_allowed_origins", "urgent_priorities", mode="before")
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

    @field_validator("urgent_priorities")
    @classmethod
    def _normalise_priorities(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        allowed = {"emergency", "high", "normal", "low"}
        normalised = tuple(item.strip().lower() for item in value)
        unknown = [item for item in normalised if item not in allowed]
        if unknown:
            raise ValueError(f"Unknown priorities in urgent_priorities: {unknown}")
        return normalised

    @model_validator(mode="after")
    def _check_liveness_thresholds(self) -> "Settings":
        if self.degraded_threshold_minutes <= self.fresh_threshold_minutes:
            raise ValueError("degraded_threshold_minutes must be greater than fresh_threshold_minutes")
        return self


settings = Settings()
