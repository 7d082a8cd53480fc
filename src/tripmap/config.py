"""Application configuration and settings management."""

from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="TRIPMAP_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Carpool Trip Map"
    api_prefix: str = "/api"
    optimizer_base_url: str = Field(
        default="http://localhost:8080/covoiturage/api",
        description="Base URL of the optimization and directory service.",
    )
    optimizer_timeout_seconds: float = Field(default=60.0, gt=0.0)
    nominatim_base_url: str = Field(
        default="https://nominatim.openstreetmap.org",
        description="Base URL of the Nominatim geocoding service.",
    )
    nominatim_user_agent: str = Field(
        default="Covoiturage-Optimisation-App/1.0",
        description="Descriptive client identifier sent with every geocoding request.",
    )
    geocode_timeout_seconds: float = Field(default=10.0, gt=0.0)
    osrm_base_url: Optional[str] = Field(
        default="https://router.project-osrm.org",
        description="Base URL for the OSRM routing service (e.g., http://localhost:5000).",
    )
    osrm_profile: Literal["driving", "driving-hgv"] = Field(
        default="driving",
        description="OSRM profile used for route geometry.",
    )
    routing_timeout_seconds: float = Field(default=15.0, gt=0.0)
    default_center: tuple[float, float] = Field(
        default=(48.8566, 2.3522),
        description="Initial map centre (lat, lon).",
    )
    default_zoom: int = Field(default=12, ge=0)
    min_zoom: int = Field(default=3, ge=0)
    max_zoom: int = Field(default=19, ge=0)
    center_zoom: int = Field(default=14, ge=0, description="Zoom used when centring on an address.")
    fit_padding_px: int = Field(default=50, ge=0)
    tile_url: str = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
    tile_attribution: str = (
        '&copy; <a href="https://www.openstreetmap.org/copyright">OpenStreetMap</a> contributors'
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
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

    @field_validator("default_center", mode="before")
    @classmethod
    def _parse_center_from_env(cls, value: Any) -> tuple[float, float]:
        """Accept "lat,lon" or a JSON array for the default centre."""
        if isinstance(value, str):
            try:
                parsed = json.loads(value)
            except (json.JSONDecodeError, TypeError):
                parsed = [item.strip() for item in value.split(",") if item.strip()]
            value = parsed
        if isinstance(value, (list, tuple)) and len(value) == 2:
            return (float(value[0]), float(value[1]))
        raise ValueError("default_center must be a (lat, lon) pair")


settings = Settings()
