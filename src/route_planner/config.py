"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Optional

import json
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="DRP_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
    )

    app_name: str = "Delivery Route Planner API"
    api_prefix: str = "/api"
    data_root: Path = Field(default=Path("data"), description="Directory holding locally persisted state.")
    saved_routes_slot: str = Field(
        default="deliveryRoutes",
        description="Name of the storage slot holding the saved route collection.",
    )

    # Route oracle (Gemini with Google Maps grounding)
    gemini_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("DRP_GEMINI_API_KEY", "GEMINI_API_KEY", "API_KEY"),
        description="API key for the Gemini generateContent endpoint.",
    )
    gemini_model: str = Field(default="gemini-2.5-flash")
    gemini_base_url: str = Field(default="https://generativelanguage.googleapis.com/v1beta")
    oracle_timeout_seconds: float = Field(default=90.0, gt=0.0)

    service_region: str = Field(
        default="Sydney, Australia",
        description="Region the delivery service operates in; embedded in the optimization prompt.",
    )
    timezone: str = Field(default="Australia/Sydney", description="IANA zone used to render arrival times.")
    maps_base_url: str = Field(default="https://www.google.com/maps/dir/")
    default_start_address: str = Field(default="Sydney, NSW, Australia")
    verify_stop_sequence: bool = Field(
        default=False,
        description="Reject oracle replies whose stop numbers are not exactly 1..n in order.",
    )
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("data_root", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

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
