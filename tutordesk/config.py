"""
Runtime settings for Tutordesk sessions and the reference classes API.
"""

from typing import Any, Dict, Optional

from pydantic import Field, ValidationError as PydanticValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.enums import DEFAULT_DURATION_SECONDS
from .core.exceptions import ConfigurationError


class TutordeskSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="TUTORDESK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Delete endpoint
    api_base_url: str = "http://localhost:8000"
    api_token: Optional[str] = None
    request_timeout_seconds: float = Field(default=60.0, gt=0)

    # Countdown
    default_duration_seconds: int = Field(default=DEFAULT_DURATION_SECONDS, ge=1)
    tick_interval_seconds: float = Field(default=0.25, gt=0)

    # Profile store
    store_type: str = "memory"
    store_path: str = ".tutordesk/profile.json"
    store_poll_interval_seconds: float = Field(default=0.5, gt=0)

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @field_validator("store_type")
    @classmethod
    def check_store_type(cls, v: str) -> str:
        v = v.lower()
        if v not in ("memory", "file"):
            raise ValueError(f"Unsupported store type: {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()


def load_settings(config: Optional[Dict[str, Any]] = None) -> TutordeskSettings:
    """Build settings from environment, overridden by an explicit dict."""
    try:
        return TutordeskSettings(**(config or {}))
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}", details={'errors': e.errors()})
