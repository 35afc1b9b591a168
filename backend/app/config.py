"""Application configuration using pydantic-settings."""

from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "Tierline"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Subscription policy
    product_name: str = "Tierline"  # prefix for fully qualified plan names
    trial_reactivation_limit: int = Field(default=1, ge=0)
    time_remaining_default_unit: Literal["days", "hours", "minutes", "seconds"] = "seconds"

    # Frontend
    frontend_url: str = "http://localhost:3000"
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        """Accept log levels in any case (``debug`` == ``DEBUG``)."""
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @model_validator(mode="after")
    def _ensure_frontend_in_cors(self) -> "Settings":
        """Ensure the configured frontend_url is always in cors_origins."""
        if self.frontend_url and self.frontend_url not in self.cors_origins:
            self.cors_origins.append(self.frontend_url)
        return self


settings = Settings()
