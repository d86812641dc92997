"""Resolver configuration."""

from dataclasses import dataclass, field
from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class ProviderSettings:
    """Participation settings for one geocoding provider."""

    name: str
    enabled: bool
    priority: int
    options: dict[str, Any] = field(default_factory=dict)


class Settings(BaseSettings):
    """
    Resolver settings.

    Environment variables will be loaded and validated using Pydantic.
    """

    app_name: str = "placeresolver"
    version: str = "0.1.0"

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = True

    # Cache Settings
    GEOCODING_CACHE_EXPIRY: float = Field(default=86400.0, gt=0)  # 24 hours
    GEOCODING_MAX_CACHE_SIZE: int = Field(default=1000, gt=0)

    # Disambiguation Settings
    GEOCODING_MIN_CONFIDENCE: float = Field(default=0.4, ge=0, le=1)
    GEOCODING_ACCEPTANCE_THRESHOLD: float = Field(default=0.5, ge=0, le=1)
    GEOCODING_MAX_ALTERNATIVES: int = Field(default=5, ge=0)
    GEOCODING_TIE_EPSILON: float = Field(default=0.05, ge=0, le=1)
    GEOCODING_DEDUPE_DEGREES: float = Field(default=0.1, ge=0)

    # Provider call Settings
    GEOCODING_REQUEST_TIMEOUT_MS: int = Field(default=10000, gt=0)
    GEOCODING_MAX_WORKERS: int = Field(default=8, gt=0)

    # Nominatim (open data, free)
    NOMINATIM_ENABLED: bool = True
    NOMINATIM_PRIORITY: int = Field(default=1, ge=1)
    NOMINATIM_USER_AGENT: str = "placeresolver/0.1"
    NOMINATIM_DOMAIN: str = "nominatim.openstreetmap.org"
    NOMINATIM_RATE_LIMIT: float = Field(default=1.0, ge=0)

    # Mapbox (structured places)
    MAPBOX_ENABLED: bool = True
    MAPBOX_PRIORITY: int = Field(default=2, ge=1)
    MAPBOX_ACCESS_TOKEN: str | None = None

    # Google (commercial, billed per call)
    GOOGLE_ENABLED: bool = False
    GOOGLE_PRIORITY: int = Field(default=3, ge=1)
    GOOGLE_GEOCODING_API_KEY: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",  # Allow extra fields in environment
    )

    @model_validator(mode="after")
    def validate_thresholds(self) -> "Settings":
        """Alternatives floor must not exceed the acceptance threshold."""
        if self.GEOCODING_MIN_CONFIDENCE > self.GEOCODING_ACCEPTANCE_THRESHOLD:
            raise ValueError(
                "GEOCODING_MIN_CONFIDENCE must be <= GEOCODING_ACCEPTANCE_THRESHOLD"
            )
        return self

    @property
    def request_timeout(self) -> float:
        """Per-provider call timeout in seconds."""
        return self.GEOCODING_REQUEST_TIMEOUT_MS / 1000.0

    def provider_settings(self) -> list[ProviderSettings]:
        """Build per-provider settings in declaration order.

        Returns:
            One ProviderSettings per known provider
        """
        return [
            ProviderSettings(
                name="nominatim",
                enabled=self.NOMINATIM_ENABLED,
                priority=self.NOMINATIM_PRIORITY,
                options={
                    "user_agent": self.NOMINATIM_USER_AGENT,
                    "domain": self.NOMINATIM_DOMAIN,
                    "min_delay_seconds": self.NOMINATIM_RATE_LIMIT,
                },
            ),
            ProviderSettings(
                name="mapbox",
                enabled=self.MAPBOX_ENABLED,
                priority=self.MAPBOX_PRIORITY,
                options={"api_key": self.MAPBOX_ACCESS_TOKEN},
            ),
            ProviderSettings(
                name="google",
                enabled=self.GOOGLE_ENABLED,
                priority=self.GOOGLE_PRIORITY,
                options={"api_key": self.GOOGLE_GEOCODING_API_KEY},
            ),
        ]


# Create settings instance
settings = Settings()
