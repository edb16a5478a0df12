"""
Application configuration using Pydantic settings.
"""
from calendar import monthrange

from pydantic_settings import BaseSettings
from pydantic import Field, model_validator


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Farm Records API Configuration
    farm_records_api_base_url: str = Field(
        default="https://records.example.com/api",
        description="Base URL for the farm-records API"
    )
    farm_records_api_key: str = Field(
        default="",
        description="API key for authentication"
    )

    # Retry Configuration
    max_retry_attempts: int = Field(
        default=3,
        description="Maximum number of retry attempts for API calls"
    )
    retry_backoff_multiplier: int = Field(
        default=1,
        description="Multiplier for exponential backoff"
    )
    retry_min_wait: int = Field(
        default=4,
        description="Minimum wait time in seconds between retries"
    )
    retry_max_wait: int = Field(
        default=10,
        description="Maximum wait time in seconds between retries"
    )

    # Season Calendar (pinned regional defaults)
    season_days_per_month: int = Field(
        default=30,
        ge=1,
        description="Length of the flat month used to count months since harvest"
    )
    season_harvest_cutoff_month: int = Field(
        default=8,
        ge=1,
        le=12,
        description="Month (1-12) from which a missing end date is assumed to be this year's"
    )
    season_fallback_end_month: int = Field(
        default=9,
        ge=1,
        le=12,
        description="Month (1-12) of the estimated season end when a record has no end date"
    )
    season_fallback_end_day: int = Field(
        default=30,
        ge=1,
        le=31,
        description="Day of month of the estimated season end"
    )

    # Geo Validation
    relocation_max_distance_m: float = Field(
        default=5.0,
        description="Maximum distance in meters a tree may be moved manually"
    )
    earth_radius_m: float = Field(
        default=6_371_000.0,
        description="Mean Earth radius in meters"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    rate_limit_requests: int = Field(
        default=100,
        description="Maximum requests per minute per client"
    )

    # Application Settings
    app_name: str = Field(
        default="Orchard Season & Spatial Integrity Engine",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode"
    )

    @model_validator(mode="after")
    def _check_fallback_end_date(self) -> "Settings":
        # 2001 is not a leap year: the date must exist every year
        last_day = monthrange(2001, self.season_fallback_end_month)[1]
        if self.season_fallback_end_day > last_day:
            raise ValueError(
                f"season_fallback_end_day {self.season_fallback_end_day} does not exist "
                f"in month {self.season_fallback_end_month}"
            )
        return self

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
