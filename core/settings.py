"""
Application settings and configuration management using Pydantic Settings.
"""
from typing import List
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RESERVATIONS_",
        case_sensitive=False,
        extra="ignore"
    )

    # Application Settings
    app_name: str = Field(default="Table Reservations", description="Application name")
    app_env: str = Field(default="development", description="Environment (development, staging, production)")
    log_level: str = Field(default="INFO", description="Logging level")

    # Database Configuration
    database_url: str = Field(
        default="sqlite:///./reservations.db",
        description="Database connection URL"
    )

    # Restaurant Configuration
    restaurant_name: str = Field(default="My Restaurant", description="Restaurant name")
    restaurant_timezone: str = Field(default="America/New_York", description="Restaurant timezone")
    restaurant_hours_open: str = Field(default="11:00", description="Opening time (HH:MM)")
    restaurant_hours_close: str = Field(default="22:00", description="Closing time (HH:MM)")
    closed_weekdays: str = Field(
        default="monday",
        description="Weekdays the restaurant is closed (comma-separated)"
    )

    # Booking Rules
    min_party_size: int = Field(default=1, ge=1, description="Smallest bookable party")
    max_party_size: int = Field(default=12, ge=1, description="Largest bookable party")
    minimum_lead_time_minutes: int = Field(default=60, ge=0, description="Minimum notice before arrival")
    maximum_horizon_days: int = Field(default=30, ge=1, description="How far ahead bookings are accepted")
    large_party_threshold: int = Field(default=9, ge=1, description="Parties at or above this need extra notice")
    large_party_lead_time_hours: int = Field(default=24, ge=0, description="Notice required for large parties")
    special_approval_threshold: int = Field(
        default=10, ge=1,
        description="Parties above this must book through staff"
    )
    modification_cutoff_minutes: int = Field(default=120, ge=0, description="Guest edit cutoff before arrival")
    cancellation_cutoff_minutes: int = Field(default=30, ge=0, description="Guest cancel cutoff before arrival")

    # Capacity
    conflict_window_minutes: int = Field(default=120, ge=1, description="Window counted against capacity")
    capacity_ceiling: int = Field(default=40, ge=1, description="Seats available within one window")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the allowed values."""
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in allowed_levels:
            raise ValueError(f"log_level must be one of {allowed_levels}")
        return v_upper

    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, v: str) -> str:
        """Validate environment is one of the allowed values."""
        allowed_envs = ["development", "staging", "production", "test"]
        v_lower = v.lower()
        if v_lower not in allowed_envs:
            raise ValueError(f"app_env must be one of {allowed_envs}")
        return v_lower

    @property
    def closed_weekdays_list(self) -> List[str]:
        """Parse closed weekdays from comma-separated string to list."""
        return [day.strip().lower() for day in self.closed_weekdays.split(",") if day.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.app_env == "production"
