"""
Configuration management using Pydantic Settings.
"""

from pathlib import Path
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import (
    DEFAULT_DURATION_MINUTES,
    DEFAULT_WORK_HOURS_END,
    DEFAULT_WORK_HOURS_START,
    WorkingWindow,
    is_clock_time,
)


class DefaultsConfig(BaseModel):
    """Fallbacks used when a listing does not specify its own settings."""
    duration_minutes: int = DEFAULT_DURATION_MINUTES
    work_hours_start: str = DEFAULT_WORK_HOURS_START
    work_hours_end: str = DEFAULT_WORK_HOURS_END

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        """Ensure service duration is positive."""
        if value <= 0:
            raise ValueError("duration_minutes must be greater than zero")
        return value

    @field_validator("work_hours_start", "work_hours_end")
    @classmethod
    def validate_clock_time(cls, value: str) -> str:
        """Validate time is HH:mm on a 24h clock."""
        if not is_clock_time(value):
            raise ValueError(f"Time must be in HH:mm format, got {value!r}")
        return value

    def get_working_window(self) -> WorkingWindow:
        """Get default working hours as a WorkingWindow."""
        return WorkingWindow(start=self.work_hours_start, end=self.work_hours_end)


class BookingWindowConfig(BaseModel):
    """How far back and forward a provider's schedule may be queried."""
    past_days: int = 1
    future_days: int = 90

    @field_validator("past_days", "future_days")
    @classmethod
    def validate_days(cls, value: int) -> int:
        if value < 0:
            raise ValueError(f"Booking window days must not be negative, got {value}")
        return value


class StorageConfig(BaseModel):
    """Where bookings and listings are read from."""
    backend: Literal["json", "http"] = "json"
    data_file: Optional[Path] = None  # None: packaged sample data
    base_url: Optional[str] = None
    api_token: Optional[str] = None
    timeout_seconds: float = 10.0

    @model_validator(mode="after")
    def validate_backend(self) -> "StorageConfig":
        """Ensure the HTTP backend knows where to connect."""
        if self.backend == "http" and not self.base_url:
            raise ValueError("storage.base_url is required for the http backend")
        return self


class AppConfig(BaseModel):
    """Application configuration."""
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    slot_step_minutes: int = 30
    booking_window: BookingWindowConfig = Field(default_factory=BookingWindowConfig)
    busy_statuses: List[str] = Field(default_factory=lambda: ["accepted", "in_progress"])
    cache_max_age_seconds: int = 60
    storage: StorageConfig = Field(default_factory=StorageConfig)

    @field_validator("slot_step_minutes")
    @classmethod
    def validate_step(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("slot_step_minutes must be greater than zero")
        return value

    @field_validator("busy_statuses")
    @classmethod
    def validate_busy_statuses(cls, value: List[str]) -> List[str]:
        """Ensure at least one status counts as busy, deduplicated."""
        deduped: List[str] = []
        for status in value:
            status = status.strip().lower()
            if status and status not in deduped:
                deduped.append(status)
        if not deduped:
            raise ValueError("busy_statuses must contain at least one status")
        return deduped

    @field_validator("cache_max_age_seconds")
    @classmethod
    def validate_cache_age(cls, value: int) -> int:
        if value < 0:
            raise ValueError("cache_max_age_seconds must not be negative")
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
