"""
Configuration management using Pydantic models loaded from YAML.
"""

import re
from pathlib import Path
from typing import Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator

_HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class DefaultsConfig(BaseModel):
    """Default settings for reports."""
    days: int = 7
    headcount_time: str = "09:00"

    @field_validator("days")
    @classmethod
    def validate_days(cls, value: int) -> int:
        """Ensure the report span is positive."""
        if value <= 0:
            raise ValueError("days must be greater than zero")
        return value

    @field_validator("headcount_time")
    @classmethod
    def validate_headcount_time(cls, value: str) -> str:
        """Validate the time is HH:MM."""
        if not _HHMM_PATTERN.match(value):
            raise ValueError(f"headcount_time must be HH:MM, got {value!r}")
        return value


class AppConfig(BaseModel):
    """Application configuration."""
    data_file: Path
    timezone: str = "Asia/Jerusalem"
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        A relative ``data_file`` is resolved against the config file's folder.

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

        config = cls(**data)
        if not config.data_file.is_absolute():
            config.data_file = config_path.parent / config.data_file
        return config

    def today(self) -> pendulum.Date:
        """Today's date in the configured timezone."""
        return pendulum.today(self.timezone).date()


def get_default_config_path(explicit: Optional[Path] = None) -> Path:
    """Get the configuration file path, falling back to ./config.yaml."""
    if explicit is not None:
        return explicit

    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
