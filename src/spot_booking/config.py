"""Configuration models and loading utilities."""

import os
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_PORT = 3001


class BookingConfig(BaseModel):
    """Spot and ledger configuration."""

    spot_count: int = Field(default=1, ge=1)
    timezone: str = "Europe/Stockholm"  # Reference civil timezone
    history_capacity: int = Field(default=10, ge=1)
    upcoming_capacity: int = Field(default=10, ge=1)
    default_occupant: str = "Anonymous"

    @field_validator("timezone")
    @classmethod
    def check_timezone(cls, v: str) -> str:
        """Reject names that are not IANA timezones."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v


class SweeperConfig(BaseModel):
    """Expiration sweeper configuration."""

    enabled: bool = True
    interval_seconds: float = Field(default=60, gt=0)


class APIConfig(BaseModel):
    """API server configuration."""

    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    cors_origins: list[str] = ["*"]

    @field_validator("port", mode="before")
    @classmethod
    def resolve_env_var(cls, v):
        """Resolve environment variable references like ${PORT}."""
        if isinstance(v, str) and v.startswith("${") and v.endswith("}"):
            env_var = v[2:-1]
            return os.environ.get(env_var) or DEFAULT_PORT
        return v


class AppConfig(BaseModel):
    """Main application configuration."""

    booking: BookingConfig = BookingConfig()
    sweeper: SweeperConfig = SweeperConfig()
    api: APIConfig = APIConfig()
    log_level: str = "INFO"


def load_config(path: str | Path) -> AppConfig:
    """
    Load configuration from a YAML file.

    Args:
        path: Path to the configuration file

    Returns:
        Validated AppConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid
    """
    config_path = Path(path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    return AppConfig(**data)


def get_config_path() -> Path:
    """Get the default configuration file path."""
    # Check for config in current directory first
    local_config = Path("config/config.yaml")
    if local_config.exists():
        return local_config

    # Check for config in parent directory (for Docker)
    parent_config = Path("/app/config/config.yaml")
    if parent_config.exists():
        return parent_config

    return local_config  # Return default even if doesn't exist
