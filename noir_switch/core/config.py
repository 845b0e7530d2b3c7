"""Configuration loading and validation using Pydantic."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .debug import debug_print

DEFAULT_CONFIG_PATH = "/boot/camera.json"

# London
DEFAULT_LATITUDE = 51.5074
DEFAULT_LONGITUDE = 0.1278


class LocationConfig(BaseModel):
    """Location used for the sunrise/sunset calculation."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(DEFAULT_LATITUDE, ge=-90, le=90, description="Latitude in degrees")
    longitude: float = Field(
        DEFAULT_LONGITUDE, ge=-180, le=180, description="Longitude in degrees"
    )


class HardwareConfig(BaseModel):
    """I2C multiplexer and GPIO wiring of the camera adapter board.

    Defaults match the Arducam multi-camera adapter: channel select register at
    0x70, GPIO4 selects the camera and GPIO17 is the enable line.
    """

    i2c_bus: int = Field(1, ge=0, description="I2C bus number (/dev/i2c-N)")
    i2c_address: int = Field(0x70, ge=0x03, le=0x77, description="7-bit I2C address")
    i2c_register: int = Field(0x00, ge=0, le=0xFF, description="Channel select register")
    colour_channel: int = Field(0x01, ge=0, le=0xFF, description="Register value for colour")
    noir_channel: int = Field(0x02, ge=0, le=0xFF, description="Register value for NoIR")
    select_pin: int = Field(4, ge=0, le=27, description="BCM pin driving camera selection")
    enable_pin: int = Field(17, ge=0, le=27, description="BCM pin held LOW to enable the adapter")


class ScheduleConfig(BaseModel):
    """Timer configuration."""

    grace_seconds: float = Field(
        1.0, ge=0, le=60, description="Delay added to each transition before firing"
    )
    polar_retry_seconds: int = Field(
        3600,
        ge=60,
        le=86400,
        description="Re-plan interval when no sunrise/sunset occurs (polar day/night)",
    )


class Config(BaseModel):
    """Root configuration model."""

    location: LocationConfig = Field(default_factory=LocationConfig)
    hardware: HardwareConfig = Field(default_factory=HardwareConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)

    @model_validator(mode="before")
    @classmethod
    def lift_flat_location(cls, data: Any) -> Any:
        """Accept the flat `{"latitude": .., "longitude": ..}` layout."""
        if not isinstance(data, dict):
            return data
        nested = data.get("location")
        if nested is not None and not isinstance(nested, dict):
            # Left for field validation to reject
            return data
        if "latitude" in data or "longitude" in data:
            data = dict(data)
            location = dict(nested or {})
            for key in ("latitude", "longitude"):
                if key in data:
                    location[key] = data.pop(key)
            data["location"] = location
        return data


def get_config_path(config_path: str | None = None) -> str:
    """Resolve the config path: explicit argument > CONFIG_PATH > CONFIG env var > default."""
    if config_path is not None:
        return config_path
    return os.getenv("CONFIG_PATH") or os.getenv("CONFIG") or DEFAULT_CONFIG_PATH


def format_validation_errors(error: ValidationError) -> str:
    """Format Pydantic validation errors into user-friendly messages.

    Args:
        error: Pydantic ValidationError instance

    Returns:
        Formatted error message string
    """
    lines = ["Configuration validation failed:"]
    for err in error.errors():
        field_path = " -> ".join(str(loc) for loc in err["loc"])
        error_msg = err.get("msg", "")

        if field_path:
            lines.append(f"  • {field_path}: {error_msg}")
        else:
            lines.append(f"  • {error_msg}")

    lines.append("")
    lines.append("See config.example.yaml for a complete example configuration")

    return "\n".join(lines)


def _read_config(path: Path) -> Config:
    """Parse and validate a config file, raising on any problem."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    return validate_config(data or {})


def load_config(config_path: str | None = None) -> Config:
    """Load and validate configuration from a YAML (or JSON) file.

    Args:
        config_path: Path to configuration file. If None, uses CONFIG_PATH env var or default.

    Returns:
        Validated Config instance

    Raises:
        FileNotFoundError: If config file does not exist
        yaml.YAMLError: If the file cannot be parsed
        ValidationError: If config validation fails (formatted error message is printed)
    """
    try:
        return _read_config(Path(get_config_path(config_path)))
    except ValidationError as e:
        print(format_validation_errors(e))
        raise


def load_config_or_default(config_path: str | None = None) -> Config:
    """Load configuration, falling back to defaults (London) on any failure.

    Never raises; the reason for the fallback is only shown in debug mode.
    """
    path = Path(get_config_path(config_path))
    try:
        return _read_config(path)
    except ValidationError as e:
        debug_print(format_validation_errors(e))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        debug_print(f"Could not read {path}: {e}")
    debug_print("Using default configuration")
    return Config()


def load_location(config_path: str | None = None) -> LocationConfig:
    """Return the configured location, or London if the config is unusable."""
    return load_config_or_default(config_path).location


def validate_config(config: dict) -> Config:
    """Validate configuration dictionary."""
    return Config.model_validate(config)
