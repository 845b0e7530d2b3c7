"""Sunrise and sunset calculation.

All times are in UTC. Calendar days are taken at the location's mean solar
time (UTC shifted by longitude / 15 hours), so a "day" always brackets the
local solar noon and its sunrise precedes its sunset.
"""

from datetime import UTC, date, datetime, time, timedelta
from typing import NamedTuple

from suncalc import get_position, get_times  # type: ignore[import-untyped]

from ..core.config import LocationConfig


class NoSunEventError(ValueError):
    """Raised when the sun does not rise or set on a day (polar day or night)."""


class SunTimes(NamedTuple):
    """Sunrise and sunset instants for one day, in UTC."""

    sunrise: datetime
    sunset: datetime


def _to_utc(value: datetime) -> datetime:
    """Naive datetimes are assumed to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    if value.tzinfo != UTC:
        return value.astimezone(UTC)
    return value


def solar_day(now: datetime, location: LocationConfig) -> date:
    """Calendar day of `now` at the location's mean solar time."""
    return (_to_utc(now) + timedelta(hours=location.longitude / 15)).date()


def _solar_noon(day: date, location: LocationConfig) -> datetime:
    return datetime.combine(day, time(12), tzinfo=UTC) - timedelta(hours=location.longitude / 15)


def _checked(value: object, name: str, day: date) -> datetime:
    # suncalc yields NaT (or a NaN based datetime64) when the event does not happen
    if not isinstance(value, datetime) or value != value:
        raise NoSunEventError(f"No {name} on {day.isoformat()}")
    if hasattr(value, "to_pydatetime"):
        value = value.to_pydatetime()
    return _to_utc(value)


def get_sun_times(day: date | datetime, location: LocationConfig) -> SunTimes:
    """Get sunrise and sunset times for a given day and location.

    Args:
        day: Day for which to calculate sun times. A datetime is reduced to its
            solar day at the location.
        location: Location configuration (latitude/longitude used for calculations)

    Returns:
        SunTimes with sunrise and sunset as UTC datetime objects

    Raises:
        NoSunEventError: If the sun does not rise or set that day
    """
    if isinstance(day, datetime):
        day = solar_day(day, location)

    try:
        times = get_times(_solar_noon(day, location), location.longitude, location.latitude)
    except (ValueError, OverflowError) as e:
        raise NoSunEventError(f"No sunrise/sunset on {day.isoformat()}: {e}") from e

    return SunTimes(
        sunrise=_checked(times["sunrise"], "sunrise", day),
        sunset=_checked(times["sunset"], "sunset", day),
    )


def get_sunrise(latitude: float, longitude: float, day: date | None = None) -> datetime:
    """Sunrise for a coordinate pair; `day` defaults to today (UTC)."""
    location = LocationConfig(latitude=latitude, longitude=longitude)
    return get_sun_times(day or datetime.now(UTC), location).sunrise


def get_sunset(latitude: float, longitude: float, day: date | None = None) -> datetime:
    """Sunset for a coordinate pair; `day` defaults to today (UTC)."""
    location = LocationConfig(latitude=latitude, longitude=longitude)
    return get_sun_times(day or datetime.now(UTC), location).sunset


def is_sun_up(now: datetime, location: LocationConfig) -> bool:
    """Check whether the sun is above the horizon at `now`.

    Works at any latitude, including during polar day and polar night.
    """
    position = get_position(_to_utc(now), location.longitude, location.latitude)
    return float(position["altitude"]) > 0
