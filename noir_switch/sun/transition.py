"""Planning of the next day/night camera transition."""

from collections.abc import Callable
from datetime import UTC, date, datetime, timedelta

from ..core.config import LocationConfig
from ..core.models import CameraMode, SunEvent, Transition
from .sun import NoSunEventError, SunTimes, get_sun_times, is_sun_up, solar_day

SunOracle = Callable[[date, LocationConfig], SunTimes]

DEFAULT_POLAR_RETRY_SECONDS = 3600

# How many days ahead an event may be looked up before giving up on it
MAX_LOOKAHEAD_DAYS = 3


def _next_occurrence(
    event: SunEvent,
    now: datetime,
    day: date,
    location: LocationConfig,
    oracle: SunOracle,
) -> datetime:
    """First occurrence of `event` strictly after `now`, starting from `day`."""
    for offset in range(MAX_LOOKAHEAD_DAYS + 1):
        times = oracle(day + timedelta(days=offset), location)
        instant = times.sunrise if event is SunEvent.SUNRISE else times.sunset
        if instant > now:
            return instant
    raise NoSunEventError(f"No {event.value} after {now.isoformat()}")


def compute_next_transition(
    location: LocationConfig,
    now: datetime,
    oracle: SunOracle = get_sun_times,
    polar_retry_seconds: int = DEFAULT_POLAR_RETRY_SECONDS,
) -> Transition:
    """Work out the next sunrise or sunset and the mode it switches to.

    Sunrise switches to colour, sunset to NoIR. The returned transition always
    fires strictly after `now`; an event exactly at `now` counts as passed.

    When the sun does not rise or set (polar day or night), a RECHECK
    transition is returned instead: it keeps the mode matching the sun's
    current altitude and fires `polar_retry_seconds` later.
    """
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)

    today = solar_day(now, location)
    tomorrow = today + timedelta(days=1)
    try:
        times = oracle(today, location)
        sunrise, sunset = times.sunrise, times.sunset

        # Roll events that already happened onto the following day
        if sunrise <= now:
            sunrise = _next_occurrence(SunEvent.SUNRISE, now, tomorrow, location, oracle)
        if sunset <= now:
            sunset = _next_occurrence(SunEvent.SUNSET, now, tomorrow, location, oracle)

        sunrise_next = sunrise < sunset

        # Never hand back an event that is not ahead of now
        if sunrise_next and now >= sunrise:
            sunrise_next = False
        elif not sunrise_next and now >= sunset:
            sunrise_next = True
    except NoSunEventError:
        mode = CameraMode.COLOUR if is_sun_up(now, location) else CameraMode.NOIR
        return Transition(
            fires=now + timedelta(seconds=polar_retry_seconds),
            state=mode,
            event=SunEvent.RECHECK,
        )

    if sunrise_next:
        return Transition(fires=sunrise, state=CameraMode.COLOUR, event=SunEvent.SUNRISE)
    return Transition(fires=sunset, state=CameraMode.NOIR, event=SunEvent.SUNSET)


def current_mode_for(
    location: LocationConfig,
    now: datetime,
    oracle: SunOracle = get_sun_times,
) -> CameraMode:
    """Mode the camera should be in at `now`, i.e. the one set by the last transition."""
    return compute_next_transition(location, now, oracle).current_mode
