"""Camera modes and scheduled transitions."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum, IntEnum


class CameraMode(IntEnum):
    """Physical state of the IR filter.

    Values match the `--test` selectors on the command line.
    """

    COLOUR = 0
    NOIR = 1

    @property
    def opposite(self) -> "CameraMode":
        """Return the other camera mode."""
        return CameraMode.NOIR if self is CameraMode.COLOUR else CameraMode.COLOUR

    @property
    def label(self) -> str:
        """Human readable name used in progress output."""
        return "colour" if self is CameraMode.COLOUR else "NoIR"


class SunEvent(Enum):
    """Event a transition is anchored to."""

    SUNRISE = "sunrise"
    SUNSET = "sunset"
    # No sunrise/sunset available (polar day or night), re-plan later
    RECHECK = "recheck"


class SchedulerState(Enum):
    """Lifecycle of the transition scheduler."""

    IDLE = "idle"
    ARMED = "armed"
    FIRING = "firing"
    STOPPED = "stopped"


@dataclass(frozen=True)
class Transition:
    """Next instant at which the camera should assume `state`.

    `state` is the mode that becomes active once `fires` has elapsed.
    """

    fires: datetime
    state: CameraMode
    event: SunEvent

    @property
    def current_mode(self) -> CameraMode:
        """Mode that should be active until `fires`."""
        if self.event is SunEvent.RECHECK:
            return self.state
        return self.state.opposite
