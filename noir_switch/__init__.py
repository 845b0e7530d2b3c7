"""Day/night camera switch for Raspberry Pi NoIR setups."""

__version__ = "1.0.0"

from .core.config import Config, LocationConfig, load_config, load_location
from .core.debug import _is_debug_mode, debug_print
from .core.dependencies import check_external_dependencies
from .core.main import main
from .core.models import CameraMode, SunEvent, Transition
from .core.scheduler import TransitionScheduler
from .hardware.camera import CameraController, HardwareError
from .sun.sun import get_sun_times, get_sunrise, get_sunset, is_sun_up
from .sun.transition import compute_next_transition, current_mode_for

__all__ = [
    "__version__",
    "Config",
    "LocationConfig",
    "load_config",
    "load_location",
    "main",
    "debug_print",
    "_is_debug_mode",
    "check_external_dependencies",
    "CameraMode",
    "SunEvent",
    "Transition",
    "TransitionScheduler",
    "CameraController",
    "HardwareError",
    "get_sun_times",
    "get_sunrise",
    "get_sunset",
    "is_sun_up",
    "compute_next_transition",
    "current_mode_for",
]
