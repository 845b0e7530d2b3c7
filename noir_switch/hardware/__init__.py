"""Hardware access for the camera adapter board."""

from .camera import CameraController, HardwareError, ModeSwitcher

__all__ = [
    "CameraController",
    "HardwareError",
    "ModeSwitcher",
]
