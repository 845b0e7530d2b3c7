"""Main entry point for the day/night camera switch service."""

import argparse
import asyncio
import signal
import sys

from ..hardware.camera import CameraController, HardwareError
from .config import Config, get_config_path, load_config_or_default
from .debug import debug_print
from .dependencies import check_external_dependencies
from .models import CameraMode
from .scheduler import TransitionScheduler

_shutdown_event: asyncio.Event | None = None


def shutdown(signum: int, frame: object) -> None:  # noqa: ARG001
    """Graceful shutdown handler."""
    print("Stopping service...")
    if _shutdown_event:
        _shutdown_event.set()
    else:
        # Event loop not running yet
        sys.exit(0)


def run_test_mode(camera: CameraController, mode: CameraMode) -> None:
    """Apply `mode` once and return without scheduling anything."""
    print(f"Test mode: switching to {mode.label} camera")
    camera.apply_mode(mode)


def open_camera(config: Config) -> CameraController:
    """Check the I2C bus, open the adapter and put it into a known state."""
    check_external_dependencies(config.hardware.i2c_bus)
    camera = CameraController.open(config.hardware)
    try:
        camera.initialise()
    except HardwareError:
        camera.close()
        raise
    return camera


async def run_service(config_path: str | None = None, test_mode: CameraMode | None = None) -> None:
    """Run the service in an async context.

    Args:
        config_path: Path to configuration file. If None, uses CONFIG_PATH env var or default.
        test_mode: Apply this mode once and return instead of scheduling transitions.
    """
    global _shutdown_event
    _shutdown_event = asyncio.Event()

    loop = asyncio.get_running_loop()
    if hasattr(loop, "add_signal_handler"):
        try:
            loop.add_signal_handler(signal.SIGINT, shutdown, signal.SIGINT, None)
            loop.add_signal_handler(signal.SIGTERM, shutdown, signal.SIGTERM, None)
        except (ValueError, OSError, NotImplementedError):
            # Signal handlers not available in this context
            pass

    config_path = get_config_path(config_path)
    debug_print(f"Loading config from: {config_path}")
    config = load_config_or_default(config_path)

    debug_print("\nConfiguration:")
    debug_print(f"  Location: {config.location.latitude}, {config.location.longitude}")
    debug_print(
        f"  I2C: bus {config.hardware.i2c_bus}, address 0x{config.hardware.i2c_address:02x}"
    )
    debug_print(
        f"  GPIO: select {config.hardware.select_pin}, enable {config.hardware.enable_pin}"
    )
    debug_print()

    with open_camera(config) as camera:
        if test_mode is not None:
            run_test_mode(camera, test_mode)
            return

        scheduler = TransitionScheduler(
            config.location,
            camera,
            grace_seconds=config.schedule.grace_seconds,
            polar_retry_seconds=config.schedule.polar_retry_seconds,
        )
        scheduler.start()
        await scheduler.run(_shutdown_event)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Switch the camera between colour and NoIR at sunrise and sunset"
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to configuration file (overrides CONFIG_PATH environment variable)",
    )
    parser.add_argument(
        "--test",
        type=int,
        choices=[int(CameraMode.COLOUR), int(CameraMode.NOIR)],
        default=None,
        metavar="MODE",
        help="Switch to colour (0) or NoIR (1) once and exit",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    test_mode = CameraMode(args.test) if args.test is not None else None

    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, shutdown)
    if hasattr(signal, "SIGINT"):
        signal.signal(signal.SIGINT, shutdown)

    try:
        asyncio.run(run_service(config_path=args.config, test_mode=test_mode))
    except HardwareError as e:
        print(f"Hardware error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nStopping service...")
        sys.exit(0)


if __name__ == "__main__":
    main()
