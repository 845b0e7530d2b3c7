"""Tests for main module."""

import asyncio
from unittest.mock import MagicMock, patch

import pytest
from conftest import FakeCamera

from noir_switch.core import main as main_module
from noir_switch.core.config import Config, HardwareConfig
from noir_switch.core.main import main, open_camera, parse_args, run_service, shutdown
from noir_switch.core.models import CameraMode
from noir_switch.hardware.camera import HardwareError


def _camera_context(camera: FakeCamera) -> MagicMock:
    context = MagicMock()
    context.__enter__.return_value = camera
    context.__exit__.return_value = False
    return context


@pytest.fixture(autouse=True)
def _isolated(monkeypatch, tmp_path):
    """No real config file and no process-wide signal handlers."""
    monkeypatch.setenv("CONFIG_PATH", str(tmp_path / "missing.json"))
    with patch("noir_switch.core.main.signal.signal"):
        yield


def test_parse_args_defaults() -> None:
    """Test no arguments runs the scheduler with the default config path."""
    args = parse_args([])

    assert args.config is None
    assert args.test is None


def test_parse_args_test_mode() -> None:
    """Test --test accepts the two mode selectors."""
    assert parse_args(["--test", "0"]).test == 0
    assert parse_args(["--test", "1", "-c", "camera.yaml"]).test == 1


def test_parse_args_rejects_unknown_mode() -> None:
    """Test --test rejects anything but 0 or 1."""
    with pytest.raises(SystemExit):
        parse_args(["--test", "2"])


@pytest.mark.parametrize(
    ("selector", "mode"), [("0", CameraMode.COLOUR), ("1", CameraMode.NOIR)]
)
def test_test_mode_applies_once_and_exits(selector: str, mode: CameraMode) -> None:
    """Test --test applies the selected mode and never arms a timer."""
    camera = FakeCamera()

    with (
        patch("noir_switch.core.main.open_camera", return_value=_camera_context(camera)),
        patch("noir_switch.core.main.TransitionScheduler") as scheduler_cls,
    ):
        main(["--test", selector])

    assert camera.modes == [mode]
    scheduler_cls.assert_not_called()


def test_main_exits_on_hardware_error(capsys) -> None:
    """Test hardware failures end the process with status 1."""
    with (
        patch("noir_switch.core.main.open_camera", side_effect=HardwareError("bus gone")),
        pytest.raises(SystemExit) as exc_info,
    ):
        main(["--test", "1"])

    assert exc_info.value.code == 1
    assert "Hardware error: bus gone" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_run_service_starts_scheduler(tmp_path) -> None:
    """Test the service builds the scheduler from config and runs it."""
    path = tmp_path / "camera.yaml"
    path.write_text(
        "location:\n  latitude: 48.9\n  longitude: -0.1\nschedule:\n  grace_seconds: 2\n"
    )
    camera = FakeCamera()

    with (
        patch("noir_switch.core.main.open_camera", return_value=_camera_context(camera)),
        patch("noir_switch.core.main.TransitionScheduler") as scheduler_cls,
    ):
        scheduler = scheduler_cls.return_value
        scheduler.run = MagicMock(side_effect=lambda event: asyncio.sleep(0))
        await run_service(config_path=str(path))

    location, used_camera = scheduler_cls.call_args.args
    assert location.latitude == 48.9
    assert used_camera is camera
    assert scheduler_cls.call_args.kwargs["grace_seconds"] == 2
    scheduler.start.assert_called_once()
    scheduler.run.assert_called_once_with(main_module._shutdown_event)


def test_open_camera_checks_bus_and_initialises() -> None:
    """Test the camera is opened on the configured bus and initialised."""
    config = Config(hardware=HardwareConfig(i2c_bus=2))

    with (
        patch("noir_switch.core.main.check_external_dependencies") as check,
        patch("noir_switch.core.main.CameraController") as controller_cls,
    ):
        camera = open_camera(config)

    check.assert_called_once_with(2)
    controller_cls.open.assert_called_once_with(config.hardware)
    assert camera is controller_cls.open.return_value
    camera.initialise.assert_called_once()


def test_shutdown_sets_event(monkeypatch, capsys) -> None:
    """Test the signal handler asks the loop to stop."""
    event = asyncio.Event()
    monkeypatch.setattr(main_module, "_shutdown_event", event)

    shutdown(15, None)

    assert event.is_set()
    assert "Stopping service..." in capsys.readouterr().out


def test_shutdown_without_loop_exits(monkeypatch) -> None:
    """Test the signal handler exits if the service has not started."""
    monkeypatch.setattr(main_module, "_shutdown_event", None)

    with pytest.raises(SystemExit):
        shutdown(2, None)
