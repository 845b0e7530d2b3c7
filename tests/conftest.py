"""Shared test fixtures and helpers."""

from collections.abc import Callable
from datetime import UTC, date, datetime, time, timedelta

import pytest
from gpiozero import Device
from gpiozero.pins.mock import MockFactory

from noir_switch.core.config import LocationConfig
from noir_switch.core.models import CameraMode
from noir_switch.hardware.camera import HardwareError
from noir_switch.sun.sun import SunTimes

LONDON = LocationConfig(latitude=51.5074, longitude=0.1278)

BASE_DAY = date(2026, 3, 20)


class FakeOracle:
    """Sun oracle with fixed times: sunrise drifts one minute later each day."""

    def __init__(
        self,
        sunrise: time = time(6, 30),
        sunset: time = time(18, 0),
        drift_minutes: int = 1,
    ) -> None:
        self.sunrise = sunrise
        self.sunset = sunset
        self.drift_minutes = drift_minutes
        self.calls: list[date] = []

    def __call__(self, day: date, location: LocationConfig) -> SunTimes:
        self.calls.append(day)
        drift = timedelta(minutes=self.drift_minutes * (day - BASE_DAY).days)
        return SunTimes(
            sunrise=datetime.combine(day, self.sunrise, tzinfo=UTC) + drift,
            sunset=datetime.combine(day, self.sunset, tzinfo=UTC) + drift,
        )


class FakeCamera:
    """Records applied modes instead of touching hardware."""

    def __init__(
        self,
        on_apply: Callable[[CameraMode], None] | None = None,
        fail_after: int | None = None,
    ) -> None:
        self.modes: list[CameraMode] = []
        self.on_apply = on_apply
        self.fail_after = fail_after

    def apply_mode(self, mode: CameraMode) -> None:
        if self.fail_after is not None and len(self.modes) >= self.fail_after:
            raise HardwareError("I2C write to 0x70 failed: [Errno 121] Remote I/O error")
        self.modes.append(mode)
        if self.on_apply is not None:
            self.on_apply(mode)


def at(day: date, hour: int, minute: int = 0, second: int = 0) -> datetime:
    """UTC datetime helper."""
    return datetime.combine(day, time(hour, minute, second), tzinfo=UTC)


@pytest.fixture
def london() -> LocationConfig:
    """London, the default location."""
    return LONDON


@pytest.fixture
def oracle() -> FakeOracle:
    """Sun oracle with sunrise at 06:30 and sunset at 18:00 on BASE_DAY."""
    return FakeOracle()


@pytest.fixture
def camera() -> FakeCamera:
    """Camera that records applied modes."""
    return FakeCamera()


@pytest.fixture
def mock_pins():
    """Route gpiozero devices to mock pins."""
    previous = Device.pin_factory
    Device.pin_factory = MockFactory()
    yield Device.pin_factory
    Device.pin_factory.reset()
    Device.pin_factory = previous


@pytest.fixture(autouse=True)
def _no_debug(monkeypatch) -> None:
    """Keep debug output off unless a test turns it on."""
    monkeypatch.delenv("DEBUG_MODE", raising=False)
