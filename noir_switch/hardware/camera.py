"""Camera mode switching through the I2C multiplexer and GPIO lines."""

from typing import Protocol

from gpiozero import DigitalOutputDevice, GPIOZeroError
from smbus2 import SMBus

from ..core.config import HardwareConfig
from ..core.debug import debug_print
from ..core.models import CameraMode


class HardwareError(RuntimeError):
    """Raised when the I2C bus or a GPIO line cannot be driven."""


class ModeSwitcher(Protocol):
    """Anything that can put the camera into a given mode."""

    def apply_mode(self, mode: CameraMode) -> None:
        """Switch the camera to `mode`, raising HardwareError on failure."""
        ...


class CameraController:
    """Drives the adapter board that selects the colour or NoIR camera.

    The multiplexer channel is selected by writing to a register over I2C and
    the selection pin is driven LOW for colour and HIGH for NoIR.
    """

    def __init__(
        self,
        bus: SMBus,
        select_pin: DigitalOutputDevice,
        enable_pin: DigitalOutputDevice,
        hardware: HardwareConfig | None = None,
    ) -> None:
        self.bus = bus
        self.select_pin = select_pin
        self.enable_pin = enable_pin
        self.hardware = hardware or HardwareConfig()
        self.mode: CameraMode | None = None

    @classmethod
    def open(cls, hardware: HardwareConfig) -> "CameraController":
        """Open the I2C bus and claim the GPIO lines described by `hardware`."""
        try:
            bus = SMBus(hardware.i2c_bus)
        except OSError as e:
            raise HardwareError(f"Cannot open I2C bus {hardware.i2c_bus}: {e}") from e

        pins: list[DigitalOutputDevice] = []
        try:
            for number in (hardware.select_pin, hardware.enable_pin):
                pins.append(DigitalOutputDevice(number, initial_value=False))
        except (GPIOZeroError, OSError) as e:
            for pin in pins:
                pin.close()
            bus.close()
            raise HardwareError(f"Cannot claim GPIO pins: {e}") from e

        select_pin, enable_pin = pins
        return cls(bus, select_pin, enable_pin, hardware)

    def _select_channel(self, value: int) -> None:
        address = self.hardware.i2c_address
        try:
            self.bus.write_byte_data(address, self.hardware.i2c_register, value)
        except OSError as e:
            raise HardwareError(f"I2C write to 0x{address:02x} failed: {e}") from e

    def _drive(self, pin: DigitalOutputDevice, high: bool) -> None:
        try:
            if high:
                pin.on()
            else:
                pin.off()
        except (GPIOZeroError, OSError) as e:
            raise HardwareError(f"Cannot drive GPIO {pin.pin}: {e}") from e

    def initialise(self) -> None:
        """Put the adapter into a known state: colour channel, all lines LOW."""
        self._select_channel(self.hardware.colour_channel)
        self._drive(self.enable_pin, False)
        self._drive(self.select_pin, False)
        debug_print(
            f"Camera adapter initialised on bus {self.hardware.i2c_bus} "
            f"(address 0x{self.hardware.i2c_address:02x})"
        )

    def apply_mode(self, mode: CameraMode) -> None:
        """Switch the camera feed to `mode`."""
        print("Switching...")

        if mode is CameraMode.COLOUR:
            self._select_channel(self.hardware.colour_channel)
            self._drive(self.select_pin, False)
        else:
            self._select_channel(self.hardware.noir_channel)
            self._drive(self.select_pin, True)

        self.mode = mode
        print(f"Switched to {mode.label} camera")

    def close(self) -> None:
        """Release the GPIO lines and the I2C bus."""
        self.select_pin.close()
        self.enable_pin.close()
        self.bus.close()

    def __enter__(self) -> "CameraController":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
