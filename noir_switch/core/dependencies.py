"""External dependency checking."""

import sys
from pathlib import Path


def i2c_device_path(bus: int, dev_root: Path = Path("/dev")) -> Path:
    """Path of the character device for an I2C bus."""
    return dev_root / f"i2c-{bus}"


def check_external_dependencies(bus: int, dev_root: Path = Path("/dev")) -> None:
    """Check that the I2C bus is enabled and exit if it is missing."""
    device = i2c_device_path(bus, dev_root)
    if device.exists():
        return

    print("ERROR: Required external dependencies are missing:")
    print(f"  - I2C bus {bus} ({device})")
    print("\nInstallation instructions:")
    print("  Raspberry Pi: sudo raspi-config nonint do_i2c 0")
    print("  or add 'dtparam=i2c_arm=on' to /boot/config.txt and reboot")
    sys.exit(1)
