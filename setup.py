"""Install the noir-switch systemd unit and example config alongside the package."""

from pathlib import Path

from setuptools import setup

ROOT = Path(__file__).parent

# Everything else (name, version, dependencies, console script) is in pyproject.toml.
# The unit runs `noir-switch` with CONFIG_PATH=/boot/camera.json; the example
# config goes to /usr/share so it can be copied to the boot partition by hand.
DATA_FILES = {
    "etc/systemd/system": "noir-switch.service",
    "usr/share/noir-switch": "config.example.yaml",
}


def get_data_files() -> list[tuple[str, list[str]]]:
    """Return data_files entries for the files present in the source tree.

    Paths are relative to this directory, as setuptools requires.
    """
    return [(target, [name]) for target, name in DATA_FILES.items() if (ROOT / name).exists()]


setup(
    name="noir-switch",  # Must match pyproject.toml
    data_files=get_data_files(),
)
