"""Configuration for tfboot.

Defaults live in module constants. A YAML file can override the ``Settings``
fields, e.g.::

    bootstrap_url: https://bootstrap.grid.tf
    mount_point: /mnt/temp_usb
    cache_dir: ~/.cache/tfboot
    use_sudo: true
"""

from __future__ import annotations

import re
from dataclasses import dataclass, fields
from pathlib import Path

import yaml

from tfboot.errors import ConfigError

# =============================================================================
# Defaults
# =============================================================================

BOOTSTRAP_URL = "https://bootstrap.grid.tf"

# Fixed location where the target device is mounted while the image is written
MOUNT_POINT = Path("/mnt/temp_usb")

# UEFI firmware looks for the removable-media loader at this path
BOOT_DIR = Path("EFI/BOOT")
BOOT_FILE = BOOT_DIR / "BOOTX64.EFI"

# Staging area for downloads before they are copied onto the device
CACHE_DIR = Path.home() / ".cache/tfboot"

# /dev/sda is excluded since it is almost always the system disk
DEVICE_PATTERN = re.compile(r"^/dev/sd[b-z]$")

# Network name -> path component on the bootstrap server
NETWORKS = {
    "mainnet": "prod",
    "devnet": "dev",
    "testnet": "test",
    "qanet": "qa",
}

ABORT_TOKEN = "exit"


@dataclass
class Settings:
    """Runtime settings, optionally loaded from YAML."""

    bootstrap_url: str = BOOTSTRAP_URL
    mount_point: Path = MOUNT_POINT
    cache_dir: Path = CACHE_DIR
    use_sudo: bool | None = None

    def __post_init__(self) -> None:
        self.bootstrap_url = self.bootstrap_url.rstrip("/")
        self.mount_point = Path(self.mount_point).expanduser()
        self.cache_dir = Path(self.cache_dir).expanduser()

    @property
    def boot_dir(self) -> Path:
        return self.mount_point / BOOT_DIR

    @property
    def boot_file(self) -> Path:
        return self.mount_point / BOOT_FILE


def load_settings(path: Path | None) -> Settings:
    """Load settings from a YAML file, or return the defaults."""
    if path is None:
        return Settings()

    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        with path.open() as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return Settings()
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a mapping: {path}")

    allowed = {f.name for f in fields(Settings)}
    unknown = sorted(set(data) - allowed)
    if unknown:
        raise ConfigError(f"Unknown config keys in {path}: {', '.join(unknown)}")

    return Settings(**data)


def build_url(network_code: str, farm_id: str, base_url: str = BOOTSTRAP_URL) -> str:
    """Compose the iPXE download URL for a network code and farm ID."""
    return f"{base_url}/uefi/{network_code}/{farm_id}"


@dataclass(frozen=True)
class BootTarget:
    """Everything collected from the user for a single run."""

    device: str
    network: str
    farm_id: str
    url: str

    @classmethod
    def create(
        cls, device: str, network: str, farm_id: str, base_url: str = BOOTSTRAP_URL
    ) -> BootTarget:
        return cls(
            device=device,
            network=network,
            farm_id=farm_id,
            url=build_url(NETWORKS[network], farm_id, base_url),
        )

    @property
    def network_code(self) -> str:
        return NETWORKS[self.network]
