"""Block device operations."""

from __future__ import annotations

import os
import shutil
import stat
from pathlib import Path

from tfboot.commands import CommandResult, CommandRunner
from tfboot.config import DEVICE_PATTERN


def is_block_device(path: str) -> bool:
    """Check whether a path exists and is a block device."""
    try:
        mode = os.stat(path).st_mode
    except OSError:
        return False
    return stat.S_ISBLK(mode)


def is_valid_device(path: str) -> bool:
    """A target must look like /dev/sdX (not sda) and exist right now."""
    return bool(DEVICE_PATTERN.match(path)) and is_block_device(path)


class DeviceManager:
    """Manage the target device through OS utilities."""

    def __init__(self, runner: CommandRunner) -> None:
        self.runner = runner

    def layout(self) -> CommandResult:
        """Current block device layout as printed by lsblk."""
        return self.runner.run(["lsblk"])

    def unmount(self, path: str | Path) -> CommandResult:
        return self.runner.run(["umount", "--", str(path)], privileged=True)

    def format_fat32(self, device: str) -> CommandResult:
        # -I formats the whole device without a partition table
        return self.runner.run(["mkfs.vfat", "-I", device], privileged=True)

    def make_dir(self, path: Path) -> CommandResult:
        return self.runner.run(["mkdir", "-p", str(path)], privileged=True)

    def mount(self, device: str, mount_point: Path) -> CommandResult:
        return self.runner.run(["mount", device, str(mount_point)], privileged=True)

    def copy(self, source: Path, dest: Path) -> CommandResult:
        return self.runner.run(["cp", str(source), str(dest)], privileged=True)

    def list_contents(self, path: Path) -> CommandResult:
        """Recursive listing, using tree when it is installed."""
        if shutil.which("tree"):
            return self.runner.run(["tree", str(path)])
        return self.runner.run(["ls", "-lR", str(path)])

    def eject(self, device: str) -> CommandResult:
        return self.runner.run(["eject", device], privileged=True)
