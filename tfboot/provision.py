"""Boot media provisioning flow.

The run is strictly sequential:

1. Show the disk layout and wait for acknowledgment
2. Optionally unmount an unrelated path (failures are reported, not fatal)
3. Collect the target device, network and farm ID
4. Confirm, then format the device with FAT32
5. Mount it, download the iPXE loader to EFI/BOOT/BOOTX64.EFI
6. List the contents, unmount, and optionally eject

Any prompt accepts ``exit``, which raises ``UserAbort``. Destructive steps
raise ``ProvisionError`` subclasses on failure.
"""

from __future__ import annotations

from typing import Callable

from rich.markup import escape

from tfboot import prompts
from tfboot.commands import CommandRunner
from tfboot.config import BootTarget, Settings
from tfboot.console import Console, console as default_console
from tfboot.device import DeviceManager, is_valid_device
from tfboot.download import DownloadManager
from tfboot.errors import DownloadError, EjectError, FormatError, MountError


class Provisioner:
    """Walk the user through preparing a boot USB drive."""

    def __init__(
        self,
        settings: Settings,
        device_mgr: DeviceManager | None = None,
        download_mgr: DownloadManager | None = None,
        console: Console | None = None,
        is_valid: Callable[[str], bool] = is_valid_device,
    ) -> None:
        self.settings = settings
        self.console = console or default_console
        self.device_mgr = device_mgr or DeviceManager(
            CommandRunner(use_sudo=settings.use_sudo, console=self.console)
        )
        self.download_mgr = download_mgr or DownloadManager(
            settings.cache_dir, console=self.console
        )
        self.is_valid = is_valid

    # -------------------------------------------------------------------------
    # Interactive stages
    # -------------------------------------------------------------------------

    def show_layout(self) -> None:
        self.console.line()
        self.console.line("Current disk layout:")
        self.console.line()
        result = self.device_mgr.layout()
        if result.ok:
            self.console.raw(result.stdout)
        else:
            self.console.warn(f"Could not list block devices: {escape(result.detail)}")
        self.console.line()
        self.console.line("This is your current disk layout. Consider this before proceeding.")
        self.console.line()
        prompts.acknowledge_layout(self.console)

    def offer_unmount(self) -> None:
        """Unmount a user-chosen path; failure is reported and ignored."""
        if not prompts.confirm(self.console, "Do you want to unmount a disk?"):
            return

        path = prompts.select_unmount_path(self.console)
        if not path:
            return

        self.console.info(f"Unmounting {escape(path)}...")
        result = self.device_mgr.unmount(path)
        if not result.ok:
            self.console.error(
                f"Error unmounting {escape(path)} (exit code: {result.returncode})"
            )

    def collect_target(self) -> BootTarget:
        device = prompts.select_device(self.console, self.is_valid)
        network = prompts.select_network(self.console)
        farm_id = prompts.select_farm_id(self.console)

        target = BootTarget.create(device, network, farm_id, self.settings.bootstrap_url)

        self.console.line()
        self.console.info(f"The URL to download the bootstrap image is the following: {escape(target.url)}")
        self.console.line()
        return target

    def confirm_format(self, target: BootTarget) -> bool:
        return prompts.confirm(
            self.console,
            f"Are you sure you want to format {target.device}? This will ERASE ALL DATA",
        )

    # -------------------------------------------------------------------------
    # Destructive stages
    # -------------------------------------------------------------------------

    def format_device(self, target: BootTarget) -> None:
        self.console.info(f"Formatting {target.device} with FAT32...")
        result = self.device_mgr.format_fat32(target.device)
        if not result.ok:
            raise FormatError(f"Error formatting disk: {result.detail}")
        self.console.success(f"Formatted {target.device}")

    def mount_device(self, target: BootTarget) -> None:
        mount_point = self.settings.mount_point

        result = self.device_mgr.make_dir(mount_point)
        if not result.ok:
            raise MountError(f"Error creating mount point {mount_point}: {result.detail}")

        self.console.info("Mounting formatted disk...")
        result = self.device_mgr.mount(target.device, mount_point)
        if not result.ok:
            raise MountError(f"Error mounting formatted disk: {result.detail}")
        self.console.success(f"Mounted {target.device} at {mount_point}")

    def fetch_bootloader(self, target: BootTarget) -> None:
        """Download the loader onto the mounted device.

        On any failure, interrupts included, the mount point is unmounted
        before the exception propagates; the result of that unmount is not
        checked.
        """
        try:
            self._fetch(target)
        except BaseException:
            self.device_mgr.unmount(self.settings.mount_point)
            raise

    def _fetch(self, target: BootTarget) -> None:
        self.console.info("Creating EFI boot directory...")
        result = self.device_mgr.make_dir(self.settings.boot_dir)
        if not result.ok:
            raise DownloadError(f"Error creating EFI boot directory: {result.detail}")

        self.console.info(f"Downloading iPXE file from {escape(target.url)}...")
        description = f"iPXE ({target.network}, farm {target.farm_id})"
        with self.download_mgr.staged(target.url, description) as staged:
            result = self.device_mgr.copy(staged, self.settings.boot_file)
        if not result.ok:
            raise DownloadError(f"Error copying iPXE file to the disk: {result.detail}")
        self.console.success(f"iPXE bootloader written to {self.settings.boot_file}")

    def show_contents(self) -> None:
        mount_point = self.settings.mount_point
        if not mount_point.is_dir():
            self.console.line("Error: Temporary mount point not found.")
            return

        self.console.line()
        self.console.line(f"Contents of the mounted disk ({mount_point}):")
        self.console.line()
        result = self.device_mgr.list_contents(mount_point)
        if result.ok:
            self.console.raw(result.stdout)
        else:
            self.console.warn(f"Could not list {mount_point}: {escape(result.detail)}")
        self.console.line()

    def unmount_device(self) -> None:
        self.console.info("Unmounting temporary mount point...")
        result = self.device_mgr.unmount(self.settings.mount_point)
        if not result.ok:
            self.console.error(f"Error unmounting {self.settings.mount_point}: {escape(result.detail)}")

    def offer_eject(self, target: BootTarget) -> None:
        if not prompts.confirm(self.console, "Do you want to eject the disk?"):
            return

        self.console.info(f"Ejecting {target.device}...")
        result = self.device_mgr.eject(target.device)
        if not result.ok:
            raise EjectError(f"Error ejecting disk: {result.detail}")
        self.console.success("Disk ejected successfully")

    # -------------------------------------------------------------------------
    # Flow
    # -------------------------------------------------------------------------

    def run(self) -> bool:
        """Run the full flow.

        Returns False if the user declined the format, True on success.
        """
        self.show_layout()
        self.offer_unmount()

        target = self.collect_target()

        if not self.confirm_format(target):
            self.console.line()
            self.console.line("Operation cancelled.")
            self.console.line()
            return False

        self.format_device(target)
        self.mount_device(target)
        self.fetch_bootloader(target)
        self.show_contents()
        self.unmount_device()

        self.console.line()
        self.console.success("The ZOS bootstrap image has been copied to the USB key.")
        self.console.line()

        self.offer_eject(target)

        self.console.line()
        self.console.line("Operation completed.")
        self.console.line()
        return True

