"""Command line entry point."""

from __future__ import annotations

import os
import platform
import shutil
from pathlib import Path

import click
from rich.markup import escape

from tfboot import __version__
from tfboot.commands import should_use_sudo
from tfboot.config import Settings, load_settings
from tfboot.console import console
from tfboot.errors import ConfigError, ProvisionError, UserAbort
from tfboot.provision import Provisioner

HELP_TOKENS = {"help"}

REQUIRED_TOOLS = ["lsblk"]

# Run through sudo, whose secure_path includes the sbin directories
PRIVILEGED_TOOLS = ["mkfs.vfat", "mount", "umount"]
SBIN_DIRS = ["/usr/local/sbin", "/usr/sbin", "/sbin"]

HELP_TEXT = """\
This CLI formats a USB drive with FAT32 and installs an iPXE bootloader
to boot a ThreeFold Grid V3 node.

The ZOS bootstrap image format is EFI FILE for UEFI.

[bold]Options:[/bold]
  help        Display this help message.

[bold]Steps:[/bold]
  1. Displays the current disk layout.
  2. Prompts for a path to unmount (optional).
  3. Prompts for the disk to format (e.g., /dev/sdb). Must be a valid device.
  4. Prompts for the network (mainnet, devnet, testnet, qanet).
  5. Prompts for the farm ID.
  6. Confirms the formatting operation.
  7. Formats the disk with FAT32.
  8. Creates a temporary mount point and mounts the formatted disk.
  9. Downloads the iPXE bootloader from the ThreeFold Grid bootstrap server
     to EFI/BOOT/BOOTX64.EFI on the USB drive.
 10. Unmounts the temporary mount point.
 11. Optionally ejects the USB drive.

Type 'exit' at any prompt to quit.

[bold]Example:[/bold]
  tfboot
  tfboot help
"""


def show_help() -> None:
    console.banner(f"THREEFOLD V3 ZOS BOOTMAKER {__version__}")
    console.line(HELP_TEXT)


def check_prerequisites(settings: Settings) -> bool:
    """Check all prerequisites are met."""
    if platform.system() != "Linux":
        console.error("This tool only runs on Linux")
        return False

    tools = list(REQUIRED_TOOLS)
    if should_use_sudo(settings.use_sudo):
        tools.append("sudo")
    missing = [tool for tool in tools if not shutil.which(tool)]

    sbin_path = os.pathsep.join([os.environ.get("PATH", ""), *SBIN_DIRS])
    missing += [tool for tool in PRIVILEGED_TOOLS if not shutil.which(tool, path=sbin_path)]
    if missing:
        console.error(f"Required tools not found: {', '.join(missing)}")
        return False

    return True


@click.command()
@click.argument("action", required=False)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    envvar="TFBOOT_CONFIG",
    help="YAML file overriding the default settings",
)
@click.option("-v", "--verbose", is_flag=True, help="Print external commands as they run")
def main(action: str | None, config_path: Path | None, verbose: bool) -> None:
    """Format a USB drive and make it boot a ThreeFold Grid node via iPXE.

    Run without arguments for the interactive flow, or pass 'help' for usage.
    """
    if action and action.lower() in HELP_TOKENS:
        show_help()
        return

    try:
        settings = load_settings(config_path)
    except ConfigError as e:
        console.error(escape(str(e)))
        raise SystemExit(1)

    console.verbose = verbose

    if not check_prerequisites(settings):
        raise SystemExit(1)

    provisioner = Provisioner(settings, console=console)
    try:
        provisioner.run()
    except UserAbort:
        console.line("Exiting...")
        raise SystemExit(0)
    except ProvisionError as e:
        console.error(escape(str(e)))
        raise SystemExit(1)
    finally:
        provisioner.download_mgr.close()


if __name__ == "__main__":
    main()
