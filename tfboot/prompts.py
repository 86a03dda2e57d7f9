"""Interactive prompts.

Every prompt is built on ``ask_until_valid``: it loops until the answer is
accepted, and the exit token aborts the whole run from any prompt.
"""

from __future__ import annotations

from typing import Callable, TypeVar

from tfboot.config import ABORT_TOKEN, NETWORKS
from tfboot.console import Console
from tfboot.device import is_valid_device
from tfboot.errors import UserAbort

T = TypeVar("T")

# Returned by a parser to reject an answer
INVALID = object()


def ask_until_valid(
    console: Console,
    message: str,
    parse: Callable[[str], T | object],
    error: str,
) -> T:
    """Prompt until ``parse`` accepts the answer.

    ``parse`` receives the raw answer and returns the accepted value, or
    ``INVALID`` to print ``error`` and ask again. The exit token is checked
    case-insensitively before ``parse`` sees the answer.
    """
    while True:
        answer = console.prompt(message)
        if answer.lower() == ABORT_TOKEN:
            raise UserAbort()
        value = parse(answer)
        if value is not INVALID:
            return value
        console.line(error)


def ask_input(console: Console, message: str) -> str:
    """Free-text input; anything but the exit token is accepted."""
    return ask_until_valid(console, f"{message} (or type 'exit')", lambda a: a, "")


def confirm(console: Console, message: str) -> bool:
    """Ask a y/n question."""
    answers = {"y": True, "n": False}
    return ask_until_valid(
        console,
        f"{message} (y/n/exit)",
        lambda a: answers.get(a.lower(), INVALID),
        "Please answer 'y', 'n', or 'exit'.",
    )


def acknowledge_layout(console: Console) -> None:
    """Wait for Enter after the disk layout has been shown."""
    ask_until_valid(
        console,
        "Press Enter to continue, or type 'exit' to quit",
        lambda a: None if a == "" else INVALID,
        "Invalid input. Please press Enter or type 'exit'.",
    )


def select_device(
    console: Console, is_valid: Callable[[str], bool] = is_valid_device
) -> str:
    return ask_until_valid(
        console,
        "Enter the disk to format (e.g., /dev/sdb) (or type 'exit')",
        lambda a: a if is_valid(a) else INVALID,
        "Error: Invalid disk format or device does not exist. "
        "Please enter /dev/sdX (e.g., /dev/sdb).",
    )


def select_network(console: Console) -> str:
    """Return the network name, lowercased."""
    names = ", ".join(NETWORKS)
    return ask_until_valid(
        console,
        f"Enter the network ({names}) (or type 'exit')",
        lambda a: a.lower() if a.lower() in NETWORKS else INVALID,
        "Invalid network. Please enter mainnet, devnet, testnet, or qanet.",
    )


def parse_farm_id(answer: str) -> str | object:
    # Kept verbatim, so "007" stays "007" in the URL
    if answer and answer.isascii() and answer.isdigit():
        return answer
    return INVALID


def select_farm_id(console: Console) -> str:
    return ask_until_valid(
        console,
        "Enter the farm ID (positive integer, or type 'exit')",
        parse_farm_id,
        "Invalid farm ID. Please enter a positive integer or 'exit'.",
    )


def select_unmount_path(console: Console) -> str:
    return ask_input(console, "Enter the path to unmount (e.g., /mnt/usb)")

