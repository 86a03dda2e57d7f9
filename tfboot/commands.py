"""External command execution."""

from __future__ import annotations

import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import Sequence

from rich.markup import escape

from tfboot.console import Console, console as default_console


@dataclass(frozen=True)
class CommandResult:
    """Outcome of an external command."""

    args: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def detail(self) -> str:
        """Best human-readable explanation of a failure."""
        text = self.stderr.strip() or self.stdout.strip()
        return text or f"exit code {self.returncode}"


def should_use_sudo(use_sudo: bool | None) -> bool:
    """Resolve the sudo setting; ``None`` means "unless already root"."""
    if use_sudo is not None:
        return use_sudo
    return os.geteuid() != 0


class CommandRunner:
    """Run external commands and capture their results."""

    def __init__(self, use_sudo: bool | None = None, console: Console | None = None) -> None:
        self.use_sudo = should_use_sudo(use_sudo)
        self.console = console or default_console

    def run(self, args: Sequence[str], privileged: bool = False) -> CommandResult:
        """Run a command, prefixing ``sudo`` for privileged calls when enabled."""
        argv = list(args)
        if privileged and self.use_sudo:
            argv = ["sudo", *argv]

        self.console.debug(f"$ {escape(shlex.join(argv))}")

        try:
            result = subprocess.run(argv, capture_output=True, text=True)
        except FileNotFoundError as e:
            # 127 is the shell status for "command not found"
            return CommandResult(args=tuple(argv), returncode=127, stderr=str(e))

        return CommandResult(
            args=tuple(argv),
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
        )
