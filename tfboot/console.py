"""Console output and prompts."""

from __future__ import annotations

from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)
from rich.prompt import Prompt


class Console:
    """Pretty console output using rich."""

    def __init__(self, console: RichConsole | None = None, verbose: bool = False) -> None:
        self.console = console or RichConsole()
        self.verbose = verbose

    def info(self, message: str) -> None:
        self.console.print(f"[blue][INFO][/blue] {message}")

    def success(self, message: str) -> None:
        self.console.print(f"[green][OK][/green] {message}")

    def warn(self, message: str) -> None:
        self.console.print(f"[yellow][WARN][/yellow] {message}")

    def error(self, message: str) -> None:
        self.console.print(f"[red][ERROR][/red] {message}")

    def debug(self, message: str) -> None:
        if self.verbose:
            self.console.print(f"[dim][DEBUG] {message}[/dim]")

    def banner(self, title: str) -> None:
        self.console.print(Panel(title, style="bold blue"))

    def line(self, message: str = "") -> None:
        self.console.print(message)

    def raw(self, text: str) -> None:
        """Print command output verbatim, without markup or highlighting."""
        self.console.print(text, markup=False, highlight=False, end="")

    def prompt(self, message: str) -> str:
        return Prompt.ask(message, console=self.console, default="", show_default=False)

    def progress(self) -> Progress:
        return Progress(
            TextColumn("[bold blue]{task.description}"),
            BarColumn(),
            DownloadColumn(),
            TransferSpeedColumn(),
            TimeRemainingColumn(),
            console=self.console,
        )


console = Console()
