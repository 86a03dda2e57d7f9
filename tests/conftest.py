"""
Pytest fixtures for tfboot tests.

Nothing here touches a real block device: external commands go through a
fake runner, prompts are answered from a script, and downloads use an
httpx mock transport.
"""

import io
from pathlib import Path
from typing import Callable

import httpx
import pytest
from rich.console import Console as RichConsole

from tfboot.commands import CommandResult, CommandRunner
from tfboot.config import Settings
from tfboot.console import Console
from tfboot.device import DeviceManager
from tfboot.download import DownloadManager
from tfboot.provision import Provisioner

BOOT_IMAGE = b"MZ\x90\x00fake-ipxe-efi"


class ScriptedConsole(Console):
    """Console that answers prompts from a list and records the questions."""

    def __init__(self, answers: list[str]) -> None:
        self.buffer = io.StringIO()
        super().__init__(RichConsole(file=self.buffer, width=200, color_system=None))
        self.answers = list(answers)
        self.asked: list[str] = []

    def prompt(self, message: str) -> str:
        self.asked.append(message)
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {message}")
        return self.answers.pop(0)

    @property
    def output(self) -> str:
        return self.buffer.getvalue()


class FakeRunner(CommandRunner):
    """Record commands instead of running them.

    ``failures`` maps a program name (e.g. "mount") to the exit code it
    should return; everything else succeeds.
    """

    def __init__(self, failures: dict[str, int] | None = None) -> None:
        self.use_sudo = False
        self.failures = failures or {}
        self.calls: list[tuple[list[str], bool]] = []
        self.copied: dict[str, bytes] = {}

    def run(self, args, privileged=False) -> CommandResult:
        argv = list(args)
        self.calls.append((argv, privileged))
        code = self.failures.get(argv[0], 0)
        if argv[0] == "cp" and not code:
            self.copied[argv[2]] = Path(argv[1]).read_bytes()
        stdout = "NAME MAJ:MIN\nsdb    8:16\n" if argv[0] == "lsblk" else ""
        stderr = f"{argv[0]} failed" if code else ""
        return CommandResult(args=tuple(argv), returncode=code, stdout=stdout, stderr=stderr)

    def programs(self) -> list[str]:
        return [argv[0] for argv, _ in self.calls]

    def find(self, program: str) -> list[list[str]]:
        return [argv for argv, _ in self.calls if argv[0] == program]


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings with the mount point and cache under tmp_path."""
    mount_point = tmp_path / "mnt"
    mount_point.mkdir()
    return Settings(mount_point=mount_point, cache_dir=tmp_path / "cache", use_sudo=False)


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def requests_seen() -> list[httpx.Request]:
    return []


@pytest.fixture
def http_status() -> int:
    """Status code served by the mock bootstrap server."""
    return 200


@pytest.fixture
def http_client(requests_seen: list[httpx.Request], http_status: int) -> httpx.Client:
    def handler(request: httpx.Request) -> httpx.Response:
        requests_seen.append(request)
        if http_status != 200:
            return httpx.Response(http_status, text="not found")
        return httpx.Response(200, content=BOOT_IMAGE)

    return httpx.Client(transport=httpx.MockTransport(handler), follow_redirects=True)


@pytest.fixture
def make_provisioner(
    settings: Settings, runner: FakeRunner, http_client: httpx.Client
) -> Callable[..., tuple[Provisioner, ScriptedConsole]]:
    """
    Build a Provisioner wired to fakes.

    Usage:
        provisioner, console = make_provisioner(["", "n", "/dev/sdb", ...])
        provisioner.run()
    """

    def _make(answers: list[str], valid_devices: tuple[str, ...] = ("/dev/sdb",)):
        console = ScriptedConsole(answers)
        provisioner = Provisioner(
            settings,
            device_mgr=DeviceManager(runner),
            download_mgr=DownloadManager(settings.cache_dir, client=http_client, console=console),
            console=console,
            is_valid=lambda path: path in valid_devices,
        )
        return provisioner, console

    return _make
