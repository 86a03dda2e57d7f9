"""Tests for command execution and device operations."""

import subprocess
from pathlib import Path

import pytest

from tfboot import commands, device
from tfboot.commands import CommandResult, CommandRunner
from tfboot.device import DeviceManager

from conftest import FakeRunner, ScriptedConsole


class TestCommandRunner:
    """Test the subprocess wrapper."""

    @pytest.fixture
    def completed(self, monkeypatch):
        seen = []

        def fake_run(argv, capture_output, text):
            seen.append(argv)
            return subprocess.CompletedProcess(argv, 3, stdout="out", stderr="boom\n")

        monkeypatch.setattr(commands.subprocess, "run", fake_run)
        return seen

    def test_privileged_uses_sudo(self, completed):
        runner = CommandRunner(use_sudo=True, console=ScriptedConsole([]))
        result = runner.run(["umount", "/mnt/x"], privileged=True)
        assert completed == [["sudo", "umount", "/mnt/x"]]
        assert result.args == ("sudo", "umount", "/mnt/x")
        assert result.returncode == 3
        assert not result.ok
        assert result.detail == "boom"

    def test_unprivileged_never_uses_sudo(self, completed):
        runner = CommandRunner(use_sudo=True, console=ScriptedConsole([]))
        runner.run(["lsblk"])
        assert completed == [["lsblk"]]

    def test_sudo_disabled(self, completed):
        runner = CommandRunner(use_sudo=False, console=ScriptedConsole([]))
        runner.run(["mount", "/dev/sdb", "/mnt"], privileged=True)
        assert completed == [["mount", "/dev/sdb", "/mnt"]]

    def test_verbose_echoes_command(self, completed):
        console = ScriptedConsole([])
        console.verbose = True
        CommandRunner(use_sudo=False, console=console).run(["lsblk", "-f"])
        assert "$ lsblk -f" in console.output

    def test_missing_binary(self, monkeypatch):
        def fake_run(argv, capture_output, text):
            raise FileNotFoundError(2, "No such file or directory", argv[0])

        monkeypatch.setattr(commands.subprocess, "run", fake_run)
        result = CommandRunner(use_sudo=False, console=ScriptedConsole([])).run(["tree"])
        assert result.returncode == 127

    @pytest.mark.parametrize("euid,expected", [(0, False), (1000, True)])
    def test_auto_sudo(self, monkeypatch, euid, expected):
        monkeypatch.setattr(commands.os, "geteuid", lambda: euid)
        assert commands.should_use_sudo(None) is expected

    def test_detail_falls_back_to_exit_code(self):
        assert CommandResult(args=("eject",), returncode=1).detail == "exit code 1"


class TestDeviceManager:
    """Test the commands issued for each device operation."""

    def test_format_fat32(self, runner: FakeRunner):
        DeviceManager(runner).format_fat32("/dev/sdb")
        assert runner.calls == [(["mkfs.vfat", "-I", "/dev/sdb"], True)]

    def test_mount_and_unmount(self, runner: FakeRunner):
        mgr = DeviceManager(runner)
        mgr.mount("/dev/sdb", Path("/mnt/temp_usb"))
        mgr.unmount(Path("/mnt/temp_usb"))
        assert runner.calls == [
            (["mount", "/dev/sdb", "/mnt/temp_usb"], True),
            (["umount", "--", "/mnt/temp_usb"], True),
        ]

    def test_eject(self, runner: FakeRunner):
        DeviceManager(runner).eject("/dev/sdb")
        assert runner.calls == [(["eject", "/dev/sdb"], True)]

    def test_layout_is_unprivileged(self, runner: FakeRunner):
        result = DeviceManager(runner).layout()
        assert runner.calls == [(["lsblk"], False)]
        assert "sdb" in result.stdout

    @pytest.mark.parametrize(
        "tree_path,expected",
        [("/usr/bin/tree", ["tree", "/mnt/x"]), (None, ["ls", "-lR", "/mnt/x"])],
    )
    def test_list_contents_fallback(self, runner: FakeRunner, monkeypatch, tree_path, expected):
        monkeypatch.setattr(device.shutil, "which", lambda name: tree_path)
        DeviceManager(runner).list_contents(Path("/mnt/x"))
        assert runner.calls == [(expected, False)]
