"""Tests for builds/runner.py module.

Tests command composition and execution.
Uses a fake subprocess runner for execution tests.
"""

import os
import subprocess
from pathlib import Path

import pytest

from hackeros_builder.builds.runner import (
    APT_OPTIONS,
    compose_build_command,
    compose_clean_command,
    compose_config_command,
    pushd,
    run_step,
)
from hackeros_builder.errors import CommandError


class FakeRunner:
    """Record calls and return a fixed result."""

    def __init__(self, returncode=0, stdout="ok\n", exc=None):
        self.returncode = returncode
        self.stdout = stdout
        self.exc = exc
        self.calls = []

    def __call__(self, cmd, **kwargs):
        self.calls.append((cmd, kwargs))
        if self.exc is not None:
            raise self.exc
        return subprocess.CompletedProcess(cmd, self.returncode, stdout=self.stdout)


class TestComposeCommands:
    """Tests for command composition."""

    def test_clean(self):
        assert compose_clean_command() == ["lb", "clean", "--purge"]

    def test_build(self):
        assert compose_build_command("/usr/bin/lb") == ["/usr/bin/lb", "build"]

    def test_config_flags(self):
        cmd = compose_config_command("forky")

        assert cmd[:2] == ["lb", "config"]
        assert cmd[cmd.index("--distribution") + 1] == "forky"
        assert cmd[cmd.index("--architectures") + 1] == "amd64"
        assert cmd[cmd.index("--apt-options") + 1] == APT_OPTIONS
        assert cmd[cmd.index("--firmware-binary") + 1] == "true"
        assert cmd[cmd.index("--firmware-chroot") + 1] == "true"
        assert "non-free-firmware" in cmd[cmd.index("--archive-areas") + 1]
        assert "--bootappend-live" not in cmd

    def test_config_bootappend(self):
        cmd = compose_config_command(
            "trixie", architecture="arm64", bootappend="quiet splash"
        )

        assert cmd[cmd.index("--distribution") + 1] == "trixie"
        assert cmd[cmd.index("--architectures") + 1] == "arm64"
        assert cmd[-2:] == ["--bootappend-live", "quiet splash"]


class TestPushd:
    """Tests for pushd context manager."""

    def test_changes_and_restores(self, tmp_path):
        before = os.getcwd()
        with pushd(tmp_path) as path:
            assert Path.cwd() == tmp_path.resolve()
            assert path == tmp_path
        assert os.getcwd() == before

    def test_restores_on_error(self, tmp_path):
        before = os.getcwd()
        with pytest.raises(RuntimeError):
            with pushd(tmp_path):
                raise RuntimeError("boom")
        assert os.getcwd() == before


class TestRunStep:
    """Tests for run_step function."""

    def test_success(self, tmp_path):
        runner = FakeRunner(stdout="done\n")
        result = run_step("build", ["lb", "build"], cwd=tmp_path, runner=runner)

        assert result.success
        assert result.exit_code == 0
        assert result.output == "done\n"
        assert result.command == "lb build"
        cmd, kwargs = runner.calls[0]
        assert cmd == ["lb", "build"]
        assert kwargs["cwd"] == tmp_path
        assert kwargs["stderr"] == subprocess.STDOUT
        assert kwargs["check"] is False

    def test_non_zero_exit(self, tmp_path):
        runner = FakeRunner(returncode=2, stdout="E: failed\n")
        result = run_step("config", ["lb", "config"], cwd=tmp_path, runner=runner)

        assert not result.success
        assert result.exit_code == 2
        assert result.output == "E: failed\n"

    def test_timeout(self, tmp_path):
        runner = FakeRunner(
            exc=subprocess.TimeoutExpired(["lb", "build"], 60, output="partial")
        )
        with pytest.raises(CommandError) as exc_info:
            run_step("build", ["lb", "build"], cwd=tmp_path, timeout=60, runner=runner)

        assert exc_info.value.code == "command_timeout"
        assert exc_info.value.exit_code == -1
        assert exc_info.value.output == "partial"
        assert runner.calls[0][1]["timeout"] == 60

    def test_missing_executable(self, tmp_path):
        runner = FakeRunner(exc=FileNotFoundError("No such file: 'lb'"))
        with pytest.raises(CommandError) as exc_info:
            run_step("clean", ["lb", "clean"], cwd=tmp_path, runner=runner)

        assert exc_info.value.code == "execution_error"
        assert exc_info.value.step == "clean"
