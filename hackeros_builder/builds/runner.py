"""Runner for live-build commands.

This module handles:
- Composing `lb clean`, `lb config` and `lb build` commands
- Executing them with subprocess, capturing combined output
- Enforcing an optional per-command timeout
- Pinning the process working directory for the duration of a run
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from hackeros_builder.errors import COMMAND_TIMEOUT, EXECUTION_ERROR, CommandError

logger = logging.getLogger(__name__)

APT_OPTIONS = "--yes -o Acquire::AllowInsecureRepositories=true"
ARCHIVE_AREAS = "main contrib non-free non-free-firmware"

Runner = Callable[..., "subprocess.CompletedProcess[str]"]


@dataclass
class StepResult:
    """Record of one executed command.

    Attributes:
        step: Step name (clean, config, build, purge).
        command: The command that was executed.
        exit_code: Process exit code (-1 on timeout).
        output: Combined stdout/stderr.
        started_at: Start time.
        finished_at: Finish time.
    """

    step: str
    command: str
    exit_code: int
    output: str
    started_at: datetime
    finished_at: datetime

    @property
    def success(self) -> bool:
        return self.exit_code == 0


@contextmanager
def pushd(path: Path) -> Iterator[Path]:
    """Change the working directory, restoring the previous one on exit."""
    previous = Path.cwd()
    os.chdir(path)
    logger.debug("Entered %s", path)
    try:
        yield path
    finally:
        os.chdir(previous)
        logger.debug("Restored working directory %s", previous)


def compose_clean_command(lb: str = "lb") -> list[str]:
    """Compose `lb clean --purge`."""
    return [lb, "clean", "--purge"]


def compose_config_command(
    distribution: str,
    architecture: str = "amd64",
    bootappend: str | None = None,
    lb: str = "lb",
) -> list[str]:
    """Compose the `lb config` command.

    Args:
        distribution: Debian codename.
        architecture: Target architecture.
        bootappend: Optional live kernel parameters.
        lb: live-build executable.

    Returns:
        Command as list of strings suitable for subprocess.
    """
    cmd = [
        lb,
        "config",
        "--distribution",
        distribution,
        "--architectures",
        architecture,
        "--apt-recommends",
        "false",
        "--apt-secure",
        "false",
        "--apt-options",
        APT_OPTIONS,
        "--archive-areas",
        ARCHIVE_AREAS,
        "--firmware-binary",
        "true",
        "--firmware-chroot",
        "true",
    ]
    if bootappend:
        cmd.extend(["--bootappend-live", bootappend])
    return cmd


def compose_build_command(lb: str = "lb") -> list[str]:
    """Compose `lb build`."""
    return [lb, "build"]


def run_step(
    step: str,
    cmd: list[str],
    cwd: Path,
    timeout: int | None = None,
    runner: Runner | None = None,
) -> StepResult:
    """Execute one command and capture its output.

    Args:
        step: Step name used in logs and errors.
        cmd: Command to run.
        cwd: Working directory.
        timeout: Timeout in seconds (None = no timeout).
        runner: subprocess.run compatible callable.

    Returns:
        StepResult for the finished process, whatever its exit code.

    Raises:
        CommandError: If the command timed out or could not be started.
    """
    run_fn = runner or subprocess.run
    cmd_str = shlex.join(cmd)
    logger.info("Executing %s: %s", step, cmd_str)

    started_at = datetime.now(timezone.utc)
    kwargs: dict[str, Any] = {
        "cwd": cwd,
        "stdout": subprocess.PIPE,
        "stderr": subprocess.STDOUT,
        "text": True,
        "timeout": timeout,
        "check": False,
    }
    try:
        result = run_fn(cmd, **kwargs)
    except subprocess.TimeoutExpired as e:
        output = e.output if isinstance(e.output, str) else ""
        message = f"{step} timed out after {timeout} seconds"
        logger.error(message)
        raise CommandError(
            message, step=step, exit_code=-1, output=output, code=COMMAND_TIMEOUT
        ) from e
    except OSError as e:
        message = f"Failed to execute {cmd[0]}: {e}"
        logger.error(message)
        raise CommandError(message, step=step, code=EXECUTION_ERROR) from e

    finished_at = datetime.now(timezone.utc)
    duration = (finished_at - started_at).total_seconds()
    logger.info("%s finished with exit code %d in %.1fs", step, result.returncode, duration)

    return StepResult(
        step=step,
        command=cmd_str,
        exit_code=result.returncode,
        output=result.stdout or "",
        started_at=started_at,
        finished_at=finished_at,
    )


__all__ = [
    "APT_OPTIONS",
    "ARCHIVE_AREAS",
    "Runner",
    "StepResult",
    "compose_build_command",
    "compose_clean_command",
    "compose_config_command",
    "pushd",
    "run_step",
]
