"""Build orchestration.

Drives live-build through a fixed sequence of states:

    idle -> cleaning -> configuring -> building -> finalizing -> done

Any failing command moves the run to `failed` and stops forward progress;
nothing is retried. The process working directory is pinned to the build
directory for the whole run and restored afterwards.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from hackeros_builder.builds.artifacts import Interaction, finalize
from hackeros_builder.builds.runner import (
    Runner,
    StepResult,
    compose_build_command,
    compose_clean_command,
    compose_config_command,
    pushd,
    run_step,
)
from hackeros_builder.config import Settings, get_settings
from hackeros_builder.errors import CommandError, PreconditionError
from hackeros_builder.host.compat import is_compatible
from hackeros_builder.types import (
    BuildContext,
    BuildState,
    DistributionTrack,
    FinalizeResult,
)

logger = logging.getLogger(__name__)

CompatibilityCheck = Callable[[DistributionTrack], bool]
TransitionCallback = Callable[[BuildState], None]


@dataclass
class BuildRunResult:
    """Result of a build run.

    Attributes:
        state: Final state (done or failed).
        states: Every state visited, in order.
        steps: Executed commands.
        error: The error that stopped the run, if any.
        finalize: Artifact handling outcome, if the build succeeded.
    """

    state: BuildState = BuildState.IDLE
    states: list[BuildState] = field(default_factory=lambda: [BuildState.IDLE])
    steps: list[StepResult] = field(default_factory=list)
    error: CommandError | None = None
    finalize: FinalizeResult | None = None

    @property
    def success(self) -> bool:
        return self.state is BuildState.DONE


class _Run:
    """Mutable state of one orchestrator run."""

    def __init__(
        self,
        context: BuildContext,
        settings: Settings,
        runner: Runner | None,
        on_transition: TransitionCallback | None,
    ) -> None:
        self.context = context
        self.settings = settings
        self.runner = runner
        self.on_transition = on_transition
        self.result = BuildRunResult()

    def enter(self, state: BuildState) -> None:
        logger.debug("Build state %s -> %s", self.result.state.value, state.value)
        self.result.state = state
        self.result.states.append(state)
        if self.on_transition is not None:
            self.on_transition(state)

    def execute(self, step: str, cmd: list[str]) -> None:
        step_result = run_step(
            step,
            cmd,
            cwd=self.context.work_dir,
            timeout=self.settings.command_timeout,
            runner=self.runner,
        )
        self.result.steps.append(step_result)
        if not step_result.success:
            raise CommandError(
                f"{step} failed with exit code {step_result.exit_code}",
                step=step,
                exit_code=step_result.exit_code,
                output=step_result.output,
            )


def check_compatibility(
    context: BuildContext,
    settings: Settings,
    compatible: CompatibilityCheck | None = None,
) -> None:
    """Refuse to start a run on a host that cannot build the selected track.

    Raises:
        PreconditionError: If the host is not compatible.
    """
    track = context.selected_track
    if compatible is None:
        ok = is_compatible(track, settings.os_release_path, settings.branding_path)
    else:
        ok = compatible(track)
    if not ok:
        raise PreconditionError(
            f"This system is not compatible with the {track.value} track "
            f"({track.codename}). Allowed editions: {', '.join(sorted(track.variants))}"
        )


def run(
    context: BuildContext,
    settings: Settings | None = None,
    bootappend: str | None = None,
    interaction: Interaction | None = None,
    runner: Runner | None = None,
    compatible: CompatibilityCheck | None = None,
    on_transition: TransitionCallback | None = None,
) -> BuildRunResult:
    """Run the live-build pipeline for a build context.

    Args:
        context: Build directory, track and flags.
        settings: Application settings; loaded from the environment if None.
        bootappend: Live kernel parameters from profile translation.
        interaction: Answers artifact rename/move questions.
        runner: subprocess.run compatible callable.
        compatible: Host compatibility check; defaults to inspecting the
            configured os-release and branding files.
        on_transition: Called with each new state.

    Returns:
        BuildRunResult ending in `done` or `failed`.

    Raises:
        PreconditionError: If the build directory is missing or the host
            is not compatible. No command runs in that case.
    """
    settings = settings or get_settings()
    if not context.work_dir.is_dir():
        raise PreconditionError(f"Build directory {context.work_dir} does not exist")
    check_compatibility(context, settings, compatible)

    lb = settings.lb_command
    state = _Run(context, settings, runner, on_transition)
    logger.info(
        "Building on %s (%s) in %s",
        context.distribution,
        context.selected_track.value,
        context.work_dir,
    )

    with pushd(context.work_dir):
        try:
            state.enter(BuildState.CLEANING)
            state.execute("clean", compose_clean_command(lb))

            state.enter(BuildState.CONFIGURING)
            state.execute(
                "config",
                compose_config_command(
                    context.distribution,
                    architecture=settings.architecture,
                    bootappend=bootappend,
                    lb=lb,
                ),
            )

            state.enter(BuildState.BUILDING)
            state.execute("build", compose_build_command(lb))

            state.enter(BuildState.FINALIZING)
            try:
                state.result.finalize = finalize(
                    context.work_dir,
                    interaction=interaction,
                    artifact_name=settings.artifact_name,
                )
            finally:
                state.execute("purge", compose_clean_command(lb))
        except CommandError as e:
            logger.error("Build failed during %s: %s", e.step, e)
            state.result.error = e
            state.enter(BuildState.FAILED)
            return state.result

        state.enter(BuildState.DONE)
    return state.result


__all__ = [
    "BuildRunResult",
    "CompatibilityCheck",
    "TransitionCallback",
    "check_compatibility",
    "run",
]
