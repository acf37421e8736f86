"""Tests for builds/orchestrator.py module.

Runs the state machine against a fake subprocess runner.
"""

import os
import subprocess
from pathlib import Path

import pytest

from hackeros_builder.builds.orchestrator import check_compatibility, run
from hackeros_builder.config import Settings
from hackeros_builder.errors import PreconditionError
from hackeros_builder.types import BuildContext, BuildState, DistributionTrack


class StepRunner:
    """Fake subprocess.run returning per-subcommand exit codes."""

    def __init__(self, exit_codes=None, exc=None):
        self.exit_codes = exit_codes or {}
        self.exc = exc
        self.calls = []
        self.cwds = []

    def __call__(self, cmd, **kwargs):
        self.calls.append(cmd)
        self.cwds.append(os.getcwd())
        if self.exc is not None:
            raise self.exc
        code = self.exit_codes.get(cmd[1], 0)
        return subprocess.CompletedProcess(cmd, code, stdout=f"{cmd[1]} output\n")

    @property
    def subcommands(self):
        return [cmd[1] for cmd in self.calls]


class NoAnswers:
    def ask(self, prompt):
        return ""


class ClosedStdin:
    def ask(self, prompt):
        raise EOFError


class BrokenInteraction:
    def ask(self, prompt):
        raise RuntimeError("terminal gone")


@pytest.fixture
def settings():
    """Settings independent of the environment."""
    return Settings(interactive=False, command_timeout=None, lb_command="lb")


@pytest.fixture
def context(tmp_path):
    """Rolling-track build context in a temporary directory."""
    return BuildContext(work_dir=tmp_path, track=DistributionTrack.ROLLING)


def always(track):
    return True


def never(track):
    return False


class TestRun:
    """Tests for run function."""

    def test_successful_run(self, context, settings):
        runner = StepRunner()
        result = run(
            context,
            settings=settings,
            interaction=NoAnswers(),
            runner=runner,
            compatible=always,
        )

        assert result.success
        assert result.state is BuildState.DONE
        assert result.states == [
            BuildState.IDLE,
            BuildState.CLEANING,
            BuildState.CONFIGURING,
            BuildState.BUILDING,
            BuildState.FINALIZING,
            BuildState.DONE,
        ]
        assert runner.subcommands == ["clean", "config", "build", "clean"]
        assert runner.calls[0] == ["lb", "clean", "--purge"]
        assert runner.calls[-1] == ["lb", "clean", "--purge"]
        assert [s.step for s in result.steps] == ["clean", "config", "build", "purge"]

    def test_missing_artifact_is_not_fatal(self, context, settings):
        result = run(context, settings=settings, runner=StepRunner(), compatible=always)

        assert result.success
        assert result.finalize is not None
        assert result.finalize.artifact is None
        assert len(result.finalize.warnings) == 1

    def test_artifact_found(self, context, settings):
        (context.work_dir / settings.artifact_name).write_bytes(b"iso")
        result = run(context, settings=settings, runner=StepRunner(), compatible=always)

        assert result.finalize.artifact == context.work_dir / settings.artifact_name
        assert result.finalize.warnings == []

    def test_unanswered_finalize_still_purges(self, context, settings):
        (context.work_dir / settings.artifact_name).write_bytes(b"iso")
        runner = StepRunner()
        result = run(
            context,
            settings=settings,
            interaction=ClosedStdin(),
            runner=runner,
            compatible=always,
        )

        assert result.state is BuildState.DONE
        assert runner.subcommands == ["clean", "config", "build", "clean"]
        assert result.finalize.artifact == context.work_dir / settings.artifact_name
        assert len(result.finalize.warnings) == 1

    def test_purge_runs_when_finalize_raises(self, context, settings):
        (context.work_dir / settings.artifact_name).write_bytes(b"iso")
        before = os.getcwd()
        runner = StepRunner()
        with pytest.raises(RuntimeError):
            run(
                context,
                settings=settings,
                interaction=BrokenInteraction(),
                runner=runner,
                compatible=always,
            )

        assert runner.calls[-1] == ["lb", "clean", "--purge"]
        assert runner.subcommands == ["clean", "config", "build", "clean"]
        assert os.getcwd() == before

    def test_config_failure_halts(self, context, settings):
        before = os.getcwd()
        runner = StepRunner(exit_codes={"config": 2})
        result = run(context, settings=settings, runner=runner, compatible=always)

        assert result.state is BuildState.FAILED
        assert result.states[-2:] == [BuildState.CONFIGURING, BuildState.FAILED]
        assert runner.subcommands == ["clean", "config"]
        assert "build" not in runner.subcommands
        assert result.error is not None
        assert result.error.step == "config"
        assert result.error.exit_code == 2
        assert result.error.output == "config output\n"
        assert result.finalize is None
        assert os.getcwd() == before

    def test_clean_failure_halts(self, context, settings):
        runner = StepRunner(exit_codes={"clean": 1})
        result = run(context, settings=settings, runner=runner, compatible=always)

        assert result.state is BuildState.FAILED
        assert runner.subcommands == ["clean"]

    def test_build_failure_skips_finalize(self, context, settings):
        runner = StepRunner(exit_codes={"build": 1})
        result = run(context, settings=settings, runner=runner, compatible=always)

        assert result.state is BuildState.FAILED
        assert BuildState.FINALIZING not in result.states
        assert runner.subcommands == ["clean", "config", "build"]

    def test_timeout_fails_run(self, context):
        settings = Settings(interactive=False, command_timeout=60)
        runner = StepRunner(exc=subprocess.TimeoutExpired(["lb", "clean"], 60))
        result = run(context, settings=settings, runner=runner, compatible=always)

        assert result.state is BuildState.FAILED
        assert result.error.code == "command_timeout"

    def test_commands_run_in_work_dir(self, context, settings):
        before = os.getcwd()
        runner = StepRunner()
        run(context, settings=settings, runner=runner, compatible=always)

        assert {Path(cwd) for cwd in runner.cwds} == {context.work_dir.resolve()}
        assert os.getcwd() == before

    def test_distribution_and_bootappend(self, tmp_path, settings):
        context = BuildContext(
            work_dir=tmp_path, track=DistributionTrack.ROLLING, stable=True
        )
        runner = StepRunner()
        run(
            context,
            settings=settings,
            bootappend="quiet splash",
            runner=runner,
            compatible=always,
        )

        config_cmd = runner.calls[1]
        assert config_cmd[config_cmd.index("--distribution") + 1] == "trixie"
        assert config_cmd[-2:] == ["--bootappend-live", "quiet splash"]

    def test_transition_callback(self, context, settings):
        seen = []
        run(
            context,
            settings=settings,
            runner=StepRunner(),
            compatible=always,
            on_transition=seen.append,
        )
        assert seen[0] is BuildState.CLEANING
        assert seen[-1] is BuildState.DONE

    def test_incompatible_host_never_starts(self, context, settings):
        runner = StepRunner()
        with pytest.raises(PreconditionError, match="not compatible"):
            run(context, settings=settings, runner=runner, compatible=never)
        assert runner.calls == []

    def test_missing_work_dir(self, tmp_path, settings):
        context = BuildContext(
            work_dir=tmp_path / "missing", track=DistributionTrack.ROLLING
        )
        runner = StepRunner()
        with pytest.raises(PreconditionError):
            run(context, settings=settings, runner=runner, compatible=always)
        assert runner.calls == []


class TestCheckCompatibility:
    """Tests for check_compatibility function."""

    def test_checks_selected_track(self, tmp_path, settings):
        seen = []
        context = BuildContext(
            work_dir=tmp_path, track=DistributionTrack.ROLLING, stable=True
        )
        check_compatibility(context, settings, lambda t: seen.append(t) or True)
        assert seen == [DistributionTrack.STABLE]

    def test_uses_host_files(self, tmp_path):
        os_release = tmp_path / "os-release"
        os_release.write_text("VERSION_CODENAME=forky\n")
        settings = Settings(
            os_release_path=os_release, branding_path=tmp_path / "missing"
        )
        rolling = BuildContext(work_dir=tmp_path, track=DistributionTrack.ROLLING)
        stable = BuildContext(work_dir=tmp_path, track=DistributionTrack.STABLE)

        check_compatibility(rolling, settings)
        with pytest.raises(PreconditionError):
            check_compatibility(stable, settings)
