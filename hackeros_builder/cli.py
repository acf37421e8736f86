"""Thin CLI wrapper for hackeros_builder.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules; this is the only place
errors are turned into messages and exit codes.
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape

from hackeros_builder import __version__
from hackeros_builder.builds.artifacts import (
    ConsoleInteraction,
    Interaction,
    NoInteraction,
)
from hackeros_builder.builds.orchestrator import check_compatibility, run
from hackeros_builder.config import Settings, get_settings, print_settings_json
from hackeros_builder.descriptor import DESCRIPTOR_FILE, resolve
from hackeros_builder.errors import BuilderError, CommandError
from hackeros_builder.host.compat import is_compatible
from hackeros_builder.log import setup_logging
from hackeros_builder.profiles.translator import translate
from hackeros_builder.types import BuildContext, BuildState, DistributionTrack

app = typer.Typer(
    name="hackeros-builder",
    help="HackerOS Builder - build HackerOS live images with live-build",
    no_args_is_help=True,
)
console = Console()

STATE_MESSAGES = {
    BuildState.CLEANING: "Cleaning previous builds (lb clean --purge)...",
    BuildState.CONFIGURING: "Configuring live-build (lb config)...",
    BuildState.BUILDING: "Building image (lb build)...",
    BuildState.FINALIZING: "Finalizing image...",
}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"hackeros-builder version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """HackerOS Builder - build HackerOS live images with live-build."""


def _fail(error: BuilderError) -> None:
    console.print(f"[bold red]Error:[/bold red] {escape(error.message)}")
    if isinstance(error, CommandError) and error.output:
        console.print(error.output, markup=False, highlight=False)
    raise typer.Exit(code=1)


def _show_state(state: BuildState) -> None:
    message = STATE_MESSAGES.get(state)
    if message:
        console.print(f"[yellow]{message}[/yellow]")


def _interaction(settings: Settings) -> Interaction:
    if settings.interactive:
        return ConsoleInteraction()
    return NoInteraction()


def _select_track(work_dir: Path, stable: bool) -> DistributionTrack:
    if stable:
        return DistributionTrack.STABLE
    if (work_dir / DESCRIPTOR_FILE).exists():
        return resolve(work_dir)
    return DistributionTrack.ROLLING


def _run_build(
    context: BuildContext,
    settings: Settings,
    bootappend: str | None = None,
) -> None:
    console.print(
        f"[bold green]Building HackerOS on Debian "
        f"(distribution: {context.distribution})...[/bold green]"
    )
    result = run(
        context,
        settings=settings,
        bootappend=bootappend,
        interaction=_interaction(settings),
        on_transition=_show_state,
    )
    if result.error is not None:
        _fail(result.error)

    if result.finalize is not None:
        for warning in result.finalize.warnings:
            console.print(f"[yellow]Warning: {warning}[/yellow]")
        if result.finalize.artifact is not None:
            console.print(f"Image: [green]{result.finalize.artifact}[/green]")
    console.print("[bold green]Build completed successfully.[/bold green]")


@app.command()
def build(
    stable: Annotated[
        bool,
        typer.Option("--stable", "-s", help="Build on the stable track (trixie)"),
    ] = False,
    here: Annotated[
        bool,
        typer.Option("--here", help="Build in the current directory"),
    ] = False,
) -> None:
    """Build a HackerOS image.

    Without --stable the track comes from config-hackeros.hacker when the
    build directory has one, and defaults to rolling (forky) otherwise.
    """
    settings = get_settings()
    setup_logging(settings.log_level)
    console.print("[bold blue]Initializing HackerOS build...[/bold blue]")

    work_dir = Path.cwd() if here else settings.work_dir
    try:
        if not here:
            work_dir.mkdir(parents=True, exist_ok=True)
        track = _select_track(work_dir, stable)
        context = BuildContext(work_dir=work_dir, track=track, stable=stable, here=here)
        _run_build(context, settings)
    except BuilderError as e:
        _fail(e)
    except OSError as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(code=1) from None


@app.command()
def profile() -> None:
    """Build a HackerOS image from the *.profile files in the current directory."""
    settings = get_settings()
    setup_logging(settings.log_level)
    console.print("[bold blue]Initializing HackerOS profile build...[/bold blue]")

    context = BuildContext(
        work_dir=Path.cwd(),
        track=DistributionTrack.ROLLING,
        here=True,
        profile_mode=True,
    )
    try:
        check_compatibility(context, settings)
        translation = translate(context.work_dir)
        if translation.total == 0:
            console.print("[yellow]No profile files found[/yellow]")
        else:
            console.print(
                f"Translated {translation.succeeded}/{translation.total} profile(s)"
            )
        for failure in translation.failures:
            console.print(
                f"  [red]✗ {Path(failure.path).name}: {escape(failure.error or '')}[/red]"
            )
        _run_build(context, settings, bootappend=translation.bootappend)
    except BuilderError as e:
        _fail(e)


@app.command()
def check(
    stable: Annotated[
        bool,
        typer.Option("--stable", "-s", help="Check the stable track"),
    ] = False,
) -> None:
    """Check whether this system may build a track."""
    settings = get_settings()
    setup_logging(settings.log_level)
    track = DistributionTrack.STABLE if stable else DistributionTrack.ROLLING
    if is_compatible(track, settings.os_release_path, settings.branding_path):
        console.print(
            f"[green]Compatible with the {track.value} track ({track.codename})[/green]"
        )
        return
    console.print(
        f"[red]Not compatible with the {track.value} track ({track.codename})[/red]"
    )
    raise typer.Exit(code=1)


@app.command()
def config(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        console.print(
            print_settings_json(settings), soft_wrap=True, markup=False, highlight=False
        )
        return

    timeout_display = (
        str(settings.command_timeout) if settings.command_timeout else "(none)"
    )
    console.print("[bold]Effective Configuration:[/bold]")
    console.print()
    console.print("[bold]Paths:[/bold]")
    console.print(f"  Work directory:      {settings.work_dir}")
    console.print(f"  OS release file:     {settings.os_release_path}")
    console.print(f"  Branding file:       {settings.branding_path}")
    console.print()
    console.print("[bold]live-build:[/bold]")
    console.print(f"  Command:             {settings.lb_command}")
    console.print(f"  Architecture:        {settings.architecture}")
    console.print(f"  Artifact name:       {settings.artifact_name}")
    console.print(f"  Command timeout:     {timeout_display}")
    console.print()
    console.print("[bold]Operational:[/bold]")
    console.print(f"  Interactive:         {settings.interactive}")
    console.print(f"  Log level:           {settings.log_level}")


if __name__ == "__main__":
    app()
