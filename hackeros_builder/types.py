"""Shared type definitions for hackeros_builder.

This module contains enums and dataclasses shared across subpackages to
avoid circular imports.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

STABLE_CODENAME = "trixie"
ROLLING_CODENAME = "forky"


class DistributionTrack(str, Enum):
    """Debian track a HackerOS image is built on."""

    STABLE = "stable"
    ROLLING = "rolling"

    @property
    def codename(self) -> str:
        """Debian codename for this track."""
        if self is DistributionTrack.STABLE:
            return STABLE_CODENAME
        return ROLLING_CODENAME

    @property
    def variants(self) -> frozenset[str]:
        """HackerOS editions allowed to build this track."""
        if self is DistributionTrack.STABLE:
            return STABLE_VARIANTS
        return ROLLING_VARIANTS


STABLE_VARIANTS = frozenset({"LTS Edition", "Cybersecurity Edition"})
ROLLING_VARIANTS = frozenset(
    {
        "Official Edition",
        "Hydra Edition",
        "Gnome Edition",
        "Xfce Edition",
        "Gaming Edition",
    }
)


class BuildState(str, Enum):
    """State of a build run."""

    IDLE = "idle"
    CLEANING = "cleaning"
    CONFIGURING = "configuring"
    BUILDING = "building"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class BuildContext:
    """Inputs of a single build run.

    Attributes:
        work_dir: Directory the lb commands run in.
        track: Resolved distribution track.
        stable: The --stable flag was passed.
        here: The build runs in the current directory.
        profile_mode: Profiles were translated before configuring.
    """

    work_dir: Path
    track: DistributionTrack
    stable: bool = False
    here: bool = False
    profile_mode: bool = False

    @property
    def selected_track(self) -> DistributionTrack:
        """Track after applying the --stable override."""
        if self.stable:
            return DistributionTrack.STABLE
        return self.track

    @property
    def distribution(self) -> str:
        """Codename passed to `lb config --distribution`."""
        return self.selected_track.codename


@dataclass
class FinalizeResult:
    """Outcome of artifact handling after a successful build."""

    artifact: Path | None = None
    renamed: bool = False
    moved: bool = False
    warnings: list[str] = field(default_factory=list)


__all__ = [
    "ROLLING_CODENAME",
    "ROLLING_VARIANTS",
    "STABLE_CODENAME",
    "STABLE_VARIANTS",
    "BuildContext",
    "BuildState",
    "DistributionTrack",
    "FinalizeResult",
]
