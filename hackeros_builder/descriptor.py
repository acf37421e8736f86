"""Build descriptor loading and track resolution.

The descriptor (`config-hackeros.hacker`) is a JSON array whose first
element names the version track, e.g. `["lts"]`. It must sit next to the
live-build `config` directory in the working directory.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import RootModel, ValidationError, field_validator

from hackeros_builder.errors import (
    DescriptorFormatError,
    PreconditionError,
    UnsupportedVersionError,
)
from hackeros_builder.types import DistributionTrack

logger = logging.getLogger(__name__)

DESCRIPTOR_FILE = "config-hackeros.hacker"
CONFIG_DIR = "config"

VERSION_TRACKS: dict[str, DistributionTrack] = {
    "lts": DistributionTrack.STABLE,
    "normal": DistributionTrack.ROLLING,
}


class BuildDescriptor(RootModel[list[Any]]):
    """Schema for the build descriptor document."""

    @field_validator("root")
    @classmethod
    def validate_shape(cls, v: list[Any]) -> list[Any]:
        """Require a non-empty array starting with a string."""
        if not v:
            raise ValueError("descriptor array must not be empty")
        if not isinstance(v[0], str):
            raise ValueError(
                f"first element must be a string, got {type(v[0]).__name__}"
            )
        return v

    @property
    def version(self) -> str:
        """Version track name as written in the file."""
        value: str = self.root[0]
        return value


def determine_track(version: str) -> DistributionTrack:
    """Map a version name to its track (case-insensitive).

    Args:
        version: Version name from the descriptor.

    Returns:
        The matching DistributionTrack.

    Raises:
        UnsupportedVersionError: If the name is not `lts` or `normal`.
    """
    try:
        return VERSION_TRACKS[version.lower()]
    except KeyError:
        raise UnsupportedVersionError(version) from None


def parse_descriptor(content: str) -> BuildDescriptor:
    """Parse and validate descriptor content.

    Raises:
        DescriptorFormatError: If content is not JSON or has the wrong shape.
    """
    try:
        return BuildDescriptor.model_validate_json(content.strip())
    except ValidationError as e:
        errors = "; ".join(err["msg"] for err in e.errors())
        raise DescriptorFormatError(
            "Invalid descriptor format. Expected an array with at least one "
            f'string, e.g. ["lts"] ({errors})'
        ) from e


def resolve(work_dir: Path) -> DistributionTrack:
    """Resolve the distribution track for a working directory.

    Args:
        work_dir: Directory holding the descriptor and config directory.

    Returns:
        The resolved DistributionTrack.

    Raises:
        PreconditionError: If the descriptor file or config directory is missing.
        DescriptorFormatError: If the descriptor is malformed or names an
            unsupported version.
    """
    descriptor_path = work_dir / DESCRIPTOR_FILE
    config_dir = work_dir / CONFIG_DIR

    if not descriptor_path.is_file():
        raise PreconditionError(
            f"Configuration file '{DESCRIPTOR_FILE}' does not exist in {work_dir}"
        )
    if not config_dir.is_dir():
        raise PreconditionError(
            f"Configuration directory '{CONFIG_DIR}' does not exist in {work_dir}"
        )

    try:
        content = descriptor_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise DescriptorFormatError(
            f"Configuration file '{DESCRIPTOR_FILE}' is not valid UTF-8: {e}"
        ) from e

    descriptor = parse_descriptor(content)
    track = determine_track(descriptor.version)
    logger.info("Resolved version %r to %s track", descriptor.version, track.value)
    return track


__all__ = [
    "CONFIG_DIR",
    "DESCRIPTOR_FILE",
    "VERSION_TRACKS",
    "BuildDescriptor",
    "determine_track",
    "parse_descriptor",
    "resolve",
]
