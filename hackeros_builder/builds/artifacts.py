"""Post-build artifact handling.

This module handles:
- Locating the ISO image produced by `lb build`
- Optionally renaming it and moving it to another directory
- Computing its checksum for the build log

Nothing here fails a build: problems are returned as warnings.
"""

from __future__ import annotations

import hashlib
import logging
import shutil
from pathlib import Path
from typing import Protocol

from rich.prompt import Prompt

from hackeros_builder.types import FinalizeResult

logger = logging.getLogger(__name__)

DEFAULT_ARTIFACT_NAME = "live-image-amd64.hybrid.iso"

# Default chunk size for hashing
HASH_CHUNK_SIZE = 64 * 1024  # 64KB


class Interaction(Protocol):
    """Source of answers to the finalizer's questions."""

    def ask(self, prompt: str) -> str: ...


class ConsoleInteraction:
    """Ask on the terminal using rich prompts."""

    def ask(self, prompt: str) -> str:
        answer: str = Prompt.ask(prompt, default="", show_default=False)
        return answer


class NoInteraction:
    """Answer every question with an empty string (keep defaults)."""

    def ask(self, prompt: str) -> str:
        return ""


def compute_file_hash(
    file_path: Path,
    chunk_size: int = HASH_CHUNK_SIZE,
) -> str:
    """Compute SHA-256 hash of a file.

    Args:
        file_path: Path to the file.
        chunk_size: Size of chunks for streaming hash.

    Returns:
        SHA-256 hex digest.
    """
    sha256 = hashlib.sha256()
    with file_path.open("rb") as f:
        while chunk := f.read(chunk_size):
            sha256.update(chunk)
    return sha256.hexdigest()


def renamed_path(artifact: Path, base_name: str) -> Path:
    """Return the artifact path after renaming to base_name.

    The original suffix is kept when base_name has none.
    """
    if not Path(base_name).suffix:
        base_name = f"{base_name}{artifact.suffix}"
    return artifact.with_name(base_name)


def rename_artifact(artifact: Path, base_name: str) -> Path:
    """Rename an artifact within its directory.

    Raises:
        FileExistsError: If the target name is already taken.
        ValueError: If base_name contains a path separator.
        OSError: If the rename fails.
    """
    if "/" in base_name or base_name in (".", ".."):
        raise ValueError(f"Invalid file name: {base_name!r}")
    target = renamed_path(artifact, base_name)
    if target == artifact:
        return artifact
    if target.exists():
        raise FileExistsError(f"{target} already exists")
    artifact.rename(target)
    logger.info("Renamed %s to %s", artifact.name, target.name)
    return target


def move_artifact(artifact: Path, destination: Path) -> Path:
    """Move an artifact into a destination directory, creating it if needed.

    Raises:
        FileExistsError: If a file with the same name exists at the destination.
        OSError: If the move fails.
    """
    destination = destination.expanduser()
    destination.mkdir(parents=True, exist_ok=True)
    target = destination / artifact.name
    if target.resolve() == artifact.resolve():
        return artifact
    if target.exists():
        raise FileExistsError(f"{target} already exists")
    shutil.move(str(artifact), str(target))
    logger.info("Moved %s to %s", artifact.name, destination)
    return target


def finalize(
    work_dir: Path,
    interaction: Interaction | None = None,
    artifact_name: str = DEFAULT_ARTIFACT_NAME,
) -> FinalizeResult:
    """Locate, rename and relocate the built image.

    Renaming and moving are independent; empty answers skip them. A failed
    rename leaves the image under its original name and moving still runs.
    If the questions cannot be answered (closed stdin, Ctrl-C) the image is
    left where it is.

    Args:
        work_dir: Build directory.
        interaction: Answers the rename/destination questions.
        artifact_name: File name lb build produces.

    Returns:
        FinalizeResult with the final artifact location and any warnings.
    """
    interaction = interaction or NoInteraction()
    result = FinalizeResult()

    artifact = work_dir / artifact_name
    if not artifact.is_file():
        message = f"Image {artifact_name} not found in {work_dir}"
        logger.warning(message)
        result.warnings.append(message)
        return result

    try:
        new_name = interaction.ask(
            f"New name for {artifact_name} (empty keeps the current name)"
        ).strip()
        destination = interaction.ask(
            "Move the image to directory (empty leaves it here)"
        ).strip()
    except (EOFError, KeyboardInterrupt) as e:
        message = f"No answer to rename/move questions, image left in place ({e!r})"
        logger.warning(message)
        result.warnings.append(message)
        new_name = destination = ""

    if new_name:
        try:
            artifact = rename_artifact(artifact, new_name)
            result.renamed = True
        except (OSError, ValueError) as e:
            message = f"Could not rename image: {e}"
            logger.warning(message)
            result.warnings.append(message)

    if destination:
        try:
            artifact = move_artifact(artifact, Path(destination))
            result.moved = True
        except OSError as e:
            message = f"Could not move image: {e}"
            logger.warning(message)
            result.warnings.append(message)

    result.artifact = artifact
    try:
        logger.info(
            "Image %s (%d bytes, sha256 %s)",
            artifact,
            artifact.stat().st_size,
            compute_file_hash(artifact),
        )
    except OSError as e:
        message = f"Could not read image {artifact}: {e}"
        logger.warning(message)
        result.warnings.append(message)
    return result


__all__ = [
    "DEFAULT_ARTIFACT_NAME",
    "HASH_CHUNK_SIZE",
    "ConsoleInteraction",
    "Interaction",
    "NoInteraction",
    "compute_file_hash",
    "finalize",
    "move_artifact",
    "rename_artifact",
    "renamed_path",
]
