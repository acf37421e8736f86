"""Translate profile descriptions into live-build configuration.

Each `*.profile` file in the build directory becomes
`config/package-lists/<name>.list.chroot`. Files are processed
independently: a broken file is reported in the result and the scan
continues with the next one.
"""

from __future__ import annotations

import configparser
import logging
from pathlib import Path

from pydantic import ValidationError

from hackeros_builder.profiles.io import discover_profiles, load_profile, profile_name
from hackeros_builder.profiles.schema import (
    ProfileSchema,
    ProfileTranslationResult,
    TranslationResult,
)

logger = logging.getLogger(__name__)

PACKAGE_LISTS_DIR = Path("config") / "package-lists"
PACKAGE_LIST_SUFFIX = ".list.chroot"


def package_list_path(build_dir: Path, name: str) -> Path:
    """Return the package list path for a profile name."""
    return build_dir / PACKAGE_LISTS_DIR / f"{name}{PACKAGE_LIST_SUFFIX}"


def write_package_list(profile: ProfileSchema, build_dir: Path) -> Path | None:
    """Write a profile's packages as a live-build package list.

    The destination directory is created if needed. Existing lists for the
    same profile are overwritten, or removed when the profile has no packages.

    Args:
        profile: Validated profile.
        build_dir: Build directory root.

    Returns:
        Path to the written list, or None if the profile has no packages.
    """
    lists_dir = build_dir / PACKAGE_LISTS_DIR
    lists_dir.mkdir(parents=True, exist_ok=True)

    path = package_list_path(build_dir, profile.name)
    if not profile.packages:
        if path.exists():
            path.unlink()
            logger.info("Profile %s has no packages, removed stale %s", profile.name, path)
        else:
            logger.debug("Profile %s has no packages, nothing written", profile.name)
        return None

    path.write_text("\n".join(profile.packages), encoding="utf-8")
    logger.info("Wrote %d packages to %s", len(profile.packages), path)
    return path


def translate_profile(path: Path, build_dir: Path) -> ProfileTranslationResult:
    """Translate one profile file.

    Errors are captured in the returned result rather than raised.
    """
    name = profile_name(path)
    try:
        profile = load_profile(path)
        list_path = write_package_list(profile, build_dir)
    except ValidationError as e:
        error = f"Validation error: {e}"
    except configparser.Error as e:
        error = f"Parse error: {e}"
    except (OSError, UnicodeDecodeError) as e:
        error = f"I/O error: {e}"
    else:
        return ProfileTranslationResult(
            name=profile.name,
            path=str(path),
            success=True,
            package_count=len(profile.packages),
            package_list=str(list_path) if list_path else None,
            bootappend=profile.bootappend,
        )

    logger.error("Failed to translate profile %s: %s", path, error)
    return ProfileTranslationResult(
        name=name,
        path=str(path),
        success=False,
        error=error,
    )


def translate(build_dir: Path) -> TranslationResult:
    """Translate every profile in a build directory.

    Args:
        build_dir: Directory containing `*.profile` files.

    Returns:
        TranslationResult with per-file results and the boot parameters
        to hand to `lb config`. When several profiles set parameters, the
        last one in file name order wins.
    """
    results = [translate_profile(path, build_dir) for path in discover_profiles(build_dir)]

    bootappend: str | None = None
    for result in results:
        if result.success and result.bootappend:
            if bootappend and bootappend != result.bootappend:
                logger.warning(
                    "Profile %s overrides boot parameters %r with %r",
                    result.name,
                    bootappend,
                    result.bootappend,
                )
            bootappend = result.bootappend

    succeeded = sum(1 for r in results if r.success)
    logger.info(
        "Translated %d/%d profiles in %s", succeeded, len(results), build_dir
    )
    return TranslationResult(
        total=len(results),
        succeeded=succeeded,
        failed=len(results) - succeeded,
        results=results,
        bootappend=bootappend,
    )


__all__ = [
    "PACKAGE_LISTS_DIR",
    "PACKAGE_LIST_SUFFIX",
    "package_list_path",
    "translate",
    "translate_profile",
    "write_package_list",
]
