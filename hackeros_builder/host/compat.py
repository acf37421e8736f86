"""Host compatibility checks.

A host may build a track when its os-release file carries the track's
codename, or failing that when its branding file names an edition from the
track's allow-list. Missing or unreadable files count as "unknown" and never
raise.
"""

from __future__ import annotations

import configparser
import logging
from pathlib import Path

from hackeros_builder.types import DistributionTrack

logger = logging.getLogger(__name__)

DEFAULT_OS_RELEASE = Path("/etc/os-release")
DEFAULT_BRANDING = Path("/etc/hackeros-release")

_BRANDING_SECTION = "branding"


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def parse_os_release(text: str) -> dict[str, str]:
    """Parse os-release content into a mapping.

    Args:
        text: File content with KEY=value lines.

    Returns:
        Mapping of keys to unquoted values. Comments and malformed lines
        are skipped.
    """
    fields: dict[str, str] = {}
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        fields[key.strip()] = _unquote(value)
    return fields


def read_os_release(path: Path = DEFAULT_OS_RELEASE) -> dict[str, str] | None:
    """Read the os-release file, or None if it cannot be read."""
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        logger.debug("Cannot read %s: %s", path, e)
        return None
    return parse_os_release(text)


def read_branding_variant(path: Path = DEFAULT_BRANDING) -> str | None:
    """Read the Variant value from a section-less branding file.

    Args:
        path: Branding file path.

    Returns:
        The Variant value, or None if the file or key is missing.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        logger.debug("Cannot read %s: %s", path, e)
        return None

    parser = configparser.ConfigParser(interpolation=None)
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    try:
        parser.read_string(f"[{_BRANDING_SECTION}]\n{text}")
    except configparser.Error as e:
        logger.debug("Cannot parse %s: %s", path, e)
        return None

    value = parser.get(_BRANDING_SECTION, "Variant", fallback=None)
    if value is None:
        return None
    return _unquote(value)


def is_compatible(
    track: DistributionTrack,
    os_release_path: Path = DEFAULT_OS_RELEASE,
    branding_path: Path = DEFAULT_BRANDING,
) -> bool:
    """Check whether this host may build the given track.

    Args:
        track: Track the user wants to build.
        os_release_path: Host OS identification file.
        branding_path: Host branding file.

    Returns:
        True if the codename or the branding variant matches the track.
    """
    os_release = read_os_release(os_release_path)
    if os_release is not None and os_release.get("VERSION_CODENAME") == track.codename:
        logger.debug("Host codename matches %s", track.codename)
        return True

    variant = read_branding_variant(branding_path)
    if variant is not None and variant in track.variants:
        logger.debug("Host variant %r allowed for %s track", variant, track.value)
        return True

    logger.info(
        "Host is not compatible with the %s track (codename=%s, variant=%s)",
        track.value,
        os_release.get("VERSION_CODENAME") if os_release else None,
        variant,
    )
    return False


__all__ = [
    "DEFAULT_BRANDING",
    "DEFAULT_OS_RELEASE",
    "is_compatible",
    "parse_os_release",
    "read_branding_variant",
    "read_os_release",
]
