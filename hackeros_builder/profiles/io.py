"""Profile loading.

This module reads ini-style profile descriptions and turns them into
validated ProfileSchema instances.
"""

import configparser
from pathlib import Path
from typing import Any

from hackeros_builder.profiles.schema import ProfileSchema

PROFILE_SUFFIX = ".profile"
PACKAGES_SECTION = "packages"
BOOTAPPEND_SECTION = "bootappend"
BOOTAPPEND_KEY = "parameters"

# Section headers never contain a newline, so `[DEFAULT]` stays an ordinary
# (ignored) section instead of leaking values into `[packages]`.
_NO_DEFAULT_SECTION = "\n"


def load_ini(text: str, source: str = "<string>") -> configparser.ConfigParser:
    """Parse ini-style text.

    Keys keep their case, `%` has no special meaning and `[DEFAULT]` is not
    inherited by other sections.

    Raises:
        configparser.Error: If the text is not valid ini.
    """
    parser = configparser.ConfigParser(
        interpolation=None, default_section=_NO_DEFAULT_SECTION
    )
    parser.optionxform = str  # type: ignore[assignment,method-assign]
    parser.read_string(text, source=source)
    return parser


def extract_profile_data(parser: configparser.ConfigParser, name: str) -> dict[str, Any]:
    """Collect recognised sections into schema input.

    A `packages` value may list several whitespace-separated names; empty
    values are skipped.

    Args:
        parser: Parsed profile document.
        name: Profile name.

    Returns:
        Dictionary suitable for ProfileSchema.model_validate.
    """
    packages: list[str] = []
    if parser.has_section(PACKAGES_SECTION):
        for _key, value in parser.items(PACKAGES_SECTION):
            packages.extend(value.split())

    bootappend: str | None = None
    if parser.has_section(BOOTAPPEND_SECTION):
        bootappend = parser.get(BOOTAPPEND_SECTION, BOOTAPPEND_KEY, fallback=None)

    return {"name": name, "packages": packages, "bootappend": bootappend}


def parse_profile(text: str, name: str) -> ProfileSchema:
    """Parse and validate profile text.

    Raises:
        configparser.Error: If the text is not valid ini.
        pydantic.ValidationError: If the content does not match the schema.
    """
    parser = load_ini(text, source=name)
    return ProfileSchema.model_validate(extract_profile_data(parser, name))


def load_profile(path: Path) -> ProfileSchema:
    """Load and validate a profile file.

    The profile name is the file name without its extension.

    Args:
        path: Path to the profile file.

    Returns:
        Validated ProfileSchema instance.

    Raises:
        FileNotFoundError: If the file does not exist.
        configparser.Error: If the file is not valid ini.
        pydantic.ValidationError: If the content does not match the schema.
    """
    text = path.read_text(encoding="utf-8")
    return parse_profile(text, profile_name(path))


def profile_name(path: Path) -> str:
    """Derive the profile name from a file path."""
    name = path.name
    if name.endswith(PROFILE_SUFFIX):
        return name[: -len(PROFILE_SUFFIX)]
    return path.stem


def discover_profiles(directory: Path) -> list[Path]:
    """Find profile files in a directory, sorted by name."""
    if not directory.is_dir():
        return []
    return sorted(p for p in directory.glob(f"*{PROFILE_SUFFIX}") if p.is_file())


__all__ = [
    "BOOTAPPEND_KEY",
    "BOOTAPPEND_SECTION",
    "PACKAGES_SECTION",
    "PROFILE_SUFFIX",
    "discover_profiles",
    "extract_profile_data",
    "load_ini",
    "load_profile",
    "parse_profile",
    "profile_name",
]
