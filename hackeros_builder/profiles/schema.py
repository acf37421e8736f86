"""Pydantic models for profile descriptions and translation results.

A profile file is ini-style text:

    [packages]
    editor = vim
    net = curl wget

    [bootappend]
    parameters = quiet splash

Only the `packages` and `bootappend` sections are recognised; other sections
are ignored.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

RESERVED_NAMES = frozenset({".", ".."})


class ProfileSchema(BaseModel):
    """Schema for a parsed profile description.

    Attributes:
        name: Profile name, taken from the file name without extension.
        packages: Package names in document order.
        bootappend: Kernel command line parameters for the live system.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(description="Profile name")
    packages: list[str] = Field(default_factory=list)
    bootappend: str | None = Field(default=None)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate the name is usable as a file name."""
        if not v or v in RESERVED_NAMES:
            raise ValueError(f"profile name must be a non-empty file name, got '{v}'")
        if "/" in v or "\0" in v:
            raise ValueError(f"profile name must not contain '/', got '{v}'")
        return v

    @field_validator("packages")
    @classmethod
    def validate_packages(cls, v: list[str]) -> list[str]:
        """Validate package names are non-empty and whitespace free."""
        for item in v:
            if not item or not item.strip():
                raise ValueError("package names must be non-empty strings")
            if any(c.isspace() for c in item):
                raise ValueError(f"package names must not contain whitespace, got '{item}'")
        return v

    @field_validator("bootappend")
    @classmethod
    def normalize_bootappend(cls, v: str | None) -> str | None:
        """Treat blank parameters as absent."""
        if v is None:
            return v
        v = " ".join(v.split())
        return v or None


class ProfileTranslationResult(BaseModel):
    """Result of translating a single profile file.

    Attributes:
        name: Profile name (file stem).
        path: Source file path.
        success: Whether translation succeeded.
        package_count: Number of packages written.
        package_list: Path of the written package list, if any.
        bootappend: Boot parameters found in the file.
        error: Error message if translation failed.
    """

    model_config = ConfigDict(extra="forbid")

    name: str
    path: str
    success: bool
    package_count: int = 0
    package_list: str | None = None
    bootappend: str | None = None
    error: str | None = None


class TranslationResult(BaseModel):
    """Result of translating every profile in a build directory.

    Attributes:
        total: Number of profile files found.
        succeeded: Number translated successfully.
        failed: Number that failed.
        results: Per-file results, in processing order.
        bootappend: Boot parameters to pass to `lb config`, if any profile
            provided them.
    """

    model_config = ConfigDict(extra="forbid")

    total: int
    succeeded: int
    failed: int
    results: list[ProfileTranslationResult]
    bootappend: str | None = None

    @property
    def failures(self) -> list[ProfileTranslationResult]:
        """Results of files that failed."""
        return [r for r in self.results if not r.success]


__all__ = [
    "RESERVED_NAMES",
    "ProfileSchema",
    "ProfileTranslationResult",
    "TranslationResult",
]
