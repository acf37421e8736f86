"""Error definitions for hackeros_builder.

Every error carries a stable code so the CLI and tests can tell the
classes apart without matching on messages.
"""

from __future__ import annotations

# Error code constants
PRECONDITION_ERROR = "precondition_error"
FORMAT_ERROR = "format_error"
UNSUPPORTED_VERSION = "unsupported_version"
COMMAND_FAILED = "command_failed"
COMMAND_TIMEOUT = "command_timeout"
EXECUTION_ERROR = "execution_error"
PROFILE_ERROR = "profile_error"

SUPPORTED_VERSIONS = ("lts", "normal")


class BuilderError(Exception):
    """Base class for all reported builder errors."""

    code = "builder_error"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class PreconditionError(BuilderError):
    """Raised when the environment does not allow a build to start."""

    code = PRECONDITION_ERROR


class DescriptorFormatError(BuilderError):
    """Raised when the build descriptor has the wrong shape."""

    code = FORMAT_ERROR


class UnsupportedVersionError(DescriptorFormatError):
    """Raised when the descriptor names an unknown version track."""

    code = UNSUPPORTED_VERSION

    def __init__(self, version: str) -> None:
        supported = ", ".join(f"'{v}'" for v in SUPPORTED_VERSIONS)
        super().__init__(f"Unknown version: {version}. Supported: {supported}.")
        self.version = version


class CommandError(BuilderError):
    """Raised when an lb invocation fails, times out or cannot start."""

    code = COMMAND_FAILED

    def __init__(
        self,
        message: str,
        step: str,
        exit_code: int | None = None,
        output: str = "",
        code: str | None = None,
    ) -> None:
        super().__init__(message, code=code)
        self.step = step
        self.exit_code = exit_code
        self.output = output


class ProfileTranslationError(BuilderError):
    """Raised when a single profile file cannot be translated."""

    code = PROFILE_ERROR

    def __init__(self, message: str, path: str) -> None:
        super().__init__(message)
        self.path = path


__all__ = [
    "COMMAND_FAILED",
    "COMMAND_TIMEOUT",
    "EXECUTION_ERROR",
    "FORMAT_ERROR",
    "PRECONDITION_ERROR",
    "PROFILE_ERROR",
    "SUPPORTED_VERSIONS",
    "UNSUPPORTED_VERSION",
    "BuilderError",
    "CommandError",
    "DescriptorFormatError",
    "PreconditionError",
    "ProfileTranslationError",
    "UnsupportedVersionError",
]
