"""Error handling with friendly messages."""

from __future__ import annotations


class OurPkgVersionError(Exception):
    """Base exception for all ourpkgversion errors."""

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(message)

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message}\nSuggestion: {self.suggestion}"
        return self.message


class ConfigError(OurPkgVersionError):
    """Configuration error.

    Raised for run-wide problems. A configuration error aborts the whole
    batch before any file is processed.
    """

    pass


class InvalidVersionError(ConfigError):
    """Version string does not satisfy the lax version grammar."""

    def __init__(self, version: str) -> None:
        super().__init__(
            f"invalid characters in version: {version!r}",
            "Use a version such as 1.02, v2.3.4 or 1.02_01",
        )
        self.version = version


class FileError(OurPkgVersionError):
    """File operation error."""

    pass
