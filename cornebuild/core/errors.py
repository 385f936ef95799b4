"""Exception hierarchy for Cornebuild.

Build failures are not exceptions; they are reported through
``BuildOutcome``. Exceptions are reserved for problems that stop a run
before any build is attempted.
"""

from typing import Any


class CornebuildError(Exception):
    """Base class for all Cornebuild errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        return self.message


class UsageError(CornebuildError):
    """Raised for an invalid or malformed command-line argument."""


class ConfigError(CornebuildError):
    """Raised when tool settings cannot be loaded or validated."""


__all__ = ["ConfigError", "CornebuildError", "UsageError"]
