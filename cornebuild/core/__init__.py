"""Core infrastructure: errors and logging."""

from cornebuild.core.errors import ConfigError, CornebuildError, UsageError


__all__ = ["ConfigError", "CornebuildError", "UsageError"]
