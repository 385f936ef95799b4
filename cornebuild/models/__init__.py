"""Data models shared across Cornebuild."""

from cornebuild.models.base import CornebuildBaseModel
from cornebuild.models.build import (
    BuildOutcome,
    BuildTarget,
    FailureKind,
    ResolvedConfig,
    RunMode,
    RunResult,
    TargetName,
)


__all__ = [
    "BuildOutcome",
    "BuildTarget",
    "CornebuildBaseModel",
    "FailureKind",
    "ResolvedConfig",
    "RunMode",
    "RunResult",
    "TargetName",
]
