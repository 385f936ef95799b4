"""Build execution and orchestration."""

from cornebuild.build.executor import BuildExecutor
from cornebuild.build.orchestrator import (
    BuildOrchestrator,
    Confirmation,
    parse_confirmation,
    parse_target_name,
)
from cornebuild.build.timing import format_duration


__all__ = [
    "BuildExecutor",
    "BuildOrchestrator",
    "Confirmation",
    "format_duration",
    "parse_confirmation",
    "parse_target_name",
]
