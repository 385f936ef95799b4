"""Build models: targets, resolved config, per-build outcomes and run results."""

from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import Field, model_validator

from cornebuild.models.base import CornebuildBaseModel


if TYPE_CHECKING:
    from cornebuild.config.settings import BuildSettings


class TargetName(str, Enum):
    """Buildable firmware variants."""

    LEFT = "left"
    RIGHT = "right"
    RESET = "reset"


SHIELDS: dict[TargetName, str] = {
    TargetName.LEFT: "corne_left",
    TargetName.RIGHT: "corne_right",
    TargetName.RESET: "settings_reset",
}

LABELS: dict[TargetName, str] = {
    TargetName.LEFT: "left side",
    TargetName.RIGHT: "right side",
    TargetName.RESET: "settings reset",
}


class BuildTarget(CornebuildBaseModel):
    """One buildable unit with every path the build tool reads or writes.

    Paths are kept as given by the settings (usually relative to the
    working directory) so messages show them the way the user expects.
    """

    name: TargetName
    shield: str
    board: str
    label: str
    output_dir: Path
    expected_artifact_path: Path
    final_artifact_path: Path

    @classmethod
    def for_name(
        cls, name: TargetName | str, settings: "BuildSettings"
    ) -> "BuildTarget":
        """Derive a target from its name and the tool settings."""
        target_name = TargetName(name)
        shield = SHIELDS[target_name]
        output_dir = settings.build_root / shield
        return cls(
            name=target_name,
            shield=shield,
            board=settings.board,
            label=LABELS[target_name],
            output_dir=output_dir,
            expected_artifact_path=output_dir / settings.artifact_relpath,
            final_artifact_path=settings.build_root / f"{shield}.uf2",
        )


class ResolvedConfig(CornebuildBaseModel):
    """External ZMK config directory chosen for this run, if any."""

    path: Path | None = None
    source: str | None = None

    @property
    def is_present(self) -> bool:
        return self.path is not None

    @model_validator(mode="after")
    def validate_absolute(self) -> "ResolvedConfig":
        if self.path is not None and not self.path.is_absolute():
            raise ValueError("Resolved config path must be absolute")
        return self


class FailureKind(str, Enum):
    """Why a build did not produce a usable firmware image."""

    TOOL_FAILED = "tool_failed"
    ARTIFACT_MISSING = "artifact_missing"
    LAUNCH_FAILED = "launch_failed"
    COPY_FAILED = "copy_failed"


class BuildOutcome(CornebuildBaseModel):
    """Result of one build tool invocation."""

    target: BuildTarget
    success: bool
    elapsed_seconds: int = Field(ge=0)
    artifact_path: Path | None = None
    return_code: int | None = None
    failure: FailureKind | None = None

    @model_validator(mode="after")
    def validate_success_consistency(self) -> "BuildOutcome":
        """Ensure the artifact and failure fields agree with the success flag."""
        has_artifact = self.artifact_path is not None
        has_failure = self.failure is not None
        if self.success and (not has_artifact or has_failure):
            raise ValueError("A successful outcome needs an artifact and no failure")
        if not self.success and (has_artifact or not has_failure):
            raise ValueError("A failed outcome needs a failure kind and no artifact")
        return self


class RunMode(str, Enum):
    """How the orchestrator was asked to run."""

    SINGLE = "single"
    RESET = "reset"
    BOTH = "both"


class RunResult(CornebuildBaseModel):
    """Aggregate outcome of a whole invocation."""

    mode: RunMode
    outcomes: list[BuildOutcome] = Field(default_factory=list)
    total_elapsed_seconds: int = Field(default=0, ge=0)
    cancelled: bool = False

    @property
    def success(self) -> bool:
        """True iff the run went ahead and every executed build succeeded."""
        return not self.cancelled and all(o.success for o in self.outcomes)

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1

    @property
    def failed_outcome(self) -> BuildOutcome | None:
        """First failed build, which is also the one that stopped the run."""
        return next((o for o in self.outcomes if not o.success), None)


__all__ = [
    "BuildOutcome",
    "BuildTarget",
    "FailureKind",
    "LABELS",
    "ResolvedConfig",
    "RunMode",
    "RunResult",
    "SHIELDS",
    "TargetName",
]
