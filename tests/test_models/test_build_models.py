"""Tests for build data models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from cornebuild.config.settings import BuildSettings
from cornebuild.models.build import (
    BuildOutcome,
    BuildTarget,
    FailureKind,
    ResolvedConfig,
    RunMode,
    RunResult,
    TargetName,
)


@pytest.fixture
def left_target(settings: BuildSettings) -> BuildTarget:
    return BuildTarget.for_name("left", settings)


@pytest.mark.parametrize(
    "name, shield",
    [
        ("left", "corne_left"),
        ("right", "corne_right"),
        ("reset", "settings_reset"),
    ],
)
def test_target_paths_derived_from_name(settings, name, shield):
    """Each target builds into its own directory and lands in build/<shield>.uf2."""
    target = BuildTarget.for_name(name, settings)

    assert target.name is TargetName(name)
    assert target.shield == shield
    assert target.board == "nice_nano"
    assert target.output_dir == Path("build") / shield
    assert target.expected_artifact_path == Path("build") / shield / "zephyr" / "zmk.uf2"
    assert target.final_artifact_path == Path("build") / f"{shield}.uf2"


def test_target_follows_settings(workspace):
    settings = BuildSettings(build_root=Path("out"), board="nice_nano_v2")
    target = BuildTarget.for_name(TargetName.RIGHT, settings)

    assert target.board == "nice_nano_v2"
    assert target.final_artifact_path == Path("out/corne_right.uf2")


def test_target_rejects_unknown_name(settings):
    with pytest.raises(ValueError):
        BuildTarget.for_name("middle", settings)


def test_target_is_immutable(left_target):
    with pytest.raises(ValidationError):
        left_target.shield = "corne_right"


def test_resolved_config_absent_by_default():
    config = ResolvedConfig()
    assert config.is_present is False
    assert config.path is None


def test_resolved_config_requires_absolute_path():
    with pytest.raises(ValidationError):
        ResolvedConfig(path=Path("zmk-config/config"))


def test_successful_outcome_requires_artifact(left_target):
    with pytest.raises(ValidationError):
        BuildOutcome(target=left_target, success=True, elapsed_seconds=3)


def test_failed_outcome_cannot_carry_artifact(left_target):
    with pytest.raises(ValidationError):
        BuildOutcome(
            target=left_target,
            success=False,
            elapsed_seconds=3,
            artifact_path=left_target.final_artifact_path,
            failure=FailureKind.TOOL_FAILED,
        )


def test_outcome_elapsed_must_not_be_negative(left_target):
    with pytest.raises(ValidationError):
        BuildOutcome(
            target=left_target,
            success=False,
            elapsed_seconds=-1,
            failure=FailureKind.TOOL_FAILED,
        )


def _outcome(target: BuildTarget, success: bool) -> BuildOutcome:
    if success:
        return BuildOutcome(
            target=target,
            success=True,
            elapsed_seconds=1,
            artifact_path=target.final_artifact_path,
            return_code=0,
        )
    return BuildOutcome(
        target=target,
        success=False,
        elapsed_seconds=1,
        return_code=2,
        failure=FailureKind.TOOL_FAILED,
    )


def test_run_result_success_requires_every_outcome(settings):
    left = BuildTarget.for_name("left", settings)
    right = BuildTarget.for_name("right", settings)

    ok = RunResult(mode=RunMode.BOTH, outcomes=[_outcome(left, True), _outcome(right, True)])
    failed = RunResult(mode=RunMode.BOTH, outcomes=[_outcome(left, False)])

    assert ok.success is True
    assert ok.exit_code == 0
    assert ok.failed_outcome is None
    assert failed.success is False
    assert failed.exit_code == 1
    assert failed.failed_outcome.target.name is TargetName.LEFT


def test_cancelled_run_is_a_failure():
    result = RunResult(mode=RunMode.BOTH, cancelled=True)
    assert result.outcomes == []
    assert result.success is False
    assert result.exit_code == 1


def test_outcome_serializes_to_json_types(left_target):
    data = _outcome(left_target, False).to_dict()

    assert data["failure"] == "tool_failed"
    assert data["target"]["shield"] == "corne_left"
    assert data["target"]["output_dir"] == str(Path("build/corne_left"))
    assert "artifact_path" not in data
