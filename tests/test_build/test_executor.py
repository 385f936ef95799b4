"""Tests for single target build execution."""

from pathlib import Path

import pytest

from cornebuild.build.executor import BuildExecutor, BuildLogMiddleware
from cornebuild.models.build import BuildTarget, FailureKind, ResolvedConfig


@pytest.fixture
def executor(settings, console, fake_west, clock_factory) -> BuildExecutor:
    return BuildExecutor(
        settings,
        console,
        runner=fake_west,
        clock=clock_factory(step=65),
        forward_output=False,
    )


@pytest.fixture
def left(settings) -> BuildTarget:
    return BuildTarget.for_name("left", settings)


def test_build_command_without_config(executor, left, no_config):
    """Without a config directory no ZMK_CONFIG definition is passed."""
    cmd = executor.build_command(left, no_config)

    assert cmd == [
        "west",
        "build",
        "-s",
        "app",
        "-p",
        "-d",
        str(Path("build/corne_left")),
        "-b",
        "nice_nano",
        "--",
        "-DSHIELD=corne_left",
    ]
    assert not any(arg.startswith("-DZMK_CONFIG") for arg in cmd)


def test_build_command_with_config(executor, left, workspace):
    config_dir = workspace / "zmk-config" / "config"
    cmd = executor.build_command(left, ResolvedConfig(path=config_dir))

    assert cmd[-2:] == ["-DSHIELD=corne_left", f"-DZMK_CONFIG={config_dir}"]


def test_successful_build_copies_artifact(executor, left, no_config, capsys):
    outcome = executor.execute(left, no_config)

    assert outcome.success is True
    assert outcome.failure is None
    assert outcome.return_code == 0
    assert outcome.elapsed_seconds == 65
    assert outcome.artifact_path == Path("build/corne_left.uf2")
    assert Path("build/corne_left.uf2").read_bytes() == b"UF2 corne_left"

    out = capsys.readouterr().out
    assert "Building left side firmware..." in out
    assert "Left side build completed successfully in 1m 5s!" in out
    assert "Firmware saved as: build/corne_left.uf2" in out


def test_nonzero_exit_is_failure_even_with_artifact(
    executor, left, no_config, fake_west, capsys
):
    """A non-zero status fails the build even if an image was left behind."""
    fake_west.return_codes["corne_left"] = 2

    outcome = executor.execute(left, no_config)

    assert outcome.success is False
    assert outcome.failure is FailureKind.TOOL_FAILED
    assert outcome.return_code == 2
    assert outcome.artifact_path is None
    assert not Path("build/corne_left.uf2").exists()
    assert "Left side build failed after 1m 5s!" in capsys.readouterr().out


def test_zero_exit_without_artifact_is_failure(
    executor, left, no_config, fake_west, capsys
):
    fake_west.skip_artifact.add("corne_left")

    outcome = executor.execute(left, no_config)

    assert outcome.success is False
    assert outcome.failure is FailureKind.ARTIFACT_MISSING
    assert outcome.return_code == 0
    assert not Path("build/corne_left.uf2").exists()
    out = capsys.readouterr().out
    assert "firmware file not found after 1m 5s!" in out
    assert "Firmware saved as" not in out


def test_missing_build_tool_is_failure(settings, console, left, no_config, capsys):
    def missing_west(cmd, middleware=None, cwd=None):
        raise FileNotFoundError(2, "No such file or directory", cmd[0])

    executor = BuildExecutor(settings, console, runner=missing_west)

    outcome = executor.execute(left, no_config)

    assert outcome.success is False
    assert outcome.failure is FailureKind.LAUNCH_FAILED
    assert outcome.return_code is None
    assert "could not run 'west'" in capsys.readouterr().out


def test_copy_failure_is_failure(executor, left, no_config, monkeypatch, capsys):
    def failing_copy(src, dst):
        raise PermissionError(13, "Permission denied", str(dst))

    monkeypatch.setattr("cornebuild.build.executor.shutil.copy2", failing_copy)

    outcome = executor.execute(left, no_config)

    assert outcome.success is False
    assert outcome.failure is FailureKind.COPY_FAILED
    assert "could not copy firmware" in capsys.readouterr().out


def test_reset_target_uses_settings_reset_shield(
    executor, settings, no_config, fake_west
):
    target = BuildTarget.for_name("reset", settings)

    outcome = executor.execute(target, no_config)

    assert fake_west.shields == ["settings_reset"]
    assert outcome.artifact_path == Path("build/settings_reset.uf2")


def test_build_output_is_forwarded(settings, console, left, no_config, fake_west, capsys):
    fake_west.output_lines = ["[42/42] Linking C executable zephyr/zmk.elf"]
    executor = BuildExecutor(settings, console, runner=fake_west)

    executor.execute(left, no_config)

    assert "Linking C executable" in capsys.readouterr().out


def test_build_log_middleware_passes_lines_through(left):
    middleware = BuildLogMiddleware(left)
    assert middleware.process("west: building", "stderr") == "west: building"
