"""Core test fixtures for the cornebuild project."""

import os
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest
from typer.testing import CliRunner

from cornebuild.cli.helpers.theme import ThemedConsole
from cornebuild.config.settings import BuildSettings
from cornebuild.models.build import ResolvedConfig


# ---- Base Fixtures ----


@pytest.fixture
def cli_runner() -> CliRunner:
    """Return a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run the test from an empty directory with a clean environment.

    Only the relative config candidate is searched, so a config directory on
    the machine running the tests can never leak in.
    """
    for key in list(os.environ):
        if key.startswith("CORNEBUILD_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("CORNEBUILD_CONFIG_CANDIDATES", "zmk-config/config")
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def settings(workspace: Path) -> BuildSettings:
    """Default settings with relative build paths inside the workspace."""
    return BuildSettings()


@pytest.fixture
def no_config() -> ResolvedConfig:
    return ResolvedConfig()


@pytest.fixture
def console() -> ThemedConsole:
    """Console in text icon mode so assertions see plain symbols."""
    return ThemedConsole(icon_mode="text")


# ---- Fake build tool ----


class FakeWest:
    """Stand-in for ``run_command`` that pretends to be ``west build``.

    Every call is recorded. By default a build exits 0 and writes the
    firmware image into its output directory; both can be changed per
    shield.
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.return_codes: dict[str, int] = {}
        self.skip_artifact: set[str] = set()
        self.output_lines: list[str] = []

    @staticmethod
    def shield_of(cmd: Sequence[str]) -> str:
        return next(arg for arg in cmd if arg.startswith("-DSHIELD=")).split("=", 1)[1]

    @staticmethod
    def output_dir_of(cmd: Sequence[str]) -> Path:
        return Path(cmd[list(cmd).index("-d") + 1])

    @property
    def shields(self) -> list[str]:
        return [self.shield_of(cmd) for cmd in self.calls]

    def fail(self, shield: str, return_code: int = 1) -> None:
        self.return_codes[shield] = return_code
        self.skip_artifact.add(shield)

    def __call__(
        self, cmd: Sequence[str], middleware: Any = None, cwd: Path | None = None
    ) -> tuple[int, list[str], list[str]]:
        self.calls.append(list(cmd))
        shield = self.shield_of(cmd)

        if middleware is not None:
            for line in self.output_lines:
                middleware.process(line, "stdout")

        if shield not in self.skip_artifact:
            artifact = self.output_dir_of(cmd) / "zephyr" / "zmk.uf2"
            artifact.parent.mkdir(parents=True, exist_ok=True)
            artifact.write_bytes(f"UF2 {shield}".encode())

        return self.return_codes.get(shield, 0), list(self.output_lines), []


@pytest.fixture
def fake_west() -> FakeWest:
    return FakeWest()


# ---- Clock ----


class SteppingClock:
    """Monotonic clock that advances a fixed step on every reading."""

    def __init__(self, step: float = 30.0, start: float = 1000.0) -> None:
        self.step = step
        self.now = start - step

    def __call__(self) -> float:
        self.now += self.step
        return self.now


@pytest.fixture
def clock_factory() -> Callable[..., SteppingClock]:
    return SteppingClock
