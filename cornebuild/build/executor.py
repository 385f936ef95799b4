"""Single target build execution through ``west``."""

import shutil
import time
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, TypeAlias

from cornebuild.build.timing import elapsed_seconds, format_duration
from cornebuild.cli.helpers.theme import ThemedConsole
from cornebuild.config.settings import BuildSettings
from cornebuild.core.structlog_logger import StructlogMixin, get_struct_logger
from cornebuild.models.build import (
    BuildOutcome,
    BuildTarget,
    FailureKind,
    ResolvedConfig,
)
from cornebuild.utils.stream_process import (
    ChainedMiddleware,
    DefaultOutputMiddleware,
    OutputMiddleware,
    run_command,
)


CommandRunner: TypeAlias = Callable[..., tuple[int, list[Any], list[Any]]]
Clock: TypeAlias = Callable[[], float]


class BuildLogMiddleware(OutputMiddleware[str]):
    """Log every line of build tool output at debug level."""

    def __init__(self, target: BuildTarget) -> None:
        self.logger = get_struct_logger(__name__).bind(shield=target.shield)

    def process(self, line: str, stream_type: str) -> str:
        self.logger.debug("build_output", stream=stream_type, line=line)
        return line


class BuildExecutor(StructlogMixin):
    """Run one pristine ``west build`` and verify the firmware it produced.

    A build only counts as successful when the tool exits with status 0
    *and* the firmware image exists afterwards. Every problem, including a
    missing ``west`` executable, comes back as a failed ``BuildOutcome``.
    """

    def __init__(
        self,
        settings: BuildSettings,
        console: ThemedConsole,
        runner: CommandRunner = run_command,
        clock: Clock = time.monotonic,
        forward_output: bool = True,
    ) -> None:
        super().__init__()
        self.settings = settings
        self.console = console
        self.runner = runner
        self.clock = clock
        self.forward_output = forward_output

    def build_command(self, target: BuildTarget, config: ResolvedConfig) -> list[str]:
        """Return the argument list for building ``target``."""
        cmd = [
            self.settings.west_command,
            "build",
            "-s",
            str(self.settings.source_dir),
            "-p",
            "-d",
            str(target.output_dir),
            "-b",
            target.board,
            "--",
            f"-DSHIELD={target.shield}",
        ]
        if config.path is not None:
            cmd.append(f"-DZMK_CONFIG={config.path}")
        return cmd

    def _middleware(self, target: BuildTarget) -> OutputMiddleware[str]:
        middlewares: list[OutputMiddleware[str]] = [BuildLogMiddleware(target)]
        if self.forward_output:
            middlewares.append(DefaultOutputMiddleware())
        return ChainedMiddleware(middlewares)

    def _run(self, cmd: Sequence[str], target: BuildTarget) -> int:
        return_code, _stdout, _stderr = self.runner(
            cmd, middleware=self._middleware(target)
        )
        return int(return_code)

    def execute(self, target: BuildTarget, config: ResolvedConfig) -> BuildOutcome:
        """Build ``target`` and copy its firmware to the canonical path."""
        label = target.label.capitalize()
        cmd = self.build_command(target, config)
        self.console.print_step(f"Building {target.label} firmware...")
        self.logger.info("build_started", shield=target.shield, command=cmd)

        start = self.clock()
        try:
            return_code = self._run(cmd, target)
        except OSError as e:
            elapsed = elapsed_seconds(start, self.clock())
            self.logger.error(
                "build_launch_failed", shield=target.shield, error=str(e)
            )
            self.console.print_error(
                f"{label} build failed - could not run "
                f"'{self.settings.west_command}': {e}"
            )
            return self._failed(target, elapsed, FailureKind.LAUNCH_FAILED, None)
        elapsed = elapsed_seconds(start, self.clock())
        duration = format_duration(elapsed)

        # The artifact is checked even after a zero exit status
        artifact_exists = target.expected_artifact_path.is_file()
        self.logger.info(
            "build_finished",
            shield=target.shield,
            return_code=return_code,
            artifact_exists=artifact_exists,
            elapsed_seconds=elapsed,
        )

        if return_code != 0:
            self.console.print_error(
                f"{label} build failed after {duration}! "
                f"({self.settings.west_command} exited with status {return_code})"
            )
            return self._failed(target, elapsed, FailureKind.TOOL_FAILED, return_code)

        if not artifact_exists:
            self.console.print_error(
                f"{label} build failed - firmware file not found after {duration}!"
            )
            self.console.print_list_item(
                f"Expected: {target.expected_artifact_path}"
            )
            return self._failed(
                target, elapsed, FailureKind.ARTIFACT_MISSING, return_code
            )

        try:
            self._copy_artifact(target)
        except OSError as e:
            self.logger.error(
                "artifact_copy_failed", shield=target.shield, error=str(e)
            )
            self.console.print_error(
                f"{label} build failed - could not copy firmware to "
                f"{target.final_artifact_path}: {e}"
            )
            return self._failed(target, elapsed, FailureKind.COPY_FAILED, return_code)

        self.console.print_success(
            f"{label} build completed successfully in {duration}!"
        )
        self.console.print(f"Firmware saved as: {target.final_artifact_path}")
        return BuildOutcome(
            target=target,
            success=True,
            elapsed_seconds=elapsed,
            artifact_path=target.final_artifact_path,
            return_code=return_code,
        )

    def _copy_artifact(self, target: BuildTarget) -> Path:
        destination = target.final_artifact_path
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(target.expected_artifact_path, destination)
        self.logger.debug(
            "artifact_copied",
            source=str(target.expected_artifact_path),
            destination=str(destination),
        )
        return destination

    def _failed(
        self,
        target: BuildTarget,
        elapsed: int,
        failure: FailureKind,
        return_code: int | None,
    ) -> BuildOutcome:
        return BuildOutcome(
            target=target,
            success=False,
            elapsed_seconds=elapsed,
            return_code=return_code,
            failure=failure,
        )


__all__ = ["BuildExecutor", "BuildLogMiddleware", "Clock", "CommandRunner"]
