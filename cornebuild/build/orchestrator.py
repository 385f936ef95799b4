"""Run mode selection and sequencing of firmware builds."""

import time
from collections.abc import Callable
from enum import Enum

from cornebuild.build.executor import BuildExecutor, Clock
from cornebuild.build.timing import elapsed_seconds, format_duration
from cornebuild.cli.helpers.theme import ThemedConsole
from cornebuild.config.settings import BuildSettings
from cornebuild.core.errors import UsageError
from cornebuild.core.structlog_logger import StructlogMixin
from cornebuild.models.build import (
    BuildOutcome,
    BuildTarget,
    ResolvedConfig,
    RunMode,
    RunResult,
    TargetName,
)


BOTH_SIDES_PROMPT = "Would you like to build both left and right sides? [Y/n]"
USAGE_LINE = "Usage: cornebuild {left|right|reset}"

# Returns the raw answer, or None when no input is available
Prompt = Callable[[str], str | None]


class Confirmation(Enum):
    """Classification of a yes/no answer."""

    AFFIRM = "affirm"
    DECLINE = "decline"
    INVALID = "invalid"


_AFFIRMATIVE = {"", "y", "yes"}
_NEGATIVE = {"n", "no"}


def parse_confirmation(response: str) -> Confirmation:
    """Classify an answer to a yes/no question; an empty answer means yes."""
    answer = response.strip().lower()
    if answer in _AFFIRMATIVE:
        return Confirmation.AFFIRM
    if answer in _NEGATIVE:
        return Confirmation.DECLINE
    return Confirmation.INVALID


def parse_target_name(value: str) -> TargetName:
    """Validate a positional target argument.

    Raises:
        UsageError: If ``value`` is not exactly ``left``, ``right`` or ``reset``
    """
    try:
        return TargetName(value)
    except ValueError:
        raise UsageError(
            f"Error: Invalid argument '{value}'. "
            "Only 'left', 'right', or 'reset' are allowed.",
            argument=value,
        ) from None


class BuildOrchestrator(StructlogMixin):
    """Decide what to build from the arguments and run the builds in order.

    Builds always run one after another, and the first failure stops the
    sequence. Total time is measured across the whole sequence with the
    same clock the executor uses.
    """

    def __init__(
        self,
        settings: BuildSettings,
        config: ResolvedConfig,
        executor: BuildExecutor,
        console: ThemedConsole,
        prompt: Prompt,
        clock: Clock = time.monotonic,
    ) -> None:
        super().__init__()
        self.settings = settings
        self.config = config
        self.executor = executor
        self.console = console
        self.prompt = prompt
        self.clock = clock

    def run(self, side: str | None) -> RunResult:
        """Run the mode selected by the optional positional argument.

        Raises:
            UsageError: If ``side`` is given but is not a known target
        """
        if side is None:
            result = self.run_interactive()
        else:
            result = self.run_single(parse_target_name(side))
        self.logger.debug("run_result", result=result.to_dict())
        return result

    def run_single(self, name: TargetName) -> RunResult:
        """Build exactly one target and report the total time."""
        mode = RunMode.RESET if name is TargetName.RESET else RunMode.SINGLE
        self.logger.info("run_started", mode=mode.value, target=name.value)

        start = self.clock()
        outcome = self._build(name)
        total = elapsed_seconds(start, self.clock())

        result = RunResult(mode=mode, outcomes=[outcome], total_elapsed_seconds=total)
        self.console.print()
        self.console.print_timing(f"Total build time: {format_duration(total)}")
        self.logger.info("run_finished", mode=mode.value, success=result.success)
        return result

    def run_interactive(self) -> RunResult:
        """Ask whether to build both halves, then build them or cancel."""
        self.console.print("No side specified.")
        response = self.prompt(BOTH_SIDES_PROMPT)
        decision = (
            Confirmation.DECLINE if response is None else parse_confirmation(response)
        )
        self.logger.debug("prompt_answered", response=response, decision=decision.value)

        if decision is not Confirmation.AFFIRM:
            self._report_cancelled(response, decision)
            return RunResult(mode=RunMode.BOTH, cancelled=True)
        return self.run_both()

    def run_both(self) -> RunResult:
        """Build the left half and then the right half, stopping on failure."""
        self.logger.info("run_started", mode=RunMode.BOTH.value)
        self.console.print("Building both sides...")
        self.console.print()
        self.settings.build_root.mkdir(parents=True, exist_ok=True)

        start = self.clock()
        outcomes: list[BuildOutcome] = []
        for name in (TargetName.LEFT, TargetName.RIGHT):
            if outcomes:
                self.console.print()
            outcome = self._build(name)
            outcomes.append(outcome)
            if not outcome.success:
                break
        total = elapsed_seconds(start, self.clock())

        result = RunResult(
            mode=RunMode.BOTH, outcomes=outcomes, total_elapsed_seconds=total
        )
        if result.success:
            self._report_both_succeeded(result)
        else:
            self._report_both_failed(result)
        self.logger.info(
            "run_finished", mode=RunMode.BOTH.value, success=result.success
        )
        return result

    def _build(self, name: TargetName) -> BuildOutcome:
        target = BuildTarget.for_name(name, self.settings)
        return self.executor.execute(target, self.config)

    def _report_both_succeeded(self, result: RunResult) -> None:
        left, right = result.outcomes
        self.console.print()
        self.console.print_rule()
        self.console.print_success("Both sides built successfully!")
        self.console.print("Firmware files:")
        self.console.print_list_item(f"Left:  {left.artifact_path}")
        self.console.print_list_item(f"Right: {right.artifact_path}")
        self.console.print_rule(heavy=False)
        self.console.print("Build time summary:")
        self.console.print_list_item(
            f"Left:  {format_duration(left.elapsed_seconds)}"
        )
        self.console.print_list_item(
            f"Right: {format_duration(right.elapsed_seconds)}"
        )
        self.console.print_list_item(
            f"Total time: {format_duration(result.total_elapsed_seconds)}"
        )
        self.console.print_rule()

    def _report_both_failed(self, result: RunResult) -> None:
        failed = result.failed_outcome
        if failed is None:
            return
        label = failed.target.label.capitalize()
        self.console.print()
        if len(result.outcomes) < 2:
            self.console.print_error(f"{label} build failed. Stopping.")
        else:
            self.console.print_error(f"{label} build failed.")
        self.console.print_timing(
            f"Total build time: {format_duration(result.total_elapsed_seconds)}"
        )

    def _report_cancelled(self, response: str | None, decision: Confirmation) -> None:
        self.console.print_rule()
        if decision is Confirmation.INVALID:
            self.console.print_warning(f"Unrecognized answer '{response}'.")
        self.console.print_error("Build cancelled.")
        self.console.print(
            f"{USAGE_LINE} or run without arguments to build both sides"
        )
        self.console.print_rule()
        self.logger.info("run_cancelled", decision=decision.value)


__all__ = [
    "BOTH_SIDES_PROMPT",
    "BuildOrchestrator",
    "Confirmation",
    "Prompt",
    "USAGE_LINE",
    "parse_confirmation",
    "parse_target_name",
]
