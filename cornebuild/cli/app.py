"""Main CLI application for Cornebuild."""

import logging
import sys
from importlib.metadata import distribution
from typing import Annotated

import click
import typer
from typer.core import TyperCommand

from cornebuild.build.executor import BuildExecutor
from cornebuild.build.orchestrator import BuildOrchestrator, parse_target_name
from cornebuild.cli.decorators.error_handling import (
    handle_errors,
    print_stack_trace_if_verbose,
)
from cornebuild.cli.helpers.theme import IconMode, get_themed_console
from cornebuild.config.resolver import resolve_zmk_config
from cornebuild.config.settings import load_settings
from cornebuild.core.errors import UsageError
from cornebuild.core.logging import level_from_name, setup_logging
from cornebuild.core.structlog_logger import get_struct_logger
from cornebuild.utils.stream_process import run_command


__all__ = ["app", "main", "prompt_for_confirmation"]

__version__ = distribution("cornebuild").version

logger = get_struct_logger(__name__)


HELP_TEXT = """Build ZMK firmware for the Corne keyboard with a nice!nano controller.

Run with a target to build one firmware image, or without one to be asked
whether to build both halves.

[bold]Targets[/bold]

  left      Build left side firmware only
  right     Build right side firmware only
  reset     Build settings reset firmware only
  (none)    Interactive mode - prompts to build both sides

[bold]Examples[/bold]

  cornebuild           Interactive mode - build both sides
  cornebuild left      Build left side only
  cornebuild right     Build right side only
  cornebuild reset     Build settings reset firmware

[bold]Output[/bold]

Firmware files are saved to the build/ directory as build/corne_left.uf2,
build/corne_right.uf2 and build/settings_reset.uf2.

Board: nice_nano. Shields: corne_left, corne_right, settings_reset.

Make sure the west workspace is initialized before running. Run
'west init -l app/' and 'west update' if needed.
"""


app = typer.Typer(
    name="cornebuild",
    add_completion=False,
    rich_markup_mode="rich",
)


class BuildCommand(TyperCommand):
    """Command whose argument errors exit with status 1.

    A help flag anywhere on the command line shows the help, even where it
    would otherwise be taken as the value of another option.
    """

    def parse_args(self, ctx: click.Context, args: list[str]) -> list[str]:
        if any(arg in ctx.help_option_names for arg in args):
            args = [ctx.help_option_names[0]]
        try:
            return super().parse_args(ctx, args)
        except click.UsageError as e:
            e.exit_code = 1
            raise


def prompt_for_confirmation(question: str) -> str | None:
    """Read one answer from the terminal, or None at end of input."""
    try:
        return str(typer.prompt(question, default="", show_default=False))
    except typer.Abort:
        return None


def _log_level_from_flags(verbose: int, debug: bool) -> int | None:
    if debug or verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return None


@app.command(
    cls=BuildCommand,
    help=HELP_TEXT,
    context_settings={
        "help_option_names": ["-h", "--help"],
        "ignore_unknown_options": True,
    },
)
@handle_errors
def build(
    targets: Annotated[
        list[str] | None,
        typer.Argument(
            help="Firmware to build: left, right or reset",
            show_default=False,
            metavar="TARGET",
        ),
    ] = None,
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity (-v=INFO, -vv=DEBUG)",
        ),
    ] = 0,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Enable debug logging (equivalent to -vv)"),
    ] = False,
    log_file: Annotated[
        str | None, typer.Option("--log-file", help="Log to file")
    ] = None,
    config_file: Annotated[
        str | None,
        typer.Option("-c", "--config", help="Path to a YAML settings file"),
    ] = None,
    no_emoji: Annotated[
        bool,
        typer.Option("--no-emoji", help="Disable emoji icons in output"),
    ] = False,
    version: Annotated[
        bool, typer.Option("--version", help="Show version and exit")
    ] = False,
) -> None:
    if version:
        print(f"Cornebuild v{__version__}")
        raise typer.Exit()

    flag_level = _log_level_from_flags(verbose, debug)
    setup_logging(level=flag_level or logging.WARNING, log_file=log_file)

    if targets and len(targets) > 1:
        raise UsageError(
            f"Error: Expected at most one target, got {len(targets)}: "
            f"{' '.join(targets)}",
            arguments=list(targets),
        )
    side = targets[0] if targets else None
    if side is not None:
        parse_target_name(side)

    settings = load_settings(config_file)
    if flag_level is None and settings.log_level != "WARNING":
        # No explicit CLI flags, use the settings log level
        setup_logging(level=level_from_name(settings.log_level), log_file=log_file)

    icon_mode = IconMode.TEXT.value if no_emoji else settings.icon_mode.value
    console = get_themed_console(icon_mode=icon_mode)

    config = resolve_zmk_config(settings, console=console)
    executor = BuildExecutor(settings, console, runner=run_command)
    orchestrator = BuildOrchestrator(
        settings,
        config,
        executor,
        console,
        prompt=prompt_for_confirmation,
    )

    result = orchestrator.run(side)
    raise typer.Exit(result.exit_code)


def main() -> int:
    """Main CLI entry point."""
    try:
        app()
        return 0
    except SystemExit as e:
        if e.code is None:
            return 0
        return e.code if isinstance(e.code, int) else 1
    except Exception as e:
        logger.error("unexpected_error", error=str(e))
        print_stack_trace_if_verbose()
        return 1


if __name__ == "__main__":
    sys.exit(main())
