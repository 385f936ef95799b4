"""Error handling decorators for CLI commands."""

import logging
import sys
import traceback
from collections.abc import Callable
from functools import wraps
from typing import Any

import typer

from cornebuild.build.orchestrator import USAGE_LINE
from cornebuild.cli.helpers.theme import get_themed_console
from cornebuild.core.errors import ConfigError, UsageError
from cornebuild.core.structlog_logger import get_struct_logger


__all__ = ["handle_errors", "print_stack_trace_if_verbose"]

logger = get_struct_logger(__name__)


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator to handle common exceptions in CLI commands.

    Usage errors are reported on standard error before any build starts.
    Every handled error ends the command with exit status 1.
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (typer.Exit, typer.Abort):
            raise
        except UsageError as e:
            logger.debug("usage_error", error=str(e), **e.context)
            stderr = get_themed_console(icon_mode="text", stderr=True)
            stderr.print(str(e))
            stderr.print(USAGE_LINE)
            raise typer.Exit(1) from e
        except ConfigError as e:
            logger.debug("configuration_error", error=str(e), **e.context)
            get_themed_console(icon_mode="text", stderr=True).print_error(
                f"Configuration error: {e}"
            )
            print_stack_trace_if_verbose()
            raise typer.Exit(1) from e
        except Exception as e:
            exc_info = logger.isEnabledFor(logging.DEBUG)
            logger.error("unexpected_error", error=str(e), exc_info=exc_info)
            print_stack_trace_if_verbose()
            raise typer.Exit(1) from e

    return wrapper


def print_stack_trace_if_verbose() -> None:
    """Print stack trace if verbose/debug mode is enabled."""
    if any(arg in sys.argv for arg in ["-v", "-vv", "--verbose", "--debug"]):
        print("\nStack trace:", file=sys.stderr)
        traceback.print_exc(file=sys.stderr)
