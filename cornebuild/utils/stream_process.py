"""Process execution and streaming output handling.

This module runs a subprocess from an explicit argument list and passes each
output line through a middleware as it arrives, so long builds show their
progress live while the lines are also collected for the caller.

Example:
    ```python
    from cornebuild.utils.stream_process import run_command, DefaultOutputMiddleware

    return_code, stdout, stderr = run_command(
        ["west", "--version"], middleware=DefaultOutputMiddleware()
    )
    ```
"""

import subprocess
import sys
from collections.abc import Sequence
from pathlib import Path
from threading import Thread
from typing import IO, Generic, TypeAlias, TypeVar, cast


T = TypeVar("T")  # Type of processed output

# Type alias for the result of run_command
ProcessResult: TypeAlias = tuple[int, list[T], list[T]]  # (return_code, stdout, stderr)


class OutputMiddleware(Generic[T]):
    """Base class for processing command output streams.

    Type parameter T represents the return type of the process method,
    allowing middleware to transform strings into other types if needed.
    """

    def process(self, line: str, stream_type: str) -> T:
        """Process a line of output from a subprocess stream.

        Args:
            line: A line of text from the process output
            stream_type: Either "stdout" or "stderr"

        Returns:
            Processed output of type T
        """
        raise NotImplementedError()


class DefaultOutputMiddleware(OutputMiddleware[str]):
    """Forward each line to the matching stream of this process."""

    def __init__(self, stdout_prefix: str = "", stderr_prefix: str = "") -> None:
        self.stdout_prefix = stdout_prefix
        self.stderr_prefix = stderr_prefix

    def process(self, line: str, stream_type: str) -> str:
        if stream_type == "stdout":
            print(f"{self.stdout_prefix}{line}", file=sys.stdout, flush=True)
        else:
            print(f"{self.stderr_prefix}{line}", file=sys.stderr, flush=True)
        return line


class ChainedMiddleware(OutputMiddleware[str]):
    """Run several middlewares in order, each receiving the previous output."""

    def __init__(self, middlewares: Sequence[OutputMiddleware[str]]) -> None:
        self.middlewares = list(middlewares)

    def process(self, line: str, stream_type: str) -> str:
        for middleware in self.middlewares:
            line = middleware.process(line, stream_type)
        return line


def run_command(
    cmd: Sequence[str],
    middleware: OutputMiddleware[T] | None = None,
    cwd: Path | None = None,
) -> ProcessResult[T]:
    """Run a command and process its output through middleware.

    Args:
        cmd: Command as a list of arguments; it is never passed to a shell
        middleware: Optional middleware for processing output
            (uses DefaultOutputMiddleware if None)
        cwd: Working directory for the command

    Returns:
        Tuple containing:
            - Return code from the process (0 for success)
            - List of processed stdout lines
            - List of processed stderr lines

    Raises:
        OSError: If the executable cannot be started
        Exception: The first error raised by ``middleware``, once the process
            has exited and both streams are drained
    """
    if middleware is None:
        # Cast is needed because T is unbound at this point
        middleware = cast(OutputMiddleware[T], DefaultOutputMiddleware())

    process = subprocess.Popen(
        list(cmd),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        errors="replace",
        bufsize=1,
        cwd=cwd,
    )

    middleware_errors: list[Exception] = []

    def stream_output(stream: IO[str], stream_type: str) -> list[T]:
        captured: list[T] = []
        for line in iter(stream.readline, ""):
            # Drain the rest of the stream once a middleware has failed
            if middleware_errors:
                continue
            try:
                processed = middleware.process(line.rstrip(), stream_type)
            except Exception as e:
                middleware_errors.append(e)
                continue
            if processed is not None:
                captured.append(processed)
        stream.close()
        return captured

    stdout_lines: list[T] = []
    stderr_lines: list[T] = []

    stdout_thread = Thread(
        target=lambda: stdout_lines.extend(
            stream_output(cast(IO[str], process.stdout), "stdout")
        ),
        daemon=True,
    )
    stderr_thread = Thread(
        target=lambda: stderr_lines.extend(
            stream_output(cast(IO[str], process.stderr), "stderr")
        ),
        daemon=True,
    )

    stdout_thread.start()
    stderr_thread.start()

    return_code = process.wait()

    stdout_thread.join()
    stderr_thread.join()

    if middleware_errors:
        raise middleware_errors[0]

    return return_code, stdout_lines, stderr_lines


__all__ = [
    "ChainedMiddleware",
    "DefaultOutputMiddleware",
    "OutputMiddleware",
    "ProcessResult",
    "run_command",
]
