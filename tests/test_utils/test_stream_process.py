"""Tests for streaming subprocess execution."""

import sys

import pytest

from cornebuild.utils.stream_process import (
    ChainedMiddleware,
    DefaultOutputMiddleware,
    OutputMiddleware,
    run_command,
)


class RecordingMiddleware(OutputMiddleware[str]):
    def __init__(self, tag: str = "") -> None:
        self.tag = tag
        self.seen: list[tuple[str, str]] = []

    def process(self, line: str, stream_type: str) -> str:
        self.seen.append((line, stream_type))
        return f"{self.tag}{line}"


SCRIPT = (
    "import sys\n"
    "print('compiling')\n"
    "print('warning: unused', file=sys.stderr)\n"
    "print('linking')\n"
    "sys.exit(3)\n"
)


def test_run_command_collects_both_streams():
    middleware = RecordingMiddleware()

    return_code, stdout, stderr = run_command(
        [sys.executable, "-c", SCRIPT], middleware=middleware
    )

    assert return_code == 3
    assert stdout == ["compiling", "linking"]
    assert stderr == ["warning: unused"]
    assert ("warning: unused", "stderr") in middleware.seen


def test_arguments_are_not_interpreted_by_a_shell():
    marker = "$HOME; echo injected"

    _, stdout, _ = run_command(
        [sys.executable, "-c", "import sys; print(sys.argv[1])", marker],
        middleware=RecordingMiddleware(),
    )

    assert stdout == [marker]


def test_run_command_uses_cwd(tmp_path):
    _, stdout, _ = run_command(
        [sys.executable, "-c", "import os; print(os.getcwd())"],
        middleware=RecordingMiddleware(),
        cwd=tmp_path,
    )

    assert stdout == [str(tmp_path)]


def test_chained_middleware_passes_output_along():
    first = RecordingMiddleware("a:")
    second = RecordingMiddleware("b:")

    _, stdout, _ = run_command(
        [sys.executable, "-c", "print('x')"],
        middleware=ChainedMiddleware([first, second]),
    )

    assert second.seen == [("a:x", "stdout")]
    assert stdout == ["b:a:x"]


def test_default_middleware_forwards_lines(capsys):
    middleware = DefaultOutputMiddleware(stderr_prefix="! ")

    assert middleware.process("out", "stdout") == "out"
    assert middleware.process("err", "stderr") == "err"

    captured = capsys.readouterr()
    assert captured.out == "out\n"
    assert captured.err == "! err\n"


def test_missing_executable_raises_oserror(tmp_path):
    with pytest.raises(OSError):
        run_command([str(tmp_path / "no-such-west"), "build"])


class FailingMiddleware(OutputMiddleware[str]):
    def process(self, line: str, stream_type: str) -> str:
        raise RuntimeError(f"cannot handle {line!r}")


def test_middleware_error_raised_after_output_is_drained():
    # Far more output than a pipe buffer holds
    script = "for i in range(20000): print('x' * 80)"

    with pytest.raises(RuntimeError, match="cannot handle"):
        run_command([sys.executable, "-c", script], middleware=FailingMiddleware())
