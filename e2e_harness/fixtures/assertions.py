"""Outcome assertions and output matching for CLI scenarios.

Scenarios compose two blocking primitives: ``cmd_should_pass`` and
``cmd_should_fail``. Each runs a command, checks the exit class, and hands
back captured text for further checks with the output matcher helpers.
A mismatch fails the current test with the complete captured output.

Functions:
    cmd_should_pass: Run a command that must exit zero, return its stdout
    cmd_should_fail: Run a command that must exit non-zero, return its stderr
    missing_substrings: Pure check for absent substrings
    match_all_in_output: Assert that every substring occurs in the output
    output_contains: Build a predicate for the condition poller
    find_in_output: Extract the first regex match from the output

Example:
    from e2e_harness.fixtures.assertions import cmd_should_fail, match_all_in_output

    stderr = cmd_should_fail("odo", "service", "delete", "EtcdCluster", "-f")
    match_all_in_output(stderr, ['couldn\\'t split "EtcdCluster" into exactly two'])
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from pathlib import Path

from e2e_harness.fixtures.runner import Command, ExecutionResult, run_command

# Ten minutes, the window a single CLI call gets before it is considered hung
DEFAULT_COMMAND_TIMEOUT = 600.0


def _format_output(result: ExecutionResult) -> str:
    return (
        f"--- stdout ---\n{result.stdout}\n"
        f"--- stderr ---\n{result.stderr}\n"
        f"--- end ---"
    )


class UnexpectedExitError(AssertionError):
    """Raised when a command's exit class differs from the expected one.

    Attributes:
        result: The captured execution result.
        expected: "succeed" or "fail".
    """

    def __init__(self, result: ExecutionResult, expected: str) -> None:
        self.result = result
        self.expected = expected
        super().__init__(
            f"Command `{result.command}` was expected to {expected} "
            f"but finished with {result.describe()} after {result.duration:.1f}s\n"
            f"{_format_output(result)}"
        )


class MissingOutputError(AssertionError):
    """Raised when required text is absent from captured output.

    Attributes:
        missing: Substrings (or patterns) that were not found.
        output: The full text that was searched.
    """

    def __init__(self, missing: list[str], output: str, what: str = "substring") -> None:
        self.missing = missing
        self.output = output
        listed = "\n".join(f"  - {item!r}" for item in missing)
        super().__init__(
            f"Missing {what}(s) in output:\n{listed}\n"
            f"--- output ---\n{output}\n--- end ---"
        )


def cmd_should_pass(
    program: str,
    *args: str,
    timeout: float | None = DEFAULT_COMMAND_TIMEOUT,
    cwd: str | Path | None = None,
) -> str:
    """Run a command that must succeed.

    Args:
        program: Executable to run.
        *args: Arguments, passed without shell interpretation.
        timeout: Seconds before the command is killed. Defaults to
            DEFAULT_COMMAND_TIMEOUT.
        cwd: Working directory for the command.

    Returns:
        Captured standard output.

    Raises:
        UnexpectedExitError: If the command exits non-zero, cannot be
            started, or times out.
    """
    result = run_command(Command.of(program, *args), timeout=timeout, cwd=cwd)
    if not result.succeeded:
        raise UnexpectedExitError(result, expected="succeed")
    return result.stdout


def cmd_should_fail(
    program: str,
    *args: str,
    timeout: float | None = DEFAULT_COMMAND_TIMEOUT,
    cwd: str | Path | None = None,
) -> str:
    """Run a command that must fail.

    Args:
        program: Executable to run.
        *args: Arguments, passed without shell interpretation.
        timeout: Seconds before the command is killed. Defaults to
            DEFAULT_COMMAND_TIMEOUT.
        cwd: Working directory for the command.

    Returns:
        Captured standard error, where CLIs report their failures.

    Raises:
        UnexpectedExitError: If the command exits zero.
    """
    result = run_command(Command.of(program, *args), timeout=timeout, cwd=cwd)
    if result.succeeded:
        raise UnexpectedExitError(result, expected="fail")
    return result.stderr


def missing_substrings(output: str, required: Iterable[str]) -> list[str]:
    """Return the required substrings that do not occur in output.

    Args:
        output: Captured text to search.
        required: Literal substrings that must all be present.

    Returns:
        Missing substrings in the order given; empty when all are present.
    """
    return [item for item in required if item not in output]


def match_all_in_output(output: str, required: Iterable[str]) -> None:
    """Assert that every required substring occurs in output.

    Raises:
        MissingOutputError: Naming each missing substring, with the full output.
    """
    missing = missing_substrings(output, required)
    if missing:
        raise MissingOutputError(missing, output)


def output_contains(*required: str) -> Callable[[str], bool]:
    """Build a poller predicate that holds once all substrings are present.

    Example:
        wait_for_cmd_out(cmd, output_contains("Running"), config=..., exit_policy=...)
    """

    def predicate(output: str) -> bool:
        return not missing_substrings(output, required)

    return predicate


def find_in_output(output: str, pattern: str) -> str:
    """Return the first match of a regular expression in output.

    Args:
        output: Captured text to search.
        pattern: Regular expression.

    Returns:
        The matched text.

    Raises:
        MissingOutputError: If the pattern does not match anywhere.
    """
    match = re.search(pattern, output)
    if match is None:
        raise MissingOutputError([pattern], output, what="pattern")
    return match.group(0)


# Module exports
__all__ = [
    "DEFAULT_COMMAND_TIMEOUT",
    "MissingOutputError",
    "UnexpectedExitError",
    "cmd_should_fail",
    "cmd_should_pass",
    "find_in_output",
    "match_all_in_output",
    "missing_substrings",
    "output_contains",
]
