"""Process runner for external CLI invocations.

Runs a command (program plus argument list, no shell) to completion and
captures its output. The runner never raises for a command that fails or
cannot be started; it reports the outcome in an ExecutionResult and leaves
the decision to the caller.

Functions:
    run_command: Execute a Command and return its ExecutionResult
    run: Convenience wrapper building the Command from positional args

Example:
    from e2e_harness.fixtures.runner import Command, run_command

    result = run_command(Command.of("odo", "service", "list"))
    if result.succeeded:
        print(result.stdout)
"""

from __future__ import annotations

import shlex
import subprocess
import time
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Command:
    """An external program invocation.

    Attributes:
        program: Executable name or path (e.g., "odo", "oc").
        args: Arguments passed verbatim, without shell interpretation.
    """

    program: str
    args: tuple[str, ...] = ()

    @classmethod
    def of(cls, program: str, *args: str) -> Command:
        """Build a Command from positional arguments."""
        return cls(program, tuple(args))

    @property
    def argv(self) -> list[str]:
        """Full argument vector, program first."""
        return [self.program, *self.args]

    def __str__(self) -> str:
        return shlex.join(self.argv)


@dataclass(frozen=True)
class ExecutionResult:
    """Captured outcome of a single Command execution.

    Attributes:
        command: The command that was executed.
        returncode: Process exit status, or None if the process never
            produced one (could not start, or was killed on timeout).
        stdout: Captured standard output.
        stderr: Captured standard error.
        duration: Wall-clock seconds spent in the call.
        error: Why the process did not run to completion, if it didn't.
        timed_out: True if the process was killed because its timeout expired.
    """

    command: Command
    returncode: int | None
    stdout: str = ""
    stderr: str = ""
    duration: float = 0.0
    error: str | None = None
    timed_out: bool = False

    @property
    def succeeded(self) -> bool:
        """True when the process ran to completion with exit status zero."""
        return self.error is None and self.returncode == 0

    @property
    def output(self) -> str:
        """Standard output followed by standard error."""
        return self.stdout + self.stderr

    def text(self, include_stderr: bool = False) -> str:
        """Output text used for assertions and predicates.

        Args:
            include_stderr: Append stderr to stdout. Defaults to False.
        """
        return self.output if include_stderr else self.stdout

    def describe(self) -> str:
        """Human-readable exit status for diagnostics."""
        if self.error is not None:
            return self.error
        return f"exit status {self.returncode}"


def run_command(
    command: Command,
    *,
    timeout: float | None = None,
    cwd: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> ExecutionResult:
    """Run a command synchronously and capture its output.

    The child process is always reaped before this function returns or
    raises. On timeout it is killed and its partial output is returned. On
    any interruption of the caller (including KeyboardInterrupt or a test
    abort) it is killed and waited for before the exception propagates.

    Args:
        command: The command to execute.
        timeout: Seconds before the process is killed. None waits forever.
        cwd: Working directory for the child process.
        env: Environment for the child process. Defaults to the current one.

    Returns:
        ExecutionResult describing the outcome. A program that cannot be
        found or started yields a failed result, not an exception.
    """
    log = logger.bind(command=str(command))
    log.debug("command_started", cwd=str(cwd) if cwd else None, timeout=timeout)
    start_time = time.monotonic()

    try:
        process = subprocess.Popen(
            command.argv,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            cwd=cwd,
            env=dict(env) if env is not None else None,
        )
    except OSError as exc:
        duration = time.monotonic() - start_time
        log.warning("command_not_started", error=str(exc))
        return ExecutionResult(
            command=command,
            returncode=None,
            stderr=str(exc),
            duration=duration,
            error=f"could not start {command.program!r}: {exc}",
        )

    with process:
        try:
            stdout, stderr = process.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            process.kill()
            stdout, stderr = process.communicate()
            duration = time.monotonic() - start_time
            log.warning("command_timed_out", timeout=timeout, duration=round(duration, 3))
            return ExecutionResult(
                command=command,
                returncode=None,
                stdout=stdout,
                stderr=stderr,
                duration=duration,
                error=f"killed after timeout of {timeout}s",
                timed_out=True,
            )
        except BaseException:
            process.kill()
            process.wait()
            log.warning("command_interrupted", pid=process.pid)
            raise

    duration = time.monotonic() - start_time
    log.debug(
        "command_finished",
        returncode=process.returncode,
        duration=round(duration, 3),
    )
    return ExecutionResult(
        command=command,
        returncode=process.returncode,
        stdout=stdout,
        stderr=stderr,
        duration=duration,
    )


def run(
    program: str,
    *args: str,
    timeout: float | None = None,
    cwd: str | Path | None = None,
    env: Mapping[str, str] | None = None,
) -> ExecutionResult:
    """Run ``program`` with ``args``. See run_command."""
    return run_command(Command.of(program, *args), timeout=timeout, cwd=cwd, env=env)


# Module exports
__all__ = [
    "Command",
    "ExecutionResult",
    "run",
    "run_command",
]
