"""Polling utilities for eventually-consistent cluster state.

This module provides the condition poller used to bridge asynchronous
cluster behaviour (pod scheduling, operator reconciliation, binding
creation) with synchronous test assertions. Use it instead of hardcoded
time.sleep() calls.

Functions:
    wait_for_cmd_out: Re-run a command until a predicate over its output holds

Example:
    from e2e_harness.fixtures.polling import ExitCodePolicy, PollingConfig, wait_for_cmd_out
    from e2e_harness.fixtures.runner import Command

    wait_for_cmd_out(
        Command.of("oc", "get", "pods", pod, "-o", "template={{.status.phase}}"),
        lambda output: "Running" in output,
        config=PollingConfig(timeout=60.0, interval=1.0, description="etcd pod running"),
        exit_policy=ExitCodePolicy.FAIL,
    )
"""

from __future__ import annotations

import time
from collections.abc import Callable
from enum import Enum

import structlog
from pydantic import BaseModel, ConfigDict, Field

from e2e_harness.fixtures.assertions import UnexpectedExitError
from e2e_harness.fixtures.runner import Command, ExecutionResult, run_command

logger = structlog.get_logger(__name__)

# Floor for a single attempt once the poll deadline is close or past
MIN_ATTEMPT_TIMEOUT = 0.1


class PollingConfig(BaseModel):
    """Configuration for a single poll.

    Attributes:
        timeout: Maximum wait time in seconds. Defaults to 30.0.
        interval: Poll interval in seconds. Defaults to 0.5.
        description: Description for error messages. Defaults to "condition".

    Example:
        config = PollingConfig(timeout=300.0, interval=5.0, description="operators installed")
    """

    model_config = ConfigDict(frozen=True)

    timeout: float = Field(
        default=30.0,
        ge=0.0,
        description="Maximum wait time in seconds",
    )
    interval: float = Field(
        default=0.5,
        ge=0.1,
        description="Poll interval in seconds",
    )
    description: str = Field(
        default="condition",
        min_length=1,
        description="Description for error messages",
    )


class ExitCodePolicy(str, Enum):
    """What a non-zero exit of the polled command means.

    TOLERATE: The command is retried, e.g. listing a pod that does not exist yet.
    FAIL: The poll stops at once with UnexpectedExitError.
    """

    TOLERATE = "tolerate"
    FAIL = "fail"


class PollingTimeoutError(TimeoutError):
    """Raised when a polled condition is not met before the deadline.

    Attributes:
        description: What was being waited for
        timeout: Configured deadline in seconds
        elapsed: Seconds actually spent polling
        attempts: Number of command executions
        last_output: Output of the last execution
    """

    def __init__(
        self,
        description: str,
        timeout: float,
        elapsed: float,
        attempts: int,
        last_output: str,
    ) -> None:
        self.description = description
        self.timeout = timeout
        self.elapsed = elapsed
        self.attempts = attempts
        self.last_output = last_output
        super().__init__(
            f"Timeout waiting for {description} after {elapsed:.1f}s "
            f"(timeout {timeout:.1f}s, {attempts} attempts)\n"
            f"--- last output ---\n{last_output}\n--- end ---"
        )


def wait_for_cmd_out(
    command: Command,
    predicate: Callable[[str], bool],
    *,
    config: PollingConfig,
    exit_policy: ExitCodePolicy,
    include_stderr: bool = False,
    command_timeout: float | None = None,
) -> ExecutionResult:
    """Re-run a command until its output satisfies a predicate.

    Each attempt runs the command, applies the exit policy, then evaluates
    the predicate on the captured output. An attempt never runs past the
    poll deadline: its process timeout is the smaller of command_timeout
    and the time left (at least MIN_ATTEMPT_TIMEOUT). An attempt killed at
    the deadline ends the poll with PollingTimeoutError under either exit
    policy. A satisfied predicate returns at once without waiting out the
    interval. Between attempts the poller sleeps for the interval, capped
    at the time left before the deadline.

    Args:
        command: Command to execute on every attempt.
        predicate: Callable returning True once the output shows the
            expected state.
        config: Timeout, interval and description for this poll.
        exit_policy: Whether a non-zero exit is retried or fatal.
        include_stderr: Evaluate the predicate on stdout followed by stderr.
            Defaults to False (stdout only).
        command_timeout: Upper bound on a single attempt in seconds. None
            bounds attempts by the poll deadline only.

    Returns:
        The ExecutionResult whose output satisfied the predicate.

    Raises:
        PollingTimeoutError: If the predicate is not satisfied before
            config.timeout elapses.
        UnexpectedExitError: If the command exits non-zero and exit_policy
            is ExitCodePolicy.FAIL.
    """
    log = logger.bind(command=str(command), description=config.description)
    start_time = time.monotonic()
    attempts = 0

    while True:
        attempts += 1
        remaining = config.timeout - (time.monotonic() - start_time)
        attempt_timeout = max(remaining, MIN_ATTEMPT_TIMEOUT)
        if command_timeout is not None:
            attempt_timeout = min(command_timeout, attempt_timeout)
        result = run_command(command, timeout=attempt_timeout)
        cut_at_deadline = result.timed_out and time.monotonic() - start_time >= config.timeout

        if not result.succeeded and not cut_at_deadline:
            if exit_policy is ExitCodePolicy.FAIL:
                raise UnexpectedExitError(result, expected="succeed")
            log.debug("poll_command_failed", attempt=attempts, status=result.describe())

        output = result.text(include_stderr)
        if predicate(output):
            log.debug(
                "poll_satisfied",
                attempts=attempts,
                elapsed=round(time.monotonic() - start_time, 3),
            )
            return result

        elapsed = time.monotonic() - start_time
        if elapsed >= config.timeout:
            log.warning("poll_timed_out", attempts=attempts, elapsed=round(elapsed, 3))
            raise PollingTimeoutError(
                config.description,
                config.timeout,
                elapsed,
                attempts,
                result.output,
            )

        # Sleep for interval, but don't exceed remaining time
        remaining = config.timeout - elapsed
        sleep_time = min(config.interval, remaining)
        if sleep_time > 0:
            time.sleep(sleep_time)


# Module exports
__all__ = [
    "MIN_ATTEMPT_TIMEOUT",
    "ExitCodePolicy",
    "PollingConfig",
    "PollingTimeoutError",
    "wait_for_cmd_out",
]
