"""Pytest configuration for the harness's own tests.

These tests exercise the harness with short-lived local Python processes;
they need no cluster.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Callable
from pathlib import Path

import pytest

# Add repository root to path for imports
repo_root = Path(__file__).parent.parent.parent
if str(repo_root) not in sys.path:
    sys.path.insert(0, str(repo_root))

from e2e_harness.fixtures.runner import Command, ExecutionResult  # noqa: E402


@pytest.fixture
def python_cmd() -> Callable[[str], Command]:
    """Build a Command that runs a Python snippet in a fresh interpreter."""

    def build(code: str) -> Command:
        return Command.of(sys.executable, "-c", code)

    return build


@pytest.fixture
def make_result() -> Callable[..., ExecutionResult]:
    """Factory for ExecutionResult values returned by mocked runners."""

    def build(
        stdout: str = "",
        returncode: int | None = 0,
        stderr: str = "",
        error: str | None = None,
    ) -> ExecutionResult:
        return ExecutionResult(
            command=Command.of("oc", "get", "pods"),
            returncode=returncode,
            stdout=stdout,
            stderr=stderr,
            error=error,
        )

    return build


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove harness environment variables so settings use their defaults."""
    for key in list(os.environ):
        if key.startswith("E2E_") or key == "KUBERNETES":
            monkeypatch.delenv(key, raising=False)
    return monkeypatch


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers",
        "e2e: end-to-end scenarios that drive odo against a live cluster",
    )
