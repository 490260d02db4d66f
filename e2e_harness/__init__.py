"""End-to-end test harness for operator-backed services.

This package provides the polling-and-assertion harness used by the
OperatorHub scenario suite: it runs the ``odo`` and cluster CLIs as external
processes, asserts on their outcome, and polls eventually-consistent cluster
state until it converges.

Components:
    config: Harness settings loaded from the environment (cluster flavor, binaries, timeouts)
    logging: structlog configuration for test sessions
    fixtures: Process runner, outcome assertions, condition poller, output matcher,
        and scenario collaborators (projects, devfile workspaces, cluster inspection)

Usage:
    from e2e_harness.fixtures import cmd_should_pass, match_all_in_output

    def test_operators_listed() -> None:
        output = cmd_should_pass("odo", "catalog", "list", "services")
        match_all_in_output(output, ["Services available through Operators", "etcdoperator"])

See Also:
    - tests/e2e/operatorhub/ for the scenario suite
"""

from __future__ import annotations

__version__ = "0.1.0"
