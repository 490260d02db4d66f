"""Harness primitives and scenario collaborators.

Harness:
    run_command / run: Execute an external command and capture its output
    cmd_should_pass / cmd_should_fail: Assert an exit class, return output
    wait_for_cmd_out: Poll a command until a predicate over its output holds
    match_all_in_output / output_contains / find_in_output: Output matching

Scenario collaborators:
    provision_scenario / teardown_scenario / scenario: Per-scenario projects
    enter_devfile_workspace / leave_devfile_workspace: Devfile contexts
    find_pod / wait_for_pod_phase / delete_resource: Cluster inspection
    generate_unique_namespace / scenario_prefix / random_name: Naming helpers

Example:
    from e2e_harness.fixtures import cmd_should_fail, match_all_in_output

    def test_unknown_service_search() -> None:
        stderr = cmd_should_fail("odo", "catalog", "search", "service", "dummy")
        match_all_in_output(stderr, ["no service matched the query: dummy"])
"""

from __future__ import annotations

from e2e_harness.fixtures.assertions import (
    DEFAULT_COMMAND_TIMEOUT,
    MissingOutputError,
    UnexpectedExitError,
    cmd_should_fail,
    cmd_should_pass,
    find_in_output,
    match_all_in_output,
    missing_substrings,
    output_contains,
)
from e2e_harness.fixtures.cluster import (
    cluster_command,
    delete_resource,
    find_pod,
    wait_for_pod_phase,
)
from e2e_harness.fixtures.namespaces import (
    InvalidNamespaceError,
    generate_unique_namespace,
    random_name,
    scenario_prefix,
    validate_namespace,
)
from e2e_harness.fixtures.polling import (
    ExitCodePolicy,
    PollingConfig,
    PollingTimeoutError,
    wait_for_cmd_out,
)
from e2e_harness.fixtures.projects import (
    ScenarioContext,
    create_project,
    delete_project,
    provision_scenario,
    scenario,
    set_project,
    teardown_scenario,
    wait_for_operators,
)
from e2e_harness.fixtures.runner import (
    Command,
    ExecutionResult,
    run,
    run_command,
)
from e2e_harness.fixtures.workdir import (
    DevfileWorkspace,
    ExamplesNotFoundError,
    copy_example_devfile,
    create_new_context,
    delete_dir,
    enter_devfile_workspace,
    leave_devfile_workspace,
    write_manifest,
)

__all__ = [
    # Process runner
    "Command",
    "ExecutionResult",
    "run",
    "run_command",
    # Outcome assertions and output matching
    "DEFAULT_COMMAND_TIMEOUT",
    "MissingOutputError",
    "UnexpectedExitError",
    "cmd_should_fail",
    "cmd_should_pass",
    "find_in_output",
    "match_all_in_output",
    "missing_substrings",
    "output_contains",
    # Condition poller
    "ExitCodePolicy",
    "PollingConfig",
    "PollingTimeoutError",
    "wait_for_cmd_out",
    # Naming
    "InvalidNamespaceError",
    "generate_unique_namespace",
    "random_name",
    "scenario_prefix",
    "validate_namespace",
    # Projects
    "ScenarioContext",
    "create_project",
    "delete_project",
    "provision_scenario",
    "scenario",
    "set_project",
    "teardown_scenario",
    "wait_for_operators",
    # Devfile workspaces
    "DevfileWorkspace",
    "ExamplesNotFoundError",
    "copy_example_devfile",
    "create_new_context",
    "delete_dir",
    "enter_devfile_workspace",
    "leave_devfile_workspace",
    "write_manifest",
    # Cluster inspection
    "cluster_command",
    "delete_resource",
    "find_pod",
    "wait_for_pod_phase",
]
