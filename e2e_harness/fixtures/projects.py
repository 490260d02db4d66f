"""Project provisioning for scenario isolation.

Every scenario creates its own project, runs in it, and deletes it
afterwards. Isolation by project replaces any locking between parallel
test workers: the cluster is the only shared state, and each worker
touches only its own partition of it.

Setup and teardown are explicit functions around a ScenarioContext value
that the scenario body receives, so no scenario reads project names from
shared variables.

Functions:
    create_project: Create a uniquely named project with odo
    set_project: Make a project current for subsequent odo calls
    delete_project: Delete a project with odo
    wait_for_operators: Poll the service catalog until operators are listed
    provision_scenario: Create + select a project and wait for operators
    teardown_scenario: Delete the scenario's project
    scenario: Context manager combining provision and teardown

Example:
    from e2e_harness.fixtures.projects import scenario

    with scenario(settings, required_operators=["etcdoperator"]) as ctx:
        cmd_should_pass("odo", "service", "list", "--project", ctx.project)
"""

from __future__ import annotations

from collections.abc import Generator, Iterable
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from e2e_harness.fixtures.assertions import cmd_should_pass, output_contains
from e2e_harness.fixtures.namespaces import DEFAULT_PROJECT_PREFIX, generate_unique_namespace
from e2e_harness.fixtures.polling import ExitCodePolicy, wait_for_cmd_out
from e2e_harness.fixtures.runner import Command

if TYPE_CHECKING:
    from e2e_harness.config import HarnessSettings

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ScenarioContext:
    """Handle for one provisioned scenario.

    Attributes:
        project: Name of the project the scenario runs in.
        settings: Harness settings the project was provisioned with.
    """

    project: str
    settings: HarnessSettings

    def odo(self, *args: str) -> Command:
        """Build an odo Command with the configured binary."""
        return Command.of(self.settings.odo_binary, *args)


def create_project(settings: HarnessSettings, prefix: str = DEFAULT_PROJECT_PREFIX) -> str:
    """Create a new project with a unique name and wait for it to be ready.

    Returns:
        The project name.

    Raises:
        UnexpectedExitError: If odo fails to create the project.
    """
    project = generate_unique_namespace(prefix)
    cmd_should_pass(
        settings.odo_binary,
        "project",
        "create",
        project,
        "-w",
        timeout=settings.command_timeout,
    )
    logger.info("project_created", project=project)
    return project


def set_project(settings: HarnessSettings, project: str) -> None:
    """Make ``project`` the current project for odo."""
    cmd_should_pass(
        settings.odo_binary,
        "project",
        "set",
        project,
        timeout=settings.command_timeout,
    )


def delete_project(settings: HarnessSettings, project: str) -> None:
    """Delete ``project`` and wait for the deletion to finish.

    Raises:
        UnexpectedExitError: If odo fails to delete the project.
    """
    cmd_should_pass(
        settings.odo_binary,
        "project",
        "delete",
        project,
        "-f",
        "-w",
        timeout=settings.command_timeout,
    )
    logger.info("project_deleted", project=project)


def wait_for_operators(settings: HarnessSettings, operators: Iterable[str]) -> None:
    """Wait until every operator is visible in the service catalog.

    Operators are installed cluster-wide by the environment setup, but it
    takes a while before they show up in a freshly created project.

    Raises:
        PollingTimeoutError: If an operator is not listed in time.
        UnexpectedExitError: If listing the catalog fails.
    """
    catalog = Command.of(settings.odo_binary, "catalog", "list", "services")
    for operator in operators:
        wait_for_cmd_out(
            catalog,
            output_contains(operator),
            config=settings.operator_polling(f"operator {operator} listed"),
            exit_policy=ExitCodePolicy.FAIL,
            command_timeout=settings.command_timeout,
        )
        logger.debug("operator_listed", operator=operator)


def provision_scenario(
    settings: HarnessSettings,
    required_operators: Iterable[str] = (),
    prefix: str = DEFAULT_PROJECT_PREFIX,
) -> ScenarioContext:
    """Create and select a fresh project, then wait for operators.

    If anything after project creation fails, the project is deleted
    before the original error propagates.

    Returns:
        ScenarioContext for the scenario body and teardown_scenario.
    """
    project = create_project(settings, prefix)
    try:
        set_project(settings, project)
        wait_for_operators(settings, required_operators)
    except BaseException:
        logger.warning("provisioning_failed", project=project)
        _delete_quietly(settings, project)
        raise
    return ScenarioContext(project=project, settings=settings)


def _delete_quietly(settings: HarnessSettings, project: str) -> None:
    # Cleanup after a failure must not replace the error being reported
    try:
        delete_project(settings, project)
    except Exception as exc:  # noqa: BLE001
        logger.error("project_cleanup_failed", project=project, error=str(exc))


def teardown_scenario(context: ScenarioContext) -> None:
    """Delete the scenario's project."""
    delete_project(context.settings, context.project)


@contextmanager
def scenario(
    settings: HarnessSettings,
    required_operators: Iterable[str] = (),
    prefix: str = DEFAULT_PROJECT_PREFIX,
) -> Generator[ScenarioContext, None, None]:
    """Provision a scenario for the duration of a ``with`` block."""
    context = provision_scenario(settings, required_operators, prefix)
    try:
        yield context
    except BaseException:
        _delete_quietly(settings, context.project)
        raise
    teardown_scenario(context)


# Module exports
__all__ = [
    "ScenarioContext",
    "create_project",
    "delete_project",
    "provision_scenario",
    "scenario",
    "set_project",
    "teardown_scenario",
    "wait_for_operators",
]
