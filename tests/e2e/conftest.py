"""E2E test configuration and fixtures.

E2E scenarios drive the real odo and cluster CLIs against a live cluster
with the etcd and service-binding operators installed. They are marked
``e2e`` and deselected by default; run them with:

    KUBERNETES=false pytest -m e2e tests/e2e

Each scenario receives an explicit ScenarioContext from the
``service_scenario`` fixture: a fresh project created for the test and
deleted after it, whatever the outcome.
"""

from __future__ import annotations

from collections.abc import Generator

import pytest

from e2e_harness.config import ClusterFlavor, HarnessSettings, get_settings
from e2e_harness.fixtures.namespaces import scenario_prefix
from e2e_harness.fixtures.projects import (
    ScenarioContext,
    provision_scenario,
    teardown_scenario,
)
from e2e_harness.fixtures.workdir import (
    DevfileWorkspace,
    enter_devfile_workspace,
    leave_devfile_workspace,
)
from e2e_harness.logging import configure_logging

# Operators the environment setup installs cluster-wide
REQUIRED_OPERATORS = ("etcdoperator", "service-binding-operator")

NODEJS_DEVFILE = "source/devfiles/nodejs/devfile.yaml"


def pytest_configure(config: pytest.Config) -> None:
    """Register E2E markers and configure logging."""
    config.addinivalue_line(
        "markers",
        "e2e: mark test as end-to-end (requires a live cluster)",
    )
    config.addinivalue_line(
        "markers",
        "openshift: scenario only applies to OpenShift clusters",
    )
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_json)


def pytest_runtest_setup(item: pytest.Item) -> None:
    """Skip OpenShift-only scenarios on plain Kubernetes clusters."""
    if item.get_closest_marker("openshift") is None:
        return
    if get_settings().flavor is ClusterFlavor.KUBERNETES:
        pytest.skip("This is an OpenShift specific scenario, skipping")


@pytest.fixture(scope="session")
def harness_settings() -> HarnessSettings:
    """Settings for the whole session, loaded once from the environment."""
    return get_settings()


@pytest.fixture
def service_scenario(
    request: pytest.FixtureRequest,
    harness_settings: HarnessSettings,
) -> Generator[ScenarioContext, None, None]:
    """Fresh project, named after the test, with the required operators listed."""
    context = provision_scenario(
        harness_settings,
        REQUIRED_OPERATORS,
        prefix=scenario_prefix(request.node.name),
    )
    yield context
    teardown_scenario(context)


@pytest.fixture
def devfile_workspace(
    harness_settings: HarnessSettings,
    service_scenario: ScenarioContext,
) -> Generator[DevfileWorkspace, None, None]:
    """Context directory with the nodejs example devfile, entered as cwd.

    Depends on ``service_scenario`` so that the project exists before odo
    runs in the context and outlives the context directory.
    """
    workspace = enter_devfile_workspace(harness_settings.examples_dir, NODEJS_DEVFILE)
    yield workspace
    leave_devfile_workspace(workspace)
