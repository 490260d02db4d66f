"""Unit tests for scenario project provisioning.

Tests for e2e_harness.fixtures.projects with the odo calls mocked, covering
the create/select/wait sequence and cleanup on failure.
"""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from e2e_harness.config import HarnessSettings
from e2e_harness.fixtures.polling import ExitCodePolicy, PollingTimeoutError
from e2e_harness.fixtures.projects import (
    ScenarioContext,
    provision_scenario,
    scenario,
    teardown_scenario,
    wait_for_operators,
)
from e2e_harness.fixtures.runner import Command

CMD_SHOULD_PASS = "e2e_harness.fixtures.projects.cmd_should_pass"
WAIT_FOR_CMD_OUT = "e2e_harness.fixtures.projects.wait_for_cmd_out"


@pytest.fixture
def settings(clean_env: pytest.MonkeyPatch) -> HarnessSettings:
    """Settings with a recognisable odo binary and short timeouts."""
    return HarnessSettings(odo_binary="odo-test", command_timeout=30.0, poll_interval=0.5)


def _odo_subcommands(mock_pass: MagicMock) -> list[tuple[str, ...]]:
    return [c.args[1:3] for c in mock_pass.call_args_list]


class TestProvisionScenario:
    """Tests for provision_scenario() and teardown_scenario()."""

    def test_creates_selects_and_waits(self, settings: HarnessSettings) -> None:
        """A scenario gets a fresh project, selected, with operators listed."""
        with (
            patch(CMD_SHOULD_PASS, return_value="") as mock_pass,
            patch(WAIT_FOR_CMD_OUT) as mock_wait,
        ):
            ctx = provision_scenario(settings, ["etcdoperator", "service-binding-operator"])

        assert isinstance(ctx, ScenarioContext)
        assert ctx.project.startswith("odo-e2e-")
        assert ctx.settings is settings
        assert _odo_subcommands(mock_pass) == [("project", "create"), ("project", "set")]
        create_args = mock_pass.call_args_list[0].args
        assert create_args[0] == "odo-test"
        assert ctx.project in create_args
        assert mock_wait.call_count == 2

    def test_teardown_deletes_project(self, settings: HarnessSettings) -> None:
        """teardown_scenario deletes the scenario's project."""
        ctx = ScenarioContext(project="odo-e2e-1234abcd", settings=settings)
        with patch(CMD_SHOULD_PASS, return_value="") as mock_pass:
            teardown_scenario(ctx)

        mock_pass.assert_called_once_with(
            "odo-test",
            "project",
            "delete",
            "odo-e2e-1234abcd",
            "-f",
            "-w",
            timeout=30.0,
        )

    def test_failed_wait_deletes_project_and_reraises(self, settings: HarnessSettings) -> None:
        """If operators never show up, the project is removed and the timeout surfaces."""
        timeout = PollingTimeoutError("operator etcdoperator listed", 1.0, 1.2, 2, "")
        with (
            patch(CMD_SHOULD_PASS, return_value="") as mock_pass,
            patch(WAIT_FOR_CMD_OUT, side_effect=timeout),
        ):
            with pytest.raises(PollingTimeoutError):
                provision_scenario(settings, ["etcdoperator"])

        assert _odo_subcommands(mock_pass)[-1] == ("project", "delete")

    def test_cleanup_failure_does_not_mask_original_error(
        self, settings: HarnessSettings
    ) -> None:
        """A failing cleanup is logged; the provisioning error propagates."""
        timeout = PollingTimeoutError("operator etcdoperator listed", 1.0, 1.2, 2, "")

        def pass_unless_delete(*args: str, **kwargs: float) -> str:
            if args[1:3] == ("project", "delete"):
                raise AssertionError("delete failed")
            return ""

        with (
            patch(CMD_SHOULD_PASS, side_effect=pass_unless_delete),
            patch(WAIT_FOR_CMD_OUT, side_effect=timeout),
        ):
            with pytest.raises(PollingTimeoutError):
                provision_scenario(settings, ["etcdoperator"])


class TestScenarioContextManager:
    """Tests for the scenario() context manager."""

    def test_tears_down_after_body(self, settings: HarnessSettings) -> None:
        """The project is deleted when the block exits normally."""
        with (
            patch(CMD_SHOULD_PASS, return_value="") as mock_pass,
            patch(WAIT_FOR_CMD_OUT),
        ):
            with scenario(settings) as ctx:
                project = ctx.project

        delete_call = mock_pass.call_args_list[-1]
        assert delete_call.args[1:4] == ("project", "delete", project)

    def test_body_failure_wins_over_teardown_failure(self, settings: HarnessSettings) -> None:
        """A failing teardown never replaces the scenario body's failure."""

        def pass_unless_delete(*args: str, **kwargs: float) -> str:
            if args[1:3] == ("project", "delete"):
                raise RuntimeError("teardown failed")
            return ""

        with (
            patch(CMD_SHOULD_PASS, side_effect=pass_unless_delete),
            patch(WAIT_FOR_CMD_OUT),
        ):
            with pytest.raises(AssertionError, match="body failed"):
                with scenario(settings):
                    raise AssertionError("body failed")


class TestWaitForOperators:
    """Tests for wait_for_operators()."""

    def test_polls_catalog_per_operator_with_fail_policy(
        self, settings: HarnessSettings
    ) -> None:
        """Each operator gets its own poll of the service catalog."""
        with patch(WAIT_FOR_CMD_OUT) as mock_wait:
            wait_for_operators(settings, ["etcdoperator", "service-binding-operator"])

        assert mock_wait.call_count == 2
        first = mock_wait.call_args_list[0]
        assert first.args[0] == Command.of("odo-test", "catalog", "list", "services")
        assert first.kwargs["exit_policy"] is ExitCodePolicy.FAIL
        assert first.kwargs["config"].description == "operator etcdoperator listed"
        predicate = first.args[1]
        assert predicate("etcdoperator.v0.9.4-clusterwide") is True
        assert predicate("service-binding-operator.v0.1.1") is False

    def test_no_operators_means_no_polling(self, settings: HarnessSettings) -> None:
        """An empty operator list does not touch the catalog."""
        with patch(WAIT_FOR_CMD_OUT) as mock_wait:
            wait_for_operators(settings, [])
        assert mock_wait.call_args_list == []
