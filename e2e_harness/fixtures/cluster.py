"""Direct cluster inspection through the cluster CLI.

Scenarios use ``oc`` (OpenShift) or ``kubectl`` (Kubernetes) to observe
what odo did: which pods an operator started and which phase they are in.
Pods appear and change phase asynchronously, so both lookups poll.

Functions:
    cluster_command: Build a Command for the configured cluster CLI
    find_pod: Poll until a pod whose name matches a pattern is listed
    wait_for_pod_phase: Poll until a pod reports the given phase
    delete_resource: Delete a resource by kind and name
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import structlog

from e2e_harness.fixtures.assertions import cmd_should_pass, find_in_output, output_contains
from e2e_harness.fixtures.polling import ExitCodePolicy, wait_for_cmd_out
from e2e_harness.fixtures.runner import Command

if TYPE_CHECKING:
    from e2e_harness.config import HarnessSettings

logger = structlog.get_logger(__name__)

POD_PHASE_TEMPLATE = "template={{.status.phase}}"


def cluster_command(settings: HarnessSettings, *args: str) -> Command:
    """Build a Command for the flavor's cluster CLI."""
    return Command.of(settings.cluster_cli, *args)


def find_pod(settings: HarnessSettings, namespace: str, pattern: str) -> str:
    """Wait for a pod whose name matches ``pattern`` and return its name.

    Listing tolerates non-zero exits: right after a service is created the
    namespace may have no pods yet.

    Args:
        settings: Harness settings.
        namespace: Namespace to list pods in.
        pattern: Regular expression matched against the pod listing
            (e.g., r"example-[a-z0-9-]+").

    Returns:
        The first matching pod name.

    Raises:
        PollingTimeoutError: If no pod matches in time.
    """
    regex = re.compile(pattern)
    result = wait_for_cmd_out(
        cluster_command(settings, "get", "pods", "-n", namespace),
        lambda output: regex.search(output) is not None,
        config=settings.pod_polling(f"pod matching {pattern!r} in {namespace}"),
        exit_policy=ExitCodePolicy.TOLERATE,
        command_timeout=settings.command_timeout,
    )
    pod = find_in_output(result.stdout, pattern)
    logger.debug("pod_found", namespace=namespace, pod=pod)
    return pod


def wait_for_pod_phase(
    settings: HarnessSettings,
    namespace: str,
    pod: str,
    phase: str = "Running",
) -> None:
    """Wait until ``pod`` reports ``phase``.

    The pod is known to exist, so a failing ``get pods`` is fatal.

    Raises:
        PollingTimeoutError: If the pod does not reach the phase in time.
        UnexpectedExitError: If the cluster CLI fails.
    """
    wait_for_cmd_out(
        cluster_command(settings, "get", "pods", pod, "-o", POD_PHASE_TEMPLATE, "-n", namespace),
        output_contains(phase),
        config=settings.pod_polling(f"pod {pod} {phase}"),
        exit_policy=ExitCodePolicy.FAIL,
        command_timeout=settings.command_timeout,
    )
    logger.info("pod_phase_reached", namespace=namespace, pod=pod, phase=phase)


def delete_resource(
    settings: HarnessSettings,
    kind: str,
    name: str,
    namespace: str | None = None,
) -> str:
    """Delete ``kind/name`` with the cluster CLI.

    Returns:
        Captured stdout of the delete command.
    """
    args = ["delete", f"{kind}/{name}"]
    if namespace:
        args.extend(["-n", namespace])
    return cmd_should_pass(settings.cluster_cli, *args, timeout=settings.command_timeout)


# Module exports
__all__ = [
    "POD_PHASE_TEMPLATE",
    "cluster_command",
    "delete_resource",
    "find_pod",
    "wait_for_pod_phase",
]
