"""Project and resource naming utilities.

Each scenario runs in its own project (namespace) so that concurrent test
workers never share mutable cluster state. Project names carry the name of
the scenario that owns them, so a project left behind by an aborted run
can be traced back to its test.

Functions:
    generate_unique_namespace: Create a unique project/namespace name
    scenario_prefix: Project prefix derived from a pytest test name
    validate_namespace: Check if a name is valid for K8s
    random_name: Short random lowercase name for services and components

Example:
    from e2e_harness.fixtures.namespaces import generate_unique_namespace, scenario_prefix

    project = generate_unique_namespace(scenario_prefix("test_dry_run[EtcdCluster]"))
    # Returns: "odo-dry-run-etcdcluster-a1b2c3d4"
"""

from __future__ import annotations

import random
import re
import string
import uuid

# K8s namespace constraints
MAX_NAMESPACE_LENGTH = 63
NAMESPACE_PATTERN = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?$")

DEFAULT_PROJECT_PREFIX = "odo-e2e"

_SUFFIX_LENGTH = 8
_INVALID_RUN = re.compile(r"[^a-z0-9]+")
_NAME_CHARSET = string.ascii_lowercase + string.digits


class InvalidNamespaceError(ValueError):
    """Raised when a namespace name is invalid for Kubernetes."""

    def __init__(self, namespace: str, reason: str) -> None:
        self.namespace = namespace
        self.reason = reason
        super().__init__(f"Invalid namespace '{namespace}': {reason}")


def _slug(text: str) -> str:
    return _INVALID_RUN.sub("-", text.lower()).strip("-")


def generate_unique_namespace(prefix: str = DEFAULT_PROJECT_PREFIX) -> str:
    """Generate a unique project name from ``prefix`` and a UUID suffix.

    Runs of characters outside ``[a-z0-9]`` (underscores, brackets and
    slashes from parametrized test ids) collapse to a single hyphen. The
    prefix is shortened so the result fits in 63 characters; an empty
    prefix falls back to DEFAULT_PROJECT_PREFIX.

    Raises:
        InvalidNamespaceError: If the generated name does not match K8s rules.
    """
    limit = MAX_NAMESPACE_LENGTH - _SUFFIX_LENGTH - 1
    head = _slug(prefix)[:limit].rstrip("-") or DEFAULT_PROJECT_PREFIX
    namespace = f"{head}-{uuid.uuid4().hex[:_SUFFIX_LENGTH]}"

    if not validate_namespace(namespace):
        raise InvalidNamespaceError(
            namespace,
            "Generated namespace does not match K8s naming rules",
        )
    return namespace


def scenario_prefix(test_name: str) -> str:
    """Project prefix naming the scenario that owns the project.

    Example:
        >>> scenario_prefix("test_delete_malformed_name[EtcdCluster/]")
        'odo-delete-malformed-name-etcdcluster'
    """
    if test_name.startswith("test_"):
        test_name = test_name[len("test_"):]
    return _slug(f"odo-{test_name}")


def validate_namespace(namespace: str) -> bool:
    """Check if a namespace name is valid for Kubernetes.

    Example:
        >>> validate_namespace("odo-e2e-abc123")
        True
        >>> validate_namespace("Odo_E2E")
        False
    """
    if not namespace:
        return False

    if len(namespace) > MAX_NAMESPACE_LENGTH:
        return False

    return bool(NAMESPACE_PATTERN.match(namespace))


def random_name(length: int = 6) -> str:
    """Generate a random lowercase alphanumeric name.

    Used for service and component names passed on the command line.
    The first character is always a letter so the result is a valid
    DNS-1035 label.

    Args:
        length: Length of the name. Must be at least 1.

    Returns:
        Random name like "kq3x9a".

    Raises:
        ValueError: If length is less than 1.
    """
    if length < 1:
        msg = f"length must be at least 1, got {length}"
        raise ValueError(msg)
    first = random.choice(string.ascii_lowercase)  # noqa: S311
    rest = "".join(random.choice(_NAME_CHARSET) for _ in range(length - 1))  # noqa: S311
    return first + rest


# Module exports
__all__ = [
    "DEFAULT_PROJECT_PREFIX",
    "InvalidNamespaceError",
    "MAX_NAMESPACE_LENGTH",
    "generate_unique_namespace",
    "random_name",
    "scenario_prefix",
    "validate_namespace",
]
