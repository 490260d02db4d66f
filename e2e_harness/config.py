"""Harness settings loaded from the environment.

Environment Variables:
    KUBERNETES: "true" selects the plain Kubernetes cluster flavor; anything
        else (or unset) selects OpenShift. E2E_KUBERNETES is accepted too.
    E2E_ODO_BINARY: odo executable (default: "odo")
    E2E_CLUSTER_BINARY: Cluster CLI override (default: "oc" on OpenShift,
        "kubectl" on Kubernetes)
    E2E_COMMAND_TIMEOUT: Seconds a single CLI call may take (default: 600)
    E2E_OPERATOR_WAIT_TIMEOUT: Seconds to wait for operators to be listed (default: 300)
    E2E_POD_WAIT_TIMEOUT: Seconds to wait for a pod to reach a phase (default: 60)
    E2E_POLL_INTERVAL: Seconds between poll attempts (default: 1.0)
    E2E_EXAMPLES_DIR: Root of example sources such as devfiles (default: tests/examples)
    E2E_LOG_LEVEL: structlog level (default: INFO)
    E2E_LOG_JSON: Emit JSON log lines instead of console output (default: false)

Example:
    >>> settings = get_settings()
    >>> settings.cluster_cli
    'oc'
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from e2e_harness.fixtures.polling import PollingConfig


class ClusterFlavor(str, Enum):
    """Kind of cluster the suite runs against."""

    OPENSHIFT = "openshift"
    KUBERNETES = "kubernetes"


class HarnessSettings(BaseSettings):
    """Configuration for one test session.

    Values are immutable; every poll receives an explicit PollingConfig
    built from these settings rather than reading shared defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="E2E_",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    kubernetes: bool = Field(
        default=False,
        validation_alias=AliasChoices("KUBERNETES", "E2E_KUBERNETES"),
        description="Run against plain Kubernetes instead of OpenShift",
    )
    odo_binary: str = Field(
        default="odo",
        min_length=1,
        description="odo executable",
    )
    cluster_binary: str | None = Field(
        default=None,
        description="Cluster CLI override",
    )
    command_timeout: float = Field(
        default=600.0,
        gt=0.0,
        description="Seconds a single CLI call may take",
    )
    operator_wait_timeout: float = Field(
        default=300.0,
        ge=0.0,
        description="Seconds to wait for operators to appear in the catalog",
    )
    pod_wait_timeout: float = Field(
        default=60.0,
        ge=0.0,
        description="Seconds to wait for a pod to reach a phase",
    )
    poll_interval: float = Field(
        default=1.0,
        ge=0.1,
        description="Seconds between poll attempts",
    )
    examples_dir: Path = Field(
        default=Path("tests/examples"),
        description="Root of example sources (devfiles)",
    )
    log_level: str = Field(
        default="INFO",
        description="Minimum structlog level",
    )
    log_json: bool = Field(
        default=False,
        description="Render logs as JSON",
    )

    @field_validator("kubernetes", mode="before")
    @classmethod
    def _only_true_selects_kubernetes(cls, value: object) -> bool:
        """Treat exactly "true" (any case, surrounding blanks ignored) as set."""
        return str(value).strip().lower() == "true"

    @property
    def flavor(self) -> ClusterFlavor:
        """Cluster flavor selected by the KUBERNETES variable."""
        return ClusterFlavor.KUBERNETES if self.kubernetes else ClusterFlavor.OPENSHIFT

    @property
    def cluster_cli(self) -> str:
        """Executable used for direct cluster inspection."""
        if self.cluster_binary:
            return self.cluster_binary
        return "kubectl" if self.flavor is ClusterFlavor.KUBERNETES else "oc"

    def operator_polling(self, description: str = "operators listed") -> PollingConfig:
        """PollingConfig for operator installation, which is slow."""
        return PollingConfig(
            timeout=self.operator_wait_timeout,
            interval=self.poll_interval,
            description=description,
        )

    def pod_polling(self, description: str = "pod phase") -> PollingConfig:
        """PollingConfig for pod scheduling."""
        return PollingConfig(
            timeout=self.pod_wait_timeout,
            interval=self.poll_interval,
            description=description,
        )


def get_settings() -> HarnessSettings:
    """Load settings from the environment.

    Returns a new instance on every call; pytest keeps one per session in
    the ``harness_settings`` fixture.

    Raises:
        pydantic.ValidationError: If an environment value is invalid.
    """
    return HarnessSettings()


__all__ = [
    "ClusterFlavor",
    "HarnessSettings",
    "get_settings",
]
