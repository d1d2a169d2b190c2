"""Run configuration for the adapter scenario.

Values come from ``CM_E2E_*`` environment variables or a local ``.env`` file,
so the same settings drive the pytest e2e suite and the operator CLI.
"""

from pathlib import Path

from pydantic import Field
from pydantic import field_validator
from pydantic_settings import BaseSettings
from pydantic_settings import SettingsConfigDict

SUPPORTED_PROVIDERS = ("gce", "gke")


class E2ESettings(BaseSettings):
    """Settings for provisioning the adapter and querying the Custom Metrics API."""

    model_config = SettingsConfigDict(
        env_prefix="CM_E2E_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    provider: str = Field(default="", description="Cloud provider of the cluster under test")
    project_id: str | None = Field(
        default=None, description="Monitoring project; falls back to GCP configuration"
    )
    namespace: str = Field(default="default", min_length=1, description="Namespace for test objects")

    adapter_image: str = Field(
        default="gcr.io/gke-release/custom-metrics-stackdriver-adapter:v0.14.2-gke.0",
        min_length=1,
        description="Custom metrics adapter image",
    )
    exposer_image: str = Field(
        default="gcr.io/google-containers/custom-metrics-exposer:v0.1.0",
        min_length=1,
        description="Image containing the metrics-exposer entry point",
    )

    custom_metrics_group: str = Field(default="custom.metrics.k8s.io")
    custom_metrics_version: str = Field(default="v1beta1")

    settle_seconds: float = Field(
        default=60.0,
        ge=0,
        description="Time to wait for pods to start and export metrics before querying",
    )

    kubeconfig: Path | None = Field(default=None, description="Path to a kubeconfig file")
    kube_context: str | None = Field(default=None, description="Kubeconfig context to use")

    @field_validator("provider")
    @classmethod
    def normalize_provider(cls, v: str) -> str:
        return v.strip().lower()
