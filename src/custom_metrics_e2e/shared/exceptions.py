"""Custom exceptions for the custom metrics e2e tooling.

Library errors (Kubernetes ``ApiException``, Google API errors, HTTP errors
from the metadata server) are wrapped in these types at the module boundary
so callers only need to handle one hierarchy.
"""

from typing import Any


class CustomMetricsE2EError(Exception):
    """Base exception for all errors raised by this package."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        return f"{self.message} (code: {self.error_code})" if self.error_code else self.message


class ConfigurationError(CustomMetricsE2EError):
    """Raised for configuration-related errors."""


class AuthenticationError(CustomMetricsE2EError):
    """Raised when GCP credentials cannot be created or refreshed."""


class MetadataError(CustomMetricsE2EError):
    """Raised when the instance metadata server cannot be queried."""


class MonitoringError(CustomMetricsE2EError):
    """Raised when a monitoring API call fails."""


class ClusterProvisioningError(CustomMetricsE2EError):
    """Raised when a Kubernetes object cannot be created."""


class CustomMetricsQueryError(CustomMetricsE2EError):
    """Raised when the Custom Metrics API cannot be queried."""


class MetricAssertionError(CustomMetricsE2EError):
    """Raised when the Custom Metrics API returns unexpected data."""


class ProviderNotSupportedError(CustomMetricsE2EError):
    """Raised when the cluster provider cannot run the adapter scenario."""
