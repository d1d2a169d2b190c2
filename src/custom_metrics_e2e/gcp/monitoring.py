"""
Cloud Monitoring integration.

This module registers and removes custom metric descriptors for the adapter
scenario and writes the single-point time series emitted by the exposer.
"""

import time
from collections.abc import Iterable

from google.api import metric_pb2 as ga_metric
from google.api_core import retry
from google.api_core.client_options import ClientOptions
from google.api_core.exceptions import GoogleAPICallError
from google.api_core.exceptions import NotFound
from google.api_core.exceptions import ServiceUnavailable
from google.api_core.exceptions import TooManyRequests
from google.cloud import monitoring_v3

from ..shared.exceptions import MonitoringError
from ..shared.logging import get_logger
from .auth import GCPAuthManager
from .config import GCPConfig
from .metadata import PodIdentity

logger = get_logger(__name__)

CUSTOM_METRIC_PREFIX = "custom.googleapis.com/"
GKE_CONTAINER_RESOURCE = "gke_container"


def custom_metric_type(metric_name: str) -> str:
    """Return the full metric type for a custom metric name."""
    return f"{CUSTOM_METRIC_PREFIX}{metric_name}"


def descriptor_name(project_id: str, metric_name: str) -> str:
    """Return the resource name of a custom metric descriptor."""
    return f"projects/{project_id}/metricDescriptors/{custom_metric_type(metric_name)}"


def build_gauge_descriptor(metric_name: str) -> ga_metric.MetricDescriptor:
    """Build an INT64 gauge descriptor for ``metric_name``."""
    return ga_metric.MetricDescriptor(
        type=custom_metric_type(metric_name),
        metric_kind=ga_metric.MetricDescriptor.MetricKind.GAUGE,
        value_type=ga_metric.MetricDescriptor.ValueType.INT64,
        description=f"Fake metric {metric_name} registered for the custom metrics adapter test",
    )


def build_gke_container_series(
    identity: PodIdentity,
    pod_id: str,
    metric_name: str,
    value: int,
    now: float | None = None,
) -> monitoring_v3.TimeSeries:
    """Build one time series holding a single INT64 point.

    The monitored resource is the legacy ``gke_container`` type. Namespace
    and instance labels are fixed because the adapter only matches on
    ``pod_id``.

    Args:
        identity: Project, zone and cluster the pod runs in
        pod_id: UID of the pod the value is attributed to
        metric_name: Custom metric name, without the ``custom.googleapis.com/`` prefix
        value: Point value
        now: Point end time as a UNIX timestamp; defaults to the current time

    Returns:
        A TimeSeries ready for ``create_time_series``
    """
    if now is None:
        now = time.time()
    seconds = int(now)
    nanos = int((now - seconds) * 10**9)

    series = monitoring_v3.TimeSeries()
    series.metric.type = custom_metric_type(metric_name)
    series.resource.type = GKE_CONTAINER_RESOURCE
    series.resource.labels["project_id"] = identity.project_id
    series.resource.labels["zone"] = identity.zone
    series.resource.labels["cluster_name"] = identity.cluster_name
    series.resource.labels["container_name"] = ""
    series.resource.labels["pod_id"] = pod_id
    series.resource.labels["namespace_id"] = "default"
    series.resource.labels["instance_id"] = ""

    interval = monitoring_v3.TimeInterval({"end_time": {"seconds": seconds, "nanos": nanos}})
    point = monitoring_v3.Point({"interval": interval, "value": {"int64_value": value}})
    series.points = [point]
    return series


class MonitoringManager:
    """Wraps ``MetricServiceClient`` for the calls this project needs."""

    def __init__(
        self,
        config: GCPConfig,
        auth_manager: GCPAuthManager | None = None,
        client: monitoring_v3.MetricServiceClient | None = None,
    ):
        """Initialize the manager.

        Args:
            config: GCP configuration; its project receives descriptors and points
            auth_manager: Authentication manager, created from ``config`` if omitted
            client: Pre-built client, mainly for tests
        """
        self.config = config
        self.auth_manager = auth_manager or GCPAuthManager(config)
        self._client = client

        # Descriptor management is idempotent enough to retry; point writes are not retried.
        self.retry_config = retry.Retry(
            predicate=retry.if_exception_type(TooManyRequests, ServiceUnavailable),
            initial=1.0,
            maximum=30.0,
            multiplier=2.0,
            timeout=120.0,
        )

    @property
    def client(self) -> monitoring_v3.MetricServiceClient:
        """Get or create the metric service client."""
        if self._client is None:
            client_options = None
            if self.config.api_endpoint_override:
                client_options = ClientOptions(api_endpoint=self.config.api_endpoint_override)
            self._client = monitoring_v3.MetricServiceClient(
                credentials=self.auth_manager.credentials, client_options=client_options
            )
        return self._client

    def create_descriptors(self, metric_names: Iterable[str]) -> None:
        """Create one INT64 gauge descriptor per metric name.

        Raises:
            MonitoringError: on the first descriptor that cannot be created
        """
        for metric_name in metric_names:
            try:
                self.client.create_metric_descriptor(
                    name=self.config.project_name,
                    metric_descriptor=build_gauge_descriptor(metric_name),
                    retry=self.retry_config,
                    timeout=self.config.api_timeout,
                )
            except GoogleAPICallError as e:
                raise MonitoringError(
                    f"Failed to create metric descriptor {metric_name}: {e}",
                    error_code=str(int(e.code)) if e.code else None,
                ) from e
            logger.info(f"Created metric descriptor {custom_metric_type(metric_name)}")

    def delete_descriptors(self, metric_names: Iterable[str]) -> None:
        """Delete descriptors, logging and ignoring failures."""
        for metric_name in metric_names:
            name = descriptor_name(self.config.project_id, metric_name)
            try:
                self.client.delete_metric_descriptor(name=name, timeout=self.config.api_timeout)
                logger.info(f"Deleted metric descriptor {name}")
            except NotFound:
                logger.debug(f"Metric descriptor {name} already gone")
            except Exception as e:
                logger.warning(f"Failed to delete metric descriptor {name}: {e}")

    def write_point(self, series: monitoring_v3.TimeSeries) -> None:
        """Write a single time series.

        Raises:
            MonitoringError: if the API rejects the write
        """
        try:
            self.client.create_time_series(
                name=self.config.project_name,
                time_series=[series],
                timeout=self.config.api_timeout,
            )
        except GoogleAPICallError as e:
            raise MonitoringError(
                f"Failed to write time series data: {e}",
                error_code=str(int(e.code)) if e.code else None,
            ) from e
