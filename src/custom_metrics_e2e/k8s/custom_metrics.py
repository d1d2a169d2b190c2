"""Read access to the Custom Metrics API served by the adapter.

The Python Kubernetes client has no typed client for this aggregated API, so
discovery goes through ``CustomObjectsApi.get_api_resources`` and metric
reads go through ``ApiClient.call_api`` with an untyped ``object`` response.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Any

from kubernetes.client.exceptions import ApiException
from kubernetes.utils import parse_quantity

from ..shared.exceptions import CustomMetricsQueryError
from ..shared.logging import get_logger
from .clients import ClusterClients

logger = get_logger(__name__)


@dataclass(frozen=True)
class MetricValue:
    """One item of a ``MetricValueList`` response."""

    kind: str
    namespace: str | None
    name: str
    metric_name: str
    timestamp: str | None
    value: Decimal

    @classmethod
    def from_dict(cls, item: dict[str, Any]) -> "MetricValue":
        described = item.get("describedObject") or {}
        # v1beta1 uses metricName, v1beta2 nests it under metric.name.
        metric_name = item.get("metricName") or (item.get("metric") or {}).get("name", "")
        try:
            value = parse_quantity(item["value"])
        except (KeyError, ValueError) as e:
            raise CustomMetricsQueryError(f"Malformed metric value in response: {item}") from e
        return cls(
            kind=described.get("kind", ""),
            namespace=described.get("namespace"),
            name=described.get("name", ""),
            metric_name=metric_name,
            timestamp=item.get("timestamp"),
            value=value,
        )

    @property
    def parsed_timestamp(self) -> datetime | None:
        if not self.timestamp:
            return None
        return datetime.fromisoformat(self.timestamp.replace("Z", "+00:00"))


class CustomMetricsClient:
    """Queries pod metrics through the aggregated custom metrics API group."""

    def __init__(self, clients: ClusterClients, group: str, version: str):
        self.clients = clients
        self.group = group
        self.version = version

    @property
    def group_version(self) -> str:
        return f"{self.group}/{self.version}"

    def list_metric_resources(self) -> list[str]:
        """Return the resource names the API advertises, e.g. ``pods/foo-metric``."""
        try:
            resource_list = self.clients.custom_objects.get_api_resources(self.group, self.version)
        except ApiException as e:
            raise CustomMetricsQueryError(
                f"Failed to retrieve a list of supported metrics for {self.group_version}: "
                f"{e.reason}",
                error_code=str(e.status),
            ) from e
        names = [resource.name for resource in (resource_list.resources or [])]
        logger.debug(f"{self.group_version} advertises {names}")
        return names

    def _get(
        self,
        resource_path: str,
        path_params: dict[str, str],
        query_params: list[tuple[str, str]] | None = None,
    ) -> list[MetricValue]:
        try:
            response = self.clients.api_client.call_api(
                f"/apis/{self.group}/{self.version}" + resource_path,
                "GET",
                path_params=path_params,
                query_params=query_params or [],
                header_params={"Accept": "application/json"},
                response_type="object",
                auth_settings=["BearerToken"],
                _return_http_data_only=True,
            )
        except ApiException as e:
            raise CustomMetricsQueryError(
                f"Failed query {resource_path} {path_params}: {e.reason}",
                error_code=str(e.status),
                details={"body": e.body},
            ) from e
        return [MetricValue.from_dict(item) for item in (response or {}).get("items", [])]

    def get_for_object(self, namespace: str, pod_name: str, metric_name: str) -> MetricValue:
        """Return ``metric_name`` for a single pod."""
        values = self._get(
            "/namespaces/{namespace}/pods/{name}/{metric}",
            {"namespace": namespace, "name": pod_name, "metric": metric_name},
        )
        if not values:
            raise CustomMetricsQueryError(
                f"No value of {metric_name} returned for pod {namespace}/{pod_name}"
            )
        return values[0]

    def get_for_objects(
        self, namespace: str, label_selector: str, metric_name: str
    ) -> list[MetricValue]:
        """Return ``metric_name`` for every pod matching ``label_selector``."""
        return self._get(
            "/namespaces/{namespace}/pods/*/{metric}",
            {"namespace": namespace, "metric": metric_name},
            query_params=[("labelSelector", label_selector)],
        )
