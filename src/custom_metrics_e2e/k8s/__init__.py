"""Kubernetes objects, provisioning and Custom Metrics API access."""

from .clients import ClusterClients
from .custom_metrics import CustomMetricsClient
from .custom_metrics import MetricValue
from .manifests import AdapterManifests
from .manifests import render_manifests
from .provisioner import AdapterProvisioner

__all__ = [
    "AdapterManifests",
    "AdapterProvisioner",
    "ClusterClients",
    "CustomMetricsClient",
    "MetricValue",
    "render_manifests",
]
