"""
Google Cloud Platform Integration Package.

This package provides:
- Credential creation for Cloud Monitoring
- Instance metadata lookups
- Metric descriptor and time-series operations
- Configuration management
"""

from .auth import GCPAuthManager
from .config import AuthMethod
from .config import GCPConfig
from .config import ServiceAccountConfig
from .config import get_config
from .config import validate_config
from .metadata import MetadataClient
from .metadata import PodIdentity
from .monitoring import CUSTOM_METRIC_PREFIX
from .monitoring import MonitoringManager
from .monitoring import build_gke_container_series
from .monitoring import custom_metric_type

__all__ = [
    "CUSTOM_METRIC_PREFIX",
    "AuthMethod",
    "GCPAuthManager",
    "GCPConfig",
    "MetadataClient",
    "MonitoringManager",
    "PodIdentity",
    "ServiceAccountConfig",
    "build_gke_container_series",
    "custom_metric_type",
    "get_config",
    "validate_config",
]
