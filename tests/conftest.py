"""Pytest configuration for the test suite."""

import os
from pathlib import Path
import sys
from unittest.mock import MagicMock

import pytest

# Add the src directory to Python path so imports work without an editable install
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root / "src"))

from custom_metrics_e2e.config.settings import E2ESettings  # noqa: E402
from custom_metrics_e2e.k8s.clients import ClusterClients  # noqa: E402


@pytest.fixture
def settings(monkeypatch) -> E2ESettings:
    """Default settings, isolated from the caller's environment and .env file."""
    for name in list(os.environ):
        if name.startswith("CM_E2E_"):
            monkeypatch.delenv(name, raising=False)
    return E2ESettings(_env_file=None, provider="gke", project_id="test-project")


@pytest.fixture
def cluster_clients() -> ClusterClients:
    """ClusterClients whose API groups are all mocks."""
    return ClusterClients(
        api_client=MagicMock(name="api_client"),
        core_v1=MagicMock(name="core_v1"),
        apps_v1=MagicMock(name="apps_v1"),
        rbac_v1=MagicMock(name="rbac_v1"),
        apiregistration_v1=MagicMock(name="apiregistration_v1"),
        custom_objects=MagicMock(name="custom_objects"),
    )
