"""End-to-end scenario for the custom metrics adapter."""

from .scenario import TEST_METRICS
from .scenario import AdapterScenario
from .scenario import ScenarioResult
from .scenario import require_supported_provider

__all__ = ["TEST_METRICS", "AdapterScenario", "ScenarioResult", "require_supported_provider"]
