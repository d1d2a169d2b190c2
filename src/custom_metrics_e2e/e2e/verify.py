"""Assertions over Custom Metrics API responses."""

from collections.abc import Iterable
from collections.abc import Mapping

from ..k8s.custom_metrics import MetricValue
from ..shared.exceptions import MetricAssertionError


def pod_resource(metric_name: str) -> str:
    return f"pods/{metric_name}"


def verify_supported_metrics(resource_names: Iterable[str], allowed_metrics: Iterable[str]) -> None:
    """Fail on any advertised resource that is not a pod metric in ``allowed_metrics``."""
    allowed = {pod_resource(name) for name in allowed_metrics}
    for name in resource_names:
        if name not in allowed:
            raise MetricAssertionError(
                f"Unexpected metric {name}. Only metrics {sorted(allowed)} should be supported",
                details={"resource": name},
            )


def verify_object_value(value: MetricValue, metric_name: str, expected: int) -> None:
    if value.value != expected:
        raise MetricAssertionError(
            f"Unexpected metric value for metric {metric_name}: "
            f"expected {expected} but received {value.value}",
            details={"pod": value.name, "expected": expected, "received": str(value.value)},
        )


def verify_pod_values(
    values: list[MetricValue], metric_name: str, expected_by_pod: Mapping[str, int]
) -> None:
    """Check that exactly the expected pods were returned, each with its own value."""
    if len(values) != len(expected_by_pod):
        raise MetricAssertionError(
            f"Expected results for exactly {len(expected_by_pod)} pods, "
            f"but {len(values)} results received",
            details={"pods": [value.name for value in values]},
        )

    returned = sorted(value.name for value in values)
    if returned != sorted(expected_by_pod):
        raise MetricAssertionError(
            f"Results for metric {metric_name} cover pods {returned}, "
            f"expected {sorted(expected_by_pod)}",
            details={"pods": returned},
        )

    for value in values:
        expected = expected_by_pod[value.name]
        if value.value != expected:
            raise MetricAssertionError(
                f"Unexpected metric value for metric {metric_name} and pod {value.name}: "
                f"expected {expected} but received {value.value}",
                details={"pod": value.name, "expected": expected, "received": str(value.value)},
            )
