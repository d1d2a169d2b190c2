"""Unit tests for the metrics exposer push loop."""

import logging
from unittest.mock import MagicMock

import pytest

from custom_metrics_e2e.exposer.exposer import DEFAULT_INTERVAL_SECONDS
from custom_metrics_e2e.exposer.exposer import MetricsExposer
from custom_metrics_e2e.gcp.metadata import PodIdentity
from custom_metrics_e2e.shared.exceptions import MonitoringError


@pytest.fixture
def monitoring():
    return MagicMock()


@pytest.fixture
def sleep():
    return MagicMock()


@pytest.fixture
def exposer(monitoring, sleep):
    return MetricsExposer(
        monitoring,
        PodIdentity("test-project", "us-central1-b", "e2e-cluster"),
        pod_id="0b0c5a4e-uid",
        metric_name="foo-metric",
        metric_value=448,
        sleep=sleep,
        clock=lambda: 1700000000.0,
    )


def test_default_interval():
    assert DEFAULT_INTERVAL_SECONDS == 5.0


def test_push_once_writes_gke_container_point(exposer, monitoring, caplog):
    with caplog.at_level(logging.INFO):
        assert exposer.push_once() is True

    series = monitoring.write_point.call_args.args[0]
    assert series.metric.type == "custom.googleapis.com/foo-metric"
    assert series.resource.labels["pod_id"] == "0b0c5a4e-uid"
    assert series.points[0].value.int64_value == 448
    assert series.points[0].interval.end_time.timestamp() == 1700000000.0
    assert "Finished writing time series with value: 448" in caplog.text


def test_push_once_failure_is_logged(exposer, monitoring, caplog):
    monitoring.write_point.side_effect = MonitoringError("quota exceeded")

    with caplog.at_level(logging.ERROR):
        assert exposer.push_once() is False

    assert "Failed to write time series data: quota exceeded" in caplog.text


def test_run_sleeps_between_writes(exposer, monitoring, sleep):
    assert exposer.run(max_iterations=3) == 3

    assert monitoring.write_point.call_count == 3
    assert sleep.call_count == 3
    sleep.assert_called_with(5.0)


def test_run_continues_after_failures(exposer, monitoring, sleep):
    monitoring.write_point.side_effect = [MonitoringError("transient"), None, MonitoringError("again")]

    assert exposer.run(max_iterations=3) == 1

    assert monitoring.write_point.call_count == 3
    assert sleep.call_count == 3
