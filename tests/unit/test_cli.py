"""Tests for the custom-metrics-e2e and metrics-exposer command lines."""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest
import yaml
from typer.testing import CliRunner

from custom_metrics_e2e.cli.main import app
from custom_metrics_e2e.e2e.scenario import ScenarioResult
from custom_metrics_e2e.exposer.cli import app as exposer_app
from custom_metrics_e2e.gcp.config import AuthMethod
from custom_metrics_e2e.gcp.metadata import PodIdentity
from custom_metrics_e2e.k8s.custom_metrics import MetricValue
from custom_metrics_e2e.shared.exceptions import ClusterProvisioningError
from custom_metrics_e2e.shared.exceptions import MetadataError
from custom_metrics_e2e.shared.exceptions import MetricAssertionError

runner = CliRunner()


@pytest.fixture
def scenario_cls(settings, monkeypatch):
    """Replace the scenario wiring and keep logging untouched."""
    scenario_cls = MagicMock()
    monkeypatch.setattr("custom_metrics_e2e.cli.main.AdapterScenario", scenario_cls)
    monkeypatch.setattr("custom_metrics_e2e.cli.main.setup_logging", MagicMock())
    return scenario_cls


def test_version():
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert "custom-metrics-e2e v" in result.stdout


def test_run_passes(scenario_cls):
    scenario_cls.from_settings.return_value.run.return_value = ScenarioResult(
        pod_values=[
            MetricValue("Pod", "default", "metrics-exposer-1", "foo-metric", None, Decimal(448)),
            MetricValue("Pod", "default", "metrics-exposer-2", "foo-metric", None, Decimal(446)),
        ],
        duration_seconds=61.5,
    )

    result = runner.invoke(
        app, ["run", "--provider", "GKE", "--project", "other-project", "-n", "metrics", "--settle-seconds", "0"]
    )

    assert result.exit_code == 0, result.stdout
    assert "metrics-exposer-2" in result.stdout
    assert "PASSED in 61.5s" in result.stdout

    settings = scenario_cls.from_settings.call_args.args[0]
    assert settings.provider == "gke"
    assert settings.project_id == "other-project"
    assert settings.namespace == "metrics"
    assert settings.settle_seconds == 0


def test_run_skips_unsupported_provider(scenario_cls):
    result = runner.invoke(app, ["run", "--provider", "aws"])

    assert result.exit_code == 0
    assert "SKIPPED" in result.stdout
    scenario_cls.from_settings.assert_not_called()


def test_run_reads_provider_from_environment(scenario_cls, monkeypatch):
    monkeypatch.setenv("CM_E2E_PROVIDER", "local")

    result = runner.invoke(app, ["run"])

    assert "SKIPPED" in result.stdout
    scenario_cls.from_settings.assert_not_called()


def test_run_failure_exits_nonzero(scenario_cls):
    scenario_cls.from_settings.return_value.run.side_effect = MetricAssertionError(
        "Unexpected metric value for metric foo-metric"
    )

    result = runner.invoke(app, ["run", "--provider", "gce"])

    assert result.exit_code == 1
    assert "FAILED: Unexpected metric value for metric foo-metric" in result.stdout


def test_run_unexpected_error(scenario_cls):
    scenario_cls.from_settings.return_value.run.side_effect = RuntimeError("[boom]")

    result = runner.invoke(app, ["run", "--provider", "gce"])

    assert result.exit_code == 1
    assert "Unexpected error: [boom]" in result.stdout


def test_manifests_to_stdout(settings):
    result = runner.invoke(app, ["manifests", "-n", "metrics"])

    assert result.exit_code == 0
    documents = [doc for doc in yaml.safe_load_all(result.stdout) if doc]
    assert [doc["kind"] for doc in documents][-2:] == ["Pod", "Pod"]
    assert all(doc["metadata"].get("namespace") in ("metrics", "kube-system", None) for doc in documents)


def test_manifests_to_file(settings, tmp_path):
    output = tmp_path / "out" / "adapter.yaml"

    result = runner.invoke(app, ["manifests", "--output", str(output)])

    assert result.exit_code == 0
    assert "Wrote manifests to" in result.stdout
    assert "custom-metrics-stackdriver-adapter" in output.read_text(encoding="utf-8")


def test_cleanup(scenario_cls):
    result = runner.invoke(app, ["cleanup", "--project", "test-project"])

    assert result.exit_code == 0
    assert "Cleanup finished" in result.stdout
    scenario_cls.from_settings.return_value.cleanup.assert_called_once_with()


def test_cleanup_failure(scenario_cls):
    scenario_cls.from_settings.return_value.cleanup.side_effect = ClusterProvisioningError(
        "no cluster"
    )

    result = runner.invoke(app, ["cleanup"])

    assert result.exit_code == 1
    assert "FAILED: no cluster" in result.stdout


class TestExposerCli:
    @pytest.fixture
    def patched(self, monkeypatch):
        mocks = MagicMock()
        mocks.discover.return_value = PodIdentity("test-project", "us-central1-b", "e2e-cluster")
        monkeypatch.setattr("custom_metrics_e2e.exposer.cli.setup_logging", mocks.setup_logging)
        monkeypatch.setattr("custom_metrics_e2e.exposer.cli.MetadataClient", mocks.MetadataClient)
        monkeypatch.setattr("custom_metrics_e2e.exposer.cli.PodIdentity.discover", mocks.discover)
        monkeypatch.setattr("custom_metrics_e2e.exposer.cli.MonitoringManager", mocks.MonitoringManager)
        monkeypatch.setattr("custom_metrics_e2e.exposer.cli.MetricsExposer", mocks.MetricsExposer)
        return mocks

    def test_flags_reach_exposer(self, patched):
        result = runner.invoke(
            exposer_app,
            ["--pod_id=abc-123", "--metric_name=foo-metric", "--metric_value=448", "--max-iterations", "2"],
        )

        assert result.exit_code == 0, result.stdout
        gcp_config = patched.MonitoringManager.call_args.args[0]
        assert gcp_config.project_id == "test-project"
        assert gcp_config.auth_method == AuthMethod.COMPUTE_ENGINE

        kwargs = patched.MetricsExposer.call_args.kwargs
        assert kwargs["pod_id"] == "abc-123"
        assert kwargs["metric_name"] == "foo-metric"
        assert kwargs["metric_value"] == 448
        assert kwargs["interval"] == 5.0
        patched.MetricsExposer.return_value.run.assert_called_once_with(max_iterations=2)

    def test_defaults(self, patched):
        result = runner.invoke(exposer_app, [])

        assert result.exit_code == 0
        kwargs = patched.MetricsExposer.call_args.kwargs
        assert kwargs["pod_id"] == ""
        assert kwargs["metric_name"] == "foo"
        assert kwargs["metric_value"] == 0
        patched.setup_logging.assert_called_once_with(level="INFO", json_output=False)

    def test_metric_value_must_fit_int64(self, patched):
        result = runner.invoke(exposer_app, ["--pod_id=abc", f"--metric_value={2**63}"])

        assert result.exit_code == 2
        patched.MetricsExposer.assert_not_called()

    def test_metric_value_int64_bounds_accepted(self, patched):
        result = runner.invoke(exposer_app, [f"--metric_value={-(2**63)}"])

        assert result.exit_code == 0, result.stdout
        assert patched.MetricsExposer.call_args.kwargs["metric_value"] == -(2**63)

    def test_metadata_failure_exits(self, patched):
        patched.discover.side_effect = MetadataError("metadata server unreachable")

        result = runner.invoke(exposer_app, ["--pod_id=abc"])

        assert result.exit_code == 1
        patched.MetricsExposer.assert_not_called()

    def test_interrupt_exits_cleanly(self, patched):
        patched.MetricsExposer.return_value.run.side_effect = KeyboardInterrupt

        result = runner.invoke(exposer_app, ["--pod_id=abc"])

        assert result.exit_code == 0

    def test_iteration_limit_is_hidden_from_help(self, patched):
        result = runner.invoke(exposer_app, ["--help"])

        assert result.exit_code == 0
        assert "--metric_value" in result.stdout
        assert "--max-iterations" not in result.stdout
