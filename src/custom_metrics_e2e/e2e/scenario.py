"""The Stackdriver custom metrics adapter scenario.

Steps, in order:

1. register the ``foo-metric`` and ``unused-metric`` descriptors,
2. provision the adapter (RBAC, Deployment, Service, APIService),
3. start two exposer pods emitting 448 and 446,
4. wait once for pods to start and points to arrive,
5. verify discovery, the single-pod query and the label-selector query.

Teardown of each step is registered before the step runs and executed in
reverse order whether verification passes or not.
"""

import time
from collections.abc import Callable
from contextlib import ExitStack
from dataclasses import dataclass
from dataclasses import field

from ..config.settings import SUPPORTED_PROVIDERS
from ..config.settings import E2ESettings
from ..gcp.config import AuthMethod
from ..gcp.config import GCPConfig
from ..gcp.config import get_config
from ..gcp.config import validate_config
from ..gcp.monitoring import MonitoringManager
from ..k8s.clients import ClusterClients
from ..k8s.custom_metrics import CustomMetricsClient
from ..k8s.custom_metrics import MetricValue
from ..k8s.manifests import CUSTOM_METRIC_NAME
from ..k8s.manifests import EXPOSER_LABEL
from ..k8s.manifests import EXPOSER_POD_1
from ..k8s.manifests import EXPOSER_VALUES
from ..k8s.manifests import UNUSED_METRIC_NAME
from ..k8s.manifests import AdapterManifests
from ..k8s.provisioner import AdapterProvisioner
from ..shared.exceptions import ConfigurationError
from ..shared.exceptions import ProviderNotSupportedError
from ..shared.logging import get_logger
from .verify import verify_object_value
from .verify import verify_pod_values
from .verify import verify_supported_metrics

logger = get_logger(__name__)

TEST_METRICS = (CUSTOM_METRIC_NAME, UNUSED_METRIC_NAME)


def require_supported_provider(provider: str) -> None:
    if provider not in SUPPORTED_PROVIDERS:
        raise ProviderNotSupportedError(
            f"Provider {provider or '<unset>'} is not one of {', '.join(SUPPORTED_PROVIDERS)}",
            error_code="skip",
        )


def label_selector(labels: dict[str, str]) -> str:
    return ",".join(f"{key}={value}" for key, value in labels.items())


@dataclass
class ScenarioResult:
    """What the Custom Metrics API returned during a passing run."""

    resources: list[str] = field(default_factory=list)
    object_value: MetricValue | None = None
    pod_values: list[MetricValue] = field(default_factory=list)
    duration_seconds: float = 0.0


class AdapterScenario:
    """Runs the adapter scenario against one cluster and monitoring project."""

    def __init__(
        self,
        settings: E2ESettings,
        monitoring: MonitoringManager,
        provisioner: AdapterProvisioner,
        metrics_client: CustomMetricsClient,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings
        self.monitoring = monitoring
        self.provisioner = provisioner
        self.metrics_client = metrics_client
        self._sleep = sleep

    @classmethod
    def from_settings(cls, settings: E2ESettings) -> "AdapterScenario":
        """Wire real clients from settings, kubeconfig and GCP configuration."""
        if settings.project_id:
            gcp_config = GCPConfig(
                project_id=settings.project_id, auth_method=AuthMethod.APPLICATION_DEFAULT
            )
        else:
            gcp_config = get_config()
        if not validate_config(gcp_config):
            raise ConfigurationError(
                f"Invalid GCP configuration for project {gcp_config.project_id}"
            )

        clients = ClusterClients.from_settings(settings)
        return cls(
            settings=settings,
            monitoring=MonitoringManager(gcp_config),
            provisioner=AdapterProvisioner(clients, AdapterManifests.build(settings)),
            metrics_client=CustomMetricsClient(
                clients, settings.custom_metrics_group, settings.custom_metrics_version
            ),
        )

    def setup(self, stack: ExitStack) -> None:
        """Create descriptors, adapter and exposer pods, registering teardown on ``stack``."""
        stack.callback(self.monitoring.delete_descriptors, TEST_METRICS)
        self.monitoring.create_descriptors(TEST_METRICS)

        stack.callback(self.provisioner.cleanup_adapter)
        self.provisioner.create_adapter()

        stack.callback(self.provisioner.cleanup_exposer_pods)
        self.provisioner.create_exposer_pods()

    def verify(self) -> ScenarioResult:
        """Query the Custom Metrics API and check every response."""
        namespace = self.settings.namespace

        resources = self.metrics_client.list_metric_resources()
        verify_supported_metrics(resources, TEST_METRICS)

        object_value = self.metrics_client.get_for_object(
            namespace, EXPOSER_POD_1, CUSTOM_METRIC_NAME
        )
        verify_object_value(object_value, CUSTOM_METRIC_NAME, EXPOSER_VALUES[EXPOSER_POD_1])

        pod_values = self.metrics_client.get_for_objects(
            namespace, label_selector(EXPOSER_LABEL), CUSTOM_METRIC_NAME
        )
        verify_pod_values(pod_values, CUSTOM_METRIC_NAME, EXPOSER_VALUES)

        return ScenarioResult(
            resources=resources, object_value=object_value, pod_values=pod_values
        )

    def run(self) -> ScenarioResult:
        """Run the whole scenario.

        Raises:
            ProviderNotSupportedError: the provider cannot host the adapter
            CustomMetricsE2EError: any setup, query or assertion failure
        """
        require_supported_provider(self.settings.provider)
        started = time.monotonic()

        with ExitStack() as stack:
            self.setup(stack)

            logger.info(
                f"Waiting {self.settings.settle_seconds:.0f}s for exposer pods to export metrics"
            )
            self._sleep(self.settings.settle_seconds)

            result = self.verify()

        result.duration_seconds = round(time.monotonic() - started, 3)
        logger.info(f"Custom metrics adapter scenario passed in {result.duration_seconds}s")
        return result

    def cleanup(self) -> None:
        """Best-effort removal of everything the scenario creates."""
        self.provisioner.cleanup_all()
        self.monitoring.delete_descriptors(TEST_METRICS)
