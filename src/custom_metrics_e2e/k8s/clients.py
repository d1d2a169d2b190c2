"""Construction of the Kubernetes API clients used by the scenario."""

from dataclasses import dataclass

from kubernetes import client
from kubernetes import config
from kubernetes.config.config_exception import ConfigException

from ..config.settings import E2ESettings
from ..shared.exceptions import ConfigurationError
from ..shared.logging import get_logger

logger = get_logger(__name__)


def load_api_client(settings: E2ESettings) -> client.ApiClient:
    """Build an ``ApiClient`` from kubeconfig, falling back to in-cluster config.

    Raises:
        ConfigurationError: if neither configuration source is usable
    """
    try:
        api_client = config.new_client_from_config(
            config_file=str(settings.kubeconfig) if settings.kubeconfig else None,
            context=settings.kube_context,
        )
        logger.debug(f"Loaded kubeconfig (context={settings.kube_context or 'current'})")
        return api_client
    except (ConfigException, FileNotFoundError) as kubeconfig_error:
        logger.debug(f"Kubeconfig unavailable ({kubeconfig_error}), trying in-cluster config")
        try:
            configuration = client.Configuration()
            config.load_incluster_config(client_configuration=configuration)
        except ConfigException as e:
            raise ConfigurationError(
                f"No usable Kubernetes configuration: {kubeconfig_error}; {e}"
            ) from e
        return client.ApiClient(configuration)


@dataclass
class ClusterClients:
    """Typed API groups sharing one ``ApiClient``."""

    api_client: client.ApiClient
    core_v1: client.CoreV1Api
    apps_v1: client.AppsV1Api
    rbac_v1: client.RbacAuthorizationV1Api
    apiregistration_v1: client.ApiregistrationV1Api
    custom_objects: client.CustomObjectsApi

    @classmethod
    def from_api_client(cls, api_client: client.ApiClient) -> "ClusterClients":
        return cls(
            api_client=api_client,
            core_v1=client.CoreV1Api(api_client),
            apps_v1=client.AppsV1Api(api_client),
            rbac_v1=client.RbacAuthorizationV1Api(api_client),
            apiregistration_v1=client.ApiregistrationV1Api(api_client),
            custom_objects=client.CustomObjectsApi(api_client),
        )

    @classmethod
    def from_settings(cls, settings: E2ESettings) -> "ClusterClients":
        return cls.from_api_client(load_api_client(settings))
