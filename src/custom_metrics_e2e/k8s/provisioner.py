"""Creation and teardown of the adapter and exposer objects."""

from collections.abc import Callable
from typing import Any

from kubernetes.client.exceptions import ApiException

from ..shared.exceptions import ClusterProvisioningError
from ..shared.logging import get_logger
from .clients import ClusterClients
from .manifests import AdapterManifests

logger = get_logger(__name__)


def describe(obj: Any) -> str:
    """Human-readable ``Kind namespace/name`` for log messages."""
    meta = obj.metadata
    location = f"{meta.namespace}/{meta.name}" if meta.namespace else meta.name
    return f"{obj.kind} {location}"


class AdapterProvisioner:
    """Creates and deletes :class:`AdapterManifests` objects through typed API clients.

    Creation stops at the first failure. Deletion is best effort: every
    object is attempted and errors are only logged, so teardown of a
    partially provisioned cluster still removes whatever exists.
    """

    def __init__(self, clients: ClusterClients, manifests: AdapterManifests):
        self.clients = clients
        self.manifests = manifests

    def _operations(self, kind: str) -> tuple[Callable[[Any], Any], Callable[[Any], Any]]:
        core = self.clients.core_v1
        apps = self.clients.apps_v1
        rbac = self.clients.rbac_v1
        registration = self.clients.apiregistration_v1

        operations = {
            "ServiceAccount": (
                lambda o: core.create_namespaced_service_account(o.metadata.namespace, o),
                lambda o: core.delete_namespaced_service_account(
                    o.metadata.name, o.metadata.namespace
                ),
            ),
            "Deployment": (
                lambda o: apps.create_namespaced_deployment(o.metadata.namespace, o),
                lambda o: apps.delete_namespaced_deployment(o.metadata.name, o.metadata.namespace),
            ),
            "Service": (
                lambda o: core.create_namespaced_service(o.metadata.namespace, o),
                lambda o: core.delete_namespaced_service(o.metadata.name, o.metadata.namespace),
            ),
            "Pod": (
                lambda o: core.create_namespaced_pod(o.metadata.namespace, o),
                lambda o: core.delete_namespaced_pod(o.metadata.name, o.metadata.namespace),
            ),
            "RoleBinding": (
                lambda o: rbac.create_namespaced_role_binding(o.metadata.namespace, o),
                lambda o: rbac.delete_namespaced_role_binding(
                    o.metadata.name, o.metadata.namespace
                ),
            ),
            "ClusterRole": (
                rbac.create_cluster_role,
                lambda o: rbac.delete_cluster_role(o.metadata.name),
            ),
            "ClusterRoleBinding": (
                rbac.create_cluster_role_binding,
                lambda o: rbac.delete_cluster_role_binding(o.metadata.name),
            ),
            "APIService": (
                registration.create_api_service,
                lambda o: registration.delete_api_service(o.metadata.name),
            ),
        }
        try:
            return operations[kind]
        except KeyError:
            raise ClusterProvisioningError(f"Unsupported object kind: {kind}") from None

    def create(self, obj: Any) -> None:
        """Create one object.

        Raises:
            ClusterProvisioningError: if the API server rejects the object
        """
        create, _ = self._operations(obj.kind)
        try:
            create(obj)
        except ApiException as e:
            raise ClusterProvisioningError(
                f"Failed to create {describe(obj)}: {e.reason}",
                error_code=str(e.status),
                details={"body": e.body},
            ) from e
        logger.info(f"Created {describe(obj)}")

    def delete(self, obj: Any) -> None:
        """Delete one object, logging instead of raising."""
        _, delete = self._operations(obj.kind)
        try:
            delete(obj)
            logger.info(f"Deleted {describe(obj)}")
        except ApiException as e:
            if e.status == 404:
                logger.debug(f"{describe(obj)} not found, nothing to delete")
            else:
                logger.warning(f"Failed to delete {describe(obj)}: {e.status} {e.reason}")
        except Exception as e:
            logger.warning(f"Failed to delete {describe(obj)}: {e}")

    def create_adapter(self) -> None:
        for obj in self.manifests.adapter_objects():
            self.create(obj)

    def cleanup_adapter(self) -> None:
        for obj in reversed(self.manifests.adapter_objects()):
            self.delete(obj)

    def create_exposer_pods(self) -> None:
        for pod in self.manifests.exposer_pods:
            self.create(pod)

    def cleanup_exposer_pods(self) -> None:
        for pod in self.manifests.exposer_pods:
            self.delete(pod)

    def cleanup_all(self) -> None:
        """Remove pods first, then the adapter."""
        self.cleanup_exposer_pods()
        self.cleanup_adapter()
