"""Kubernetes objects for the custom metrics adapter scenario.

Each builder returns a ``kubernetes.client`` model. The objects are plain
values; the provisioner decides when they are created and deleted.
"""

from dataclasses import dataclass
from typing import Any

import yaml
from kubernetes import client

from ..config.settings import E2ESettings

CUSTOM_METRIC_NAME = "foo-metric"
UNUSED_METRIC_NAME = "unused-metric"
METRIC_VALUE_1 = 448
METRIC_VALUE_2 = 446

ADAPTER_NAME = "custom-metrics-stackdriver-adapter"
EXPOSER_LABEL = {"name": "metric-exposer"}
EXPOSER_POD_1 = "metrics-exposer-1"
EXPOSER_POD_2 = "metrics-exposer-2"
EXPOSER_VALUES = {EXPOSER_POD_1: METRIC_VALUE_1, EXPOSER_POD_2: METRIC_VALUE_2}

RBAC_API_GROUP = "rbac.authorization.k8s.io"
ADAPTER_LABELS = {"run": ADAPTER_NAME, "k8s-app": ADAPTER_NAME}
ADAPTER_CPU = "200m"
ADAPTER_MEMORY = "250M"


def _service_account_subject(name: str, namespace: str) -> client.RbacV1Subject:
    return client.RbacV1Subject(api_group="", kind="ServiceAccount", name=name, namespace=namespace)


def _group_subject(name: str) -> client.RbacV1Subject:
    return client.RbacV1Subject(api_group=RBAC_API_GROUP, kind="Group", name=name)


def adapter_service_account(settings: E2ESettings) -> client.V1ServiceAccount:
    return client.V1ServiceAccount(
        api_version="v1",
        kind="ServiceAccount",
        metadata=client.V1ObjectMeta(name=ADAPTER_NAME, namespace=settings.namespace),
    )


def adapter_deployment(settings: E2ESettings) -> client.V1Deployment:
    """Single-replica adapter deployment.

    The adapter reads the legacy ``gke_container`` resource model, which is
    what the exposer writes.
    """
    resources = {"cpu": ADAPTER_CPU, "memory": ADAPTER_MEMORY}
    container = client.V1Container(
        name=f"pod-{ADAPTER_NAME}",
        image=settings.adapter_image,
        image_pull_policy="Always",
        command=[
            "/adapter",
            "--use-new-resource-model=false",
            "--requestheader-client-ca-file=/var/run/secrets/kubernetes.io/serviceaccount/ca.crt",
        ],
        resources=client.V1ResourceRequirements(limits=resources, requests=dict(resources)),
    )
    return client.V1Deployment(
        api_version="apps/v1",
        kind="Deployment",
        metadata=client.V1ObjectMeta(
            name=ADAPTER_NAME, namespace=settings.namespace, labels=dict(ADAPTER_LABELS)
        ),
        spec=client.V1DeploymentSpec(
            replicas=1,
            selector=client.V1LabelSelector(match_labels=dict(ADAPTER_LABELS)),
            template=client.V1PodTemplateSpec(
                metadata=client.V1ObjectMeta(
                    labels={**ADAPTER_LABELS, "kubernetes.io/cluster-service": "true"}
                ),
                spec=client.V1PodSpec(service_account_name=ADAPTER_NAME, containers=[container]),
            ),
        ),
    )


def adapter_service(settings: E2ESettings) -> client.V1Service:
    return client.V1Service(
        api_version="v1",
        kind="Service",
        metadata=client.V1ObjectMeta(
            name=ADAPTER_NAME,
            namespace=settings.namespace,
            labels={
                **ADAPTER_LABELS,
                "kubernetes.io/cluster-service": "true",
                "kubernetes.io/name": "Adapter",
            },
        ),
        spec=client.V1ServiceSpec(
            type="ClusterIP",
            selector=dict(ADAPTER_LABELS),
            ports=[client.V1ServicePort(port=443, protocol="TCP", target_port=443)],
        ),
    )


def auth_delegator_binding(settings: E2ESettings) -> client.V1ClusterRoleBinding:
    """Lets the adapter delegate authn/authz decisions to the API server."""
    return client.V1ClusterRoleBinding(
        api_version=f"{RBAC_API_GROUP}/v1",
        kind="ClusterRoleBinding",
        metadata=client.V1ObjectMeta(name="custom-metrics:system:auth-delegator"),
        role_ref=client.V1RoleRef(
            api_group=RBAC_API_GROUP, kind="ClusterRole", name="system:auth-delegator"
        ),
        subjects=[_service_account_subject(ADAPTER_NAME, settings.namespace)],
    )


def extension_auth_reader_binding(settings: E2ESettings) -> client.V1RoleBinding:
    """Lets the adapter read the extension-apiserver-authentication configmap."""
    return client.V1RoleBinding(
        api_version=f"{RBAC_API_GROUP}/v1",
        kind="RoleBinding",
        metadata=client.V1ObjectMeta(
            name="custom-metrics-authentication-reader", namespace="kube-system"
        ),
        role_ref=client.V1RoleRef(
            api_group=RBAC_API_GROUP, kind="Role", name="extension-apiserver-authentication-reader"
        ),
        subjects=[_service_account_subject(ADAPTER_NAME, settings.namespace)],
    )


def resource_reader_role() -> client.V1ClusterRole:
    return client.V1ClusterRole(
        api_version=f"{RBAC_API_GROUP}/v1",
        kind="ClusterRole",
        metadata=client.V1ObjectMeta(name="custom-metrics-resource-reader"),
        rules=[
            client.V1PolicyRule(
                api_groups=[""],
                resources=["pods", "nodes", "namespaces"],
                verbs=["get", "list", "watch"],
            )
        ],
    )


def resource_reader_binding(settings: E2ESettings) -> client.V1ClusterRoleBinding:
    return client.V1ClusterRoleBinding(
        api_version=f"{RBAC_API_GROUP}/v1",
        kind="ClusterRoleBinding",
        metadata=client.V1ObjectMeta(name="custom-metrics-resource-reader"),
        role_ref=client.V1RoleRef(
            api_group=RBAC_API_GROUP, kind="ClusterRole", name="custom-metrics-resource-reader"
        ),
        subjects=[_service_account_subject(ADAPTER_NAME, settings.namespace)],
    )


def custom_metrics_api_service(settings: E2ESettings) -> client.V1APIService:
    """Registers the adapter as the backend of the custom metrics API group."""
    return client.V1APIService(
        api_version="apiregistration.k8s.io/v1",
        kind="APIService",
        metadata=client.V1ObjectMeta(
            name=f"{settings.custom_metrics_version}.{settings.custom_metrics_group}"
        ),
        spec=client.V1APIServiceSpec(
            insecure_skip_tls_verify=True,
            group=settings.custom_metrics_group,
            version=settings.custom_metrics_version,
            group_priority_minimum=100,
            version_priority=100,
            service=client.ApiregistrationV1ServiceReference(
                name=ADAPTER_NAME, namespace=settings.namespace
            ),
        ),
    )


def custom_metrics_reader_role(settings: E2ESettings) -> client.V1ClusterRole:
    return client.V1ClusterRole(
        api_version=f"{RBAC_API_GROUP}/v1",
        kind="ClusterRole",
        metadata=client.V1ObjectMeta(name="custom-metrics-reader"),
        rules=[
            client.V1PolicyRule(
                api_groups=[settings.custom_metrics_group],
                resources=["*"],
                verbs=["list", "get", "watch"],
            )
        ],
    )


def custom_metrics_reader_binding(settings: E2ESettings) -> client.V1ClusterRoleBinding:
    """Opens the custom metrics API to anonymous readers and the default service account."""
    return client.V1ClusterRoleBinding(
        api_version=f"{RBAC_API_GROUP}/v1",
        kind="ClusterRoleBinding",
        metadata=client.V1ObjectMeta(name="all-metrics-reader"),
        role_ref=client.V1RoleRef(
            api_group=RBAC_API_GROUP, kind="ClusterRole", name="custom-metrics-reader"
        ),
        subjects=[
            _group_subject("system:anonymous"),
            _group_subject("system:unauthenticated"),
            _service_account_subject("default", settings.namespace),
        ],
    )


def metrics_exposer_pod(
    settings: E2ESettings, name: str, metric_value: int, metric_name: str = CUSTOM_METRIC_NAME
) -> client.V1Pod:
    """Pod running ``metrics-exposer`` for one constant value.

    The pod UID is injected through the downward API and expanded by the
    kubelet in the command line.
    """
    container = client.V1Container(
        name="metrics-exposer",
        image=settings.exposer_image,
        image_pull_policy="Always",
        command=[
            "metrics-exposer",
            "--pod_id=$(POD_ID)",
            f"--metric_name={metric_name}",
            f"--metric_value={metric_value}",
        ],
        env=[
            client.V1EnvVar(
                name="POD_ID",
                value_from=client.V1EnvVarSource(
                    field_ref=client.V1ObjectFieldSelector(field_path="metadata.uid")
                ),
            )
        ],
        ports=[client.V1ContainerPort(container_port=80)],
    )
    return client.V1Pod(
        api_version="v1",
        kind="Pod",
        metadata=client.V1ObjectMeta(
            name=name, namespace=settings.namespace, labels=dict(EXPOSER_LABEL)
        ),
        spec=client.V1PodSpec(containers=[container]),
    )


@dataclass
class AdapterManifests:
    """Every object the scenario creates, in creation order."""

    service_account: client.V1ServiceAccount
    deployment: client.V1Deployment
    service: client.V1Service
    auth_delegator: client.V1ClusterRoleBinding
    extension_auth_reader: client.V1RoleBinding
    resource_reader: client.V1ClusterRole
    resource_reader_binding: client.V1ClusterRoleBinding
    api_service: client.V1APIService
    metrics_reader: client.V1ClusterRole
    metrics_reader_binding: client.V1ClusterRoleBinding
    exposer_pods: list[client.V1Pod]

    @classmethod
    def build(cls, settings: E2ESettings) -> "AdapterManifests":
        return cls(
            service_account=adapter_service_account(settings),
            deployment=adapter_deployment(settings),
            service=adapter_service(settings),
            auth_delegator=auth_delegator_binding(settings),
            extension_auth_reader=extension_auth_reader_binding(settings),
            resource_reader=resource_reader_role(),
            resource_reader_binding=resource_reader_binding(settings),
            api_service=custom_metrics_api_service(settings),
            metrics_reader=custom_metrics_reader_role(settings),
            metrics_reader_binding=custom_metrics_reader_binding(settings),
            exposer_pods=[
                metrics_exposer_pod(settings, name, value) for name, value in EXPOSER_VALUES.items()
            ],
        )

    def adapter_objects(self) -> list[Any]:
        return [
            self.extension_auth_reader,
            self.service_account,
            self.deployment,
            self.service,
            self.auth_delegator,
            self.resource_reader,
            self.resource_reader_binding,
            self.api_service,
            self.metrics_reader,
            self.metrics_reader_binding,
        ]

    def all_objects(self) -> list[Any]:
        return [*self.adapter_objects(), *self.exposer_pods]


def render_manifests(objects: list[Any]) -> str:
    """Serialise model objects to a multi-document YAML string."""
    api_client = client.ApiClient()
    documents = [api_client.sanitize_for_serialization(obj) for obj in objects]
    return yaml.safe_dump_all(documents, sort_keys=False, default_flow_style=False)
