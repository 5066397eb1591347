"""Cluster handle: a transport, a default namespace and resource factories.

Example:
    ```python
    from kube_resource_client import KubernetesCluster

    cluster = KubernetesCluster.from_config()
    job = cluster.job().set_name("batch-1").set_namespace("jobs")
    job.create()
    ```
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

import structlog
import yaml

from kube_resource_client.config import ClientConfig
from kube_resource_client.kinds import (
    ConfigMap,
    Deployment,
    Job,
    Namespace,
    PersistentVolumeClaim,
    Pod,
    Service,
    StatefulSet,
)
from kube_resource_client.operations import OperationDispatcher
from kube_resource_client.resource import DEFAULT_NAMESPACE, K8sResource, resource_class_for
from kube_resource_client.resources_list import ResourcesList
from kube_resource_client.transport import KubernetesTransport, Transport

logger = structlog.get_logger()

R = TypeVar("R", bound=K8sResource)


class KubernetesCluster:
    """Entry point for building resources bound to one API server.

    Attributes:
        transport: Connection used for every operation.
        default_namespace: Namespace applied to resources that set none.
        dispatcher: Runs verbs on behalf of the bound resources.
    """

    def __init__(self, transport: Transport, *, namespace: str = DEFAULT_NAMESPACE) -> None:
        self.transport = transport
        self.default_namespace = namespace
        self.dispatcher = OperationDispatcher(self)

    @classmethod
    def from_config(cls, config: ClientConfig | None = None) -> KubernetesCluster:
        """Build a cluster on top of :class:`KubernetesTransport`.

        Args:
            config: Connection settings. Defaults to ``ClientConfig.from_env()``.
        """
        config = config or ClientConfig.from_env()
        transport = KubernetesTransport.from_config(config)
        logger.debug("cluster_initialized", context=config.context, namespace=config.namespace)
        return cls(transport, namespace=config.namespace)

    def close(self) -> None:
        close = getattr(self.transport, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> KubernetesCluster:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    # =========================================================================
    # Generic access
    # =========================================================================

    def resource(self, resource_class: type[R], attributes: Mapping[str, Any] | None = None) -> R:
        """Create a detached instance of ``resource_class`` bound to this cluster."""
        return resource_class(self, attributes)

    def get_by_name(
        self,
        resource_class: type[R],
        name: str,
        namespace: str | None = None,
        query: Mapping[str, Any] | None = None,
    ) -> R:
        """Fetch a single resource by name."""
        instance = self.resource(resource_class).set_name(name)
        if namespace:
            instance.set_namespace(namespace)
        return instance.get(query)

    def get_all(
        self,
        resource_class: type[K8sResource],
        namespace: str | None = None,
        query: Mapping[str, Any] | None = None,
    ) -> ResourcesList:
        """List the resources of a kind in ``namespace`` (or the default one)."""
        instance = self.resource(resource_class)
        if namespace:
            instance.set_namespace(namespace)
        return instance.all(query)

    def get_all_from_all_namespaces(
        self, resource_class: type[K8sResource], query: Mapping[str, Any] | None = None
    ) -> ResourcesList:
        return self.resource(resource_class).all_namespaces(query)

    # =========================================================================
    # Manifests
    # =========================================================================

    def from_document(self, document: Mapping[str, Any]) -> K8sResource:
        """Instantiate the registered kind matching ``document["kind"]``.

        Raises:
            ValueError: If the document has no kind or the kind is unknown.
        """
        kind = document.get("kind")
        if not kind:
            raise ValueError("Manifest has no 'kind' field")
        return self.resource(resource_class_for(kind), document)

    def from_yaml(self, text: str) -> list[K8sResource]:
        """Instantiate every document of a (possibly multi-document) YAML manifest."""
        documents: Iterable[Any] = yaml.safe_load_all(text)
        return [self.from_document(document) for document in documents if document]

    # =========================================================================
    # Kind factories
    # =========================================================================

    def config_map(self, attributes: Mapping[str, Any] | None = None) -> ConfigMap:
        return self.resource(ConfigMap, attributes)

    def deployment(self, attributes: Mapping[str, Any] | None = None) -> Deployment:
        return self.resource(Deployment, attributes)

    def job(self, attributes: Mapping[str, Any] | None = None) -> Job:
        return self.resource(Job, attributes)

    def namespace(self, attributes: Mapping[str, Any] | None = None) -> Namespace:
        return self.resource(Namespace, attributes)

    def persistent_volume_claim(
        self, attributes: Mapping[str, Any] | None = None
    ) -> PersistentVolumeClaim:
        return self.resource(PersistentVolumeClaim, attributes)

    def pod(self, attributes: Mapping[str, Any] | None = None) -> Pod:
        return self.resource(Pod, attributes)

    def service(self, attributes: Mapping[str, Any] | None = None) -> Service:
        return self.resource(Service, attributes)

    def stateful_set(self, attributes: Mapping[str, Any] | None = None) -> StatefulSet:
        return self.resource(StatefulSet, attributes)
