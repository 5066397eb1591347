"""Base class for every resource kind.

A kind is declared by subclassing :class:`K8sResource` with class keywords:

    class Job(HasSpec, K8sResource, kind="Job", version="batch/v1",
              plural="jobs", capabilities={Capability.WATCH}):
        ...

The keywords register the kind (so manifests and watch events can be turned
into the right class) and its capability set. Behaviour shared between kinds
lives in :mod:`kube_resource_client.kinds.mixins`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import TYPE_CHECKING, Any, ClassVar, Self

import structlog

from kube_resource_client.capabilities import (
    Capability,
    capabilities_of,
    ensure_supported,
    register_capabilities,
)
from kube_resource_client.exceptions import KubernetesError, KubernetesNotFoundError
from kube_resource_client.lifecycle import (
    DEFAULT_PROPAGATION_POLICY,
    ResourceLifecycle,
    delete_options,
)
from kube_resource_client.operations import Operation
from kube_resource_client.paths import ResourceLocator

if TYPE_CHECKING:
    from kube_resource_client.cluster import KubernetesCluster
    from kube_resource_client.kinds.scale import Scale
    from kube_resource_client.resources_list import ResourcesList

logger = structlog.get_logger()

DEFAULT_NAMESPACE = "default"

_kinds: dict[str, type[K8sResource]] = {}


def register_kind(resource_class: type[K8sResource]) -> None:
    _kinds[resource_class.kind] = resource_class


def resource_class_for(kind: str) -> type[K8sResource]:
    """Look up the class registered for ``kind``.

    Raises:
        ValueError: If no class is registered for the kind.
    """
    try:
        return _kinds[kind]
    except KeyError:
        raise ValueError(f"Unsupported resource kind: {kind!r}") from None


def registered_kinds() -> dict[str, type[K8sResource]]:
    return dict(_kinds)


class K8sResource(ResourceLifecycle):
    """A resource document bound to a cluster.

    Attributes:
        kind: The resource ``kind``.
        default_version: ``apiVersion`` used when the document sets none.
        plural: Lower-case plural used in REST paths.
        namespaceable: Whether the kind lives inside a namespace.
    """

    kind: ClassVar[str]
    default_version: ClassVar[str] = "v1"
    plural: ClassVar[str]
    namespaceable: ClassVar[bool] = True

    def __init_subclass__(
        cls,
        kind: str | None = None,
        version: str | None = None,
        plural: str | None = None,
        namespaced: bool | None = None,
        capabilities: Iterable[Capability] = (),
        **kwargs: Any,
    ) -> None:
        super().__init_subclass__(**kwargs)
        if kind is None:
            return
        cls.kind = kind
        cls.default_version = version or "v1"
        cls.plural = plural or f"{kind.lower()}s"
        if namespaced is not None:
            cls.namespaceable = namespaced
        register_capabilities(cls, capabilities)
        register_kind(cls)

    def __init__(
        self,
        cluster: KubernetesCluster | None = None,
        attributes: Mapping[str, Any] | None = None,
    ) -> None:
        """Create a detached resource.

        Args:
            cluster: Cluster the verbs run against. Can be set later with
                :meth:`on_cluster`.
            attributes: Initial document; ``apiVersion`` and ``kind`` default
                to the class values.
        """
        super().__init__(attributes)
        self._cluster = cluster
        if not self.attributes.has("apiVersion"):
            self.attributes.set("apiVersion", self.default_version)
        if not self.attributes.has("kind"):
            self.attributes.set("kind", self.kind)

    def __repr__(self) -> str:
        location = f"{self.namespace}/{self.name}" if self.namespaceable else self.name
        return f"<{type(self).__name__} {location} synced={self.synced}>"

    # =========================================================================
    # Cluster binding
    # =========================================================================

    def on_cluster(self, cluster: KubernetesCluster) -> Self:
        self._cluster = cluster
        return self

    @property
    def cluster(self) -> KubernetesCluster:
        if self._cluster is None:
            raise KubernetesError(
                f"{self.kind} is not bound to a cluster; call on_cluster() first",
                resource_type=self.kind,
                resource_name=self.name,
            )
        return self._cluster

    @classmethod
    def capabilities(cls) -> frozenset[Capability]:
        return capabilities_of(cls)

    # =========================================================================
    # Identity and metadata
    # =========================================================================

    @property
    def api_version(self) -> str:
        return self.get_attribute("apiVersion", self.default_version)

    def set_api_version(self, api_version: str) -> Self:
        return self.set_attribute("apiVersion", api_version)

    @property
    def namespace(self) -> str | None:
        """The namespace of the resource, ``None`` for cluster-scoped kinds.

        Falls back to the cluster's default namespace, then ``default``.
        """
        if not self.namespaceable:
            return None
        namespace = self.get_attribute("metadata.namespace")
        if namespace:
            return namespace
        if self._cluster is not None:
            return self._cluster.default_namespace
        return DEFAULT_NAMESPACE

    def set_name(self, name: str) -> Self:
        return self.set_attribute("metadata.name", name)

    def set_namespace(self, namespace: str | K8sResource) -> Self:
        """Set the namespace by name or from a Namespace resource."""
        if isinstance(namespace, K8sResource):
            namespace = namespace.name or ""
        return self.set_attribute("metadata.namespace", namespace)

    def get_labels(self) -> dict[str, str]:
        return self.get_attribute("metadata.labels", {})

    def set_labels(self, labels: Mapping[str, str]) -> Self:
        return self.set_attribute("metadata.labels", dict(labels))

    def get_label(self, name: str, default: str | None = None) -> str | None:
        return self.get_labels().get(name, default)

    def set_label(self, name: str, value: str) -> Self:
        return self.set_attribute("metadata.labels", {**self.get_labels(), name: value})

    def get_annotations(self) -> dict[str, str]:
        return self.get_attribute("metadata.annotations", {})

    def set_annotations(self, annotations: Mapping[str, str]) -> Self:
        return self.set_attribute("metadata.annotations", dict(annotations))

    # =========================================================================
    # Paths
    # =========================================================================

    @property
    def locator(self) -> ResourceLocator:
        return ResourceLocator(
            api_version=self.api_version,
            plural=self.plural,
            name=self.name,
            namespace=self.namespace,
            namespaced=self.namespaceable,
        )

    def all_resources_path(self, with_namespace: bool = True) -> str:
        return self.locator.collection_path(with_namespace)

    def resource_path(self) -> str:
        return self.locator.item_path()

    def all_resources_watch_path(self) -> str:
        return self.locator.collection_watch_path()

    def resource_watch_path(self) -> str:
        return self.locator.item_watch_path()

    def resource_scale_path(self) -> str:
        return self.locator.scale_path()

    def resource_log_path(self) -> str:
        return self.locator.log_path()

    def resource_exec_path(self) -> str:
        return self.locator.exec_path()

    def resource_attach_path(self) -> str:
        return self.locator.attach_path()

    # =========================================================================
    # Core verbs
    # =========================================================================

    def _run(
        self,
        operation: Operation,
        path: str,
        payload: Any = None,
        query: Mapping[str, Any] | None = None,
        *,
        resource_class: type[K8sResource] | None = None,
        handler: Callable[..., Any] | None = None,
    ) -> Any:
        return self.cluster.dispatcher.run(
            operation,
            path,
            payload,
            query,
            resource_class=resource_class,
            handler=handler,
        )

    def get(self, query: Mapping[str, Any] | None = None) -> Self:
        """Fetch a fresh instance of this resource from the cluster."""
        return self._run(Operation.GET, self.resource_path(), None, query, resource_class=type(self))

    def refresh(self, query: Mapping[str, Any] | None = None) -> Self:
        """Replace the local state with the server's."""
        return self.sync_with(self.get(query).to_dict())

    def refresh_original(self, query: Mapping[str, Any] | None = None) -> Self:
        """Re-fetch only the original snapshot, keeping local edits."""
        return self.sync_original_with(self.get(query).to_dict())

    def all(self, query: Mapping[str, Any] | None = None) -> ResourcesList:
        """List the resources of this kind in the resource's namespace."""
        return self._run(
            Operation.GET, self.all_resources_path(), None, query, resource_class=type(self)
        )

    def all_namespaces(self, query: Mapping[str, Any] | None = None) -> ResourcesList:
        """List the resources of this kind across every namespace."""
        return self._run(
            Operation.GET,
            self.all_resources_path(with_namespace=False),
            None,
            query,
            resource_class=type(self),
        )

    def exists(self, query: Mapping[str, Any] | None = None) -> bool:
        try:
            self.get(query)
        except KubernetesNotFoundError:
            return False
        return True

    def create(self, query: Mapping[str, Any] | None = None) -> Self:
        """Create the resource and adopt the server's response."""
        instance = self._run(
            Operation.CREATE,
            self.all_resources_path(),
            self.to_dict(),
            query,
            resource_class=type(self),
        )
        return self.sync_with(instance.to_dict())

    def update(self, query: Mapping[str, Any] | None = None) -> bool:
        """Replace the remote resource with the local state.

        The original snapshot is re-fetched and the resourceVersion refreshed
        first; when nothing differs from the server no replace is sent.
        """
        self.refresh_original()
        self.refresh_resource_version()

        if not self.has_changed():
            logger.debug("update_skipped_no_changes", kind=self.kind, name=self.name)
            return True

        instance = self._run(
            Operation.REPLACE,
            self.resource_path(),
            self.to_dict(),
            query,
            resource_class=type(self),
        )
        self.sync_with(instance.to_dict())
        return True

    def delete(
        self,
        query: Mapping[str, Any] | None = None,
        grace_period: int | None = None,
        propagation_policy: str = DEFAULT_PROPAGATION_POLICY,
    ) -> bool:
        """Delete the resource with resourceVersion/uid preconditions.

        Does nothing for instances that were never synced. The instance keeps
        its attributes afterwards but is no longer marked as synced.
        """
        if not self.is_synced():
            logger.debug("delete_skipped_not_synced", kind=self.kind, name=self.name)
            return True

        self.refresh()
        preconditions = self.build_delete_preconditions(grace_period, propagation_policy)

        self._run(Operation.DELETE, self.resource_path(), delete_options(preconditions), query)
        self.mark_detached()
        return True

    def create_or_update(self, query: Mapping[str, Any] | None = None) -> Self:
        """Update the resource if it exists remotely, create it otherwise."""
        if self.exists(query):
            self.update(query)
            return self
        return self.create(query)

    def sync_with_cluster(self, query: Mapping[str, Any] | None = None) -> Self:
        """Return the remote resource, creating it first if it is missing."""
        try:
            return self.get(query)
        except KubernetesNotFoundError:
            return self.create(query)

    # =========================================================================
    # Capability-gated verbs
    # =========================================================================

    def watch_all(
        self, handler: Callable[[str, Self], Any], query: Mapping[str, Any] | None = None
    ) -> Any:
        """Watch every resource of this kind until ``handler`` returns a value."""
        ensure_supported(type(self), Capability.WATCH, self.kind)
        return self._run(
            Operation.WATCH,
            self.all_resources_watch_path(),
            None,
            query,
            resource_class=type(self),
            handler=handler,
        )

    def watch(
        self, handler: Callable[[str, Self], Any], query: Mapping[str, Any] | None = None
    ) -> Any:
        """Watch this resource until ``handler`` returns a value."""
        ensure_supported(type(self), Capability.WATCH, self.kind)
        return self._run(
            Operation.WATCH,
            self.resource_watch_path(),
            None,
            query,
            resource_class=type(self),
            handler=handler,
        )

    def logs(self, query: Mapping[str, Any] | None = None) -> str:
        """Fetch the resource's logs as text."""
        ensure_supported(type(self), Capability.LOGS, self.kind)
        return self._run(Operation.LOG, self.resource_log_path(), None, query)

    def watch_logs(
        self, handler: Callable[[str], Any], query: Mapping[str, Any] | None = None
    ) -> Any:
        """Follow the resource's logs line by line until ``handler`` returns a value."""
        ensure_supported(type(self), Capability.LOGS, self.kind)
        ensure_supported(type(self), Capability.WATCH, self.kind)
        return self._run(
            Operation.WATCH_LOGS, self.resource_log_path(), None, query, handler=handler
        )

    def scaler(self) -> Scale:
        """Fetch the scale sub-resource bound to this resource."""
        from kube_resource_client.kinds.scale import Scale

        ensure_supported(type(self), Capability.SCALE, self.kind)
        scale: Scale = self._run(
            Operation.GET, self.resource_scale_path(), None, None, resource_class=Scale
        )
        return scale.set_scalable_resource(self)

    def exec(
        self,
        command: str | Sequence[str],
        container: str | None = None,
        query: Mapping[str, Any] | None = None,
        handler: Callable[[dict[str, str]], Any] | None = None,
    ) -> Any:
        """Run a command inside the resource.

        Without a handler every channel message is collected and returned
        once the command finishes.
        """
        ensure_supported(type(self), Capability.EXEC, self.kind)
        arguments = [command] if isinstance(command, str) else list(command)
        params = {"command": arguments, "container": container, **(query or {})}
        return self._run(Operation.EXEC, self.resource_exec_path(), None, params, handler=handler)

    def attach(
        self,
        handler: Callable[[dict[str, str]], Any] | None = None,
        container: str | None = None,
        query: Mapping[str, Any] | None = None,
    ) -> Any:
        """Attach to the resource's running process."""
        ensure_supported(type(self), Capability.ATTACH, self.kind)
        params = {"container": container, **(query or {})}
        return self._run(
            Operation.ATTACH, self.resource_attach_path(), None, params, handler=handler
        )
