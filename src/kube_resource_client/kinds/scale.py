"""The scale sub-resource."""

from __future__ import annotations

from typing import TYPE_CHECKING, Self

from kube_resource_client.exceptions import KubernetesError
from kube_resource_client.kinds.mixins import HasSpec, HasStatus
from kube_resource_client.resource import K8sResource

if TYPE_CHECKING:
    from kube_resource_client.paths import ResourceLocator


class Scale(HasSpec, HasStatus, K8sResource, kind="Scale", version="autoscaling/v1", plural="scale"):
    """Replica count of a scalable resource, read and written independently.

    A Scale is bound to exactly one owner; all of its paths resolve to the
    owner's ``/scale`` sub-resource.
    """

    _scalable: K8sResource | None = None

    def set_scalable_resource(self, resource: K8sResource) -> Self:
        self._scalable = resource
        return self

    @property
    def scalable_resource(self) -> K8sResource:
        if self._scalable is None:
            raise KubernetesError(
                "Scale is not bound to a scalable resource",
                resource_type=self.kind,
                resource_name=self.name,
            )
        return self._scalable

    @property
    def locator(self) -> ResourceLocator:
        return self.scalable_resource.locator

    def resource_path(self) -> str:
        return self.scalable_resource.resource_scale_path()

    def all_resources_path(self, with_namespace: bool = True) -> str:
        return self.resource_path()

    def get_replicas(self) -> int:
        return self.get_spec("replicas", 0)

    def set_replicas(self, replicas: int) -> Self:
        return self.set_spec("replicas", replicas)

    def get_current_replicas(self) -> int:
        return self.get_status("replicas", 0)

    def get_selector(self) -> str | None:
        return self.get_status("selector")
