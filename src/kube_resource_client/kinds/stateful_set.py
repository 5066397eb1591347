"""StatefulSet resources."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, Self

from kube_resource_client.capabilities import Capability
from kube_resource_client.kinds.mixins import (
    CanScale,
    HasPods,
    HasReplicas,
    HasSelector,
    HasStatusConditions,
    HasTemplate,
)
from kube_resource_client.kinds.persistent_volume_claim import PersistentVolumeClaim
from kube_resource_client.kinds.service import Service
from kube_resource_client.resource import K8sResource


class StatefulSet(
    CanScale,
    HasPods,
    HasReplicas,
    HasSelector,
    HasStatusConditions,
    HasTemplate,
    K8sResource,
    kind="StatefulSet",
    version="apps/v1",
    plural="statefulsets",
    capabilities={Capability.WATCH, Capability.SCALE},
):
    """A set of pods with stable identities and storage."""

    def set_update_strategy(self, strategy: str, partition: int = 0) -> Self:
        if strategy == "RollingUpdate":
            self.set_spec("updateStrategy.rollingUpdate.partition", partition)
        return self.set_spec("updateStrategy.type", strategy)

    def set_service(self, service: str | Service) -> Self:
        """Set the governing service by name or from a Service resource."""
        if isinstance(service, Service):
            service = service.name or ""
        return self.set_spec("serviceName", service)

    def get_service(self) -> str | None:
        return self.get_spec("serviceName")

    def get_service_instance(self) -> Service:
        """Fetch the governing Service from the cluster."""
        return self.cluster.get_by_name(Service, self.get_service() or "", self.namespace)

    def set_volume_claims(self, claims: Iterable[dict[str, Any] | PersistentVolumeClaim]) -> Self:
        documents = [
            claim.to_dict() if isinstance(claim, PersistentVolumeClaim) else claim
            for claim in claims
        ]
        return self.set_spec("volumeClaimTemplates", documents)

    def get_volume_claims(
        self, as_instance: bool = True
    ) -> list[PersistentVolumeClaim] | list[dict[str, Any]]:
        claims = self.get_spec("volumeClaimTemplates", [])
        if not as_instance:
            return claims
        return [PersistentVolumeClaim(self._cluster, claim) for claim in claims]

    def default_pods_selector(self) -> dict[str, str]:
        return {"statefulset-name": self.name or ""}

    def get_current_replicas_count(self) -> int:
        return self.get_status("currentReplicas", 0)
