"""Deployment resources."""

from __future__ import annotations

from typing import Self

from kube_resource_client.capabilities import Capability
from kube_resource_client.kinds.mixins import (
    CanScale,
    HasPods,
    HasReplicas,
    HasSelector,
    HasStatusConditions,
    HasTemplate,
)
from kube_resource_client.resource import K8sResource


class Deployment(
    CanScale,
    HasPods,
    HasReplicas,
    HasSelector,
    HasStatusConditions,
    HasTemplate,
    K8sResource,
    kind="Deployment",
    version="apps/v1",
    plural="deployments",
    capabilities={Capability.WATCH, Capability.SCALE},
):
    def set_update_strategy(
        self, strategy: str, max_unavailable: int | str = "25%", max_surge: int | str = "25%"
    ) -> Self:
        if strategy == "RollingUpdate":
            self.set_spec("strategy.rollingUpdate.maxUnavailable", max_unavailable)
            self.set_spec("strategy.rollingUpdate.maxSurge", max_surge)
        return self.set_spec("strategy.type", strategy)

    def set_min_ready_seconds(self, seconds: int) -> Self:
        return self.set_spec("minReadySeconds", seconds)

    def default_pods_selector(self) -> dict[str, str]:
        return {"deployment-name": self.name or ""}

    def get_available_replicas_count(self) -> int:
        return self.get_status("availableReplicas", 0)

    def get_unavailable_replicas_count(self) -> int:
        return self.get_status("unavailableReplicas", 0)

    def get_updated_replicas_count(self) -> int:
        return self.get_status("updatedReplicas", 0)
