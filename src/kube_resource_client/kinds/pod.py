"""Pod resources."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Self

from kube_resource_client.capabilities import Capability
from kube_resource_client.kinds.mixins import HasSpec, HasStatusConditions
from kube_resource_client.resource import K8sResource


class Pod(
    HasSpec,
    HasStatusConditions,
    K8sResource,
    kind="Pod",
    plural="pods",
    capabilities={Capability.WATCH, Capability.LOGS, Capability.EXEC, Capability.ATTACH},
):
    """A pod: the only kind supporting logs, exec and attach."""

    def set_containers(self, containers: Iterable[Mapping[str, Any]]) -> Self:
        return self.set_spec("containers", [dict(container) for container in containers])

    def add_container(self, container: Mapping[str, Any]) -> Self:
        return self.add_to_spec("containers", dict(container))

    def get_containers(self) -> list[dict[str, Any]]:
        return self.get_spec("containers", [])

    def set_restart_policy(self, policy: str) -> Self:
        return self.set_spec("restartPolicy", policy)

    def get_phase(self) -> str | None:
        return self.get_status("phase")

    def get_pod_ips(self) -> list[str]:
        return [entry.get("ip") for entry in self.get_status("podIPs", []) if entry.get("ip")]

    def is_running(self) -> bool:
        return self.get_phase() == "Running"

    def is_successful(self) -> bool:
        return self.get_phase() == "Succeeded"

    def is_ready(self) -> bool:
        return self.condition_is_true("Ready")

    def containers_are_ready(self) -> bool:
        statuses = self.get_status("containerStatuses", [])
        return bool(statuses) and all(status.get("ready") for status in statuses)
