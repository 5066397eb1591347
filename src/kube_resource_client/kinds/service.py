"""Service resources."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Self

from kube_resource_client.capabilities import Capability
from kube_resource_client.kinds.mixins import HasSelector
from kube_resource_client.resource import K8sResource


class Service(
    HasSelector,
    K8sResource,
    kind="Service",
    plural="services",
    capabilities={Capability.WATCH},
):
    def set_ports(self, ports: Iterable[Mapping[str, Any]]) -> Self:
        return self.set_spec("ports", [dict(port) for port in ports])

    def add_port(self, port: Mapping[str, Any]) -> Self:
        return self.add_to_spec("ports", dict(port))

    def get_ports(self) -> list[dict[str, Any]]:
        return self.get_spec("ports", [])

    def get_cluster_ip(self) -> str | None:
        return self.get_spec("clusterIP")
