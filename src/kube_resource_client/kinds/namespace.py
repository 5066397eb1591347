"""Namespace resources."""

from __future__ import annotations

from kube_resource_client.capabilities import Capability
from kube_resource_client.kinds.mixins import HasStatus
from kube_resource_client.resource import K8sResource


class Namespace(
    HasStatus,
    K8sResource,
    kind="Namespace",
    plural="namespaces",
    namespaced=False,
    capabilities={Capability.WATCH},
):
    """A cluster-scoped namespace; paths never carry a namespace segment."""

    def is_active(self) -> bool:
        return self.get_status("phase") == "Active"

    def is_terminating(self) -> bool:
        return self.get_status("phase") == "Terminating"
