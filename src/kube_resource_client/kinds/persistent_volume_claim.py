"""PersistentVolumeClaim resources."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Self

from kube_resource_client.capabilities import Capability
from kube_resource_client.kinds.mixins import HasSpec, HasStatus
from kube_resource_client.resource import K8sResource


class PersistentVolumeClaim(
    HasSpec,
    HasStatus,
    K8sResource,
    kind="PersistentVolumeClaim",
    plural="persistentvolumeclaims",
    capabilities={Capability.WATCH},
):
    def set_capacity(self, size: int | str, unit: str = "Gi") -> Self:
        return self.set_spec("resources.requests.storage", f"{size}{unit}")

    def get_capacity(self) -> str | None:
        return self.get_spec("resources.requests.storage")

    def set_access_modes(self, modes: Iterable[str]) -> Self:
        return self.set_spec("accessModes", list(modes))

    def set_storage_class(self, storage_class: str) -> Self:
        return self.set_spec("storageClassName", storage_class)

    def is_bound(self) -> bool:
        return self.get_status("phase") == "Bound"
