"""Ordered collections of resources returned by list calls."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from kube_resource_client.resource import K8sResource


class ResourcesList(list["K8sResource"]):
    """A list of resources in the order the server returned them.

    Attributes:
        kind: The list kind reported by the server (e.g., ``JobList``).
        resource_version: The collection resourceVersion, usable as a watch
            starting point.
    """

    def __init__(
        self,
        resources: Iterable[K8sResource] = (),
        *,
        kind: str | None = None,
        resource_version: str | None = None,
    ) -> None:
        super().__init__(resources)
        self.kind = kind
        self.resource_version = resource_version

    def first(self) -> K8sResource | None:
        return self[0] if self else None

    def names(self) -> list[str | None]:
        return [resource.name for resource in self]

    def filter(self, predicate: Callable[[K8sResource], Any]) -> ResourcesList:
        """Return a new list with the resources matching ``predicate``."""
        return ResourcesList(
            (resource for resource in self if predicate(resource)),
            kind=self.kind,
            resource_version=self.resource_version,
        )
