"""REST path construction for resource operations.

The functions here mirror the URL grammar of the Kubernetes API server and
hold no state:

    /api/v1[/namespaces/{ns}]/{plural}[/{name}[/scale|/log|/exec|/attach]]
    /apis/{group}/{version}[/namespaces/{ns}]/{plural}[/{name}...]
    {prefix}/watch/{plural}
    {prefix}/watch[/namespaces/{ns}]/{plural}/{name}
"""

from __future__ import annotations

from dataclasses import dataclass

CORE_API_VERSION = "v1"


def api_path_prefix(
    api_version: str,
    namespace: str | None = None,
    pre_action: str | None = None,
) -> str:
    """Build the path prefix for an API version.

    Args:
        api_version: ``v1`` for the core group, otherwise ``group/version``.
        namespace: Namespace segment to append, if any.
        pre_action: Segment inserted ahead of the namespace (e.g. ``watch``).

    Returns:
        The prefix, starting with ``/`` and without a trailing slash.
    """
    path = "/api/v1" if api_version == CORE_API_VERSION else f"/apis/{api_version}"
    if pre_action:
        path += f"/{pre_action}"
    if namespace:
        path += f"/namespaces/{namespace}"
    return path


@dataclass(frozen=True)
class ResourceLocator:
    """Everything needed to address a resource on the API server."""

    api_version: str
    plural: str
    name: str | None = None
    namespace: str | None = None
    namespaced: bool = True

    def _namespace_segment(self, with_namespace: bool = True) -> str | None:
        if with_namespace and self.namespaced:
            return self.namespace
        return None

    def _require_name(self) -> str:
        if not self.name:
            raise ValueError(f"A name is required to address a single {self.plural} resource")
        return self.name

    def collection_path(self, with_namespace: bool = True) -> str:
        """Path of the resource collection, optionally across all namespaces."""
        prefix = api_path_prefix(self.api_version, self._namespace_segment(with_namespace))
        return f"{prefix}/{self.plural}"

    def item_path(self) -> str:
        return f"{self.collection_path()}/{self._require_name()}"

    def collection_watch_path(self) -> str:
        """Watch path for the whole collection; always spans every namespace."""
        return f"{api_path_prefix(self.api_version, pre_action='watch')}/{self.plural}"

    def item_watch_path(self) -> str:
        prefix = api_path_prefix(self.api_version, self._namespace_segment(), pre_action="watch")
        return f"{prefix}/{self.plural}/{self._require_name()}"

    def scale_path(self) -> str:
        return f"{self.item_path()}/scale"

    def log_path(self) -> str:
        return f"{self.item_path()}/log"

    def exec_path(self) -> str:
        return f"{self.item_path()}/exec"

    def attach_path(self) -> str:
        return f"{self.item_path()}/attach"
