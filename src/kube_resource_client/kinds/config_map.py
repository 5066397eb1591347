"""ConfigMap resources."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Self

from kube_resource_client.resource import K8sResource


class ConfigMap(K8sResource, kind="ConfigMap", plural="configmaps"):
    """Plain key/value data; supports none of the optional verbs."""

    def get_data(self) -> dict[str, str]:
        return self.get_attribute("data", {})

    def set_data(self, data: Mapping[str, str]) -> Self:
        return self.set_attribute("data", dict(data))

    def add_data(self, name: str, value: str) -> Self:
        return self.set_attribute(f"data.{name}", value)

    def remove_data(self, name: str) -> str | None:
        return self.remove_attribute(f"data.{name}")
