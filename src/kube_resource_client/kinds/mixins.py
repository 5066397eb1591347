"""Behaviour shared between resource kinds.

Each mixin is a thin set of field-path accessors on top of the attribute
document; kinds pick the ones they need next to :class:`K8sResource`.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import datetime
from typing import TYPE_CHECKING, Any, Self

if TYPE_CHECKING:
    from kube_resource_client.kinds.pod import Pod
    from kube_resource_client.resources_list import ResourcesList

PodsSelector = Callable[[Any], Mapping[str, str]]


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an RFC 3339 timestamp as sent by the API server."""
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


class HasSpec:
    """Accessors for ``spec.*`` fields."""

    def set_spec(self, name: str, value: Any) -> Self:
        return self.set_attribute(f"spec.{name}", value)  # type: ignore[attr-defined,no-any-return]

    def add_to_spec(self, name: str, value: Any) -> Self:
        return self.add_to_attribute(f"spec.{name}", value)  # type: ignore[attr-defined,no-any-return]

    def get_spec(self, name: str, default: Any = None) -> Any:
        return self.get_attribute(f"spec.{name}", default)  # type: ignore[attr-defined]

    def remove_spec(self, name: str) -> Any:
        return self.remove_attribute(f"spec.{name}")  # type: ignore[attr-defined]


class HasStatus:
    """Read access to ``status.*`` fields."""

    def get_status(self, name: str, default: Any = None) -> Any:
        return self.get_attribute(f"status.{name}", default)  # type: ignore[attr-defined]


class HasStatusConditions(HasStatus):
    def get_conditions(self) -> list[dict[str, Any]]:
        return self.get_status("conditions", [])

    def get_condition(self, condition_type: str) -> dict[str, Any] | None:
        for condition in self.get_conditions():
            if condition.get("type") == condition_type:
                return condition
        return None

    def condition_is_true(self, condition_type: str) -> bool:
        condition = self.get_condition(condition_type)
        return condition is not None and condition.get("status") == "True"


class HasSelector(HasSpec):
    """Label selector stored at ``spec.selector``."""

    def set_selectors(self, selectors: Mapping[str, Any]) -> Self:
        return self.set_spec("selector", dict(selectors))

    def get_selectors(self) -> dict[str, Any]:
        return self.get_spec("selector", {})

    def set_match_labels(self, labels: Mapping[str, str]) -> Self:
        return self.set_spec("selector.matchLabels", dict(labels))


class HasTemplate(HasSpec):
    """Pod template stored at ``spec.template``."""

    def set_template(self, template: Any) -> Self:
        """Set the pod template from a document or a Pod resource."""
        if hasattr(template, "to_dict"):
            template = template.to_dict()
            template.pop("apiVersion", None)
            template.pop("kind", None)
        return self.set_spec("template", template)

    def get_template(self, as_instance: bool = True) -> Pod | dict[str, Any]:
        template = self.get_spec("template", {})
        if not as_instance:
            return template

        from kube_resource_client.kinds.pod import Pod

        return Pod(self._cluster, template)  # type: ignore[attr-defined]


class HasReplicas(HasSpec, HasStatus):
    def set_replicas(self, replicas: int = 1) -> Self:
        return self.set_spec("replicas", replicas)

    def get_replicas(self) -> int:
        return self.get_spec("replicas", 1)

    def get_ready_replicas_count(self) -> int:
        return self.get_status("readyReplicas", 0)

    def get_desired_replicas_count(self) -> int:
        return self.get_status("replicas", 0)


class HasPods:
    """Access to the pods a resource owns, found through a label selector.

    The selector can be overridden per instance with ``pods_selector=``
    (or :meth:`select_pods`); otherwise the kind's default applies.
    """

    def __init__(
        self, *args: Any, pods_selector: PodsSelector | None = None, **kwargs: Any
    ) -> None:
        super().__init__(*args, **kwargs)
        self._pods_selector = pods_selector

    def select_pods(self, selector: PodsSelector | None) -> Self:
        """Override (or with ``None`` reset) the pod selector of this instance."""
        self._pods_selector = selector
        return self

    def default_pods_selector(self) -> dict[str, str]:
        return {}

    def pods_selector(self) -> dict[str, str]:
        if self._pods_selector is not None:
            return dict(self._pods_selector(self))
        return self.default_pods_selector()

    def get_pods(self, query: Mapping[str, Any] | None = None) -> ResourcesList:
        """List the pods matching :meth:`pods_selector` in the resource's namespace."""
        label_selector = ",".join(f"{key}={value}" for key, value in self.pods_selector().items())
        pod = self.cluster.pod().set_namespace(self.namespace)  # type: ignore[attr-defined]
        return pod.all({"labelSelector": label_selector, **(query or {})})

    def all_pods_are_running(self) -> bool:
        pods = self.get_pods()
        return len(pods) > 0 and all(pod.is_ready() for pod in pods)


class CanScale:
    """Shortcut over the scale sub-resource."""

    def scale(self, replicas: int) -> Any:
        """Set the desired replicas through the scale sub-resource."""
        scaler = self.scaler()  # type: ignore[attr-defined]
        scaler.set_replicas(replicas)
        scaler.update()
        return scaler
