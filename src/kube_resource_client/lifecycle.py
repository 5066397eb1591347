"""Local versus remote state tracking for resource instances.

A :class:`ResourceLifecycle` holds two documents: ``attributes``, the state
the caller edits, and ``original``, the last state received from the server.
The difference between them decides whether an update needs a round trip,
and the identity fields inside ``attributes`` feed the optimistic-concurrency
preconditions sent with deletes.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Self

from kube_resource_client.attributes import AttributeTree

DEFAULT_PROPAGATION_POLICY = "Foreground"


class ResourceLifecycle:
    """Tracks the synchronization state of a single resource document."""

    def __init__(self, attributes: Mapping[str, Any] | None = None) -> None:
        """Create a detached document.

        Args:
            attributes: Initial attributes. The instance starts unsynced with
                an empty ``original`` regardless of their content.
        """
        self.attributes = AttributeTree(attributes)
        self.original = AttributeTree()
        self.synced = False

    # =========================================================================
    # Attribute access
    # =========================================================================

    def get_attribute(self, path: str, default: Any = None) -> Any:
        return self.attributes.get(path, default)

    def set_attribute(self, path: str, value: Any) -> Self:
        self.attributes.set(path, value)
        return self

    def add_to_attribute(self, path: str, value: Any) -> Self:
        self.attributes.add_to(path, value)
        return self

    def remove_attribute(self, path: str) -> Any:
        return self.attributes.remove(path)

    def to_dict(self) -> dict[str, Any]:
        """Return a deep copy of the current attributes."""
        return self.attributes.to_dict()

    # =========================================================================
    # Identity
    # =========================================================================

    @property
    def name(self) -> str | None:
        return self.get_attribute("metadata.name")

    @property
    def namespace(self) -> str | None:
        return self.get_attribute("metadata.namespace")

    @property
    def resource_version(self) -> str | None:
        return self.get_attribute("metadata.resourceVersion")

    @property
    def uid(self) -> str | None:
        return self.get_attribute("metadata.uid")

    # =========================================================================
    # Synchronization
    # =========================================================================

    def is_synced(self) -> bool:
        """Whether the instance is believed to exist on the server."""
        return self.synced

    def sync_with(self, document: Mapping[str, Any]) -> Self:
        """Adopt a server response as both current and original state."""
        self.attributes.replace(document)
        self.original.replace(document)
        self.synced = True
        return self

    def sync_original_with(self, document: Mapping[str, Any]) -> Self:
        """Replace only the original snapshot, keeping local edits."""
        self.original.replace(document)
        return self

    def mark_detached(self) -> Self:
        """Forget that the instance exists remotely."""
        self.synced = False
        return self

    def has_changed(self) -> bool:
        """Deep-compare the current attributes with the original snapshot."""
        return self.attributes != self.original

    def refresh_resource_version(self) -> Self:
        """Copy the original ``metadata.resourceVersion`` into the attributes.

        The API server rejects a replace whose resourceVersion is stale, so
        this runs right before every update. Nothing is copied when the
        original snapshot carries no version.
        """
        version = self.original.get("metadata.resourceVersion")
        if version is not None:
            self.set_attribute("metadata.resourceVersion", version)
        return self

    def build_delete_preconditions(
        self,
        grace_period_seconds: int | None = None,
        propagation_policy: str = DEFAULT_PROPAGATION_POLICY,
    ) -> dict[str, Any]:
        """Assemble the preconditions of a delete from the identity fields.

        Returns:
            ``{resourceVersion, uid, propagationPolicy, gracePeriodSeconds}``.
        """
        return {
            "resourceVersion": self.resource_version,
            "uid": self.uid,
            "propagationPolicy": propagation_policy,
            "gracePeriodSeconds": grace_period_seconds,
        }


def delete_options(preconditions: Mapping[str, Any]) -> dict[str, Any]:
    """Shape delete preconditions into the ``DeleteOptions`` request body.

    ``resourceVersion`` and ``uid`` go under ``preconditions`` so the server
    refuses the delete if the object changed or was recreated;
    ``gracePeriodSeconds`` is omitted when unset.
    """
    body: dict[str, Any] = {
        "apiVersion": "v1",
        "kind": "DeleteOptions",
        "preconditions": {
            "resourceVersion": preconditions.get("resourceVersion"),
            "uid": preconditions.get("uid"),
        },
        "propagationPolicy": preconditions.get("propagationPolicy", DEFAULT_PROPAGATION_POLICY),
    }
    if preconditions.get("gracePeriodSeconds") is not None:
        body["gracePeriodSeconds"] = preconditions["gracePeriodSeconds"]
    return body
