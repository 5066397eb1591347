"""Optional verbs a resource kind may support.

Core verbs (get, list, create, replace, delete) work on every kind. The
optional ones listed in :class:`Capability` must be declared when the kind
is defined; the table in this module is consulted before any of them is
dispatched.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum

from kube_resource_client.exceptions import (
    AttachUnsupportedError,
    CapabilityUnsupportedError,
    ExecUnsupportedError,
    LogsUnsupportedError,
    ScalingUnsupportedError,
    WatchUnsupportedError,
)


class Capability(StrEnum):
    """Optional verbs a resource kind can opt into."""

    WATCH = "watch"
    LOGS = "logs"
    SCALE = "scale"
    EXEC = "exec"
    ATTACH = "attach"


UNSUPPORTED_ERRORS: dict[Capability, type[CapabilityUnsupportedError]] = {
    Capability.WATCH: WatchUnsupportedError,
    Capability.LOGS: LogsUnsupportedError,
    Capability.SCALE: ScalingUnsupportedError,
    Capability.EXEC: ExecUnsupportedError,
    Capability.ATTACH: AttachUnsupportedError,
}

_registry: dict[type, frozenset[Capability]] = {}


def register_capabilities(
    resource_class: type, capabilities: Iterable[Capability | str]
) -> frozenset[Capability]:
    """Record the capability set of a resource kind.

    Called once per kind at class-definition time.
    """
    declared = frozenset(Capability(capability) for capability in capabilities)
    _registry[resource_class] = declared
    return declared


def capabilities_of(resource_class: type) -> frozenset[Capability]:
    """Return the capabilities declared for ``resource_class``.

    Subclasses that do not declare their own set inherit the closest one.
    """
    for klass in resource_class.__mro__:
        if klass in _registry:
            return _registry[klass]
    return frozenset()


def supports(resource_class: type, capability: Capability) -> bool:
    return capability in capabilities_of(resource_class)


def ensure_supported(resource_class: type, capability: Capability, kind: str | None = None) -> None:
    """Fail fast when ``resource_class`` does not support ``capability``.

    Raises:
        CapabilityUnsupportedError: The subclass matching ``capability``.
    """
    if not supports(resource_class, capability):
        raise UNSUPPORTED_ERRORS[capability](kind or resource_class.__name__)
