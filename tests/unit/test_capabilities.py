"""Unit tests for the capability table."""

from __future__ import annotations

import pytest

from kube_resource_client.capabilities import (
    Capability,
    capabilities_of,
    ensure_supported,
    supports,
)
from kube_resource_client.exceptions import (
    AttachUnsupportedError,
    CapabilityUnsupportedError,
    ScalingUnsupportedError,
    WatchUnsupportedError,
)
from kube_resource_client.kinds import ConfigMap, Job, Pod, StatefulSet
from kube_resource_client.resource import K8sResource


class Widget(K8sResource, kind="Widget", version="example.com/v1", capabilities={"watch"}):
    pass


class SpecialWidget(Widget):
    pass


@pytest.mark.unit
@pytest.mark.kubernetes
class TestCapabilityTable:
    """Tests for declared capability sets."""

    def test_builtin_kinds(self) -> None:
        assert capabilities_of(Job) == {Capability.WATCH}
        assert capabilities_of(StatefulSet) == {Capability.WATCH, Capability.SCALE}
        assert capabilities_of(Pod) == {
            Capability.WATCH,
            Capability.LOGS,
            Capability.EXEC,
            Capability.ATTACH,
        }
        assert capabilities_of(ConfigMap) == frozenset()

    def test_string_capabilities_are_normalized(self) -> None:
        assert supports(Widget, Capability.WATCH)

    def test_subclass_inherits_capabilities(self) -> None:
        assert capabilities_of(SpecialWidget) == {Capability.WATCH}

    def test_classmethod_accessor(self) -> None:
        assert Pod.capabilities() == capabilities_of(Pod)


@pytest.mark.unit
@pytest.mark.kubernetes
class TestEnsureSupported:
    """Tests for the pre-dispatch check."""

    def test_supported_passes(self) -> None:
        ensure_supported(Job, Capability.WATCH)

    def test_unsupported_raises_matching_error(self) -> None:
        with pytest.raises(WatchUnsupportedError) as exc_info:
            ensure_supported(ConfigMap, Capability.WATCH, "ConfigMap")
        assert exc_info.value.kind == "ConfigMap"
        assert exc_info.value.capability == "watch"
        assert str(exc_info.value) == "The resource ConfigMap does not support watch actions."

    @pytest.mark.parametrize(
        ("capability", "error"),
        [(Capability.SCALE, ScalingUnsupportedError), (Capability.ATTACH, AttachUnsupportedError)],
    )
    def test_error_per_capability(
        self, capability: Capability, error: type[CapabilityUnsupportedError]
    ) -> None:
        with pytest.raises(error):
            ensure_supported(Job, capability)
