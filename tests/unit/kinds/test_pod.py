"""Unit tests for Pod and the smaller kinds."""

from __future__ import annotations

from typing import Any

import pytest

from kube_resource_client.operations import Operation

POD_PATH = "/api/v1/namespaces/default/pods/worker"


@pytest.mark.unit
@pytest.mark.kubernetes
class TestPodStatus:
    """Tests for Pod accessors."""

    def test_containers(self, cluster: Any) -> None:
        pod = cluster.pod().set_containers([{"name": "a"}]).add_container({"name": "b"})
        assert [container["name"] for container in pod.get_containers()] == ["a", "b"]

    def test_status(self, cluster: Any) -> None:
        pod = cluster.pod(
            {
                "status": {
                    "phase": "Running",
                    "podIPs": [{"ip": "10.0.0.1"}, {"ip": "fd00::1"}],
                    "conditions": [{"type": "Ready", "status": "True"}],
                    "containerStatuses": [{"name": "a", "ready": True}],
                }
            }
        )
        assert pod.is_running()
        assert pod.is_ready()
        assert pod.containers_are_ready()
        assert pod.get_pod_ips() == ["10.0.0.1", "fd00::1"]

    def test_pending_pod(self, cluster: Any) -> None:
        pod = cluster.pod({"status": {"phase": "Pending"}})
        assert not pod.is_running()
        assert not pod.is_ready()
        assert not pod.containers_are_ready()


@pytest.mark.unit
@pytest.mark.kubernetes
class TestPodStreams:
    """Tests for logs, exec and attach."""

    def test_logs(self, cluster: Any, transport: Any) -> None:
        transport.respond("GET", f"{POD_PATH}/log", "one\ntwo\n")

        logs = cluster.pod().set_name("worker").logs({"container": "main"})

        assert logs == "one\ntwo\n"
        assert transport.calls[0].query == {"pretty": 1, "container": "main"}
        assert transport.calls[0].raw

    def test_watch_logs_follows(self, cluster: Any, transport: Any) -> None:
        stream = transport.add_stream(["one", "two", "three"])
        lines: list[str] = []

        def handler(line: str) -> bool | None:
            lines.append(line)
            return True if line == "two" else None

        assert cluster.pod().set_name("worker").watch_logs(handler) is True
        assert lines == ["one", "two"]
        assert stream.closed
        call = transport.calls[0]
        assert call.operation is Operation.WATCH_LOGS
        assert call.path == f"{POD_PATH}/log"
        assert call.query["follow"] == 1

    def test_exec_collects_messages_without_handler(self, cluster: Any, transport: Any) -> None:
        transport.add_stream([{"channel": "stdout", "output": "bin\netc\n"}])

        messages = cluster.pod().set_name("worker").exec(["ls", "/"], container="main")

        assert messages == [{"channel": "stdout", "output": "bin\netc\n"}]
        call = transport.calls[0]
        assert call.method == "POST"
        assert call.path == f"{POD_PATH}/exec"
        assert call.query == {
            "pretty": 1,
            "stdin": 1,
            "stdout": 1,
            "stderr": 1,
            "tty": 1,
            "command": ["ls", "/"],
            "container": "main",
        }

    def test_exec_string_command(self, cluster: Any, transport: Any) -> None:
        transport.add_stream([])
        cluster.pod().set_name("worker").exec("date")
        assert transport.calls[0].query["command"] == ["date"]
        assert "container" not in transport.calls[0].query

    def test_attach_with_handler(self, cluster: Any, transport: Any) -> None:
        transport.add_stream([{"channel": "stdout", "output": "ready"}])

        result = cluster.pod().set_name("worker").attach(lambda message: message["output"])

        assert result == "ready"
        assert transport.calls[0].path == f"{POD_PATH}/attach"


@pytest.mark.unit
@pytest.mark.kubernetes
class TestSmallKinds:
    """Tests for Service, ConfigMap, Namespace and PersistentVolumeClaim."""

    def test_service_ports(self, cluster: Any) -> None:
        service = cluster.service().set_ports([{"port": 80}]).add_port({"port": 443})
        service.set_selectors({"app": "web"})
        assert [port["port"] for port in service.get_ports()] == [80, 443]
        assert service.get_selectors() == {"app": "web"}

    def test_config_map_data(self, cluster: Any) -> None:
        config_map = cluster.config_map().set_data({"a": "1"}).add_data("b", "2")
        assert config_map.get_data() == {"a": "1", "b": "2"}
        assert config_map.remove_data("a") == "1"
        assert config_map.get_data() == {"b": "2"}

    def test_namespace_is_cluster_scoped(self, cluster: Any) -> None:
        namespace = cluster.namespace({"status": {"phase": "Active"}}).set_name("team-a")
        assert namespace.namespace is None
        assert namespace.resource_path() == "/api/v1/namespaces/team-a"
        assert namespace.all_resources_path() == "/api/v1/namespaces"
        assert namespace.is_active()
        assert not namespace.is_terminating()

    def test_persistent_volume_claim(self, cluster: Any) -> None:
        claim = (
            cluster.persistent_volume_claim()
            .set_capacity(10, "Mi")
            .set_access_modes(["ReadWriteOnce"])
            .set_storage_class("standard")
        )
        assert claim.get_spec("resources.requests.storage") == "10Mi"
        assert claim.get_spec("accessModes") == ["ReadWriteOnce"]
        assert claim.get_spec("storageClassName") == "standard"
        assert not claim.is_bound()
