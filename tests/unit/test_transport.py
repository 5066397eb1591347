"""Unit tests for KubernetesTransport."""

from __future__ import annotations

import json
from typing import Any
from unittest.mock import MagicMock, create_autospec, patch

import pytest
from kubernetes.client import ApiClient, Configuration
from kubernetes.client.exceptions import ApiException
from kubernetes.client.rest import RESTClientObject, RESTResponse
from kubernetes.config import ConfigException
from urllib3.exceptions import ProtocolError

from kube_resource_client.config import ClientConfig
from kube_resource_client.exceptions import (
    KubernetesAPIError,
    KubernetesAuthError,
    KubernetesConflictError,
    KubernetesConnectionError,
    KubernetesNotFoundError,
    KubernetesValidationError,
)
from kube_resource_client.operations import Operation
from kube_resource_client.transport import (
    KubernetesTransport,
    ResponseLineStream,
    WebSocketStream,
    decode_body,
    query_tuples,
)

HOST = "https://cluster:6443"


def _api_exception(status: int, body: dict[str, Any] | None = None) -> ApiException:
    error = ApiException(status=status, reason="Reason")
    error.body = json.dumps(body) if body is not None else None
    return error


def _http_response(status: int = 200, data: bytes = b"", reason: str = "OK") -> RESTResponse:
    """Wrap a fake urllib3 response the way the REST client does."""
    return RESTResponse(MagicMock(status=status, reason=reason, data=data, headers={}))


@pytest.fixture
def api_client() -> Any:
    """Create a real ApiClient whose REST layer is an autospec mock."""
    configuration = Configuration(
        host=HOST,
        api_key={"BearerToken": "secret-token"},
        api_key_prefix={"BearerToken": "Bearer"},
    )
    client = ApiClient(configuration)
    client.rest_client = create_autospec(RESTClientObject, instance=True)
    client.rest_client.request.return_value = _http_response(data=b'{"kind": "Job"}')
    return client


@pytest.mark.unit
class TestHelpers:
    """Tests for query and body helpers."""

    def test_query_tuples(self) -> None:
        assert query_tuples({"command": ["ls", "-l"], "tty": True, "pretty": 1}) == [
            ("command", "ls"),
            ("command", "-l"),
            ("tty", 1),
            ("pretty", 1),
        ]

    def test_query_tuples_empty(self) -> None:
        assert query_tuples(None) == []

    def test_decode_body(self) -> None:
        assert decode_body(b'{"a": 1}') == {"a": 1}
        assert decode_body("plain text") == "plain text"
        assert decode_body(b"") is None


@pytest.mark.unit
@pytest.mark.kubernetes
class TestExecute:
    """Tests for synchronous calls."""

    def test_execute_decodes_json(self, api_client: Any) -> None:
        transport = KubernetesTransport(api_client, timeout=30)

        result = transport.execute("GET", "/apis/batch/v1/jobs", query={"pretty": 1})

        assert result == {"kind": "Job"}
        args, kwargs = api_client.rest_client.request.call_args
        assert args == ("GET", f"{HOST}/apis/batch/v1/jobs?pretty=1")
        assert kwargs["headers"]["authorization"] == "Bearer secret-token"
        assert kwargs["headers"]["Accept"] == "application/json"
        assert kwargs["_request_timeout"] == 30

    def test_execute_sends_body(self, api_client: Any) -> None:
        document = {"kind": "Job", "metadata": {"name": "pi"}}

        KubernetesTransport(api_client).execute("POST", "/apis/batch/v1/namespaces/default/jobs", body=document)

        args, kwargs = api_client.rest_client.request.call_args
        assert args[0] == "POST"
        assert kwargs["body"] == document

    def test_list_query_values_repeat(self, api_client: Any) -> None:
        KubernetesTransport(api_client).execute("GET", "/x", query={"command": ["ls", "-l"]})

        args, _ = api_client.rest_client.request.call_args
        assert args[1] == f"{HOST}/x?command=ls&command=-l"

    def test_execute_raw_returns_text(self, api_client: Any) -> None:
        api_client.rest_client.request.return_value = _http_response(data=b"log line\n")
        transport = KubernetesTransport(api_client)
        assert transport.execute("GET", "/log", raw=True) == "log line\n"

    def test_execute_empty_body(self, api_client: Any) -> None:
        api_client.rest_client.request.return_value = _http_response(data=b"")
        assert KubernetesTransport(api_client).execute("DELETE", "/x") == {}

    def test_error_status_is_translated(self, api_client: Any) -> None:
        status = {"kind": "Status", "message": 'jobs "x" not found', "details": {"kind": "jobs", "name": "x"}}
        api_client.rest_client.request.return_value = _http_response(
            404, json.dumps(status).encode(), "Not Found"
        )

        with pytest.raises(KubernetesNotFoundError) as exc_info:
            KubernetesTransport(api_client).execute("GET", "/x")

        assert exc_info.value.payload["kind"] == "Status"
        assert exc_info.value.resource_name == "x"
        assert isinstance(exc_info.value.__cause__, ApiException)

    def test_api_exception_is_translated(self, api_client: Any) -> None:
        api_client.rest_client.request.side_effect = _api_exception(409, {"message": "conflict"})
        with pytest.raises(KubernetesConflictError):
            KubernetesTransport(api_client).execute("PUT", "/x", body={})

    def test_status_zero_is_connection_error(self, api_client: Any) -> None:
        api_client.rest_client.request.side_effect = ApiException(status=0, reason="SSLError")
        with pytest.raises(KubernetesConnectionError, match="SSLError"):
            KubernetesTransport(api_client).execute("GET", "/x")

    def test_connection_failure(self, api_client: Any) -> None:
        api_client.rest_client.request.side_effect = ProtocolError("connection aborted")
        with pytest.raises(KubernetesConnectionError) as exc_info:
            KubernetesTransport(api_client).execute("GET", "/x")
        assert isinstance(exc_info.value.original_error, ProtocolError)

    def test_context_manager_closes_client(self, api_client: Any) -> None:
        with patch.object(api_client, "close") as close:
            with KubernetesTransport(api_client):
                pass
        close.assert_called_once()


@pytest.mark.unit
@pytest.mark.kubernetes
class TestTranslateApiException:
    """Tests for status code mapping."""

    @pytest.mark.parametrize(
        ("status", "error"),
        [
            (401, KubernetesAuthError),
            (403, KubernetesAuthError),
            (404, KubernetesNotFoundError),
            (409, KubernetesConflictError),
            (400, KubernetesValidationError),
            (422, KubernetesValidationError),
        ],
    )
    def test_status_mapping(self, status: int, error: type[KubernetesAPIError]) -> None:
        translated = KubernetesTransport.translate_api_exception(_api_exception(status, {}))
        assert type(translated) is error

    def test_other_status_is_generic(self) -> None:
        translated = KubernetesTransport.translate_api_exception(
            _api_exception(500, {"message": "etcd unavailable", "reason": "InternalError"})
        )
        assert type(translated) is KubernetesAPIError
        assert translated.status_code == 500
        assert translated.message == "etcd unavailable"
        assert translated.reason == "InternalError"

    def test_validation_causes(self) -> None:
        translated = KubernetesTransport.translate_api_exception(
            _api_exception(
                422,
                {
                    "message": "Job is invalid",
                    "details": {"causes": [{"field": "spec.template", "message": "Required"}]},
                },
            )
        )
        assert isinstance(translated, KubernetesValidationError)
        assert translated.validation_errors == {"spec.template": "Required"}

    def test_conflict_keeps_resource_info(self) -> None:
        translated = KubernetesTransport.translate_api_exception(
            _api_exception(409, {"message": "conflict", "details": {"kind": "jobs", "name": "a"}})
        )
        assert translated.resource_type == "jobs"
        assert translated.resource_name == "a"

    def test_missing_body_falls_back_to_reason(self) -> None:
        translated = KubernetesTransport.translate_api_exception(_api_exception(503))
        assert translated.message == "Reason"
        assert translated.payload is None


@pytest.mark.unit
@pytest.mark.kubernetes
class TestStreams:
    """Tests for watch, log and websocket streams."""

    def test_open_watch_stream(self, api_client: Any) -> None:
        transport = KubernetesTransport(api_client, timeout=30)

        stream = transport.open(Operation.WATCH, "/apis/batch/v1/watch/jobs", query={"pretty": 1})

        assert isinstance(stream, ResponseLineStream)
        _, kwargs = api_client.rest_client.request.call_args
        assert kwargs["_request_timeout"] is None
        assert stream._response is api_client.rest_client.request.return_value.response

    def test_open_stream_error_status(self, api_client: Any) -> None:
        api_client.rest_client.request.return_value = _http_response(
            403, b'{"message": "forbidden"}', "Forbidden"
        )
        with pytest.raises(KubernetesAuthError, match="forbidden"):
            KubernetesTransport(api_client).open(Operation.WATCH_LOGS, "/api/v1/namespaces/default/pods/p/log")

    def test_response_line_stream_decodes_json(self) -> None:
        response = MagicMock()
        lines = ['{"type": "ADDED", "object": {}}', "", '{"type": "DELETED", "object": {}}']
        with patch("kubernetes.watch.watch.iter_resp_lines", return_value=iter(lines)):
            events = list(ResponseLineStream(response, decode_json=True))
        assert [event["type"] for event in events] == ["ADDED", "DELETED"]

    def test_response_line_stream_plain_lines(self) -> None:
        with patch("kubernetes.watch.watch.iter_resp_lines", return_value=iter(["a", "b"])):
            assert list(ResponseLineStream(MagicMock(), decode_json=False)) == ["a", "b"]

    def test_response_line_stream_keeps_blank_log_lines(self) -> None:
        response = MagicMock()
        response.stream.return_value = iter([b"first\n\nthird\n"])

        assert list(ResponseLineStream(response, decode_json=False)) == ["first", "", "third"]

    def test_response_line_stream_close_is_idempotent(self) -> None:
        response = MagicMock()
        stream = ResponseLineStream(response, decode_json=False)
        stream.close()
        stream.close()
        response.close.assert_called_once()
        response.release_conn.assert_called_once()

    def test_websocket_stream_reads_channels(self) -> None:
        client = MagicMock()
        client.is_open.side_effect = [True, False]
        pending = {1: ["hello"], 2: [], 3: []}
        client.peek_channel.side_effect = lambda channel: bool(pending[channel])
        client.read_channel.side_effect = lambda channel: pending[channel].pop()

        messages = list(WebSocketStream(client))

        assert messages == [{"channel": "stdout", "output": "hello"}]
        client.update.assert_called_once_with(timeout=1)

    def test_open_exec_uses_websocket(self, api_client: Any) -> None:
        with patch("kubernetes.stream.ws_client.websocket_call") as websocket_call:
            stream = KubernetesTransport(api_client).open(
                Operation.EXEC, "/api/v1/namespaces/default/pods/p/exec", query={"command": ["ls"]}
            )

        assert isinstance(stream, WebSocketStream)
        args, kwargs = websocket_call.call_args
        assert args[2] == f"{HOST}/api/v1/namespaces/default/pods/p/exec"
        assert kwargs["query_params"] == [("command", "ls")]
        assert kwargs["headers"]["authorization"] == "Bearer secret-token"

    def test_websocket_failure_is_connection_error(self, api_client: Any) -> None:
        with (
            patch(
                "kubernetes.stream.ws_client.websocket_call",
                side_effect=ApiException(status=0, reason="handshake failed"),
            ),
            pytest.raises(KubernetesConnectionError, match="handshake failed"),
        ):
            KubernetesTransport(api_client).open(Operation.ATTACH, "/api/v1/namespaces/default/pods/p/attach")


@pytest.mark.unit
@pytest.mark.kubernetes
class TestFromConfig:
    """Tests for kubeconfig loading."""

    def test_loads_kubeconfig(self) -> None:
        with patch("kubernetes.config.load_kube_config") as load_kube_config:
            transport = KubernetesTransport.from_config(
                ClientConfig(context="kind-dev", timeout=15, verify_ssl=False)
            )

        load_kube_config.assert_called_once_with(config_file=None, context="kind-dev")
        assert transport._timeout == 15
        assert transport._api_client.configuration.verify_ssl is False

    def test_falls_back_to_in_cluster(self) -> None:
        with (
            patch("kubernetes.config.load_kube_config", side_effect=ConfigException("none")),
            patch("kubernetes.config.load_incluster_config") as load_incluster_config,
        ):
            KubernetesTransport.from_config(ClientConfig())

        load_incluster_config.assert_called_once()

    def test_no_configuration_raises(self) -> None:
        with (
            patch("kubernetes.config.load_kube_config", side_effect=ConfigException("none")),
            patch("kubernetes.config.load_incluster_config", side_effect=ConfigException("none")),
            pytest.raises(KubernetesConnectionError, match="Cannot load Kubernetes configuration"),
        ):
            KubernetesTransport.from_config(ClientConfig())

    def test_fallback_disabled(self) -> None:
        with (
            patch("kubernetes.config.load_kube_config", side_effect=ConfigException("none")),
            patch("kubernetes.config.load_incluster_config") as load_incluster_config,
            pytest.raises(KubernetesConnectionError),
        ):
            KubernetesTransport.from_config(ClientConfig(in_cluster_fallback=False))

        load_incluster_config.assert_not_called()
