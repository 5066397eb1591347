"""Transport between the resource engine and the API server.

The engine only relies on the :class:`Transport` protocol. The bundled
:class:`KubernetesTransport` implements it on top of the official kubernetes
Python client: kubeconfig loading, authentication and TLS come from there,
and API exceptions are translated into this package's error hierarchy.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any, Protocol

import structlog

from kube_resource_client.exceptions import (
    KubernetesAPIError,
    KubernetesAuthError,
    KubernetesConflictError,
    KubernetesConnectionError,
    KubernetesNotFoundError,
    KubernetesValidationError,
)
from kube_resource_client.operations import Operation
from kube_resource_client.streaming import Stream

if TYPE_CHECKING:
    from kubernetes.client import ApiClient

    from kube_resource_client.config import ClientConfig

logger = structlog.get_logger()

JSON_HEADERS = {"Accept": "application/json", "Content-Type": "application/json"}
AUTH_SETTINGS = ["BearerToken"]

# kubernetes.stream.ws_client channel numbers
STDOUT_CHANNEL = 1
STDERR_CHANNEL = 2
ERROR_CHANNEL = 3

_CHANNEL_NAMES = {
    STDOUT_CHANNEL: "stdout",
    STDERR_CHANNEL: "stderr",
    ERROR_CHANNEL: "error",
}


class Transport(Protocol):
    """What the dispatcher needs from a connection to the API server."""

    def execute(
        self,
        method: str,
        path: str,
        *,
        body: Any = None,
        query: Mapping[str, Any] | None = None,
        raw: bool = False,
    ) -> Any:
        """Run a request and return the decoded body (text when ``raw``).

        Raises:
            KubernetesAPIError: On any non-2xx response.
        """
        ...

    def open(
        self,
        operation: Operation,
        path: str,
        *,
        body: Any = None,
        query: Mapping[str, Any] | None = None,
    ) -> Stream:
        """Open a long-lived stream for a watch, log, exec or attach call."""
        ...


def query_tuples(query: Mapping[str, Any] | None) -> list[tuple[str, Any]]:
    """Flatten a query mapping; list values become repeated keys."""
    tuples: list[tuple[str, Any]] = []
    for key, value in (query or {}).items():
        if isinstance(value, (list, tuple)):
            tuples.extend((key, item) for item in value)
        elif isinstance(value, bool):
            tuples.append((key, int(value)))
        else:
            tuples.append((key, value))
    return tuples


def decode_body(data: bytes | str | None) -> dict[str, Any] | str | None:
    """Decode a response body as JSON, falling back to the raw text."""
    if not data:
        return None
    text = data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data
    try:
        decoded: dict[str, Any] = json.loads(text)
    except ValueError:
        return text
    return decoded


class ResponseLineStream:
    """Line-oriented stream over a non-preloaded HTTP response.

    Watch responses carry one JSON event per line and are decoded; empty
    watch lines are keepalives and skipped. Log responses are yielded as
    text lines, blank ones included.
    """

    def __init__(self, response: Any, *, decode_json: bool) -> None:
        self._response = response
        self._decode_json = decode_json
        self._closed = False

    def __iter__(self) -> Iterator[Any]:
        from kubernetes.watch.watch import iter_resp_lines

        for line in iter_resp_lines(self._response):
            if not self._decode_json:
                yield line
            elif line:
                yield json.loads(line)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._response.close()
        self._response.release_conn()


class WebSocketStream:
    """Channel messages read from an exec or attach websocket."""

    def __init__(self, client: Any, *, poll_timeout: float = 1) -> None:
        self._client = client
        self._poll_timeout = poll_timeout

    def __iter__(self) -> Iterator[dict[str, str]]:
        while self._client.is_open():
            self._client.update(timeout=self._poll_timeout)
            yield from self._drain()
        yield from self._drain()

    def _drain(self) -> Iterator[dict[str, str]]:
        for channel, name in _CHANNEL_NAMES.items():
            if self._client.peek_channel(channel):
                yield {"channel": name, "output": self._client.read_channel(channel)}

    def write_stdin(self, data: str) -> None:
        self._client.write_stdin(data)

    def close(self) -> None:
        self._client.close()


class KubernetesTransport:
    """Transport backed by ``kubernetes.client.ApiClient``.

    Example:
        ```python
        from kube_resource_client.config import ClientConfig
        from kube_resource_client.transport import KubernetesTransport

        with KubernetesTransport.from_config(ClientConfig.from_env()) as transport:
            transport.execute("GET", "/api/v1/namespaces")
        ```
    """

    def __init__(self, api_client: ApiClient, *, timeout: int | None = None) -> None:
        """Wrap an already configured API client.

        Args:
            api_client: Authenticated kubernetes API client.
            timeout: Request timeout in seconds forwarded to every call.
        """
        self._api_client = api_client
        self._timeout = timeout

    @classmethod
    def from_config(cls, config: ClientConfig) -> KubernetesTransport:
        """Load kubeconfig (or the in-cluster config) and build a transport.

        Raises:
            KubernetesConnectionError: If no configuration can be loaded.
        """
        from kubernetes import client
        from kubernetes import config as kube_config
        from kubernetes.config import ConfigException

        try:
            kube_config.load_kube_config(config_file=config.kubeconfig, context=config.context)
            logger.debug("loaded_kubeconfig", context=config.context, kubeconfig=config.kubeconfig)
        except ConfigException as e:
            if not config.in_cluster_fallback:
                raise KubernetesConnectionError(
                    message="Cannot load Kubernetes configuration from kubeconfig.",
                    original_error=e,
                ) from e
            try:
                kube_config.load_incluster_config()
                logger.debug("loaded_incluster_config")
            except ConfigException as incluster_error:
                raise KubernetesConnectionError(
                    message="Cannot load Kubernetes configuration. "
                    "Ensure kubeconfig exists or running inside a cluster.",
                    original_error=incluster_error,
                ) from incluster_error

        configuration = client.Configuration.get_default_copy()
        configuration.verify_ssl = config.verify_ssl
        return cls(client.ApiClient(configuration), timeout=config.timeout)

    # =========================================================================
    # Synchronous calls
    # =========================================================================

    def execute(
        self,
        method: str,
        path: str,
        *,
        body: Any = None,
        query: Mapping[str, Any] | None = None,
        raw: bool = False,
    ) -> Any:
        """Run a request and decode the response.

        Args:
            method: HTTP method.
            path: Absolute API path.
            body: JSON-serializable request body.
            query: Query parameters.
            raw: Return the body as text instead of decoding JSON.

        Returns:
            The decoded JSON document, or the text body when ``raw`` is set.
        """
        response = self._call(method, path, body=body, query=query, streaming=False)
        data = response.read()
        if raw:
            return data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data or ""
        decoded = decode_body(data)
        return decoded if decoded is not None else {}

    def open(
        self,
        operation: Operation,
        path: str,
        *,
        body: Any = None,
        query: Mapping[str, Any] | None = None,
    ) -> Stream:
        """Open the stream for a streaming verb."""
        if operation in (Operation.EXEC, Operation.ATTACH):
            return self._open_websocket(path, query)

        response = self._call(operation.method, path, body=body, query=query, streaming=True)
        return ResponseLineStream(response.response, decode_json=operation is Operation.WATCH)

    def _call(
        self,
        method: str,
        path: str,
        *,
        body: Any,
        query: Mapping[str, Any] | None,
        streaming: bool,
    ) -> Any:
        """Send one request and return the undecoded ``RESTResponse``.

        The body is left unread so streaming verbs can iterate it. Non-2xx
        responses are read, closed and raised as package errors.
        """
        from kubernetes.client.exceptions import ApiException
        from urllib3.exceptions import HTTPError

        log = logger.bind(method=method, path=path)
        try:
            log.debug("kubernetes_api_request")
            params = self._api_client.param_serialize(
                method=method,
                resource_path=path,
                query_params=query_tuples(query),
                header_params=dict(JSON_HEADERS),
                body=body,
                auth_settings=AUTH_SETTINGS,
            )
            response = self._api_client.call_api(
                *params,
                _request_timeout=None if streaming else self._timeout,
            )
            log.debug("kubernetes_api_response", status=response.status)
            if not 200 <= response.status <= 299:
                response.read()
                response.response.release_conn()
                raise ApiException(http_resp=response)
            return response
        except ApiException as e:
            if not e.status:
                log.error("kubernetes_connection_error", error=str(e.reason))
                raise KubernetesConnectionError(
                    message=f"Failed to reach the API server: {e.reason}",
                    original_error=e,
                ) from e
            error = self.translate_api_exception(e)
            log.debug("kubernetes_api_error", status=e.status, error=str(error))
            raise error from e
        except HTTPError as e:
            log.error("kubernetes_connection_error", error=str(e))
            raise KubernetesConnectionError(
                message=f"Failed to reach the API server: {e}",
                original_error=e,
            ) from e

    def _open_websocket(self, path: str, query: Mapping[str, Any] | None) -> WebSocketStream:
        from kubernetes.client.exceptions import ApiException
        from kubernetes.stream.ws_client import websocket_call

        configuration = self._api_client.configuration
        headers: dict[str, str] = {}
        self._api_client.update_params_for_auth(headers, [], AUTH_SETTINGS, path, "GET", None)
        logger.debug("kubernetes_websocket_open", path=path)
        try:
            client = websocket_call(
                configuration,
                "GET",
                configuration.host + path,
                query_params=query_tuples(query),
                headers=headers,
                _preload_content=False,
                _request_timeout=self._timeout,
            )
        except ApiException as e:
            raise KubernetesConnectionError(
                message=f"Failed to open websocket to {path}: {e}",
                original_error=e,
            ) from e
        return WebSocketStream(client)

    # =========================================================================
    # Error Translation
    # =========================================================================

    @staticmethod
    def translate_api_exception(e: Any) -> KubernetesAPIError:
        """Translate a kubernetes ApiException into a KubernetesAPIError.

        The decoded response body is preserved as ``payload``.
        """
        status = getattr(e, "status", None)
        payload = decode_body(getattr(e, "body", None))
        message = (
            payload.get("message") if isinstance(payload, dict) else None
        ) or getattr(e, "reason", None) or f"Kubernetes API error: {status}"

        details = (payload.get("details") or {}) if isinstance(payload, dict) else {}
        resource_type = details.get("kind")
        resource_name = details.get("name")

        if status in (401, 403):
            return KubernetesAuthError(message=message, status_code=status, payload=payload)

        if status == 404:
            return KubernetesNotFoundError(
                message=message,
                payload=payload,
                resource_type=resource_type,
                resource_name=resource_name,
            )

        if status == 409:
            return KubernetesConflictError(
                message=message,
                payload=payload,
                resource_type=resource_type,
                resource_name=resource_name,
            )

        if status in (400, 422):
            return KubernetesValidationError(message=message, status_code=status, payload=payload)

        return KubernetesAPIError(message=message, status_code=status, payload=payload)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Close the underlying API client and its connection pool."""
        self._api_client.close()
        logger.debug("kubernetes_transport_closed")

    def __enter__(self) -> KubernetesTransport:
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()
