"""Operation dispatch between resources and the transport.

:class:`OperationDispatcher` receives a verb, a path and a payload from a
resource, runs the call through the cluster's transport and turns the
response back into resource instances. Streaming verbs are handed to
:class:`~kube_resource_client.streaming.StreamConsumer`.

The dispatcher performs no retries and no backoff; transport errors reach
the caller unchanged.
"""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import TYPE_CHECKING, Any

import structlog

from kube_resource_client.exceptions import StreamError
from kube_resource_client.resources_list import ResourcesList
from kube_resource_client.streaming import Decoder, StreamConsumer, StreamHandler

if TYPE_CHECKING:
    from kube_resource_client.cluster import KubernetesCluster
    from kube_resource_client.resource import K8sResource

logger = structlog.get_logger()


class Operation(StrEnum):
    """Verbs understood by the dispatcher."""

    GET = "get"
    CREATE = "create"
    REPLACE = "replace"
    DELETE = "delete"
    LOG = "log"
    WATCH = "watch"
    WATCH_LOGS = "watch_logs"
    EXEC = "exec"
    ATTACH = "attach"

    @property
    def method(self) -> str:
        """HTTP method used for the verb."""
        return _METHODS[self]

    @property
    def streaming(self) -> bool:
        """Whether the verb opens a long-lived stream."""
        return self in _STREAMING


_METHODS: dict[Operation, str] = {
    Operation.GET: "GET",
    Operation.CREATE: "POST",
    Operation.REPLACE: "PUT",
    Operation.DELETE: "DELETE",
    Operation.LOG: "GET",
    Operation.WATCH: "GET",
    Operation.WATCH_LOGS: "GET",
    Operation.EXEC: "POST",
    Operation.ATTACH: "POST",
}

_STREAMING = frozenset(
    {Operation.WATCH, Operation.WATCH_LOGS, Operation.EXEC, Operation.ATTACH}
)

DEFAULT_QUERY: dict[str, Any] = {"pretty": 1}

INTERACTIVE_QUERY: dict[str, Any] = {
    "pretty": 1,
    "stdin": 1,
    "stdout": 1,
    "stderr": 1,
    "tty": 1,
}


def build_query(operation: Operation, query: Mapping[str, Any] | None = None) -> dict[str, Any]:
    """Merge the caller's query over the defaults of ``operation``.

    ``None`` values are dropped, and ``watch_logs`` always carries
    ``follow=1``.
    """
    defaults = INTERACTIVE_QUERY if operation in (Operation.EXEC, Operation.ATTACH) else DEFAULT_QUERY
    merged = {**defaults, **(query or {})}
    if operation is Operation.WATCH_LOGS:
        merged["follow"] = 1
    return {key: value for key, value in merged.items() if value is not None}


class OperationDispatcher:
    """Run verbs against the transport of a cluster."""

    def __init__(self, cluster: KubernetesCluster) -> None:
        self._cluster = cluster

    def run(
        self,
        operation: Operation,
        path: str,
        payload: Any = None,
        query: Mapping[str, Any] | None = None,
        *,
        resource_class: type[K8sResource] | None = None,
        handler: StreamHandler | None = None,
    ) -> Any:
        """Execute ``operation`` on ``path``.

        Args:
            operation: The verb to run.
            path: REST path built by the resource.
            payload: Request body (a document, delete options, or ``None``).
            query: Query parameters merged over the verb's defaults.
            resource_class: Kind used to rehydrate responses and watch events.
            handler: Callback for streaming verbs.

        Returns:
            A resource, a :class:`ResourcesList`, log text, or the stream
            result, depending on the verb.
        """
        params = build_query(operation, query)
        transport = self._cluster.transport
        log = logger.bind(operation=str(operation), path=path)
        if resource_class is not None:
            log = log.bind(kind=resource_class.kind)

        if operation.streaming:
            log.debug("opening_stream")
            stream = transport.open(operation, path, body=payload, query=params)
            consumer = StreamConsumer(stream, self._decoder_for(operation, resource_class))
            return consumer.consume(handler)

        log.debug("executing_operation")
        if operation is Operation.LOG:
            return transport.execute(operation.method, path, body=payload, query=params, raw=True)

        response = transport.execute(operation.method, path, body=payload, query=params)
        if resource_class is None:
            return response
        return self.hydrate(response, resource_class)

    # =========================================================================
    # Rehydration
    # =========================================================================

    def hydrate(self, response: Any, resource_class: type[K8sResource]) -> Any:
        """Turn a response document into a resource or a list of resources."""
        if isinstance(response, Mapping) and isinstance(response.get("items"), list):
            return ResourcesList(
                (self.make_resource(resource_class, item) for item in response["items"]),
                kind=response.get("kind"),
                resource_version=(response.get("metadata") or {}).get("resourceVersion"),
            )
        return self.make_resource(resource_class, response or {})

    def make_resource(
        self, resource_class: type[K8sResource], document: Mapping[str, Any]
    ) -> K8sResource:
        """Wrap a server document into a synced instance bound to the cluster.

        List items and watch objects may omit ``apiVersion`` and ``kind``; the
        class defaults fill them in.
        """
        document = {
            "apiVersion": resource_class.default_version,
            "kind": resource_class.kind,
            **document,
        }
        return resource_class(self._cluster, document).sync_with(document)

    def _decoder_for(
        self, operation: Operation, resource_class: type[K8sResource] | None
    ) -> Decoder | None:
        if operation is Operation.WATCH and resource_class is not None:

            def decode_event(event: Mapping[str, Any]) -> tuple[Any, ...]:
                event_type = event.get("type")
                obj = event.get("object") or {}
                if event_type == "ERROR":
                    raise StreamError(
                        message=obj.get("message", "Watch failed"),
                        payload=dict(obj),
                    )
                return event_type, self.make_resource(resource_class, obj)

            return decode_event
        return None
