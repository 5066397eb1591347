"""Shared pytest fixtures for kube_resource_client tests."""

from __future__ import annotations

import copy
import logging
import os
from collections.abc import Generator, Iterable, Iterator, Mapping
from typing import Any, NamedTuple

import pytest
import structlog
from typer.testing import CliRunner

from kube_resource_client.cluster import KubernetesCluster
from kube_resource_client.operations import Operation


class Call(NamedTuple):
    """A request recorded by :class:`FakeTransport`."""

    method: str
    path: str
    body: Any
    query: dict[str, Any]
    raw: bool = False
    operation: Operation | None = None


class FakeStream:
    """Stream over canned chunks that remembers how far it was read."""

    def __init__(self, chunks: Iterable[Any], error: Exception | None = None) -> None:
        self.chunks = list(chunks)
        self.error = error
        self.yielded = 0
        self.closed = False

    def __iter__(self) -> Iterator[Any]:
        for chunk in self.chunks:
            if self.closed:
                return
            self.yielded += 1
            yield chunk
        if self.error is not None:
            raise self.error

    def close(self) -> None:
        self.closed = True


class FakeTransport:
    """In-memory transport with scripted responses.

    Responses are queued per ``(method, path)``; the last queued response
    keeps answering once the others are consumed. Queued exceptions are
    raised instead of returned.
    """

    def __init__(self) -> None:
        self.calls: list[Call] = []
        self.responses: dict[tuple[str, str], list[Any]] = {}
        self.streams: list[FakeStream] = []

    def respond(self, method: str, path: str, *responses: Any) -> None:
        self.responses.setdefault((method, path), []).extend(responses)

    def add_stream(self, chunks: Iterable[Any], error: Exception | None = None) -> FakeStream:
        stream = FakeStream(chunks, error)
        self.streams.append(stream)
        return stream

    def execute(
        self,
        method: str,
        path: str,
        *,
        body: Any = None,
        query: Mapping[str, Any] | None = None,
        raw: bool = False,
    ) -> Any:
        self.calls.append(Call(method, path, copy.deepcopy(body), dict(query or {}), raw))
        queue = self.responses.get((method, path))
        if not queue:
            raise AssertionError(f"Unexpected request: {method} {path}")
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        return copy.deepcopy(response)

    def open(
        self,
        operation: Operation,
        path: str,
        *,
        body: Any = None,
        query: Mapping[str, Any] | None = None,
    ) -> FakeStream:
        self.calls.append(
            Call(operation.method, path, body, dict(query or {}), operation=operation)
        )
        if not self.streams:
            raise AssertionError(f"Unexpected stream: {operation} {path}")
        return self.streams.pop(0)


def job_document(
    name: str = "batch-1",
    namespace: str = "default",
    resource_version: str = "1",
    uid: str = "uid-1",
    **extra: Any,
) -> dict[str, Any]:
    """Build a Job document as the API server returns it."""
    return {
        "apiVersion": "batch/v1",
        "kind": "Job",
        "metadata": {
            "name": name,
            "namespace": namespace,
            "resourceVersion": resource_version,
            "uid": uid,
        },
        "spec": {"template": {"spec": {"containers": [{"name": "main", "image": "busybox"}]}}},
        **extra,
    }


@pytest.fixture
def transport() -> FakeTransport:
    """Create an empty fake transport."""
    return FakeTransport()


@pytest.fixture
def cluster(transport: FakeTransport) -> KubernetesCluster:
    """Create a cluster bound to the fake transport."""
    return KubernetesCluster(transport, namespace="default")


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Typer CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def reset_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Clear KRC_ prefixed environment variables for each test."""
    for key in list(os.environ.keys()):
        if key.startswith("KRC_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None]:
    """Undo configure_logging calls made by a test."""
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    structlog.reset_defaults()


@pytest.fixture
def make_job() -> Any:
    """Return the Job document builder."""
    return job_document
