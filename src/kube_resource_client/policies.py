"""Caller-side retry policies.

The resource engine never retries on its own. These decorators are for
callers that want to re-run a whole read-modify-write sequence, e.g.:

    @retry_on_conflict(attempts=5)
    def bump(job):
        job.refresh()
        job.set_label("generation", "2")
        job.update()
"""

from __future__ import annotations

from typing import Any

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from kube_resource_client.exceptions import (
    KubernetesConflictError,
    KubernetesConnectionError,
)


def retry_on_conflict(attempts: int = 3) -> Any:
    """Retry when the server rejects a stale resourceVersion (409).

    Returns:
        A tenacity retry decorator with a short exponential backoff.
    """
    return retry(
        retry=retry_if_exception_type(KubernetesConflictError),
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
        reraise=True,
    )


def retry_on_connection_error(attempts: int = 3) -> Any:
    """Retry transient connection errors.

    Returns:
        A tenacity retry decorator configured with exponential backoff.
    """
    return retry(
        retry=retry_if_exception_type(KubernetesConnectionError),
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        reraise=True,
    )
