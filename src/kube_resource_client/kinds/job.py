"""Job resources."""

from __future__ import annotations

from datetime import datetime
from typing import Self

from kube_resource_client.capabilities import Capability
from kube_resource_client.kinds.mixins import (
    HasPods,
    HasSelector,
    HasStatusConditions,
    HasTemplate,
    parse_timestamp,
)
from kube_resource_client.resource import K8sResource


class Job(
    HasPods,
    HasSelector,
    HasStatusConditions,
    HasTemplate,
    K8sResource,
    kind="Job",
    version="batch/v1",
    plural="jobs",
    capabilities={Capability.WATCH},
):
    """A batch Job running pods to completion."""

    def set_ttl(self, ttl: int = 100) -> Self:
        """Delete the Job ``ttl`` seconds after it finished."""
        return self.set_spec("ttlSecondsAfterFinished", ttl)

    def default_pods_selector(self) -> dict[str, str]:
        return {"job-name": self.name or ""}

    def get_active_pods_count(self) -> int:
        return self.get_status("active", 0)

    def get_failed_pods_count(self) -> int:
        return self.get_status("failed", 0)

    def get_succeeded_pods_count(self) -> int:
        return self.get_status("succeeded", 0)

    def get_start_time(self) -> datetime | None:
        return parse_timestamp(self.get_status("startTime"))

    def get_completion_time(self) -> datetime | None:
        return parse_timestamp(self.get_status("completionTime"))

    def get_duration_in_seconds(self) -> int:
        """Run time in seconds; 0 until the Job has both started and completed."""
        start, completion = self.get_start_time(), self.get_completion_time()
        if start is None or completion is None:
            return 0
        return int((completion - start).total_seconds())

    def has_completed(self) -> bool:
        return self.get_completion_time() is not None
