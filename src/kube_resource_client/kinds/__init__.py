"""Resource kinds shipped with the client."""

from kube_resource_client.kinds.config_map import ConfigMap
from kube_resource_client.kinds.deployment import Deployment
from kube_resource_client.kinds.job import Job
from kube_resource_client.kinds.namespace import Namespace
from kube_resource_client.kinds.persistent_volume_claim import PersistentVolumeClaim
from kube_resource_client.kinds.pod import Pod
from kube_resource_client.kinds.scale import Scale
from kube_resource_client.kinds.service import Service
from kube_resource_client.kinds.stateful_set import StatefulSet

__all__ = [
    "ConfigMap",
    "Deployment",
    "Job",
    "Namespace",
    "PersistentVolumeClaim",
    "Pod",
    "Scale",
    "Service",
    "StatefulSet",
]
