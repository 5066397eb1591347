"""Object model for Kubernetes-style REST resources."""

from kube_resource_client.attributes import AttributeTree
from kube_resource_client.capabilities import Capability
from kube_resource_client.cluster import KubernetesCluster
from kube_resource_client.config import ClientConfig
from kube_resource_client.exceptions import (
    CapabilityUnsupportedError,
    KubernetesAPIError,
    KubernetesConflictError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
    StreamError,
)
from kube_resource_client.kinds import (
    ConfigMap,
    Deployment,
    Job,
    Namespace,
    PersistentVolumeClaim,
    Pod,
    Scale,
    Service,
    StatefulSet,
)
from kube_resource_client.resource import K8sResource
from kube_resource_client.resources_list import ResourcesList

__version__ = "0.1.0"

__all__ = [
    "AttributeTree",
    "Capability",
    "CapabilityUnsupportedError",
    "ClientConfig",
    "ConfigMap",
    "Deployment",
    "Job",
    "K8sResource",
    "KubernetesAPIError",
    "KubernetesCluster",
    "KubernetesConflictError",
    "KubernetesConnectionError",
    "KubernetesError",
    "KubernetesNotFoundError",
    "Namespace",
    "PersistentVolumeClaim",
    "Pod",
    "ResourcesList",
    "Scale",
    "Service",
    "StatefulSet",
    "StreamError",
    "__version__",
]
