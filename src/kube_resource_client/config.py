"""Client configuration models."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

ENV_PREFIX = "KRC_"


class ClientConfig(BaseModel):
    """Connection settings for a cluster.

    The transport reads ``kubeconfig``, ``context``, ``timeout``,
    ``verify_ssl`` and ``in_cluster_fallback``; the cluster handle uses
    ``namespace`` as the default namespace of new resources. ``retry_attempts``
    is only consumed by the caller-side policies in
    :mod:`kube_resource_client.policies`.
    """

    model_config = ConfigDict(extra="forbid")

    kubeconfig: str | None = None
    context: str | None = None
    namespace: str = "default"
    timeout: int = 60
    retry_attempts: int = 3
    verify_ssl: bool = True
    in_cluster_fallback: bool = True

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @field_validator("retry_attempts")
    @classmethod
    def validate_retry_attempts(cls, v: int) -> int:
        """Validate retry_attempts is at least one attempt."""
        if v < 1:
            raise ValueError("retry_attempts must be at least 1")
        return v

    @field_validator("kubeconfig")
    @classmethod
    def validate_kubeconfig(cls, v: str | None) -> str | None:
        """Expand ~ in kubeconfig path."""
        return str(Path(v).expanduser()) if v else v

    @field_validator("namespace")
    @classmethod
    def validate_namespace(cls, v: str) -> str:
        """Reject empty namespaces."""
        if not v.strip():
            raise ValueError("namespace must not be empty")
        return v.strip()

    @classmethod
    def from_env(cls, base_config: dict[str, Any] | None = None) -> ClientConfig:
        """Create configuration with environment variable overrides.

        Environment variables take precedence over base_config values.

        Supported environment variables:
            KRC_KUBECONFIG: Path of the kubeconfig file
            KRC_CONTEXT: Kubeconfig context to use
            KRC_NAMESPACE: Default namespace for new resources
            KRC_TIMEOUT: Request timeout in seconds
            KRC_RETRY_ATTEMPTS: Attempts for caller-side retry policies
            KRC_VERIFY_SSL: "0"/"false" disables TLS verification
        """
        config_dict = base_config.copy() if base_config else {}

        if kubeconfig := os.environ.get(f"{ENV_PREFIX}KUBECONFIG"):
            config_dict["kubeconfig"] = kubeconfig

        if context := os.environ.get(f"{ENV_PREFIX}CONTEXT"):
            config_dict["context"] = context

        if namespace := os.environ.get(f"{ENV_PREFIX}NAMESPACE"):
            config_dict["namespace"] = namespace

        if timeout := os.environ.get(f"{ENV_PREFIX}TIMEOUT"):
            config_dict["timeout"] = int(timeout)

        if retries := os.environ.get(f"{ENV_PREFIX}RETRY_ATTEMPTS"):
            config_dict["retry_attempts"] = int(retries)

        if verify := os.environ.get(f"{ENV_PREFIX}VERIFY_SSL"):
            config_dict["verify_ssl"] = verify.lower() not in {"0", "false", "no"}

        return cls.model_validate(config_dict)
