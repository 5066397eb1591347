"""Logging configuration for kube_resource_client."""

from kube_resource_client.logging.config import configure_logging, get_logger, resolve_level

__all__ = ["configure_logging", "get_logger", "resolve_level"]
