"""Exceptions raised by the resource engine and its transport."""

from __future__ import annotations

from typing import Any


class KubernetesError(Exception):
    """Base exception for all resource operations.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code from the API server (if applicable).
        resource_type: Kind of the resource involved (e.g., "Job", "Pod").
        resource_name: Name of the resource involved.
        namespace: Namespace of the resource (if applicable).
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> None:
        """Initialize KubernetesError.

        Args:
            message: Human-readable error message.
            status_code: HTTP status code from the API server.
            resource_type: Kind of the resource involved.
            resource_name: Name of the resource involved.
            namespace: Namespace of the resource.
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.resource_type = resource_type
        self.resource_name = resource_name
        self.namespace = namespace

    def __str__(self) -> str:
        """Return string representation of the error."""
        parts = [self.message]
        if self.status_code:
            parts.append(f"(status: {self.status_code})")
        if self.resource_type and self.resource_name:
            loc = f"[{self.resource_type}/{self.resource_name}"
            if self.namespace:
                loc += f" in {self.namespace}"
            loc += "]"
            parts.append(loc)
        return " ".join(parts)


# =============================================================================
# Capability errors (local validation, raised before any I/O)
# =============================================================================


class CapabilityUnsupportedError(KubernetesError):
    """Raised when a resource kind does not support an optional verb.

    The check happens before the transport is touched, so this error never
    wraps a network failure.
    """

    capability: str = ""
    action: str = "this operation"

    def __init__(self, kind: str, message: str | None = None) -> None:
        """Initialize CapabilityUnsupportedError.

        Args:
            kind: The resource kind that rejected the verb.
            message: Optional override for the generated message.
        """
        super().__init__(
            message=message or f"The resource {kind} does not support {self.action}.",
            resource_type=kind,
        )
        self.kind = kind


class WatchUnsupportedError(CapabilityUnsupportedError):
    """The resource kind cannot be watched."""

    capability = "watch"
    action = "watch actions"


class LogsUnsupportedError(CapabilityUnsupportedError):
    """The resource kind exposes no logs."""

    capability = "logs"
    action = "logs"


class ScalingUnsupportedError(CapabilityUnsupportedError):
    """The resource kind has no scale sub-resource."""

    capability = "scale"
    action = "scaling"


class ExecUnsupportedError(CapabilityUnsupportedError):
    """The resource kind cannot execute commands."""

    capability = "exec"
    action = "exec commands"


class AttachUnsupportedError(CapabilityUnsupportedError):
    """The resource kind cannot be attached to."""

    capability = "attach"
    action = "attach commands"


# =============================================================================
# Transport errors
# =============================================================================


class KubernetesConnectionError(KubernetesError):
    """Exception raised when the API server cannot be reached.

    This includes network errors, kubeconfig issues, and unreachable API servers.
    """

    def __init__(
        self,
        message: str = "Failed to connect to Kubernetes cluster",
        original_error: Exception | None = None,
    ) -> None:
        """Initialize KubernetesConnectionError.

        Args:
            message: Human-readable error message.
            original_error: The original exception that caused this error.
        """
        super().__init__(message=message)
        self.original_error = original_error


class KubernetesAPIError(KubernetesError):
    """Non-success response from the API server.

    The decoded response body is kept untouched in ``payload`` so callers can
    inspect the server's ``Status`` object (reason, details, causes).
    """

    def __init__(
        self,
        message: str = "Kubernetes API error",
        status_code: int | None = None,
        payload: dict[str, Any] | str | None = None,
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> None:
        """Initialize KubernetesAPIError.

        Args:
            message: Human-readable error message.
            status_code: HTTP status code of the response.
            payload: Raw decoded response body.
            resource_type: Kind of the resource involved.
            resource_name: Name of the resource involved.
            namespace: Namespace of the resource.
        """
        super().__init__(
            message=message,
            status_code=status_code,
            resource_type=resource_type,
            resource_name=resource_name,
            namespace=namespace,
        )
        self.payload = payload

    @property
    def reason(self) -> str | None:
        """The ``reason`` field of the server's Status payload, if any."""
        if isinstance(self.payload, dict):
            return self.payload.get("reason")
        return None


class KubernetesAuthError(KubernetesAPIError):
    """Exception raised when authentication or authorization fails (401/403)."""


class KubernetesNotFoundError(KubernetesAPIError):
    """Exception raised when a requested resource does not exist (404)."""

    def __init__(
        self,
        message: str = "Kubernetes resource not found",
        payload: dict[str, Any] | str | None = None,
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> None:
        """Initialize KubernetesNotFoundError.

        Args:
            message: Human-readable error message.
            payload: Raw decoded response body.
            resource_type: Kind of the resource.
            resource_name: Name of the resource.
            namespace: Namespace of the resource.
        """
        if resource_type and resource_name:
            message = f"{resource_type} '{resource_name}' not found"
            if namespace:
                message += f" in namespace '{namespace}'"
        super().__init__(
            message=message,
            status_code=404,
            payload=payload,
            resource_type=resource_type,
            resource_name=resource_name,
            namespace=namespace,
        )


class KubernetesConflictError(KubernetesAPIError):
    """Exception raised on a 409 response.

    Either the resource already exists, or the resourceVersion precondition
    no longer matches because another client modified the object.
    """

    def __init__(
        self,
        message: str = "Resource conflict",
        payload: dict[str, Any] | str | None = None,
        resource_type: str | None = None,
        resource_name: str | None = None,
        namespace: str | None = None,
    ) -> None:
        """Initialize KubernetesConflictError.

        Args:
            message: Human-readable error message.
            payload: Raw decoded response body.
            resource_type: Kind of the resource.
            resource_name: Name of the resource.
            namespace: Namespace of the resource.
        """
        super().__init__(
            message=message,
            status_code=409,
            payload=payload,
            resource_type=resource_type,
            resource_name=resource_name,
            namespace=namespace,
        )


class KubernetesValidationError(KubernetesAPIError):
    """Exception raised when the API server rejects a document (400/422)."""

    @property
    def validation_errors(self) -> dict[str, str]:
        """Field errors reported in the Status ``details.causes`` list."""
        if not isinstance(self.payload, dict):
            return {}
        causes = (self.payload.get("details") or {}).get("causes") or []
        return {
            cause.get("field", ""): cause.get("message", "")
            for cause in causes
            if isinstance(cause, dict)
        }


# =============================================================================
# Streaming errors
# =============================================================================


class StreamError(KubernetesError):
    """Raised when a stream terminates abnormally.

    Covers a failing handler, a transport failure while the connection is
    open, and watch ``ERROR`` events sent by the server.
    """

    def __init__(
        self,
        message: str = "Stream terminated with an error",
        payload: dict[str, Any] | None = None,
        original_error: BaseException | None = None,
    ) -> None:
        """Initialize StreamError.

        Args:
            message: Human-readable error message.
            payload: Server payload that caused the failure, if any.
            original_error: The exception raised by the handler or transport.
        """
        status_code = payload.get("code") if isinstance(payload, dict) else None
        super().__init__(message=message, status_code=status_code)
        self.payload = payload
        self.original_error = original_error
