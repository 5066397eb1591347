"""Output rendering and error reporting for the ``krc`` CLI."""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import UTC, datetime
from enum import StrEnum
from typing import Annotated, Any

import typer
import yaml
from rich.console import Console
from rich.table import Table

from kube_resource_client.exceptions import (
    CapabilityUnsupportedError,
    KubernetesAuthError,
    KubernetesConflictError,
    KubernetesConnectionError,
    KubernetesError,
    KubernetesNotFoundError,
    KubernetesValidationError,
    StreamError,
)
from kube_resource_client.kinds.mixins import parse_timestamp
from kube_resource_client.resource import K8sResource

console = Console()


class OutputFormat(StrEnum):
    """Supported output formats for CLI commands."""

    TABLE = "table"
    JSON = "json"
    YAML = "yaml"


# =============================================================================
# Common Typer Option Annotations
# =============================================================================

OutputOption = Annotated[
    OutputFormat,
    typer.Option(
        "--output",
        "-o",
        help="Output format: table, json, or yaml",
        case_sensitive=False,
    ),
]

NamespaceOption = Annotated[
    str | None,
    typer.Option(
        "--namespace",
        "-n",
        help="Kubernetes namespace (defaults to KRC_NAMESPACE or 'default')",
    ),
]

AllNamespacesOption = Annotated[
    bool,
    typer.Option(
        "--all-namespaces",
        "-A",
        help="List resources across all namespaces",
    ),
]

LabelSelectorOption = Annotated[
    str | None,
    typer.Option(
        "--selector",
        "-l",
        help="Label selector (e.g., 'app=nginx,tier=frontend')",
    ),
]


# =============================================================================
# Rendering
# =============================================================================


def age(resource: K8sResource, now: datetime | None = None) -> str:
    """Human-readable age of a resource, e.g. ``3d``, ``5h`` or ``42s``."""
    created = parse_timestamp(resource.get_attribute("metadata.creationTimestamp"))
    if created is None:
        return "<unknown>"
    seconds = int(((now or datetime.now(UTC)) - created).total_seconds())
    for unit, size in (("d", 86400), ("h", 3600), ("m", 60)):
        if seconds >= size:
            return f"{seconds // size}{unit}"
    return f"{max(seconds, 0)}s"


def render_resource(resource: K8sResource, output: OutputFormat) -> None:
    """Print a single resource."""
    if output == OutputFormat.TABLE:
        render_list([resource], OutputFormat.TABLE)
        return
    render_document(resource.to_dict(), output)


def render_document(document: Any, output: OutputFormat) -> None:
    if output == OutputFormat.JSON:
        console.print_json(json.dumps(document, default=str))
    else:
        console.print(yaml.safe_dump(document, sort_keys=False), end="", markup=False)


def render_list(resources: Sequence[K8sResource], output: OutputFormat) -> None:
    """Print a list of resources as a table or a ``List`` document."""
    if output != OutputFormat.TABLE:
        render_document(
            {"apiVersion": "v1", "kind": "List", "items": [r.to_dict() for r in resources]},
            output,
        )
        return

    namespaced = any(resource.namespaceable for resource in resources)
    table = Table(show_header=True)
    if namespaced:
        table.add_column("NAMESPACE", style="cyan")
    table.add_column("NAME", style="cyan")
    table.add_column("KIND")
    table.add_column("AGE")

    for resource in resources:
        row = [resource.name or "", resource.kind, age(resource)]
        if namespaced:
            row.insert(0, resource.namespace or "")
        table.add_row(*row)

    console.print(table)
    console.print(f"\n[dim]Total: {len(resources)} resources[/dim]")


# =============================================================================
# Error Handling
# =============================================================================


def handle_k8s_error(error: KubernetesError) -> None:
    """Print a Kubernetes error with a hint where one helps.

    Raises:
        typer.Exit: Always exits with code 1.
    """
    if isinstance(error, KubernetesConnectionError):
        console.print("[red]Error:[/red] Cannot connect to Kubernetes cluster")
        console.print(f"  {error.message}")
        if error.original_error:
            console.print(f"  Cause: {error.original_error}")
        console.print(
            "\n[dim]Hint: Check that your kubeconfig is valid and the cluster is reachable.[/dim]"
        )

    elif isinstance(error, KubernetesAuthError):
        console.print("[red]Error:[/red] Authentication/authorization failed")
        console.print(f"  {error.message}")
        console.print("\n[dim]Hint: Check your credentials, token, or RBAC permissions.[/dim]")

    elif isinstance(error, KubernetesNotFoundError):
        console.print("[red]Error:[/red] Resource not found")
        console.print(f"  {error.message}")

    elif isinstance(error, KubernetesValidationError):
        console.print("[red]Error:[/red] Validation failed")
        console.print(f"  {error.message}")
        if error.validation_errors:
            console.print("\n  Field errors:")
            for field, err in error.validation_errors.items():
                console.print(f"    - {field}: {err}")

    elif isinstance(error, KubernetesConflictError):
        console.print("[red]Error:[/red] Resource conflict")
        console.print(f"  {error.message}")
        console.print("\n[dim]Hint: The resource changed on the server; retry the command.[/dim]")

    elif isinstance(error, CapabilityUnsupportedError):
        console.print(f"[red]Error:[/red] {error.message}")

    elif isinstance(error, StreamError):
        console.print("[red]Error:[/red] Stream terminated")
        console.print(f"  {error.message}")

    else:
        console.print(f"[red]Error:[/red] {error.message}")
        if error.status_code:
            console.print(f"  HTTP Status: {error.status_code}")

    raise typer.Exit(1)
