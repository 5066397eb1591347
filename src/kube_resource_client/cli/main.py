"""Main CLI entry point using Typer."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from kube_resource_client import __version__
from kube_resource_client.cli.output import (
    AllNamespacesOption,
    LabelSelectorOption,
    NamespaceOption,
    OutputFormat,
    OutputOption,
    handle_k8s_error,
    render_list,
    render_resource,
)
from kube_resource_client.cluster import KubernetesCluster
from kube_resource_client.config import ClientConfig
from kube_resource_client.exceptions import KubernetesError
from kube_resource_client.kinds import Pod
from kube_resource_client.logging.config import configure_logging
from kube_resource_client.policies import retry_on_conflict
from kube_resource_client.resource import K8sResource, registered_kinds

app = typer.Typer(
    name="krc",
    help="Inspect and manage Kubernetes resources.",
    add_completion=False,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"krc version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output.",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Enable debug mode.",
    ),
) -> None:
    """krc - work with Kubernetes resources as documents."""
    configure_logging(verbose=verbose, debug=debug)


# =============================================================================
# Helpers
# =============================================================================


def load_config() -> ClientConfig:
    return ClientConfig.from_env()


def build_cluster(config: ClientConfig) -> KubernetesCluster:
    return KubernetesCluster.from_config(config)


def resolve_kind(name: str) -> type[K8sResource]:
    """Find a registered kind by kind name or plural, case-insensitively.

    Raises:
        typer.BadParameter: If no registered kind matches.
    """
    wanted = name.lower()
    for kind, resource_class in registered_kinds().items():
        if wanted in (kind.lower(), resource_class.plural):
            return resource_class
    known = ", ".join(sorted(registered_kinds()))
    raise typer.BadParameter(f"Unknown kind '{name}'. Known kinds: {known}")


def _instance(
    cluster: KubernetesCluster, kind: str, name: str | None, namespace: str | None
) -> K8sResource:
    resource = cluster.resource(resolve_kind(kind))
    if name:
        resource.set_name(name)
    if namespace:
        resource.set_namespace(namespace)
    return resource


# =============================================================================
# Commands
# =============================================================================


@app.command("get")
def get_resource(
    kind: Annotated[str, typer.Argument(help="Resource kind (e.g. job, pods)")],
    name: Annotated[str, typer.Argument(help="Resource name")],
    namespace: NamespaceOption = None,
    output: OutputOption = OutputFormat.YAML,
) -> None:
    """Show a single resource."""
    try:
        with build_cluster(load_config()) as cluster:
            resource = _instance(cluster, kind, name, namespace).get()
            render_resource(resource, output)
    except KubernetesError as e:
        handle_k8s_error(e)


@app.command("list")
def list_resources(
    kind: Annotated[str, typer.Argument(help="Resource kind (e.g. job, pods)")],
    namespace: NamespaceOption = None,
    all_namespaces: AllNamespacesOption = False,
    selector: LabelSelectorOption = None,
    output: OutputOption = OutputFormat.TABLE,
) -> None:
    """List resources of a kind."""
    query = {"labelSelector": selector} if selector else None
    try:
        with build_cluster(load_config()) as cluster:
            resource = _instance(cluster, kind, None, namespace)
            if all_namespaces:
                resources = resource.all_namespaces(query)
            else:
                resources = resource.all(query)
            render_list(resources, output)
    except KubernetesError as e:
        handle_k8s_error(e)


@app.command("delete")
def delete_resource(
    kind: Annotated[str, typer.Argument(help="Resource kind (e.g. job, pods)")],
    name: Annotated[str, typer.Argument(help="Resource name")],
    namespace: NamespaceOption = None,
    grace_period: Annotated[
        int | None,
        typer.Option("--grace-period", help="Seconds to wait before forcing termination"),
    ] = None,
    force: Annotated[bool, typer.Option("--force", "-f", help="Skip confirmation prompts")] = False,
) -> None:
    """Delete a resource."""
    if not force and not typer.confirm(f"Are you sure you want to delete {kind} '{name}'?"):
        console.print("[yellow]Aborted[/yellow]")
        raise typer.Exit(0)
    try:
        with build_cluster(load_config()) as cluster:
            resource = _instance(cluster, kind, name, namespace).get()
            resource.delete(grace_period=grace_period)
            console.print(f"[green]{resource.kind} '{name}' deleted[/green]")
    except KubernetesError as e:
        handle_k8s_error(e)


@app.command("apply")
def apply_manifest(
    file: Annotated[
        Path,
        typer.Option("--file", "-f", help="YAML manifest to apply", exists=True, dir_okay=False),
    ],
    namespace: NamespaceOption = None,
) -> None:
    """Create or update every resource of a YAML manifest."""
    try:
        with build_cluster(load_config()) as cluster:
            try:
                resources = cluster.from_yaml(file.read_text())
            except ValueError as e:
                console.print(f"[red]Error:[/red] {e}")
                raise typer.Exit(1) from e
            for resource in resources:
                if namespace and resource.namespaceable:
                    resource.set_namespace(namespace)
                resource.create_or_update()
                console.print(f"{resource.kind.lower()}/{resource.name} applied")
    except KubernetesError as e:
        handle_k8s_error(e)


@app.command("scale")
def scale_resource(
    kind: Annotated[str, typer.Argument(help="Scalable kind (statefulset, deployment)")],
    name: Annotated[str, typer.Argument(help="Resource name")],
    replicas: Annotated[int, typer.Option("--replicas", "-r", min=0, help="Desired replicas")],
    namespace: NamespaceOption = None,
) -> None:
    """Set the replica count through the scale sub-resource."""
    config = load_config()
    try:
        with build_cluster(config) as cluster:
            resource = _instance(cluster, kind, name, namespace)

            @retry_on_conflict(config.retry_attempts)
            def apply_scale() -> None:
                scale = resource.scaler()
                scale.set_replicas(replicas)
                scale.update()

            apply_scale()
            console.print(f"[green]{resolve_kind(kind).kind} '{name}' scaled to {replicas}[/green]")
    except KubernetesError as e:
        handle_k8s_error(e)


@app.command("logs")
def pod_logs(
    name: Annotated[str, typer.Argument(help="Pod name")],
    namespace: NamespaceOption = None,
    container: Annotated[
        str | None, typer.Option("--container", "-c", help="Container name")
    ] = None,
    follow: Annotated[bool, typer.Option("--follow", "-f", help="Stream new lines")] = False,
    tail: Annotated[int | None, typer.Option("--tail", help="Lines from the end")] = None,
) -> None:
    """Print the logs of a pod."""
    query = {"container": container, "tailLines": tail}
    try:
        with build_cluster(load_config()) as cluster:
            pod = cluster.resource(Pod).set_name(name)
            if namespace:
                pod.set_namespace(namespace)
            if follow:
                pod.watch_logs(lambda line: console.print(line, markup=False, highlight=False), query)
            else:
                console.print(pod.logs(query), end="", markup=False, highlight=False)
    except KubernetesError as e:
        handle_k8s_error(e)


@app.command("watch")
def watch_resources(
    kind: Annotated[str, typer.Argument(help="Resource kind (e.g. job, pods)")],
    name: Annotated[str | None, typer.Argument(help="Watch a single resource")] = None,
    namespace: NamespaceOption = None,
    until: Annotated[
        str | None,
        typer.Option("--until", help="Stop after the first event of this type (e.g. DELETED)"),
    ] = None,
) -> None:
    """Print watch events as they arrive."""

    def on_event(event_type: str, resource: K8sResource) -> bool | None:
        location = f"{resource.namespace}/{resource.name}" if resource.namespaceable else resource.name
        console.print(f"{event_type:<10} {resource.kind.lower()}/{location}")
        if until and event_type == until.upper():
            return True
        return None

    try:
        with build_cluster(load_config()) as cluster:
            resource = _instance(cluster, kind, name, namespace)
            if name:
                resource.watch(on_event)
            else:
                resource.watch_all(on_event)
    except KubernetesError as e:
        handle_k8s_error(e)


if __name__ == "__main__":
    app()
