"""Command line interface for kube_resource_client."""
