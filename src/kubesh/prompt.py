"""Interactive node selection."""

from __future__ import annotations

import typer

from kubesh.cluster.base import ClusterClient, ClusterClientError
from kubesh.exceptions import ClusterQueryError, KubeshError


def select_node(client: ClusterClient) -> str:
    """Ask the operator to pick one of the cluster's nodes.

    Args:
        client: Cluster client used to list nodes.

    Returns:
        Name of the chosen node.

    Raises:
        ClusterQueryError: If listing nodes fails.
        KubeshError: If the cluster has no nodes.
    """
    try:
        nodes = client.list_nodes()
    except ClusterClientError as e:
        raise ClusterQueryError(f"list nodes: {e}") from e

    names = sorted(node.name for node in nodes)
    if not names:
        raise KubeshError("no node in cluster")

    return choose(names, label="Select Node")


def choose(items: list[str], label: str) -> str:
    """Prompt until the operator picks one of the numbered items."""
    typer.echo(f"{label}:", err=True)
    for index, item in enumerate(items, start=1):
        typer.echo(f"  {index:>3}) {item}", err=True)

    while True:
        choice = typer.prompt("Number", type=int, err=True)
        if 1 <= choice <= len(items):
            return items[choice - 1]
        typer.echo(f"Enter a number between 1 and {len(items)}", err=True)
