"""Node shell session identity."""

from __future__ import annotations

from dataclasses import dataclass

from kubesh.cluster.base import ClusterClient
from kubesh.config.models import Settings

# Name of the single container in a node shell pod
CONTAINER_NAME = "node-shell"


@dataclass
class Session:
    """A node shell session.

    Holds the identity of the remote pod for the lifetime of the process.
    The pod itself may be shared with other kubesh invocations targeting the
    same node.

    Attributes:
        node_name: Node whose namespaces the shell enters.
        pod_name: Name of the node shell pod.
        settings: Resolved settings.
        client: Cluster client used for every remote call.
    """

    node_name: str
    pod_name: str
    settings: Settings
    client: ClusterClient

    @classmethod
    def for_node(
        cls, node_name: str, settings: Settings, client: ClusterClient
    ) -> Session:
        """Build a session without touching the cluster."""
        return cls(
            node_name=node_name,
            pod_name=settings.pod_name_for(node_name),
            settings=settings,
            client=client,
        )

    @property
    def namespace(self) -> str:
        """Namespace of the node shell pod."""
        return self.settings.pod_namespace

    @property
    def display_name(self) -> str:
        """Pod reference in namespace/name form."""
        return f"{self.namespace}/{self.pod_name}"
