"""Cluster client abstraction for kubesh."""

from kubesh.cluster.base import (
    ClusterAlreadyExistsError,
    ClusterClient,
    ClusterClientError,
    ClusterNotFoundError,
    ClusterTransportError,
    NamespaceInfo,
    NodeInfo,
    PodInfo,
    SizeFeed,
    TerminalSize,
)
from kubesh.cluster.kubernetes import KubernetesClusterClient

__all__ = [
    "ClusterAlreadyExistsError",
    "ClusterClient",
    "ClusterClientError",
    "ClusterNotFoundError",
    "ClusterTransportError",
    "KubernetesClusterClient",
    "NamespaceInfo",
    "NodeInfo",
    "PodInfo",
    "SizeFeed",
    "TerminalSize",
]
