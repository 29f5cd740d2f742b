"""Base protocol for cluster clients."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, BinaryIO, Protocol


class ClusterClientError(Exception):
    """Base exception for cluster client errors."""

    pass


class ClusterNotFoundError(ClusterClientError):
    """The requested object does not exist."""

    pass


class ClusterAlreadyExistsError(ClusterClientError):
    """The object being created already exists."""

    pass


class ClusterTransportError(ClusterClientError):
    """The request failed on the way to or from the API server."""

    pass


@dataclass(frozen=True)
class NodeInfo:
    """A cluster node."""

    name: str


@dataclass(frozen=True)
class NamespaceInfo:
    """A cluster namespace."""

    name: str


@dataclass(frozen=True)
class PodInfo:
    """A pod as seen by kubesh.

    Attributes:
        name: Pod name.
        namespace: Pod namespace.
        phase: Pod phase ("Pending", "Running", "Succeeded", ...).
        node_name: Node the pod is bound to, if scheduled.
    """

    name: str
    namespace: str
    phase: str
    node_name: str | None = None


@dataclass(frozen=True)
class TerminalSize:
    """Terminal dimensions in character cells."""

    width: int
    height: int


class SizeFeed(Protocol):
    """Source of terminal size changes consumed by an exec stream."""

    def next(
        self, block: bool = True, timeout: float | None = None
    ) -> TerminalSize | None:
        """Return the latest pending size, or None if there is none."""
        ...


class ClusterClient(Protocol):
    """Cluster operations used by kubesh.

    Implementations raise ClusterNotFoundError, ClusterAlreadyExistsError or
    ClusterTransportError; callers map them to kubesh errors.
    """

    def get_node(self, name: str) -> NodeInfo:
        """Get a node by name."""
        ...

    def list_nodes(self) -> list[NodeInfo]:
        """List all nodes in the cluster."""
        ...

    def get_namespace(self, name: str) -> NamespaceInfo:
        """Get a namespace by name."""
        ...

    def get_pod(self, namespace: str, name: str) -> PodInfo:
        """Get a pod by namespace and name."""
        ...

    def create_pod(self, namespace: str, pod_spec: dict[str, Any]) -> PodInfo:
        """Create a pod from a manifest."""
        ...

    def delete_pod(self, namespace: str, name: str) -> None:
        """Delete a pod."""
        ...

    def open_exec_stream(
        self,
        namespace: str,
        pod_name: str,
        container: str,
        command: list[str],
        *,
        tty: bool,
        stdin: BinaryIO | None,
        stdout: BinaryIO | None,
        stderr: BinaryIO | None,
        size_feed: SizeFeed | None,
    ) -> int:
        """Run a command in a container and stream its I/O.

        Blocks until the remote process exits or the stream fails.

        Args:
            namespace: Pod namespace.
            pod_name: Pod name.
            container: Container name.
            command: Command and arguments to run.
            tty: Ask the remote end to allocate a pseudo-terminal.
            stdin: Local input to forward, None to disable remote stdin.
            stdout: Local output for remote stdout, None to disable.
            stderr: Local output for remote stderr, None to disable.
            size_feed: Terminal size changes to forward while streaming.

        Returns:
            Exit code of the remote process.
        """
        ...
