"""Node shell pod provisioning."""

from __future__ import annotations

import sys
import time
from collections.abc import Callable
from enum import Enum
from typing import Any

from kubesh.cluster.base import (
    ClusterAlreadyExistsError,
    ClusterClient,
    ClusterClientError,
    ClusterNotFoundError,
)
from kubesh.config.models import Settings
from kubesh.exceptions import (
    ClusterQueryError,
    NamespaceNotFoundError,
    NodeNotFoundError,
    PodCreateError,
    StartupTimeoutError,
)
from kubesh.nodeshell.session import CONTAINER_NAME, Session

POD_PHASE_RUNNING = "Running"

# nsenter flags: target pid 1, enter its mount, UTS, IPC and network namespaces
NSENTER_ARGS = ["-t", "1", "-m", "-u", "-i", "-n"]

POD_LABELS = {
    "app": "node-shell",
    "owner": "kubesh",
}


class PodProvision(Enum):
    """Outcome of making sure the node shell pod exists."""

    ALREADY_RUNNING = "already-running"
    CREATED = "created"
    EXISTS_NOT_RUNNING = "exists-not-running"


def build_pod_spec(session: Session) -> dict[str, Any]:
    """Generate the node shell Pod manifest.

    The pod shares the host network, PID and IPC namespaces, so pid 1 inside
    the privileged container is the host's init and nsenter can join the
    host's remaining namespaces.

    Args:
        session: Session the pod belongs to.

    Returns:
        Pod manifest as a dictionary.
    """
    settings = session.settings
    return {
        "apiVersion": "v1",
        "kind": "Pod",
        "metadata": {
            "name": session.pod_name,
            "namespace": session.namespace,
            "labels": dict(POD_LABELS),
        },
        "spec": {
            "nodeName": session.node_name,
            "hostNetwork": True,
            "hostPID": True,
            "hostIPC": True,
            "containers": [
                {
                    "name": CONTAINER_NAME,
                    "image": settings.image,
                    "command": ["nsenter"],
                    "args": NSENTER_ARGS + list(settings.pause_command),
                    "securityContext": {
                        "privileged": True,
                    },
                },
            ],
        },
    }


class PodLifecycleManager:
    """Ensures a node shell pod exists and is running.

    The manager never deletes pods. Reuse of an existing pod is an optimistic
    read without locking; a create that races another invocation falls back
    to waiting for the pod that won.
    """

    # Seconds between pod status checks
    POD_POLL_INTERVAL = 1.0

    # Seconds to wait for the pod to reach Running
    POD_STARTUP_TIMEOUT = 60.0

    def __init__(
        self,
        client: ClusterClient,
        poll_interval: float | None = None,
        timeout: float | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Initialize the manager.

        Args:
            client: Cluster client.
            poll_interval: Override for POD_POLL_INTERVAL.
            timeout: Override for POD_STARTUP_TIMEOUT.
            clock: Monotonic clock, in seconds.
            sleep: Sleep function, in seconds.
        """
        self._client = client
        self._poll_interval = (
            poll_interval if poll_interval is not None else self.POD_POLL_INTERVAL
        )
        self._timeout = timeout if timeout is not None else self.POD_STARTUP_TIMEOUT
        self._clock = clock
        self._sleep = sleep

    def ensure_running(self, node_name: str, settings: Settings) -> Session:
        """Make sure the node shell pod for a node is running.

        Args:
            node_name: Target node.
            settings: Resolved settings.

        Returns:
            Session for the running pod.

        Raises:
            NodeNotFoundError: If the node does not exist.
            NamespaceNotFoundError: If the pod namespace does not exist.
            ClusterQueryError: If a cluster query fails.
            PodCreateError: If the pod cannot be created.
            StartupTimeoutError: If the pod does not start in time.
        """
        self._verify_node(node_name)
        self._verify_namespace(settings.pod_namespace)

        session = Session.for_node(node_name, settings, self._client)
        provision = self.ensure_pod_exists(session)
        if provision is not PodProvision.ALREADY_RUNNING:
            self.wait_for_pod_running(session)
        return session

    def _verify_node(self, node_name: str) -> None:
        try:
            self._client.get_node(node_name)
        except ClusterNotFoundError:
            raise NodeNotFoundError(
                f"node {node_name} not found in cluster"
            ) from None
        except ClusterClientError as e:
            raise ClusterQueryError(f"get node {node_name}: {e}") from e

    def _verify_namespace(self, namespace: str) -> None:
        try:
            self._client.get_namespace(namespace)
        except ClusterNotFoundError:
            raise NamespaceNotFoundError(
                f"namespace {namespace} not found in cluster, "
                "please create it first"
            ) from None
        except ClusterClientError as e:
            raise ClusterQueryError(f"get namespace {namespace}: {e}") from e

    def ensure_pod_exists(self, session: Session) -> PodProvision:
        """Reuse the node shell pod if present, otherwise create it.

        Args:
            session: Session whose pod should exist.

        Returns:
            Which path was taken.

        Raises:
            ClusterQueryError: If looking up the pod fails.
            PodCreateError: If creating the pod fails.
        """
        try:
            pod = self._client.get_pod(session.namespace, session.pod_name)
        except ClusterNotFoundError:
            pod = None
        except ClusterClientError as e:
            raise ClusterQueryError(
                f"get node-shell pod {session.display_name}: {e}"
            ) from e

        if pod is not None:
            if pod.phase == POD_PHASE_RUNNING:
                return PodProvision.ALREADY_RUNNING
            return PodProvision.EXISTS_NOT_RUNNING

        print(
            f"Creating pod {session.display_name} on node {session.node_name}...",
            file=sys.stderr,
        )
        try:
            self._client.create_pod(session.namespace, build_pod_spec(session))
        except ClusterAlreadyExistsError:
            # Another invocation created it between our get and create
            return PodProvision.EXISTS_NOT_RUNNING
        except ClusterClientError as e:
            raise PodCreateError(
                f"create node-shell pod {session.display_name}: {e}"
            ) from e
        return PodProvision.CREATED

    def wait_for_pod_running(self, session: Session) -> None:
        """Poll until the node shell pod is Running.

        A missing pod is treated as still materializing. No query is made
        once the timeout has elapsed.

        Args:
            session: Session whose pod to wait for.

        Raises:
            ClusterQueryError: If a status query fails.
            StartupTimeoutError: If the pod is not Running within the timeout.
        """
        print(
            f"Waiting for pod {session.pod_name} to be running...",
            file=sys.stderr,
        )
        deadline = self._clock() + self._timeout

        while True:
            remaining = deadline - self._clock()
            if remaining <= 0:
                break
            self._sleep(min(self._poll_interval, remaining))
            if self._clock() >= deadline:
                break

            try:
                pod = self._client.get_pod(session.namespace, session.pod_name)
            except ClusterNotFoundError:
                continue
            except ClusterClientError as e:
                raise ClusterQueryError(
                    f"get node-shell pod {session.display_name}: {e}"
                ) from e

            if pod.phase == POD_PHASE_RUNNING:
                return

        raise StartupTimeoutError(session.pod_name, self._timeout)
