"""Kubernetes cluster client built on the official Python client."""

from __future__ import annotations

import json
import os
import select
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, BinaryIO

import urllib3
import websocket
from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.stream import stream
from kubernetes.stream.ws_client import ERROR_CHANNEL, RESIZE_CHANNEL, WSClient

from kubesh.cluster.base import (
    ClusterAlreadyExistsError,
    ClusterClientError,
    ClusterNotFoundError,
    ClusterTransportError,
    NamespaceInfo,
    NodeInfo,
    PodInfo,
    SizeFeed,
)


@contextmanager
def _translate_errors(action: str) -> Iterator[None]:
    """Map kubernetes client failures to cluster client errors."""
    try:
        yield
    except ApiException as e:
        if e.status == 404:
            raise ClusterNotFoundError(f"{action}: not found") from e
        if e.status == 409:
            raise ClusterAlreadyExistsError(f"{action}: already exists") from e
        reason = e.reason or "unknown error"
        raise ClusterTransportError(
            f"{action}: {reason} (status {e.status})"
        ) from e
    except (urllib3.exceptions.HTTPError, websocket.WebSocketException, OSError) as e:
        raise ClusterTransportError(f"{action}: {e}") from e


def _pod_info(pod: Any) -> PodInfo:
    status = pod.status
    spec = pod.spec
    return PodInfo(
        name=pod.metadata.name,
        namespace=pod.metadata.namespace,
        phase=(status.phase if status is not None else None) or "Unknown",
        node_name=spec.node_name if spec is not None else None,
    )


class KubernetesClusterClient:
    """Cluster client talking to the Kubernetes API server."""

    # How long one pump iteration waits for remote output (seconds)
    STREAM_POLL_INTERVAL = 0.05

    # Largest chunk read from local stdin at once
    STDIN_CHUNK_SIZE = 4096

    # Sent when local stdin ends; the remote pty treats it as end of input
    TTY_EOF = b"\x04"

    def __init__(self, core: client.CoreV1Api) -> None:
        """Initialize the client.

        Args:
            core: CoreV1Api bound to the target cluster.
        """
        self._core = core

    @classmethod
    def from_kubeconfig(
        cls,
        kubeconfig: str | None = None,
        insecure: bool = False,
    ) -> KubernetesClusterClient:
        """Build a client from a kubeconfig file.

        Args:
            kubeconfig: Path to the kubeconfig. None uses $KUBECONFIG, then
                ~/.kube/config.
            insecure: Skip TLS certificate verification.

        Returns:
            Client for the kubeconfig's current context.

        Raises:
            ClusterClientError: If the kubeconfig cannot be loaded.
        """
        configuration = client.Configuration()
        try:
            config.load_kube_config(
                config_file=kubeconfig,
                client_configuration=configuration,
            )
        except (config.ConfigException, OSError) as e:
            raise ClusterClientError(f"read kube config: {e}") from e

        if insecure:
            configuration.verify_ssl = False

        return cls(client.CoreV1Api(client.ApiClient(configuration)))

    def get_node(self, name: str) -> NodeInfo:
        with _translate_errors(f"get node {name}"):
            node = self._core.read_node(name)
        return NodeInfo(name=node.metadata.name)

    def list_nodes(self) -> list[NodeInfo]:
        with _translate_errors("list nodes"):
            nodes = self._core.list_node()
        return [NodeInfo(name=item.metadata.name) for item in nodes.items]

    def get_namespace(self, name: str) -> NamespaceInfo:
        with _translate_errors(f"get namespace {name}"):
            ns = self._core.read_namespace(name)
        return NamespaceInfo(name=ns.metadata.name)

    def get_pod(self, namespace: str, name: str) -> PodInfo:
        with _translate_errors(f"get pod {namespace}/{name}"):
            pod = self._core.read_namespaced_pod(name, namespace)
        return _pod_info(pod)

    def create_pod(self, namespace: str, pod_spec: dict[str, Any]) -> PodInfo:
        name = pod_spec.get("metadata", {}).get("name", "")
        with _translate_errors(f"create pod {namespace}/{name}"):
            pod = self._core.create_namespaced_pod(namespace, body=pod_spec)
        return _pod_info(pod)

    def delete_pod(self, namespace: str, name: str) -> None:
        with _translate_errors(f"delete pod {namespace}/{name}"):
            self._core.delete_namespaced_pod(name, namespace)

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
        """Run a command in a container over a websocket exec stream.

        Remote output is copied to the local files on this thread. Local
        input is copied by a helper thread. Pending terminal sizes are sent
        on the resize channel; the first one goes out before any input.

        Returns:
            Exit code of the remote process.

        Raises:
            ClusterNotFoundError: If the pod or container does not exist.
            ClusterTransportError: If the stream fails.
        """
        action = f"exec in pod {namespace}/{pod_name}"
        with _translate_errors(action):
            ws = stream(
                self._core.connect_get_namespaced_pod_exec,
                pod_name,
                namespace,
                container=container,
                command=command,
                stdin=stdin is not None,
                stdout=stdout is not None,
                stderr=stderr is not None,
                tty=tty,
                _preload_content=False,
                binary=True,
            )

        write_lock = threading.Lock()
        stop = threading.Event()
        input_errors: list[BaseException] = []
        pump: threading.Thread | None = None

        try:
            with _translate_errors(action):
                if size_feed is not None:
                    self._send_size(ws, size_feed, write_lock)

                if stdin is not None:
                    pump = threading.Thread(
                        target=self._pump_stdin,
                        args=(ws, stdin, tty, write_lock, stop, input_errors),
                        name="kubesh-stdin",
                        daemon=True,
                    )
                    pump.start()

                while ws.is_open():
                    ws.update(timeout=self.STREAM_POLL_INTERVAL)
                    self._copy_output(ws, stdout, stderr)
                    if size_feed is not None:
                        self._send_size(ws, size_feed, write_lock)
                    if input_errors:
                        raise input_errors[0]

                self._copy_output(ws, stdout, stderr)
        finally:
            stop.set()
            ws.close()
            if pump is not None:
                pump.join(timeout=1)

        return self._exit_code(ws, action)

    @staticmethod
    def _send_size(
        ws: WSClient, size_feed: SizeFeed, write_lock: threading.Lock
    ) -> None:
        size = size_feed.next(block=False)
        if size is None:
            return
        payload = json.dumps({"Width": size.width, "Height": size.height})
        with write_lock:
            ws.write_channel(RESIZE_CHANNEL, payload)

    @staticmethod
    def _copy_output(
        ws: WSClient, stdout: BinaryIO | None, stderr: BinaryIO | None
    ) -> None:
        if stdout is not None and ws.peek_stdout():
            stdout.write(ws.read_stdout())
            stdout.flush()
        if stderr is not None and ws.peek_stderr():
            stderr.write(ws.read_stderr())
            stderr.flush()

    def _pump_stdin(
        self,
        ws: WSClient,
        stdin: BinaryIO,
        tty: bool,
        write_lock: threading.Lock,
        stop: threading.Event,
        errors: list[BaseException],
    ) -> None:
        fd = stdin.fileno()
        try:
            while not stop.is_set():
                readable, _, _ = select.select([fd], [], [], 0.1)
                if not readable:
                    continue
                data = os.read(fd, self.STDIN_CHUNK_SIZE)
                eof = not data
                if eof:
                    if not tty:
                        return
                    data = self.TTY_EOF
                with write_lock:
                    if stop.is_set() or not ws.is_open():
                        return
                    ws.write_stdin(data)
                if eof:
                    return
        except (websocket.WebSocketException, OSError) as e:
            errors.append(e)

    @staticmethod
    def _exit_code(ws: WSClient, action: str) -> int:
        """Decode the status object sent on the error channel."""
        raw = ws.read_channel(ERROR_CHANNEL)
        if not raw:
            raise ClusterTransportError(f"{action}: stream closed without status")
        try:
            status = json.loads(raw)
        except ValueError as e:
            raise ClusterTransportError(
                f"{action}: malformed exec status: {raw!r}"
            ) from e

        if status.get("status") == "Success":
            return 0

        causes = (status.get("details") or {}).get("causes") or []
        for cause in causes:
            if cause.get("reason") == "ExitCode":
                return int(cause.get("message", "1"))

        message = status.get("message") or "unknown failure"
        raise ClusterTransportError(f"{action}: {message}")
