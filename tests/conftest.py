"""Shared fixtures for kubesh tests."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, BinaryIO

import pytest

from kubesh.cluster.base import (
    ClusterAlreadyExistsError,
    ClusterNotFoundError,
    NamespaceInfo,
    NodeInfo,
    PodInfo,
    SizeFeed,
    TerminalSize,
)
from kubesh.config import Settings


class FakeClusterClient:
    """In-memory cluster client.

    Attributes:
        failures: Per-operation queue of exceptions raised by successive
            calls. A None entry lets that call through.
        phases: Phases reported by successive get_pod calls on an existing
            pod; once exhausted the stored phase is reported.
        created_phase: Phase of a freshly created pod.
    """

    def __init__(
        self,
        nodes: tuple[str, ...] = ("node-a",),
        namespaces: tuple[str, ...] = ("kube-system",),
    ) -> None:
        self.nodes = list(nodes)
        self.namespaces = set(namespaces)
        self.pods: dict[tuple[str, str], PodInfo] = {}
        self.created: list[dict[str, Any]] = []
        self.calls: list[str] = []
        self.failures: dict[str, list[Exception | None]] = {}
        self.phases: list[str] = []
        self.created_phase = "Pending"
        self.exec_calls: list[dict[str, Any]] = []
        self.exec_output = b""
        self.exec_exit_code = 0
        self.exec_error: Exception | None = None
        self.sizes_seen: list[TerminalSize] = []

    def add_pod(self, namespace: str, name: str, phase: str) -> None:
        self.pods[(namespace, name)] = PodInfo(
            name=name, namespace=namespace, phase=phase
        )

    def count(self, op: str) -> int:
        return self.calls.count(op)

    def _call(self, op: str) -> None:
        self.calls.append(op)
        queue = self.failures.get(op)
        if queue:
            error = queue.pop(0)
            if error is not None:
                raise error

    def get_node(self, name: str) -> NodeInfo:
        self._call("get_node")
        if name not in self.nodes:
            raise ClusterNotFoundError(f"get node {name}: not found")
        return NodeInfo(name=name)

    def list_nodes(self) -> list[NodeInfo]:
        self._call("list_nodes")
        return [NodeInfo(name=n) for n in self.nodes]

    def get_namespace(self, name: str) -> NamespaceInfo:
        self._call("get_namespace")
        if name not in self.namespaces:
            raise ClusterNotFoundError(f"get namespace {name}: not found")
        return NamespaceInfo(name=name)

    def get_pod(self, namespace: str, name: str) -> PodInfo:
        self._call("get_pod")
        pod = self.pods.get((namespace, name))
        if pod is None:
            raise ClusterNotFoundError(f"get pod {namespace}/{name}: not found")
        if self.phases:
            pod = replace(pod, phase=self.phases.pop(0))
            self.pods[(namespace, name)] = pod
        return pod

    def create_pod(self, namespace: str, pod_spec: dict[str, Any]) -> PodInfo:
        self._call("create_pod")
        name = pod_spec["metadata"]["name"]
        if (namespace, name) in self.pods:
            raise ClusterAlreadyExistsError(f"create pod {namespace}/{name}")
        self.created.append(pod_spec)
        pod = PodInfo(
            name=name,
            namespace=namespace,
            phase=self.created_phase,
            node_name=pod_spec["spec"]["nodeName"],
        )
        self.pods[(namespace, name)] = pod
        return pod

    def delete_pod(self, namespace: str, name: str) -> None:
        self._call("delete_pod")
        if (namespace, name) not in self.pods:
            raise ClusterNotFoundError(f"delete pod {namespace}/{name}: not found")
        del self.pods[(namespace, name)]

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
        self._call("open_exec_stream")
        self.exec_calls.append(
            {
                "namespace": namespace,
                "pod_name": pod_name,
                "container": container,
                "command": command,
                "tty": tty,
                "stdin": stdin,
                "stdout": stdout,
                "stderr": stderr,
            }
        )
        if size_feed is not None:
            size = size_feed.next(block=False)
            if size is not None:
                self.sizes_seen.append(size)
        if self.exec_error is not None:
            raise self.exec_error
        if stdout is not None and self.exec_output:
            stdout.write(self.exec_output)
        return self.exec_exit_code


class FakeClock:
    """Monotonic clock advanced only by its own sleep."""

    def __init__(self) -> None:
        self.now = 0.0
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def cluster() -> FakeClusterClient:
    """Fake cluster with node-a and the kube-system namespace."""
    return FakeClusterClient()


@pytest.fixture
def clock() -> FakeClock:
    """Fake clock starting at zero."""
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    """Default settings."""
    return Settings()
