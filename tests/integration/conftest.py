"""Pytest fixtures and configuration for integration tests."""

from __future__ import annotations

import os
import secrets
import shutil
import subprocess

import pytest

from kubesh.cluster import KubernetesClusterClient
from kubesh.config import DEFAULT_IMAGE, Settings

# Namespace used for node shell pods created by the tests
TEST_NAMESPACE = "kubesh-integration-test"


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for integration tests."""
    config.addinivalue_line(
        "markers",
        "integration: integration tests requiring real infrastructure",
    )
    config.addinivalue_line(
        "markers",
        "kubernetes: tests requiring kubernetes cluster (Kind or similar)",
    )


def run_kubectl(*args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
    """Run a kubectl command and return the result."""
    result = subprocess.run(
        ["kubectl", *args],
        capture_output=True,
        text=True,
        timeout=60,
    )
    if check and result.returncode != 0:
        raise RuntimeError(f"kubectl {' '.join(args)} failed: {result.stderr}")
    return result


@pytest.fixture(scope="session")
def kubectl():
    """Helper running kubectl commands against the test cluster."""
    return run_kubectl


@pytest.fixture(scope="session")
def has_kubectl() -> bool:
    """Check if kubectl is available on the system."""
    return shutil.which("kubectl") is not None


@pytest.fixture(scope="session")
def kubernetes_available(has_kubectl: bool) -> bool:
    """Check if a Kubernetes cluster is accessible."""
    if not has_kubectl:
        return False

    try:
        result = subprocess.run(
            ["kubectl", "cluster-info"],
            capture_output=True,
            text=True,
            timeout=30,
        )
        return result.returncode == 0
    except (subprocess.TimeoutExpired, OSError):
        return False


@pytest.fixture
def require_kubernetes(kubernetes_available: bool) -> None:
    """Skip test if kubernetes cluster is not available."""
    if not kubernetes_available:
        pytest.skip("kubernetes cluster not available")


@pytest.fixture(scope="session")
def test_namespace(kubernetes_available: bool) -> str:
    """Get or create the test namespace."""
    if not kubernetes_available:
        pytest.skip("kubernetes not available")

    if run_kubectl("get", "namespace", TEST_NAMESPACE, check=False).returncode != 0:
        run_kubectl("create", "namespace", TEST_NAMESPACE)

    return TEST_NAMESPACE


@pytest.fixture(scope="session")
def kubernetes_test_image() -> str:
    """Get the node shell image used by the tests.

    Can be overridden with KUBESH_TEST_IMAGE, e.g. for an image already
    loaded into a Kind cluster.
    """
    return os.environ.get("KUBESH_TEST_IMAGE", DEFAULT_IMAGE)


@pytest.fixture(scope="session")
def cluster_client(kubernetes_available: bool) -> KubernetesClusterClient:
    """Cluster client for the current kubeconfig context."""
    if not kubernetes_available:
        pytest.skip("kubernetes not available")
    return KubernetesClusterClient.from_kubeconfig()


@pytest.fixture
def test_settings(test_namespace: str, kubernetes_test_image: str) -> Settings:
    """Settings with a unique pod name per test."""
    return Settings(
        image=kubernetes_test_image,
        shell_command=["sh"],
        pod_namespace=test_namespace,
        pod_name=f"kubesh-test-{secrets.token_hex(4)}-{{node}}",
    )
