"""Node shell pod lifecycle and interactive session."""

from kubesh.nodeshell.bridge import SessionBridge
from kubesh.nodeshell.lifecycle import (
    PodLifecycleManager,
    PodProvision,
    build_pod_spec,
)
from kubesh.nodeshell.session import CONTAINER_NAME, Session
from kubesh.nodeshell.teardown import close_best_effort, close_now

__all__ = [
    "CONTAINER_NAME",
    "PodLifecycleManager",
    "PodProvision",
    "Session",
    "SessionBridge",
    "build_pod_spec",
    "close_best_effort",
    "close_now",
]
