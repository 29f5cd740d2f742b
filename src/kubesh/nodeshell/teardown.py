"""Node shell pod deletion."""

from __future__ import annotations

import sys
import time
from collections.abc import Callable

from kubesh.cluster.base import ClusterClientError, ClusterNotFoundError
from kubesh.exceptions import TeardownError
from kubesh.nodeshell.session import Session

# Delete attempts made by close_best_effort
CLOSE_MAX_ATTEMPTS = 5

# Seconds between delete attempts
CLOSE_RETRY_DELAY = 3.0


def close_now(session: Session) -> None:
    """Delete the session's pod with a single attempt.

    A pod that is already gone counts as deleted.

    Args:
        session: Session whose pod to delete.

    Raises:
        TeardownError: If the delete fails.
    """
    try:
        session.client.delete_pod(session.namespace, session.pod_name)
    except ClusterNotFoundError:
        return
    except ClusterClientError as e:
        raise TeardownError(
            f"delete node-shell pod {session.display_name}: {e}"
        ) from e


def close_best_effort(
    session: Session,
    max_attempts: int = CLOSE_MAX_ATTEMPTS,
    retry_delay: float = CLOSE_RETRY_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """Delete the session's pod, retrying failures.

    Failures are reported as warnings on stderr and never raised, so they
    cannot mask how the session itself ended. When every attempt fails the
    pod is left in the cluster.

    Args:
        session: Session whose pod to delete.
        max_attempts: Delete attempts before giving up.
        retry_delay: Seconds to wait between attempts.
        sleep: Sleep function, in seconds.

    Returns:
        True if the pod is gone, False if it was leaked.
    """
    for attempt in range(1, max_attempts + 1):
        try:
            close_now(session)
        except TeardownError as e:
            print(f"Warning: Failed to close node shell: {e}", file=sys.stderr)
            if attempt < max_attempts:
                sleep(retry_delay)
            continue
        return True

    print(
        f"Warning: Giving up on pod {session.display_name} after "
        f"{max_attempts} attempts; delete it with: kubectl delete pod "
        f"-n {session.namespace} {session.pod_name}",
        file=sys.stderr,
    )
    return False
