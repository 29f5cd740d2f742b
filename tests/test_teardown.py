"""Tests for node shell pod deletion."""

from __future__ import annotations

import pytest

from kubesh.cluster.base import ClusterTransportError
from kubesh.exceptions import TeardownError
from kubesh.nodeshell import Session, close_best_effort, close_now


@pytest.fixture
def session(cluster, settings) -> Session:
    cluster.add_pod("kube-system", "node-shell-node-a", "Running")
    return Session.for_node("node-a", settings, cluster)


class TestCloseNow:
    """Tests for close_now."""

    def test_deletes_pod(self, cluster, session):
        """close_now deletes the session's pod."""
        close_now(session)

        assert cluster.pods == {}
        assert cluster.count("delete_pod") == 1

    def test_missing_pod_is_success(self, cluster, session):
        """A pod that is already gone is not an error."""
        cluster.pods.clear()

        close_now(session)

        assert cluster.count("delete_pod") == 1

    def test_failure_propagates(self, cluster, session):
        """Other failures raise TeardownError with the cause chained."""
        cause = ClusterTransportError("connection reset")
        cluster.failures["delete_pod"] = [cause]

        with pytest.raises(TeardownError, match="connection reset") as exc_info:
            close_now(session)

        assert exc_info.value.__cause__ is cause
        assert cluster.count("delete_pod") == 1


class TestCloseBestEffort:
    """Tests for close_best_effort."""

    def test_first_attempt_succeeds(self, cluster, clock, session):
        """A successful delete needs no retries."""
        assert close_best_effort(session, sleep=clock.sleep) is True

        assert cluster.count("delete_pod") == 1
        assert clock.sleeps == []

    def test_converges_after_four_failures(self, cluster, clock, session, capsys):
        """Four failures then success: five attempts, four delays."""
        cluster.failures["delete_pod"] = [
            ClusterTransportError(f"failure {i}") for i in range(4)
        ]

        assert close_best_effort(session, sleep=clock.sleep) is True

        assert cluster.count("delete_pod") == 5
        assert clock.sleeps == [3.0, 3.0, 3.0, 3.0]
        assert cluster.pods == {}
        assert capsys.readouterr().err.count("Warning: Failed to close node shell") == 4

    def test_gives_up_without_raising(self, cluster, clock, session, capsys):
        """Five failures leak the pod but raise nothing."""
        cluster.failures["delete_pod"] = [
            ClusterTransportError(f"failure {i}") for i in range(5)
        ]

        assert close_best_effort(session, sleep=clock.sleep) is False

        assert cluster.count("delete_pod") == 5
        assert len(clock.sleeps) == 4
        assert ("kube-system", "node-shell-node-a") in cluster.pods
        err = capsys.readouterr().err
        assert "Giving up on pod kube-system/node-shell-node-a" in err

    def test_not_found_is_immediate_success(self, cluster, clock, session):
        """A missing pod counts as deleted after one attempt."""
        cluster.pods.clear()

        assert close_best_effort(session, sleep=clock.sleep) is True

        assert cluster.count("delete_pod") == 1
        assert clock.sleeps == []

    def test_custom_retry_policy(self, cluster, clock, session):
        """max_attempts and retry_delay are honored."""
        cluster.failures["delete_pod"] = [
            ClusterTransportError("down"),
            ClusterTransportError("down"),
        ]

        close_best_effort(session, max_attempts=2, retry_delay=0.5, sleep=clock.sleep)

        assert cluster.count("delete_pod") == 2
        assert clock.sleeps == [0.5]
