"""Exceptions raised by kubesh."""

from __future__ import annotations


class KubeshError(Exception):
    """Base exception for kubesh errors."""

    pass


class NodeNotFoundError(KubeshError):
    """The target node does not exist in the cluster."""

    pass


class NamespaceNotFoundError(KubeshError):
    """The pod namespace does not exist in the cluster."""

    pass


class ClusterQueryError(KubeshError):
    """A cluster query failed for a reason other than not found."""

    pass


class PodCreateError(KubeshError):
    """The node shell pod could not be created."""

    pass


class StartupTimeoutError(KubeshError):
    """The node shell pod did not reach the Running phase in time."""

    def __init__(self, pod_name: str, timeout: float) -> None:
        self.pod_name = pod_name
        self.timeout = timeout
        super().__init__(
            f"timeout to wait node-shell pod {pod_name} to running "
            f"(waited {timeout:g}s)"
        )


class NotATerminalError(KubeshError):
    """Standard output is not attached to an interactive terminal."""

    pass


class ExecStreamError(KubeshError):
    """The interactive exec stream failed or the shell exited non-zero.

    Attributes:
        exit_code: Remote exit status when the shell terminated with a
            non-zero code, None for transport failures.
    """

    def __init__(self, message: str, exit_code: int | None = None) -> None:
        self.exit_code = exit_code
        super().__init__(message)


class TeardownError(KubeshError):
    """Deleting the node shell pod failed."""

    pass


class ConfigError(KubeshError):
    """Base error for settings loading."""

    pass


class ConfigParseError(ConfigError):
    """The settings file could not be read or is not valid YAML."""

    pass


class ConfigValidationError(ConfigError):
    """The settings file parsed but holds invalid values."""

    pass
