"""Settings model for kubesh."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_IMAGE = "uhub.service.ucloud.cn/library/alpine:latest"
DEFAULT_PAUSE_COMMAND = ["sleep", "infinity"]
DEFAULT_SHELL_COMMAND = ["bash"]
DEFAULT_POD_NAMESPACE = "kube-system"
DEFAULT_POD_NAME = "node-shell-{node}"

NODE_PLACEHOLDER = "{node}"


@dataclass
class Settings:
    """Resolved kubesh settings.

    Attributes:
        image: Image for the node shell container. It only needs nsenter
            and the pause command.
        pause_command: Command that keeps the pod alive in the host
            namespaces.
        shell_command: Command executed for the interactive session.
        pod_namespace: Namespace holding node shell pods.
        pod_name: Pod name template; "{node}" is replaced by the node name.
    """

    image: str = DEFAULT_IMAGE
    pause_command: list[str] = field(
        default_factory=lambda: list(DEFAULT_PAUSE_COMMAND)
    )
    shell_command: list[str] = field(
        default_factory=lambda: list(DEFAULT_SHELL_COMMAND)
    )
    pod_namespace: str = DEFAULT_POD_NAMESPACE
    pod_name: str = DEFAULT_POD_NAME

    def apply_defaults(self) -> Settings:
        """Replace each empty field with its built-in default, in place."""
        if not self.image:
            self.image = DEFAULT_IMAGE
        if not self.pause_command:
            self.pause_command = list(DEFAULT_PAUSE_COMMAND)
        if not self.shell_command:
            self.shell_command = list(DEFAULT_SHELL_COMMAND)
        if not self.pod_namespace:
            self.pod_namespace = DEFAULT_POD_NAMESPACE
        if not self.pod_name:
            self.pod_name = DEFAULT_POD_NAME
        return self

    def pod_name_for(self, node: str) -> str:
        """Render the pod name template for a node."""
        return self.pod_name.replace(NODE_PLACEHOLDER, node)
