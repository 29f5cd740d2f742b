"""Interactive terminal session against the node shell pod."""

from __future__ import annotations

import sys
from contextlib import ExitStack
from typing import BinaryIO

from kubesh.cluster.base import ClusterClientError
from kubesh.exceptions import ExecStreamError, NotATerminalError
from kubesh.nodeshell.session import CONTAINER_NAME, Session
from kubesh.nodeshell.terminal import (
    TerminalSizeMonitor,
    exit_on_signals,
    raw_terminal,
)


class SessionBridge:
    """Connects the local terminal to a shell in the node shell pod."""

    def __init__(
        self,
        stdin: BinaryIO | None = None,
        stdout: BinaryIO | None = None,
    ) -> None:
        """Initialize the bridge.

        Args:
            stdin: Local input. Defaults to the process's binary stdin.
            stdout: Local output. Defaults to the process's binary stdout.
        """
        self._stdin = stdin if stdin is not None else sys.stdin.buffer
        self._stdout = stdout if stdout is not None else sys.stdout.buffer

    def run(self, session: Session) -> None:
        """Run the configured shell in the pod until it exits.

        The local terminal is in raw mode while the shell runs and is
        restored however the call ends.

        Args:
            session: Session with a running pod.

        Raises:
            NotATerminalError: If stdout is not a terminal.
            ExecStreamError: If the stream fails or the shell exits non-zero.
        """
        if not self._stdout.isatty():
            raise NotATerminalError("unable to setup tty, output is not a terminal")

        with ExitStack() as stack:
            stack.enter_context(exit_on_signals())
            if self._stdin.isatty():
                stack.enter_context(raw_terminal(self._stdin.fileno()))
            sizes = stack.enter_context(TerminalSizeMonitor(self._stdout.fileno()))

            try:
                # stderr shares the stdout channel when tty is on
                exit_code = session.client.open_exec_stream(
                    session.namespace,
                    session.pod_name,
                    CONTAINER_NAME,
                    list(session.settings.shell_command),
                    tty=True,
                    stdin=self._stdin,
                    stdout=self._stdout,
                    stderr=None,
                    size_feed=sizes,
                )
            except ClusterClientError as e:
                raise ExecStreamError(f"exec shell command: {e}") from e

        if exit_code != 0:
            raise ExecStreamError(
                "exec shell command: command terminated with exit code "
                f"{exit_code}",
                exit_code=exit_code,
            )
