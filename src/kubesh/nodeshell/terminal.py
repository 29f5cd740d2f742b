"""Local terminal handling: raw mode and size change monitoring."""

from __future__ import annotations

import os
import signal
import sys
import termios
import threading
import tty
from collections.abc import Callable, Iterator
from contextlib import contextmanager, suppress
from types import FrameType
from typing import Any

from kubesh.cluster.base import TerminalSize

# Exit statuses used when a signal ends the session (128 + signal number)
SIGNAL_EXIT_CODES = {
    signal.SIGHUP: 129,
    signal.SIGTERM: 143,
}


def get_terminal_size(fd: int) -> TerminalSize | None:
    """Return the size of the terminal on fd, or None if it has none."""
    try:
        size = os.get_terminal_size(fd)
    except OSError:
        return None
    return TerminalSize(width=size.columns, height=size.lines)


@contextmanager
def raw_terminal(fd: int) -> Iterator[None]:
    """Put the terminal on fd into raw mode, restoring it on exit."""
    saved = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        yield
    finally:
        # A hung up terminal has no mode left to restore
        with suppress(termios.error):
            termios.tcsetattr(fd, termios.TCSADRAIN, saved)


@contextmanager
def exit_on_signals() -> Iterator[None]:
    """Turn SIGHUP and SIGTERM into SystemExit for the duration.

    This lets enclosing context managers restore the terminal when the
    session is killed or its terminal goes away.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    def handler(signum: int, frame: FrameType | None) -> None:
        sys.exit(SIGNAL_EXIT_CODES[signal.Signals(signum)])

    previous: dict[signal.Signals, Any] = {}
    for sig in SIGNAL_EXIT_CODES:
        previous[sig] = signal.signal(sig, handler)
    try:
        yield
    finally:
        for sig, old in previous.items():
            signal.signal(sig, old)


class TerminalSizeQueue:
    """Single-slot queue of terminal sizes.

    A newer size replaces one that has not been taken yet, so a slow
    consumer only ever sees the latest size.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._pending: TerminalSize | None = None
        self._closed = False

    def put(self, size: TerminalSize) -> None:
        """Offer a size, replacing any pending one."""
        with self._cond:
            self._pending = size
            self._cond.notify_all()

    def next(
        self, block: bool = True, timeout: float | None = None
    ) -> TerminalSize | None:
        """Take the pending size.

        Args:
            block: Wait for a size when none is pending.
            timeout: Longest wait in seconds when blocking, None for no limit.

        Returns:
            The pending size, or None if there is none (closed, non-blocking
            or timed out).
        """
        with self._cond:
            if block:
                self._cond.wait_for(
                    lambda: self._pending is not None or self._closed,
                    timeout,
                )
            size, self._pending = self._pending, None
            return size

    def close(self) -> None:
        """Wake up blocked consumers; later puts are still accepted."""
        with self._cond:
            self._closed = True
            self._cond.notify_all()


class TerminalSizeMonitor:
    """Feeds a TerminalSizeQueue with the size of a terminal.

    On start the current size is queued right away, so the first event
    always carries the size at attach time. After that a background thread
    queues the size again every time SIGWINCH is delivered. The signal
    handler only sets an event; it never touches the queue lock, which the
    main thread may be holding when the signal arrives.
    """

    def __init__(
        self,
        fd: int,
        queue: TerminalSizeQueue | None = None,
        get_size: Callable[[int], TerminalSize | None] = get_terminal_size,
    ) -> None:
        self._fd = fd
        self.queue = queue if queue is not None else TerminalSizeQueue()
        self._get_size = get_size
        self._resized = threading.Event()
        self._stopped = threading.Event()
        self._thread: threading.Thread | None = None
        self._previous_handler: Any = None
        self._handler_installed = False

    def start(self) -> TerminalSizeQueue:
        """Queue the current size and begin watching for resizes."""
        self._publish()

        if hasattr(signal, "SIGWINCH") and (
            threading.current_thread() is threading.main_thread()
        ):
            self._previous_handler = signal.signal(signal.SIGWINCH, self._on_winch)
            self._handler_installed = True

        self._thread = threading.Thread(
            target=self._watch, name="kubesh-winch", daemon=True
        )
        self._thread.start()
        return self.queue

    def stop(self) -> None:
        """Stop watching and restore the previous SIGWINCH handler."""
        if self._handler_installed:
            signal.signal(signal.SIGWINCH, self._previous_handler)
            self._handler_installed = False
        self._stopped.set()
        self._resized.set()
        if self._thread is not None:
            self._thread.join(timeout=1)
            self._thread = None
        self.queue.close()

    def notify_resize(self) -> None:
        """Record that the terminal changed size."""
        self._resized.set()

    def __enter__(self) -> TerminalSizeQueue:
        return self.start()

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def _on_winch(self, signum: int, frame: FrameType | None) -> None:
        self.notify_resize()

    def _watch(self) -> None:
        while True:
            self._resized.wait()
            if self._stopped.is_set():
                return
            self._resized.clear()
            self._publish()

    def _publish(self) -> None:
        size = self._get_size(self._fd)
        if size is not None:
            self.queue.put(size)
