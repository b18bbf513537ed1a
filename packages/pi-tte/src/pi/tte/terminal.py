"""Terminal abstraction for raw-mode stdin/stdout interaction.

Provides a ``Terminal`` protocol and a concrete ``ProcessTerminal``
implementation that manages raw mode, byte-at-a-time reads with a timeout,
window size queries, and SIGWINCH-based resize notification.

Resizes are never acted on inside the signal handler; it only raises a flag
that the editor loop polls between keys, so a resize can not interleave
with an edit or a render.
"""

from __future__ import annotations

import errno
import logging
import os
import select
import signal
import sys
import termios
from typing import Protocol

from pi.tte import render

logger = logging.getLogger(__name__)


class TerminalError(RuntimeError):
    """Unrecoverable terminal failure; the editor has to exit."""


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Interface for terminal I/O operations."""

    def start(self) -> None: ...

    def stop(self) -> None: ...

    def read_byte(self, timeout: float) -> int | None: ...

    def write(self, data: bytes) -> None: ...

    def get_size(self) -> tuple[int, int]: ...

    def consume_resize(self) -> bool: ...

    def clear_screen(self) -> None: ...


# ---------------------------------------------------------------------------
# ProcessTerminal implementation
# ---------------------------------------------------------------------------


class ProcessTerminal:
    """Concrete terminal implementation backed by stdin/stdout descriptors.

    Use as a context manager: raw mode is entered on ``__enter__`` and the
    original attributes are restored (and the screen cleared) on every exit
    path, including exceptions.
    """

    def __init__(
        self, stdin_fd: int | None = None, stdout_fd: int | None = None
    ) -> None:
        self._in_fd = sys.stdin.fileno() if stdin_fd is None else stdin_fd
        self._out_fd = sys.stdout.fileno() if stdout_fd is None else stdout_fd
        self._original_termios: list | None = None
        self._prev_sigwinch_handler: signal.Handlers | None = None
        self._sigwinch_installed: bool = False
        self._resized: bool = False
        self._write_log_path: str = os.environ.get("PI_TTE_WRITE_LOG", "")

    # -- context manager ----------------------------------------------------

    def __enter__(self) -> ProcessTerminal:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        try:
            self.clear_screen()
        finally:
            self.stop()

    # -- start / stop -------------------------------------------------------

    def start(self) -> None:
        """Enable raw mode and install the resize handler."""
        try:
            self._original_termios = termios.tcgetattr(self._in_fd)
        except termios.error as exc:
            raise TerminalError(f"Failed to get terminal state: {exc}") from exc

        raw = _make_raw(self._original_termios)
        try:
            termios.tcsetattr(self._in_fd, termios.TCSAFLUSH, raw)
        except termios.error as exc:
            self._original_termios = None
            raise TerminalError(f"Failed to set raw mode: {exc}") from exc
        logger.debug("raw mode enabled on fd %d", self._in_fd)

        self._install_resize_handler()

    def stop(self) -> None:
        """Restore terminal state and the previous SIGWINCH handler."""
        self._restore_resize_handler()

        if self._original_termios is not None:
            attrs = self._original_termios
            self._original_termios = None
            try:
                termios.tcsetattr(self._in_fd, termios.TCSAFLUSH, attrs)
            except termios.error as exc:
                raise TerminalError(
                    f"Failed to disable raw mode: {exc}"
                ) from exc
            logger.debug("raw mode disabled on fd %d", self._in_fd)

    # -- input ----------------------------------------------------------------

    def read_byte(self, timeout: float) -> int | None:
        """Return one input byte, or ``None`` if *timeout* seconds pass."""
        try:
            ready, _, _ = select.select([self._in_fd], [], [], timeout)
        except InterruptedError:
            return None
        if not ready:
            return None
        try:
            data = os.read(self._in_fd, 1)
        except BlockingIOError:
            return None
        except OSError as exc:
            if exc.errno in (errno.EAGAIN, errno.EINTR):
                return None
            raise TerminalError(f"Error reading input: {exc}") from exc
        if not data:
            raise TerminalError("Error reading input: end of file")
        return data[0]

    # -- output ---------------------------------------------------------------

    def write(self, data: bytes) -> None:
        """Write *data* in full and optionally append it to the write log."""
        view = memoryview(data)
        while view:
            try:
                written = os.write(self._out_fd, view)
            except InterruptedError:
                continue
            view = view[written:]

        if self._write_log_path:
            try:
                with open(self._write_log_path, "ab") as f:
                    f.write(data)
            except OSError as exc:
                logger.debug("write log %s: %s", self._write_log_path, exc)

    def clear_screen(self) -> None:
        self.write(render.clear_screen())

    # -- size -------------------------------------------------------------------

    def get_size(self) -> tuple[int, int]:
        """Return ``(rows, columns)`` of the controlling terminal."""
        try:
            size = os.get_terminal_size(self._out_fd)
        except OSError as exc:
            raise TerminalError(f"Failed to get window size: {exc}") from exc
        if size.columns == 0:
            raise TerminalError("Failed to get window size")
        return size.lines, size.columns

    def consume_resize(self) -> bool:
        """Return ``True`` once per batch of resize signals received."""
        resized = self._resized
        self._resized = False
        return resized

    # -- private: SIGWINCH -------------------------------------------------

    def _install_resize_handler(self) -> None:
        self._prev_sigwinch_handler = signal.getsignal(signal.SIGWINCH)
        signal.signal(signal.SIGWINCH, self._on_sigwinch)
        self._sigwinch_installed = True

    def _restore_resize_handler(self) -> None:
        if not self._sigwinch_installed:
            return
        # getsignal() returns None for a handler not set from Python
        previous = self._prev_sigwinch_handler
        signal.signal(
            signal.SIGWINCH, signal.SIG_DFL if previous is None else previous
        )
        self._prev_sigwinch_handler = None
        self._sigwinch_installed = False

    def _on_sigwinch(
        self,
        signum: int,
        frame: object,
    ) -> None:
        self._resized = True


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_raw(attrs: list) -> list:
    """Derive raw-mode attributes from *attrs*.

    Input is byte-at-a-time with no echo, no signals, no flow control and
    no output post-processing.  Timeouts come from ``select``, so a read
    that does happen blocks for exactly one byte.
    """
    raw = [list(a) if isinstance(a, list) else a for a in attrs]
    iflag, oflag, cflag, lflag = 0, 1, 2, 3
    raw[iflag] &= ~(
        termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON
    )
    raw[oflag] &= ~termios.OPOST
    raw[cflag] |= termios.CS8
    raw[lflag] &= ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG)
    cc = raw[6]
    cc[termios.VMIN] = 1
    cc[termios.VTIME] = 0
    return raw
