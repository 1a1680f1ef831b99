"""Terminal mode control and raw byte I/O.

Provides the ``Terminal`` protocol used by every component that reads or
writes the screen, a concrete ``ProcessTerminal`` over the process's stdin
and stdout descriptors, and ``TerminalModeController`` which captures the
user's terminal attributes, switches to raw mode and guarantees they are
put back.
"""

from __future__ import annotations

import atexit
import dataclasses
import logging
import os
import signal
import sys
import termios
from dataclasses import dataclass
from types import FrameType
from typing import Protocol

from tilde.errors import TerminalIOError

logger = logging.getLogger(__name__)

# Read timeout in tenths of a second (VTIME) while in raw mode.
READ_TIMEOUT_TENTHS = 1

# Signals routed through the raw mode guard's release path.
TERMINATION_SIGNALS = (signal.SIGTERM, signal.SIGHUP, signal.SIGINT)


# ---------------------------------------------------------------------------
# Terminal protocol
# ---------------------------------------------------------------------------


class Terminal(Protocol):
    """Interface for raw terminal I/O."""

    def read(self, size: int = 1) -> bytes:
        """Return up to *size* bytes, or ``b""`` if none arrived in time."""
        ...

    def write(self, data: bytes) -> None: ...

    def get_size(self) -> tuple[int, int]:
        """Return ``(rows, cols)``; raise ``OSError`` when unsupported."""
        ...


class ProcessTerminal:
    """Concrete terminal backed by the process's stdin/stdout descriptors.

    Reads rely on the raw mode timeout (``VMIN=0``, ``VTIME``) so they
    return ``b""`` after one quantum instead of blocking forever.
    """

    def __init__(
        self,
        stdin_fd: int | None = None,
        stdout_fd: int | None = None,
        write_log: str = "",
    ) -> None:
        self.stdin_fd = sys.stdin.fileno() if stdin_fd is None else stdin_fd
        self.stdout_fd = sys.stdout.fileno() if stdout_fd is None else stdout_fd
        self._write_log_path = write_log

    def read(self, size: int = 1) -> bytes:
        try:
            return os.read(self.stdin_fd, size)
        except (BlockingIOError, InterruptedError):
            # EAGAIN / EINTR: no data yet
            return b""
        except OSError as e:
            raise TerminalIOError(f"read: {e}") from e

    def write(self, data: bytes) -> None:
        view = memoryview(data)
        try:
            while view:
                written = os.write(self.stdout_fd, view)
                view = view[written:]
        except OSError as e:
            raise TerminalIOError(f"write: {e}") from e

        if self._write_log_path:
            try:
                with open(self._write_log_path, "ab") as f:
                    f.write(data)
            except OSError as e:
                logger.warning("Cannot append to write log %s: %s", self._write_log_path, e)

    def get_size(self) -> tuple[int, int]:
        size = os.get_terminal_size(self.stdout_fd)
        return size.lines, size.columns


# ---------------------------------------------------------------------------
# Terminal attributes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TerminalMode:
    """Immutable snapshot of the attributes returned by ``tcgetattr``."""

    iflag: int
    oflag: int
    cflag: int
    lflag: int
    ispeed: int
    ospeed: int
    cc: tuple

    @classmethod
    def from_attrs(cls, attrs: list) -> TerminalMode:
        iflag, oflag, cflag, lflag, ispeed, ospeed, cc = attrs
        return cls(iflag, oflag, cflag, lflag, ispeed, ospeed, tuple(cc))

    def to_attrs(self) -> list:
        return [
            self.iflag,
            self.oflag,
            self.cflag,
            self.lflag,
            self.ispeed,
            self.ospeed,
            list(self.cc),
        ]

    def raw(self, timeout_tenths: int = READ_TIMEOUT_TENTHS) -> TerminalMode:
        """Derive the raw variant of this mode.

        Input: no software flow control, no CR->NL translation, no break
        interrupt, parity check or 8th bit stripping. Output: no post
        processing. Local: no echo, canonical input, signal generation or
        extended input processing. Reads return after *timeout_tenths*
        tenths of a second even when no byte is available.
        """
        cc = list(self.cc)
        cc[termios.VMIN] = 0
        cc[termios.VTIME] = timeout_tenths
        return dataclasses.replace(
            self,
            iflag=self.iflag
            & ~(termios.BRKINT | termios.ICRNL | termios.INPCK | termios.ISTRIP | termios.IXON),
            oflag=self.oflag & ~termios.OPOST,
            cflag=self.cflag | termios.CS8,
            lflag=self.lflag & ~(termios.ECHO | termios.ICANON | termios.IEXTEN | termios.ISIG),
            cc=tuple(cc),
        )


class TerminalModeController:
    """Captures, switches and restores the attributes of a terminal."""

    def __init__(self, fd: int | None = None, timeout_tenths: int = READ_TIMEOUT_TENTHS) -> None:
        self.fd = sys.stdin.fileno() if fd is None else fd
        self.timeout_tenths = timeout_tenths

    def capture_original_mode(self) -> TerminalMode:
        try:
            attrs = termios.tcgetattr(self.fd)
        except (termios.error, OSError) as e:
            raise TerminalIOError(f"tcgetattr: {e}") from e
        logger.debug("Captured terminal mode on fd %d", self.fd)
        return TerminalMode.from_attrs(attrs)

    def enable_raw_mode(self, original: TerminalMode) -> None:
        self._apply(original.raw(self.timeout_tenths))
        logger.debug("Raw mode enabled on fd %d", self.fd)

    def restore_mode(self, original: TerminalMode) -> None:
        self._apply(original)
        logger.debug("Terminal mode restored on fd %d", self.fd)

    def raw_mode(self) -> RawModeGuard:
        """Enter raw mode and return the guard that undoes it.

        Use as ``with controller.raw_mode(): ...``.
        """
        original = self.capture_original_mode()
        guard = RawModeGuard(self, original)
        guard.acquire()
        return guard

    def _apply(self, mode: TerminalMode) -> None:
        try:
            termios.tcsetattr(self.fd, termios.TCSAFLUSH, mode.to_attrs())
        except (termios.error, OSError) as e:
            raise TerminalIOError(f"tcsetattr: {e}") from e


class RawModeGuard:
    """Holds raw mode; ``release`` restores the original mode exactly once.

    While held, an ``atexit`` hook and handlers for ``TERMINATION_SIGNALS``
    are installed. The signal handlers raise ``SystemExit(128 + signum)`` so
    termination unwinds through the same ``finally``/``__exit__`` path as a
    normal quit.
    """

    def __init__(self, controller: TerminalModeController, original: TerminalMode) -> None:
        self.controller = controller
        self.original = original
        self._held = False
        self._prev_handlers: dict[int, object] = {}

    @property
    def held(self) -> bool:
        return self._held

    def acquire(self) -> None:
        if self._held:
            return
        self.controller.enable_raw_mode(self.original)
        self._held = True
        atexit.register(self.release)
        for signum in TERMINATION_SIGNALS:
            self._prev_handlers[signum] = signal.getsignal(signum)
            signal.signal(signum, self._on_signal)

    def release(self) -> None:
        if not self._held:
            return
        self._held = False
        atexit.unregister(self.release)
        try:
            self.controller.restore_mode(self.original)
        finally:
            # Our handlers stay installed until the mode is back
            for signum, handler in self._prev_handlers.items():
                # None means the handler was not installed from Python
                signal.signal(signum, signal.SIG_DFL if handler is None else handler)
            self._prev_handlers.clear()

    def _on_signal(self, signum: int, frame: FrameType | None) -> None:
        logger.info("Received signal %d, leaving raw mode", signum)
        raise SystemExit(128 + signum)

    def __enter__(self) -> RawModeGuard:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
