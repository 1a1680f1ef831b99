"""Viewport sizing: window size query with a cursor-position fallback."""

from __future__ import annotations

import logging
import re

from tilde import ansi
from tilde.errors import ProtocolError
from tilde.terminal import Terminal

logger = logging.getLogger(__name__)

# Reply capacity, terminator included.
CURSOR_REPLY_CAPACITY = 32

_CURSOR_REPLY_RE = re.compile(rb"\x1b\[(\d+);(\d+)")


class ViewportSizer:
    """Determines the terminal's rows and columns.

    Needs raw mode: the fallback reads the terminal's cursor report from
    input, which would otherwise be echoed and line-buffered.
    """

    def __init__(self, terminal: Terminal) -> None:
        self.terminal = terminal

    def get_window_size(self) -> tuple[int, int]:
        try:
            rows, cols = self.terminal.get_size()
        except OSError as e:
            logger.info("Window size query unsupported (%s), probing cursor", e)
        else:
            if cols != 0:
                logger.debug("Window size %dx%d", rows, cols)
                return rows, cols
            logger.info("Window size query reported zero columns, probing cursor")

        self.terminal.write(ansi.CURSOR_FAR_BOTTOM_RIGHT)
        return self.get_cursor_position()

    def get_cursor_position(self) -> tuple[int, int]:
        """Ask the terminal where the cursor is and return ``(row, col)``."""
        self.terminal.write(ansi.REQUEST_CURSOR_POSITION)

        reply = bytearray()
        terminated = False
        while len(reply) < CURSOR_REPLY_CAPACITY - 1:
            c = self.terminal.read(1)
            if not c:
                break
            if c == b"R":
                terminated = True
                break
            reply += c

        if not terminated:
            logger.warning("Unterminated cursor position reply: %r", bytes(reply))
            raise ProtocolError(f"unterminated cursor position reply: {bytes(reply)!r}")

        match = _CURSOR_REPLY_RE.fullmatch(bytes(reply))
        if match is None:
            logger.warning("Malformed cursor position reply: %r", bytes(reply))
            raise ProtocolError(f"malformed cursor position reply: {bytes(reply)!r}")

        return int(match.group(1)), int(match.group(2))
