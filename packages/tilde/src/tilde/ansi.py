"""ANSI / VT100 escape sequences emitted and parsed by the editor."""

from __future__ import annotations

ESC = b"\x1b"

CLEAR_SCREEN = b"\x1b[2J"
CURSOR_HOME = b"\x1b[H"
CLEAR_LINE_RIGHT = b"\x1b[K"
HIDE_CURSOR = b"\x1b[?25l"
SHOW_CURSOR = b"\x1b[?25h"

REQUEST_CURSOR_POSITION = b"\x1b[6n"
# Cursor motion is clamped at the screen edge, so this lands bottom-right.
CURSOR_FAR_BOTTOM_RIGHT = b"\x1b[999C\x1b[999B"

CRLF = b"\r\n"


def cursor_position(row: int, col: int) -> bytes:
    """Return the sequence placing the cursor at 1-based (*row*, *col*)."""
    return b"\x1b[%d;%dH" % (row, col)
