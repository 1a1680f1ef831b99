"""Keyboard input decoding.

Turns the raw byte stream of a terminal in raw mode into key events. Plain
bytes become ``Char`` events; the legacy VT100/xterm escape sequences sent
for navigation keys become ``Key`` members. A lone ESC cannot be told apart
from the start of a sequence except by waiting, so every byte after ESC is
read with the terminal's read timeout and a timeout yields ``Key.ESCAPE``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Callable, Protocol, Union

ESC = 0x1B


class ByteSource(Protocol):
    """Anything keys can be read from: a ``Terminal`` or a fixed byte string."""

    def read(self, size: int = 1) -> bytes: ...


class Key(enum.Enum):
    """Named keys decoded from escape sequences."""

    ARROW_LEFT = "arrow_left"
    ARROW_RIGHT = "arrow_right"
    ARROW_UP = "arrow_up"
    ARROW_DOWN = "arrow_down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    HOME = "home"
    END = "end"
    DELETE = "delete"
    ESCAPE = "escape"


@dataclass(frozen=True)
class Char:
    """A literal input byte."""

    code: int

    def __str__(self) -> str:
        return chr(self.code)


KeyEvent = Union[Char, Key]


def ctrl_key(letter: str) -> int:
    """Return the control character produced by Ctrl + *letter*."""
    return ord(letter) & 0x1F


QUIT_KEY = Char(ctrl_key("q"))

# ---------------------------------------------------------------------------
# Sequence tables
# ---------------------------------------------------------------------------

# ESC [ <digit> ~
CSI_TILDE_KEYS: dict[bytes, Key] = {
    b"1": Key.HOME,
    b"3": Key.DELETE,
    b"4": Key.END,
    b"5": Key.PAGE_UP,
    b"6": Key.PAGE_DOWN,
    b"7": Key.HOME,
    b"8": Key.END,
}

# ESC [ <letter>
CSI_LETTER_KEYS: dict[bytes, Key] = {
    b"A": Key.ARROW_UP,
    b"B": Key.ARROW_DOWN,
    b"C": Key.ARROW_RIGHT,
    b"D": Key.ARROW_LEFT,
    b"E": Key.HOME,
    b"F": Key.END,
}

# ESC O <letter>
SS3_KEYS: dict[bytes, Key] = {
    b"H": Key.HOME,
    b"F": Key.END,
}


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def read_key(
    terminal: ByteSource,
    on_idle: Callable[[], None] | None = None,
) -> KeyEvent:
    """Block until one key has been read from *terminal* and return it.

    *on_idle* runs after every read that timed out with no data, letting
    the caller redraw while the user is not typing.
    """
    while True:
        c = terminal.read(1)
        if c:
            return _decode(c[0], terminal)
        if on_idle is not None:
            on_idle()


def decode_keys(data: bytes) -> list[KeyEvent]:
    """Decode every key in *data*; running out of data counts as a timeout."""
    reader = _ByteReader(data)
    keys: list[KeyEvent] = []
    while True:
        c = reader.read(1)
        if not c:
            return keys
        keys.append(_decode(c[0], reader))


def _decode(first: int, terminal: ByteSource) -> KeyEvent:
    if first != ESC:
        return Char(first)

    seq0 = terminal.read(1)
    if not seq0:
        return Key.ESCAPE
    seq1 = terminal.read(1)
    if not seq1:
        return Key.ESCAPE

    if seq0 == b"[":
        if b"1" <= seq1 <= b"9":
            seq2 = terminal.read(1)
            if seq2 == b"~":
                return CSI_TILDE_KEYS.get(seq1, Key.ESCAPE)
            return Key.ESCAPE
        return CSI_LETTER_KEYS.get(seq1, Key.ESCAPE)

    if seq0 == b"O":
        return SS3_KEYS.get(seq1, Key.ESCAPE)

    return Key.ESCAPE


class _ByteReader:
    """Serves a fixed byte string as a ``ByteSource``."""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0

    def read(self, size: int = 1) -> bytes:
        chunk = self._data[self._pos : self._pos + size]
        self._pos += len(chunk)
        return chunk
