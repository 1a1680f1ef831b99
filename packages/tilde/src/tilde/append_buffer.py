"""Per-frame output accumulator."""

from __future__ import annotations

from tilde.terminal import Terminal


class AppendBuffer:
    """Collects one frame of terminal output so it can be written at once.

    Writing escape sequences and row text piecemeal makes the terminal
    repaint mid-frame; everything goes through one buffer and one write.
    """

    __slots__ = ("_buf",)

    def __init__(self) -> None:
        self._buf = bytearray()

    def append(self, data: bytes | str) -> None:
        """Add *data* after the existing content (``str`` is UTF-8 encoded)."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        self._buf += data

    def flush(self, terminal: Terminal) -> None:
        """Write the whole content to *terminal* in one call."""
        terminal.write(bytes(self._buf))

    def release(self) -> None:
        self._buf = bytearray()

    def getvalue(self) -> bytes:
        return bytes(self._buf)

    def __len__(self) -> int:
        return len(self._buf)

    def __enter__(self) -> AppendBuffer:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()
