"""Editor state: cursor position within the viewport."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from tilde.keys import Key, KeyEvent

logger = logging.getLogger(__name__)


@dataclass
class EditorState:
    """Cursor column/row (zero based) and viewport size.

    The cursor always stays inside the viewport: ``0 <= cx < cols`` and
    ``0 <= cy < rows``.
    """

    rows: int
    cols: int
    cx: int = 0
    cy: int = 0

    def move_cursor(self, key: Key) -> None:
        """Move one step in the direction of an arrow *key*."""
        if key is Key.ARROW_LEFT:
            if self.cx > 0:
                self.cx -= 1
        elif key is Key.ARROW_RIGHT:
            if self.cx < self.cols - 1:
                self.cx += 1
        elif key is Key.ARROW_UP:
            if self.cy > 0:
                self.cy -= 1
        elif key is Key.ARROW_DOWN:
            if self.cy < self.rows - 1:
                self.cy += 1

    def handle_key(self, event: KeyEvent) -> None:
        """Apply a navigation key; other events are ignored."""
        if event is Key.HOME:
            self.cx = 0
        elif event is Key.END:
            self.cx = max(self.cols - 1, 0)
        elif event in (Key.PAGE_UP, Key.PAGE_DOWN):
            step = Key.ARROW_UP if event is Key.PAGE_UP else Key.ARROW_DOWN
            for _ in range(self.rows):
                self.move_cursor(step)
        elif event in (Key.ARROW_LEFT, Key.ARROW_RIGHT, Key.ARROW_UP, Key.ARROW_DOWN):
            self.move_cursor(event)

    def resize(self, rows: int, cols: int) -> None:
        """Adopt a new viewport size, pulling the cursor back inside it."""
        logger.debug("Viewport resized from %dx%d to %dx%d", self.rows, self.cols, rows, cols)
        self.rows = rows
        self.cols = cols
        self.cx = max(0, min(self.cx, cols - 1))
        self.cy = max(0, min(self.cy, rows - 1))
