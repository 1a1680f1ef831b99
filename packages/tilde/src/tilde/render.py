"""Screen rendering: compose a full frame and write it in one go."""

from __future__ import annotations

from tilde import __version__, ansi
from tilde.append_buffer import AppendBuffer
from tilde.editor import EditorState
from tilde.terminal import Terminal
from tilde.utils import truncate_to_width, visible_width

ROW_MARKER = "~"


class ScreenRenderer:
    """Draws the editor screen for a given ``EditorState``.

    Each refresh hides the cursor, repaints every row from the top, parks
    the cursor at the state's position and shows it again. Rows past the
    end of the (not yet existing) document show ``ROW_MARKER``; a third of
    the way down the screen carries the centered welcome banner.
    """

    def __init__(self, terminal: Terminal, version: str = __version__) -> None:
        self.terminal = terminal
        self.version = version

    def welcome_message(self) -> str:
        return f"Tilde Editor -- version {self.version}"

    def refresh(self, state: EditorState) -> None:
        with AppendBuffer() as buf:
            buf.append(ansi.HIDE_CURSOR)
            buf.append(ansi.CURSOR_HOME)

            self.draw_rows(state, buf)

            buf.append(ansi.cursor_position(state.cy + 1, state.cx + 1))
            buf.append(ansi.SHOW_CURSOR)
            buf.flush(self.terminal)

    def draw_rows(self, state: EditorState, buf: AppendBuffer) -> None:
        for y in range(state.rows):
            if y == state.rows // 3:
                self._draw_welcome(state.cols, buf)
            else:
                buf.append(ROW_MARKER)

            buf.append(ansi.CLEAR_LINE_RIGHT)
            if y < state.rows - 1:
                buf.append(ansi.CRLF)

    def _draw_welcome(self, cols: int, buf: AppendBuffer) -> None:
        welcome = truncate_to_width(self.welcome_message(), cols)
        padding = (cols - visible_width(welcome)) // 2
        if padding:
            buf.append(ROW_MARKER)
            padding -= 1
        buf.append(" " * padding)
        buf.append(welcome)
