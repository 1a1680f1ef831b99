"""Main loop: render a frame, decode one key, dispatch it, repeat."""

from __future__ import annotations

import logging
import signal
import sys
from types import FrameType

from tilde import ansi
from tilde.config import Config
from tilde.editor import EditorState
from tilde.errors import TerminalIOError, TildeError
from tilde.keys import QUIT_KEY, read_key
from tilde.render import ScreenRenderer
from tilde.terminal import ProcessTerminal, Terminal, TerminalModeController
from tilde.viewport import ViewportSizer

logger = logging.getLogger(__name__)


class Editor:
    """Drives one editing session on an already raw terminal."""

    def __init__(
        self,
        terminal: Terminal,
        state: EditorState,
        renderer: ScreenRenderer | None = None,
        sizer: ViewportSizer | None = None,
    ) -> None:
        self.terminal = terminal
        self.state = state
        self.renderer = renderer if renderer is not None else ScreenRenderer(terminal)
        self.sizer = sizer if sizer is not None else ViewportSizer(terminal)
        self._resize_pending = False

    def request_resize(self) -> None:
        """Re-query the viewport size before the next frame."""
        self._resize_pending = True

    def refresh_screen(self) -> None:
        if self._resize_pending:
            self._resize_pending = False
            rows, cols = self.sizer.get_window_size()
            self.state.resize(rows, cols)
        self.renderer.refresh(self.state)

    def process_keypress(self) -> bool:
        """Handle one key. Returns ``False`` once the quit key was pressed."""
        key = read_key(self.terminal, on_idle=self._redraw_if_resized)
        if key == QUIT_KEY:
            logger.info("Quit key pressed")
            self.terminal.write(ansi.CLEAR_SCREEN + ansi.CURSOR_HOME)
            return False
        self.state.handle_key(key)
        return True

    def run(self) -> int:
        prev_sigwinch = signal.getsignal(signal.SIGWINCH)
        signal.signal(signal.SIGWINCH, self._on_sigwinch)
        try:
            while True:
                self.refresh_screen()
                if not self.process_keypress():
                    return 0
        finally:
            signal.signal(
                signal.SIGWINCH,
                signal.SIG_DFL if prev_sigwinch is None else prev_sigwinch,
            )

    def _redraw_if_resized(self) -> None:
        if self._resize_pending:
            self.refresh_screen()

    def _on_sigwinch(self, signum: int, frame: FrameType | None) -> None:
        self.request_resize()


def run_editor(
    config: Config | None = None,
    terminal: Terminal | None = None,
    controller: TerminalModeController | None = None,
) -> int:
    """Run the editor on the controlling terminal and return an exit status.

    Raw mode is held for the whole session and released before any error
    is reported, so the message lands on a cooked terminal.
    """
    if config is None:
        config = Config.from_env()
    if terminal is None:
        terminal = ProcessTerminal(write_log=config.write_log)
    if controller is None:
        controller = TerminalModeController(timeout_tenths=config.read_timeout)

    try:
        with controller.raw_mode():
            rows, cols = ViewportSizer(terminal).get_window_size()
            logger.info("Starting editor on a %dx%d viewport", rows, cols)
            return Editor(terminal, EditorState(rows, cols)).run()
    except TildeError as e:
        return _die(terminal, e)


def _die(terminal: Terminal, error: TildeError) -> int:
    logger.error("Fatal: %s", error)
    try:
        terminal.write(ansi.CLEAR_SCREEN + ansi.CURSOR_HOME)
    except TerminalIOError as e:
        logger.debug("Could not clear screen: %s", e)
    print(f"tilde: {error}", file=sys.stderr)
    return 1
