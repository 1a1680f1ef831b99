"""tilde: terminal control substrate of a full-screen text editor.

Raw mode handling, key decoding and single-write frame rendering.
"""

import logging

__version__ = "0.0.1"

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Main loop
from tilde.app import Editor, run_editor

# Output buffering
from tilde.append_buffer import AppendBuffer

# Configuration
from tilde.config import Config

# Editor state
from tilde.editor import EditorState

# Errors
from tilde.errors import ProtocolError, TerminalIOError, TildeError

# Keyboard input
from tilde.keys import QUIT_KEY, Char, Key, KeyEvent, ctrl_key, decode_keys, read_key

# Rendering
from tilde.render import ScreenRenderer

# Terminal interface and mode control
from tilde.terminal import (
    ProcessTerminal,
    RawModeGuard,
    Terminal,
    TerminalMode,
    TerminalModeController,
)

# Viewport sizing
from tilde.viewport import ViewportSizer

__all__ = [
    "AppendBuffer",
    "Char",
    "Config",
    "Editor",
    "EditorState",
    "Key",
    "KeyEvent",
    "ProcessTerminal",
    "ProtocolError",
    "QUIT_KEY",
    "RawModeGuard",
    "ScreenRenderer",
    "Terminal",
    "TerminalIOError",
    "TerminalMode",
    "TerminalModeController",
    "TildeError",
    "ViewportSizer",
    "ctrl_key",
    "decode_keys",
    "read_key",
    "run_editor",
]
