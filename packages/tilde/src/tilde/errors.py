"""Exception hierarchy for terminal control failures."""

from __future__ import annotations


class TildeError(Exception):
    """Base class for every error raised by tilde."""


class TerminalIOError(TildeError):
    """Terminal attribute get/set, read or write failed at the OS level."""


class ProtocolError(TildeError):
    """The terminal sent a malformed or unterminated control sequence reply."""
