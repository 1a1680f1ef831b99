"""Runtime configuration for the tilde editor."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from tilde.terminal import READ_TIMEOUT_TENTHS

LOG_LEVELS = ("debug", "info", "warning", "error")


@dataclass
class Config:
    """Editor configuration.

    Logging is off unless ``log_file`` is set, since the editor owns the
    whole screen. ``write_log`` mirrors every terminal write to a file.
    """

    log_file: str | None = None
    log_level: str = "warning"
    write_log: str = ""
    read_timeout: int = READ_TIMEOUT_TENTHS

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Config:
        env = os.environ if environ is None else environ
        config = cls()
        config.log_file = env.get("TILDE_LOG_FILE") or None
        level = env.get("TILDE_LOG_LEVEL", "").lower()
        if level in LOG_LEVELS:
            config.log_level = level
        config.write_log = env.get("TILDE_WRITE_LOG", "")
        return config
