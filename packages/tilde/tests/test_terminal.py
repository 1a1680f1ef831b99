"""Tests for tilde.terminal -- mode control, the raw mode guard and fd I/O."""

from __future__ import annotations

import os
import signal
import termios

import pytest

import tilde.terminal
from tilde.errors import TerminalIOError
from tilde.terminal import (
    TERMINATION_SIGNALS,
    ProcessTerminal,
    TerminalMode,
    TerminalModeController,
)


# ---------------------------------------------------------------------------
# TerminalMode
# ---------------------------------------------------------------------------


class TestTerminalMode:
    def test_round_trips_tcgetattr_list(self, fake_termios) -> None:
        attrs = fake_termios.tcgetattr(0)
        assert TerminalMode.from_attrs(attrs).to_attrs() == attrs

    def test_raw_clears_input_flags(self, fake_termios) -> None:
        raw = TerminalMode.from_attrs(fake_termios.tcgetattr(0)).raw()
        for flag in (termios.IXON, termios.ICRNL, termios.BRKINT, termios.INPCK, termios.ISTRIP):
            assert not raw.iflag & flag

    def test_raw_disables_output_processing(self, fake_termios) -> None:
        raw = TerminalMode.from_attrs(fake_termios.tcgetattr(0)).raw()
        assert not raw.oflag & termios.OPOST

    def test_raw_clears_local_flags(self, fake_termios) -> None:
        raw = TerminalMode.from_attrs(fake_termios.tcgetattr(0)).raw()
        for flag in (termios.ECHO, termios.ICANON, termios.ISIG, termios.IEXTEN):
            assert not raw.lflag & flag

    def test_raw_uses_eight_bit_characters(self, fake_termios) -> None:
        raw = TerminalMode.from_attrs(fake_termios.tcgetattr(0)).raw()
        assert raw.cflag & termios.CSIZE == termios.CS8

    def test_raw_read_returns_after_timeout(self, fake_termios) -> None:
        raw = TerminalMode.from_attrs(fake_termios.tcgetattr(0)).raw()
        assert raw.cc[termios.VMIN] == 0
        assert raw.cc[termios.VTIME] == 1

    def test_raw_custom_timeout(self, fake_termios) -> None:
        raw = TerminalMode.from_attrs(fake_termios.tcgetattr(0)).raw(timeout_tenths=3)
        assert raw.cc[termios.VTIME] == 3

    def test_raw_leaves_original_untouched(self, fake_termios) -> None:
        original = TerminalMode.from_attrs(fake_termios.tcgetattr(0))
        snapshot = original.to_attrs()
        original.raw()
        assert original.to_attrs() == snapshot


# ---------------------------------------------------------------------------
# TerminalModeController
# ---------------------------------------------------------------------------


class TestTerminalModeController:
    def test_capture_reads_current_attributes(self, fake_termios) -> None:
        controller = TerminalModeController(fd=0)
        mode = controller.capture_original_mode()
        assert mode.to_attrs() == fake_termios.attrs[0]

    def test_capture_failure_raises_terminal_io_error(self, fake_termios) -> None:
        fake_termios.fail_get = True
        with pytest.raises(TerminalIOError, match="tcgetattr"):
            TerminalModeController(fd=0).capture_original_mode()

    def test_enable_applies_raw_mode_in_one_call(self, fake_termios) -> None:
        controller = TerminalModeController(fd=0)
        original = controller.capture_original_mode()
        controller.enable_raw_mode(original)
        assert len(fake_termios.set_calls) == 1
        fd, when, attrs = fake_termios.set_calls[0]
        assert fd == 0
        assert when == termios.TCSAFLUSH
        assert attrs == original.raw().to_attrs()

    def test_enable_failure_raises_terminal_io_error(self, fake_termios) -> None:
        controller = TerminalModeController(fd=0)
        original = controller.capture_original_mode()
        fake_termios.fail_set = True
        with pytest.raises(TerminalIOError, match="tcsetattr"):
            controller.enable_raw_mode(original)

    def test_restore_after_enable_yields_original(self, fake_termios) -> None:
        controller = TerminalModeController(fd=0)
        before = fake_termios.tcgetattr(0)
        original = controller.capture_original_mode()
        controller.enable_raw_mode(original)
        assert fake_termios.attrs[0] != before
        controller.restore_mode(original)
        assert fake_termios.attrs[0] == before

    def test_timeout_is_configurable(self, fake_termios) -> None:
        controller = TerminalModeController(fd=0, timeout_tenths=5)
        controller.enable_raw_mode(controller.capture_original_mode())
        assert fake_termios.attrs[0][6][termios.VTIME] == 5


# ---------------------------------------------------------------------------
# RawModeGuard
# ---------------------------------------------------------------------------


class TestRawModeGuard:
    def test_with_block_restores_on_exit(self, fake_termios) -> None:
        before = fake_termios.tcgetattr(0)
        with TerminalModeController(fd=0).raw_mode() as guard:
            assert guard.held
            assert fake_termios.attrs[0] != before
        assert not guard.held
        assert fake_termios.attrs[0] == before

    def test_restores_when_body_raises(self, fake_termios) -> None:
        before = fake_termios.tcgetattr(0)
        with pytest.raises(ValueError):
            with TerminalModeController(fd=0).raw_mode():
                raise ValueError("boom")
        assert fake_termios.attrs[0] == before

    def test_release_runs_once(self, fake_termios) -> None:
        guard = TerminalModeController(fd=0).raw_mode()
        guard.release()
        guard.release()
        with guard:
            pass
        # one enable, one restore
        assert len(fake_termios.set_calls) == 2

    def test_registers_and_unregisters_atexit_hook(self, fake_termios, monkeypatch) -> None:
        registered = []
        monkeypatch.setattr(tilde.terminal.atexit, "register", registered.append)
        monkeypatch.setattr(tilde.terminal.atexit, "unregister", registered.remove)

        guard = TerminalModeController(fd=0).raw_mode()
        assert registered == [guard.release]
        guard.release()
        assert registered == []

    def test_installs_and_restores_signal_handlers(self, fake_termios) -> None:
        previous = {signum: signal.getsignal(signum) for signum in TERMINATION_SIGNALS}
        with TerminalModeController(fd=0).raw_mode() as guard:
            for signum in TERMINATION_SIGNALS:
                assert signal.getsignal(signum) == guard._on_signal
        for signum in TERMINATION_SIGNALS:
            assert signal.getsignal(signum) == previous[signum]

    def test_signal_handlers_stay_installed_while_mode_is_restored(
        self, fake_termios, monkeypatch
    ) -> None:
        controller = TerminalModeController(fd=0)
        guard = controller.raw_mode()
        restore_mode = controller.restore_mode
        seen = []

        def recording_restore(original):
            seen.append(signal.getsignal(signal.SIGTERM) == guard._on_signal)
            restore_mode(original)

        monkeypatch.setattr(controller, "restore_mode", recording_restore)
        guard.release()
        assert seen == [True]
        assert signal.getsignal(signal.SIGTERM) != guard._on_signal

    def test_signal_handlers_restored_when_restore_fails(self, fake_termios) -> None:
        previous = {signum: signal.getsignal(signum) for signum in TERMINATION_SIGNALS}
        guard = TerminalModeController(fd=0).raw_mode()
        fake_termios.fail_set = True
        with pytest.raises(TerminalIOError, match="tcsetattr"):
            guard.release()
        assert not guard.held
        for signum in TERMINATION_SIGNALS:
            assert signal.getsignal(signum) == previous[signum]

    def test_signal_unwinds_through_release(self, fake_termios) -> None:
        before = fake_termios.tcgetattr(0)
        with pytest.raises(SystemExit) as excinfo:
            with TerminalModeController(fd=0).raw_mode():
                handler = signal.getsignal(signal.SIGTERM)
                handler(signal.SIGTERM, None)
        assert excinfo.value.code == 128 + signal.SIGTERM
        assert fake_termios.attrs[0] == before

    def test_capture_failure_leaves_nothing_installed(self, fake_termios) -> None:
        fake_termios.fail_get = True
        previous = signal.getsignal(signal.SIGTERM)
        with pytest.raises(TerminalIOError):
            TerminalModeController(fd=0).raw_mode()
        assert signal.getsignal(signal.SIGTERM) == previous
        assert fake_termios.set_calls == []


# ---------------------------------------------------------------------------
# ProcessTerminal
# ---------------------------------------------------------------------------


@pytest.fixture
def pipe():
    r, w = os.pipe()
    yield r, w
    for fd in (r, w):
        try:
            os.close(fd)
        except OSError:
            pass


class TestProcessTerminal:
    def test_read_returns_available_byte(self, pipe) -> None:
        r, w = pipe
        os.write(w, b"ab")
        term = ProcessTerminal(stdin_fd=r, stdout_fd=w)
        assert term.read(1) == b"a"
        assert term.read(1) == b"b"

    def test_read_without_data_returns_empty(self, pipe) -> None:
        r, w = pipe
        os.set_blocking(r, False)
        term = ProcessTerminal(stdin_fd=r, stdout_fd=w)
        assert term.read(1) == b""

    def test_read_error_raises_terminal_io_error(self, pipe) -> None:
        r, w = pipe
        term = ProcessTerminal(stdin_fd=r, stdout_fd=w)
        os.close(r)
        with pytest.raises(TerminalIOError, match="read"):
            term.read(1)

    def test_write_sends_all_bytes(self, pipe) -> None:
        r, w = pipe
        term = ProcessTerminal(stdin_fd=r, stdout_fd=w)
        term.write(b"\x1b[2J\x1b[H")
        assert os.read(r, 64) == b"\x1b[2J\x1b[H"

    def test_write_error_raises_terminal_io_error(self, pipe) -> None:
        r, w = pipe
        term = ProcessTerminal(stdin_fd=r, stdout_fd=w)
        os.close(w)
        with pytest.raises(TerminalIOError, match="write"):
            term.write(b"x")

    def test_write_log_mirrors_output(self, pipe, tmp_path) -> None:
        r, w = pipe
        log = tmp_path / "writes.log"
        term = ProcessTerminal(stdin_fd=r, stdout_fd=w, write_log=str(log))
        term.write(b"one")
        term.write(b"two")
        assert log.read_bytes() == b"onetwo"

    def test_get_size_on_non_terminal_raises_os_error(self, pipe) -> None:
        r, w = pipe
        term = ProcessTerminal(stdin_fd=r, stdout_fd=w)
        with pytest.raises(OSError):
            term.get_size()
