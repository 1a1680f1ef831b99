import copy
import termios

import pytest

import tilde.terminal


def _cooked_attrs() -> list:
    cc = [b"\x00"] * termios.NCCS
    cc[termios.VMIN] = b"\x01"
    cc[termios.VTIME] = b"\x00"
    return [
        termios.BRKINT | termios.ICRNL | termios.IXON,
        termios.OPOST | termios.ONLCR,
        termios.CREAD | termios.CS7,
        termios.ECHO | termios.ICANON | termios.ISIG | termios.IEXTEN,
        termios.B38400,
        termios.B38400,
        cc,
    ]


class FakeTermios:
    """Stands in for the termios module: keeps attributes per fd in memory."""

    error = termios.error

    def __init__(self) -> None:
        self.attrs = {0: _cooked_attrs()}
        self.set_calls: list[tuple[int, int, list]] = []
        self.fail_get = False
        self.fail_set = False

    def tcgetattr(self, fd):
        if self.fail_get:
            raise termios.error(25, "Inappropriate ioctl for device")
        return copy.deepcopy(self.attrs[fd])

    def tcsetattr(self, fd, when, attrs):
        if self.fail_set:
            raise termios.error(5, "Input/output error")
        self.set_calls.append((fd, when, copy.deepcopy(attrs)))
        self.attrs[fd] = copy.deepcopy(attrs)

    def __getattr__(self, name):
        return getattr(termios, name)


@pytest.fixture
def fake_termios(monkeypatch):
    fake = FakeTermios()
    monkeypatch.setattr(tilde.terminal, "termios", fake)
    return fake
