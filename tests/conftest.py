from __future__ import annotations

import io
from collections.abc import Callable

import pytest

from scsiwalk.core.exchange import Walk
from scsiwalk.core.model import Direction
from scsiwalk.core.record import HEADER, RecordWriter

Response = tuple[bytes | None, bytes] | None


class FakeTransport:
    """Scripted device: the responder maps command bytes to (sense, data), or None for a failed submit."""

    def __init__(self, responder: Callable[[bytes], Response] | None = None) -> None:
        self.responder = responder or (lambda command: (None, b""))
        self.calls: list[tuple[bytes, int]] = []
        self._result: Response = None

    def submit(self, command: bytes, capacity: int, direction: Direction = Direction.FROM_DEVICE) -> bool:
        self.calls.append((bytes(command), capacity))
        self._result = self.responder(bytes(command))
        return self._result is not None

    def read_result(self) -> tuple[bytes | None, bytes]:
        assert self._result is not None
        return self._result

    @property
    def commands(self) -> list[bytes]:
        return [command for command, _ in self.calls]


def make_walk(transport: FakeTransport) -> tuple[Walk, io.StringIO]:
    stream = io.StringIO()
    return Walk(transport=transport, writer=RecordWriter(stream)), stream


def data_lines(stream: io.StringIO) -> list[str]:
    lines = stream.getvalue().splitlines()
    if lines and lines[0] == HEADER:
        return lines[1:]
    return lines


def fields(line: str) -> list[str]:
    return line.split(",")


def sample_device(command: bytes) -> Response:
    """A small but complete device used by end-to-end tests."""
    opcode = command[0]
    if opcode == 0x25:
        return None, bytes.fromhex("0000ffff00000200")
    if opcode == 0x9E:
        return None, bytes.fromhex("000000000000ffff00000200") + bytes(20)
    if opcode == 0x12 and command[1] == 0:
        return None, bytes.fromhex("00000502") + b"ATA     DISK"
    if opcode == 0x12:
        page = command[2]
        if page == 0x00:
            return None, bytes.fromhex("00000003 00 80 83")
        if page == 0x80:
            return None, bytes.fromhex("00800004") + b"SN01"
        return bytes.fromhex("700005000000000a0000000024000000000000"), b""
    if opcode == 0x4D:
        page, subpage = command[2] & 0x3F, command[3]
        if (page, subpage) == (0x00, 0x00):
            return None, bytes.fromhex("00000002 0d 2f")
        if (page, subpage) == (0x00, 0xFF):
            return None, bytes.fromhex("40ff0004 0d00 0d01")
        return None, bytes([page, subpage, 0x00, 0x02, 0xAA, 0xBB])
    if opcode == 0x1C:
        return bytes.fromhex("70000500000000"), b""
    if opcode == 0xB7:
        return None
    return None, bytes.fromhex("00000008")


@pytest.fixture
def sample_transport() -> FakeTransport:
    return FakeTransport(sample_device)
