from __future__ import annotations

from conftest import FakeTransport, data_lines, fields, make_walk
from scsiwalk.core import runners


def _device_error(command: bytes) -> tuple[bytes | None, bytes]:
    return bytes.fromhex("7000050000000000"), b""


def test_capacity_family_produces_two_clean_records() -> None:
    def device(command: bytes) -> tuple[bytes | None, bytes]:
        if command[0] == 0x25:
            return None, bytes(8)
        return None, bytes(32)

    transport = FakeTransport(device)
    walk, stream = make_walk(transport)
    runners.run_capacity(walk)

    lines = data_lines(stream)
    assert len(lines) == 2
    for line in lines:
        message, _, sense, _ = fields(line)
        assert message == ""
        assert sense == ""
    assert fields(lines[0])[1] == "25 00 00 00 00 00 00 00 00 00"
    assert fields(lines[1])[1] == "9e 10 00 00 00 00 00 00 00 00 00 00 02 00 00 00"
    assert fields(lines[1])[3] == " ".join(["00"] * 32)
    assert [capacity for _, capacity in transport.calls] == [8, 512]


def test_standard_inquiry() -> None:
    transport = FakeTransport(lambda command: (None, b"\x00\x00\x05\x02"))
    walk, stream = make_walk(transport)
    runners.run_standard_inquiry(walk)

    assert transport.commands == [bytes.fromhex("120000020000")]
    assert data_lines(stream) == [",12 00 00 02 00 00,,00 00 05 02"]


def test_mode_sense_6_sweep_order_and_count() -> None:
    transport = FakeTransport(_device_error)
    walk, stream = make_walk(transport)
    runners.sweep_mode_sense_6(walk)

    commands = transport.commands
    assert len(data_lines(stream)) == 8
    assert all(command[0] == 0x1A for command in commands)
    assert [command[1] for command in commands] == [0x08] * 4 + [0x00] * 4
    assert [command[2] for command in commands] == [0x3F, 0x7F, 0xBF, 0xFF] * 2
    assert all(command[3] == 0xFF and command[4] == 0xFF for command in commands)


def test_mode_sense_10_sweep_order_and_count() -> None:
    transport = FakeTransport(lambda command: None)
    walk, stream = make_walk(transport)
    runners.sweep_mode_sense_10(walk)

    commands = transport.commands
    assert len(data_lines(stream)) == 16
    assert [command[1] for command in commands] == [0x18] * 4 + [0x08] * 4 + [0x00] * 4 + [0x10] * 4
    assert [command[2] >> 6 for command in commands] == [0, 1, 2, 3] * 4
    assert all(command[7:9] == b"\x10\x00" for command in commands)


def test_mode_sense_runs_ten_byte_variant_first() -> None:
    transport = FakeTransport()
    walk, stream = make_walk(transport)
    runners.run_mode_sense(walk)

    opcodes = [command[0] for command in transport.commands]
    assert opcodes == [0x5A] * 16 + [0x1A] * 8
    assert len(data_lines(stream)) == 24


def test_defect_data_sweep_covers_all_formats_and_lists() -> None:
    transport = FakeTransport(_device_error)
    walk, stream = make_walk(transport)
    runners.sweep_read_defect_data_10(walk)

    commands = transport.commands
    assert len(commands) == 32
    assert len(data_lines(stream)) == 32
    assert [command[2] for command in commands[:4]] == [0x10, 0x10, 0x08, 0x08]
    assert [command[7:9] for command in commands[:4]] == [b"\x00\x08", b"\x02\x00"] * 2
    assert [command[2] & 0x07 for command in commands[::4]] == list(range(8))
    assert commands[-1][2] == 0x0F


def test_defect_data_12_allocation_length_is_four_bytes() -> None:
    transport = FakeTransport()
    walk, _ = make_walk(transport)
    runners.sweep_read_defect_data_12(walk)

    first = transport.commands[0]
    assert len(first) == 12
    assert first[0] == 0xB7
    assert first[1] == 0x10
    assert first[6:10] == b"\x00\x00\x00\x08"


def test_sweeps_ignore_device_answers() -> None:
    silent, failing = FakeTransport(), FakeTransport(lambda command: None)
    for transport in (silent, failing):
        walk, _ = make_walk(transport)
        runners.run_defect_data(walk)
    assert silent.commands == failing.commands
    assert len(silent.commands) == 64
