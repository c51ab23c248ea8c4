from __future__ import annotations

import pytest

from conftest import FakeTransport, data_lines, make_walk
from scsiwalk.core.errors import FamilySelectionError
from scsiwalk.core.record import HEADER
from scsiwalk.core.walker import FAMILIES, run_all, select_families


def test_family_table_order() -> None:
    assert [family.tag for family in FAMILIES] == [
        "capacity",
        "inquiry",
        "extended-inquiry",
        "log-sense",
        "mode-sense",
        "receive-diagnostics",
        "defect-data",
    ]


def test_walk_against_unresponsive_device_records_every_attempt() -> None:
    transport = FakeTransport(lambda command: None)
    walk, stream = make_walk(transport)

    count = run_all(walk)

    lines = stream.getvalue().splitlines()
    assert lines[0] == HEADER
    assert lines.count(HEADER) == 1
    assert count == 94
    assert len(lines) == 1 + 94
    assert set(lines[1:]) == {"failed to submit command,,,"}


def test_walk_against_sample_device(sample_transport: FakeTransport) -> None:
    walk, stream = make_walk(sample_transport)

    count = run_all(walk)

    lines = data_lines(stream)
    assert count == len(lines) == 102
    assert lines[0].startswith(",25 00")
    assert lines[1].startswith(",9e 10")
    assert any(line.startswith("skipping log page 0d subpage 00") for line in lines)
    assert lines[-64:].count("failed to submit command,,,") == 32


def test_walk_issues_commands_in_family_order(sample_transport: FakeTransport) -> None:
    walk, _ = make_walk(sample_transport)
    run_all(walk)

    opcodes: list[int] = []
    for command in sample_transport.commands:
        if not opcodes or opcodes[-1] != command[0]:
            opcodes.append(command[0])
    assert opcodes == [0x25, 0x9E, 0x12, 0x4D, 0x5A, 0x1A, 0x1C, 0x37, 0xB7]


def test_select_families_keeps_canonical_order() -> None:
    selected = select_families(["defect-data", "capacity"])
    assert [family.tag for family in selected] == ["capacity", "defect-data"]


def test_select_families_none_means_all() -> None:
    assert select_families(None) == FAMILIES


def test_select_families_rejects_unknown_tag() -> None:
    with pytest.raises(FamilySelectionError, match="'smart'"):
        select_families(["capacity", "smart"])


def test_walk_subset_only_runs_selected_families() -> None:
    transport = FakeTransport()
    walk, stream = make_walk(transport)

    count = run_all(walk, select_families(["capacity", "inquiry"]))

    assert count == 3
    assert [command[0] for command in transport.commands] == [0x25, 0x9E, 0x12]


def test_empty_selection_still_writes_header() -> None:
    walk, stream = make_walk(FakeTransport())
    assert run_all(walk, ()) == 0
    assert stream.getvalue() == HEADER + "\n"
