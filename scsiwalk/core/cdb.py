"""SCSI command block encoders.

Pure functions: given command parameters they return the framed command
bytes. Allocation lengths are clamped to what the field can hold.
"""

from __future__ import annotations

from scsiwalk.core.model import DefectList, PageControl

INQUIRY = 0x12
READ_CAPACITY_10 = 0x25
SERVICE_ACTION_IN_16 = 0x9E
READ_CAPACITY_16_SA = 0x10
LOG_SENSE = 0x4D
MODE_SENSE_6 = 0x1A
MODE_SENSE_10 = 0x5A
RECEIVE_DIAGNOSTIC_RESULTS = 0x1C
READ_DEFECT_DATA_10 = 0x37
READ_DEFECT_DATA_12 = 0xB7

# LOG SENSE page control 01b: current cumulative values
_LOG_PC_CUMULATIVE = 1


def _bit(value: bool, bit: int) -> int:
    return (1 << bit) if value else 0


def _u16(value: int) -> bytes:
    return min(value, 0xFFFF).to_bytes(2, "big")


def _u32(value: int) -> bytes:
    return min(value, 0xFFFFFFFF).to_bytes(4, "big")


def inquiry(alloc_len: int, *, evpd: bool = False, page_code: int = 0) -> bytes:
    return bytes([INQUIRY, _bit(evpd, 0), page_code & 0xFF]) + _u16(alloc_len) + b"\x00"


def read_capacity_10() -> bytes:
    return bytes([READ_CAPACITY_10]) + bytes(9)


def read_capacity_16(alloc_len: int) -> bytes:
    return bytes([SERVICE_ACTION_IN_16, READ_CAPACITY_16_SA]) + bytes(8) + _u32(alloc_len) + bytes(2)


def log_sense(page_code: int, subpage_code: int, alloc_len: int) -> bytes:
    return (
        bytes([
            LOG_SENSE,
            0x00,
            (_LOG_PC_CUMULATIVE << 6) | (page_code & 0x3F),
            subpage_code & 0xFF,
            0x00,
            0x00,
            0x00,
        ])
        + _u16(alloc_len)
        + b"\x00"
    )


def mode_sense_6(
    alloc_len: int,
    *,
    disable_block_descriptors: bool,
    page_control: PageControl,
    page_code: int = 0x3F,
    subpage_code: int = 0xFF,
) -> bytes:
    return bytes([
        MODE_SENSE_6,
        _bit(disable_block_descriptors, 3),
        (int(page_control) << 6) | (page_code & 0x3F),
        subpage_code & 0xFF,
        min(alloc_len, 0xFF),
        0x00,
    ])


def mode_sense_10(
    alloc_len: int,
    *,
    long_lba: bool,
    disable_block_descriptors: bool,
    page_control: PageControl,
    page_code: int = 0x3F,
    subpage_code: int = 0xFF,
) -> bytes:
    return (
        bytes([
            MODE_SENSE_10,
            _bit(long_lba, 4) | _bit(disable_block_descriptors, 3),
            (int(page_control) << 6) | (page_code & 0x3F),
            subpage_code & 0xFF,
            0x00,
            0x00,
            0x00,
        ])
        + _u16(alloc_len)
        + b"\x00"
    )


def receive_diagnostic_results(alloc_len: int, *, page_code: int, page_code_valid: bool = True) -> bytes:
    return (
        bytes([RECEIVE_DIAGNOSTIC_RESULTS, _bit(page_code_valid, 0), page_code & 0xFF])
        + _u16(alloc_len)
        + b"\x00"
    )


def _defect_flags(defect_list: DefectList, list_format: int) -> int:
    return (
        _bit(defect_list is DefectList.PRIMARY, 4)
        | _bit(defect_list is DefectList.GROWN, 3)
        | (list_format & 0x07)
    )


def read_defect_data_10(alloc_len: int, *, defect_list: DefectList, list_format: int) -> bytes:
    return (
        bytes([READ_DEFECT_DATA_10, 0x00, _defect_flags(defect_list, list_format), 0x00, 0x00, 0x00, 0x00])
        + _u16(alloc_len)
        + b"\x00"
    )


def read_defect_data_12(alloc_len: int, *, defect_list: DefectList, list_format: int) -> bytes:
    return (
        bytes([READ_DEFECT_DATA_12, _defect_flags(defect_list, list_format), 0x00, 0x00, 0x00, 0x00])
        + _u32(alloc_len)
        + b"\x00\x00"
    )
