"""Single-shot command runners and exhaustive parameter sweeps.

Sweeps enumerate the full product of their axes in a fixed order, outer axis
first, whatever the device answers, so captures of one device diff cleanly.
"""

from __future__ import annotations

from itertools import product

from scsiwalk.core import cdb
from scsiwalk.core.exchange import Walk
from scsiwalk.core.model import DefectList, Exchange, PageControl

INQUIRY_CAPACITY = 512
READ_CAPACITY_10_CAPACITY = 8
READ_CAPACITY_16_CAPACITY = 512
LOG_SENSE_CAPACITY = 16 * 1024
MODE_SENSE_10_CAPACITY = 4096
MODE_SENSE_6_CAPACITY = 255
RECEIVE_DIAGNOSTICS_CAPACITY = 16 * 1024
DEFECT_DATA_CAPACITY = 512
DEFECT_DATA_HEADER_CAPACITY = 8

PAGE_CONTROLS = (
    PageControl.CURRENT,
    PageControl.CHANGEABLE,
    PageControl.DEFAULT,
    PageControl.SAVED,
)
FLAG_STATES = (True, False)
# (long_lba, disable_block_descriptors), in the order existing captures use
MODE_SENSE_10_FLAGS = ((True, True), (False, True), (False, False), (True, False))
DEFECT_LISTS = (DefectList.PRIMARY, DefectList.GROWN)
DEFECT_LIST_FORMATS = tuple(range(8))


def read_capacity_10(walk: Walk) -> Exchange:
    return walk.exchange(cdb.read_capacity_10(), READ_CAPACITY_10_CAPACITY)


def read_capacity_16(walk: Walk) -> Exchange:
    return walk.exchange(cdb.read_capacity_16(READ_CAPACITY_16_CAPACITY), READ_CAPACITY_16_CAPACITY)


def run_capacity(walk: Walk) -> None:
    read_capacity_10(walk)
    read_capacity_16(walk)


def run_standard_inquiry(walk: Walk) -> None:
    walk.exchange(cdb.inquiry(INQUIRY_CAPACITY), INQUIRY_CAPACITY)


def fetch_vpd_page(walk: Walk, page: int) -> Exchange:
    return walk.exchange(cdb.inquiry(INQUIRY_CAPACITY, evpd=True, page_code=page), INQUIRY_CAPACITY)


def fetch_log_page(walk: Walk, page: int, subpage: int = 0) -> Exchange:
    return walk.exchange(cdb.log_sense(page, subpage, LOG_SENSE_CAPACITY), LOG_SENSE_CAPACITY)


def fetch_diagnostic_page(walk: Walk, page: int) -> Exchange:
    return walk.exchange(
        cdb.receive_diagnostic_results(RECEIVE_DIAGNOSTICS_CAPACITY, page_code=page),
        RECEIVE_DIAGNOSTICS_CAPACITY,
    )


def sweep_mode_sense_10(walk: Walk) -> None:
    for (long_lba, disable_bd), page_control in product(MODE_SENSE_10_FLAGS, PAGE_CONTROLS):
        command = cdb.mode_sense_10(
            MODE_SENSE_10_CAPACITY,
            long_lba=long_lba,
            disable_block_descriptors=disable_bd,
            page_control=page_control,
        )
        walk.exchange(command, MODE_SENSE_10_CAPACITY)


def sweep_mode_sense_6(walk: Walk) -> None:
    for disable_bd, page_control in product(FLAG_STATES, PAGE_CONTROLS):
        command = cdb.mode_sense_6(
            MODE_SENSE_6_CAPACITY,
            disable_block_descriptors=disable_bd,
            page_control=page_control,
        )
        walk.exchange(command, MODE_SENSE_6_CAPACITY)


def run_mode_sense(walk: Walk) -> None:
    sweep_mode_sense_10(walk)
    sweep_mode_sense_6(walk)


def _sweep_defect_data(walk: Walk, encode) -> None:
    for list_format, defect_list, count_only in product(DEFECT_LIST_FORMATS, DEFECT_LISTS, FLAG_STATES):
        alloc_len = DEFECT_DATA_HEADER_CAPACITY if count_only else DEFECT_DATA_CAPACITY
        command = encode(alloc_len, defect_list=defect_list, list_format=list_format)
        walk.exchange(command, DEFECT_DATA_CAPACITY)


def sweep_read_defect_data_10(walk: Walk) -> None:
    _sweep_defect_data(walk, cdb.read_defect_data_10)


def sweep_read_defect_data_12(walk: Walk) -> None:
    _sweep_defect_data(walk, cdb.read_defect_data_12)


def run_defect_data(walk: Walk) -> None:
    sweep_read_defect_data_10(walk)
    sweep_read_defect_data_12(walk)
