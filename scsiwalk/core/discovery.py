"""Two-phase discovery: fetch a page directory, then every page it names.

A directory is trusted only when its exchange succeeded without sense data
and the payload passes the plan's length and header checks. The entry count
the device declares is clamped to the entries actually received before it is
used as a loop bound.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from scsiwalk.core import cdb
from scsiwalk.core.decode import PAGE_HEADER_LEN, get_uint8, log_page_entry, page_length
from scsiwalk.core.exchange import Walk
from scsiwalk.core.runners import (
    INQUIRY_CAPACITY,
    LOG_SENSE_CAPACITY,
    RECEIVE_DIAGNOSTICS_CAPACITY,
    fetch_diagnostic_page,
    fetch_log_page,
    fetch_vpd_page,
)

LOGGER = logging.getLogger(__name__)

SUPPORTED_PAGES = 0x00
ALL_SUBPAGES = 0xFF

Entry = tuple[int, ...]


@dataclass(frozen=True)
class DirectoryPlan:
    name: str
    command: bytes
    capacity: int
    min_length: int
    header_ok: Callable[[bytes], bool] | None
    header_message: str
    stride: int
    decode_entry: Callable[[bytes, int], Entry]
    fetch: Callable[[Walk, Entry], object]
    skip: Callable[[Entry], str | None] | None = None


def directory_entries(payload: bytes, stride: int) -> int:
    declared = page_length(payload)
    available = max(len(payload) - PAGE_HEADER_LEN, 0) // stride
    if declared > available:
        # devices usually declare a byte length, which is available * stride
        level = logging.DEBUG if declared <= available * stride else logging.WARNING
        LOGGER.log(
            level,
            "Directory declares %d entries but only %d were received, clamping",
            declared,
            available,
        )
        return available
    return declared


def run_plan(walk: Walk, plan: DirectoryPlan) -> bool:
    """Run one directory plan. Returns True when the directory was accepted."""
    directory = walk.exchange(plan.command, plan.capacity)
    if not directory.transport_ok:
        return False
    if directory.error_info:
        LOGGER.info("Error while reading %s, nothing to show", plan.name)
        return False

    payload = directory.payload
    if len(payload) < plan.min_length:
        walk.notice(f"{plan.name} must have at least {plan.min_length} bytes")
        return False
    if plan.header_ok is not None and not plan.header_ok(payload):
        walk.notice(plan.header_message)
        return False

    for index in range(directory_entries(payload, plan.stride)):
        entry = plan.decode_entry(payload, PAGE_HEADER_LEN + index * plan.stride)
        skip_message = plan.skip(entry) if plan.skip is not None else None
        if skip_message:
            walk.notice(skip_message)
            continue
        plan.fetch(walk, entry)
    return True


def _single_byte_entry(payload: bytes, offset: int) -> Entry:
    return (get_uint8(payload, offset),)


def _skip_subpage_zero(entry: Entry) -> str | None:
    page, subpage = entry
    if subpage != 0:
        return None
    return f"skipping log page {page:02x} subpage {subpage:02x} since subpage 00 was already retrieved"


VPD_DIRECTORY = DirectoryPlan(
    name="inquiry vpd page list",
    command=cdb.inquiry(INQUIRY_CAPACITY, evpd=True, page_code=SUPPORTED_PAGES),
    capacity=INQUIRY_CAPACITY,
    min_length=PAGE_HEADER_LEN,
    header_ok=lambda payload: payload[1] == SUPPORTED_PAGES,
    header_message="expected to receive inquiry vpd page 00",
    stride=1,
    decode_entry=_single_byte_entry,
    fetch=lambda walk, entry: fetch_vpd_page(walk, entry[0]),
)

LOG_PAGE_DIRECTORY = DirectoryPlan(
    name="log sense page list",
    command=cdb.log_sense(SUPPORTED_PAGES, 0x00, LOG_SENSE_CAPACITY),
    capacity=LOG_SENSE_CAPACITY,
    min_length=PAGE_HEADER_LEN,
    header_ok=lambda payload: payload[0] == 0x00 and payload[1] == 0x00,
    header_message="expected to receive log page 00 subpage 00",
    stride=1,
    decode_entry=_single_byte_entry,
    fetch=lambda walk, entry: fetch_log_page(walk, entry[0], 0x00),
)

LOG_SUBPAGE_DIRECTORY = DirectoryPlan(
    name="log sense subpage list",
    command=cdb.log_sense(SUPPORTED_PAGES, ALL_SUBPAGES, LOG_SENSE_CAPACITY),
    capacity=LOG_SENSE_CAPACITY,
    min_length=PAGE_HEADER_LEN,
    # SPF bit set on page 00, subpage ff
    header_ok=lambda payload: payload[0] == 0x40 and payload[1] == ALL_SUBPAGES,
    header_message="expected to receive log page 00 (spf=1) subpage ff",
    stride=2,
    decode_entry=log_page_entry,
    fetch=lambda walk, entry: fetch_log_page(walk, entry[0], entry[1]),
    skip=_skip_subpage_zero,
)

DIAGNOSTIC_DIRECTORY = DirectoryPlan(
    name="receive diagnostics page list",
    command=cdb.receive_diagnostic_results(RECEIVE_DIAGNOSTICS_CAPACITY, page_code=SUPPORTED_PAGES),
    capacity=RECEIVE_DIAGNOSTICS_CAPACITY,
    min_length=PAGE_HEADER_LEN,
    header_ok=lambda payload: payload[0] == SUPPORTED_PAGES,
    header_message="expected to receive diagnostic page 00",
    stride=1,
    decode_entry=_single_byte_entry,
    fetch=lambda walk, entry: fetch_diagnostic_page(walk, entry[0]),
)


def run_extended_inquiry(walk: Walk) -> bool:
    return run_plan(walk, VPD_DIRECTORY)


def run_log_sense(walk: Walk) -> bool:
    if not run_plan(walk, LOG_PAGE_DIRECTORY):
        return False
    return run_plan(walk, LOG_SUBPAGE_DIRECTORY)


def run_receive_diagnostics(walk: Walk) -> bool:
    return run_plan(walk, DIAGNOSTIC_DIRECTORY)
