"""Ordered command family table and the loop that walks it."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass

from scsiwalk.core.discovery import run_extended_inquiry, run_log_sense, run_receive_diagnostics
from scsiwalk.core.errors import FamilySelectionError
from scsiwalk.core.exchange import Walk
from scsiwalk.core.runners import run_capacity, run_defect_data, run_mode_sense, run_standard_inquiry

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Family:
    tag: str
    description: str
    run: Callable[[Walk], object]


FAMILIES: tuple[Family, ...] = (
    Family("capacity", "READ CAPACITY (10) and (16)", run_capacity),
    Family("inquiry", "standard INQUIRY", run_standard_inquiry),
    Family("extended-inquiry", "INQUIRY VPD page list and every listed page", run_extended_inquiry),
    Family("log-sense", "LOG SENSE page and subpage lists and every listed page", run_log_sense),
    Family("mode-sense", "MODE SENSE (10) and (6) over all flag and page control states", run_mode_sense),
    Family("receive-diagnostics", "RECEIVE DIAGNOSTIC RESULTS page list and every listed page", run_receive_diagnostics),
    Family("defect-data", "READ DEFECT DATA (10) and (12) over all lists and formats", run_defect_data),
)


def select_families(tags: Iterable[str] | None) -> tuple[Family, ...]:
    if tags is None:
        return FAMILIES
    wanted = set(tags)
    known = {family.tag for family in FAMILIES}
    unknown = sorted(wanted - known)
    if unknown:
        available = ", ".join(family.tag for family in FAMILIES)
        raise FamilySelectionError(
            f"Unknown command family {', '.join(repr(t) for t in unknown)}. Available: {available}"
        )
    return tuple(family for family in FAMILIES if family.tag in wanted)


def run_all(walk: Walk, families: Sequence[Family] = FAMILIES) -> int:
    """Write the header, walk every family in order, return records emitted."""
    walk.writer.write_header()
    for family in families:
        before = walk.writer.count
        LOGGER.debug("Walking %s", family.tag)
        family.run(walk)
        LOGGER.debug("%s produced %d records", family.tag, walk.writer.count - before)
    return walk.writer.count
