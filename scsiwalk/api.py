"""Stable public API for building tooling on top of scsiwalk.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import TextIO

from scsiwalk.core.config_loader import load_config
from scsiwalk.core.errors import (
    CaptureParseError,
    ConfigLoadError,
    ConfigValidationError,
    FamilySelectionError,
    RecordFormatError,
    ScsiwalkError,
    TransportError,
    TransportOpenError,
)
from scsiwalk.core.exchange import Walk, perform_exchange
from scsiwalk.core.model import Config, Exchange, Record, TransportConfig, WalkConfig
from scsiwalk.core.record import HEADER, RecordWriter, read_records
from scsiwalk.core.walker import FAMILIES, Family, run_all, select_families
from scsiwalk.transports.base import Transport
from scsiwalk.transports.replay import ReplayTransport
from scsiwalk.transports.sg_io import SgIoTransport

__all__ = [
    "ScsiwalkError",
    "CaptureParseError",
    "ConfigLoadError",
    "ConfigValidationError",
    "FamilySelectionError",
    "RecordFormatError",
    "TransportError",
    "TransportOpenError",
    "Config",
    "Exchange",
    "Record",
    "TransportConfig",
    "WalkConfig",
    "Family",
    "HEADER",
    "ReplayTransport",
    "SgIoTransport",
    "Transport",
    "perform_exchange",
    "read_records",
    "walk_transport",
    "Client",
]


def walk_transport(
    transport: Transport,
    stream: TextIO,
    families: Iterable[str] | None = None,
) -> int:
    """Walk every selected family against an open transport. Returns records written."""
    selected = select_families(families)
    return run_all(Walk(transport=transport, writer=RecordWriter(stream)), selected)


class Client:
    """Public client for capturing and replaying SCSI diagnostic walks.

    A `Client` holds the effective configuration; `collect` talks to a real
    device node through SG_IO, `replay` re-walks a capture file offline.
    """

    def __init__(self, config: Config | None = None, *, config_path: str | Path | None = None) -> None:
        self.config = config if config is not None else load_config(config_path)

    def families(self) -> tuple[Family, ...]:
        return FAMILIES

    def _families(self, families: Iterable[str] | None) -> Iterable[str] | None:
        if families:
            return families
        return self.config.walk.families

    def collect(self, device: str, stream: TextIO, families: Iterable[str] | None = None) -> int:
        selected = self._families(families)
        select_families(selected)
        with SgIoTransport.open(device, self.config.transport) as transport:
            return walk_transport(transport, stream, selected)

    def replay(self, capture: str | Path, stream: TextIO, families: Iterable[str] | None = None) -> int:
        selected = self._families(families)
        select_families(selected)
        return walk_transport(ReplayTransport.from_file(capture), stream, selected)
