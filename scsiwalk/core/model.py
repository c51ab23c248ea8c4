"""Core data models used across the walker, transports, and CLI."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum


class Direction(IntEnum):
    """SG_IO data transfer direction (values from <scsi/sg.h>)."""

    NONE = -1
    TO_DEVICE = -2
    FROM_DEVICE = -3


class PageControl(IntEnum):
    CURRENT = 0
    CHANGEABLE = 1
    DEFAULT = 2
    SAVED = 3


class DefectList(Enum):
    PRIMARY = "plist"
    GROWN = "glist"


@dataclass(frozen=True)
class Exchange:
    """One command/response round trip.

    When transport_ok is False the submission itself failed and there is no
    device response: error_info must be None and payload empty.
    """

    command: bytes
    transport_ok: bool
    error_info: bytes | None = None
    payload: bytes = b""

    def __post_init__(self) -> None:
        if not self.transport_ok and (self.error_info is not None or self.payload):
            raise ValueError("failed submission cannot carry error info or payload")

    @property
    def usable(self) -> bool:
        # zero-length sense renders and replays as no sense
        return self.transport_ok and not self.error_info


@dataclass(frozen=True)
class Record:
    message: str = ""
    command: bytes = b""
    error_info: bytes | None = None
    payload: bytes = b""


@dataclass(frozen=True)
class TransportConfig:
    timeout_ms: int = 60000
    sense_buffer_len: int = 64
    debug: bool = False


@dataclass(frozen=True)
class WalkConfig:
    families: tuple[str, ...] | None = None


@dataclass(frozen=True)
class Config:
    transport: TransportConfig = field(default_factory=TransportConfig)
    walk: WalkConfig = field(default_factory=WalkConfig)
    source: str | None = None
