"""Capture record serialization.

Each exchange becomes one line of four comma separated fields followed by a
newline: message, command bytes, sense bytes, data bytes. Byte fields are
lowercase two-digit hex octets separated by single spaces; an empty or absent
field renders as nothing. A fixed header line precedes all records.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from typing import TextIO

from scsiwalk.core.errors import CaptureParseError, RecordFormatError
from scsiwalk.core.model import Exchange, Record

HEADER = "message,cdb,sense,data"
FAILED_SUBMIT_MESSAGE = "failed to submit command"

_FIELD_COUNT = 4
_HEX_FIELD_RE = re.compile(r"^[0-9a-f]{2}(?: [0-9a-f]{2})*$")
_FORBIDDEN_MESSAGE_CHARS = (",", "\n", "\r")


def render_hex(data: bytes | None) -> str:
    if not data:
        return ""
    return " ".join(f"{octet:02x}" for octet in data)


def parse_hex(text: str) -> bytes:
    if text == "":
        return b""
    if not _HEX_FIELD_RE.match(text):
        raise CaptureParseError(f"Not a space separated hex octet field: {text!r}")
    return bytes.fromhex(text)


def record_from_exchange(exchange: Exchange) -> Record:
    if not exchange.transport_ok:
        return Record(message=FAILED_SUBMIT_MESSAGE)
    return Record(
        command=exchange.command,
        error_info=exchange.error_info,
        payload=exchange.payload,
    )


def format_record(record: Record) -> str:
    if any(ch in record.message for ch in _FORBIDDEN_MESSAGE_CHARS):
        raise RecordFormatError(f"Record message must not contain commas or line breaks: {record.message!r}")
    fields = (
        record.message,
        render_hex(record.command),
        render_hex(record.error_info),
        render_hex(record.payload),
    )
    return ",".join(fields) + "\n"


class RecordWriter:
    """Append-only record sink over a text stream."""

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream
        self._header_written = False
        self.count = 0

    def write_header(self) -> None:
        if self._header_written:
            return
        self._stream.write(HEADER + "\n")
        self._header_written = True

    def emit(self, record: Record) -> None:
        line = format_record(record)
        self.write_header()
        self._stream.write(line)
        self.count += 1

    def notice(self, message: str) -> None:
        self.emit(Record(message=message))


def parse_record(line: str, *, lineno: int = 0) -> Record:
    fields = line.rstrip("\n").split(",")
    if len(fields) != _FIELD_COUNT:
        raise CaptureParseError(
            f"Line {lineno}: expected {_FIELD_COUNT} fields, got {len(fields)}"
        )
    message, command, sense, data = fields
    try:
        return Record(
            message=message,
            command=parse_hex(command),
            error_info=parse_hex(sense) if sense else None,
            payload=parse_hex(data),
        )
    except CaptureParseError as exc:
        raise CaptureParseError(f"Line {lineno}: {exc}") from exc


def read_records(lines: Iterable[str]) -> Iterator[Record]:
    iterator = iter(lines)
    header = next(iterator, None)
    if header is None or header.rstrip("\n") != HEADER:
        raise CaptureParseError(f"Capture must start with header line {HEADER!r}")
    for lineno, line in enumerate(iterator, start=2):
        if not line.strip():
            continue
        yield parse_record(line, lineno=lineno)
