"""Single command/response exchange and the walk context runners share."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from scsiwalk.core.model import Direction, Exchange
from scsiwalk.core.record import RecordWriter, record_from_exchange
from scsiwalk.transports.base import Transport

LOGGER = logging.getLogger(__name__)


def perform_exchange(
    transport: Transport,
    command: bytes,
    capacity: int,
    direction: Direction = Direction.FROM_DEVICE,
) -> Exchange:
    if not transport.submit(command, capacity, direction):
        LOGGER.warning("Failed to submit command %s", command.hex(" "))
        return Exchange(command=command, transport_ok=False)

    error_info, payload = transport.read_result()
    return Exchange(
        command=command,
        transport_ok=True,
        error_info=error_info,
        payload=payload[:capacity],
    )


@dataclass
class Walk:
    """Open transport plus the record stream every runner writes to."""

    transport: Transport
    writer: RecordWriter

    def exchange(self, command: bytes, capacity: int) -> Exchange:
        exchange = perform_exchange(self.transport, command, capacity)
        self.writer.emit(record_from_exchange(exchange))
        return exchange

    def notice(self, message: str) -> None:
        LOGGER.info(message)
        self.writer.notice(message)
