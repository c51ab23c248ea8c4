"""Linux SG_IO transport using ctypes and fcntl.ioctl."""

from __future__ import annotations

import ctypes
import fcntl
import logging
import os
from types import TracebackType

from scsiwalk.core.errors import TransportError, TransportOpenError
from scsiwalk.core.model import Direction, TransportConfig

LOGGER = logging.getLogger(__name__)

SG_IO = 0x2285
SG_INTERFACE_ID = ord("S")


class SgIoHdr(ctypes.Structure):
    """Mirror of sg_io_hdr_t from <scsi/sg.h>."""

    _fields_ = [
        ("interface_id", ctypes.c_int),
        ("dxfer_direction", ctypes.c_int),
        ("cmd_len", ctypes.c_ubyte),
        ("mx_sb_len", ctypes.c_ubyte),
        ("iovec_count", ctypes.c_ushort),
        ("dxfer_len", ctypes.c_uint),
        ("dxferp", ctypes.c_void_p),
        ("cmdp", ctypes.c_void_p),
        ("sbp", ctypes.c_void_p),
        ("timeout", ctypes.c_uint),
        ("flags", ctypes.c_uint),
        ("pack_id", ctypes.c_int),
        ("usr_ptr", ctypes.c_void_p),
        ("status", ctypes.c_ubyte),
        ("masked_status", ctypes.c_ubyte),
        ("msg_status", ctypes.c_ubyte),
        ("sb_len_wr", ctypes.c_ubyte),
        ("host_status", ctypes.c_ushort),
        ("driver_status", ctypes.c_ushort),
        ("resid", ctypes.c_int),
        ("duration", ctypes.c_uint),
        ("info", ctypes.c_uint),
    ]


class SgIoTransport:
    def __init__(self, fd: int, config: TransportConfig | None = None, *, path: str | None = None) -> None:
        self._fd = fd
        self._config = config or TransportConfig()
        self._result: tuple[bytes | None, bytes] | None = None
        self.path = path

    @classmethod
    def open(cls, path: str, config: TransportConfig | None = None) -> SgIoTransport:
        try:
            fd = os.open(path, os.O_RDWR | os.O_NONBLOCK)
        except OSError as exc:
            raise TransportOpenError(f"Could not open {path}: {exc}") from exc
        return cls(fd, config, path=path)

    def close(self) -> None:
        if self._fd < 0:
            return
        os.close(self._fd)
        self._fd = -1

    def __enter__(self) -> SgIoTransport:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def submit(
        self,
        command: bytes,
        capacity: int,
        direction: Direction = Direction.FROM_DEVICE,
    ) -> bool:
        self._result = None
        command_buf = ctypes.create_string_buffer(bytes(command), len(command))
        sense_buf = ctypes.create_string_buffer(self._config.sense_buffer_len)
        data_buf = ctypes.create_string_buffer(capacity) if capacity > 0 else None

        hdr = SgIoHdr()
        hdr.interface_id = SG_INTERFACE_ID
        hdr.dxfer_direction = int(direction) if data_buf is not None else int(Direction.NONE)
        hdr.cmd_len = len(command)
        hdr.mx_sb_len = len(sense_buf)
        hdr.dxfer_len = capacity if data_buf is not None else 0
        hdr.dxferp = ctypes.addressof(data_buf) if data_buf is not None else None
        hdr.cmdp = ctypes.addressof(command_buf)
        hdr.sbp = ctypes.addressof(sense_buf)
        hdr.timeout = self._config.timeout_ms

        if self._config.debug:
            LOGGER.debug("SG_IO %s cdb=%s capacity=%d", self.path or self._fd, command.hex(" "), capacity)
        try:
            fcntl.ioctl(self._fd, SG_IO, hdr)
        except OSError as exc:
            LOGGER.warning("SG_IO submission failed: %s", exc)
            return False

        sense = sense_buf.raw[: hdr.sb_len_wr]
        device_error = bool(hdr.status or hdr.host_status or hdr.driver_status or hdr.sb_len_wr)
        received = max(hdr.dxfer_len - hdr.resid, 0)
        payload = data_buf.raw[:received] if data_buf is not None else b""
        if self._config.debug:
            LOGGER.debug(
                "SG_IO status=0x%02x host=0x%04x driver=0x%04x sense=%d data=%d",
                hdr.status,
                hdr.host_status,
                hdr.driver_status,
                len(sense),
                len(payload),
            )
        self._result = (sense if device_error else None, payload)
        return True

    def read_result(self) -> tuple[bytes | None, bytes]:
        if self._result is None:
            raise TransportError("No completed command to read a result from")
        return self._result
