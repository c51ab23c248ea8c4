"""Field extractors over received response buffers.

None of these raise on short buffers: missing bytes read as zero.
"""

from __future__ import annotations

# Log, VPD, and diagnostic pages share a four-byte header: byte 0 carries the
# page code, byte 1 the subpage (or reserved), bytes 2-3 the page length.
PAGE_HEADER_LEN = 4


def get_uint8(buf: bytes, offset: int) -> int:
    return buf[offset] if 0 <= offset < len(buf) else 0


def get_uint16(buf: bytes, offset: int) -> int:
    return (get_uint8(buf, offset) << 8) | get_uint8(buf, offset + 1)


def page_code(buf: bytes, offset: int = 0) -> int:
    return get_uint8(buf, offset) & 0x3F


def page_length(buf: bytes) -> int:
    return get_uint16(buf, 2)


def log_page_entry(buf: bytes, offset: int) -> tuple[int, int]:
    """Decode a (page, subpage) pair from a supported log subpages list."""
    return page_code(buf, offset), get_uint8(buf, offset + 1)
