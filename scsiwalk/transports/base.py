"""Transport interfaces."""

from __future__ import annotations

from typing import Protocol

from scsiwalk.core.model import Direction


class Transport(Protocol):
    def submit(
        self,
        command: bytes,
        capacity: int,
        direction: Direction = Direction.FROM_DEVICE,
    ) -> bool:
        """Submit one command and block until it completes. False if submission failed."""

    def read_result(self) -> tuple[bytes | None, bytes]:
        """Return (error_info, payload) of the last successful submission."""
