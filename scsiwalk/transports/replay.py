"""Transport that answers commands from a previously captured record stream."""

from __future__ import annotations

from collections import defaultdict, deque
from collections.abc import Iterable
from pathlib import Path

from scsiwalk.core.errors import TransportError, TransportOpenError
from scsiwalk.core.model import Direction, Record
from scsiwalk.core.record import read_records


class ReplayTransport:
    """Serve captured responses keyed by command bytes.

    Repeated commands are answered in capture order. A command that was never
    captured (or whose answers are used up) fails to submit, which is also how
    a captured submission failure replays.
    """

    def __init__(self, records: Iterable[Record]) -> None:
        self._responses: dict[bytes, deque[tuple[bytes | None, bytes]]] = defaultdict(deque)
        for record in records:
            if not record.command:
                continue
            self._responses[record.command].append((record.error_info, record.payload))
        self._result: tuple[bytes | None, bytes] | None = None

    @classmethod
    def from_file(cls, path: str | Path) -> ReplayTransport:
        try:
            with open(path, encoding="utf-8") as capture:
                return cls(list(read_records(capture)))
        except OSError as exc:
            raise TransportOpenError(f"Could not read capture {path}: {exc}") from exc

    def submit(
        self,
        command: bytes,
        capacity: int,
        direction: Direction = Direction.FROM_DEVICE,
    ) -> bool:
        queue = self._responses.get(bytes(command))
        if not queue:
            self._result = None
            return False
        self._result = queue.popleft()
        return True

    def read_result(self) -> tuple[bytes | None, bytes]:
        if self._result is None:
            raise TransportError("No completed command to read a result from")
        return self._result

    def remaining(self) -> int:
        return sum(len(queue) for queue in self._responses.values())
