"""Execution trace: the ordered audit log of one evaluation."""

import threading
from dataclasses import dataclass
from datetime import datetime

from pytz import timezone


@dataclass(frozen=True)
class TraceEntry:
    timestamp: datetime
    step: str

    def render(self) -> str:
        return f"[{self.timestamp.isoformat()}] {self.step}"


class ExecutionTrace:
    """Append-only list of timestamped steps recorded during one evaluation.

    Timestamps use the zone named by tz_name (the TIMEZONE setting).
    """

    def __init__(self, document_id: str, tz_name: str = "UTC") -> None:
        self.document_id = document_id
        self._tz = timezone(tz_name)
        self._entries: list[TraceEntry] = []
        self._lock = threading.Lock()
        self.start_time = self._now()

    def _now(self) -> datetime:
        return datetime.now(self._tz)

    def add_step(self, step: str) -> TraceEntry:
        entry = TraceEntry(timestamp=self._now(), step=step)
        with self._lock:
            self._entries.append(entry)
        return entry

    @property
    def entries(self) -> list[TraceEntry]:
        with self._lock:
            return list(self._entries)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def to_metadata(self) -> dict:
        """Snapshot of the trace as plain JSON-serialisable data."""
        entries = self.entries
        return {
            "document_id": self.document_id,
            "start_time": self.start_time.isoformat(),
            "execution_steps": [e.render() for e in entries],
            "total_steps": len(entries),
        }
