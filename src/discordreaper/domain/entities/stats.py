"""Run counters shared by concurrent batch tasks."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, fields


@dataclass
class ArchiveStats:
    """Aggregate counters for one archive run."""

    messages_scanned: int = 0
    attachments_seen: int = 0
    uploaded: int = 0
    skipped: int = 0
    failed: int = 0
    failed_batches: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def increment(self, name: str, amount: int = 1) -> None:
        with self._lock:
            setattr(self, name, getattr(self, name) + amount)

    def snapshot(self) -> dict[str, int]:
        with self._lock:
            return {f.name: getattr(self, f.name) for f in fields(self) if not f.name.startswith("_")}
