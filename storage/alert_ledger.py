"""Bounded, newest-first alert ledger.

Alerts are prepended in the order they are appended, not sorted by their
timestamps. Once the ledger holds ``capacity`` records, each append evicts
the oldest record silently. There is no deduplication and no way to clear
the ledger.
"""

from __future__ import annotations

from collections import deque
from typing import Deque, Iterator, Optional, Tuple

from telemetry.state import AlertRecord


class AlertLedger:
    """In-memory alert list capped at ``capacity`` entries."""

    def __init__(self, capacity: int = 20) -> None:
        if capacity < 1:
            raise ValueError(f"Alert ledger capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._records: Deque[AlertRecord] = deque(maxlen=capacity)

    def append(self, record: AlertRecord) -> None:
        """Prepend ``record``; the oldest entry drops off beyond capacity."""
        self._records.appendleft(record)

    def records(self) -> Tuple[AlertRecord, ...]:
        """Return the alerts newest-first."""
        return tuple(self._records)

    @property
    def latest(self) -> Optional[AlertRecord]:
        return self._records[0] if self._records else None

    def __iter__(self) -> Iterator[AlertRecord]:
        return iter(tuple(self._records))

    def __len__(self) -> int:
        return len(self._records)
