"""
Thread-safe accumulation of per-operation elapsed time.
"""

import threading
from dataclasses import dataclass
from datetime import timedelta
from typing import Dict, List, NamedTuple


class OperationKey(NamedTuple):
    """Identity of a profiled operation: concrete target type plus operation name."""
    target_type: type
    operation: str

    def __str__(self) -> str:
        return f"{self.target_type.__module__}.{self.target_type.__qualname__}#{self.operation}"


@dataclass(frozen=True)
class LedgerEntry:
    """Accumulated timing for one operation."""
    key: OperationKey
    duration: timedelta
    calls: int


class ProfiledLedger:
    """
    Accumulates elapsed time per operation.

    Entries are never reset; ``snapshot`` lists them in the order each
    operation was first recorded.
    """

    def __init__(self):
        self._entries: Dict[OperationKey, LedgerEntry] = {}
        self._lock = threading.Lock()

    def record(self, key: OperationKey, duration: timedelta):
        """Atomically add ``duration`` to the total for ``key``."""
        # A clock stepping backwards must not shrink an accumulated total
        duration = max(duration, timedelta(0))
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._entries[key] = LedgerEntry(key, duration, 1)
            else:
                self._entries[key] = LedgerEntry(key, entry.duration + duration, entry.calls + 1)

    def get(self, key: OperationKey) -> LedgerEntry:
        with self._lock:
            return self._entries[key]

    def snapshot(self) -> List[LedgerEntry]:
        with self._lock:
            return list(self._entries.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
