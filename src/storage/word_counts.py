"""
Word frequency aggregation across concurrently parsed pages.
"""

import threading
from typing import Dict, Iterable, Tuple


class WordCountAggregator:
    """Concurrency-safe additive map of word -> occurrence count."""

    def __init__(self):
        self._counts: Dict[str, int] = {}
        self._lock = threading.Lock()

    def merge(self, word: str, delta: int):
        """Atomically add ``delta`` to the count for ``word``."""
        if delta < 0:
            raise ValueError(f"Word count delta must be non-negative, got {delta} for {word!r}")
        with self._lock:
            self._counts[word] = self._counts.get(word, 0) + delta

    def merge_all(self, word_counts: Dict[str, int]):
        """Merge a page's whole contribution; each key is merged atomically."""
        for word, count in word_counts.items():
            self.merge(word, count)

    def snapshot(self) -> Dict[str, int]:
        """
        Copy of the current counts.

        Only guaranteed to be complete once every writer has finished.
        """
        with self._lock:
            return dict(self._counts)

    def items(self) -> Iterable[Tuple[str, int]]:
        return self.snapshot().items()

    def is_empty(self) -> bool:
        with self._lock:
            return not self._counts

    def __len__(self) -> int:
        with self._lock:
            return len(self._counts)
