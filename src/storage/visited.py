"""
Visited-URL tracking shared by every branch of a crawl.
"""

import threading
from typing import Iterator, Set
from urllib.parse import urlparse, urlunparse


def normalize_url(url: str) -> str:
    """Normalize URL so trivially different spellings claim the same slot."""
    try:
        parsed = urlparse(url.strip())
        return urlunparse((
            parsed.scheme.lower(),
            parsed.netloc.lower(),
            parsed.path,
            parsed.params,
            parsed.query,
            ''  # Remove fragment
        ))
    except Exception:
        return url


class VisitedSet:
    """
    Concurrency-safe set of normalized URLs.

    The only mutation is ``try_visit``, which tests membership and inserts
    under the same lock, so two crawl units can never both win the same URL.
    Entries are never removed.
    """

    def __init__(self):
        self._urls: Set[str] = set()
        self._lock = threading.Lock()

    def try_visit(self, url: str) -> bool:
        """
        Claim a URL for parsing.

        Returns:
            True if this call inserted the URL, False if it was already claimed
        """
        key = normalize_url(url)
        with self._lock:
            if key in self._urls:
                return False
            self._urls.add(key)
            return True

    def __contains__(self, url: str) -> bool:
        with self._lock:
            return normalize_url(url) in self._urls

    def __len__(self) -> int:
        with self._lock:
            return len(self._urls)

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(sorted(self._urls))
