"""
Shared crawl state for the web crawler system.
"""

from .visited import VisitedSet, normalize_url
from .word_counts import WordCountAggregator

__all__ = ['VisitedSet', 'normalize_url', 'WordCountAggregator']
