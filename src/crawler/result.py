"""
Crawl result container, top-N word selection and JSON result writer.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, TextIO, Union


@dataclass(frozen=True)
class CrawlResult:
    """Outcome of one crawl invocation."""
    word_counts: Dict[str, int] = field(default_factory=dict)
    urls_visited: int = 0

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'wordCounts': dict(self.word_counts),
            'urlsVisited': self.urls_visited
        }


def top_words(word_counts: Dict[str, int], popular_word_count: int) -> Dict[str, int]:
    """
    Select the most popular words.

    Ordered by count descending, then word length descending, then
    alphabetically. The returned dict preserves that order.
    """
    ranked = sorted(word_counts.items(), key=lambda item: (-item[1], -len(item[0]), item[0]))
    return dict(ranked[:max(popular_word_count, 0)])


class CrawlResultWriter:
    """Writes a CrawlResult as JSON."""

    def __init__(self, result: CrawlResult):
        self.result = result
        self.logger = logging.getLogger(__name__)

    def write(self, path: Union[str, Path]):
        """Write the result to a file, replacing any previous content."""
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, 'w', encoding='utf-8') as sink:
                self.write_to(sink)
        except OSError as e:
            self.logger.error(f"Failed to write crawl result to {path}: {e}")
            raise
        self.logger.info(f"Crawl result written to {path}")

    def write_to(self, sink: TextIO):
        """Write the result to an open text stream."""
        json.dump(self.result.to_dict(), sink, indent=2, ensure_ascii=False)
        sink.write('\n')
        sink.flush()
