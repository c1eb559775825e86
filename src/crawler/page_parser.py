"""
Page parser capability consumed by the crawler, and its web implementation.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Pattern, Sequence

from .fetcher import WebFetcher
from .parser import ContentParser
from ..profiler.capabilities import CapabilitySet


@dataclass(frozen=True)
class ParseResult:
    """Words and outbound links discovered on one page."""
    word_counts: Dict[str, int] = field(default_factory=dict)
    links: List[str] = field(default_factory=list)


class PageParser:
    """
    Turns a URL into its word counts and outbound links.

    Implementations must not raise for ordinary fetch or parse failures;
    they return an empty ParseResult instead. ``parse`` is called from
    crawler worker threads and must be thread-safe.
    """

    def parse(self, url: str) -> ParseResult:
        raise NotImplementedError


PAGE_PARSER_CAPABILITIES = CapabilitySet.declare('PageParser', profiled=['parse'])


class WebPageParser(PageParser):
    """Fetches a page over HTTP and extracts words and links from its HTML."""

    def __init__(self, user_agent: str, request_timeout: int = 30,
                 ignored_words: Optional[Sequence[Pattern]] = None):
        self.user_agent = user_agent
        self.request_timeout = request_timeout
        self.content_parser = ContentParser(ignored_words=ignored_words)
        self.logger = logging.getLogger(__name__)

    def parse(self, url: str) -> ParseResult:
        # Each worker thread runs its own short-lived event loop
        fetch_result = asyncio.run(self._fetch(url))

        if not fetch_result.ok:
            self.logger.warning(f"Failed to fetch {url}: {fetch_result.error or fetch_result.status_code}")
            return ParseResult()

        parsed_content = self.content_parser.parse(url, fetch_result.content)
        return ParseResult(word_counts=parsed_content.word_counts, links=parsed_content.links)

    async def _fetch(self, url: str):
        async with WebFetcher(user_agent=self.user_agent,
                              request_timeout=self.request_timeout) as fetcher:
            return await fetcher.fetch(url)
