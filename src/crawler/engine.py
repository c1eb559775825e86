"""
Parallel crawl engine.

Each crawl unit claims its URL, parses it on a worker thread, then forks one
child unit per discovered link and waits for all of them (fork/join). Seed
units run concurrently, and ``crawl`` returns once every subtree has
finished or been cut off by depth or deadline.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional, Pattern, Sequence

import psutil

from .page_parser import PageParser
from .result import CrawlResult, top_words
from ..profiler.capabilities import CapabilitySet
from ..storage.visited import VisitedSet
from ..storage.word_counts import WordCountAggregator
from ..utils.clock import Clock
from ..utils.logger import get_crawler_logger
from ..utils.monitoring import CrawlerMonitor


WEB_CRAWLER_CAPABILITIES = CapabilitySet.declare(
    'WebCrawler', profiled=['crawl'], forwarded=['get_max_parallelism'])


@dataclass(frozen=True)
class CrawlUnit:
    """One unit of traversal work; children share everything but the URL and depth."""
    url: str
    remaining_depth: int
    deadline: datetime
    counts: WordCountAggregator
    visited: VisitedSet

    def child(self, url: str) -> 'CrawlUnit':
        return CrawlUnit(
            url=url,
            remaining_depth=self.remaining_depth - 1,
            deadline=self.deadline,
            counts=self.counts,
            visited=self.visited
        )


class ParallelWebCrawler:
    """
    Depth- and time-bounded crawler that counts words across visited pages.

    Args:
        clock: Time source for the deadline
        timeout: How long after ``crawl`` starts new pages may still be parsed
        max_depth: Number of link levels to follow; seeds are level 1
        ignored_urls: Full-match patterns of URLs that are never visited
        popular_word_count: Size of the word-count result
        target_parallelism: Requested worker threads, capped at the CPU count
        page_parser: Fetches and parses pages
        monitor: Optional metrics sink
    """

    def __init__(self, clock: Clock, timeout: timedelta, max_depth: int,
                 ignored_urls: Sequence[Pattern], popular_word_count: int,
                 target_parallelism: int, page_parser: PageParser,
                 monitor: Optional[CrawlerMonitor] = None):
        if max_depth < 0:
            raise ValueError("max_depth must be non-negative")
        if target_parallelism < 1:
            raise ValueError("target_parallelism must be at least 1")

        self.clock = clock
        self.timeout = timeout
        self.max_depth = max_depth
        self.ignored_urls = list(ignored_urls)
        self.popular_word_count = popular_word_count
        self.parallelism = min(target_parallelism, self.get_max_parallelism())
        self.page_parser = page_parser
        self.monitor = monitor
        self.logger = get_crawler_logger(__name__, component='crawler')

    def get_max_parallelism(self) -> int:
        """Number of CPUs available to the crawler."""
        return psutil.cpu_count() or 1

    def crawl(self, starting_urls: Sequence[str]) -> CrawlResult:
        """
        Crawl from every starting URL concurrently.

        Returns:
            The most popular words and the number of distinct URLs parsed
        """
        deadline = self.clock.now() + self.timeout
        counts = WordCountAggregator()
        visited = VisitedSet()
        seeds = [CrawlUnit(url, self.max_depth, deadline, counts, visited) for url in starting_urls]

        self.logger.info(f"Crawling {len(seeds)} start pages with {self.parallelism} workers, "
                         f"max depth {self.max_depth}, deadline {deadline.isoformat()}")

        pool = ThreadPoolExecutor(max_workers=self.parallelism, thread_name_prefix='crawler')
        try:
            asyncio.run(self._crawl_all(seeds, pool))
        finally:
            pool.shutdown(wait=True, cancel_futures=True)

        if counts.is_empty():
            result = CrawlResult(word_counts={}, urls_visited=len(visited))
        else:
            result = CrawlResult(
                word_counts=top_words(counts.snapshot(), self.popular_word_count),
                urls_visited=len(visited)
            )

        self.logger.info(f"Crawl finished: {result.urls_visited} URLs visited, "
                         f"{len(counts)} distinct words")
        return result

    async def _crawl_all(self, seeds: List[CrawlUnit], pool: ThreadPoolExecutor):
        await asyncio.gather(*(self._compute(unit, pool) for unit in seeds))

    async def _compute(self, unit: CrawlUnit, pool: ThreadPoolExecutor) -> bool:
        """Run one unit and its whole subtree. Returns False if the unit was skipped."""
        loop = asyncio.get_running_loop()
        links = await loop.run_in_executor(pool, self._visit, unit)
        if links is None:
            return False

        children = [unit.child(link) for link in links]
        if children:
            await asyncio.gather(*(self._compute(child, pool) for child in children))
        return True

    def _visit(self, unit: CrawlUnit) -> Optional[List[str]]:
        """
        Claim and parse one page on a worker thread.

        Returns:
            The page's links, or None if the unit was skipped
        """
        if unit.remaining_depth == 0:
            return self._skip(unit, 'depth')
        if self.clock.now() >= unit.deadline:
            return self._skip(unit, 'deadline')
        if self._is_ignored(unit.url):
            return self._skip(unit, 'ignored')
        if not unit.visited.try_visit(unit.url):
            return self._skip(unit, 'visited')

        if self.monitor:
            self.monitor.record_parse_started()
        started = self.clock.now()

        try:
            result = self.page_parser.parse(unit.url)
        finally:
            if self.monitor:
                self.monitor.record_parse_finished()
        unit.counts.merge_all(result.word_counts)

        if self.monitor:
            self.monitor.record_page_parsed(unit.url, sum(result.word_counts.values()),
                                            (self.clock.now() - started).total_seconds())
        self.logger.log_url_event(logging.DEBUG, unit.url,
                                  f"Parsed {unit.url}: {len(result.word_counts)} words, "
                                  f"{len(result.links)} links")
        return list(result.links)

    def _is_ignored(self, url: str) -> bool:
        return any(pattern.fullmatch(url) for pattern in self.ignored_urls)

    def _skip(self, unit: CrawlUnit, reason: str) -> None:
        if self.monitor:
            self.monitor.record_url_skipped(unit.url, reason)
        self.logger.log_url_event(logging.DEBUG, unit.url, f"Skipping {unit.url} ({reason})")
        return None
