"""Shared test fixtures for crawler and profiler tests.

Provides:
- FakeClock fixture with a fixed start instant
- StaticPageParser: in-memory link graph standing in for the web
- make_crawler(): ParallelWebCrawler factory with test-friendly defaults
"""

from __future__ import annotations

import logging
import threading
from collections import Counter
from datetime import datetime, timedelta, timezone

import pytest

from src.crawler import engine
from src.crawler.engine import ParallelWebCrawler
from src.crawler.page_parser import PageParser, ParseResult
from src.utils.clock import FakeClock


START = datetime(2026, 10, 17, 9, 30, tzinfo=timezone.utc)


class StaticPageParser(PageParser):
    """Page parser backed by a dict of url -> (word counts, links).

    Unknown URLs parse to an empty result. ``on_parse`` is called with the
    URL before the result is returned, so tests can block or move the clock.
    """

    def __init__(self, pages, on_parse=None):
        self.pages = pages
        self.on_parse = on_parse
        self.calls = Counter()
        self._lock = threading.Lock()

    def parse(self, url):
        with self._lock:
            self.calls[url] += 1
        if self.on_parse:
            self.on_parse(url)
        words, links = self.pages.get(url, ({}, []))
        return ParseResult(word_counts=dict(words), links=list(links))


@pytest.fixture
def clock():
    return FakeClock(START)


@pytest.fixture
def many_cpus(monkeypatch):
    """Pretend the machine has 8 CPUs so parallelism is not clamped to 1."""
    monkeypatch.setattr(engine.psutil, "cpu_count", lambda *args, **kwargs: 8)


@pytest.fixture
def make_crawler(clock, many_cpus):
    def factory(parser, **overrides):
        options = dict(
            clock=clock,
            timeout=timedelta(seconds=60),
            max_depth=10,
            ignored_urls=[],
            popular_word_count=10,
            target_parallelism=4,
            page_parser=parser,
        )
        options.update(overrides)
        return ParallelWebCrawler(**options)

    return factory


@pytest.fixture
def restore_root_logger():
    """Undo handler and level changes made by setup_logging()."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
