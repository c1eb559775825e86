"""Tests for the parallel crawl engine."""

from __future__ import annotations

import re
import threading
from datetime import timedelta

import pytest

from src.crawler.engine import CrawlUnit, WEB_CRAWLER_CAPABILITIES
from src.profiler import Profiler
from src.utils.monitoring import CrawlerMonitor, MetricsCollector
from tests.conftest import StaticPageParser


# A -> C, B -> C, C -> D
GRAPH = {
    "http://a.test/": ({"alpha": 1, "shared": 1}, ["http://c.test/"]),
    "http://b.test/": ({"beta": 2, "shared": 1}, ["http://c.test/"]),
    "http://c.test/": ({"gamma": 3, "shared": 1}, ["http://d.test/"]),
    "http://d.test/": ({"delta": 4}, []),
}


def test_zero_depth_visits_nothing(make_crawler):
    parser = StaticPageParser(GRAPH)
    result = make_crawler(parser, max_depth=0).crawl(["http://a.test/", "http://b.test/"])

    assert result.urls_visited == 0
    assert result.word_counts == {}
    assert not parser.calls


def test_depth_limits_levels(make_crawler):
    parser = StaticPageParser(GRAPH)
    result = make_crawler(parser, max_depth=2).crawl(["http://a.test/"])

    # a.test is level 1, c.test level 2; d.test is beyond the limit
    assert result.urls_visited == 2
    assert set(parser.calls) == {"http://a.test/", "http://c.test/"}
    assert "delta" not in result.word_counts


def test_shared_link_is_parsed_once(make_crawler):
    parser = StaticPageParser(GRAPH)
    result = make_crawler(parser, max_depth=2).crawl(["http://a.test/", "http://b.test/"])

    assert result.urls_visited == 3
    assert parser.calls["http://c.test/"] == 1
    assert result.word_counts["shared"] == 3
    assert result.word_counts["gamma"] == 3


def test_duplicate_seeds_are_parsed_once(make_crawler):
    parser = StaticPageParser(GRAPH)
    result = make_crawler(parser, max_depth=1).crawl(["http://a.test/", "http://a.test/"])

    assert result.urls_visited == 1
    assert parser.calls["http://a.test/"] == 1
    assert result.word_counts == {"alpha": 1, "shared": 1}


def test_ignored_urls_are_never_visited(make_crawler):
    parser = StaticPageParser(GRAPH)
    crawler = make_crawler(parser, ignored_urls=[re.compile(r"http://c\.test/.*")])

    result = crawler.crawl(["http://a.test/", "http://c.test/"])

    assert result.urls_visited == 1
    assert "http://c.test/" not in parser.calls
    assert "gamma" not in result.word_counts
    assert "delta" not in result.word_counts


def test_ignored_pattern_must_match_whole_url(make_crawler):
    parser = StaticPageParser(GRAPH)
    crawler = make_crawler(parser, max_depth=1, ignored_urls=[re.compile(r"http://a")])

    assert crawler.crawl(["http://a.test/"]).urls_visited == 1


def test_expired_deadline_visits_nothing(make_crawler):
    parser = StaticPageParser(GRAPH)
    result = make_crawler(parser, timeout=timedelta(0)).crawl(["http://a.test/", "http://b.test/"])

    assert result.urls_visited == 0
    assert result.word_counts == {}


def test_deadline_stops_new_work_but_finishes_current_page(make_crawler, clock):
    # Parsing the seed takes longer than the whole timeout
    parser = StaticPageParser(GRAPH, on_parse=lambda url: clock.advance(timedelta(seconds=10)))
    result = make_crawler(parser, timeout=timedelta(seconds=5)).crawl(["http://a.test/"])

    assert result.urls_visited == 1
    assert result.word_counts == {"alpha": 1, "shared": 1}
    assert list(parser.calls) == ["http://a.test/"]


def test_result_is_top_n_with_tie_breaks(make_crawler):
    pages = {"http://words.test/": ({"a": 3, "bee": 3, "cat": 2}, [])}
    result = make_crawler(StaticPageParser(pages), popular_word_count=2).crawl(["http://words.test/"])

    assert list(result.word_counts.items()) == [("bee", 3), ("a", 3)]
    assert result.urls_visited == 1


def test_pages_without_words_give_empty_counts(make_crawler):
    result = make_crawler(StaticPageParser({})).crawl(["http://empty.test/"])

    assert result.word_counts == {}
    assert result.urls_visited == 1


def test_seeds_run_concurrently(make_crawler):
    # Each seed blocks until the other seed is being parsed too
    barrier = threading.Barrier(2, timeout=10)

    def wait_for_other_seed(url):
        if url in ("http://a.test/", "http://b.test/"):
            barrier.wait()

    parser = StaticPageParser(GRAPH, on_parse=wait_for_other_seed)
    result = make_crawler(parser, target_parallelism=2).crawl(["http://a.test/", "http://b.test/"])

    assert result.urls_visited == 4


def test_wide_graph_counts_every_page_once(make_crawler):
    hub = "http://hub.test/"
    leaves = [f"http://leaf.test/{i}" for i in range(50)]
    pages = {hub: ({"hub": 1}, leaves)}
    for i, leaf in enumerate(leaves):
        # Every leaf links back to the hub and to its neighbours
        pages[leaf] = ({"leaf": 1}, [hub, leaves[(i + 1) % 50], leaves[i - 1]])

    parser = StaticPageParser(pages)
    result = make_crawler(parser, max_depth=4, target_parallelism=8).crawl([hub])

    assert result.urls_visited == 51
    assert result.word_counts == {"leaf": 50, "hub": 1}
    assert all(count == 1 for count in parser.calls.values())


def test_parser_failure_propagates(make_crawler):
    def explode(url):
        raise RuntimeError("parser contract violated")

    crawler = make_crawler(StaticPageParser(GRAPH, on_parse=explode))

    with pytest.raises(RuntimeError, match="contract violated"):
        crawler.crawl(["http://a.test/"])


def test_each_crawl_starts_fresh(make_crawler):
    crawler = make_crawler(StaticPageParser(GRAPH), max_depth=1)

    first = crawler.crawl(["http://a.test/"])
    second = crawler.crawl(["http://a.test/"])

    assert first == second
    assert second.urls_visited == 1


def test_parallelism_is_capped_at_cpu_count(make_crawler, monkeypatch):
    from src.crawler import engine

    monkeypatch.setattr(engine.psutil, "cpu_count", lambda *args, **kwargs: 2)
    crawler = make_crawler(StaticPageParser({}), target_parallelism=16)

    assert crawler.get_max_parallelism() == 2
    assert crawler.parallelism == 2


@pytest.mark.parametrize("overrides", [{"max_depth": -1}, {"target_parallelism": 0}])
def test_invalid_arguments_are_rejected(make_crawler, overrides):
    with pytest.raises(ValueError):
        make_crawler(StaticPageParser({}), **overrides)


def test_crawl_unit_child_shares_state(clock):
    unit = CrawlUnit("http://a.test/", 3, clock.now(), object(), object())
    child = unit.child("http://b.test/")

    assert child.url == "http://b.test/"
    assert child.remaining_depth == 2
    assert child.deadline == unit.deadline
    assert child.counts is unit.counts
    assert child.visited is unit.visited


def test_monitor_records_parses_and_skips(make_crawler):
    monitor = CrawlerMonitor(MetricsCollector())
    crawler = make_crawler(StaticPageParser(GRAPH), max_depth=2, monitor=monitor)

    crawler.crawl(["http://a.test/", "http://b.test/"])

    values = monitor.metrics.get_current_values()
    assert values["pages_parsed_total"] == 3
    assert values["urls_skipped_total{reason=visited}"] == 1
    assert values["urls_skipped_total{reason=depth}"] == 1
    assert values["words_counted_total"] == 9
    assert values["active_units"] == 0
    assert b"crawler_pages_parsed_total 3.0" in monitor.metrics.export_text()


def test_profiled_crawler_returns_the_same_result(make_crawler, clock):
    profiler = Profiler(clock)
    crawler = profiler.wrap(WEB_CRAWLER_CAPABILITIES, make_crawler(StaticPageParser(GRAPH)))

    result = crawler.crawl(["http://a.test/", "http://b.test/"])

    assert result.urls_visited == 4
    entries = profiler.ledger.snapshot()
    assert [str(entry.key) for entry in entries] == ["src.crawler.engine.ParallelWebCrawler#crawl"]
    assert entries[0].calls == 1
    assert isinstance(crawler.get_max_parallelism(), int)
    assert len(profiler.ledger) == 1


def test_monitor_times_parses_and_runtime_with_the_crawler_clock(make_crawler, clock):
    monitor = CrawlerMonitor(MetricsCollector(), clock)
    parser = StaticPageParser(GRAPH, on_parse=lambda url: clock.advance(timedelta(seconds=2)))
    crawler = make_crawler(parser, max_depth=1, monitor=monitor)

    crawler.crawl(["http://a.test/"])

    assert monitor.metrics.get_current_values()["parse_seconds"] == 2.0
    summary = monitor.get_summary()
    assert summary["runtime_seconds"] == 2.0
    assert summary["rates"]["pages_per_second"] == 0.5
