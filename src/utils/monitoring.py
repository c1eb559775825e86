"""
Monitoring and metrics collection for the web crawler system.
"""

import logging
import threading
from typing import Dict, Optional, Any

from prometheus_client import Counter, Histogram, Gauge, CollectorRegistry, generate_latest
from prometheus_client import start_http_server

from .clock import Clock, SystemClock


SKIP_REASONS = ('depth', 'deadline', 'ignored', 'visited')


class MetricsCollector:
    """
    Collects crawler metrics in a private Prometheus registry.

    Current values are also tracked in-process so summaries are available
    without scraping. All methods may be called from worker threads.
    """

    def __init__(self, prometheus_port: int = 8000):
        self.logger = logging.getLogger(__name__)
        self.prometheus_port = prometheus_port
        self.current_values: Dict[str, float] = {}
        self._lock = threading.Lock()

        self.prometheus_registry = CollectorRegistry()
        self.prometheus_metrics = {
            'pages_parsed_total': Counter(
                'crawler_pages_parsed_total',
                'Total number of pages parsed',
                registry=self.prometheus_registry
            ),
            'urls_skipped_total': Counter(
                'crawler_urls_skipped_total',
                'Total number of URLs skipped without parsing',
                ['reason'],
                registry=self.prometheus_registry
            ),
            'words_counted_total': Counter(
                'crawler_words_counted_total',
                'Total number of words merged into the word counts',
                registry=self.prometheus_registry
            ),
            'parse_seconds': Histogram(
                'crawler_parse_seconds',
                'Time spent parsing a single page',
                registry=self.prometheus_registry
            ),
            'active_units': Gauge(
                'crawler_active_units',
                'Number of crawl units currently parsing a page',
                registry=self.prometheus_registry
            )
        }

    def start_prometheus_server(self):
        """Start Prometheus metrics HTTP server."""
        start_http_server(self.prometheus_port, registry=self.prometheus_registry)
        self.logger.info(f"Prometheus metrics server started on port {self.prometheus_port}")

    def increment_counter(self, name: str, value: float = 1, labels: Optional[Dict[str, str]] = None):
        """Increment a counter metric."""
        metric = self.prometheus_metrics[name]
        if labels:
            metric.labels(**labels).inc(value)
        else:
            metric.inc(value)
        self._add_current(self._value_key(name, labels), value)

    def observe_histogram(self, name: str, value: float):
        """Record a histogram observation."""
        self.prometheus_metrics[name].observe(value)
        with self._lock:
            self.current_values[name] = value

    def add_gauge(self, name: str, delta: float):
        """Move a gauge up or down."""
        self.prometheus_metrics[name].inc(delta)
        self._add_current(name, delta)

    def get_current_values(self) -> Dict[str, float]:
        """Get current values of all metrics."""
        with self._lock:
            return dict(self.current_values)

    def export_text(self) -> bytes:
        """Prometheus exposition format of the registry."""
        return generate_latest(self.prometheus_registry)

    def _add_current(self, key: str, delta: float):
        with self._lock:
            self.current_values[key] = self.current_values.get(key, 0) + delta

    @staticmethod
    def _value_key(name: str, labels: Optional[Dict[str, str]]) -> str:
        if not labels:
            return name
        suffix = ','.join(f"{k}={v}" for k, v in sorted(labels.items()))
        return f"{name}{{{suffix}}}"


class CrawlerMonitor:
    """High-level monitoring interface for the crawler."""

    def __init__(self, metrics_collector: MetricsCollector, clock: Optional[Clock] = None):
        self.metrics = metrics_collector
        self.logger = logging.getLogger(__name__)
        self.clock = clock or SystemClock()
        self.start_time = self.clock.now()

    def record_parse_started(self):
        self.metrics.add_gauge('active_units', 1)

    def record_parse_finished(self):
        self.metrics.add_gauge('active_units', -1)

    def record_page_parsed(self, url: str, word_count: int, parse_time: float):
        """Record a parsed page and how many words it contributed."""
        self.metrics.increment_counter('pages_parsed_total')
        self.metrics.increment_counter('words_counted_total', word_count)
        self.metrics.observe_histogram('parse_seconds', parse_time)

    def record_url_skipped(self, url: str, reason: str):
        """Record a URL that was not parsed."""
        if reason not in SKIP_REASONS:
            raise ValueError(f"Unknown skip reason: {reason}")
        self.metrics.increment_counter('urls_skipped_total', labels={'reason': reason})

    def get_summary(self) -> Dict[str, Any]:
        """Get a summary of all metrics."""
        current_values = self.metrics.get_current_values()
        runtime = (self.clock.now() - self.start_time).total_seconds()

        return {
            'runtime_seconds': runtime,
            'metrics': current_values,
            'rates': {
                'pages_per_second': current_values.get('pages_parsed_total', 0) / runtime if runtime > 0 else 0,
            }
        }


def initialize_monitoring(enable_server: bool = False, prometheus_port: int = 8000,
                          clock: Optional[Clock] = None) -> CrawlerMonitor:
    """Create a monitor, optionally serving its metrics over HTTP."""
    metrics_collector = MetricsCollector(prometheus_port)
    if enable_server:
        metrics_collector.start_prometheus_server()
    return CrawlerMonitor(metrics_collector, clock)
