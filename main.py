#!/usr/bin/env python3
"""
Main entry point for the web crawler system.
"""

import argparse
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import List, Optional

from src import __version__
from src.crawler import (
    ParallelWebCrawler, WebPageParser, CrawlResultWriter,
    WEB_CRAWLER_CAPABILITIES, PAGE_PARSER_CAPABILITIES
)
from src.profiler import Profiler
from src.utils.clock import Clock, SystemClock
from src.utils.config import load_config, Config
from src.utils.logger import setup_logging, log_system_info
from src.utils.monitoring import initialize_monitoring


class CrawlerApp:
    """Main application class for the web crawler."""

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or SystemClock()
        self.logger = logging.getLogger(__name__)

    def run(self, config: Config, seed_urls: Optional[List[str]] = None,
            json_logs: bool = False) -> int:
        """Run one crawl and write its result and profile."""
        setup_logging(asdict(config.logging), enable_json=json_logs or config.logging.json)
        log_system_info()

        crawler_config = config.crawler
        start_pages = seed_urls or crawler_config.start_pages

        self.logger.info("=== WEB CRAWLER STARTING ===")
        self.logger.info(f"Start pages: {start_pages}")
        self.logger.info(f"Max depth: {crawler_config.max_depth}")
        self.logger.info(f"Timeout: {crawler_config.timeout_seconds}s")
        self.logger.info(f"Parallelism: {crawler_config.parallelism}")

        try:
            profiler = Profiler(self.clock)
            monitor = initialize_monitoring(
                config.monitoring.metrics_enabled,
                config.monitoring.prometheus_port,
                clock=self.clock
            )

            page_parser = profiler.wrap(PAGE_PARSER_CAPABILITIES, WebPageParser(
                user_agent=crawler_config.user_agent,
                request_timeout=crawler_config.request_timeout,
                ignored_words=crawler_config.ignored_word_patterns
            ))
            crawler = profiler.wrap(WEB_CRAWLER_CAPABILITIES, ParallelWebCrawler(
                clock=self.clock,
                timeout=crawler_config.timeout,
                max_depth=crawler_config.max_depth,
                ignored_urls=crawler_config.ignored_url_patterns,
                popular_word_count=crawler_config.popular_word_count,
                target_parallelism=crawler_config.parallelism,
                page_parser=page_parser,
                monitor=monitor
            ))
            self.logger.info(f"Worker threads available: {crawler.get_max_parallelism()}")

            result = crawler.crawl(start_pages)

            writer = CrawlResultWriter(result)
            if crawler_config.result_path:
                writer.write(crawler_config.result_path)
            else:
                writer.write_to(sys.stdout)

            if crawler_config.profile_output_path:
                profiler.write_data(crawler_config.profile_output_path)
            else:
                profiler.write_to(sys.stdout)

            self.logger.info(f"Monitoring summary: {monitor.get_summary()}")

        except Exception as e:
            self.logger.error(f"Fatal error: {e}", exc_info=True)
            return 1

        finally:
            self.logger.info("=== WEB CRAWLER FINISHED ===")

        return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Web Crawler System",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                                # Run with default config.yaml
  python main.py --config my_config.yaml        # Run with custom config
  python main.py --max-depth 2 https://example.com/
  python main.py --timeout 10 --parallelism 8   # 10 second crawl on 8 threads
  python main.py --profile-path profile.txt     # Write timings to a file
        """
    )

    parser.add_argument(
        'seed_urls',
        nargs='*',
        help='Start pages (default: crawler.start_pages from the config)'
    )

    parser.add_argument(
        '--config',
        default='config.yaml',
        help='Path to configuration file (default: config.yaml)'
    )

    parser.add_argument(
        '--max-depth',
        type=int,
        help='Number of link levels to follow'
    )

    parser.add_argument(
        '--timeout',
        type=float,
        dest='timeout_seconds',
        help='Crawl time limit in seconds'
    )

    parser.add_argument(
        '--parallelism',
        type=int,
        help='Worker threads to use (capped at the CPU count)'
    )

    parser.add_argument(
        '--popular-word-count',
        type=int,
        help='Number of words to report'
    )

    parser.add_argument(
        '--result-path',
        help='Write the JSON result here instead of stdout'
    )

    parser.add_argument(
        '--profile-path',
        dest='profile_output_path',
        help='Write the profiling report here instead of stdout'
    )

    parser.add_argument(
        '--json-logs',
        action='store_true',
        help='Emit structured JSON log records'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'Web Crawler System {__version__}'
    )

    args = parser.parse_args(argv)

    # Check if config file exists
    if not Path(args.config).exists():
        print(f"Error: Configuration file '{args.config}' not found.", file=sys.stderr)
        print("Please create a config.yaml file or specify a different path with --config", file=sys.stderr)
        return 1

    try:
        config = load_config(args.config).with_crawler_overrides(
            max_depth=args.max_depth,
            timeout_seconds=args.timeout_seconds,
            parallelism=args.parallelism,
            popular_word_count=args.popular_word_count,
            result_path=args.result_path,
            profile_output_path=args.profile_output_path
        )
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 1

    app = CrawlerApp()
    try:
        return app.run(config, seed_urls=args.seed_urls, json_logs=args.json_logs)
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
