"""
Web crawler core components.
"""

from .engine import ParallelWebCrawler, CrawlUnit, WEB_CRAWLER_CAPABILITIES
from .page_parser import PageParser, ParseResult, WebPageParser, PAGE_PARSER_CAPABILITIES
from .result import CrawlResult, CrawlResultWriter, top_words

__all__ = [
    'ParallelWebCrawler', 'CrawlUnit', 'WEB_CRAWLER_CAPABILITIES',
    'PageParser', 'ParseResult', 'WebPageParser', 'PAGE_PARSER_CAPABILITIES',
    'CrawlResult', 'CrawlResultWriter', 'top_words'
]
