"""
HTML content parser for extracting countable words and outbound links.
"""

import re
import logging
from collections import Counter
from typing import Dict, List, Optional, Pattern, Sequence
from urllib.parse import urljoin, urlparse, urlunparse
from dataclasses import dataclass, field
from bs4 import BeautifulSoup, Comment


@dataclass
class ParsedContent:
    """Words and links extracted from one HTML document."""
    url: str
    word_counts: Dict[str, int] = field(default_factory=dict)
    links: List[str] = field(default_factory=list)

    @property
    def word_count(self) -> int:
        return sum(self.word_counts.values())


class ContentParser:
    """
    Parses HTML content into word frequencies and absolute outbound links.
    """

    def __init__(self, ignored_words: Optional[Sequence[Pattern]] = None):
        self.ignored_words = list(ignored_words or [])
        self.logger = logging.getLogger(__name__)

        # Words are runs of letters and digits; everything else separates them
        self.word_pattern = re.compile(r'[^\W_]+')

    def parse(self, url: str, html_content: str) -> ParsedContent:
        """
        Parse HTML content and extract words and links.

        Args:
            url: The URL of the page, used to resolve relative links
            html_content: Raw HTML content

        Returns:
            ParsedContent with extracted data; empty if the markup cannot be parsed
        """
        try:
            soup = BeautifulSoup(html_content, 'lxml')

            # Remove script and style elements
            for script in soup(["script", "style", "noscript"]):
                script.decompose()

            # Remove comments
            for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
                comment.extract()

            parsed_content = ParsedContent(url=url)
            self._extract_links(soup, parsed_content, url)
            self._extract_words(soup, parsed_content)

            self.logger.debug(f"Parsed content from {url}: {parsed_content.word_count} words, "
                              f"{len(parsed_content.links)} links")

            return parsed_content

        except Exception as e:
            self.logger.error(f"Error parsing content from {url}: {e}")
            return ParsedContent(url=url)

    def _extract_words(self, soup: BeautifulSoup, parsed_content: ParsedContent):
        """Count words in the visible text."""
        text = soup.get_text(separator=' ')
        words = (word.lower() for word in self.word_pattern.findall(text))
        parsed_content.word_counts = dict(Counter(
            word for word in words if not self._is_ignored_word(word)
        ))

    def _extract_links(self, soup: BeautifulSoup, parsed_content: ParsedContent, base_url: str):
        """Extract and normalize links, keeping document order."""
        links = {}

        for link in soup.find_all('a', href=True):
            href = link['href'].strip()
            if not href or href.startswith('#'):
                continue

            # Resolve relative URLs
            absolute_url = urljoin(base_url, href)
            normalized_url = self._normalize_url(absolute_url)

            if self._is_valid_url(normalized_url):
                links.setdefault(normalized_url, None)

        parsed_content.links = list(links)

    def _is_ignored_word(self, word: str) -> bool:
        return any(pattern.fullmatch(word) for pattern in self.ignored_words)

    def _normalize_url(self, url: str) -> str:
        """Normalize URL by removing fragments."""
        try:
            parsed = urlparse(url)
            normalized = urlunparse((
                parsed.scheme,
                parsed.netloc.lower(),
                parsed.path,
                parsed.params,
                parsed.query,
                ''  # Remove fragment
            ))
            return normalized
        except Exception:
            return url

    def _is_valid_url(self, url: str) -> bool:
        """Only absolute http(s) links are followed."""
        try:
            parsed = urlparse(url)
            return parsed.scheme in ('http', 'https') and bool(parsed.netloc)
        except Exception:
            return False
