"""
Web page fetcher used by the page parser.
"""

import asyncio
import aiohttp
import logging
from typing import Optional
from dataclasses import dataclass
from aiohttp import ClientSession, ClientTimeout, ClientError


@dataclass
class FetchResult:
    """Result of a fetch operation."""
    url: str
    status_code: int
    content: Optional[str] = None
    error: Optional[str] = None
    content_type: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.content is not None and 200 <= self.status_code < 300


class WebFetcher:
    """
    Fetches HTML pages. Failures are reported in the FetchResult, never raised.
    """

    def __init__(self, user_agent: str, request_timeout: int = 30,
                 max_content_size: int = 10 * 1024 * 1024):
        self.user_agent = user_agent
        self.request_timeout = request_timeout
        self.max_content_size = max_content_size

        self.logger = logging.getLogger(__name__)
        self.session: Optional[ClientSession] = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def start(self):
        """Initialize the fetcher session."""
        if self.session is None:
            self.session = aiohttp.ClientSession(
                timeout=ClientTimeout(total=self.request_timeout),
                headers={'User-Agent': self.user_agent}
            )
            self.logger.debug("WebFetcher session started")

    async def close(self):
        """Close the fetcher session."""
        if self.session:
            await self.session.close()
            self.session = None
            self.logger.debug("WebFetcher session closed")

    async def fetch(self, url: str) -> FetchResult:
        """
        Fetch a single URL.

        Args:
            url: The URL to fetch

        Returns:
            FetchResult object containing the response data or error information
        """
        try:
            async with self.session.get(url) as response:
                content_type = response.headers.get('content-type', '').lower()

                if not self._is_html_content(content_type):
                    self.logger.debug(f"Skipping non-HTML content: {url} ({content_type})")
                    return FetchResult(
                        url=url,
                        status_code=response.status,
                        content_type=content_type,
                        error="Non-HTML content type"
                    )

                content = await self._read_content_safely(response)
                self.logger.debug(f"Fetched {url}: {response.status} ({len(content) if content else 0} bytes)")
                return FetchResult(
                    url=url,
                    status_code=response.status,
                    content=content,
                    content_type=content_type
                )

        except asyncio.TimeoutError:
            error_msg = "Request timeout"
            self.logger.warning(f"Timeout fetching {url}")

        except ClientError as e:
            error_msg = f"Client error: {str(e)}"
            self.logger.warning(f"Client error fetching {url}: {e}")

        except ValueError as e:
            # aiohttp rejects malformed URLs with ValueError subclasses
            error_msg = f"Invalid URL: {str(e)}"
            self.logger.warning(f"Invalid URL {url}: {e}")

        return FetchResult(url=url, status_code=0, error=error_msg)

    def _is_html_content(self, content_type: str) -> bool:
        """Check if content type is HTML."""
        return 'text/html' in content_type or 'application/xhtml+xml' in content_type

    async def _read_content_safely(self, response) -> Optional[str]:
        """
        Read response content with a size limit.

        Returns:
            Content string, or None if the body exceeds max_content_size
        """
        content_length = response.headers.get('content-length')
        if content_length and content_length.isdigit() and int(content_length) > self.max_content_size:
            self.logger.warning(f"Content too large ({content_length} bytes): {response.url}")
            return None

        content_bytes = b''
        async for chunk in response.content.iter_chunked(8192):
            content_bytes += chunk
            if len(content_bytes) > self.max_content_size:
                self.logger.warning(f"Content exceeded size limit during reading: {response.url}")
                return None

        encoding = response.charset or 'utf-8'
        try:
            return content_bytes.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            return content_bytes.decode('utf-8', errors='ignore')
