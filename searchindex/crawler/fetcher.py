"""
HTML page fetcher that follows a bounded number of redirects.
"""

import asyncio
import logging
import threading
import time
from typing import Mapping, Optional
from urllib.parse import urljoin
from aiohttp import ClientSession, ClientTimeout, ClientError


def is_html(headers: Mapping[str, str]) -> bool:
    """True if the Content-Type header starts with text/html (case-insensitive)."""
    return headers.get('Content-Type', '').strip().lower().startswith('text/html')


def is_redirect(status: int, headers: Mapping[str, str]) -> bool:
    """True for a 3xx status with a non-empty Location header."""
    return 300 <= status < 400 and bool(headers.get('Location'))


class HtmlFetcher:
    """
    Fetches HTML pages with aiohttp. Each call to fetch() runs its own event
    loop, so it can be used from any worker thread that has no loop running.
    """

    DEFAULT_REDIRECTS = 3

    def __init__(self, user_agent: str = "SearchIndex/1.0", request_timeout: int = 30,
                 max_size: int = 10 * 1024 * 1024):
        self.user_agent = user_agent
        self.request_timeout = request_timeout
        self.max_size = max_size

        self.logger = logging.getLogger(__name__)

        self._stats_lock = threading.Lock()
        self.stats = {
            'total_requests': 0,
            'successful_requests': 0,
            'failed_requests': 0,
            'redirects_followed': 0,
            'total_bytes_downloaded': 0
        }

    def __call__(self, url: str, redirects: int = DEFAULT_REDIRECTS) -> Optional[str]:
        return self.fetch(url, redirects)

    def fetch(self, url: str, redirects: int = DEFAULT_REDIRECTS) -> Optional[str]:
        """
        Fetch url and return its HTML, following at most redirects 3xx responses.

        Returns:
            the page body, or None if the final response is not a 200 HTML
            response or the request failed
        """
        return asyncio.run(self.fetch_async(url, redirects))

    async def fetch_async(self, url: str, redirects: int = DEFAULT_REDIRECTS) -> Optional[str]:
        start_time = time.time()
        timeout = ClientTimeout(total=self.request_timeout)
        headers = {'User-Agent': self.user_agent}

        try:
            async with ClientSession(timeout=timeout, headers=headers) as session:
                while True:
                    self._bump('total_requests')
                    async with session.get(url, allow_redirects=False) as response:
                        if is_redirect(response.status, response.headers) and redirects > 0:
                            url = urljoin(url, response.headers['Location'])
                            redirects -= 1
                            self._bump('redirects_followed')
                            continue

                        if response.status != 200 or not is_html(response.headers):
                            self.logger.debug(f"No HTML at {url}: {response.status} "
                                              f"({response.headers.get('Content-Type', '')})")
                            self._bump('failed_requests')
                            return None

                        content = await self._read_content_safely(response)
                        if content is None:
                            self._bump('failed_requests')
                            return None

                        self._bump('successful_requests')
                        self._bump('total_bytes_downloaded', len(content))
                        self.logger.debug(f"Fetched {url} in {time.time() - start_time:.2f}s "
                                          f"({len(content)} chars)")
                        return content

        except asyncio.TimeoutError:
            self.logger.warning(f"Timeout fetching {url}")
        except ClientError as e:
            self.logger.warning(f"Client error fetching {url}: {e}")
        except ValueError as e:
            self.logger.warning(f"Malformed URL {url}: {e}")

        self._bump('failed_requests')
        return None

    async def _read_content_safely(self, response) -> Optional[str]:
        """
        Read response content with a size limit.

        Returns:
            Content string or None if too large
        """
        content_length = response.headers.get('Content-Length')
        if content_length and content_length.isdigit() and int(content_length) > self.max_size:
            self.logger.warning(f"Content too large ({content_length} bytes): {response.url}")
            return None

        content_bytes = b''
        async for chunk in response.content.iter_chunked(8192):
            content_bytes += chunk
            if len(content_bytes) > self.max_size:
                self.logger.warning(f"Content exceeded size limit during reading: {response.url}")
                return None

        encoding = response.charset or 'utf-8'
        try:
            return content_bytes.decode(encoding)
        except (UnicodeDecodeError, LookupError):
            return content_bytes.decode('utf-8', errors='ignore')

    def _bump(self, key: str, amount: int = 1):
        with self._stats_lock:
            self.stats[key] += amount

    def get_stats(self):
        """Get fetcher statistics."""
        with self._stats_lock:
            return self.stats.copy()
