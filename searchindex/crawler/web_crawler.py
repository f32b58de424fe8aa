"""
Concurrent web crawler that indexes the visible text of every page it visits.
"""

import logging
import threading
from typing import Callable, List, Optional, Set

from .fetcher import HtmlFetcher
from .parser import (
    MalformedInputError, get_valid_links, is_http_url, normalize_url,
    strip_block_elements, strip_html
)
from ..concurrency.work_queue import WorkQueue
from ..engine import text
from ..storage.inverted_index import InvertedIndex
from ..storage.concurrent_index import ConcurrentInvertedIndex
from ..utils.config import ConfigurationError
from ..utils.monitoring import get_monitor


Fetcher = Callable[[str, int], Optional[str]]


class CrawlerTask:
    """Fetches one page, schedules its new links and indexes its text."""

    def __init__(self, crawler: 'WebCrawler', url: str):
        self.crawler = crawler
        self.url = url

    def __call__(self):
        crawler = self.crawler
        monitor = get_monitor()

        html = crawler.fetcher(self.url, crawler.redirects)
        if html is None:
            crawler.logger.debug(f"No content at {self.url}")
            if monitor:
                monitor.record_page_failed(self.url)
            return

        crawler.schedule(get_valid_links(self.url, strip_block_elements(html)))

        local = InvertedIndex()
        position = 0
        for word in text.parse(strip_html(html)):
            position += 1
            local.add_item(text.stem(word), self.url, position)

        crawler.index.add_all(local)

        crawler.logger.debug(f"Indexed {position} words from {self.url}")
        if monitor:
            monitor.record_page_crawled(self.url)


class WebCrawler:
    """
    Crawls outward from a seed URL on a work queue, visiting at most
    max_links distinct URLs.
    """

    def __init__(self, index: ConcurrentInvertedIndex, queue: WorkQueue, max_links: int,
                 fetcher: Optional[Fetcher] = None, redirects: int = HtmlFetcher.DEFAULT_REDIRECTS):
        if max_links < 1:
            raise ConfigurationError(f"max_links must be at least 1, got {max_links}")

        self.index = index
        self.queue = queue
        self.max_links = max_links
        self.fetcher = fetcher or HtmlFetcher()
        self.redirects = redirects
        self.logger = logging.getLogger(__name__)

        # Guards _links; checking the budget and scheduling happen under it together
        self._lock = threading.Lock()
        self._links: Set[str] = set()

    @property
    def visited(self) -> List[str]:
        """Sorted snapshot of every URL scheduled so far."""
        with self._lock:
            return sorted(self._links)

    def crawl(self, seed: str):
        """
        Crawl from seed and block until every scheduled page is processed.

        Raises:
            MalformedInputError: if seed is not an absolute HTTP(S) URL
        """
        url = normalize_url(seed)
        if not is_http_url(url):
            raise MalformedInputError(f"Not an HTTP(S) URL: {seed!r}")

        with self._lock:
            if url in self._links:
                self.logger.info(f"Already crawled {url}")
                return
            if len(self._links) >= self.max_links:
                self.logger.info(f"Crawl budget of {self.max_links} links already used")
                return
            self._links.add(url)
            self.queue.execute(CrawlerTask(self, url))

        self.logger.info(f"Crawling from {url} (max {self.max_links} links)")
        self.queue.finish()
        self.logger.info(f"Crawl from {url} finished, {len(self.visited)} links visited")

    def schedule(self, links: List[str]):
        """Schedule every link not seen before while the budget lasts."""
        with self._lock:
            for link in links:
                if len(self._links) >= self.max_links:
                    break

                if link not in self._links:
                    self._links.add(link)
                    self.queue.execute(CrawlerTask(self, link))
