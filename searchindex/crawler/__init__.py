"""
Web crawler components.
"""

from .fetcher import HtmlFetcher
from .parser import MalformedInputError, get_valid_links, normalize_url, strip_entities, strip_html
from .web_crawler import WebCrawler, CrawlerTask

__all__ = [
    'HtmlFetcher',
    'MalformedInputError', 'get_valid_links', 'normalize_url', 'strip_entities', 'strip_html',
    'WebCrawler', 'CrawlerTask'
]
