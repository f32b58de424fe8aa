"""
HTML cleaning and link extraction for crawled pages.
"""

import logging
from html import unescape
from typing import List
from urllib.parse import urljoin, urlsplit, urlunsplit, quote

from bs4 import BeautifulSoup, Comment


logger = logging.getLogger(__name__)

HTML_PARSER = 'lxml'

BLOCK_ELEMENTS = ['head', 'style', 'script', 'noscript', 'svg']

DEFAULT_PORTS = {'http': 80, 'https': 443}

# Characters left as is when re-encoding URL components
PATH_SAFE = "/%:@!$&'()*+,;=-._~"
QUERY_SAFE = "=&%:@!$'()*+,;/?-._~"


class MalformedInputError(ValueError):
    """A URL or redirect target could not be parsed."""
    pass


def _remove_comments(soup: BeautifulSoup):
    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()


def _remove_block_elements(soup: BeautifulSoup):
    for element in soup(BLOCK_ELEMENTS):
        element.decompose()


def strip_comments(html: str) -> str:
    """Remove HTML comments."""
    soup = BeautifulSoup(html, HTML_PARSER)
    _remove_comments(soup)
    return str(soup)


def strip_block_elements(html: str) -> str:
    """Remove head, style, script, noscript and svg elements with their content."""
    soup = BeautifulSoup(html, HTML_PARSER)
    _remove_block_elements(soup)
    return str(soup)


def strip_tags(html: str) -> str:
    """Replace every tag with a space, keeping the text between them."""
    return BeautifulSoup(html, HTML_PARSER).get_text(separator=' ')


def strip_entities(html: str) -> str:
    """Decode character references such as &amp; and &#39;."""
    return unescape(html)


def strip_html(html: str) -> str:
    """
    Visible text of a page: comments and block elements are removed, tags are
    replaced by spaces and entities are decoded.
    """
    soup = BeautifulSoup(html, HTML_PARSER)
    _remove_comments(soup)
    _remove_block_elements(soup)
    return soup.get_text(separator=' ')


def normalize_url(url: str) -> str:
    """
    Canonical form of an absolute URL: lowercase scheme and host, no default
    port, no fragment, and a percent-encoded path (at least "/") and query.

    Raises:
        MalformedInputError: if url has no scheme or host, or an invalid port
    """
    try:
        parts = urlsplit(url.strip())
        port = parts.port
    except ValueError as e:
        raise MalformedInputError(f"Malformed URL {url!r}: {e}") from e

    scheme = parts.scheme.lower()
    host = parts.hostname
    if not scheme or not host:
        raise MalformedInputError(f"URL is not absolute: {url!r}")

    if ':' in host:
        host = f"[{host}]"
    netloc = host
    if port is not None and port != DEFAULT_PORTS.get(scheme):
        netloc = f"{host}:{port}"
    if parts.username is not None:
        userinfo = parts.username
        if parts.password is not None:
            userinfo = f"{userinfo}:{parts.password}"
        netloc = f"{userinfo}@{netloc}"

    path = quote(parts.path or '/', safe=PATH_SAFE)
    query = quote(parts.query, safe=QUERY_SAFE)

    return urlunsplit((scheme, netloc, path, query, ''))


def is_http_url(url: str) -> bool:
    parts = urlsplit(url)
    return parts.scheme in ('http', 'https') and bool(parts.netloc)


def get_valid_links(base: str, html: str) -> List[str]:
    """
    Absolute, normalized HTTP(S) links from the anchor tags of html, in the
    order they first appear. Links that cannot be parsed are skipped.
    """
    soup = BeautifulSoup(html, HTML_PARSER)
    links = []
    seen = set()

    for anchor in soup.find_all('a', href=True):
        href = anchor['href'].strip()
        if not href:
            continue

        try:
            link = normalize_url(urljoin(base, href))
        except ValueError as e:
            logger.debug(f"Skipping link on {base}: {e}")
            continue

        if is_http_url(link) and link not in seen:
            seen.add(link)
            links.append(link)

    return links
