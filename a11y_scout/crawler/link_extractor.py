# a11y_scout/crawler/link_extractor.py
"""
Link extraction and URL normalization for the A11y Scout crawler.

Only same-origin relative links (``href="/..."``) are followed. Every
comparison against the visited set is made on the normalized absolute form,
so ``/about`` and ``https://site/about`` collapse to one entry.
"""
from __future__ import annotations

import re
from typing import Callable, Iterable, List, Optional, Sequence, Tuple
from urllib.parse import urldefrag, urljoin, urlsplit, urlunsplit

from bs4 import BeautifulSoup
from bs4.element import Tag

from a11y_scout.errors import LinkParseError
from a11y_scout.logger import logger

__all__ = (
    "CRAWLABLE",
    "EXCLUDED",
    "VISITED",
    "IGNORED",
    "MALFORMED",
    "normalize_url",
    "anchor_hrefs",
    "LinkExtractor",
)

CRAWLABLE = "crawlable"
EXCLUDED = "excluded"
VISITED = "visited"
IGNORED = "ignored"
MALFORMED = "malformed"

_DEFAULT_PORTS = {"http": 80, "https": 443}


def normalize_url(href: str, base: str) -> str:
    """
    Resolve *href* against *base* and return the page URL it points to.

    A page is identified by origin and path only:
    - fragment and query string are dropped
    - lower-cases scheme and host, removes default ports
    - trailing slashes are stripped; an empty path becomes ``/``

    Raises LinkParseError if the result is not a parseable http(s) URL.
    """
    try:
        joined, _ = urldefrag(urljoin(base, href.strip()))
        parts = urlsplit(joined)
        port = parts.port
    except ValueError as exc:
        raise LinkParseError(href, str(exc)) from exc

    scheme = parts.scheme.lower()
    if scheme not in _DEFAULT_PORTS:
        raise LinkParseError(href, f"unsupported scheme {scheme or '(none)'!r}")
    host = parts.hostname or ""
    if not host:
        raise LinkParseError(href, "missing host")
    if ":" in host:
        host = f"[{host}]"
    netloc = host if port is None or port == _DEFAULT_PORTS[scheme] else f"{host}:{port}"
    path = parts.path.rstrip("/") or "/"
    return urlunsplit((scheme, netloc, path, "", ""))


def anchor_hrefs(html: str) -> List[str]:
    """Return raw ``href`` values of all ``<a>`` tags in document order."""
    soup = BeautifulSoup(html, "html.parser")
    hrefs: List[str] = []
    for tag in soup.find_all("a", href=True):
        if not isinstance(tag, Tag):
            continue
        href_val = tag.get("href")
        if isinstance(href_val, str):
            hrefs.append(href_val.strip())
    return hrefs


class LinkExtractor:
    """Turns raw hrefs of a page into crawlable absolute URLs."""

    def __init__(self, base_url: str, exclude_patterns: Sequence[str] = ()) -> None:
        self.base_url = normalize_url(base_url, base_url)
        self._origin = self._origin_of(self.base_url)
        self._excludes = [re.compile(p) for p in exclude_patterns]

    @staticmethod
    def _origin_of(url: str) -> Tuple[str, str]:
        parts = urlsplit(url)
        return parts.scheme, parts.netloc

    def is_excluded(self, url: str) -> bool:
        """True if the path (plus query) of *url* matches an exclusion pattern."""
        parts = urlsplit(url)
        target = f"{parts.path}?{parts.query}" if parts.query else parts.path
        return any(p.search(target) for p in self._excludes)

    def classify(
        self, href: str, is_visited: Callable[[str], bool]
    ) -> Tuple[str, Optional[str]]:
        """Return ``(kind, url)``; *url* is set for crawlable, excluded and visited links."""
        raw = href.strip()
        if not raw or raw.startswith("#") or raw.lower().startswith("mailto:"):
            return IGNORED, None
        if not raw.startswith("/"):
            return IGNORED, None
        try:
            url = normalize_url(raw, self.base_url)
        except LinkParseError as exc:
            logger.info("Dropping malformed link: %s", exc)
            return MALFORMED, None
        if self._origin_of(url) != self._origin:
            return IGNORED, None
        # exclusions also see the query string the link was written with
        if self.is_excluded(url) or self.is_excluded(urljoin(self.base_url, raw)):
            return EXCLUDED, url
        if is_visited(url):
            return VISITED, url
        return CRAWLABLE, url

    def extract(self, hrefs: Iterable[str], is_visited: Callable[[str], bool]) -> List[str]:
        """Crawlable URLs from *hrefs*, de-duplicated, in extraction order."""
        links: List[str] = []
        seen: set[str] = set()
        for href in hrefs:
            kind, url = self.classify(href, is_visited)
            if kind == EXCLUDED:
                logger.debug("Excluded link: %s", url)
            if kind != CRAWLABLE or url in seen:
                continue
            seen.add(url)  # type: ignore[arg-type]
            links.append(url)  # type: ignore[arg-type]
        return links
