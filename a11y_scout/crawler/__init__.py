"""a11y_scout.crawler: frontier, link extraction and the browser driver."""
from a11y_scout.crawler.frontier import Frontier
from a11y_scout.crawler.link_extractor import LinkExtractor, anchor_hrefs, normalize_url

__all__ = ["Frontier", "LinkExtractor", "anchor_hrefs", "normalize_url"]
