# File: a11y_scout/errors.py
"""Exception hierarchy for A11y Scout.

Only configuration problems are fatal; everything below is raised at a
single-page boundary and handled there so the rest of the crawl continues.
"""
from __future__ import annotations

__all__ = [
    "A11yScoutError",
    "LinkParseError",
    "AuditFailure",
    "TrackerError",
    "IssueCreationFailure",
]


class A11yScoutError(Exception):
    """Base class for all project errors."""


class LinkParseError(A11yScoutError, ValueError):
    """An href could not be parsed or resolved to an absolute URL."""

    def __init__(self, href: str, reason: str) -> None:
        super().__init__(f"cannot parse link {href!r}: {reason}")
        self.href = href
        self.reason = reason


class AuditFailure(A11yScoutError):
    """Navigation or the accessibility engine failed for a page."""

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"audit failed for {url}: {reason}")
        self.url = url
        self.reason = reason


class TrackerError(A11yScoutError):
    """The issue tracker could not be queried."""


class IssueCreationFailure(TrackerError):
    """The issue tracker rejected or failed to create an issue."""

    def __init__(self, title: str, reason: str) -> None:
        super().__init__(f"cannot create issue {title!r}: {reason}")
        self.title = title
        self.reason = reason
