# a11y_scout/models.py
"""
Data models shared by the crawler, the auditor, the report writer and the
issue deduplicator.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Tuple
from urllib.parse import urlsplit

__all__ = (
    "IMPACTS",
    "AUDIT_FAILED_RULE",
    "CrawlTask",
    "Violation",
    "PageReport",
    "Issue",
    "page_path",
    "utc_now",
)

#: Impact levels reported by the accessibility engine, most severe first.
IMPACTS: Tuple[str, ...] = ("critical", "serious", "moderate", "minor")

#: Rule id of the placeholder violation emitted when a page cannot be audited.
AUDIT_FAILED_RULE = "audit-failed"


def utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


def page_path(url: str) -> str:
    """Return the path component of *url*, ``/`` when empty."""
    return urlsplit(url).path or "/"


@dataclass(slots=True, frozen=True)
class CrawlTask:
    """A page waiting to be audited; *depth* is the remaining hop budget."""

    url: str
    depth: int


@dataclass(slots=True)
class Violation:
    """A single accessibility rule failure on a page."""

    rule_id: str
    impact: str
    description: str
    help_url: str = ""
    nodes: List[str] = field(default_factory=list)

    @property
    def is_audit_failure(self) -> bool:
        return self.rule_id == AUDIT_FAILED_RULE

    @classmethod
    def from_axe(cls, raw: Mapping[str, Any]) -> "Violation":
        """Build a Violation from one entry of axe-core's ``violations`` array."""
        nodes = [
            str(node.get("html", "")).strip()
            for node in raw.get("nodes", []) or []
            if isinstance(node, Mapping)
        ]
        return cls(
            rule_id=str(raw.get("id", "")),
            impact=str(raw.get("impact") or ""),
            description=str(raw.get("help") or raw.get("description") or ""),
            help_url=str(raw.get("helpUrl") or ""),
            nodes=[n for n in nodes if n],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule_id": self.rule_id,
            "impact": self.impact,
            "description": self.description,
            "help_url": self.help_url,
            "nodes": list(self.nodes),
        }


@dataclass(slots=True)
class PageReport:
    """Audit outcome for one page."""

    url: str
    violations: List[Violation] = field(default_factory=list)
    generated_at: datetime = field(default_factory=utc_now)

    @property
    def path(self) -> str:
        return page_path(self.url)

    @property
    def audit_failed(self) -> bool:
        return any(v.is_audit_failure for v in self.violations)

    @property
    def findings(self) -> List[Violation]:
        """Violations reported by the engine, without the failure placeholder."""
        return [v for v in self.violations if not v.is_audit_failure]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "generated_at": self.generated_at.isoformat(),
            "violations": [v.to_dict() for v in self.violations],
        }


@dataclass(slots=True, frozen=True)
class Issue:
    """Ticket to be filed in the issue tracker. *title* is the dedup key."""

    title: str
    body: str
    labels: Tuple[str, ...] = ()
