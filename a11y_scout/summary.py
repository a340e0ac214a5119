# File: a11y_scout/summary.py
"""a11y_scout.summary: итоговая сводка одного запуска обхода и аудита."""

from __future__ import annotations

import json
from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from a11y_scout.issues.dedup import IssueOutcome
from a11y_scout.models import PageReport

__all__ = ["CrawlSummary"]


@dataclass(slots=True)
class CrawlSummary:
    """Результаты запуска: отчёты по страницам и судьба задач в трекере."""

    base_url: str
    started_at: datetime
    finished_at: Optional[datetime] = None
    reports: List[PageReport] = field(default_factory=list)
    issues: List[IssueOutcome] = field(default_factory=list)

    @property
    def pages_audited(self) -> int:
        return len(self.reports)

    @property
    def audit_failures(self) -> int:
        return sum(1 for r in self.reports if r.audit_failed)

    @property
    def violation_count(self) -> int:
        return sum(len(r.findings) for r in self.reports)

    @property
    def duration(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()

    def issue_counts(self) -> Dict[str, int]:
        """Число страниц по статусу задачи (created, skipped, failed, ...)."""
        return dict(Counter(o.status for o in self.issues))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_url": self.base_url,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "pages_audited": self.pages_audited,
            "audit_failures": self.audit_failures,
            "violations": self.violation_count,
            "issues": self.issue_counts(),
            "pages": [r.to_dict() for r in self.reports],
            "issue_outcomes": [asdict(o) for o in self.issues],
        }

    def json(self, *, pretty: bool = False) -> str:
        """Возвращает JSON-представление сводки."""
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)
