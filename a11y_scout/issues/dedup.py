# a11y_scout/issues/dedup.py
"""
Idempotent issue filing.

The title ``Accessibility issues on <path>`` is the dedup key: before an
issue is created the tracker is asked whether an open issue with exactly
that title exists. The check is awaited before the create decision, so
re-running a crawl against the same tracker never files a second issue for
a page.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Set

from a11y_scout.audit.auditor import describe_error
from a11y_scout.errors import IssueCreationFailure, TrackerError
from a11y_scout.issues.tracker import IssueTracker
from a11y_scout.logger import logger
from a11y_scout.models import Issue, PageReport, page_path
from a11y_scout.report.markdown_report import format_report

__all__ = [
    "CREATED",
    "SKIPPED",
    "FAILED",
    "CLEAN",
    "DRY_RUN",
    "MAX_BODY_CHARS",
    "IssueOutcome",
    "issue_title",
    "dedup_marker",
    "build_issue",
    "IssueDeduplicator",
]

CREATED = "created"
SKIPPED = "skipped"
FAILED = "failed"
CLEAN = "clean"
DRY_RUN = "dry_run"

#: GitHub rejects bodies longer than 65 536 characters.
MAX_BODY_CHARS = 65_000
_TRUNCATED_NOTE = "\n\n_Report truncated; see the stored report artifact for the full list._\n"


def issue_title(url: str) -> str:
    return f"Accessibility issues on {page_path(url)}"


def dedup_marker(url: str) -> str:
    return f"<!-- a11y-scout:page={page_path(url)} -->"


def build_issue(report: PageReport, labels: Sequence[str]) -> Issue:
    marker = dedup_marker(report.url)
    body = format_report(report)
    budget = MAX_BODY_CHARS - len(marker) - len(_TRUNCATED_NOTE) - 2
    if len(body) > budget:
        body = body[:budget].rstrip() + _TRUNCATED_NOTE
    return Issue(title=issue_title(report.url), body=f"{body}\n{marker}\n", labels=tuple(labels))


@dataclass(slots=True)
class IssueOutcome:
    """What happened to the issue for one page."""

    url: str
    title: str
    status: str
    issue_url: Optional[str] = None
    error: Optional[str] = None


class IssueDeduplicator:
    """Files at most one open issue per page path."""

    def __init__(
        self,
        tracker: IssueTracker,
        labels: Sequence[str],
        *,
        dry_run: bool = False,
        file_audit_failures: bool = False,
    ) -> None:
        self.tracker = tracker
        self.labels = tuple(labels)
        self.dry_run = dry_run
        self.file_audit_failures = file_audit_failures
        self.outcomes: List[IssueOutcome] = []
        self._handled: Set[str] = set()

    def _record(self, outcome: IssueOutcome) -> IssueOutcome:
        self.outcomes.append(outcome)
        return outcome

    def _should_file(self, report: PageReport) -> bool:
        if report.findings:
            return True
        return report.audit_failed and self.file_audit_failures

    async def file(self, report: PageReport) -> IssueOutcome:
        title = issue_title(report.url)
        if not self._should_file(report):
            return self._record(IssueOutcome(report.url, title, CLEAN))

        if title in self._handled:
            logger.info("Issue %r already handled in this run, skipping", title)
            return self._record(IssueOutcome(report.url, title, SKIPPED))
        self._handled.add(title)

        try:
            exists = await self.tracker.find_open_issue(title)
        except Exception as exc:
            reason = str(exc) if isinstance(exc, TrackerError) else describe_error(exc)
            logger.error("Cannot check existing issues for %s: %s", report.url, reason)
            return self._record(IssueOutcome(report.url, title, FAILED, error=reason))
        if exists:
            logger.info("Open issue %r already exists, skipping", title)
            return self._record(IssueOutcome(report.url, title, SKIPPED))

        issue = build_issue(report, self.labels)
        if self.dry_run:
            logger.info("[dry-run] would create issue %r", title)
            return self._record(IssueOutcome(report.url, title, DRY_RUN))

        try:
            issue_url = await self.tracker.create_issue(issue.title, issue.body, issue.labels)
        except Exception as exc:
            reason = str(exc) if isinstance(exc, IssueCreationFailure) else describe_error(exc)
            logger.error("Issue creation failed for %s: %s", report.url, reason)
            return self._record(IssueOutcome(report.url, title, FAILED, error=reason))
        logger.info("Created issue %r %s", title, issue_url or "")
        return self._record(IssueOutcome(report.url, title, CREATED, issue_url=issue_url))
