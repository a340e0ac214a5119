# a11y_scout/orchestrator.py
"""
Crawl orchestration: drains the frontier page by page and runs every page
through audit, formatting, storage and issue filing.

The orchestrator is the only writer of the frontier. With ``concurrency``
above one, already discovered pages are loaded and audited in parallel, but
their results are committed strictly in dequeue order, so discovery order
and report order match a sequential run.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, List, Protocol, Sequence

from a11y_scout.audit.auditor import PageAuditor, audit_failed_violation, describe_error
from a11y_scout.crawler.frontier import Frontier
from a11y_scout.crawler.link_extractor import LinkExtractor
from a11y_scout.issues.dedup import IssueDeduplicator
from a11y_scout.logger import logger
from a11y_scout.models import CrawlTask, PageReport, utc_now
from a11y_scout.report.markdown_report import format_report
from a11y_scout.report.store import ReportStore
from a11y_scout.summary import CrawlSummary

__all__ = ("AutomationDriver", "Orchestrator")


class AutomationDriver(Protocol):
    async def navigate(self, url: str) -> Any: ...

    async def extract_links(self, page: Any) -> List[str]: ...

    async def release(self, page: Any) -> None: ...


@dataclass(slots=True)
class _Visit:
    task: CrawlTask
    report: PageReport
    hrefs: List[str] = field(default_factory=list)


class Orchestrator:
    """Runs one crawl: seed, drain the frontier, return a CrawlSummary."""

    def __init__(
        self,
        *,
        base_url: str,
        max_depth: int,
        browser: AutomationDriver,
        auditor: PageAuditor,
        store: ReportStore,
        deduplicator: IssueDeduplicator,
        exclude_patterns: Sequence[str] = (),
        concurrency: int = 1,
    ) -> None:
        if max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")
        self.max_depth = max_depth
        self.browser = browser
        self.auditor = auditor
        self.store = store
        self.deduplicator = deduplicator
        self.concurrency = concurrency
        self.links = LinkExtractor(base_url, exclude_patterns)
        self.frontier = Frontier(exclude=self.links.is_excluded)

    async def run(self) -> CrawlSummary:
        summary = CrawlSummary(base_url=self.links.base_url, started_at=utc_now())
        logger.info("Crawl started: %s (max depth %d)", self.links.base_url, self.max_depth)
        self.frontier.enqueue(self.links.base_url, self.max_depth)

        while self.frontier:
            batch = self.frontier.take(self.concurrency)
            if len(batch) == 1:
                visits = [await self._visit(batch[0])]
            else:
                visits = await asyncio.gather(*(self._visit(task) for task in batch))
            for visit in visits:
                summary.reports.append(await self._commit(visit))

        summary.issues = list(self.deduplicator.outcomes)
        summary.finished_at = utc_now()
        self.store.write_index(summary.reports)
        logger.info(
            "Crawl finished: %d page(s), %d violation(s), %d audit failure(s) in %.1f s",
            summary.pages_audited,
            summary.violation_count,
            summary.audit_failures,
            summary.duration,
        )
        return summary

    async def _visit(self, task: CrawlTask) -> _Visit:
        """Load and audit one page. Never raises for page-level failures."""
        logger.info("Auditing %s", task.url)
        try:
            page = await self.browser.navigate(task.url)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            reason = describe_error(exc)
            logger.warning("Navigation failed for %s: %s", task.url, reason)
            return _Visit(task, PageReport(task.url, [audit_failed_violation(reason)]))

        hrefs: List[str] = []
        try:
            violations = await self.auditor.audit(page, task.url)
            if task.depth > 0:
                try:
                    hrefs = await self.browser.extract_links(page)
                except asyncio.CancelledError:
                    raise
                except Exception as exc:
                    logger.warning("Link extraction failed for %s: %s", task.url, describe_error(exc))
        finally:
            try:
                await self.browser.release(page)
            except Exception as exc:
                logger.warning("Cannot release page %s: %s", task.url, describe_error(exc))
        return _Visit(task, PageReport(task.url, violations), hrefs)

    async def _commit(self, visit: _Visit) -> PageReport:
        report = visit.report
        try:
            self.store.write(report.url, format_report(report), report.generated_at)
        except OSError as exc:
            logger.error("Cannot store report for %s: %s", report.url, exc)
        self.frontier.mark_visited(report.url)

        queued = 0
        for url in self.links.extract(visit.hrefs, self.frontier.is_visited):
            if self.frontier.enqueue(url, visit.task.depth - 1):
                queued += 1
        if queued:
            logger.debug("%s: queued %d new link(s)", report.url, queued)

        await self.deduplicator.file(report)
        return report
