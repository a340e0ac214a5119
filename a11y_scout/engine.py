# File: a11y_scout/engine.py
"""a11y_scout.engine: сборка реальных компонентов (браузер, axe, трекер) и запуск обхода."""

from __future__ import annotations

from typing import Optional

from a11y_scout.audit.auditor import PageAuditor
from a11y_scout.audit.axe import AxeEngine
from a11y_scout.config import CrawlConfig, load_config
from a11y_scout.crawler.browser import PlaywrightBrowser
from a11y_scout.issues.dedup import IssueDeduplicator
from a11y_scout.issues.tracker import build_tracker
from a11y_scout.logger import logger
from a11y_scout.orchestrator import Orchestrator
from a11y_scout.report.store import ReportStore
from a11y_scout.summary import CrawlSummary

__all__ = ["Engine", "start_audit"]


class Engine:
    """Фасад для CLI: загрузка конфига, запуск обхода и возврат сводки."""

    @staticmethod
    def load_config(path: Optional[str]) -> CrawlConfig:
        """Загружает конфиг из YAML/JSON."""
        return load_config(path)

    def __init__(self, config: CrawlConfig, *, dry_run: bool = False) -> None:
        self.config = config
        self.dry_run = dry_run or config.tracker.kind == "none"

    async def run(self) -> CrawlSummary:
        """Запускает обход сайта в браузере и возвращает CrawlSummary."""
        cfg = self.config
        tracker = build_tracker(cfg.tracker, dry_run=self.dry_run)
        store = ReportStore(cfg.output_dir, frontmatter=cfg.report_frontmatter, tags=cfg.report_tags)
        auditor = PageAuditor(
            AxeEngine(cfg.axe_script, cfg.axe_tags),
            cfg.impacts,
            timeout=cfg.audit_timeout,
        )
        logger.info("Reports will be written to %s", store.output_dir)

        async with PlaywrightBrowser(cfg) as browser, tracker:
            orchestrator = Orchestrator(
                base_url=str(cfg.base_url),
                max_depth=cfg.max_depth,
                browser=browser,
                auditor=auditor,
                store=store,
                deduplicator=IssueDeduplicator(
                    tracker,
                    cfg.tracker.labels,
                    dry_run=self.dry_run,
                    file_audit_failures=cfg.file_audit_failures,
                ),
                exclude_patterns=cfg.exclude_patterns,
                concurrency=cfg.concurrency,
            )
            return await orchestrator.run()


async def start_audit(cfg: CrawlConfig, *, dry_run: bool = False) -> CrawlSummary:
    """Запускает обход и аудит по конфигу; используется CLI."""
    return await Engine(cfg, dry_run=dry_run).run()
