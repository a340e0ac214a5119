# File: tests/conftest.py
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence
from urllib.parse import urlsplit

import pytest

from a11y_scout.audit.auditor import PageAuditor
from a11y_scout.config import CrawlConfig
from a11y_scout.errors import AuditFailure, IssueCreationFailure, TrackerError
from a11y_scout.issues.dedup import IssueDeduplicator
from a11y_scout.models import Violation
from a11y_scout.orchestrator import Orchestrator
from a11y_scout.report.store import ReportStore

BASE = "https://site.test"


def url(path: str) -> str:
    """Absolute test-site URL for *path*."""
    return f"{BASE}{path}"


def make_violation(
    rule_id: str = "image-alt",
    impact: str = "critical",
    nodes: Sequence[str] = ('<img src="logo.png">',),
) -> Violation:
    return Violation(
        rule_id=rule_id,
        impact=impact,
        description=f"{rule_id} must pass",
        help_url=f"https://dequeuniversity.com/rules/axe/4.9/{rule_id}",
        nodes=list(nodes),
    )


# --------------------------------------------------------------------------- #
#                               Collaborator fakes                            #
# --------------------------------------------------------------------------- #


@dataclass
class FakePage:
    url: str

    @property
    def path(self) -> str:
        return urlsplit(self.url).path or "/"


class FakeBrowser:
    """Serves a static link graph: path -> list of raw hrefs."""

    def __init__(self, site: Dict[str, List[str]], broken: Iterable[str] = (), delay: float = 0.0) -> None:
        self.site = site
        self.broken = set(broken)
        self.delay = delay
        self.navigated: List[str] = []
        self.released: List[str] = []

    async def navigate(self, url: str) -> FakePage:
        self.navigated.append(url)
        if self.delay:
            await asyncio.sleep(self.delay)
        page = FakePage(url)
        if page.path in self.broken or page.path not in self.site:
            raise AuditFailure(url, "HTTP 404")
        return page

    async def extract_links(self, page: FakePage) -> List[str]:
        return list(self.site[page.path])

    async def release(self, page: FakePage) -> None:
        self.released.append(page.url)


class FakeEngine:
    """Returns canned violations per path; raises for paths in *failing*."""

    def __init__(self, violations: Optional[Dict[str, List[Violation]]] = None, failing: Iterable[str] = ()) -> None:
        self.violations = violations or {}
        self.failing = set(failing)

    async def audit(self, page: FakePage, impacts) -> List[Violation]:
        if page.path in self.failing:
            raise RuntimeError("axe exploded")
        return list(self.violations.get(page.path, []))


class InMemoryTracker:
    """Issue tracker kept in memory; survives across orchestrator runs."""

    def __init__(self, fail_create: Iterable[str] = (), fail_find: bool = False) -> None:
        self.issues: List[dict] = []
        self.calls: List[str] = []
        self.fail_create = set(fail_create)
        self.fail_find = fail_find

    def open_titles(self) -> List[str]:
        return [i["title"] for i in self.issues if i["state"] == "open"]

    async def find_open_issue(self, title: str) -> bool:
        self.calls.append(f"find:{title}")
        if self.fail_find:
            raise TrackerError("tracker unreachable")
        return title in self.open_titles()

    async def create_issue(self, title: str, body: str, labels: Sequence[str]) -> str:
        self.calls.append(f"create:{title}")
        if title in self.fail_create:
            raise IssueCreationFailure(title, "HTTP 403: Resource not accessible")
        self.issues.append({"title": title, "body": body, "labels": list(labels), "state": "open"})
        return f"https://tracker.test/issues/{len(self.issues)}"


# --------------------------------------------------------------------------- #
#                                  Fixtures                                   #
# --------------------------------------------------------------------------- #


@pytest.fixture()
def tracker() -> InMemoryTracker:
    return InMemoryTracker()


@pytest.fixture()
def build_orchestrator(tmp_path) -> Callable[..., Orchestrator]:
    """Factory wiring an Orchestrator to fakes; reports go under *tmp_path*."""

    def _build(
        site: Dict[str, List[str]],
        *,
        violations: Optional[Dict[str, List[Violation]]] = None,
        failing: Iterable[str] = (),
        broken: Iterable[str] = (),
        tracker: Optional[InMemoryTracker] = None,
        max_depth: int = 2,
        concurrency: int = 1,
        exclude_patterns: Sequence[str] = (r"/logout",),
        impacts: Sequence[str] = ("critical", "serious"),
        delay: float = 0.0,
    ) -> Orchestrator:
        return Orchestrator(
            base_url=BASE,
            max_depth=max_depth,
            browser=FakeBrowser(site, broken=broken, delay=delay),
            auditor=PageAuditor(FakeEngine(violations, failing), impacts),
            store=ReportStore(tmp_path / "reports"),
            deduplicator=IssueDeduplicator(
                tracker if tracker is not None else InMemoryTracker(), ["accessibility"]
            ),
            exclude_patterns=exclude_patterns,
            concurrency=concurrency,
        )

    return _build


@pytest.fixture()
def basic_config(tmp_path) -> CrawlConfig:
    """Return a basic valid CrawlConfig."""
    return CrawlConfig(
        base_url=BASE,
        max_depth=1,
        output_dir=tmp_path / "reports",
        tracker={"kind": "none"},
    )
