# a11y_scout/audit/auditor.py
"""
Page auditor adapter.

Wraps the accessibility engine so that an audit never raises: any failure
is turned into a single placeholder violation and the page still gets a
report.
"""
from __future__ import annotations

import asyncio
from typing import Any, Collection, List, Optional, Protocol

from a11y_scout.logger import logger
from a11y_scout.models import AUDIT_FAILED_RULE, Violation

__all__ = ("AccessibilityEngine", "PageAuditor", "audit_failed_violation", "describe_error")


class AccessibilityEngine(Protocol):
    async def audit(self, page: Any, impacts: Collection[str]) -> List[Violation]: ...


def describe_error(exc: BaseException) -> str:
    text = str(exc).strip()
    return f"{type(exc).__name__}: {text}" if text else type(exc).__name__


def audit_failed_violation(reason: str) -> Violation:
    """Placeholder recorded for a page that could not be loaded or audited."""
    return Violation(
        rule_id=AUDIT_FAILED_RULE,
        impact="critical",
        description=f"The page could not be audited ({reason}).",
    )


class PageAuditor:
    """Runs *engine* on a page, keeps only violations whose impact is allowed."""

    def __init__(
        self,
        engine: AccessibilityEngine,
        impacts: Collection[str],
        timeout: Optional[float] = None,
    ) -> None:
        self.engine = engine
        self.impacts = frozenset(impacts)
        self.timeout = timeout

    async def audit(self, page: Any, url: str = "") -> List[Violation]:
        try:
            pending = self.engine.audit(page, self.impacts)
            if self.timeout is not None:
                violations = await asyncio.wait_for(pending, timeout=self.timeout)
            else:
                violations = await pending
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.warning("Audit failed for %s: %s", url or page, describe_error(exc))
            return [audit_failed_violation(describe_error(exc))]
        return [v for v in violations if v.impact in self.impacts]
