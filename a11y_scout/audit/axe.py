# a11y_scout/audit/axe.py
"""
axe-core engine: injects axe into a Playwright page and converts its
``violations`` array into :class:`~a11y_scout.models.Violation` objects.
"""
from __future__ import annotations

from typing import Any, Collection, List, Mapping, Sequence

from playwright.async_api import Page

from a11y_scout.config import DEFAULT_AXE_SCRIPT
from a11y_scout.logger import logger
from a11y_scout.models import Violation

__all__ = ("AxeEngine", "violations_from_axe")

_RUN_AXE = """
async (tags) => {
    if (!window.axe || !axe.run) {
        throw new Error('axe-core is not loaded');
    }
    return await axe.run(document, {
        runOnly: { type: 'tag', values: tags },
        resultTypes: ['violations']
    });
}
"""


def violations_from_axe(result: Any, impacts: Collection[str]) -> List[Violation]:
    """Map an ``axe.run`` result to Violations whose impact is in *impacts*."""
    if not isinstance(result, Mapping):
        raise ValueError(f"unexpected axe result type: {type(result).__name__}")
    raw = result.get("violations") or []
    violations = [Violation.from_axe(v) for v in raw if isinstance(v, Mapping)]
    return [v for v in violations if v.impact in impacts]


class AxeEngine:
    """Runs axe-core inside an already loaded page."""

    def __init__(self, script: str = DEFAULT_AXE_SCRIPT, tags: Sequence[str] = ("wcag2a", "wcag2aa")) -> None:
        self.script = script
        self.tags = list(tags)

    async def _inject(self, page: Page) -> None:
        if self.script.startswith(("http://", "https://")):
            await page.add_script_tag(url=self.script)
        else:
            await page.add_script_tag(path=self.script)

    async def audit(self, page: Page, impacts: Collection[str]) -> List[Violation]:
        await self._inject(page)
        result = await page.evaluate(_RUN_AXE, self.tags)
        violations = violations_from_axe(result, impacts)
        logger.debug("axe reported %d violation(s) on %s", len(violations), page.url)
        return violations
