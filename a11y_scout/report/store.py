# File: a11y_scout/report/store.py
"""a11y_scout.report.store: one markdown artifact per page, keyed by a path slug.

Each page of a run owns exactly one file. The readable slug is used when it
is free; a second page whose slug collides with an already claimed one (for
example ``/a-b`` and ``/a/b``), or a slug longer than :data:`MAX_SLUG_CHARS`,
gets a short hash of its path appended.
"""

from __future__ import annotations

import hashlib
import re
from datetime import date, datetime
from pathlib import Path
from typing import Dict, Iterable, Optional, Sequence, Union

import yaml

from a11y_scout.logger import logger
from a11y_scout.models import PageReport, page_path

__all__ = [
    "HOME_SLUG",
    "INDEX_NAME",
    "MAX_SLUG_CHARS",
    "report_slug",
    "artifact_name",
    "ReportStore",
]

HOME_SLUG = "home"
INDEX_NAME = "index.md"  # page artifacts are always "a11y-*", so this never collides
#: Keeps "a11y-<slug>-<hash>.md" well below the usual 255-byte name limit.
MAX_SLUG_CHARS = 200

_UNSAFE_RE = re.compile(r"[^A-Za-z0-9._-]")


def _digest(url: str) -> str:
    return hashlib.sha1(page_path(url).encode("utf-8")).hexdigest()[:8]


def report_slug(url: str) -> str:
    """``/`` -> ``home``; ``/about/team`` -> ``about-team``; long paths are shortened."""
    path = page_path(url)
    slug = _UNSAFE_RE.sub("_", path.replace("/", "-")).strip("-")
    if not slug:
        return HOME_SLUG
    if len(slug) > MAX_SLUG_CHARS:
        return f"{slug[:MAX_SLUG_CHARS]}-{_digest(url)}"
    return slug


def artifact_name(url: str, *, unique: bool = False) -> str:
    """File name for *url*; *unique* appends the path hash to break a collision."""
    slug = report_slug(url)
    if unique:
        slug = f"{slug}-{_digest(url)}"
    return f"a11y-{slug}.md"


def _frontmatter(title: str, tags: Sequence[str], day: date) -> str:
    meta = {
        "title": title,
        "tags": list(tags),
        "description": "",
        "date": day.isoformat(),
    }
    return "---\n" + yaml.safe_dump(meta, sort_keys=False, allow_unicode=True) + "---\n\n"


class ReportStore:
    """Writes page reports into *output_dir*; a rerun overwrites the previous file."""

    def __init__(
        self,
        output_dir: Union[str, Path],
        *,
        frontmatter: bool = False,
        tags: Sequence[str] = ("accessibility",),
    ) -> None:
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.frontmatter = frontmatter
        self.tags = tuple(tags)
        #: url -> artifact of every report written successfully in this run
        self.artifacts: Dict[str, Path] = {}
        self._names: Dict[str, str] = {}
        self._owners: Dict[str, str] = {}

    def _claim(self, url: str) -> str:
        name = self._names.get(url)
        if name is not None:
            return name
        name = artifact_name(url)
        if self._owners.get(name, url) != url:
            name = artifact_name(url, unique=True)
            logger.debug("Artifact name for %s collides, using %s", url, name)
        self._names[url] = name
        self._owners[name] = url
        return name

    def path_for(self, url: str) -> Path:
        return self.output_dir / self._claim(url)

    def write(self, url: str, content: str, generated_at: Optional[datetime] = None) -> Path:
        """Store *content* for *url* and return the artifact path. I/O errors propagate."""
        if self.frontmatter and not content.lstrip().startswith("---"):
            day = (generated_at or datetime.now()).date()
            content = _frontmatter(f"Accessibility report: {page_path(url)}", self.tags, day) + content
        path = self.path_for(url)
        if url in self.artifacts:
            logger.debug("Overwriting report %s", path)
        path.write_text(content, encoding="utf-8")
        self.artifacts[url] = path
        return path

    def read(self, url: str) -> str:
        return self.path_for(url).read_text(encoding="utf-8")

    def write_index(self, reports: Iterable[PageReport]) -> Path:
        """Write a table of contents for all reports of the run."""
        lines = [
            "# Accessibility reports",
            "",
            "| Page | Violations | Report |",
            "| --- | --- | --- |",
        ]
        for report in reports:
            count = "audit failed" if report.audit_failed else str(len(report.violations))
            stored = self.artifacts.get(report.url)
            link = f"[{stored.name}]({stored.name})" if stored is not None else "not stored"
            lines.append(f"| {report.path} | {count} | {link} |")
        path = self.output_dir / INDEX_NAME
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path
