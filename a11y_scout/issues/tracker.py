# a11y_scout/issues/tracker.py
"""
Issue tracker backends.

Every backend answers two questions: is there an *open* issue with exactly
this title, and please create one. Failures surface as TrackerError (query)
or IssueCreationFailure (create); the deduplicator handles them per page.
"""
from __future__ import annotations

import asyncio
import json
import os
from typing import Any, List, Optional, Protocol, Sequence

from aiohttp import ClientError, ClientSession, ClientTimeout

from a11y_scout.config import TrackerConfig
from a11y_scout.errors import IssueCreationFailure, TrackerError
from a11y_scout.logger import logger

__all__ = (
    "IssueTracker",
    "NullTracker",
    "GitHubIssueTracker",
    "GhCliIssueTracker",
    "build_tracker",
)


class IssueTracker(Protocol):
    async def find_open_issue(self, title: str) -> bool: ...

    async def create_issue(self, title: str, body: str, labels: Sequence[str]) -> Optional[str]: ...


class NullTracker:
    """Tracker used when no backend is configured: nothing exists, nothing is created."""

    async def __aenter__(self) -> NullTracker:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def find_open_issue(self, title: str) -> bool:
        return False

    async def create_issue(self, title: str, body: str, labels: Sequence[str]) -> Optional[str]:
        logger.info("[no tracker] would create issue %r", title)
        return None


class GitHubIssueTracker:
    """GitHub REST API backend (aiohttp)."""

    _RETRY_STATUS: Sequence[int] = tuple(range(500, 600)) + (429,)

    def __init__(self, config: TrackerConfig, token: Optional[str] = None) -> None:
        self.config = config
        self.token = token
        self.retry_times: int = 2
        self.backoff_base: float = 1.0
        self.session: Optional[ClientSession] = None
        self._api = config.api_url.rstrip("/")

    async def __aenter__(self) -> GitHubIssueTracker:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "A11yScout/1.0",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        self.session = ClientSession(
            timeout=ClientTimeout(total=self.config.timeout),
            headers=headers,
            raise_for_status=False,
        )
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self.session and not self.session.closed:
            await self.session.close()

    def _session(self) -> ClientSession:
        if not self.session:
            raise RuntimeError("Session not initialized")
        return self.session

    async def _get_page(self, url: str, params: Optional[dict]) -> tuple[List[Any], Optional[str]]:
        """GET one page of results; retries 5xx/429 with exponential backoff."""
        attempts = 0
        while True:
            try:
                async with self._session().get(url, params=params) as resp:
                    if resp.status in self._RETRY_STATUS:
                        raise ClientError(f"retryable status {resp.status}")
                    if resp.status != 200:
                        text = await resp.text()
                        raise TrackerError(f"GET {url} -> HTTP {resp.status}: {text[:200]}")
                    data = await resp.json()
                    nxt = resp.links.get("next")
                    next_url = str(nxt["url"]) if nxt else None
                    return (data if isinstance(data, list) else []), next_url
            except (ClientError, asyncio.TimeoutError) as exc:
                attempts += 1
                if attempts > self.retry_times:
                    raise TrackerError(f"GET {url} failed: {exc}") from exc
                backoff = min(60.0, self.backoff_base * 2**attempts)
                logger.debug("Retry %d/%d for %s after %.2f s", attempts, self.retry_times, url, backoff)
                await asyncio.sleep(backoff)

    async def find_open_issue(self, title: str) -> bool:
        url: Optional[str] = f"{self._api}/repos/{self.config.repo}/issues"
        # no label filter: an open issue with this title counts whatever its labels
        params: Optional[dict] = {"state": "open", "per_page": "100"}
        while url:
            items, url = await self._get_page(url, params)
            params = None  # the "next" link already carries the query
            for item in items:
                if not isinstance(item, dict) or "pull_request" in item:
                    continue
                if item.get("title") == title:
                    return True
        return False

    async def create_issue(self, title: str, body: str, labels: Sequence[str]) -> Optional[str]:
        url = f"{self._api}/repos/{self.config.repo}/issues"
        payload = {"title": title, "body": body, "labels": list(labels)}
        try:
            async with self._session().post(url, json=payload) as resp:
                if resp.status != 201:
                    text = await resp.text()
                    raise IssueCreationFailure(title, f"HTTP {resp.status}: {text[:200]}")
                data = await resp.json()
        except (ClientError, asyncio.TimeoutError) as exc:
            raise IssueCreationFailure(title, str(exc) or type(exc).__name__) from exc
        return data.get("html_url") if isinstance(data, dict) else None


class GhCliIssueTracker:
    """Backend that shells out to the GitHub CLI (``gh``)."""

    def __init__(self, config: TrackerConfig) -> None:
        self.config = config

    async def __aenter__(self) -> GhCliIssueTracker:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        return None

    async def _run(self, args: Sequence[str], stdin: Optional[str] = None) -> str:
        try:
            proc = await asyncio.create_subprocess_exec(
                self.config.gh_path,
                *args,
                stdin=asyncio.subprocess.PIPE if stdin is not None else asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise TrackerError(f"cannot run {self.config.gh_path}: {exc}") from exc
        try:
            out, err = await asyncio.wait_for(
                proc.communicate(stdin.encode("utf-8") if stdin is not None else None),
                timeout=self.config.timeout,
            )
        except asyncio.TimeoutError as exc:
            proc.kill()
            await proc.wait()
            raise TrackerError(f"gh {' '.join(args[:2])} timed out") from exc
        if proc.returncode != 0:
            message = err.decode("utf-8", "replace").strip()
            raise TrackerError(f"gh {' '.join(args[:2])} exited with {proc.returncode}: {message}")
        return out.decode("utf-8", "replace")

    async def find_open_issue(self, title: str) -> bool:
        out = await self._run(
            [
                "issue", "list",
                "--repo", self.config.repo,
                "--state", "open",
                "--search", f'"{title}" in:title',
                "--json", "title",
                "--limit", "100",
            ]
        )
        try:
            items = json.loads(out or "[]")
        except json.JSONDecodeError as exc:
            raise TrackerError(f"unexpected gh output: {exc}") from exc
        return any(isinstance(i, dict) and i.get("title") == title for i in items)

    async def create_issue(self, title: str, body: str, labels: Sequence[str]) -> Optional[str]:
        args = ["issue", "create", "--repo", self.config.repo, "--title", title, "--body-file", "-"]
        for label in labels:
            args += ["--label", label]
        try:
            out = await self._run(args, stdin=body)
        except TrackerError as exc:
            raise IssueCreationFailure(title, str(exc)) from exc
        return out.strip() or None


def build_tracker(config: TrackerConfig, *, dry_run: bool = False):
    """Create the backend named by ``config.kind``.

    A GitHub token is required unless *dry_run* is set (reads of public
    repositories work anonymously).
    """
    if config.kind == "github":
        token = os.environ.get(config.token_env)
        if not token and not dry_run:
            raise ValueError(f"environment variable {config.token_env} is not set")
        return GitHubIssueTracker(config, token)
    if config.kind == "gh":
        return GhCliIssueTracker(config)
    return NullTracker()
