# a11y_scout/crawler/frontier.py
"""
Crawl frontier: pending, in-flight and visited pages of one crawl run.

Every URL moves ``pending -> in_flight -> visited`` exactly once. A URL that
the frontier already knows about is never queued again, which is what makes
cycles in the link graph terminate.
"""
from __future__ import annotations

from collections import deque
from typing import AbstractSet, Callable, Deque, Dict, List, Optional

from a11y_scout.logger import logger
from a11y_scout.models import CrawlTask

__all__ = ("PENDING", "IN_FLIGHT", "VISITED", "Frontier")

PENDING = "pending"
IN_FLIGHT = "in_flight"
VISITED = "visited"


class Frontier:
    """FIFO crawl queue with depth bounding and an exclusion predicate."""

    def __init__(self, exclude: Optional[Callable[[str], bool]] = None) -> None:
        self._exclude = exclude
        self._queue: Deque[CrawlTask] = deque()
        self._states: Dict[str, str] = {}
        self._visited: set[str] = set()

    def __len__(self) -> int:
        return len(self._queue)

    def __bool__(self) -> bool:
        return bool(self._queue)

    @property
    def pending_count(self) -> int:
        return len(self._queue)

    @property
    def visited(self) -> AbstractSet[str]:
        """Read-only view of the visited set."""
        return frozenset(self._visited)

    def state(self, url: str) -> Optional[str]:
        return self._states.get(url)

    def is_visited(self, url: str) -> bool:
        return url in self._visited

    def enqueue(self, url: str, depth: int) -> bool:
        """Queue *url* with the remaining hop budget *depth*; False if ignored."""
        if depth < 0:
            return False
        if url in self._states:
            return False
        if self._exclude is not None and self._exclude(url):
            logger.debug("Not queueing excluded URL %s", url)
            return False
        self._states[url] = PENDING
        self._queue.append(CrawlTask(url=url, depth=depth))
        logger.debug("Queued %s (depth budget %d)", url, depth)
        return True

    def dequeue(self) -> Optional[CrawlTask]:
        """Next pending task in discovery order, or None once the frontier is drained."""
        if not self._queue:
            return None
        task = self._queue.popleft()
        self._states[task.url] = IN_FLIGHT
        return task

    def take(self, limit: int) -> List[CrawlTask]:
        """Dequeue up to *limit* pending tasks, preserving FIFO order."""
        tasks: List[CrawlTask] = []
        while len(tasks) < limit:
            task = self.dequeue()
            if task is None:
                break
            tasks.append(task)
        return tasks

    def mark_visited(self, url: str) -> None:
        if url in self._visited:
            return
        self._states[url] = VISITED
        self._visited.add(url)
