from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, List, Set

from ..core.models import BrokenLink, CrawlTarget, Redirect


@dataclass(slots=True)
class CrawlState:
    """Mutable bookkeeping for a single crawl run.

    ``visited`` holds the pages that loaded and were crawled; broken targets
    live only in ``broken``. Together they are every URL fetched so far.
    Broken fetches are therefore not counted in ``total_pages``.
    """

    queue: Deque[CrawlTarget] = field(default_factory=deque)
    visited: Set[str] = field(default_factory=set)
    broken: Dict[str, BrokenLink] = field(default_factory=dict)
    redirects: Dict[str, Redirect] = field(default_factory=dict)
    external: Dict[str, List[str]] = field(default_factory=dict)
    total_pages: int = 0
    total_links: int = 0

    @property
    def fetched_count(self) -> int:
        return len(self.visited) + len(self.broken)

    def was_fetched(self, url: str) -> bool:
        return url in self.visited or url in self.broken

    def mark_visited(self, url: str) -> None:
        if url not in self.visited:
            self.visited.add(url)
            self.total_pages += 1

    def record_broken(self, url: str, status: int, found_on: str) -> None:
        entry = self.broken.get(url)
        if entry is None:
            entry = self.broken[url] = BrokenLink(status=status)
        entry.found_on.append(found_on)

    def record_redirect(self, url: str, target: str, found_on: str) -> None:
        # First observed target wins.
        entry = self.redirects.get(url)
        if entry is None:
            entry = self.redirects[url] = Redirect(target=target)
        entry.found_on.append(found_on)

    def record_rediscovery(self, target: CrawlTarget) -> None:
        """Credit another referrer to a URL that was already fetched."""

        if target.url in self.broken:
            self.broken[target.url].found_on.append(target.discovered_on)
        if target.url in self.redirects:
            self.redirects[target.url].found_on.append(target.discovered_on)

    def record_external(self, url: str, referrer: str) -> None:
        self.external.setdefault(url, []).append(referrer)
