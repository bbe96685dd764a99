"""Breadth-first crawl over the internal links of a site."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from ..core.config import DEFAULT_MAX_DEPTH
from ..core.models import INITIAL_REFERRER, CrawlTarget
from .fetcher import Fetcher, LoadedPage
from .link_collector import normalize_url
from .state import CrawlState
from .targeting import ScopeFilter

logger = logging.getLogger(__name__)

VisitHook = Callable[[int, CrawlTarget], None]


@dataclass
class CrawlEngine:
    """Walks a site from its base URL and records link health.

    The engine owns its :class:`CrawlState`; build a new engine per run.
    """

    base_url: str
    fetcher: Fetcher
    max_depth: int = DEFAULT_MAX_DEPTH
    on_visit: Optional[VisitHook] = None
    state: CrawlState = field(default_factory=CrawlState)

    def __post_init__(self) -> None:
        self._scope = ScopeFilter.from_base_url(self.base_url)

    # ------------------------------------------------------------------
    # Core workflow
    # ------------------------------------------------------------------
    def run(self) -> CrawlState:
        seed = normalize_url(self.base_url, self.base_url)
        if seed is None:
            raise ValueError(f"Base URL cannot be parsed: {self.base_url!r}")

        self.state.queue.append(CrawlTarget(url=seed, depth=0, discovered_on=INITIAL_REFERRER))

        while self.state.queue:
            target = self.state.queue.popleft()
            self.crawl_target(target)

        logger.debug(
            "Crawl finished: %d pages, %d links, %d broken",
            self.state.total_pages,
            self.state.total_links,
            len(self.state.broken),
        )
        return self.state

    def crawl_target(self, target: CrawlTarget) -> None:
        if self.state.was_fetched(target.url):
            self.state.record_rediscovery(target)
            return

        number = self.state.fetched_count + 1
        logger.debug("[%d] Crawling: %s (depth: %d)", number, target.url, target.depth)
        if self.on_visit is not None:
            self.on_visit(number, target)

        with self.fetcher.visit(target.url) as loaded:
            self._process(target, loaded)

    # ------------------------------------------------------------------
    # Crawling primitives
    # ------------------------------------------------------------------
    def _process(self, target: CrawlTarget, loaded: LoadedPage) -> None:
        result = loaded.result

        if normalize_url(result.final_url, target.url) != target.url:
            self.state.record_redirect(target.url, result.final_url, target.discovered_on)

        # Broken targets are recorded but never crawled further.
        if result.is_broken:
            self.state.record_broken(target.url, result.status, target.discovered_on)
            return

        self.state.mark_visited(target.url)
        if target.depth >= self.max_depth:
            return

        links = loaded.extract_links()
        self.state.total_links += len(links)

        # Relative links resolve against where the page actually landed.
        page_url = result.final_url or target.url
        for link in links:
            normalized = normalize_url(link, page_url)
            if normalized is None:
                continue

            if self._scope.is_internal(normalized):
                discovered = CrawlTarget(url=normalized, depth=target.depth + 1, discovered_on=target.url)
                if self.state.was_fetched(normalized):
                    self.state.record_rediscovery(discovered)
                else:
                    self.state.queue.append(discovered)
            else:
                self.state.record_external(normalized, target.url)
