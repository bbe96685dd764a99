"""Shared data structures used across the crawler."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

# Sentinel status for timeouts and navigation errors (DNS, refused, TLS).
NETWORK_ERROR_STATUS = 0
INITIAL_REFERRER = "initial"


@dataclass(frozen=True, slots=True)
class CrawlTarget:
    """A normalized URL waiting in the crawl queue."""

    url: str
    depth: int
    discovered_on: str


@dataclass(frozen=True, slots=True)
class FetchResult:
    """Outcome of loading a single URL."""

    status: int
    final_url: str

    @property
    def failed(self) -> bool:
        return self.status == NETWORK_ERROR_STATUS

    @property
    def is_broken(self) -> bool:
        return self.failed or self.status >= 400


@dataclass(slots=True)
class BrokenLink:
    status: int
    found_on: List[str] = field(default_factory=list)


@dataclass(slots=True)
class Redirect:
    target: str
    found_on: List[str] = field(default_factory=list)
