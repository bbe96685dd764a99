"""In-memory fetcher so the crawl engine can be driven without a browser."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from link_integrity.core.models import FetchResult  # type: ignore[import]
from link_integrity.crawl.fetcher import Fetcher, LoadedPage  # type: ignore[import]


def anchors(*hrefs: Optional[str]) -> str:
    """Build a tiny HTML body; ``None`` produces an anchor without href."""

    parts = [f'<a href="{href}">link</a>' if href is not None else "<a>no href</a>" for href in hrefs]
    return "<html><body>" + "".join(parts) + "</body></html>"


@dataclass
class FakePage:
    status: int = 200
    links: Iterable[Optional[str]] = ()
    final_url: Optional[str] = None


class _FakeLoadedPage(LoadedPage):
    def __init__(self, result: FetchResult, html: str, owner: "FakeFetcher") -> None:
        super().__init__(result)
        self._html = html
        self._owner = owner

    def read_html(self) -> str:
        self._owner.extracted.append(self.result.final_url)
        return self._html


@dataclass
class FakeFetcher(Fetcher):
    pages: Dict[str, FakePage] = field(default_factory=dict)
    calls: List[str] = field(default_factory=list)
    extracted: List[str] = field(default_factory=list)
    open_pages: int = 0

    @contextmanager
    def visit(self, url: str):
        self.calls.append(url)
        self.open_pages += 1
        try:
            page = self.pages.get(url)
            if page is None:
                yield _FakeLoadedPage(FetchResult(0, url), "", self)
                return
            result = FetchResult(page.status, page.final_url or url)
            yield _FakeLoadedPage(result, anchors(*page.links), self)
        finally:
            self.open_pages -= 1
