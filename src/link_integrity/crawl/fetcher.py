"""Page fetchers used by the crawl engine.

A fetcher loads one URL at a time and hands back a :class:`LoadedPage` with the
final status and URL. The page stays open for link extraction until the
``visit`` context exits.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, ContextManager, Iterator, List, Optional

import requests
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from ..core.config import DEFAULT_TIMEOUT_MS
from ..core.models import NETWORK_ERROR_STATUS, FetchResult
from .link_collector import extract_links

logger = logging.getLogger(__name__)

HTML_CONTENT_TYPES = ("text/html", "application/xhtml+xml")


class CrawlSetupError(RuntimeError):
    """Raised when the fetcher cannot acquire its shared resources."""


class LoadedPage:
    """A fetched page whose links can still be read."""

    def __init__(self, result: FetchResult) -> None:
        self.result = result

    def read_html(self) -> str:
        return ""

    def extract_links(self) -> List[str]:
        if self.result.failed:
            return []
        return extract_links(self.read_html())


class Fetcher(ABC):
    """Capability interface for loading pages."""

    def open(self) -> None:
        """Acquire shared resources for a run."""

    def close(self) -> None:
        """Release shared resources."""

    @abstractmethod
    def visit(self, url: str) -> ContextManager[LoadedPage]:
        """Load ``url`` in a scoped page that is released when the context exits."""

    def fetch(self, url: str) -> FetchResult:
        with self.visit(url) as loaded:
            return loaded.result

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class _BrowserPage(LoadedPage):
    def __init__(self, result: FetchResult, page: Any) -> None:
        super().__init__(result)
        self._page = page

    def read_html(self) -> str:
        try:
            return self._page.content()
        except PlaywrightError:
            logger.debug("Could not read DOM for %s", self.result.final_url, exc_info=True)
            return ""


class PlaywrightFetcher(Fetcher):
    """Loads pages in headless Chromium, one tab per visit."""

    def __init__(self, timeout_ms: int = DEFAULT_TIMEOUT_MS, headless: bool = True) -> None:
        self.timeout_ms = timeout_ms
        self.headless = headless
        self._playwright: Any = None
        self._browser: Any = None
        self._context: Any = None

    def open(self) -> None:
        if self._context is not None:
            return
        try:
            self._playwright = sync_playwright().start()
            self._browser = self._playwright.chromium.launch(headless=self.headless)
            self._context = self._browser.new_context()
        except PlaywrightError as exc:
            self.close()
            raise CrawlSetupError(f"Could not launch browser: {exc}") from exc

    def close(self) -> None:
        browser, playwright = self._browser, self._playwright
        self._context = self._browser = self._playwright = None
        try:
            if browser is not None:
                browser.close()
        finally:
            if playwright is not None:
                playwright.stop()

    @contextmanager
    def visit(self, url: str) -> Iterator[LoadedPage]:
        if self._context is None:
            raise CrawlSetupError("PlaywrightFetcher.visit() called before open()")

        try:
            page = self._context.new_page()
        except PlaywrightError as exc:
            logger.debug("Could not open a page for %s: %s", url, exc)
            yield LoadedPage(FetchResult(NETWORK_ERROR_STATUS, url))
            return

        try:
            yield _BrowserPage(self._navigate(page, url), page)
        finally:
            try:
                page.close()
            except PlaywrightError:
                logger.debug("Failed to close page for %s", url, exc_info=True)

    def _navigate(self, page: Any, url: str) -> FetchResult:
        try:
            response = page.goto(url, wait_until="domcontentloaded", timeout=self.timeout_ms)
        except PlaywrightError as exc:
            logger.debug("Error checking %s: %s", url, exc)
            return FetchResult(NETWORK_ERROR_STATUS, url)

        if response is None:
            return FetchResult(NETWORK_ERROR_STATUS, url)
        return FetchResult(response.status, response.url)


class _HttpPage(LoadedPage):
    def __init__(self, result: FetchResult, html: str) -> None:
        super().__init__(result)
        self._html = html

    def read_html(self) -> str:
        return self._html


class RequestsFetcher(Fetcher):
    """Plain HTTP fetcher for sites whose links are rendered server-side."""

    def __init__(
        self,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout_ms = timeout_ms
        self._session = session
        self._owns_session = session is None

    def open(self) -> None:
        if self._session is None:
            self._session = requests.Session()
            self._owns_session = True

    def close(self) -> None:
        if self._session is not None and self._owns_session:
            self._session.close()
            self._session = None

    @contextmanager
    def visit(self, url: str) -> Iterator[LoadedPage]:
        if self._session is None:
            self.open()

        try:
            response = self._session.get(url, timeout=self.timeout_ms / 1000, allow_redirects=True)
            content_type = response.headers.get("Content-Type", "").lower()
            html = response.text if content_type.startswith(HTML_CONTENT_TYPES) else ""
        except requests.RequestException as exc:
            logger.debug("Error checking %s: %s", url, exc)
            result, html = FetchResult(NETWORK_ERROR_STATUS, url), ""
        else:
            result = FetchResult(response.status_code, response.url)
            response.close()

        yield _HttpPage(result, html)


def build_fetcher(name: str, *, timeout_ms: int, headless: bool = True) -> Fetcher:
    if name == "http":
        return RequestsFetcher(timeout_ms=timeout_ms)
    return PlaywrightFetcher(timeout_ms=timeout_ms, headless=headless)
