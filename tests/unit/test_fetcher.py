from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest
import requests

from tests.helpers.link_integrity_imports import CrawlEngine, fetcher

PAGE_HTML = '<html><body><a href="/about">About</a><a href="https://other.test">x</a></body></html>'


def _open_browser_fetcher(page):
    browser_fetcher = fetcher.PlaywrightFetcher(timeout_ms=1234)
    context = MagicMock()
    context.new_page.return_value = page
    browser_fetcher._context = context
    return browser_fetcher


def test_playwright_visit_returns_final_status_and_closes_page():
    page = MagicMock()
    page.goto.return_value = SimpleNamespace(status=200, url="https://example.test/home")
    page.content.return_value = PAGE_HTML
    browser_fetcher = _open_browser_fetcher(page)

    with browser_fetcher.visit("https://example.test") as loaded:
        assert loaded.result == fetcher.FetchResult(200, "https://example.test/home")
        assert loaded.extract_links() == ["/about", "https://other.test"]
        page.close.assert_not_called()

    page.goto.assert_called_once_with(
        "https://example.test", wait_until="domcontentloaded", timeout=1234
    )
    page.close.assert_called_once()


@pytest.mark.parametrize(
    "goto",
    [
        {"side_effect": fetcher.PlaywrightError("net::ERR_NAME_NOT_RESOLVED")},
        {"return_value": None},
    ],
)
def test_playwright_navigation_failures_map_to_status_zero(goto):
    page = MagicMock()
    page.goto.configure_mock(**goto)
    browser_fetcher = _open_browser_fetcher(page)

    result = browser_fetcher.fetch("https://example.test/down")

    assert result.status == 0
    assert result.final_url == "https://example.test/down"
    assert result.is_broken
    page.close.assert_called_once()


def test_playwright_page_creation_failure_is_recorded_as_broken():
    browser_fetcher = fetcher.PlaywrightFetcher()
    context = MagicMock()
    context.new_page.side_effect = fetcher.PlaywrightError(
        "Target page, context or browser has been closed"
    )
    browser_fetcher._context = context

    with browser_fetcher.visit("https://example.test/about") as loaded:
        assert loaded.result == fetcher.FetchResult(0, "https://example.test/about")
        assert loaded.extract_links() == []

    state = CrawlEngine("https://example.test", browser_fetcher).run()

    assert state.broken["https://example.test"].status == 0
    assert state.total_pages == 0


def test_playwright_page_is_closed_when_processing_raises():
    page = MagicMock()
    page.goto.return_value = SimpleNamespace(status=200, url="https://example.test")
    browser_fetcher = _open_browser_fetcher(page)

    with pytest.raises(RuntimeError):
        with browser_fetcher.visit("https://example.test"):
            raise RuntimeError("boom")

    page.close.assert_called_once()


def test_playwright_visit_requires_open():
    with pytest.raises(fetcher.CrawlSetupError):
        with fetcher.PlaywrightFetcher().visit("https://example.test"):
            pass


def test_playwright_open_wraps_launch_failure(monkeypatch):
    playwright = MagicMock()
    playwright.chromium.launch.side_effect = fetcher.PlaywrightError("Executable doesn't exist")
    monkeypatch.setattr(
        fetcher, "sync_playwright", lambda: SimpleNamespace(start=lambda: playwright)
    )

    with pytest.raises(fetcher.CrawlSetupError):
        with fetcher.PlaywrightFetcher():
            pass

    playwright.stop.assert_called_once()


def test_playwright_open_and_close_share_one_context(monkeypatch):
    playwright = MagicMock()
    browser = playwright.chromium.launch.return_value
    monkeypatch.setattr(
        fetcher, "sync_playwright", lambda: SimpleNamespace(start=lambda: playwright)
    )

    with fetcher.PlaywrightFetcher(headless=False) as browser_fetcher:
        browser_fetcher.open()
        assert browser_fetcher._context is browser.new_context.return_value

    playwright.chromium.launch.assert_called_once_with(headless=False)
    browser.close.assert_called_once()
    playwright.stop.assert_called_once()


def _http_response(status=200, url="https://example.test", content_type="text/html; charset=utf-8"):
    return SimpleNamespace(
        status_code=status,
        url=url,
        headers={"Content-Type": content_type},
        text=PAGE_HTML,
        close=MagicMock(),
    )


def test_requests_fetcher_reports_final_url_and_links():
    session = MagicMock()
    session.get.return_value = _http_response(status=200, url="https://example.test/new")
    http_fetcher = fetcher.RequestsFetcher(timeout_ms=2500, session=session)

    with http_fetcher.visit("https://example.test/old") as loaded:
        assert loaded.result == fetcher.FetchResult(200, "https://example.test/new")
        assert loaded.extract_links() == ["/about", "https://other.test"]

    session.get.assert_called_once_with("https://example.test/old", timeout=2.5, allow_redirects=True)


def test_requests_fetcher_ignores_non_html_bodies():
    session = MagicMock()
    session.get.return_value = _http_response(content_type="application/pdf")

    with fetcher.RequestsFetcher(session=session).visit("https://example.test/brochure.pdf") as loaded:
        assert loaded.extract_links() == []


def test_requests_fetcher_maps_request_errors_to_status_zero():
    session = MagicMock()
    session.get.side_effect = requests.ConnectionError("refused")

    result = fetcher.RequestsFetcher(session=session).fetch("https://example.test/down")

    assert result == fetcher.FetchResult(0, "https://example.test/down")


def test_build_fetcher_selects_implementation():
    assert isinstance(fetcher.build_fetcher("http", timeout_ms=10), fetcher.RequestsFetcher)
    browser_fetcher = fetcher.build_fetcher("browser", timeout_ms=10, headless=False)
    assert isinstance(browser_fetcher, fetcher.PlaywrightFetcher)
    assert browser_fetcher.headless is False


def test_fetcher_requires_visit_implementation():
    class Incomplete(fetcher.Fetcher):
        pass

    with pytest.raises(TypeError):
        Incomplete()
