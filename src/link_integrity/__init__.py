"""Breadth-first internal link checker for marketing sites.

Example usage:

    from link_integrity import CrawlEngine, PlaywrightFetcher, build_report

    with PlaywrightFetcher(timeout_ms=30000) as fetcher:
        state = CrawlEngine("https://example.com", fetcher, max_depth=3).run()
    report = build_report(state)
    print(report.exit_code)
"""

from .core.report import CrawlReport, build_report, render_report
from .crawl.engine import CrawlEngine
from .crawl.fetcher import CrawlSetupError, Fetcher, PlaywrightFetcher, RequestsFetcher
from .crawl.link_collector import extract_links, normalize_url
from .crawl.targeting import ScopeFilter, is_internal

__version__ = "0.1.0"

__all__ = [
    "CrawlEngine",
    "CrawlReport",
    "CrawlSetupError",
    "Fetcher",
    "PlaywrightFetcher",
    "RequestsFetcher",
    "ScopeFilter",
    "build_report",
    "extract_links",
    "is_internal",
    "normalize_url",
    "render_report",
]
