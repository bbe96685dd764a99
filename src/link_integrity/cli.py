"""Command line interface for the internal link integrity crawler."""

from __future__ import annotations

import argparse
import logging
import sys
import time
from typing import Optional, Sequence

from .core.config import FETCHER_CHOICES, ConfigurationError, CrawlerConfig, load_configuration
from .core.models import CrawlTarget
from .core.report import CrawlReport, build_report, render_report
from .crawl.engine import CrawlEngine
from .crawl.fetcher import CrawlSetupError, build_fetcher

logger = logging.getLogger(__name__)

EXIT_INTERRUPTED = 130


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Crawl a site from its home page and report broken internal links"
    )
    parser.add_argument("-u", "--base-url", help="Site to crawl (default: $BASE_URL or http://localhost:3000)")
    parser.add_argument("--max-depth", type=int, help="Maximum crawl depth (default: $MAX_DEPTH or 5)")
    parser.add_argument("--timeout", type=int, help="Per-page timeout in ms (default: $CRAWL_TIMEOUT_MS or 30000)")
    parser.add_argument("--report", help="Report output file (default: link-integrity-report.json)")
    parser.add_argument(
        "--headless",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Run the browser headless (default comes from .env / HEADLESS, otherwise on)",
    )
    parser.add_argument(
        "--fetcher",
        choices=FETCHER_CHOICES,
        help="'browser' renders pages in Chromium, 'http' uses plain requests",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log every crawled page")
    return parser.parse_args(argv)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _progress_dot(_count: int, _target: CrawlTarget) -> None:
    print(".", end="", flush=True)


def crawl(config: CrawlerConfig) -> CrawlReport:
    """Run one crawl with the configured fetcher and build its report."""

    fetcher = build_fetcher(config.fetcher, timeout_ms=config.timeout_ms, headless=config.headless)
    with fetcher:
        engine = CrawlEngine(
            base_url=config.base_url,
            fetcher=fetcher,
            max_depth=config.max_depth,
            on_visit=None if config.verbose else _progress_dot,
        )
        state = engine.run()
    return build_report(state)


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_arguments(argv)
    configure_logging(args.verbose)

    try:
        config = load_configuration(
            args.base_url,
            args.report,
            max_depth=args.max_depth,
            timeout_ms=args.timeout,
            verbose=args.verbose,
            headless=args.headless,
            fetcher=args.fetcher,
        )
    except ConfigurationError as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    print("Internal Link Integrity Crawler")
    print(f"Base URL: {config.base_url}")
    print(f"Max Depth: {config.max_depth}")
    print()

    started = time.monotonic()
    try:
        report = crawl(config)
    except CrawlSetupError as exc:
        logger.error("Fatal error: %s", exc)
        return 1
    except KeyboardInterrupt:
        print("\n[!] Crawl interrupted by user")
        return EXIT_INTERRUPTED

    print(render_report(report, config.report_path))
    try:
        report.save(config.report_path)
    except OSError as exc:
        logger.error("Could not write report: %s", exc)
        return 1

    print(f"\nCompleted in {time.monotonic() - started:.2f}s")
    return report.exit_code


def main() -> None:
    sys.exit(run_cli())


if __name__ == "__main__":
    main()
