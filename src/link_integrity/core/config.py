"""Configuration loading for the link integrity crawler."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

from dotenv import load_dotenv

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_MAX_DEPTH = 5
DEFAULT_TIMEOUT_MS = 30000
DEFAULT_REPORT_NAME = "link-integrity-report.json"
FETCHER_CHOICES = ("browser", "http")


class ConfigurationError(ValueError):
    """Raised when the crawler options cannot be used for a run."""


@dataclass(slots=True)
class CrawlerConfig:
    """Holds runtime options for a single crawl run."""

    base_url: str
    report_path: Path
    max_depth: int = DEFAULT_MAX_DEPTH
    timeout_ms: int = DEFAULT_TIMEOUT_MS
    verbose: bool = False
    headless: bool = True
    fetcher: str = "browser"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes"}


def load_configuration(
    base_url: Optional[str] = None,
    report_name: Optional[str] = None,
    *,
    max_depth: Optional[int] = None,
    timeout_ms: Optional[int] = None,
    verbose: bool = False,
    headless: Optional[bool] = None,
    fetcher: Optional[str] = None,
) -> CrawlerConfig:
    """Builds a ``CrawlerConfig`` from CLI input and environment variables.

    Explicit arguments win over the environment, which wins over the defaults.
    """

    load_dotenv()  # Loads .env values if present

    resolved_url = (base_url or os.getenv("BASE_URL") or DEFAULT_BASE_URL).strip()
    if not urlparse(resolved_url).hostname:
        raise ConfigurationError(f"Base URL has no host: {resolved_url!r}")

    depth = max_depth if max_depth is not None else _env_int("MAX_DEPTH", DEFAULT_MAX_DEPTH)
    if depth < 0:
        raise ConfigurationError(f"Max depth cannot be negative, got {depth}")

    timeout = timeout_ms if timeout_ms is not None else _env_int("CRAWL_TIMEOUT_MS", DEFAULT_TIMEOUT_MS)
    if timeout <= 0:
        raise ConfigurationError(f"Timeout must be positive, got {timeout}")

    fetcher_name = (fetcher or os.getenv("CRAWL_FETCHER") or "browser").strip().lower()
    if fetcher_name not in FETCHER_CHOICES:
        raise ConfigurationError(
            f"Unknown fetcher {fetcher_name!r}; expected one of {', '.join(FETCHER_CHOICES)}"
        )

    report = report_name or os.getenv("REPORT_PATH") or DEFAULT_REPORT_NAME

    return CrawlerConfig(
        base_url=resolved_url,
        report_path=Path(report).resolve(),
        max_depth=depth,
        timeout_ms=timeout,
        verbose=verbose,
        headless=headless if headless is not None else _env_flag("HEADLESS", True),
        fetcher=fetcher_name,
    )
