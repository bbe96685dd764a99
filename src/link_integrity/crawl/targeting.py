from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlparse


def _hostname(url: str) -> str:
    try:
        return (urlparse(url).hostname or "").lower()
    except ValueError:
        return ""


@dataclass(frozen=True, slots=True)
class ScopeFilter:
    """Decides whether a URL belongs to the crawled site."""

    base_hostname: str

    @classmethod
    def from_base_url(cls, base_url: str) -> "ScopeFilter":
        return cls(base_hostname=_hostname(base_url))

    def is_internal(self, url: str) -> bool:
        # Malformed and host-less URLs (mailto:, tel:) never match.
        if not self.base_hostname:
            return False
        return _hostname(url) == self.base_hostname


def is_internal(url: str, base_url: str) -> bool:
    return ScopeFilter.from_base_url(base_url).is_internal(url)
