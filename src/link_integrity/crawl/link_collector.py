from __future__ import annotations

from typing import List, Optional
from urllib.parse import urljoin, urlsplit, urlunsplit

from bs4 import BeautifulSoup


def extract_links(html: str) -> List[str]:
    """Return every anchor ``href`` in document order, verbatim.

    Nothing is filtered or deduplicated here; anchors without ``href`` are the
    only ones left out.
    """

    if not html:
        return []
    soup = BeautifulSoup(html, "html.parser")
    return [anchor.get("href") for anchor in soup.find_all("a", href=True)]


def normalize_url(raw: Optional[str], base_url: str) -> Optional[str]:
    """Resolve ``raw`` against ``base_url`` into the canonical crawl key.

    Fragments are dropped, scheme and host are lower-cased and trailing
    slashes are removed from the path (the root path becomes empty). Returns
    ``None`` when the value cannot be parsed as a URL.
    """

    if not isinstance(raw, str):
        return None

    try:
        joined = urljoin(base_url, raw.strip())
        parsed = urlsplit(joined)
        # Accessing the port validates it; invalid values raise ValueError.
        parsed.port
    except ValueError:
        return None

    netloc = parsed.netloc
    if parsed.hostname:
        userinfo, _, hostport = netloc.rpartition("@")
        netloc = f"{userinfo}@{hostport.lower()}" if userinfo else hostport.lower()

    path = parsed.path.rstrip("/")
    return urlunsplit((parsed.scheme.lower(), netloc, path, parsed.query, ""))
