"""Crawl report snapshot, JSON serialization and console rendering."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Tuple

if TYPE_CHECKING:  # pragma: no cover - import-time type checking only
    from ..crawl.state import CrawlState

TOP_EXTERNAL_LIMIT = 20
SAMPLE_REFERRERS = 3
SHOWN_REDIRECTS = 10
SHOWN_EXTERNAL = 10
RULE_WIDTH = 80


@dataclass(frozen=True)
class BrokenEntry:
    url: str
    status: int
    found_on: Tuple[str, ...]


@dataclass(frozen=True)
class RedirectEntry:
    url: str
    target: str
    found_on: Tuple[str, ...]


@dataclass(frozen=True)
class ExternalEntry:
    url: str
    count: int


@dataclass(frozen=True)
class CrawlReport:
    """Immutable summary built once a crawl run is complete."""

    total_pages: int = 0
    total_links: int = 0
    external_links: int = 0
    broken: Tuple[BrokenEntry, ...] = field(default_factory=tuple)
    redirects: Tuple[RedirectEntry, ...] = field(default_factory=tuple)
    external: Tuple[ExternalEntry, ...] = field(default_factory=tuple)

    @property
    def broken_links(self) -> int:
        return len(self.broken)

    @property
    def redirect_count(self) -> int:
        return len(self.redirects)

    @property
    def exit_code(self) -> int:
        return 1 if self.broken else 0

    @classmethod
    def from_state(cls, state: "CrawlState") -> "CrawlReport":
        tallies = [
            ExternalEntry(url=url, count=len(referrers))
            for url, referrers in state.external.items()
        ]
        # sorted() is stable, so equal counts keep first-seen order.
        top_external = sorted(tallies, key=lambda entry: entry.count, reverse=True)

        return cls(
            total_pages=state.total_pages,
            total_links=state.total_links,
            external_links=len(state.external),
            broken=tuple(
                BrokenEntry(url=url, status=entry.status, found_on=tuple(entry.found_on))
                for url, entry in state.broken.items()
            ),
            redirects=tuple(
                RedirectEntry(url=url, target=entry.target, found_on=tuple(entry.found_on))
                for url, entry in state.redirects.items()
            ),
            external=tuple(top_external[:TOP_EXTERNAL_LIMIT]),
        )

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "summary": {
                "totalPages": self.total_pages,
                "totalLinks": self.total_links,
                "brokenLinks": self.broken_links,
                "redirects": self.redirect_count,
                "externalLinks": self.external_links,
            },
            "broken": [
                {"url": entry.url, "status": entry.status, "foundOn": list(entry.found_on)}
                for entry in self.broken
            ],
            "redirects": [
                {"url": entry.url, "target": entry.target, "foundOn": list(entry.found_on)}
                for entry in self.redirects
            ],
            "external": [{"url": entry.url, "count": entry.count} for entry in self.external],
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2)

    def save(self, path: Path) -> None:
        path.write_text(self.to_json(), encoding="utf-8")

    @classmethod
    def load(cls, path: Path) -> "CrawlReport":
        raw = json.loads(path.read_text(encoding="utf-8"))
        summary = raw.get("summary", {})
        return cls(
            total_pages=summary.get("totalPages", 0),
            total_links=summary.get("totalLinks", 0),
            external_links=summary.get("externalLinks", 0),
            broken=tuple(
                BrokenEntry(url=item["url"], status=item["status"], found_on=tuple(item.get("foundOn", [])))
                for item in raw.get("broken", [])
            ),
            redirects=tuple(
                RedirectEntry(url=item["url"], target=item["target"], found_on=tuple(item.get("foundOn", [])))
                for item in raw.get("redirects", [])
            ),
            external=tuple(
                ExternalEntry(url=item["url"], count=item["count"]) for item in raw.get("external", [])
            ),
        )


def build_report(state: "CrawlState") -> CrawlReport:
    return CrawlReport.from_state(state)


def render_report(report: CrawlReport, report_path: Path) -> str:
    """Human readable version of ``report`` with long lists cut short."""

    heavy = "=" * RULE_WIDTH
    light = "-" * RULE_WIDTH
    lines: List[str] = ["", "", heavy, "INTERNAL LINK INTEGRITY REPORT", heavy]

    lines += [
        "",
        "SUMMARY",
        light,
        f"  Total Pages Crawled:  {report.total_pages}",
        f"  Total Links Found:    {report.total_links}",
        f"  Broken Links:         {report.broken_links}",
        f"  Redirects:            {report.redirect_count}",
        f"  External Links:       {report.external_links}",
    ]

    if report.broken:
        lines += ["", "BROKEN LINKS", light]
        for entry in report.broken:
            status = "TIMEOUT/ERROR" if entry.status == 0 else str(entry.status)
            lines.append(f"  {entry.url}")
            lines.append(f"    Status: {status}")
            lines.append(f"    Found on ({len(entry.found_on)} pages):")
            lines += [f"      - {page}" for page in entry.found_on[:SAMPLE_REFERRERS]]
            if len(entry.found_on) > SAMPLE_REFERRERS:
                lines.append(f"      ... and {len(entry.found_on) - SAMPLE_REFERRERS} more")
            lines.append("")
    else:
        lines += ["", "NO BROKEN LINKS FOUND"]

    if report.redirects:
        lines += ["", "REDIRECTS", light]
        for entry in report.redirects[:SHOWN_REDIRECTS]:
            lines.append(f"  {entry.url}")
            lines.append(f"    -> {entry.target}")
            lines.append(f"    Found on: {len(entry.found_on)} page(s)")
        if len(report.redirects) > SHOWN_REDIRECTS:
            lines.append(f"  ... and {len(report.redirects) - SHOWN_REDIRECTS} more redirects")

    if report.external:
        lines += ["", "TOP EXTERNAL LINKS", light]
        lines += [f"  [{entry.count}x] {entry.url}" for entry in report.external[:SHOWN_EXTERNAL]]

    lines += ["", heavy, f"Report saved to: {report_path}", heavy, ""]
    return "\n".join(lines)
