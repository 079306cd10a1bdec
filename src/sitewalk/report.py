"""
Aggregate statistics over a finished crawl and render them.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass
from html import escape
from typing import Any, Dict, List, Set

from sitewalk.core import CrawlRecord, CrawlSession

TABLE_COLUMNS = (
    "Url",
    "Http Status Code",
    "Number Images",
    "Number Internal Links",
    "Number External Links",
    "Page Load Time (s)",
    "Word Count",
    "Title Length",
)


@dataclass(slots=True)
class CrawlSummary:
    """Aggregate figures for a crawl; averages are divided by the step budget."""
    url: str
    pages_crawled: int = 0
    unique_images: int = 0
    unique_internal_links: int = 0
    unique_external_links: int = 0
    average_elapsed_seconds: float = 0.0
    average_word_count: int = 0
    average_title_length: int = 0


def summarize(session: CrawlSession) -> CrawlSummary:
    """Compute the aggregate figures over every recorded step."""
    summary = CrawlSummary(url=session.url, pages_crawled=len(session.records))

    images: Set[str] = set()
    internal: Set[str] = set()
    external: Set[str] = set()
    for record in session.records:
        images.update(record.images)
        internal.update(record.internal_links)
        external.update(record.external_links)

    summary.unique_images = len(images)
    summary.unique_internal_links = len(internal)
    summary.unique_external_links = len(external)

    budget = session.step_budget
    if budget <= 0:
        return summary

    total_time = sum(r.elapsed_seconds for r in session.records)
    total_words = sum(r.word_count for r in session.records)
    total_title = sum(r.title_length for r in session.records)

    summary.average_elapsed_seconds = round(total_time / budget, 2)
    summary.average_word_count = int(total_words / budget)
    summary.average_title_length = int(total_title / budget)
    return summary


def _row(record: CrawlRecord) -> List[Any]:
    return [
        record.url,
        record.status_code,
        len(record.images),
        len(record.internal_links),
        len(record.external_links),
        record.elapsed_seconds,
        record.word_count,
        record.title_length,
    ]


def _summary_lines(summary: CrawlSummary) -> List[str]:
    return [
        f"Pages crawled: {summary.pages_crawled}",
        f"Number of a unique images: {summary.unique_images}",
        f"Number of unique internal links: {summary.unique_internal_links}",
        f"Number of unique external links: {summary.unique_external_links}",
        f"Average page loads in seconds: {summary.average_elapsed_seconds}",
        f"Average word count: {summary.average_word_count}",
        f"Average title length: {summary.average_title_length}",
    ]


def render_text(session: CrawlSession, summary: CrawlSummary) -> str:
    """Plain-text report: one line per step followed by the summary block."""
    lines = ["=" * 50, f"WEB CRAWL OF {session.url}", "=" * 50, ""]

    for step, record in enumerate(session.records):
        url, status, n_img, n_int, n_ext, elapsed, words, title_len = _row(record)
        lines.append(
            f"[{step}] {status} {url} | images: {n_img} | internal: {n_int} | "
            f"external: {n_ext} | {elapsed}s | words: {words} | title: {title_len}"
        )
    if not session.records:
        lines.append("No pages crawled.")

    lines.append("")
    lines.extend(_summary_lines(summary))
    return "\n".join(lines) + "\n"


def render_html(session: CrawlSession, summary: CrawlSummary) -> str:
    """HTML report: per-step table followed by one div per aggregate figure."""
    parts = ['<table border="1px">', "<tr>"]
    parts.extend(f"<th>{escape(col)}</th>" for col in TABLE_COLUMNS)
    parts.append("</tr>")

    for record in session.records:
        parts.append("<tr>")
        parts.extend(f"<td>{escape(str(value))}</td>" for value in _row(record))
        parts.append("</tr>")
    parts.append("</table><br/>")

    parts.append(f"<div>Web Crawl of {escape(session.url)}</div>")
    parts.extend(f"<div>{escape(line)}</div>" for line in _summary_lines(summary))
    return "\n".join(parts) + "\n"


def to_json_payload(session: CrawlSession, summary: CrawlSummary) -> Dict[str, Any]:
    """JSON-serializable view of the session and its summary."""
    pages = []
    for step, record in enumerate(session.records):
        page = asdict(record)
        page["step"] = step
        page["word_count"] = record.word_count
        page["title_length"] = record.title_length
        pages.append(page)

    return {
        "url": session.url,
        "step_budget": session.step_budget,
        "itinerary": list(session.itinerary),
        "pages": pages,
        "summary": asdict(summary),
    }
