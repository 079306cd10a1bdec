"""
Core crawling logic and data structures.
"""
from __future__ import annotations

import re
import sys
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

import requests

DEFAULT_TIMEOUT_S = 15.0
DEFAULT_USER_AGENT = "SiteWalk/1.0"

INTERNAL_LINK_RE = re.compile(r'<a.*href="/(.*?)"')
EXTERNAL_LINK_RE = re.compile(r'<a.*?href="http(.*?)"')
IMAGE_RE = re.compile(r'<img.*?src="(.*?)"')
TITLE_RE = re.compile(r"<title>(.*?)</title>")

# Non-word regions, removed in this order before the remaining tags are stripped.
# Head and style removal is greedy: first opening tag to last closing tag.
NON_WORD_PATTERNS: Tuple[re.Pattern, ...] = (
    re.compile(r"<script[^>]*?>.*?</script>", re.IGNORECASE | re.DOTALL),
    re.compile(r"<head>.*</head>", re.IGNORECASE | re.DOTALL),
    re.compile(r"<style[^>]*?>.*</style>", re.IGNORECASE | re.DOTALL),
    re.compile(r"<![\s\S]*?--[ \t\n\r]*>"),  # comments, including CDATA
)
TAG_RE = re.compile(r"<[^>]*>")


class CrawlError(Exception):
    """Base class for failures that abort a crawl."""

    session: Optional["CrawlSession"] = None


class TransportFailure(CrawlError):
    """Raised when the GET for a step fails at the network level."""

    def __init__(self, url: str, original: Exception):
        self.url = url
        self.original = original
        self.step: Optional[int] = None
        super().__init__(f"HTTP fetch failed for {url}: {original}")


class ItineraryExhausted(CrawlError):
    """Raised when the seed page has fewer internal links than the step budget."""

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        super().__init__(
            f"insufficient links to traverse: budget needs {required}, "
            f"seed page has {available}"
        )


@dataclass(frozen=True)
class CrawlRecord:
    """Signals extracted from a single fetched page."""
    url: str
    elapsed_seconds: float
    status_code: str
    title: str = ""
    word_text: str = ""
    internal_links: Tuple[str, ...] = ()
    external_links: Tuple[str, ...] = ()
    images: Tuple[str, ...] = ()

    @property
    def word_count(self) -> int:
        return len(self.word_text.split())

    @property
    def title_length(self) -> int:
        return len(self.title)


@dataclass
class CrawlSession:
    """
    State of one crawl run.

    Records are stored by step index; the itinerary is the list of internal
    links captured from the first page and drives every later step.
    """
    url: str
    step_budget: int
    itinerary: Tuple[str, ...] = ()
    records: List[CrawlRecord] = field(default_factory=list)

    def record(self, step: int, record: CrawlRecord) -> None:
        """Store the record for ``step``; steps must arrive in order from 0."""
        if step != len(self.records):
            raise ValueError(f"Expected step {len(self.records)}, got {step}")
        self.records.append(record)

    def capture_itinerary(self, links: Sequence[str]) -> None:
        """Set the itinerary, unless one was already captured."""
        if not self.itinerary:
            self.itinerary = tuple(links)

    def url_for_step(self, step: int) -> str:
        """
        URL fetched at ``step`` (>= 1).

        The seed URL and the itinerary entry are concatenated as-is, without
        any path or scheme handling.
        """
        index = step - 1
        if index >= len(self.itinerary):
            raise ItineraryExhausted(step, len(self.itinerary))
        return self.url + self.itinerary[index]


def _find_all(pattern: re.Pattern, content: str) -> Tuple[str, ...]:
    return tuple(pattern.findall(content))


def extract_internal_links(html: str) -> Tuple[str, ...]:
    """Path fragments of ``<a href="/...">`` links, without the leading slash."""
    return _find_all(INTERNAL_LINK_RE, html)


def extract_external_links(html: str) -> Tuple[str, ...]:
    """Everything after the literal ``http`` of ``<a href="http...">`` links."""
    return _find_all(EXTERNAL_LINK_RE, html)


def extract_images(html: str) -> Tuple[str, ...]:
    return _find_all(IMAGE_RE, html)


def extract_title(html: str) -> str:
    """Text of the first ``<title>`` tag, or an empty string."""
    match = TITLE_RE.search(html)
    return match.group(1) if match else ""


def extract_word_text(html: str) -> str:
    """
    Visible text: script, head, style and comment blocks dropped, tags stripped.

    Entities such as ``&nbsp;`` are left undecoded.
    """
    for pattern in NON_WORD_PATTERNS:
        html = pattern.sub("", html)
    return TAG_RE.sub("", html)


def build_record(url: str, html: str, status_code: str, elapsed_seconds: float) -> CrawlRecord:
    """Run every extractor over ``html`` and pack the results."""
    return CrawlRecord(
        url=url,
        elapsed_seconds=elapsed_seconds,
        status_code=status_code,
        title=extract_title(html),
        word_text=extract_word_text(html),
        internal_links=extract_internal_links(html),
        external_links=extract_external_links(html),
        images=extract_images(html),
    )


class PageFetcher:
    """
    Fetch one page per call and turn it into a CrawlRecord.

    ``http_client`` is any callable with the signature of ``requests.get``;
    each call opens its own connection.
    """

    def __init__(
        self,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        user_agent: str = DEFAULT_USER_AGENT,
        http_client: Callable = requests.get,
    ):
        self.timeout_s = timeout_s
        self.user_agent = user_agent
        self.http_client = http_client

    def fetch(self, url: str) -> CrawlRecord:
        headers = {"User-Agent": self.user_agent}
        started = time.perf_counter()
        try:
            resp = self.http_client(url, headers=headers, timeout=self.timeout_s)
        except requests.RequestException as e:
            raise TransportFailure(url, e) from e
        elapsed = round(time.perf_counter() - started, 2)

        return build_record(url, resp.text or "", str(resp.status_code), elapsed)


def print_progress(step: int, step_budget: int, url: str) -> None:
    """Print real-time progress to stderr."""
    progress = f"\r\033[K[{step}/{step_budget}] Fetching: {url}"
    sys.stderr.write(progress)
    sys.stderr.flush()


def print_scan_line(url: str, status: Optional[str], new_links: int) -> None:
    """Print single scan result line."""
    status_str = status if status else "ERR"
    sys.stderr.write(f"\n  → {status_str} {url} (+{new_links} links)")
    sys.stderr.flush()


def crawl(
    seed_url: str,
    step_budget: int,
    fetcher: Optional[PageFetcher] = None,
    verbose: bool = False,
) -> CrawlSession:
    """
    Walk a single chain of pages starting from ``seed_url``.

    Step 0 fetches the seed; its internal links become the itinerary. Step n
    then fetches ``seed_url + itinerary[n - 1]`` for n up to and including
    ``step_budget``, so a full run holds ``step_budget + 1`` records.

    Args:
        seed_url: The URL to start crawling from.
        step_budget: Number of hops beyond the seed page.
        fetcher: Page fetcher to use; a default PageFetcher when omitted.
        verbose: Whether to print progress information.

    Returns:
        The populated CrawlSession.

    Raises:
        ItineraryExhausted: The seed page has fewer internal links than
            ``step_budget``.
        TransportFailure: A fetch failed; the crawl is aborted.
    """
    session = CrawlSession(url=seed_url, step_budget=step_budget)

    if step_budget <= 0:
        if verbose:
            sys.stderr.write(f"Step budget {step_budget} is not positive, nothing to crawl\n")
        return session

    fetcher = fetcher or PageFetcher()

    if verbose:
        sys.stderr.write(f"Starting crawl from: {seed_url}\n")
        sys.stderr.write(f"Step budget: {step_budget}\n\n")

    step = 0
    url = seed_url
    try:
        while step <= step_budget:
            if step > 0:
                url = session.url_for_step(step)

            if verbose:
                print_progress(step, step_budget, url)

            try:
                record = fetcher.fetch(url)
            except TransportFailure as e:
                e.step = step
                if verbose:
                    print_scan_line(url, None, 0)
                raise

            session.record(step, record)
            if step == 0:
                session.capture_itinerary(record.internal_links)
                if len(session.itinerary) < step_budget:
                    raise ItineraryExhausted(step_budget, len(session.itinerary))

            if verbose:
                print_scan_line(url, record.status_code, len(record.internal_links))

            step += 1
    except CrawlError as e:
        e.session = session
        raise
    finally:
        if verbose:
            sys.stderr.write("\n\n")

    return session
