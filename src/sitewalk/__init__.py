"""
Web crawler that follows a single chain of internal links from a seed URL.
Reports per-page signals (links, images, title, word count) and aggregate statistics.
"""
from sitewalk.core import (
    CrawlError,
    CrawlRecord,
    CrawlSession,
    ItineraryExhausted,
    PageFetcher,
    TransportFailure,
    crawl,
)
from sitewalk.report import CrawlSummary, summarize

__version__ = "1.0.0"
__all__ = [
    "crawl",
    "summarize",
    "CrawlError",
    "CrawlRecord",
    "CrawlSession",
    "CrawlSummary",
    "ItineraryExhausted",
    "PageFetcher",
    "TransportFailure",
]
