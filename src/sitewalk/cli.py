"""
Command-line interface for the crawler.
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from sitewalk.core import (
    DEFAULT_TIMEOUT_S,
    DEFAULT_USER_AGENT,
    CrawlError,
    CrawlSession,
    PageFetcher,
    crawl,
)
from sitewalk.report import render_html, render_text, summarize, to_json_payload


def render(session: CrawlSession, fmt: str, pretty: bool = False) -> str:
    """Render ``session`` in the requested output format."""
    summary = summarize(session)
    if fmt == "html":
        return render_html(session, summary)
    if fmt == "json":
        payload = to_json_payload(session, summary)
        return json.dumps(payload, ensure_ascii=False, indent=2 if pretty else None) + "\n"
    return render_text(session, summary)


def write_output(text: str, out: Optional[str], verbose: bool) -> None:
    if not out or out == "-":
        sys.stdout.write(text)
        return

    output_path = Path(out)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(text, encoding="utf-8")
    if verbose:
        sys.stderr.write(f"Results written to: {output_path}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Follow a single chain of internal links from a seed URL and report page statistics."
    )
    parser.add_argument("seed_url", help="Seed URL (e.g. https://example.com)")
    parser.add_argument("step_budget", type=int, help="Number of link hops beyond the seed page")
    parser.add_argument(
        "--timeout", type=float, default=DEFAULT_TIMEOUT_S,
        help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT_S:g})",
    )
    parser.add_argument("--user-agent", default=DEFAULT_USER_AGENT, help="User-Agent header")
    parser.add_argument(
        "--format", choices=("text", "html", "json"), default="text",
        help="Report format (default: text)",
    )
    parser.add_argument("--out", help="Output file path, or '-' for stdout (default: stdout)")
    parser.add_argument("--pretty", action="store_true", help="Pretty-print JSON")
    parser.add_argument("--verbose", action="store_true", help="Show progress on stderr")
    return parser


def main(argv: Optional[list] = None) -> int:
    """Main entry point for the crawler CLI."""
    args = build_parser().parse_args(argv)

    fetcher = PageFetcher(timeout_s=args.timeout, user_agent=args.user_agent)
    try:
        session = crawl(
            seed_url=args.seed_url,
            step_budget=args.step_budget,
            fetcher=fetcher,
            verbose=args.verbose,
        )
    except CrawlError as e:
        sys.stderr.write(f"error: {e}\n")
        # Report whatever was fetched before the crawl aborted
        if e.session is not None and e.session.records:
            write_output(render(e.session, args.format, args.pretty), args.out, args.verbose)
        return 1

    write_output(render(session, args.format, args.pretty), args.out, args.verbose)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
