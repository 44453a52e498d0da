"""
Command-line entry point.

    whiskey-crawler https://dailyshot.co/m/item/12345
    whiskey-crawler --file saved_page.html --url https://dailyshot.co/m/item/12345
"""
import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import List, Optional

from whiskey_crawler import __version__
from whiskey_crawler.adapters.fetcher import PageFetcher
from whiskey_crawler.exceptions import CrawlerError
from whiskey_crawler.layers.extraction import extract
from whiskey_crawler.models.record import RawPage


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="whiskey-crawler",
        description="Extract a normalized whiskey product record from a product page.",
    )
    parser.add_argument("url", nargs="?", help="Product page URL (fetched unless --file is given)")
    parser.add_argument("--file", type=Path, help="Read page HTML from a saved file instead of fetching")
    parser.add_argument("--debug", action="store_true", help="Attach diagnostic payload to the record")
    parser.add_argument("--indent", type=int, default=2, help="JSON indent (default: 2)")
    parser.add_argument("--version", action="version", version=f"whiskey-crawler {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.file is None and not args.url:
        parser.error("a URL or --file is required")

    try:
        if args.file is not None:
            page = RawPage(html=args.file.read_text(encoding="utf-8"), url=args.url or args.file.resolve().as_uri())
        else:
            page = asyncio.run(PageFetcher().fetch(args.url))
    except (CrawlerError, OSError, UnicodeDecodeError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    record = extract(page.html, page.url, debug=args.debug)
    if record is None:
        print("error: no product data found", file=sys.stderr)
        return 1

    print(json.dumps(record.to_document(), ensure_ascii=False, indent=args.indent))
    return 0


if __name__ == "__main__":
    sys.exit(main())
