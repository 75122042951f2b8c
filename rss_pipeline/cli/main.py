from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Dict

from rss_pipeline.adapters.db import get_adapter
from rss_pipeline.adapters.http_feed import validate_feed
from rss_pipeline.workers.fetch_feeds import (
    CountryNotFoundError,
    FeedNotFoundError,
    check_feed,
    fetch_all,
    fetch_country,
    fetch_country_bulk,
    fetch_country_full,
    fetch_feed,
    fetch_feed_limited,
)
from rss_pipeline.workers.generate_slugs import DEFAULT_LIMIT as SLUG_LIMIT, generate_slugs
from rss_pipeline.workers.process_pending import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_LIMIT as PENDING_LIMIT,
    get_pending_stats,
    process_pending,
)


def _positive_int(value: str) -> int:
    parsed = int(value)
    if parsed <= 0:
        raise argparse.ArgumentTypeError("value must be positive")
    return parsed


def _add_validate(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("validate", help="Check that a URL serves an RSS/Atom feed")
    parser.add_argument("feed_url", help="Feed URL to check")


def _add_generate_slugs(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("generate-slugs", help="Backfill slugs for items stored without one")
    parser.add_argument("--limit", type=_positive_int, default=SLUG_LIMIT, help="Max number of items to update")


def _add_feed_commands(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("check-feed", help="Compare a feed's current items with stored ones")
    parser.add_argument("feed_id")

    parser = subparsers.add_parser("fetch-feed", help="Fetch one feed and insert its new items")
    parser.add_argument("feed_id")
    parser.add_argument(
        "--limit",
        type=_positive_int,
        default=None,
        help="Insert at most this many new items (default: up to 200)",
    )


def _add_country_commands(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("fetch-country", help="Fetch every active feed of one country")
    parser.add_argument("country_id")

    parser = subparsers.add_parser("fetch-country-bulk", help="Fetch a country and retell every 5th new item")
    parser.add_argument("country_id")

    parser = subparsers.add_parser("fetch-country-full", help="Fetch a country, then retell and add dialogue to every new item")
    parser.add_argument("country_id")


def _add_fetch_all(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser("fetch-all", help="Fetch every active feed and AI-process a capped sample")
    parser.add_argument("--cap", type=_positive_int, default=None, help="Override the per-run processing cap")


def _add_pending(subparsers: argparse._SubParsersAction) -> None:
    subparsers.add_parser("pending-stats", help="Count unprocessed items per 100%%-ratio country")

    parser = subparsers.add_parser("process-pending", help="Retell items that are still missing English content")
    parser.add_argument("--country-code", type=str, default=None, help="Restrict to one country code, e.g. 'ua'")
    parser.add_argument("--limit", type=_positive_int, default=PENDING_LIMIT, help="Max number of items to process")
    parser.add_argument(
        "--batch-size",
        type=_positive_int,
        default=DEFAULT_BATCH_SIZE,
        help="Items processed concurrently per batch (capped at 5)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="rss-pipeline", description="RSS ingestion and content pipeline")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_validate(subparsers)
    _add_generate_slugs(subparsers)
    _add_feed_commands(subparsers)
    _add_country_commands(subparsers)
    _add_fetch_all(subparsers)
    _add_pending(subparsers)
    return parser


def _run(args: argparse.Namespace) -> Dict[str, Any]:
    command = args.command
    if command == "validate":
        result = validate_feed(args.feed_url)
        return {"success": result.valid, **result.to_dict()}

    adapter = get_adapter()
    if command == "generate-slugs":
        return generate_slugs(adapter, limit=args.limit)
    if command == "check-feed":
        return check_feed(adapter, args.feed_id)
    if command == "fetch-feed":
        if args.limit is not None:
            return fetch_feed_limited(adapter, args.feed_id, args.limit)
        return fetch_feed(adapter, args.feed_id)
    if command == "fetch-country":
        return fetch_country(adapter, args.country_id)
    if command == "fetch-country-bulk":
        return fetch_country_bulk(adapter, args.country_id)
    if command == "fetch-country-full":
        return fetch_country_full(adapter, args.country_id)
    if command == "fetch-all":
        return fetch_all(adapter, process_cap=args.cap)
    if command == "pending-stats":
        return get_pending_stats(adapter)
    if command == "process-pending":
        return process_pending(
            adapter,
            country_code=args.country_code,
            limit=args.limit,
            batch_size=args.batch_size,
        )
    raise ValueError(f"Unknown command: {command}")


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        result = _run(args)
    except (ValueError, FeedNotFoundError, CountryNotFoundError) as exc:
        parser.error(str(exc))
    print(json.dumps(result, ensure_ascii=False, indent=2, default=str))
    return 0 if result.get("success") else 1


if __name__ == "__main__":
    sys.exit(main())
