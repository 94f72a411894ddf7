#!/usr/bin/env python3
"""
wpsource - Main Entry Point

Runs one ingestion of a WordPress site into an in-memory graph store and
writes the resulting nodes as JSON.

Usage:
    python main.py --base-url https://example.com
    python main.py --base-url https://example.com --language de --language fr -o nodes.json
"""

import argparse
import asyncio
import json
import logging
import sys

import structlog

from wpsource.config import load_settings
from wpsource.core.exceptions import WordPressSourceError
from wpsource.orchestration import WordPressIngestion
from wpsource.store import InMemoryGraphStore

logger = structlog.get_logger(__name__)


def configure_logging(level: str) -> None:
    """Configure structured logging to stderr."""
    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Ingest a WordPress site into a node graph")
    parser.add_argument("--base-url", required=True, help="WordPress site URL")
    parser.add_argument("--api-base", default="wp-json", help="REST API prefix")
    parser.add_argument(
        "--language",
        action="append",
        default=[],
        dest="languages",
        help="Additional locale code (repeatable)",
    )
    parser.add_argument("--per-page", type=int, default=100, help="Page size (1-100)")
    parser.add_argument("--type-name", default="WordPress", help="Type name prefix")
    parser.add_argument("--split-fragments", action="store_true", help="Split post content into fragments")
    parser.add_argument("--download-post-images", action="store_true")
    parser.add_argument("--download-featured-images", action="store_true")
    parser.add_argument("--download-acf-images", action="store_true")
    parser.add_argument("-o", "--output", help="Write nodes to this file instead of stdout")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    )
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    settings = load_settings(
        base_url=args.base_url,
        api_base=args.api_base,
        languages=args.languages,
        per_page=args.per_page,
        type_name=args.type_name,
        split_posts_into_fragments=args.split_fragments,
        download_remote_images_from_posts=args.download_post_images,
        download_remote_featured_images=args.download_featured_images,
        download_acf_images=args.download_acf_images,
        log_level=args.log_level,
    )
    store = InMemoryGraphStore()

    logger.info("loading_data", base_url=settings.base_url)
    async with WordPressIngestion(settings, store) as ingestion:
        summary = await ingestion.run()

    payload = json.dumps(store.export(), indent=2, ensure_ascii=False)
    if args.output:
        with open(args.output, "w", encoding="utf-8") as handle:
            handle.write(payload)
    else:
        print(payload)

    logger.info("nodes_written", total_nodes=summary.total_nodes, output=args.output or "stdout")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)

    try:
        return asyncio.run(run(args))
    except WordPressSourceError as e:
        logger.error("ingestion_failed", error=str(e), error_type=type(e).__name__)
        return 1


if __name__ == "__main__":
    sys.exit(main())
