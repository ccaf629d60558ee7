"""Command-line interface for Autovoice.

Provides commands for generating podcast feeds locally, running the API
server, and poking at the content API.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from autovoice.config import get_settings
from autovoice.content import ContentClient
from autovoice.errors import AutovoiceError
from autovoice.logging import setup_logging
from autovoice.podcast import PodcastGenerator


def cmd_generate_feed(args: argparse.Namespace) -> int:
    """Generate a podcast feed from an article feed."""
    settings = get_settings()
    setup_logging(log_level=settings.log_level, json_format=settings.log_json)

    generator = PodcastGenerator.from_settings(settings)
    result = asyncio.run(generator.run(args.feed_url, voice_id=args.voice))

    if args.output:
        output_path = Path(args.output)
        output_path.write_text(result.xml)
        print(f"Saved feed to: {output_path}", file=sys.stderr)
    else:
        print(result.xml)

    print(
        f"Items: {len(result.items)}  Dropped: {result.dropped}  Failed: {len(result.failures)}",
        file=sys.stderr,
    )
    for failure in result.failures:
        print(f"  [{failure.index}] {failure.guid}: {failure.reason}", file=sys.stderr)

    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Start the FastAPI server."""
    import uvicorn

    get_settings()

    host = args.host
    port = args.port
    print(f"\nStarting Autovoice API on {host}:{port}")
    uvicorn.run("autovoice.api:app", host=host, port=port, reload=args.reload)
    return 0


def cmd_article(args: argparse.Namespace) -> int:
    """Fetch an article from the content API."""
    settings = get_settings()
    setup_logging(log_level="WARNING")

    client = ContentClient(settings.content)
    item = asyncio.run(client.article_as_item(args.uuid))

    print(json.dumps(item.model_dump(), indent=2))
    return 0


def cmd_rss_items(args: argparse.Namespace) -> int:
    """List the entries of a feed as content items."""
    settings = get_settings()
    setup_logging(log_level="WARNING")

    client = ContentClient(settings.content)
    items = asyncio.run(client.rss_items(args.feed_url))

    print(f"\nEntries found: {len(items)}\n")
    for i, item in enumerate(items, 1):
        print(f"{i}. {item.title}")
        print(f"   UUID: {item.uuid or 'N/A'}")
        print(f"   Published: {item.pubdate or 'N/A'}")
        print(f"   Author: {item.author or 'N/A'}")
        print()

    return 0


def cmd_firstft(args: argparse.Namespace) -> int:
    """List uuids mentioned in recent FirstFT briefings."""
    settings = get_settings()
    setup_logging(log_level="WARNING")

    client = ContentClient(settings.content)
    uuids = asyncio.run(
        client.get_last_few_first_ft_mentioned_uuids(
            args.max_results, include_first_ft_uuids=args.include_firstft
        )
    )

    for uuid in uuids:
        print(uuid)
    return 0


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="autovoice",
        description="Automated voices - narrated podcast feeds from article feeds",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # generate-feed command
    gen_parser = subparsers.add_parser("generate-feed", help="Generate a podcast feed")
    gen_parser.add_argument("feed_url", help="Source RSS feed URL")
    gen_parser.add_argument("--voice", "-v", help="Voice id (default: provider default)")
    gen_parser.add_argument("--output", "-o", help="Output XML file path")
    gen_parser.set_defaults(func=cmd_generate_feed)

    # serve command
    sv_parser = subparsers.add_parser("serve", help="Start the API server")
    sv_parser.add_argument("--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)")
    sv_parser.add_argument("--port", "-p", type=int, default=8000, help="Port (default: 8000)")
    sv_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")
    sv_parser.set_defaults(func=cmd_serve)

    # article command
    ar_parser = subparsers.add_parser("article", help="Fetch an article by uuid")
    ar_parser.add_argument("uuid", help="Article uuid")
    ar_parser.set_defaults(func=cmd_article)

    # rss-items command
    ri_parser = subparsers.add_parser("rss-items", help="List feed entries as content items")
    ri_parser.add_argument("feed_url", help="RSS feed URL")
    ri_parser.set_defaults(func=cmd_rss_items)

    # firstft command
    ff_parser = subparsers.add_parser("firstft", help="List uuids mentioned in FirstFT")
    ff_parser.add_argument(
        "--max-results", "-n", type=int, default=1, help="FirstFT briefings to scan"
    )
    ff_parser.add_argument(
        "--include-firstft", action="store_true", help="Include the briefings' own uuids"
    )
    ff_parser.set_defaults(func=cmd_firstft)

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    try:
        return args.func(args)
    except AutovoiceError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
