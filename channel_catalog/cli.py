#!/usr/bin/env python3
"""
CLI for the Guitar Channel Catalog

Usage:
    python -m channel_catalog.cli --db-path /path/to/db.sqlite identify URL_HINT
    python -m channel_catalog.cli --db-path /path/to/db.sqlite suggest CHANNEL_ID --user USER_ID
    python -m channel_catalog.cli --db-path /path/to/db.sqlite suggestions-check CHANNEL_ID [CHANNEL_ID ...] --user USER_ID
    python -m channel_catalog.cli --db-path /path/to/db.sqlite add-channel CHANNEL_ID
    python -m channel_catalog.cli --db-path /path/to/db.sqlite get-channel CHANNEL_ID
    python -m channel_catalog.cli --db-path /path/to/db.sqlite list-channels [--sort-by subscribers]
    python -m channel_catalog.cli --db-path /path/to/db.sqlite list-languages
    python -m channel_catalog.cli --db-path /path/to/db.sqlite add-term TERM [TERM ...]
    python -m channel_catalog.cli --db-path /path/to/db.sqlite list-terms
    python -m channel_catalog.cli --db-path /path/to/db.sqlite import-predictions FILE
    python -m channel_catalog.cli --db-path /path/to/db.sqlite channel-prediction CHANNEL_ID
    python -m channel_catalog.cli --db-path /path/to/db.sqlite programming [--min-gradient 0.7]
"""
import argparse
import asyncio
import json
import logging
import sqlite3
import sys
from typing import Optional

from pydantic import TypeAdapter

from .db.database import CHANNEL_SORTING, Channel, Database
from .identification.channel_detail import ChannelDetailResolver
from .identification.classifier import is_guitar_channel
from .identification.extractor import ChannelIdExtractor
from .identification.models import ChannelIdentification
from .identification.pipeline import IdentificationPipeline
from .identification.youtube_client import YOUTUBE_API_KEY, YouTubeDataClient
from .predictions.aggregator import (
    DEFAULT_MIN_GRADIENT,
    get_single_channel_prediction,
    get_weekly_programming_grid,
)
from .predictions.models import PublishPredictionPayload, Weekstamp

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

DESCRIPTION_TRUNCATE_LENGTH = 300

PREDICTION_LIST = TypeAdapter(list[PublishPredictionPayload])


def truncate_text(text: Optional[str], length: int = DESCRIPTION_TRUNCATE_LENGTH) -> str:
    """Cut text to exactly length characters, appending '...' when cut."""
    if not text:
        return ""
    if len(text) <= length:
        return text
    return text[:length] + "..."


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Guitar Channel Catalog CLI"
    )
    parser.add_argument(
        "--db-path",
        required=True,
        help="Path to SQLite database (or PostgreSQL connection string)"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output results as JSON"
    )
    parser.add_argument(
        "--api-key",
        default=YOUTUBE_API_KEY,
        help="YouTube Data API key (default: $YOUTUBE_API_KEY)"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    # Identification commands

    identify_parser = subparsers.add_parser(
        "identify",
        help="Identify the channel behind a URL and check if it is new"
    )
    identify_parser.add_argument(
        "url_hint",
        help="Channel URL, @handle, legacy user URL or video link"
    )

    suggest_parser = subparsers.add_parser(
        "suggest",
        help="Suggest a channel for the catalog"
    )
    suggest_parser.add_argument(
        "channel_id",
        help="YouTube channel ID"
    )
    suggest_parser.add_argument(
        "--user",
        default=None,
        help="ID of the suggesting user"
    )

    suggestions_check_parser = subparsers.add_parser(
        "suggestions-check",
        help="Look up several channels a user wants to suggest"
    )
    suggestions_check_parser.add_argument(
        "channel_ids",
        nargs="+",
        help="YouTube channel IDs"
    )
    suggestions_check_parser.add_argument(
        "--user",
        default=None,
        help="ID of the suggesting user"
    )

    # Catalog commands

    add_channel_parser = subparsers.add_parser(
        "add-channel",
        help="Fetch a channel from YouTube and list it in the catalog"
    )
    add_channel_parser.add_argument(
        "channel_id",
        help="YouTube channel ID"
    )

    get_channel_parser = subparsers.add_parser(
        "get-channel",
        help="Show a single catalog channel"
    )
    get_channel_parser.add_argument(
        "channel_id",
        help="YouTube channel ID"
    )

    list_channels_parser = subparsers.add_parser(
        "list-channels",
        help="List channels in the catalog"
    )
    list_channels_parser.add_argument(
        "--limit",
        type=int,
        default=50,
        help="Number of channels to show (default: 50)"
    )
    list_channels_parser.add_argument(
        "--offset",
        type=int,
        default=0,
        help="Number of channels to skip (default: 0)"
    )
    list_channels_parser.add_argument(
        "--language",
        default=None,
        help="Only list channels with this language code"
    )
    list_channels_parser.add_argument(
        "--sort-by",
        choices=sorted(CHANNEL_SORTING),
        default="added",
        help="Sort order (default: added, newest first)"
    )

    subparsers.add_parser(
        "list-languages",
        help="List the language codes used in the catalog"
    )

    add_term_parser = subparsers.add_parser(
        "add-term",
        help="Add guitar terms to the classification dictionary"
    )
    add_term_parser.add_argument(
        "terms",
        nargs="+",
        help="Terms to add"
    )

    subparsers.add_parser(
        "list-terms",
        help="List the classification dictionary"
    )

    # Publish prediction commands

    import_parser = subparsers.add_parser(
        "import-predictions",
        help="Load pre-computed publish predictions from a JSON file"
    )
    import_parser.add_argument(
        "path",
        help="JSON file containing a list of prediction records"
    )

    channel_prediction_parser = subparsers.add_parser(
        "channel-prediction",
        help="Show the predicted publish schedule for a channel"
    )
    channel_prediction_parser.add_argument(
        "channel_id",
        help="YouTube channel ID"
    )
    channel_prediction_parser.add_argument(
        "--min-gradient",
        type=float,
        default=DEFAULT_MIN_GRADIENT,
        help=f"Minimum prediction gradient, exclusive (default: {DEFAULT_MIN_GRADIENT})"
    )
    channel_prediction_parser.add_argument(
        "--filter-below-average",
        action="store_true",
        help="Hide slots that are below the channel's average"
    )

    programming_parser = subparsers.add_parser(
        "programming",
        help="Show the weekly programming grid across the catalog"
    )
    programming_parser.add_argument(
        "--min-gradient",
        type=float,
        default=DEFAULT_MIN_GRADIENT,
        help=f"Minimum prediction gradient, inclusive (default: {DEFAULT_MIN_GRADIENT})"
    )

    return parser.parse_args(argv)


def _channel_to_dict(channel: Channel) -> dict:
    return {
        "channel_id": channel.channel_id,
        "title": channel.title,
        "description": truncate_text(channel.description),
        "thumbnail_url": channel.thumbnail_url,
        "subscribers": channel.subscriber_count,
        "videos": channel.video_count,
    }


def _identification_to_dict(identification: ChannelIdentification) -> dict:
    channel = identification.channel
    return {
        "channel_id": identification.channel_id,
        "status": identification.status.value if identification.status else None,
        "source": identification.source.value if identification.source else None,
        "is_guitar_channel": identification.is_guitar_channel,
        "channel": _channel_to_dict(channel) if channel else None,
    }


async def cmd_identify(db: Database, args, youtube: Optional[YouTubeDataClient] = None) -> dict:
    """Execute the identify command."""
    owns_client = youtube is None
    if owns_client:
        youtube = YouTubeDataClient(api_key=args.api_key)

    try:
        pipeline = IdentificationPipeline(
            db,
            extractor=ChannelIdExtractor(youtube),
            resolver=ChannelDetailResolver(db, youtube),
        )
        identification = await pipeline.identify(args.url_hint)
    finally:
        if owns_client:
            await youtube.close()

    return {
        "command": "identify",
        "url_hint": args.url_hint,
        **_identification_to_dict(identification)
    }


def cmd_suggest(db: Database, args) -> dict:
    """Execute the suggest command."""
    if not args.user:
        return {
            "command": "suggest",
            "success": False,
            "error": "A user ID is required to suggest a channel"
        }

    try:
        db.add_suggestion(args.channel_id, args.user)
    except sqlite3.Error as e:
        logger.error("Could not save suggestion for %s: %s", args.channel_id, e)
        return {
            "command": "suggest",
            "success": False,
            "error": str(e)
        }

    return {
        "command": "suggest",
        "success": True,
        "channel_id": args.channel_id,
        "user": args.user
    }


async def cmd_suggestions_check(db: Database, args, youtube: Optional[YouTubeDataClient] = None) -> dict:
    """
    Execute the suggestions-check command.

    Resolves every requested channel (catalog first, then one YouTube batch)
    and reports whether it has been suggested already. Unknown ids are left
    out of the results.
    """
    if not args.user:
        return {
            "command": "suggestions-check",
            "success": False,
            "error": "A user ID is required to check suggestions"
        }

    owns_client = youtube is None
    if owns_client:
        youtube = YouTubeDataClient(api_key=args.api_key)

    try:
        identifications = await ChannelDetailResolver(db, youtube).resolve(args.channel_ids)
    finally:
        if owns_client:
            await youtube.close()

    suggested = {s.channel_id for s in db.get_suggestions(args.channel_ids)}

    return {
        "command": "suggestions-check",
        "success": True,
        "user": args.user,
        "count": len(identifications),
        "channels": [
            {**_identification_to_dict(i), "already_suggested": i.channel_id in suggested}
            for i in identifications
        ]
    }


async def cmd_add_channel(db: Database, args, youtube: Optional[YouTubeDataClient] = None) -> dict:
    """Execute the add-channel command."""
    owns_client = youtube is None
    if owns_client:
        youtube = YouTubeDataClient(api_key=args.api_key)

    try:
        channels = await youtube.get_channel_details([args.channel_id])
    finally:
        if owns_client:
            await youtube.close()

    if not channels:
        return {
            "command": "add-channel",
            "success": False,
            "error": f"Could not find channel with ID {args.channel_id}"
        }

    channel = channels[0]
    db.add_channel(channel)

    return {
        "command": "add-channel",
        "success": True,
        "channel": {
            "channel_id": channel.channel_id,
            "title": channel.title,
            "subscribers": channel.subscriber_count,
            "is_guitar_channel": is_guitar_channel(db.get_guitar_terms(), channel)
        }
    }


def cmd_get_channel(db: Database, args) -> dict:
    """Execute the get-channel command."""
    channel = db.get_channel(args.channel_id)

    return {
        "command": "get-channel",
        "channel_id": args.channel_id,
        "found": channel is not None,
        "channel": {
            **_channel_to_dict(channel),
            "views": channel.view_count,
            "country": channel.country,
            "language": channel.language,
            "is_guitar_channel": is_guitar_channel(db.get_guitar_terms(), channel)
        } if channel else None
    }


def cmd_list_channels(db: Database, args) -> dict:
    """Execute the list-channels command."""
    channels = db.list_channels(
        limit=args.limit, offset=args.offset, language=args.language,
        sort_by=args.sort_by
    )

    return {
        "command": "list-channels",
        "sort_by": args.sort_by,
        "total": db.count_channels(),
        "count": len(channels),
        "channels": [
            {
                "channel_id": ch.channel_id,
                "title": ch.title,
                "subscribers": ch.subscriber_count,
                "videos": ch.video_count,
                "language": ch.language
            }
            for ch in channels
        ]
    }


def cmd_list_languages(db: Database, args) -> dict:
    """Execute the list-languages command."""
    languages = db.get_languages()
    return {
        "command": "list-languages",
        "count": len(languages),
        "languages": languages
    }


def cmd_add_term(db: Database, args) -> dict:
    """Execute the add-term command."""
    added = []
    for term in args.terms:
        if not term.strip():
            continue
        db.add_guitar_term(term)
        added.append(term.strip().lower())

    return {
        "command": "add-term",
        "added": added
    }


def cmd_list_terms(db: Database, args) -> dict:
    """Execute the list-terms command."""
    terms = db.get_guitar_terms()
    return {
        "command": "list-terms",
        "count": len(terms),
        "terms": [t.term for t in terms]
    }


def cmd_import_predictions(db: Database, args) -> dict:
    """
    Execute the import-predictions command.

    The whole file is validated before anything is written, so a bad record
    leaves the store untouched.

    Raises:
        pydantic.ValidationError: If any record is malformed.
    """
    with open(args.path, "r", encoding="utf-8") as f:
        records = json.load(f)

    payloads = PREDICTION_LIST.validate_python(records)
    imported = db.save_publish_predictions(p.to_prediction() for p in payloads)

    logger.info("Imported %d publish predictions from %s", imported, args.path)
    return {
        "command": "import-predictions",
        "imported": imported
    }


def cmd_channel_prediction(db: Database, args) -> dict:
    """Execute the channel-prediction command."""
    items = get_single_channel_prediction(
        db,
        args.channel_id,
        min_gradient=args.min_gradient,
        filter_below_average=args.filter_below_average,
    )

    return {
        "command": "channel-prediction",
        "channel_id": args.channel_id,
        "found": items is not None,
        "predictions": [
            {
                "day_of_week": item.day_of_week,
                "hour_of_day": item.hour_of_day,
                "day_name": Weekstamp.from_item(item).day_name,
                "deviation_from_average": round(item.deviation_from_average, 4),
            }
            for item in items
        ] if items is not None else None
    }


def cmd_programming(db: Database, args) -> dict:
    """Execute the programming command."""
    grid = get_weekly_programming_grid(db, min_gradient=args.min_gradient)
    grid.sort(key=lambda e: (e.weekstamp.day_of_week, e.weekstamp.hour_of_day))

    return {
        "command": "programming",
        "min_gradient": args.min_gradient,
        "slots": [
            {
                "day_of_week": entry.weekstamp.day_of_week,
                "hour_of_day": entry.weekstamp.hour_of_day,
                "day_name": entry.weekstamp.day_name,
                "channels": [
                    {"channel_id": ch.channel_id, "title": ch.title}
                    for ch in entry.channels
                ]
            }
            for entry in grid
        ]
    }


def print_result(args, result: dict) -> None:
    """Print a command result in human-readable form."""
    print(f"\n{'=' * 50}")
    print(f"Command: {result['command']}")
    print(f"{'=' * 50}")

    if args.command == "identify":
        print(f"Status: {result['status']}")
        if result["channel_id"]:
            print(f"Channel ID: {result['channel_id']}")
        ch = result.get("channel")
        if ch:
            print(f"Source: {result['source']}")
            print(f"Guitar channel: {'yes' if result['is_guitar_channel'] else 'no'}")
            print(f"  Title: {ch['title']}")
            print(f"  Subscribers: {ch['subscribers']:,}")
            print(f"  Description: {ch['description']}")

    elif args.command in ("suggest", "add-channel"):
        if result.get("success"):
            if "channel" in result:
                ch = result["channel"]
                print(f"Listed channel: {ch['title']} ({ch['channel_id']})")
                print(f"  Subscribers: {ch['subscribers']:,}")
                print(f"  Guitar channel: {'yes' if ch['is_guitar_channel'] else 'no'}")
            else:
                print(f"Suggested {result['channel_id']} as {result['user']}")
        else:
            print(f"Error: {result.get('error', 'Unknown error')}")

    elif args.command == "suggestions-check":
        if not result["success"]:
            print(f"Error: {result.get('error', 'Unknown error')}")
        else:
            print(f"Channels found: {result['count']}")
            for item in result["channels"]:
                ch = item["channel"]
                flags = [item["source"]]
                if item["is_guitar_channel"]:
                    flags.append("guitar")
                if item["already_suggested"]:
                    flags.append("suggested")
                print(f"\n  {ch['title']} ({ch['channel_id']}) [{', '.join(flags)}]")
                print(f"    {ch['description']}")

    elif args.command == "get-channel":
        ch = result["channel"]
        if not ch:
            print(f"Channel {result['channel_id']} is not in the catalog")
        else:
            print(f"Title: {ch['title']}")
            print(f"  Subscribers: {ch['subscribers']:,}")
            print(f"  Videos: {ch['videos']:,}")
            print(f"  Language: {ch['language'] or '-'}")
            print(f"  Guitar channel: {'yes' if ch['is_guitar_channel'] else 'no'}")
            print(f"  Description: {ch['description']}")

    elif args.command == "list-languages":
        print(f"Languages: {', '.join(result['languages']) or 'none'}")

    elif args.command == "list-channels":
        print(f"Catalog channels: {result['count']} of {result['total']}")
        if result["channels"]:
            print("\n  CHANNEL ID               | TITLE                    | SUBSCRIBERS")
            print("  " + "-" * 68)
            for ch in result["channels"]:
                print(f"  {ch['channel_id']:<24} | {ch['title'][:24]:<24} | {ch['subscribers']:>11,}")

    elif args.command == "add-term":
        print(f"Added terms: {', '.join(result['added']) or 'none'}")

    elif args.command == "list-terms":
        print(f"Guitar terms: {result['count']}")
        for term in result["terms"]:
            print(f"  {term}")

    elif args.command == "import-predictions":
        print(f"Imported: {result['imported']} predictions")

    elif args.command == "channel-prediction":
        if not result["found"]:
            print(f"No reliable prediction for {result['channel_id']}")
        else:
            for item in result["predictions"]:
                print(f"  {item['day_name']:<9} {item['hour_of_day']:02d}:00 "
                      f"({item['deviation_from_average']:+.4f})")

    elif args.command == "programming":
        if not result["slots"]:
            print("No predictions above the gradient threshold.")
        for slot in result["slots"]:
            titles = ", ".join(ch["title"] for ch in slot["channels"])
            print(f"  {slot['day_name']:<9} {slot['hour_of_day']:02d}:00  {titles}")

    print(f"{'=' * 50}\n")


async def main(argv=None):
    """Main entry point."""
    import io
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding="utf-8", errors="replace")

    args = parse_args(argv)

    with Database(args.db_path) as db:
        db.ensure_catalog_tables()

        if args.command == "identify":
            result = await cmd_identify(db, args)
        elif args.command == "suggest":
            result = cmd_suggest(db, args)
        elif args.command == "suggestions-check":
            result = await cmd_suggestions_check(db, args)
        elif args.command == "add-channel":
            result = await cmd_add_channel(db, args)
        elif args.command == "get-channel":
            result = cmd_get_channel(db, args)
        elif args.command == "list-channels":
            result = cmd_list_channels(db, args)
        elif args.command == "list-languages":
            result = cmd_list_languages(db, args)
        elif args.command == "add-term":
            result = cmd_add_term(db, args)
        elif args.command == "list-terms":
            result = cmd_list_terms(db, args)
        elif args.command == "import-predictions":
            result = cmd_import_predictions(db, args)
        elif args.command == "channel-prediction":
            result = cmd_channel_prediction(db, args)
        elif args.command == "programming":
            result = cmd_programming(db, args)
        else:
            logger.error("Unknown command: %s", args.command)
            sys.exit(1)

    if args.json:
        print(json.dumps(result, indent=2))
    else:
        print_result(args, result)


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
