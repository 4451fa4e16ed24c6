#!/usr/bin/env python3
"""Command-line interface for hashnode-loader.

Runs a single loader outside of a site builder and prints what it would have
stored, validates the configuration, or prints a collection's JSON Schema.

Commands:
- load: Load one collection into memory and write its entries as JSON
- validate: Validate configuration
- schema: Print the JSON Schema of a collection
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from hashnode_loader.core.config import LOADER_KINDS, Config
from hashnode_loader.core.data_models import LoaderContext
from hashnode_loader.core.error_recovery import LoaderError
from hashnode_loader.core.logging_setup import configure_logging
from hashnode_loader.core.schemas import SCHEMAS, schema_json
from hashnode_loader.loaders import create_loader
from hashnode_loader.storage.memory import MemoryDataStore

MAX_OPTION_BY_KIND = {
    "posts": "max_posts",
    "series": "max_series",
    "drafts": "max_drafts",
    "search": "max_results",
}


def parse_args(argv: List[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="hashnode-loader",
        description="Load Hashnode blog content",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  hashnode-loader load posts --host blog.example.com --max 10
  hashnode-loader load search --host blog.example.com --term python --term asyncio
  hashnode-loader load drafts --token $HASHNODE_TOKEN --output drafts.json
  hashnode-loader schema series
  hashnode-loader validate --strict
        """,
    )
    parser.add_argument("--config", "-c", help="Path to a YAML or TOML config file")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Logging level (default: from config, else INFO)",
    )
    parser.add_argument("--log-file", type=Path, help="Also write logs to this file")
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Use JSON structured logging format",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    load_parser = subparsers.add_parser("load", help="Load one collection")
    load_parser.add_argument("kind", choices=LOADER_KINDS, help="Collection to load")
    load_parser.add_argument("--host", help="Publication host, e.g. blog.example.com")
    load_parser.add_argument("--token", help="Hashnode personal access token")
    load_parser.add_argument("--max", type=int, dest="max_items", help="Maximum number of items")
    load_parser.add_argument(
        "--term", action="append", dest="terms", help="Search term (repeatable, search only)"
    )
    load_parser.add_argument(
        "--tag", action="append", dest="tags", help="Only posts with this tag slug (repeatable)"
    )
    load_parser.add_argument("--draft-id", help="Load a single draft by id (drafts only)")
    load_parser.add_argument("--no-cache", action="store_true", help="Disable the response cache")
    load_parser.add_argument("--output", "-o", type=Path, help="Output file (default: stdout)")

    validate_parser = subparsers.add_parser("validate", help="Validate configuration")
    validate_parser.add_argument(
        "--strict", action="store_true", help="Exit with error code if validation fails"
    )

    schema_parser = subparsers.add_parser("schema", help="Print the JSON Schema of a collection")
    schema_parser.add_argument("kind", choices=LOADER_KINDS, help="Collection")

    return parser.parse_args(argv)


def _load_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {"publication_host": args.host, "token": args.token}
    if args.max_items is not None:
        overrides[MAX_OPTION_BY_KIND[args.kind]] = args.max_items
    if args.no_cache:
        overrides["cache"] = False
    if args.kind == "search" and args.terms:
        overrides["search_terms"] = args.terms
    if args.kind == "posts" and args.tags:
        overrides["filter_by_tags"] = args.tags
    if args.kind == "drafts" and args.draft_id:
        overrides["include_draft_by_id"] = args.draft_id
    return overrides


async def handle_load(args: argparse.Namespace, config: Config) -> int:
    """Handle the load command."""
    logger = logging.getLogger(__name__)
    options = config.loader_options(args.kind, **_load_overrides(args))
    if not options.publication_host:
        print("Error: a publication host is required (--host or hashnode.publication_host)", file=sys.stderr)
        return 1

    loader = create_loader(args.kind, options)
    store = MemoryDataStore()
    async with loader.get_client():
        summary = await loader.load(LoaderContext(store=store))

    output = json.dumps([entry.to_dict() for entry in store.entries()], indent=2, default=str)
    if args.output:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(output + "\n", encoding="utf-8")
        logger.info("Wrote %d entries to %s", len(store), args.output)
    else:
        print(output)

    return 1 if summary.failed else 0


async def handle_validate(args: argparse.Namespace, config: Config) -> int:
    """Handle the validate command."""
    result = config.validate()

    print(result)

    if args.strict and not result.is_valid:
        return 1

    return 0


def handle_schema(args: argparse.Namespace) -> int:
    """Handle the schema command."""
    print(json.dumps(schema_json(SCHEMAS[args.kind]), indent=2))
    return 0


async def main_async(args: argparse.Namespace) -> int:
    """Main async entry point.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    config = Config(args.config)

    log_file = args.log_file or config.get("logging.file") or None
    configure_logging(
        log_file=Path(log_file) if log_file else None,
        level=args.log_level or config.get("logging.level", "INFO"),
        use_json=args.json_logs,
    )
    logger = logging.getLogger(__name__)
    logger.debug("hashnode-loader started with command: %s", args.command)

    if args.command == "schema":
        return handle_schema(args)
    if args.command == "validate":
        return await handle_validate(args, config)

    try:
        return await handle_load(args, config)
    except LoaderError as e:
        logger.error("%s: %s", e.code, e.message)
        print(f"Error: {e}", file=sys.stderr)
        return 1


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    try:
        exit_code = asyncio.run(main_async(args))
        sys.exit(exit_code)
    except KeyboardInterrupt:
        print("\nAborted by user")
        sys.exit(130)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
