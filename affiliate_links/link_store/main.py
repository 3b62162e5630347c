"""CLI entry point for the affiliate links store.

Usage:
    # Run the MCP server on stdio (default command):
    python -m affiliate_links.link_store.main
    python -m affiliate_links.link_store.main serve --db data/affiliate_links.db

    python -m affiliate_links.link_store.main init-db
    python -m affiliate_links.link_store.main export --format csv --output data/exports/links.csv
    python -m affiliate_links.link_store.main stats --link-id aff_1718000000000_3f9a1c
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from ..common.config import settings
from ..common.database import init_db
from ..common.logging import setup_logging
from .errors import LinkStoreError
from .models import ExportFormat
from .server import run_stdio
from .store import LinkStore

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Affiliate links store — MCP server & tools")
    parser.add_argument(
        "--db",
        type=str,
        help="SQLite database path (default: settings / DATABASE_PATH)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Logging level (DEBUG, INFO, WARNING, ...)",
    )

    sub = parser.add_subparsers(dest="command")
    sub.add_parser("serve", help="Run the MCP server over stdio")
    sub.add_parser("init-db", help="Create the database schema and exit")

    export = sub.add_parser("export", help="Export all links")
    export.add_argument(
        "--format",
        choices=[f.value for f in ExportFormat],
        default=ExportFormat.JSON.value,
        help="Export format (default: json)",
    )
    export.add_argument("--output", type=str, help="Write to this file instead of stdout")

    stats = sub.add_parser("stats", help="Show click/conversion stats for a link")
    stats.add_argument("--link-id", type=str, required=True, help="Affiliate link ID")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(level=args.log_level or settings.logging.level)
    db_path = Path(args.db) if args.db else settings.database.db_abs_path
    command = args.command or "serve"

    if command == "init-db":
        init_db(db_path)
        return 0

    store = LinkStore.open(db_path)
    try:
        if command == "serve":
            logger.info("Using database %s", db_path)
            asyncio.run(run_stdio(store, settings.server))
        elif command == "export":
            text = store.export_all(args.format)
            if args.output:
                output_path = Path(args.output)
                output_path.parent.mkdir(parents=True, exist_ok=True)
                output_path.write_text(text, encoding="utf-8")
                logger.info("Export written to %s", output_path)
            else:
                print(text)
        elif command == "stats":
            stats = store.get_stats(args.link_id)
            print(json.dumps(stats.to_dict(), ensure_ascii=False, indent=2))
    except LinkStoreError as e:
        logger.error("%s", e)
        return 1
    finally:
        store.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
