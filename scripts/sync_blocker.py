#!/usr/bin/env python3
"""
Sync Blocker - Blocks reMarkable cloud sync with kernel reject routes.

Resolves the sync backend domains and adds (block) or removes (unblock)
host reject routes for their addresses with the `route` command. Other
traffic is unaffected. Requires root to modify the routing table.

Resolved addresses are cached in a file (default: ./routes.txt). When DNS
is unreachable the cached addresses are used as well, so sync can still be
blocked or unblocked while offline.

Environment Variables:
    SYNCBLOCK_CACHE_FILE        Route cache file (default: routes.txt)
    SYNCBLOCK_ROUTE_COMMAND     Routing table binary (default: route)
    SYNCBLOCK_DNS_SERVERS       Comma-separated nameservers (default: system)
    SYNCBLOCK_RESOLVE_WORKERS   Parallel DNS lookups (default: 9)
    SYNCBLOCK_DRY_RUN           Log route changes without applying (true/false)
    SYNCBLOCK_PROTECT_LOCAL     Refuse to block non-global addresses (true/false)

Usage:
    sync_blocker.py {block,unblock,status} [-v] [--dry-run] [--config FILE]
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

# Add scripts directory to path
sys.path.insert(0, str(Path(__file__).parent))

from syncblock import SyncBlockConfig, SyncBlockError, create_blocker


def setup_logging(verbose: bool = False) -> None:
    """Configure logging"""
    level = logging.DEBUG if verbose else logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Block or unblock reMarkable cloud sync via reject routes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "command",
        choices=["block", "unblock", "status"],
        help="Command to execute",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML config file",
    )
    parser.add_argument(
        "--cache-file",
        type=str,
        default=None,
        help="Route cache file (default: routes.txt)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Don't make actual changes",
    )

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        config = SyncBlockConfig.load(args.config)
        if args.cache_file:
            config = replace(config, cache_file=args.cache_file)
        if args.dry_run:
            config = replace(config, dry_run=True)

        blocker = create_blocker(config)

        if args.command == "block":
            blocker.block()
        elif args.command == "unblock":
            blocker.unblock()
        elif args.command == "status":
            print(json.dumps(blocker.status(), indent=2))

    except SyncBlockError as e:
        logger.error(str(e))
        for section in e.details():
            logger.error(section)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
