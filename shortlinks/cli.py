"""
Command-line interface for the shortlinks service.

Usage:
    shortlinks init-db
    shortlinks create <url> --owner OWNER --name NAME [--description TEXT]
    shortlinks list --owner OWNER
    shortlinks get <link_id> --owner OWNER
    shortlinks resolve <short_code>
    shortlinks delete <link_id> --owner OWNER
    shortlinks stats --owner OWNER
    shortlinks health
"""

import argparse
import asyncio
import json
import sys
from typing import Optional

from .config import Config, load_config
from .database import PostgresLinkStore, create_store
from .database.cache import RedisCache
from .errors import LinkError
from .service import LinkService
from .shortcode import ShortCodeGenerator
from .common.logging_config import setup_logging


class ShortlinksCLI:
    """Command-line interface over LinkService."""

    def __init__(self, config: Config, verbose: bool = False):
        """Initialize CLI."""
        self.config = config
        self.logger = setup_logging(level="DEBUG" if verbose else "WARNING")
        self.db = None
        self.cache = None
        self.service = None

    async def initialize(self):
        """Initialize store and service."""
        self.db = create_store(self.config, logger=self.logger)

        if self.config.redis_url:
            self.cache = RedisCache(
                redis_url=self.config.redis_url,
                ttl_seconds=self.config.cache_ttl_seconds,
                timeout_seconds=self.config.cache_timeout_seconds,
                logger=self.logger,
            )
            await self.cache.connect()

        self.service = LinkService(
            db=self.db,
            cache=self.cache,
            short_code_generator=ShortCodeGenerator(),
            logger=self.logger,
            max_allocation_attempts=self.config.max_allocation_attempts,
            store_timeout_seconds=self.config.store_timeout_seconds,
        )

    async def cleanup(self):
        """Cleanup resources."""
        if self.service:
            await self.service.close()

    def _ok(self, payload: dict) -> int:
        print(json.dumps({"success": True, **payload}, indent=2, default=str))
        return 0

    def _fail(self, error: str) -> int:
        print(json.dumps({"success": False, "error": error}, indent=2), file=sys.stderr)
        return 1

    async def init_db(self):
        """Create the links table and indexes."""
        if not isinstance(self.db, PostgresLinkStore):
            return self._fail("init-db requires a postgresql:// DATABASE_URL")
        await self.db.init_schema()
        return self._ok({"message": "Tables initialized"})

    async def create(self, url: str, owner: str, name: str, description: Optional[str] = None):
        """Create a link."""
        link = await self.service.create_link(name, url, owner, description=description)
        return self._ok({"link": link.to_dict()})

    async def list_links(self, owner: str):
        """List an owner's links."""
        links = await self.service.list_links(owner)
        return self._ok({"count": len(links), "links": [link.to_dict() for link in links]})

    async def get(self, link_id: str, owner: str):
        """Show one link."""
        link = await self.service.get_link(link_id, owner)
        return self._ok({"link": link.to_dict()})

    async def resolve(self, short_code: str):
        """Resolve a short code, counting it as a visit."""
        original_url = await self.service.resolve(short_code)
        return self._ok({"short_code": short_code, "original_url": original_url})

    async def delete(self, link_id: str, owner: str):
        """Delete a link."""
        link = await self.service.delete_link(link_id, owner)
        return self._ok({"message": f"Deleted {link.short_code}"})

    async def stats(self, owner: str):
        """Show owner statistics."""
        return self._ok({"statistics": await self.service.get_statistics(owner)})

    async def health(self):
        """Check service health."""
        health_status = await self.service.health_check()
        print(json.dumps({"success": health_status["overall"], "health": health_status}, indent=2))
        return 0 if health_status["overall"] else 1

    async def run(self, args) -> int:
        """Dispatch a parsed command."""
        try:
            if args.command == "init-db":
                return await self.init_db()
            elif args.command == "create":
                return await self.create(args.url, args.owner, args.name, args.description)
            elif args.command == "list":
                return await self.list_links(args.owner)
            elif args.command == "get":
                return await self.get(args.link_id, args.owner)
            elif args.command == "resolve":
                return await self.resolve(args.short_code)
            elif args.command == "delete":
                return await self.delete(args.link_id, args.owner)
            elif args.command == "stats":
                return await self.stats(args.owner)
            elif args.command == "health":
                return await self.health()
        except LinkError as e:
            return self._fail(str(e))
        return self._fail(f"Unknown command: {args.command}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="shortlinks",
        description="Shortlinks CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s init-db
  %(prog)s create https://example.com/page --owner u1 --name "Docs"
  %(prog)s list --owner u1
  %(prog)s health
        """
    )

    parser.add_argument(
        "--db-url",
        default=None,
        help="Link store URL (default: DATABASE_URL from environment/.env)"
    )
    parser.add_argument(
        "--redis-url",
        default=None,
        help="Redis connection URL (default: REDIS_URL from environment/.env)"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    subparsers.add_parser("init-db", help="Create the links table")

    create_parser = subparsers.add_parser("create", help="Create a link")
    create_parser.add_argument("url", help="URL to shorten")
    create_parser.add_argument("--owner", required=True, help="Owner user id")
    create_parser.add_argument("--name", required=True, help="Display name")
    create_parser.add_argument("--description", help="Optional description")

    list_parser = subparsers.add_parser("list", help="List an owner's links")
    list_parser.add_argument("--owner", required=True, help="Owner user id")

    resolve_parser = subparsers.add_parser("resolve", help="Resolve a short code (counts a click)")
    resolve_parser.add_argument("short_code", help="Short code")

    for command, help_text in (("get", "Show a link"), ("delete", "Delete a link")):
        sub = subparsers.add_parser(command, help=help_text)
        sub.add_argument("link_id", help="Link id")
        sub.add_argument("--owner", required=True, help="Owner user id")

    stats_parser = subparsers.add_parser("stats", help="Owner statistics")
    stats_parser.add_argument("--owner", required=True, help="Owner user id")

    subparsers.add_parser("health", help="Check service health")

    return parser


async def _main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    overrides = {}
    if args.db_url:
        overrides["database_url"] = args.db_url
    if args.redis_url:
        overrides["redis_url"] = args.redis_url
    config = Config(**overrides) if overrides else load_config()

    cli = ShortlinksCLI(config, verbose=args.verbose)
    try:
        await cli.initialize()
        return await cli.run(args)
    finally:
        await cli.cleanup()


def main(argv=None):
    """Console entry point."""
    sys.exit(asyncio.run(_main(argv)))


if __name__ == "__main__":
    main()
