#!/usr/bin/env python3
"""Seed product catalog script.

Runs the one-time seed import against the configured database. Does
nothing if the catalog already has products.

Usage:
    python scripts/seed_catalog.py
    python scripts/seed_catalog.py --feed-url https://example.com/products.json --limit 5
"""

import argparse
import asyncio
import sys

from catalog_store.infrastructure.config import settings
from catalog_store.infrastructure.database import create_tables
from catalog_store.main import run_seed_import


async def seed(feed_url: str, limit: int) -> int:
    """Run the seed import once.

    Args:
        feed_url: Product feed URL.
        limit: Maximum number of products to import.

    Returns:
        Process exit code.
    """
    result = await run_seed_import(feed_url=feed_url, limit=limit)

    print(f"  State: {result.state.value}")
    print(f"  Products saved: {result.products_saved} of {result.products_available}")
    print(f"  Variants saved: {result.variants_saved}")
    if result.error:
        print(f"  Error: {result.error}")

    return 0 if result.succeeded else 1


async def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed the product catalog from the external feed",
    )
    parser.add_argument(
        "--feed-url",
        default=settings.feed_url,
        help=f"Product feed URL (default: {settings.feed_url})",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=settings.seed_limit,
        help=f"Maximum products to import (default: {settings.seed_limit})",
    )

    args = parser.parse_args()

    print("=" * 60)
    print("Catalog Store Seeder")
    print("=" * 60)
    print(f"Feed: {args.feed_url}")
    print(f"Limit: {args.limit}")
    print()

    print("Creating database tables...")
    await create_tables()
    print("Tables ready.")
    print()

    print("Seeding catalog...")
    exit_code = await seed(args.feed_url, args.limit)

    print("=" * 60)
    print("Seeding complete!" if exit_code == 0 else "Seeding failed.")
    print("=" * 60)
    return exit_code


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
