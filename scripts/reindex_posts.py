#!/usr/bin/env python3
"""Rebuild the semantic search index and the post cache from the database.

Write-through to the cache and the index is best-effort, so either can lag
behind the posts table after an outage. This replays every post through the
same write path the API uses.

Usage:
    python scripts/reindex_posts.py [--dry-run]

Options:
    --dry-run   List the posts that would be reindexed without writing
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select

from src.db.database import async_session_maker
from src.models.post import Post
from src.services.posts import write_through
from src.utils.cache import cache


async def reindex_posts(dry_run: bool = False) -> None:
    """Re-run cache and index write-through for every post."""
    if not dry_run and not await cache.connect():
        print("Redis unavailable - only the search index will be rebuilt")

    cached_count = indexed_count = 0
    async with async_session_maker() as db:
        result = await db.execute(select(Post).order_by(Post.created_at))
        posts = result.scalars().all()

        print(f"{'[DRY RUN] ' if dry_run else ''}Reindexing {len(posts)} posts\n")
        for i, post in enumerate(posts, 1):
            print(f"[{i}/{len(posts)}] {post.slug[:50]:50}", end=" ")
            if dry_run:
                print("- skipped")
                continue

            cached, indexed = await write_through(db, post)
            cached_count += cached
            indexed_count += indexed
            print(f"- cache: {'ok' if cached else 'FAILED'}, index: {'ok' if indexed else 'FAILED'}")

    await cache.close()
    if not dry_run:
        print(f"\nTOTAL: {cached_count} cached, {indexed_count} indexed of {len(posts)}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Rebuild the post cache and search index")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be done without changes")
    args = parser.parse_args()

    asyncio.run(reindex_posts(dry_run=args.dry_run))
