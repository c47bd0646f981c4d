#!/usr/bin/env python3
"""Seed the configured store with sample communities and posts.

Idempotent by name: communities that already exist are skipped, and posts are
only added to communities created by this run.

Usage:
    STORE_BACKEND=postgres DATABASE_URL=postgresql://... python -m scripts.seed
"""

import asyncio
import os
import sys

# Add parent to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

from community_api.schemas import CommunityInput, PostInput
from community_api.settings import Settings
from community_api.stores import Store, create_store

load_dotenv()

# ============================================================
# Sample data
# ============================================================

COMMUNITIES = [
    {
        "name": "Go",
        "description": "golang",
        "posts": [
            {"author_id": "user-1", "title": "Hello", "content": "World"},
            {"author_id": "user-2", "title": "Generics", "content": "Worth it for collection helpers?"},
        ],
    },
    {
        "name": "Python",
        "description": "Batteries included",
        "posts": [
            {"author_id": "user-1", "title": "asyncio tips", "content": "Never hold a threading lock across an await."},
        ],
    },
    {
        "name": "Announcements",
        "description": "",
        "posts": [],
    },
]


async def seed_store(store: Store) -> int:
    """Create missing sample communities (and their posts). Returns communities created."""
    existing = {c.name for c in await store.list_communities()}
    created = 0

    for community_def in COMMUNITIES:
        if community_def["name"] in existing:
            print(f"  ⏭️  {community_def['name']} (exists)")
            continue

        community = await store.create_community(
            CommunityInput(name=community_def["name"], description=community_def["description"])
        )
        created += 1
        print(f"  ✅ {community.name} ({community.id})")

        for post_def in community_def["posts"]:
            post = await store.create_post(community.id, PostInput(**post_def))
            print(f"     📝 {post.title}")

    return created


async def main() -> None:
    settings = Settings()
    store = create_store(settings)
    await store.connect()
    try:
        print("🌱 Seeding store...")
        created = await seed_store(store)
        print(f"\n✅ Seeded {created} communities")
    finally:
        await store.close()


if __name__ == "__main__":
    asyncio.run(main())
