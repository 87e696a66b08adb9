#!/usr/bin/env python3
"""Seed a demo collection with votes.

Imports scripts/demo_collection.csv for a demo owner (no network image
lookups), casts a few votes from three demo users, and prints the
aggregated view sorted by votes.

Usage:
    python scripts/seed_demo.py

Re-running is safe: the import is reconciled against the stored
collection and votes are upserted.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

# Add src to path for imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from boardvote.aggregation.tally import aggregate, index_votes  # noqa: E402
from boardvote.catalog.export import read_collection_csv  # noqa: E402
from boardvote.catalog.images import StaticImageResolver  # noqa: E402
from boardvote.db.session import get_db_session, get_session, init_db  # noqa: E402
from boardvote.models.domain import VoteValue  # noqa: E402
from boardvote.sync.orchestrator import (  # noqa: E402
    cast_vote,
    import_collection,
    load_snapshot,
    set_favorite,
)

# Constants
DEMO_DB_PATH = PROJECT_ROOT / "demo.db"
DEMO_CSV_PATH = Path(__file__).parent / "demo_collection.csv"
DEMO_OWNER = "ana"

# (username, objectid, vote, favorite)
DEMO_VOTES = [
    ("ana", "13", VoteValue.LIKE, True),
    ("ana", "230802", VoteValue.LIKE, False),
    ("ana", "822", VoteValue.NEUTRAL, False),
    ("bruno", "13", VoteValue.DISLIKE, False),
    ("bruno", "230802", VoteValue.LIKE, True),
    ("bruno", "14996", VoteValue.NOT_PLAYED, False),
    ("carla", "230802", VoteValue.LIKE, False),
    ("carla", "325", VoteValue.LIKE, False),
    ("carla", "822", VoteValue.NO_OPINION, True),
]


def seed_collection() -> str:
    """Import the demo export. Returns the collection code."""
    rows = read_collection_csv(DEMO_CSV_PATH)
    session = get_session(DEMO_DB_PATH)

    try:
        result = asyncio.run(import_collection(session, DEMO_OWNER, rows, StaticImageResolver()))
        if result.noop:
            print(f"Collection {result.collection_code} already up to date")
        else:
            print(
                f"Collection {result.collection_code}: "
                f"{len(result.inserted)} inserted, {len(result.deleted)} deleted"
            )
        for skipped in result.skipped:
            print(f"  Skipped row {skipped.position}: {skipped.reason}")
        return result.collection_code
    finally:
        session.close()


def seed_votes(code: str) -> None:
    """Cast the demo votes."""
    with get_db_session(DEMO_DB_PATH) as session:
        for username, objectid, value, favorite in DEMO_VOTES:
            cast_vote(session, code, objectid, username, value)
            set_favorite(session, code, objectid, username, favorite)
    print(f"Cast {len(DEMO_VOTES)} votes")


def print_view(code: str) -> None:
    """Print the aggregated view sorted by likes."""
    session = get_session(DEMO_DB_PATH)

    try:
        snapshot = load_snapshot(session, code)
    finally:
        session.close()

    views = aggregate(
        snapshot.games,
        index_votes(snapshot.votes),
        snapshot.voters,
        sort_key="votes",
    )
    for view in views:
        print(
            f"  {view.game.objectname:<35} "
            f"+{view.likes} -{view.dislikes} ={view.neutrals} ?{view.not_played} "
            f"*{view.favorites_count}"
        )


def main() -> int:
    """Main entry point."""
    print("=" * 60)
    print("boardvote Demo Seeding Script")
    print("=" * 60)

    init_db(DEMO_DB_PATH)

    print("\n[1/3] Importing collection...")
    code = seed_collection()

    print("\n[2/3] Casting votes...")
    seed_votes(code)

    print("\n[3/3] Aggregated view (by votes):")
    print_view(code)

    print("\n" + "=" * 60)
    print(f"Database: {DEMO_DB_PATH}")
    print(f"Collection code: {code}")
    print("=" * 60)

    return 0


if __name__ == "__main__":
    sys.exit(main())
