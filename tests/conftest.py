"""Pytest configuration and shared fixtures."""

from datetime import datetime, timezone

import pytest
import pytest_asyncio

from db.database import Database
from models import ReferenceEntry
from utils.normalization import normalize_name

FIXED_NOW = datetime(2026, 2, 10, 15, 30, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def db():
    """Create an in-memory database for testing."""
    database = Database(":memory:")
    await database.connect()
    yield database
    await database.close()


@pytest.fixture
def fixed_clock():
    """A clock frozen at 2026-02-10 15:30 UTC."""
    return lambda: FIXED_NOW


@pytest.fixture
def make_entries():
    """Build in-memory reference entries with sequential IDs."""

    def _make(*names: str, aliases: dict[str, list[str]] | None = None) -> list[ReferenceEntry]:
        aliases = aliases or {}
        return [
            ReferenceEntry(
                id=i,
                set_id=1,
                display_name=name,
                normalized_name=normalize_name(name),
                aliases=aliases.get(name, []),
                jersey_number=i,
                sort_order=i,
            )
            for i, name in enumerate(names, start=1)
        ]

    return _make


@pytest_asyncio.fixture
async def seeded_set(db):
    """A three-player set stored in the database. Returns (set_id, entry IDs by name)."""
    set_id = await db.create_reference_set(
        slug="corinthians-2005",
        title="Corinthians 2005",
        club_name="Corinthians",
        season=2005,
    )
    entry_ids = {}
    for i, (name, aliases) in enumerate(
        [("Fábio Costa", None), ("Tévez", ["Carlitos"]), ("Gil", None)], start=1
    ):
        entry_ids[name] = await db.add_reference_entry(
            set_id=set_id,
            display_name=name,
            normalized_name=normalize_name(name),
            aliases=aliases,
            jersey_number=i,
            sort_order=i,
        )
    return set_id, entry_ids
