"""Tests for seeding reference sets."""

import pytest

from games.seed import (
    CORINTHIANS_2005_PLAYERS,
    CORINTHIANS_2005_SLUG,
    SeedEntry,
    seed_corinthians_2005,
    seed_reference_set,
)


class TestSeedCorinthians2005:
    @pytest.mark.asyncio
    async def test_creates_set(self, db):
        set_id, created = await seed_corinthians_2005(db)
        assert created is True

        reference_set = await db.get_reference_set(set_id)
        assert reference_set.slug == CORINTHIANS_2005_SLUG
        assert reference_set.season == 2005
        assert reference_set.metadata["coach"] == "Antônio Lopes"

        entries = await db.get_reference_entries(set_id)
        assert len(entries) == len(CORINTHIANS_2005_PLAYERS) == 37
        assert entries[0].display_name == "Fábio Costa"
        assert entries[0].normalized_name == "fabio costa"
        assert entries[-1].display_name == "Mascherano"

    @pytest.mark.asyncio
    async def test_tevez_aliases(self, db):
        set_id, _ = await seed_corinthians_2005(db)
        entries = await db.get_reference_entries(set_id)
        tevez = next(e for e in entries if e.display_name == "Tévez")
        assert tevez.jersey_number == 10
        assert tevez.aliases == ["tevez", "tevez carlos"]

    @pytest.mark.asyncio
    async def test_reseed_keeps_set_id(self, db):
        first_id, _ = await seed_corinthians_2005(db)
        second_id, created = await seed_corinthians_2005(db)

        assert second_id == first_id
        assert created is False
        assert len(await db.list_reference_sets()) == 1
        assert len(await db.get_reference_entries(first_id)) == 37

    @pytest.mark.asyncio
    async def test_reseed_drops_attempt_guesses(self, db):
        set_id, _ = await seed_corinthians_2005(db)
        entry = (await db.get_reference_entries(set_id))[0]
        attempt_id = await db.create_attempt("user1", set_id)
        await db.add_attempt_guess(attempt_id, entry.id, "Fábio Costa", 1.0)

        await seed_corinthians_2005(db)
        assert await db.get_attempt_guesses(attempt_id) == []


class TestSeedReferenceSet:
    @pytest.mark.asyncio
    async def test_replaces_entries(self, db):
        set_id, _ = await seed_reference_set(
            db, slug="tiny", title="Tiny", club_name="Clube", entries=[SeedEntry(1, "Gil"), SeedEntry(2, "Jô")]
        )
        await seed_reference_set(db, slug="tiny", title="Tiny", club_name="Clube", entries=[SeedEntry(9, "Nilmar")])

        entries = await db.get_reference_entries(set_id)
        assert [e.display_name for e in entries] == ["Nilmar"]
        assert entries[0].sort_order == 1

    @pytest.mark.asyncio
    async def test_entries_without_aliases(self, db):
        set_id, _ = await seed_reference_set(
            db, slug="tiny", title="Tiny", club_name="Clube", entries=[SeedEntry(None, "Gil")]
        )
        entries = await db.get_reference_entries(set_id)
        assert entries[0].aliases == []
        assert entries[0].jersey_number is None
