"""Seed the roster-guessing game with historic squads.

Run with `python -m games.seed`. Safe to run repeatedly: an existing set
keeps its ID and has its entries replaced.
"""

import asyncio
import logging
import sys
from pathlib import Path
from typing import Any, NamedTuple, Optional

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import Config
from db.database import Database
from utils.normalization import normalize_name

logger = logging.getLogger(__name__)


class SeedEntry(NamedTuple):
    jersey_number: Optional[int]
    display_name: str
    aliases: tuple[str, ...] = ()


CORINTHIANS_2005_SLUG = "corinthians-2005-brasileirao"

CORINTHIANS_2005_PLAYERS = [
    SeedEntry(1, "Fábio Costa"),
    SeedEntry(2, "Edson Sitta"),
    SeedEntry(3, "Anderson"),
    SeedEntry(4, "Gustavo Nery"),
    SeedEntry(5, "Marcelo Mattos"),
    SeedEntry(6, "Sebá"),
    SeedEntry(7, "Roger"),
    SeedEntry(8, "Rosinei"),
    SeedEntry(9, "Nilmar"),
    SeedEntry(10, "Tévez", ("tevez", "tevez carlos")),
    SeedEntry(11, "Gil"),
    SeedEntry(12, "Tiago"),
    SeedEntry(13, "Marinho"),
    SeedEntry(14, "Coelho"),
    SeedEntry(15, "Wendel"),
    SeedEntry(16, "Betão"),
    SeedEntry(17, "Dinélson"),
    SeedEntry(18, "Bobô"),
    SeedEntry(19, "Carlos Alberto"),
    SeedEntry(20, "Élton"),
    SeedEntry(21, "Hugo"),
    SeedEntry(22, "Júlio César"),
    SeedEntry(23, "Marquinhos Silva"),
    SeedEntry(24, "Marcus Vinicius"),
    SeedEntry(26, "Fininho"),
    SeedEntry(27, "Bruno Octávio"),
    SeedEntry(29, "Fabrício"),
    SeedEntry(30, "Jô"),
    SeedEntry(32, "Wilson"),
    SeedEntry(33, "Ronny"),
    SeedEntry(34, "Ji-Paraná"),
    SeedEntry(35, "Abuda"),
    SeedEntry(37, "Nilton"),
    SeedEntry(40, "Marcelo"),
    SeedEntry(41, "Wescley"),
    SeedEntry(42, "Eduardo Ratinho"),
    SeedEntry(43, "Mascherano"),
]


async def seed_reference_set(
    db: Database,
    slug: str,
    title: str,
    club_name: str,
    entries: list[SeedEntry],
    season: Optional[int] = None,
    competition: Optional[str] = None,
    metadata: Optional[dict[str, Any]] = None,
) -> tuple[int, bool]:
    """Create a set, or replace the entries of the existing one.

    Returns (set_id, created).
    """
    existing = await db.get_reference_set_by_slug(slug)
    if existing:
        set_id = existing.id
        removed = await db.delete_reference_entries(set_id)
        logger.info(f"Set '{slug}' already exists, replacing {removed} entries with {len(entries)}")
    else:
        set_id = await db.create_reference_set(
            slug=slug,
            title=title,
            club_name=club_name,
            season=season,
            competition=competition,
            metadata=metadata,
        )
        logger.info(f"Created set '{slug}' ({set_id})")

    for sort_order, entry in enumerate(entries, start=1):
        await db.add_reference_entry(
            set_id=set_id,
            display_name=entry.display_name,
            normalized_name=normalize_name(entry.display_name),
            aliases=list(entry.aliases),
            jersey_number=entry.jersey_number,
            sort_order=sort_order,
        )

    logger.info(f"Inserted {len(entries)} entries into '{slug}'")
    return set_id, existing is None


async def seed_corinthians_2005(db: Database) -> tuple[int, bool]:
    return await seed_reference_set(
        db,
        slug=CORINTHIANS_2005_SLUG,
        title="Corinthians: Brasileirão 2005 (Campeão)",
        club_name="Corinthians",
        entries=CORINTHIANS_2005_PLAYERS,
        season=2005,
        competition="Campeonato Brasileiro",
        metadata={"coach": "Antônio Lopes", "source": "seed"},
    )


async def main():
    """Main entry point."""
    logging.basicConfig(
        level=getattr(logging, Config.LOG_LEVEL, logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    db = Database(Config.DATABASE_PATH)
    await db.connect()
    logger.info(f"Connected to database: {Config.DATABASE_PATH}")

    try:
        await seed_corinthians_2005(db)
    finally:
        await db.close()


if __name__ == "__main__":
    asyncio.run(main())
