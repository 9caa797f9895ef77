import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import aiosqlite

from models import (
    Attempt,
    AttemptGuess,
    DailyGuessLogEntry,
    DailyProgress,
    DailyTarget,
    ReferenceEntry,
    ReferenceSet,
    ReferenceSetSummary,
    SquadPlayer,
)

logger = logging.getLogger(__name__)


class Database:
    """Async SQLite database wrapper."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._connection: Optional[aiosqlite.Connection] = None

    async def connect(self) -> None:
        """Connect to the database and run migrations."""
        self._connection = await aiosqlite.connect(self.db_path)
        self._connection.row_factory = aiosqlite.Row
        await self._connection.execute("PRAGMA foreign_keys = ON")
        await self._run_migrations()

    async def close(self) -> None:
        """Close the database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    async def _run_migrations(self) -> None:
        """Run all SQL migration files."""
        # Create migrations tracking table
        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS _migrations (
                name TEXT PRIMARY KEY,
                applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)
        await self._connection.commit()

        migrations_dir = Path(__file__).parent / "migrations"

        for migration_file in sorted(migrations_dir.glob("*.sql")):
            # Check if migration already applied
            cursor = await self._connection.execute(
                "SELECT 1 FROM _migrations WHERE name = ?",
                (migration_file.name,)
            )
            if await cursor.fetchone():
                logger.debug(f"Skipping already applied migration: {migration_file.name}")
                continue

            logger.info(f"Running migration: {migration_file.name}")
            sql = migration_file.read_text()
            await self._connection.executescript(sql)
            await self._connection.execute(
                "INSERT INTO _migrations (name) VALUES (?)",
                (migration_file.name,)
            )
            await self._connection.commit()

    async def execute(
        self, query: str, params: tuple = ()
    ) -> aiosqlite.Cursor:
        """Execute a query and return the cursor."""
        cursor = await self._connection.execute(query, params)
        await self._connection.commit()
        return cursor

    async def fetch_one(
        self, query: str, params: tuple = ()
    ) -> Optional[aiosqlite.Row]:
        """Fetch a single row."""
        cursor = await self._connection.execute(query, params)
        return await cursor.fetchone()

    async def fetch_all(
        self, query: str, params: tuple = ()
    ) -> list[aiosqlite.Row]:
        """Fetch all rows."""
        cursor = await self._connection.execute(query, params)
        return await cursor.fetchall()

    async def fetch_value(
        self, query: str, params: tuple = ()
    ) -> Optional[Any]:
        """Fetch a single value from the first column of the first row."""
        row = await self.fetch_one(query, params)
        return row[0] if row else None

    # Reference set methods

    async def create_reference_set(
        self,
        slug: str,
        title: str,
        club_name: str,
        season: Optional[int] = None,
        competition: Optional[str] = None,
        metadata: Optional[dict[str, Any]] = None,
    ) -> int:
        """Create a reference set. Returns the set ID."""
        cursor = await self.execute(
            """
            INSERT INTO reference_sets (slug, title, season, competition, club_name, metadata)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                slug,
                title,
                season,
                competition,
                club_name,
                json.dumps(metadata) if metadata is not None else None,
            ),
        )
        return cursor.lastrowid

    async def get_reference_set(self, set_id: int) -> Optional[ReferenceSet]:
        row = await self.fetch_one("SELECT * FROM reference_sets WHERE id = ?", (set_id,))
        return ReferenceSet.model_validate(dict(row)) if row else None

    async def get_reference_set_by_slug(self, slug: str) -> Optional[ReferenceSet]:
        row = await self.fetch_one("SELECT * FROM reference_sets WHERE slug = ?", (slug,))
        return ReferenceSet.model_validate(dict(row)) if row else None

    async def list_reference_sets(self) -> list[ReferenceSetSummary]:
        """Get all reference sets with their entry counts, oldest first."""
        rows = await self.fetch_all(
            """
            SELECT s.*, COUNT(e.id) AS entry_count
            FROM reference_sets s
            LEFT JOIN reference_entries e ON e.set_id = s.id
            GROUP BY s.id
            ORDER BY s.created_at, s.id
            """
        )
        return [ReferenceSetSummary.model_validate(dict(row)) for row in rows]

    async def add_reference_entry(
        self,
        set_id: int,
        display_name: str,
        normalized_name: str,
        aliases: Optional[list[str]] = None,
        jersey_number: Optional[int] = None,
        sort_order: int = 0,
    ) -> int:
        """Attach a guessable entry to a set. Returns the entry ID."""
        cursor = await self.execute(
            """
            INSERT INTO reference_entries
            (set_id, jersey_number, display_name, normalized_name, aliases, sort_order)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                set_id,
                jersey_number,
                display_name,
                normalized_name,
                json.dumps(aliases) if aliases else None,
                sort_order,
            ),
        )
        return cursor.lastrowid

    async def get_reference_entries(self, set_id: int) -> list[ReferenceEntry]:
        """Get the entries of a set in their stable display order."""
        rows = await self.fetch_all(
            """
            SELECT * FROM reference_entries
            WHERE set_id = ?
            ORDER BY sort_order, id
            """,
            (set_id,),
        )
        return [ReferenceEntry.model_validate(dict(row)) for row in rows]

    async def delete_reference_entries(self, set_id: int) -> int:
        """Remove every entry of a set (and the guesses that point at them)."""
        await self.execute(
            """
            DELETE FROM attempt_guesses
            WHERE entry_id IN (SELECT id FROM reference_entries WHERE set_id = ?)
            """,
            (set_id,),
        )
        cursor = await self.execute(
            "DELETE FROM reference_entries WHERE set_id = ?",
            (set_id,),
        )
        return cursor.rowcount

    # Attempt methods

    async def create_attempt(self, user_id: str, set_id: int) -> Optional[int]:
        """Create an in-progress attempt.

        Returns the attempt ID, or None if the user already has an attempt
        for this set.
        """
        cursor = await self.execute(
            """
            INSERT INTO attempts (user_id, set_id, status)
            VALUES (?, ?, 'in_progress')
            ON CONFLICT(user_id, set_id) DO NOTHING
            """,
            (user_id, set_id),
        )
        if cursor.rowcount == 0:
            return None
        return cursor.lastrowid

    async def get_attempt(self, attempt_id: int, user_id: str) -> Optional[Attempt]:
        """Get an attempt, only if it belongs to the given user."""
        row = await self.fetch_one(
            "SELECT * FROM attempts WHERE id = ? AND user_id = ?",
            (attempt_id, user_id),
        )
        return Attempt.model_validate(dict(row)) if row else None

    async def get_attempt_for_set(self, user_id: str, set_id: int) -> Optional[Attempt]:
        row = await self.fetch_one(
            "SELECT * FROM attempts WHERE user_id = ? AND set_id = ?",
            (user_id, set_id),
        )
        return Attempt.model_validate(dict(row)) if row else None

    async def restart_attempt(self, attempt_id: int, now: datetime) -> None:
        """Put an attempt back to in_progress with no guesses recorded."""
        await self.execute(
            "DELETE FROM attempt_guesses WHERE attempt_id = ?",
            (attempt_id,),
        )
        await self.execute(
            """
            UPDATE attempts
            SET status = 'in_progress', wrong_guesses = 0, completed_at = NULL,
                started_at = ?, updated_at = ?
            WHERE id = ?
            """,
            (now.isoformat(), now.isoformat(), attempt_id),
        )

    async def complete_attempt(self, attempt_id: int, now: datetime) -> bool:
        """Mark an in-progress attempt completed. Returns False if it wasn't in progress."""
        cursor = await self.execute(
            """
            UPDATE attempts
            SET status = 'completed', completed_at = ?, updated_at = ?
            WHERE id = ? AND status = 'in_progress'
            """,
            (now.isoformat(), now.isoformat(), attempt_id),
        )
        return cursor.rowcount > 0

    async def abandon_attempt(self, attempt_id: int, now: datetime) -> bool:
        """Mark an in-progress attempt abandoned. Returns False if it wasn't in progress."""
        cursor = await self.execute(
            """
            UPDATE attempts
            SET status = 'abandoned', updated_at = ?
            WHERE id = ? AND status = 'in_progress'
            """,
            (now.isoformat(), attempt_id),
        )
        return cursor.rowcount > 0

    async def increment_wrong_guesses(self, attempt_id: int, now: datetime) -> None:
        await self.execute(
            """
            UPDATE attempts
            SET wrong_guesses = wrong_guesses + 1, updated_at = ?
            WHERE id = ? AND status = 'in_progress'
            """,
            (now.isoformat(), attempt_id),
        )

    # Attempt guess methods

    async def add_attempt_guess(
        self,
        attempt_id: int,
        entry_id: int,
        guessed_text: str,
        matched_score: float,
    ) -> bool:
        """Record a correct guess. Returns False if the entry was already solved."""
        cursor = await self.execute(
            """
            INSERT INTO attempt_guesses (attempt_id, entry_id, guessed_text, matched_score)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(attempt_id, entry_id) DO NOTHING
            """,
            (attempt_id, entry_id, guessed_text, matched_score),
        )
        return cursor.rowcount > 0

    async def get_attempt_guesses(self, attempt_id: int) -> list[AttemptGuess]:
        rows = await self.fetch_all(
            """
            SELECT * FROM attempt_guesses
            WHERE attempt_id = ?
            ORDER BY id
            """,
            (attempt_id,),
        )
        return [AttemptGuess.model_validate(dict(row)) for row in rows]

    async def get_solved_entry_ids(self, attempt_id: int) -> list[int]:
        """Get the distinct entries solved so far, in the order they were solved."""
        rows = await self.fetch_all(
            """
            SELECT entry_id FROM attempt_guesses
            WHERE attempt_id = ?
            ORDER BY id
            """,
            (attempt_id,),
        )
        return [row["entry_id"] for row in rows]

    async def count_solved_entries(self, attempt_id: int) -> int:
        result = await self.fetch_value(
            "SELECT COUNT(DISTINCT entry_id) FROM attempt_guesses WHERE attempt_id = ?",
            (attempt_id,),
        )
        return result or 0

    # Squad methods

    async def add_squad_player(
        self,
        team_id: str,
        name: str,
        position: str,
        known_name: Optional[str] = None,
        shirt_number: Optional[int] = None,
        photo_url: Optional[str] = None,
    ) -> int:
        """Add a current squad member. Returns the player ID."""
        cursor = await self.execute(
            """
            INSERT INTO squad_players (team_id, name, known_name, position, shirt_number, photo_url)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (team_id, name, known_name, position, shirt_number, photo_url),
        )
        return cursor.lastrowid

    async def get_squad_player(self, player_id: int) -> Optional[SquadPlayer]:
        row = await self.fetch_one("SELECT * FROM squad_players WHERE id = ?", (player_id,))
        return SquadPlayer.model_validate(dict(row)) if row else None

    async def get_daily_candidate_pool(self, team_id: str) -> list[SquadPlayer]:
        """Get the players eligible to be a team's player of the day.

        Players with a photo are preferred; if nobody has one, the whole
        squad is eligible. Ordered by ID so the pool is stable.
        """
        rows = await self.fetch_all(
            """
            SELECT * FROM squad_players
            WHERE team_id = ? AND photo_url IS NOT NULL
            ORDER BY id
            """,
            (team_id,),
        )
        if not rows:
            rows = await self.fetch_all(
                "SELECT * FROM squad_players WHERE team_id = ? ORDER BY id",
                (team_id,),
            )
        return [SquadPlayer.model_validate(dict(row)) for row in rows]

    async def search_squad_players(
        self, team_id: str, term: str, limit: int = 10
    ) -> list[SquadPlayer]:
        """Find squad members whose name or known name contains the term."""
        rows = await self.fetch_all(
            """
            SELECT * FROM squad_players
            WHERE team_id = ?
              AND (instr(lower(name), lower(?)) > 0
                   OR instr(lower(COALESCE(known_name, '')), lower(?)) > 0)
            ORDER BY name
            LIMIT ?
            """,
            (team_id, term, term, limit),
        )
        return [SquadPlayer.model_validate(dict(row)) for row in rows]

    # Daily target methods

    async def get_daily_target(self, date_key: str, scope_key: str) -> Optional[DailyTarget]:
        row = await self.fetch_one(
            "SELECT * FROM daily_targets WHERE date_key = ? AND scope_key = ?",
            (date_key, scope_key),
        )
        return DailyTarget.model_validate(dict(row)) if row else None

    async def get_daily_target_by_id(self, target_id: int) -> Optional[DailyTarget]:
        row = await self.fetch_one("SELECT * FROM daily_targets WHERE id = ?", (target_id,))
        return DailyTarget.model_validate(dict(row)) if row else None

    async def insert_daily_target(
        self, date_key: str, scope_key: str, player_id: int, seed_used: int
    ) -> bool:
        """Insert the target for a day. Returns False if one already exists."""
        cursor = await self.execute(
            """
            INSERT INTO daily_targets (date_key, scope_key, player_id, seed_used)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(date_key, scope_key) DO NOTHING
            """,
            (date_key, scope_key, player_id, seed_used),
        )
        return cursor.rowcount > 0

    # Daily progress methods

    async def get_daily_progress(self, user_id: str, date_key: str) -> Optional[DailyProgress]:
        row = await self.fetch_one(
            "SELECT * FROM daily_progress WHERE user_id = ? AND date_key = ?",
            (user_id, date_key),
        )
        return DailyProgress.model_validate(dict(row)) if row else None

    async def insert_daily_progress(self, user_id: str, date_key: str, target_id: int) -> bool:
        """Insert fresh progress for a day. Returns False if one already exists."""
        cursor = await self.execute(
            """
            INSERT INTO daily_progress (user_id, date_key, target_id)
            VALUES (?, ?, ?)
            ON CONFLICT(user_id, date_key) DO NOTHING
            """,
            (user_id, date_key, target_id),
        )
        return cursor.rowcount > 0

    async def update_daily_progress(
        self,
        progress_id: int,
        expected_attempts: int,
        attempts: int,
        wrong_attempts: int,
        guessed: bool,
        lost: bool,
        guesses: list[DailyGuessLogEntry],
        now: datetime,
    ) -> bool:
        """Write new progress, only if nobody else moved it since it was read.

        The row must still be non-terminal and at `expected_attempts`.
        Returns False if the update lost that race.
        """
        cursor = await self.execute(
            """
            UPDATE daily_progress
            SET attempts = ?, wrong_attempts = ?, guessed = ?, lost = ?,
                guesses = ?, updated_at = ?
            WHERE id = ? AND attempts = ? AND guessed = 0 AND lost = 0
            """,
            (
                attempts,
                wrong_attempts,
                guessed,
                lost,
                json.dumps([guess.model_dump() for guess in guesses]),
                now.isoformat(),
                progress_id,
                expected_attempts,
            ),
        )
        return cursor.rowcount > 0
