"""Service for the player-of-the-day game ("Jogador do Dia").

Every (UTC day, team) pair has one target player, chosen deterministically
from the team's squad. Each user gets a bounded number of wrong guesses per
day; the photo unblurs a little after each miss.
"""

import asyncio
import logging
import weakref
from typing import Optional

from config import Config
from db.database import Database
from games.errors import NoCandidates, NoDailyTarget
from games.services.daily_rules import (
    attempts_left,
    blur_percent,
    evaluate_guess,
    is_lost,
    miss_feedback,
)
from games.services.daily_selector import daily_seed, select_daily
from models import (
    DailyGuessLogEntry,
    DailyGuessResponse,
    DailyPlayerCard,
    DailyProgress,
    DailyProgressView,
    DailyTarget,
    PlayerOfTheDay,
    PlayerSearchResult,
    SquadPlayer,
)
from utils.dates import Clock, parse_date_key, today_date_key, utc_now

logger = logging.getLogger(__name__)


class DailyPlayerService:
    """Service for the daily guess-the-player game."""

    def __init__(self, db: Database, clock: Clock = utc_now):
        self.db = db
        self.clock = clock
        self._progress_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = (
            weakref.WeakValueDictionary()
        )

    def _lock_for(self, user_id: str, date_key: str) -> asyncio.Lock:
        key = f"{user_id}:{date_key}"
        lock = self._progress_locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._progress_locks[key] = lock
        return lock

    async def get_or_create_daily_target(self, date_key: str, scope_key: str) -> DailyTarget:
        """Get the target for a day, choosing and storing it on first access.

        Raises NoCandidates if the scope has nobody to choose from.
        """
        parse_date_key(date_key)

        existing = await self.db.get_daily_target(date_key, scope_key)
        if existing:
            return existing

        pool = await self.db.get_daily_candidate_pool(scope_key)
        index = select_daily(date_key, scope_key, pool)
        seed = daily_seed(date_key, scope_key)
        chosen = pool[index]

        if await self.db.insert_daily_target(date_key, scope_key, chosen.id, seed):
            logger.info(f"Player of the day for {scope_key} on {date_key}: {chosen.id} (index {index} of {len(pool)})")
        else:
            logger.info(f"Daily target for {scope_key} on {date_key} created concurrently, re-reading")

        return await self.db.get_daily_target(date_key, scope_key)

    async def get_or_create_progress(self, user_id: str, date_key: str, target_id: int) -> DailyProgress:
        """Get a user's progress for a day, creating it on first access.

        `target_id` is only used when the progress is created; the user stays
        on that target for the rest of the day.
        """
        existing = await self.db.get_daily_progress(user_id, date_key)
        if existing:
            return existing

        if not await self.db.insert_daily_progress(user_id, date_key, target_id):
            logger.info(f"Progress for user {user_id} on {date_key} created concurrently, re-reading")
        return await self.db.get_daily_progress(user_id, date_key)

    async def _load_game(
        self, user_id: str, scope_key: str
    ) -> tuple[str, DailyProgress, SquadPlayer]:
        """Resolve today's progress and the player it is played against."""
        date_key = today_date_key(self.clock)
        try:
            target = await self.get_or_create_daily_target(date_key, scope_key)
        except NoCandidates as e:
            raise NoDailyTarget(scope_key) from e

        progress = await self.get_or_create_progress(user_id, date_key, target.id)
        if progress.target_id != target.id:
            target = await self.db.get_daily_target_by_id(progress.target_id)

        player = await self.db.get_squad_player(target.player_id)
        if not player:
            logger.warning(f"Daily target {target.id} points at missing player {target.player_id}")
            raise NoDailyTarget(scope_key)
        return date_key, progress, player

    async def get_player_of_the_day(self, user_id: str, scope_key: str) -> PlayerOfTheDay:
        """Get today's game state for a user.

        The player's name is only included once the game is over.
        Raises NoDailyTarget if the scope has no eligible players.
        """
        date_key, progress, player = await self._load_game(user_id, scope_key)
        status = progress.status
        finished = status != "playing"

        return PlayerOfTheDay(
            date_key=date_key,
            player=DailyPlayerCard(
                id=player.id,
                position=player.position,
                shirt_number=player.shirt_number,
                photo_url=player.photo_url,
                name=player.primary_name if finished else None,
            ),
            progress=DailyProgressView(
                attempts=progress.attempts,
                wrong_attempts=progress.wrong_attempts,
                guessed=progress.guessed,
                lost=progress.lost,
                guesses=progress.guesses,
                blur_percent=0 if finished else blur_percent(progress.wrong_attempts),
                attempts_left=0 if finished else attempts_left(progress.wrong_attempts),
            ),
            status=status,
        )

    async def guess(self, user_id: str, scope_key: str, text: str) -> DailyGuessResponse:
        """Submit a guess for today's player.

        Guesses after the game is over change nothing and repeat the final
        result, so clients can safely retry.
        Raises NoDailyTarget if the scope has no eligible players.
        """
        date_key, progress, player = await self._load_game(user_id, scope_key)

        async with self._lock_for(user_id, date_key):
            while True:
                progress = await self.db.get_daily_progress(user_id, date_key)
                if progress.status != "playing":
                    return self._final_response(progress, player)

                evaluation = evaluate_guess(text, player)
                entry = DailyGuessLogEntry(
                    text=text,
                    normalized=evaluation.normalized,
                    correct=evaluation.correct,
                )
                wrong_attempts = progress.wrong_attempts + (0 if evaluation.correct else 1)
                lost = not evaluation.correct and is_lost(wrong_attempts)

                updated = await self.db.update_daily_progress(
                    progress.id,
                    expected_attempts=progress.attempts,
                    attempts=progress.attempts + 1,
                    wrong_attempts=wrong_attempts,
                    guessed=evaluation.correct,
                    lost=lost,
                    guesses=[*progress.guesses, entry],
                    now=self.clock(),
                )
                if updated:
                    break
                logger.info(f"Progress {progress.id} changed during guess, retrying")

        if evaluation.correct:
            logger.info(
                f"User {user_id} found the player of the day for {scope_key} on {date_key} "
                f"after {progress.attempts + 1} attempt(s){' (close match)' if evaluation.close else ''}"
            )
            return DailyGuessResponse(
                correct=True,
                feedback="correct",
                status="won",
                wrong_attempts=wrong_attempts,
                blur_percent=0,
                attempts_left=0,
                reveal_name=player.primary_name,
            )

        if lost:
            logger.info(f"User {user_id} lost the player of the day for {scope_key} on {date_key}")

        return DailyGuessResponse(
            correct=False,
            feedback=miss_feedback(evaluation.normalized, player),
            status="lost" if lost else "playing",
            wrong_attempts=wrong_attempts,
            blur_percent=0 if lost else blur_percent(wrong_attempts),
            attempts_left=attempts_left(wrong_attempts),
            reveal_name=player.primary_name if lost else None,
        )

    def _final_response(self, progress: DailyProgress, player: SquadPlayer) -> DailyGuessResponse:
        won = progress.guessed
        return DailyGuessResponse(
            correct=won,
            feedback="correct" if won else "wrong",
            status=progress.status,
            wrong_attempts=progress.wrong_attempts,
            blur_percent=0,
            attempts_left=0,
            reveal_name=player.primary_name,
        )

    async def search_players(
        self, scope_key: str, query: str, limit: Optional[int] = None
    ) -> list[PlayerSearchResult]:
        """Autocomplete squad names for the guess box."""
        term = query.strip()
        if len(term) < Config.PLAYER_SEARCH_MIN_LENGTH:
            return []

        players = await self.db.search_squad_players(
            scope_key, term, limit if limit is not None else Config.PLAYER_SEARCH_LIMIT
        )
        return [
            PlayerSearchResult(
                id=player.id,
                name=player.primary_name,
                position=player.position,
                photo_url=player.photo_url,
            )
            for player in players
        ]
